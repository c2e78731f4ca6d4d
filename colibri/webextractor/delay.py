"""
Request pacing for Colibri

Serializes requests to the same host and spaces them by the delay the
rules ask for, measured from the previous response of that host.
"""

import asyncio
import threading
import time
from typing import Any, Dict, Optional

from yarl import URL

from colibri.core.base import Delay


class ReqDelay(Delay):
    """
    Per-host pacing

    wait() takes the host's token and sleeps until the delay since the
    last stamp has elapsed, done() hands the token back.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self._lock = threading.Lock()
        self._tokens: Dict[str, asyncio.Lock] = {}
        self._stamps: Dict[str, float] = {}

    @staticmethod
    def _key(url: Optional[URL]) -> str:
        return (url.host or "") if url is not None else ""

    async def wait(self, url: URL, duration: float) -> None:
        key = self._key(url)
        with self._lock:
            token = self._tokens.setdefault(key, asyncio.Lock())

        await token.acquire()
        try:
            with self._lock:
                last = self._stamps.get(key)
            if last is not None:
                remaining = last + duration - time.monotonic()
                if remaining > 0:
                    await asyncio.sleep(remaining)
        except BaseException:
            token.release()
            raise

    def done(self, url: URL) -> None:
        with self._lock:
            token = self._tokens.get(self._key(url))
        if token is not None and token.locked():
            token.release()

    def stamp(self, url: URL) -> None:
        with self._lock:
            self._stamps[self._key(url)] = time.monotonic()

    def reset(self) -> None:
        with self._lock:
            self._tokens.clear()
            self._stamps.clear()
