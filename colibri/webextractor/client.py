"""
HTTP Client for Colibri

aiohttp based transport. Every request runs in its own session, cookies
are shared through a single jar when the rules ask for them.
"""

from typing import Any, Dict, Optional, TYPE_CHECKING

import aiohttp
from aiohttp.abc import AbstractCookieJar
from multidict import CIMultiDict

from colibri.core.base import HTTPClient
from colibri.core.logging import get_logger
from colibri.core.rules import Rules
from colibri.webextractor.response import Response

if TYPE_CHECKING:
    from colibri.core.orchestrator import Colibri

DEFAULT_TIMEOUT = 5.0


class Client(HTTPClient):
    """
    aiohttp transport

    Config keys:
        timeout: Seconds used when the rules set no timeout (default 5)

    Args:
        config: Client configuration
        cookie_jar: Jar shared by requests with cookies enabled, created
                    on first use when omitted
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 cookie_jar: Optional[AbstractCookieJar] = None):
        super().__init__(config)
        self.logger = get_logger()
        self.jar = cookie_jar
        self.default_timeout = float(self.config.get('timeout', DEFAULT_TIMEOUT))

    def _cookie_jar(self, use_cookies: bool) -> AbstractCookieJar:
        if not use_cookies:
            return aiohttp.DummyCookieJar()
        if self.jar is None:
            self.jar = aiohttp.CookieJar()
        return self.jar

    async def do(self, c: "Colibri", rules: Rules) -> Response:
        """
        Send the request described by rules and read the whole body

        Args:
            c: Orchestrator the response re-enters for follow-up requests
            rules: Request configuration

        Returns:
            The fetched response
        """
        timeout = aiohttp.ClientTimeout(total=rules.timeout if rules.timeout > 0 else self.default_timeout)
        proxy = str(rules.proxy) if rules.proxy is not None else None

        async with aiohttp.ClientSession(cookie_jar=self._cookie_jar(rules.use_cookies), timeout=timeout) as session:
            async with session.request(rules.method or "GET", rules.url, headers=rules.header, proxy=proxy) as r:
                body = await r.read()
                self.logger.debug(f"{r.status} {r.url} ({len(body)} bytes)")
                return Response(c, r.url, r.status, CIMultiDict(r.headers), body)

    def reset(self) -> None:
        """Drop the cookie jar"""
        self.jar = None

    async def cleanup(self) -> None:
        self.jar = None
        await super().cleanup()
