"""
robots.txt gate for Colibri

Fetches and caches the robots.txt document of every origin and checks
requests against it for the request's User-Agent.
"""

import threading
from typing import Any, Dict, Optional, TYPE_CHECKING
from urllib.robotparser import RobotFileParser

from yarl import URL

from colibri.core.base import RobotsDeniedError, RobotsTxt
from colibri.core.logging import get_logger
from colibri.core.rules import Rules, Selector, release_rules

if TYPE_CHECKING:
    from colibri.core.orchestrator import Colibri

ROBOTS_TXT_PATH = "/robots.txt"


class RobotsData(RobotsTxt):
    """
    Per-origin robots.txt cache

    A 2xx answer is parsed, a 4xx answer allows everything and a 5xx
    answer disallows everything.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.logger = get_logger()
        self._lock = threading.Lock()
        self._data: Dict[str, RobotFileParser] = {}

    async def is_allowed(self, c: "Colibri", rules: Rules) -> None:
        """
        Check the request against the robots.txt of its origin

        Args:
            c: Orchestrator used to fetch missing robots.txt documents
            rules: Request to check

        Raises:
            RobotsDeniedError: If the robots.txt forbids the request
        """
        url = rules.url
        if url.path == ROBOTS_TXT_PATH:
            return

        origin = str(url.origin())
        with self._lock:
            robots = self._data.get(origin)

        if robots is None:
            robots = await self._fetch(c, rules)
            with self._lock:
                self._data[origin] = robots

        user_agent = rules.header.get("User-Agent", "") if rules.header is not None else ""
        if not robots.can_fetch(user_agent, str(url)):
            self.logger.warning(f"robots.txt disallows {url} for {user_agent!r}")
            raise RobotsDeniedError()

    async def _fetch(self, c: "Colibri", rules: Rules) -> RobotFileParser:
        robots_url = rules.url.join(URL(ROBOTS_TXT_PATH))

        robots_rules = Selector().rules(rules)
        robots_rules.method = "GET"
        robots_rules.url = robots_url
        robots_rules.ignore_robots_txt = True
        try:
            resp = await c.do(robots_rules)
        finally:
            release_rules(robots_rules)

        robots = RobotFileParser(str(robots_url))
        status = resp.status_code
        if 200 <= status < 300:
            robots.parse((resp.body or b"").decode("utf-8", errors="replace").splitlines())
        elif 500 <= status < 600:
            robots.disallow_all = True
        else:
            robots.allow_all = True

        self.logger.debug(f"Fetched {robots_url} ({status})")
        return robots

    def reset(self) -> None:
        """Forget all cached robots.txt documents"""
        with self._lock:
            self._data.clear()
