"""
Web extractor for Colibri

Concrete collaborators (aiohttp client, robots.txt gate, per-host pacing)
and a factory wiring them with the content parsers into a Colibri.
"""

from dataclasses import asdict
from typing import Any, Dict, Optional

from aiohttp.abc import AbstractCookieJar

from colibri.core.config import ClientConfig, ColibriConfig
from colibri.core.orchestrator import Colibri
from colibri.parsers import Parsers
from colibri.webextractor.client import Client, DEFAULT_TIMEOUT
from colibri.webextractor.delay import ReqDelay
from colibri.webextractor.response import Response
from colibri.webextractor.robots import RobotsData, ROBOTS_TXT_PATH


def new(config: Optional[Dict[str, Any]] = None, cookie_jar: Optional[AbstractCookieJar] = None) -> Colibri:
    """
    Create a Colibri wired with the web collaborators

    Args:
        config: Configuration dictionary as returned by ConfigManager.load_config()
        cookie_jar: Cookie jar shared by requests with cookies enabled

    Returns:
        Configured Colibri instance
    """
    config = config or {}
    client_config = ClientConfig.from_dict(config.get('client'))
    colibri_config = ColibriConfig.from_dict(config.get('colibri'))

    return Colibri(
        client=Client(asdict(client_config), cookie_jar),
        delay=ReqDelay() if colibri_config.use_delay else None,
        robots_txt=RobotsData() if colibri_config.respect_robots_txt else None,
        parser=Parsers.default(),
        user_agent=client_config.user_agent
    )


__all__ = [
    'new',
    'Client',
    'DEFAULT_TIMEOUT',
    'ReqDelay',
    'Response',
    'RobotsData',
    'ROBOTS_TXT_PATH'
]
