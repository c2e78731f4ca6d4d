"""
HTTP Response for Colibri

Holds a fully read HTTP response and re-enters the orchestrator that
produced it, so that extraction can follow links found in it.
"""

from typing import TYPE_CHECKING

from multidict import CIMultiDict
from yarl import URL

from colibri.core import base
from colibri.core.base import ExtractResult
from colibri.core.rules import Rules

if TYPE_CHECKING:
    from colibri.core.orchestrator import Colibri


class Response(base.Response):
    """
    Fetched HTTP response

    Args:
        c: Orchestrator used for follow-up requests
        url: Final URL, after redirects
        status_code: HTTP status code
        header: Response headers
        body: Response body
    """

    def __init__(self, c: "Colibri", url: URL, status_code: int, header: CIMultiDict, body: bytes):
        self._colibri = c
        self._url = url
        self._status_code = status_code
        self._header = header
        self._body = body

    @property
    def url(self) -> URL:
        return self._url

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def header(self) -> CIMultiDict:
        return self._header

    @property
    def body(self) -> bytes:
        return self._body

    async def do(self, rules: Rules) -> base.Response:
        return await self._colibri.do(rules)

    async def extract(self, rules: Rules) -> ExtractResult:
        return await self._colibri.extract(rules)

    def __repr__(self) -> str:
        return f"<Response [{self._status_code}] {self._url}>"
