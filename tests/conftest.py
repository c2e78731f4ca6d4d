"""
Shared fixtures for the colibri test suite

Provides an in-memory HTTP client serving canned pages, so extraction can
be exercised end to end without network access.
"""

from typing import Dict, List, Tuple, Union

import pytest
from multidict import CIMultiDict
from yarl import URL

from colibri.core import base
from colibri.core.base import ExtractResult, HTTPClient
from colibri.core.orchestrator import Colibri
from colibri.parsers import Parsers


class PageNotFound(Exception):
    """Raised by FakeClient for URLs it has no page for"""


class FakeResponse(base.Response):
    """Response served by FakeClient"""

    def __init__(self, c: Colibri, url: URL, status_code: int, content_type: str, body: bytes):
        self._c = c
        self._url = url
        self._status_code = status_code
        self._header = CIMultiDict({"Content-Type": content_type})
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

    async def do(self, rules):
        return await self._c.do(rules)

    async def extract(self, rules) -> ExtractResult:
        return await self._c.extract(rules)


class FakeClient(HTTPClient):
    """HTTP client answering from a URL -> (Content-Type, body) table"""

    def __init__(self, pages: Dict[str, Tuple[str, Union[str, bytes]]]):
        super().__init__({})
        self.pages = pages
        self.requests: List[Tuple[str, CIMultiDict]] = []
        self.reset_calls = 0

    async def do(self, c, rules) -> FakeResponse:
        url = str(rules.url)
        self.requests.append((url, CIMultiDict(rules.header or {})))

        if url not in self.pages:
            raise PageNotFound(f"Not Found: {url}")

        content_type, body = self.pages[url]
        if isinstance(body, str):
            body = body.encode("utf-8")
        return FakeResponse(c, rules.url, 200, content_type, body)

    def reset(self) -> None:
        self.reset_calls += 1

    @property
    def requested_urls(self) -> List[str]:
        return [url for url, _ in self.requests]


HTML_PAGE = """<!doctype html>
<html>
  <head>
    <title>My test page</title>
  </head>
  <body>
    <div class="links">
      <a href="https://page.test/html/1" id="first">Link 1</a>
      <a href="/html/2">Link 2</a>
      <a href="3">Link 3</a>
    </div>
    <div class="note"><p>Note <b>bold</b></p></div>
  </body>
</html>"""

JSON_PAGE = """{
    "name": "Ruby Throat",
    "since": 2011,
    "active": true,
    "score": 9.5,
    "nothing": null,
    "contact": {
        "web": "https://page.test/bird"
    },
    "hobbies": [
        "coding",
        "backend"
    ]
}"""

TEXT_PAGE = """Fly is fun.
Visit https://page.test/dl and https://page.test/doc for more.
Fly Fly"""

XML_PAGE = """<?xml version="1.0" encoding="UTF-8" ?>
<rss version="2.0">
  <channel>
    <title>Test RSS</title>
    <link>https://page.test/rss</link>
    <category>testing</category>
    <category>example</category>
    <item>
      <title>Item 2</title>
      <link>https://page.test/rss/item2</link>
    </item>
    <item>
      <title>Item 1</title>
      <link>https://page.test/rss/item1</link>
    </item>
  </channel>
</rss>"""


def html_title_page(title: str) -> Tuple[str, str]:
    return "text/html; charset=utf-8", f"<html><head><title>{title}</title></head><body></body></html>"


@pytest.fixture
def pages() -> Dict[str, Tuple[str, Union[str, bytes]]]:
    """Canned pages served by the fake client"""
    return {
        "https://page.test/html": ("text/html; charset=utf-8", HTML_PAGE),
        "https://page.test/html/1": html_title_page("Page 1"),
        "https://page.test/html/2": html_title_page("Page 2"),
        "https://page.test/3": html_title_page("Page 3"),
        "https://page.test/json": ("application/json", JSON_PAGE),
        "https://page.test/bird": ("application/json", '{"URL": "https://page.test/bird"}'),
        "https://page.test/text": ("text/plain; charset=utf-8", TEXT_PAGE),
        "https://page.test/dl": ("text/plain", "URL: https://page.test/dl"),
        "https://page.test/doc": ("text/plain", "URL: https://page.test/doc"),
        "https://page.test/rss": ("application/rss+xml", XML_PAGE),
        "https://page.test/rss/item1": ("application/xml", "<item><title>Item 1 page</title></item>"),
        "https://page.test/rss/item2": ("application/xml", "<item><title>Item 2 page</title></item>"),
        "https://ex.test/p": ("text/html", '<html><body><a href="/a">A</a><a href="/b">B</a></body></html>'),
        "https://ex.test/a": html_title_page("A"),
        "https://ex.test/b": html_title_page("B"),
        "https://ex.test/cdn": ("text/html", '<html><body><a href="//other.test/x">X</a></body></html>'),
        "https://other.test/x": html_title_page("X"),
        "https://example.test/": (
            "text/html",
            "<html><head><title>Example Domain</title></head><body><h1>Example</h1></body></html>"
        ),
    }


@pytest.fixture
def fake_client(pages) -> FakeClient:
    """In-memory HTTP client"""
    return FakeClient(pages)


@pytest.fixture
def colibri(fake_client) -> Colibri:
    """Colibri wired with the fake client and the default parsers"""
    return Colibri(client=fake_client, parser=Parsers.default())
