"""
Response body decoding for Colibri parsers
"""

import re
from typing import Optional

from bs4 import UnicodeDammit

from colibri.core.base import Response

_CHARSET_RE = re.compile(r"charset\s*=\s*[\"']?([\w.:-]+)", re.IGNORECASE)


def charset_of(content_type: str) -> Optional[str]:
    """Extract the charset parameter of a Content-Type value"""
    match = _CHARSET_RE.search(content_type or "")
    return match.group(1) if match else None


def decode_body(resp: Response, is_html: bool = False) -> str:
    """
    Decode the response body to text

    The charset of the Content-Type header is tried first, then the
    encoding is detected from the document itself.
    """
    body = resp.body or b""
    charset = charset_of(resp.header.get("Content-Type", ""))

    dammit = UnicodeDammit(body, known_definite_encodings=[charset] if charset else [], is_html=is_html)
    if dammit.unicode_markup is None:
        return body.decode("utf-8", errors="replace")
    return dammit.unicode_markup
