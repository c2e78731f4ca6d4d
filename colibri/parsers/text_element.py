"""
Plain text documents for Colibri

Text is queried with regular expressions, the value of a match is the
whole matched text.
"""

from typing import List, Optional

from colibri.core.base import Element, Response
from colibri.parsers.content import decode_body
from colibri.parsers.expr import REGULAR_EXPR, check_expr_type, compile_regular


class TextElement(Element):
    """Piece of text queried with regular expressions"""

    def __init__(self, text: str):
        self.text = text

    def find(self, expr: str, expr_type: str) -> Optional["TextElement"]:
        check_expr_type(expr_type, REGULAR_EXPR)
        match = compile_regular(expr).search(self.text)
        if match is None:
            return None
        return TextElement(match.group(0))

    def find_all(self, expr: str, expr_type: str) -> List["TextElement"]:
        check_expr_type(expr_type, REGULAR_EXPR)
        return [TextElement(match.group(0)) for match in compile_regular(expr).finditer(self.text)]

    def value(self) -> str:
        return self.text


def parse_text(resp: Response) -> TextElement:
    """Decode the response body into the root text element"""
    return TextElement(decode_body(resp))
