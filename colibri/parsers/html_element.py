"""
HTML documents for Colibri

Parses HTML with lxml and answers XPath and CSS selector queries.
"""

from typing import Any, List, Optional

import lxml.html

from colibri.core.base import Element, Response
from colibri.parsers.content import decode_body
from colibri.parsers.expr import (
    CSS_SELECTOR,
    XPATH_EXPR,
    NodeScope,
    check_expr_type,
    compile_css,
    compile_xpath,
    select,
    string_value,
)


class HTMLElement(Element):
    """HTML node queried with XPath (default) or CSS selectors"""

    def __init__(self, node: Any, root: bool = False):
        self.scope = NodeScope(node, root)

    def find(self, expr: str, expr_type: str) -> Optional["HTMLElement"]:
        children = self.find_all(expr, expr_type)
        return children[0] if children else None

    def find_all(self, expr: str, expr_type: str) -> List["HTMLElement"]:
        if check_expr_type(expr_type, XPATH_EXPR, CSS_SELECTOR) == CSS_SELECTOR:
            compiled = compile_css(expr)
        else:
            compiled = compile_xpath(expr)

        context = self.scope.context
        if context is None:
            return []
        return [HTMLElement(node) for node in select(context, compiled)]

    def value(self) -> str:
        return string_value(self.scope.node)


def parse_html(resp: Response) -> HTMLElement:
    """Parse the response body into the root HTML element"""
    document = lxml.html.document_fromstring(decode_body(resp, is_html=True))
    return HTMLElement(document, root=True)
