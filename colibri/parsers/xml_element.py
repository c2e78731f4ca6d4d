"""
XML documents for Colibri

Parses XML (RSS, Atom, XHTML, ...) with lxml and answers XPath queries.
"""

from typing import Any, List, Optional

from lxml import etree

from colibri.core.base import Element, Response
from colibri.parsers.expr import XPATH_EXPR, NodeScope, check_expr_type, compile_xpath, select, string_value


class XMLElement(Element):
    """XML node queried with XPath"""

    def __init__(self, node: Any, root: bool = False):
        self.scope = NodeScope(node, root)

    def find(self, expr: str, expr_type: str) -> Optional["XMLElement"]:
        children = self.find_all(expr, expr_type)
        return children[0] if children else None

    def find_all(self, expr: str, expr_type: str) -> List["XMLElement"]:
        check_expr_type(expr_type, XPATH_EXPR)
        compiled = compile_xpath(expr)

        context = self.scope.context
        if context is None:
            return []
        return [XMLElement(node) for node in select(context, compiled)]

    def value(self) -> str:
        return string_value(self.scope.node)


def parse_xml(resp: Response) -> XMLElement:
    """Parse the response body into the root XML element"""
    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=True)
    root = etree.fromstring(resp.body, parser)
    return XMLElement(root, root=True)
