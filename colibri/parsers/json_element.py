"""
JSON documents for Colibri

A JSON document is turned into an lxml tree so that it can be queried
with XPath: object members become child elements named after their key,
array items become "item" children and every element records its JSON
type in a "type" attribute. Keys that are not valid element names are
stored as "key" elements carrying the original key in a "key" attribute.

Element values are rebuilt as native Python values.
"""

import json
import re
from typing import Any, List, Optional

from lxml import etree

from colibri.core.base import Element, Response
from colibri.parsers.content import decode_body
from colibri.parsers.expr import XPATH_EXPR, NodeScope, check_expr_type, compile_xpath, select

ROOT_TAG = "root"
ITEM_TAG = "item"
KEY_TAG = "key"

_NAME_RE = re.compile(r"^[^\W\d][\w.-]*$")


def _element_name(key: str) -> Optional[str]:
    if _NAME_RE.match(key) and not key.lower().startswith("xml"):
        return key
    return None


def build_tree(key: str, value: Any, parent: Optional[etree._Element] = None) -> etree._Element:
    """Build the element for value, appended to parent when given"""
    name = _element_name(key) or KEY_TAG
    node = etree.Element(name) if parent is None else etree.SubElement(parent, name)
    if name != key:
        node.set("key", key)

    if isinstance(value, dict):
        node.set("type", "object")
        for child_key, child_value in value.items():
            build_tree(str(child_key), child_value, node)
    elif isinstance(value, list):
        node.set("type", "array")
        for item in value:
            build_tree(ITEM_TAG, item, node)
    elif isinstance(value, str):
        node.set("type", "string")
        node.text = value
    elif isinstance(value, bool):
        node.set("type", "boolean")
        node.text = json.dumps(value)
    elif value is None:
        node.set("type", "null")
    else:
        node.set("type", "number")
        node.text = json.dumps(value)

    return node


def to_native(node: etree._Element) -> Any:
    """Rebuild the JSON value an element was built from"""
    kind = node.get("type")
    if kind == "object":
        return {child.get("key", child.tag): to_native(child) for child in node}
    if kind == "array":
        return [to_native(child) for child in node]
    if kind == "string":
        return node.text or ""
    if kind == "null" or not node.text:
        return None
    return json.loads(node.text)


class JSONElement(Element):
    """JSON node queried with XPath"""

    def __init__(self, node: Any, root: bool = False):
        self.scope = NodeScope(node, root)

    def find(self, expr: str, expr_type: str) -> Optional["JSONElement"]:
        children = self.find_all(expr, expr_type)
        return children[0] if children else None

    def find_all(self, expr: str, expr_type: str) -> List["JSONElement"]:
        check_expr_type(expr_type, XPATH_EXPR)
        compiled = compile_xpath(expr)

        context = self.scope.context
        if context is None:
            return []
        return [JSONElement(node) for node in select(context, compiled)]

    def value(self) -> Any:
        node = self.scope.node
        if isinstance(node, str):
            return str(node)
        return to_native(node)


def parse_json(resp: Response) -> JSONElement:
    """Parse the response body into the root JSON element"""
    data = json.loads(decode_body(resp))
    return JSONElement(build_tree(ROOT_TAG, data), root=True)
