"""
Expression compilation for Colibri parsers

Compiles XPath, CSS selector and regular expressions, caching the
compiled forms since the same selector tree is usually evaluated against
many elements.
"""

import copy
import re
from functools import lru_cache
from typing import Any, List

from cssselect import HTMLTranslator
from lxml import etree

from colibri.core.base import ExprTypeError, NodeSetError

XPATH_EXPR = "xpath"
CSS_SELECTOR = "css"
REGULAR_EXPR = "regular"

_css_translator = HTMLTranslator()


@lru_cache(maxsize=512)
def compile_xpath(expr: str) -> etree.XPath:
    return etree.XPath(expr)


@lru_cache(maxsize=512)
def compile_css(expr: str) -> etree.XPath:
    """Translate a CSS selector into a compiled XPath expression"""
    return etree.XPath(_css_translator.css_to_xpath(expr))


def compile_regular(expr: str) -> re.Pattern:
    return re.compile(expr)


def select(node: Any, compiled: etree.XPath) -> List[Any]:
    """
    Evaluate compiled against node

    Raises:
        NodeSetError: If the expression does not yield a node-set
    """
    result = compiled(node)
    if not isinstance(result, list):
        raise NodeSetError()
    return result


_string_value = etree.XPath("string()")


def string_value(node: Any) -> str:
    """XPath string-value of an lxml node or query result"""
    if isinstance(node, str):
        return str(node)
    return _string_value(node)


class NodeScope:
    """
    Query context of an lxml node

    Non-root nodes are deep copied into their own document on first use,
    so that absolute expressions such as //title only search the node's
    subtree. String results (attributes, text) are queried through their
    parent element.
    """

    def __init__(self, node: Any, root: bool = False):
        self.node = node
        self.root = root
        self._context = None

    @property
    def context(self) -> Any:
        if self.root:
            return self.node

        if self._context is None:
            node = self.node
            if isinstance(node, str):
                node = node.getparent() if hasattr(node, "getparent") else None
            if node is not None:
                self._context = copy.deepcopy(node)
        return self._context


def check_expr_type(expr_type: str, *supported: str) -> str:
    """
    Resolve the expression type of a selector for an element

    An empty type selects the first supported one.

    Raises:
        ExprTypeError: If expr_type is not supported
    """
    if not expr_type:
        return supported[0]
    if expr_type not in supported:
        raise ExprTypeError()
    return expr_type
