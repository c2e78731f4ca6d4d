"""
Content parsers for Colibri

Decode HTML, XML, JSON and plain text responses into queryable elements
and dispatch them by Content-Type.
"""

from colibri.parsers.expr import (
    XPATH_EXPR,
    CSS_SELECTOR,
    REGULAR_EXPR
)

from colibri.parsers.html_element import HTMLElement, parse_html
from colibri.parsers.xml_element import XMLElement, parse_xml
from colibri.parsers.json_element import JSONElement, parse_json
from colibri.parsers.text_element import TextElement, parse_text

from colibri.parsers.registry import (
    Parsers,
    ParserFunc,
    HTML_REGEXP,
    JSON_REGEXP,
    TEXT_REGEXP,
    XML_REGEXP
)

__all__ = [
    'XPATH_EXPR',
    'CSS_SELECTOR',
    'REGULAR_EXPR',
    'HTMLElement',
    'XMLElement',
    'JSONElement',
    'TextElement',
    'parse_html',
    'parse_xml',
    'parse_json',
    'parse_text',
    'Parsers',
    'ParserFunc',
    'HTML_REGEXP',
    'JSON_REGEXP',
    'TEXT_REGEXP',
    'XML_REGEXP'
]
