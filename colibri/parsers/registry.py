"""
Content Parser Registry for Colibri

Maps Content-Type regular expressions to the functions that decode a
response into its root element, and runs the extraction engine on the
decoded document.
"""

import re
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from colibri.core.base import Element, NotMatchError, Parser, Response
from colibri.core.engine import ExtractionEngine
from colibri.core.errs import Errs
from colibri.core.logging import get_logger
from colibri.core.rules import Rules
from colibri.parsers.html_element import parse_html
from colibri.parsers.json_element import parse_json
from colibri.parsers.text_element import parse_text
from colibri.parsers.xml_element import parse_xml

HTML_REGEXP = r"^text/html"
JSON_REGEXP = r"^application/(json|x-json|([a-z]+\+json))"
TEXT_REGEXP = r"^text/plain"
XML_REGEXP = r"(?i)((application|image|message|model)/((\w|\.|-)+\+?)?|text/)(wb)?xml"

ParserFunc = Callable[[Response], Element]


class Parsers(Parser):
    """
    Registry of content parsers keyed by Content-Type regular expression

    When several expressions match a Content-Type, the one registered first
    wins. Lookups and registrations are guarded by a lock.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.logger = get_logger()
        self.engine = ExtractionEngine()
        self._lock = threading.Lock()
        self._funcs: Dict[str, Tuple[re.Pattern, ParserFunc]] = {}

    @classmethod
    def default(cls, config: Optional[Dict[str, Any]] = None) -> "Parsers":
        """Registry with the HTML, JSON, plain text and XML parsers"""
        parsers = cls(config)
        parsers.set(HTML_REGEXP, parse_html)
        parsers.set(JSON_REGEXP, parse_json)
        parsers.set(TEXT_REGEXP, parse_text)
        parsers.set(XML_REGEXP, parse_xml)
        return parsers

    def set(self, expr: str, parser_func: Optional[ParserFunc]) -> None:
        """
        Register parser_func for Content-Types matching expr

        Args:
            expr: Regular expression searched in the Content-Type header
            parser_func: Decodes a response into its root element

        Raises:
            re.error: If expr is not a valid regular expression
        """
        if not expr or parser_func is None:
            return

        compiled = re.compile(expr)
        with self._lock:
            self._funcs[expr] = (compiled, parser_func)

    def match(self, content_type: str) -> bool:
        return self._lookup(content_type) is not None

    def _lookup(self, content_type: str) -> Optional[ParserFunc]:
        with self._lock:
            for compiled, parser_func in self._funcs.values():
                if compiled.search(content_type):
                    return parser_func
        return None

    async def parse(self, rules: Optional[Rules],
                    resp: Optional[Response]) -> Tuple[Optional[Dict[str, Any]], Optional[Errs]]:
        """
        Decode the response and extract the rules' selectors from it

        Returns:
            Tuple of the extraction output and the aggregate of the
            selectors that failed

        Raises:
            NotMatchError: If no parser accepts the response Content-Type
        """
        if rules is None or resp is None:
            return None, None

        content_type = resp.header.get("Content-Type", "")
        parser_func = self._lookup(content_type)
        if parser_func is None:
            raise NotMatchError()

        root = parser_func(resp)
        return await self.engine.find_selectors(rules, resp, rules.selectors, root)

    def reset(self) -> None:
        """Remove every registered parser"""
        with self._lock:
            self._funcs.clear()

    def expressions(self) -> List[str]:
        """Registered Content-Type expressions, in lookup order"""
        with self._lock:
            return list(self._funcs)
