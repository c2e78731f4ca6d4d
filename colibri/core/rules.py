"""
Rules and Selectors for Colibri

A Rules instance is one resolved request configuration, a Selector is one
named extraction node. Both are built from raw semi-structured input,
deep-cloned when they cross a follow boundary and handed back to their
pool once the scope that created them is done with them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from multidict import CIMultiDict
from yarl import URL

from colibri.core.base import InvalidSelectorError, InvalidSelectorsError
from colibri.core.convert import (
    ConvFunc,
    Schema,
    KEY_ALL,
    KEY_DELAY,
    KEY_EXPR,
    KEY_FOLLOW,
    KEY_HEADER,
    KEY_IGNORE_ROBOTS_TXT,
    KEY_METHOD,
    KEY_NAME,
    KEY_PROXY,
    KEY_SELECTORS,
    KEY_TIMEOUT,
    KEY_TYPE,
    KEY_URL,
    KEY_USE_COOKIES,
    apply_raw,
    clone_value,
    default_conv_func,
    to_header,
)
from colibri.core.errs import Errs, add_error
from colibri.core.pool import ObjectPool

RULES_SCHEMA: Schema = {
    KEY_METHOD: ("method", (str,)),
    KEY_URL: ("url", (URL,)),
    KEY_PROXY: ("proxy", (URL,)),
    KEY_HEADER: ("header", (CIMultiDict,)),
    KEY_TIMEOUT: ("timeout", (int, float)),
    KEY_USE_COOKIES: ("use_cookies", (bool,)),
    KEY_IGNORE_ROBOTS_TXT: ("ignore_robots_txt", (bool,)),
    KEY_DELAY: ("delay", (int, float)),
    KEY_SELECTORS: ("selectors", (list,)),
}

SELECTOR_SCHEMA: Schema = {
    KEY_EXPR: ("expr", (str,)),
    KEY_TYPE: ("type", (str,)),
    KEY_ALL: ("all", (bool,)),
    KEY_FOLLOW: ("follow", (bool,)),
    KEY_SELECTORS: ("selectors", (list,)),
}


@dataclass
class Selector:
    """
    Named extraction node

    Attributes:
        name: Output key, unique among siblings
        expr: Match expression
        type: Expression type (xpath, css, regular), empty for the format default
        all: Match every child instead of the first one
        follow: Treat the matched value as a URL to fetch and extract
        selectors: Nested selectors
        fields: Per-branch request overrides and unrecognized keys
    """
    name: str = ""
    expr: str = ""
    type: str = ""
    all: bool = False
    follow: bool = False
    selectors: List["Selector"] = field(default_factory=list)
    fields: Dict[str, Any] = field(default_factory=dict)

    def rules(self, src: "Rules") -> "Rules":
        """
        Resolve the Rules used when following this selector

        Method, proxy, header, timeout, cookie use, robots.txt and delay are
        taken from the field bag when present there, otherwise inherited from
        src. The result shares no mutable state with src or the selector.

        Args:
            src: Rules active at the point of following

        Returns:
            New Rules carrying a deep copy of the nested selectors
        """
        new_rules = rules_pool.acquire()
        new_rules.method = self._override(KEY_METHOD, (str,), src.method)
        new_rules.proxy = self._override(KEY_PROXY, (URL,), src.proxy)
        new_rules.timeout = self._override(KEY_TIMEOUT, (int, float), src.timeout)
        new_rules.use_cookies = self._override(KEY_USE_COOKIES, (bool,), src.use_cookies)
        new_rules.ignore_robots_txt = self._override(KEY_IGNORE_ROBOTS_TXT, (bool,), src.ignore_robots_txt)
        new_rules.delay = self._override(KEY_DELAY, (int, float), src.delay)

        header = self.fields.get(KEY_HEADER)
        if isinstance(header, Mapping):
            new_rules.header = to_header(header)
        elif src.header is not None:
            new_rules.header = CIMultiDict(src.header)

        new_rules.selectors = clone_selectors(self.selectors)
        return new_rules

    def _override(self, key: str, types: Tuple[Type[Any], ...], inherited: Any) -> Any:
        value = self.fields.get(key)
        if value is None or not isinstance(value, types):
            return inherited
        if isinstance(value, bool) and bool not in types:
            return inherited
        return value

    def clone(self) -> "Selector":
        """Return a fully independent deep copy"""
        new_selector = selector_pool.acquire()
        new_selector.name = self.name
        new_selector.expr = self.expr
        new_selector.type = self.type
        new_selector.all = self.all
        new_selector.follow = self.follow
        new_selector.selectors = clone_selectors(self.selectors)
        new_selector.fields.update({k: clone_value(v) for k, v in self.fields.items()})
        return new_selector

    def clear(self) -> None:
        """Zero every field and release the nested selectors"""
        self.name = ""
        self.expr = ""
        self.type = ""
        self.all = False
        self.follow = False

        for selector in self.selectors:
            release_selector(selector)
        self.selectors = []

        self.fields.clear()


@dataclass
class Rules:
    """
    Resolved configuration of one request

    Attributes:
        method: HTTP method, empty means GET
        url: Target URL
        proxy: Proxy URL
        header: Request headers
        timeout: Request timeout in seconds, 0 means the client default
        use_cookies: Send and store cookies
        ignore_robots_txt: Skip the robots.txt gate
        delay: Minimum seconds between requests to the same host
        selectors: Selectors extracted from the response
        fields: Unrecognized configuration keys
    """
    method: str = ""
    url: Optional[URL] = None
    proxy: Optional[URL] = None
    header: Optional[CIMultiDict] = None
    timeout: float = 0.0
    use_cookies: bool = False
    ignore_robots_txt: bool = False
    delay: float = 0.0
    selectors: List[Selector] = field(default_factory=list)
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Optional[Mapping[str, Any]], conv_func: ConvFunc = default_conv_func) -> "Rules":
        """Build Rules from raw input, raising the aggregate of any failures"""
        rules, errs = new_rules(raw, conv_func)
        if errs:
            release_rules(rules)
            raise errs
        return rules

    def clone(self) -> "Rules":
        """Return a fully independent deep copy"""
        new_rules = rules_pool.acquire()
        new_rules.method = self.method
        new_rules.url = self.url
        new_rules.proxy = self.proxy
        new_rules.header = CIMultiDict(self.header) if self.header is not None else None
        new_rules.timeout = self.timeout
        new_rules.use_cookies = self.use_cookies
        new_rules.ignore_robots_txt = self.ignore_robots_txt
        new_rules.delay = self.delay
        new_rules.selectors = clone_selectors(self.selectors)
        new_rules.fields.update({k: clone_value(v) for k, v in self.fields.items()})
        return new_rules

    def clear(self) -> None:
        """Zero every field and release the nested selectors"""
        self.method = ""
        self.url = None
        self.proxy = None
        self.header = None
        self.timeout = 0.0
        self.use_cookies = False
        self.ignore_robots_txt = False
        self.delay = 0.0

        for selector in self.selectors:
            release_selector(selector)
        self.selectors = []

        self.fields.clear()


rules_pool: ObjectPool[Rules] = ObjectPool(Rules)
selector_pool: ObjectPool[Selector] = ObjectPool(Selector)


def release_rules(rules: Rules) -> None:
    """Clear rules and hand it back to the pool"""
    rules.clear()
    rules_pool.release(rules)


def release_selector(selector: Selector) -> None:
    """Clear selector and hand it back to the pool"""
    selector.clear()
    selector_pool.release(selector)


def clone_selectors(selectors: List[Selector]) -> List[Selector]:
    return [selector.clone() for selector in selectors]


def new_rules(raw: Optional[Mapping[str, Any]],
              conv_func: Optional[ConvFunc] = default_conv_func) -> Tuple[Rules, Optional[Errs]]:
    """
    Build Rules from raw input

    Args:
        raw: Mapping with the keys Method, URL, Proxy, Header, Timeout,
             UseCookies, IgnoreRobotsTxt, Delay and Selectors. Any other
             key is kept in the field bag.
        conv_func: Conversion function applied to every raw value

    Returns:
        Tuple of the Rules built from the valid keys and the aggregate of
        the failed keys (None when everything converted)
    """
    rules = rules_pool.acquire()
    if raw is None:
        return rules, None
    return rules, apply_raw(raw, rules, RULES_SCHEMA, conv_func)


def new_selector(name: str, raw: Any,
                 conv_func: Optional[ConvFunc] = default_conv_func) -> Tuple[Optional[Selector], Optional[Errs]]:
    """
    Build one selector from its raw form

    A string is the match expression, a mapping is destructured into Expr,
    Type, All, Follow and Selectors with the remaining keys going to the
    field bag. An empty string yields no selector.

    Raises:
        InvalidSelectorError: If raw is neither a string nor a mapping
    """
    if isinstance(raw, str):
        if not raw:
            return None, None
        selector = selector_pool.acquire()
        selector.name = name
        selector.expr = raw
        return selector, None

    if isinstance(raw, Mapping):
        selector = selector_pool.acquire()
        selector.name = name
        body = {k: v for k, v in raw.items() if k != KEY_NAME}
        return selector, apply_raw(body, selector, SELECTOR_SCHEMA, conv_func)

    raise InvalidSelectorError()


def new_selectors(raw: Any,
                  conv_func: Optional[ConvFunc] = default_conv_func) -> Tuple[List[Selector], Optional[Errs]]:
    """
    Build a sibling list from a name -> raw selector mapping

    Entries with an empty name or a None value are skipped. A failing entry
    is recorded under its name and left out, the others are still built.

    Raises:
        InvalidSelectorsError: If raw is not a string-keyed mapping
    """
    if raw is None:
        return [], None

    if not isinstance(raw, Mapping):
        raise InvalidSelectorsError()

    selectors: List[Selector] = []
    errs = None
    for name, value in raw.items():
        if not isinstance(name, str):
            raise InvalidSelectorsError()
        if not name or value is None:
            continue

        try:
            selector, selector_errs = new_selector(name, value, conv_func)
        except InvalidSelectorError as e:
            errs = add_error(errs, name, e)
            continue

        if selector_errs:
            errs = add_error(errs, name, selector_errs)
            release_selector(selector)
        elif selector is not None:
            selectors.append(selector)

    return selectors, errs
