"""
Conversion Functions for Colibri

Turns loosely typed raw configuration values (strings, numbers,
booleans-as-strings, nested mappings) into the typed values held by
Rules and Selector, and assigns them through explicit schema tables.
"""

import copy
import re
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from multidict import CIMultiDict, MultiMapping
from yarl import URL

from colibri.core.base import (
    ColibriError,
    ConversionError,
    InvalidHeaderError,
    MustBeConvBoolError,
    MustBeConvDurationError,
    MustBeStringError,
    NotAssignableError,
    PartialConversionError,
)
from colibri.core.errs import Errs, add_error

# Rules keys
KEY_DELAY = "Delay"
KEY_HEADER = "Header"
KEY_IGNORE_ROBOTS_TXT = "IgnoreRobotsTxt"
KEY_METHOD = "Method"
KEY_PROXY = "Proxy"
KEY_SELECTORS = "Selectors"
KEY_TIMEOUT = "Timeout"
KEY_USE_COOKIES = "UseCookies"
KEY_URL = "URL"

# Selector keys
KEY_ALL = "All"
KEY_EXPR = "Expr"
KEY_FOLLOW = "Follow"
KEY_NAME = "Name"
KEY_TYPE = "Type"

ConvFunc = Callable[[str, Any], Any]

# (raw key) -> (attribute name, accepted types)
Schema = Dict[str, Tuple[str, Tuple[type, ...]]]

_TRUE_STRINGS = frozenset(["1", "t", "T", "TRUE", "true", "True"])
_FALSE_STRINGS = frozenset(["0", "f", "F", "FALSE", "false", "False"])

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def to_url(value: Any) -> URL:
    """Parse a string into a URL"""
    if isinstance(value, URL):
        return value
    if isinstance(value, str):
        return URL(value)
    raise MustBeStringError()


def to_bool(value: Any) -> bool:
    """
    Convert a raw value into a bool

    Accepts None (False), bools, numbers (non-zero is True) and the strings
    1, t, T, TRUE, true, True, 0, f, F, FALSE, false, False.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value in _TRUE_STRINGS:
            return True
        if value in _FALSE_STRINGS:
            return False
        raise ConversionError(f'parsing "{value}": invalid syntax')
    if isinstance(value, (int, float)):
        return value != 0
    raise MustBeConvBoolError()


def parse_duration(text: str) -> float:
    """
    Parse a duration string such as "300ms", "1.5s" or "1h15m" into seconds

    Args:
        text: Signed sequence of decimal numbers, each with a unit suffix
              (ns, us, ms, s, m, h). A bare "0" is accepted.

    Returns:
        Duration in seconds

    Raises:
        ConversionError: If the string is not a valid duration
    """
    rest = text
    sign = 1.0
    if rest[:1] in ("-", "+"):
        if rest[0] == "-":
            sign = -1.0
        rest = rest[1:]

    if rest == "0":
        return 0.0
    if not rest:
        raise ConversionError(f'invalid duration "{text}"')

    total = 0.0
    pos = 0
    while pos < len(rest):
        match = _DURATION_PART.match(rest, pos)
        if not match:
            raise ConversionError(f'invalid duration "{text}"')
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    return sign * total


def to_duration(value: Any) -> float:
    """Convert a raw value into seconds, numbers are read as milliseconds"""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise MustBeConvDurationError()
    if isinstance(value, str):
        return parse_duration(value)
    if isinstance(value, (int, float)):
        return value / 1000.0
    raise MustBeConvDurationError()


def to_header(value: Any) -> CIMultiDict:
    """Convert a mapping of name -> value(s) into a header multimap"""
    if value is None:
        return CIMultiDict()

    if isinstance(value, MultiMapping):
        return CIMultiDict(value)

    if not isinstance(value, Mapping):
        raise InvalidHeaderError()

    header: CIMultiDict = CIMultiDict()
    for name, item in value.items():
        if not isinstance(name, str):
            raise InvalidHeaderError()

        if isinstance(item, str):
            header[name] = item
        elif isinstance(item, (list, tuple)) and all(isinstance(v, str) for v in item):
            for v in item:
                header.add(name, v)
        else:
            raise InvalidHeaderError()

    return header


def default_conv_func(key: str, raw: Any) -> Any:
    """Convert raw by key, unknown keys pass through unchanged"""
    if key in (KEY_URL, KEY_PROXY):
        return to_url(raw)

    if key in (KEY_IGNORE_ROBOTS_TXT, KEY_FOLLOW, KEY_USE_COOKIES, KEY_ALL):
        return to_bool(raw)

    if key in (KEY_DELAY, KEY_TIMEOUT):
        return to_duration(raw)

    if key == KEY_HEADER:
        return to_header(raw)

    if key == KEY_SELECTORS:
        from colibri.core.rules import new_selectors

        selectors, errs = new_selectors(raw, default_conv_func)
        if errs:
            raise PartialConversionError(selectors, errs)
        return selectors

    return raw


def apply_raw(raw: Mapping[str, Any], target: Any, schema: Schema,
              conv_func: Optional[ConvFunc] = None) -> Optional[Errs]:
    """
    Assign raw values onto target through a schema table

    Every value is passed through conv_func first. Keys found in the schema
    are assigned to their attribute when the converted value has an accepted
    type, any other key is stored in ``target.fields``.

    Args:
        raw: Raw key -> value mapping
        target: Rules or Selector instance
        schema: Key -> (attribute, accepted types) table
        conv_func: Conversion function, None assigns values as they are

    Returns:
        Aggregate of the failed keys, or None
    """
    errs = None
    for key, value in raw.items():
        if conv_func is not None:
            try:
                value = conv_func(key, value)
            except PartialConversionError as e:
                errs = add_error(errs, key, e.errors)
                value = e.value
            except (ColibriError, ValueError, TypeError) as e:
                errs = add_error(errs, key, e)
                continue

        entry = schema.get(key)
        if entry is None:
            target.fields[key] = value
            continue

        attr, types = entry
        if not isinstance(value, types) or (isinstance(value, bool) and bool not in types):
            errs = add_error(errs, key, NotAssignableError())
            continue

        setattr(target, attr, value)

    return errs


def clone_value(value: Any) -> Any:
    """Deep copy a field bag value"""
    from colibri.core.rules import Selector

    if isinstance(value, MultiMapping):
        return CIMultiDict(value)
    if isinstance(value, Selector):
        return value.clone()
    if isinstance(value, dict):
        return {k: clone_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [clone_value(v) for v in value]
    if isinstance(value, (str, int, float, bool, URL)) or value is None:
        return value
    return copy.deepcopy(value)
