"""
Unit tests for Rules and Selector construction

Tests raw input conversion, partial failures, the field bag, follow
overrides, deep cloning and pool release.
"""

from typing import Any, Tuple, Type, get_type_hints

import pytest
from multidict import CIMultiDict
from yarl import URL

from colibri.core.base import ConversionError, InvalidSelectorError, InvalidSelectorsError, NotAssignableError
from colibri.core.errs import Errs
from colibri.core.rules import (
    Rules,
    Selector,
    new_rules,
    new_selector,
    new_selectors,
    release_rules,
    rules_pool,
)


def selector_by_name(selectors, name):
    return next(s for s in selectors if s.name == name)


class TestNewRules:
    """Test cases for building Rules from raw input"""

    def test_full_conversion(self):
        """Test that every recognized key is converted and assigned"""
        rules, errs = new_rules({
            "Method": "POST",
            "URL": "https://example.test/path",
            "Proxy": "http://proxy.test:3128",
            "Header": {"Accept": "text/html", "X-Multi": ["a", "b"]},
            "Timeout": "1.5s",
            "UseCookies": "true",
            "IgnoreRobotsTxt": 1,
            "Delay": 250,
            "Selectors": {"title": "//title"},
            "Comment": "kept aside"
        })

        assert errs is None
        assert rules.method == "POST"
        assert rules.url == URL("https://example.test/path")
        assert rules.proxy == URL("http://proxy.test:3128")
        assert rules.header["accept"] == "text/html"
        assert rules.header.getall("X-Multi") == ["a", "b"]
        assert rules.timeout == 1.5
        assert rules.use_cookies is True
        assert rules.ignore_robots_txt is True
        assert rules.delay == 0.25
        assert [s.name for s in rules.selectors] == ["title"]
        assert rules.selectors[0].expr == "//title"
        assert rules.fields == {"Comment": "kept aside"}

    def test_none_input(self):
        """Test that no input yields zero-valued rules"""
        rules, errs = new_rules(None)

        assert errs is None
        assert rules == Rules()

    def test_failed_keys_reported(self):
        """Test that failing keys are reported while the others are kept"""
        rules, errs = new_rules({
            "URL": 42,
            "UseCookies": "maybe",
            "Delay": [1],
            "Header": "Accept",
            "Method": "GET"
        })

        assert isinstance(errs, Errs)
        assert set(errs.keys()) == {"URL", "UseCookies", "Delay", "Header"}
        assert isinstance(errs["UseCookies"], ConversionError)
        assert rules.method == "GET"
        assert rules.url is None

    def test_not_assignable_without_conversion(self):
        """Test that raw values of the wrong type are rejected without conv_func"""
        rules, errs = new_rules({"URL": "https://example.test/", "Method": "GET", "Timeout": True}, None)

        assert set(errs.keys()) == {"URL", "Timeout"}
        assert isinstance(errs["URL"], NotAssignableError)
        assert isinstance(errs["Timeout"], NotAssignableError)
        assert rules.method == "GET"

    def test_partial_selectors_kept(self):
        """Test that valid selectors survive a failing sibling"""
        rules, errs = new_rules({
            "Selectors": {
                "good": "//a",
                "bad": {"Expr": "//b", "All": "sometimes"},
                "worse": 42
            }
        })

        assert [s.name for s in rules.selectors] == ["good"]
        assert list(errs.keys()) == ["Selectors"]
        nested = errs["Selectors"]
        assert set(nested.keys()) == {"bad", "worse"}
        assert isinstance(nested["bad"]["All"], ConversionError)
        assert isinstance(nested["worse"], InvalidSelectorError)

    def test_invalid_selectors(self):
        """Test that Selectors must be a mapping"""
        rules, errs = new_rules({"Selectors": ["//a"]})

        assert isinstance(errs["Selectors"], InvalidSelectorsError)
        assert rules.selectors == []

    def test_from_raw_raises(self):
        """Test that from_raw raises the aggregate"""
        with pytest.raises(Errs) as exc_info:
            Rules.from_raw({"URL": 1})

        assert "URL" in exc_info.value


class TestNewSelector:
    """Test cases for building selectors"""

    def test_string_selector(self):
        selector, errs = new_selector("title", "//title")

        assert errs is None
        assert selector.name == "title"
        assert selector.expr == "//title"
        assert selector.type == ""
        assert not selector.all
        assert not selector.follow

    def test_empty_string(self):
        """Test that an empty expression yields no selector"""
        assert new_selector("title", "") == (None, None)

    def test_mapping_selector(self):
        """Test destructuring of a mapping with nested selectors and extra keys"""
        selector, errs = new_selector("links", {
            "Name": "ignored",
            "Expr": "a",
            "Type": "css",
            "All": "t",
            "Follow": True,
            "Delay": "2s",
            "Selectors": {"url": "@href", "id": {"Expr": "@id"}}
        })

        assert errs is None
        assert selector.name == "links"
        assert selector.expr == "a"
        assert selector.type == "css"
        assert selector.all is True
        assert selector.follow is True
        assert [s.name for s in selector.selectors] == ["url", "id"]
        assert selector_by_name(selector.selectors, "id").expr == "@id"
        assert selector.fields == {"Delay": 2.0}

    def test_invalid_type(self):
        with pytest.raises(InvalidSelectorError):
            new_selector("x", 3.5)

    def test_skipped_entries(self):
        """Test that empty names and None values are skipped"""
        selectors, errs = new_selectors({"": "//a", "none": None, "empty": "", "ok": "//b"})

        assert errs is None
        assert [s.name for s in selectors] == ["ok"]

    def test_non_string_key(self):
        with pytest.raises(InvalidSelectorsError):
            new_selectors({1: "//a"})

    def test_none_selectors(self):
        assert new_selectors(None) == ([], None)


class TestSelectorRules:
    """Test cases for the rules derived when following a selector"""

    @pytest.fixture
    def src(self):
        """Source rules with every inheritable field set"""
        return Rules.from_raw({
            "Method": "POST",
            "URL": "https://example.test/",
            "Proxy": "http://proxy.test",
            "Header": {"Accept": "text/html"},
            "Timeout": 2000,
            "UseCookies": True,
            "IgnoreRobotsTxt": True,
            "Delay": 100
        })

    def test_inherits_from_source(self, src):
        selector, _ = new_selector("next", {"Expr": "//a/@href", "Selectors": {"title": "//title"}})

        rules = selector.rules(src)

        assert rules.method == "POST"
        assert rules.proxy == URL("http://proxy.test")
        assert rules.header == CIMultiDict({"Accept": "text/html"})
        assert rules.timeout == 2.0
        assert rules.use_cookies is True
        assert rules.ignore_robots_txt is True
        assert rules.delay == 0.1
        assert rules.url is None
        assert [s.name for s in rules.selectors] == ["title"]

    def test_header_is_independent(self, src):
        """Test that the derived header is a copy of the source header"""
        selector, _ = new_selector("next", "//a/@href")

        rules = selector.rules(src)
        rules.header["Accept"] = "application/json"

        assert src.header["Accept"] == "text/html"

    def test_overrides(self, src):
        """Test that field bag values override the inherited ones"""
        selector, _ = new_selector("next", {
            "Expr": "//a/@href",
            "Method": "GET",
            "Header": {"Accept": "application/json"},
            "Timeout": "10s",
            "UseCookies": False,
            "IgnoreRobotsTxt": "false",
            "Delay": 0
        })

        rules = selector.rules(src)

        assert rules.method == "GET"
        assert rules.header == CIMultiDict({"Accept": "application/json"})
        assert rules.timeout == 10.0
        assert rules.use_cookies is False
        assert rules.ignore_robots_txt is False
        assert rules.delay == 0
        assert rules.proxy == URL("http://proxy.test")

    def test_wrong_type_override_inherits(self, src):
        """Test that an override of the wrong type falls back to the source value"""
        selector, _ = new_selector("next", {"Expr": "//a/@href", "Method": 5})

        rules = selector.rules(src)

        assert rules.method == "POST"

    def test_typed_selector_resolves_overrides(self, src):
        """Test that a selector with an explicit Type builds and resolves follow rules"""
        selector = Selector(name="next", expr="a", type="css", follow=True, fields={"Timeout": 3})

        rules = selector.rules(src)

        assert selector.type == "css"
        assert rules.timeout == 3
        assert rules.method == "POST"
        assert get_type_hints(Selector._override)["types"] == Tuple[Type[Any], ...]

    def test_selectors_are_cloned(self, src):
        selector, _ = new_selector("next", {"Expr": "//a/@href", "Selectors": {"title": "//title"}})

        rules = selector.rules(src)
        rules.selectors[0].expr = "//h1"

        assert selector.selectors[0].expr == "//title"


class TestCloneAndRelease:
    """Test cases for deep cloning and pooling"""

    @pytest.fixture
    def rules(self):
        return Rules.from_raw({
            "URL": "https://example.test/",
            "Header": {"Accept": "text/html"},
            "Extra": {"nested": [1, 2]},
            "Selectors": {
                "links": {
                    "Expr": "//a",
                    "All": True,
                    "Header": {"X-Token": "t"},
                    "Selectors": {"url": "@href"}
                }
            }
        })

    def test_clone_is_equal(self, rules):
        assert rules.clone() == rules

    def test_clone_is_independent(self, rules):
        """Test that mutating the clone leaves the original untouched"""
        clone = rules.clone()

        clone.header["Accept"] = "text/plain"
        clone.fields["Extra"]["nested"].append(3)
        clone.selectors[0].selectors[0].expr = "@src"
        clone.selectors[0].fields["Header"]["X-Token"] = "changed"
        clone.selectors.append(Selector(name="more"))

        assert rules.header["Accept"] == "text/html"
        assert rules.fields["Extra"] == {"nested": [1, 2]}
        assert rules.selectors[0].selectors[0].expr == "@href"
        assert rules.selectors[0].fields["Header"]["X-Token"] == "t"
        assert len(rules.selectors) == 1

    def test_selector_clone(self, rules):
        selector = rules.selectors[0]

        clone = selector.clone()

        assert clone == selector
        assert clone is not selector
        assert clone.selectors[0] is not selector.selectors[0]

    def test_released_rules_are_zeroed(self, rules):
        """Test that rules acquired after a release carry no previous state"""
        release_rules(rules)

        reused = rules_pool.acquire()

        assert reused == Rules()
