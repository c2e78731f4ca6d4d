"""
Extraction Engine for Colibri

Walks a selector tree against a decoded element, collecting one value per
selector name. Selectors marked as follow turn their matched values into
URLs that are fetched and extracted through the response handle, so the
walk continues on the followed pages.

Failures are folded into an Errs aggregate keyed by selector name (or
followed URL) and never stop the evaluation of sibling selectors.
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

from yarl import URL

from colibri.core.base import ColibriError, Element, Response
from colibri.core.convert import to_url
from colibri.core.errs import Errs, add_error
from colibri.core.logging import get_logger
from colibri.core.rules import Rules, Selector, release_rules


class ExtractionEngine:
    """
    Recursive selector evaluator

    The engine keeps no per-call state, a single instance can serve
    concurrent extractions.
    """

    def __init__(self):
        self.logger = get_logger()

    async def find_selectors(self, src: Rules, resp: Optional[Response], selectors: Optional[List[Selector]],
                             parent: Optional[Element]) -> Tuple[Optional[Dict[str, Any]], Optional[Errs]]:
        """
        Evaluate a sibling list of selectors against parent

        Args:
            src: Rules active for the current response
            resp: Response the parent element was decoded from
            selectors: Sibling selectors
            parent: Element the selectors are evaluated against

        Returns:
            Tuple of the name -> value mapping of the selectors that succeeded
            and the aggregate of the ones that failed
        """
        if resp is None or selectors is None or parent is None:
            return None, None

        result: Dict[str, Any] = {}
        errs = None
        for selector in selectors:
            try:
                found = await self.find_selector(src, resp, selector, parent)
            except Exception as e:
                self.logger.debug(f"Selector {selector.name!r} failed: {e}")
                errs = add_error(errs, selector.name, e)
                continue
            result[selector.name] = found

        return result, errs

    async def find_selector(self, src: Rules, resp: Response, selector: Optional[Selector],
                            parent: Optional[Element]) -> Any:
        """
        Evaluate a single selector

        A selector without match yields None. With follow set the matched
        value is fetched and the result is keyed by its absolute URL,
        otherwise nested selectors are evaluated against the match.

        Raises:
            Errs: If some part of the selector's subtree failed
        """
        if selector is None or parent is None:
            return None

        if selector.all:
            return await self.find_all_selector(src, resp, selector, parent)

        child = parent.find(selector.expr, selector.type)
        if child is None:
            return None

        # follow takes precedence, nested selectors then run on the followed page
        if selector.follow:
            return await self.follow_selector(src, resp, selector, [child.value()])

        if selector.selectors:
            found, errs = await self.find_selectors(src, resp, selector.selectors, child)
            if errs:
                raise errs
            return found

        return child.value()

    async def find_all_selector(self, src: Rules, resp: Response, selector: Selector, parent: Element) -> Any:
        """Evaluate a selector against every matching child, the result is list-shaped"""
        children = parent.find_all(selector.expr, selector.type)

        if not selector.follow and selector.selectors:
            result: List[Any] = []
            errs = None
            for i, child in enumerate(children):
                found, child_errs = await self.find_selectors(src, resp, selector.selectors, child)
                if child_errs:
                    errs = add_error(errs, f"{selector.name}#{i}", child_errs)
                    continue
                result.append(found)

            if errs:
                raise errs
            return result

        values = [child.value() for child in children]
        if selector.follow:
            return await self.follow_selector(src, resp, selector, values)
        return values

    async def follow_selector(self, src: Rules, resp: Response, selector: Selector,
                              raw_urls: List[Any]) -> Dict[str, Any]:
        """
        Fetch and extract every URL in raw_urls

        Relative URLs are resolved against the response URL. The pages are
        extracted concurrently, each with its own copy of the rules derived
        from the selector.

        Returns:
            Mapping of absolute URL -> extraction output

        Raises:
            Errs: If a URL is invalid or some followed page failed
        """
        urls: List[URL] = []
        errs = None
        for raw in raw_urls:
            try:
                url = to_url(raw)
            except (ColibriError, ValueError) as e:
                errs = add_error(errs, str(raw), e)
                continue

            if not url.scheme or not url.is_absolute():
                url = resp.url.join(url)
            urls.append(url)

        if errs:
            raise errs

        rules = selector.rules(src)
        try:
            branches = []
            for url in urls:
                branch_rules = rules.clone()
                branch_rules.url = url
                branches.append(self._extract_branch(resp, branch_rules))

            outcomes = await asyncio.gather(*branches, return_exceptions=True)
        finally:
            release_rules(rules)

        result: Dict[str, Any] = {}
        for url, outcome in zip(urls, outcomes):
            if isinstance(outcome, Exception):
                self.logger.debug(f"Following {url} failed: {outcome}")
                errs = add_error(errs, str(url), outcome)
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            result[str(url)] = outcome

        if errs:
            raise errs
        return result

    async def _extract_branch(self, resp: Response, rules: Rules) -> Optional[Dict[str, Any]]:
        try:
            extracted = await resp.extract(rules)
        finally:
            release_rules(rules)

        if extracted.errors:
            raise extracted.errors
        return extracted.output
