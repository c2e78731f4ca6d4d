"""
Orchestrator for Colibri

Sequences one request: validation, robots.txt gate, pacing gate, fetch
and, for extract calls, content parser dispatch and selector extraction.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from multidict import CIMultiDict

from colibri.core.base import (
    BaseComponent,
    ClientIsNilError,
    Delay,
    ExtractResult,
    FaultError,
    HTTPClient,
    Parser,
    ParserIsNilError,
    Response,
    RobotsTxt,
    RulesIsNilError,
)
from colibri.core.logging import get_logger
from colibri.core.rules import Rules

DEFAULT_USER_AGENT = "colibri/0.1"

# Programming faults converted into FaultError at the public boundary
FAULT_TYPES = (ArithmeticError, AssertionError, AttributeError, LookupError, RuntimeError, TypeError)


@contextmanager
def contain_faults() -> Iterator[None]:
    """Convert programming faults raised in the block into FaultError"""
    try:
        yield
    except FAULT_TYPES as e:
        get_logger().error(f"Contained fault: {type(e).__name__}: {e}")
        raise FaultError(str(e) or type(e).__name__) from e


class Colibri:
    """
    Fetch and extraction orchestrator

    Every collaborator is optional at construction time. do() requires a
    client and extract() additionally requires a parser, robots.txt and
    pacing gates are skipped when their collaborator is missing.

    Args:
        client: Network transport
        delay: Per-host pacing
        robots_txt: robots.txt gate
        parser: Content parser registry
        user_agent: User-Agent set on requests that carry none
    """

    def __init__(self, client: Optional[HTTPClient] = None, delay: Optional[Delay] = None,
                 robots_txt: Optional[RobotsTxt] = None, parser: Optional[Parser] = None,
                 user_agent: str = DEFAULT_USER_AGENT):
        self.client = client
        self.delay = delay
        self.robots_txt = robots_txt
        self.parser = parser
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.logger = get_logger()

    async def do(self, rules: Optional[Rules]) -> Response:
        """
        Fetch the resource described by rules

        Args:
            rules: Request configuration

        Returns:
            The fetched response

        Raises:
            ClientIsNilError: If no client is configured
            RulesIsNilError: If rules is None
            RobotsDeniedError: If robots.txt forbids the request
            FaultError: If an unexpected fault occurred
        """
        with contain_faults():
            return await self._do(rules)

    async def _do(self, rules: Optional[Rules]) -> Response:
        if self.client is None:
            raise ClientIsNilError()

        if rules is None:
            raise RulesIsNilError()

        if rules.header is None:
            rules.header = CIMultiDict()

        if not rules.header.get("User-Agent", "").strip():
            rules.header["User-Agent"] = self.user_agent

        if self.robots_txt is not None and not rules.ignore_robots_txt:
            await self.robots_txt.is_allowed(self, rules)

        paced = self.delay is not None and rules.delay > 0
        if paced:
            await self.delay.wait(rules.url, rules.delay)

        try:
            self.logger.debug(f"{rules.method or 'GET'} {rules.url}")
            resp = await self.client.do(self, rules)

            if self.delay is not None and resp is not None:
                self.delay.stamp(resp.url)
            return resp
        finally:
            if paced:
                self.delay.done(rules.url)

    async def extract(self, rules: Optional[Rules]) -> ExtractResult:
        """
        Fetch the resource described by rules and extract its selectors

        Args:
            rules: Request configuration with the selectors to extract

        Returns:
            ExtractResult with the response, the output of the selectors that
            succeeded (None when rules carry no selectors) and the aggregate
            of the ones that failed

        Raises:
            ClientIsNilError, ParserIsNilError: If no client or parser is configured
            NotMatchError: If no parser accepts the response Content-Type
        """
        with contain_faults():
            if self.parser is None:
                raise ParserIsNilError()

            resp = await self.do(rules)

            output = None
            errors = None
            if rules.selectors:
                output, errors = await self.parser.parse(rules, resp)

            if errors:
                self.logger.debug(f"Extraction of {resp.url} finished with errors: {errors}")
            return ExtractResult(resp, output, errors)

    def reset(self) -> None:
        """Reset every configured collaborator"""
        for component in self._components():
            component.reset()

    async def open(self) -> None:
        """Initialize the collaborators that hold resources"""
        for component in self._components():
            if isinstance(component, BaseComponent) and not component.is_initialized():
                await component.initialize()

    async def close(self) -> None:
        """Release the resources held by the collaborators"""
        for component in self._components():
            if isinstance(component, BaseComponent):
                await component.cleanup()

    def _components(self) -> List[BaseComponent]:
        return [c for c in (self.client, self.delay, self.robots_txt, self.parser) if c is not None]

    async def __aenter__(self) -> "Colibri":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
