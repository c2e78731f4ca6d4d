"""
Base Classes and Interfaces for Colibri

Defines the exception taxonomy and the abstract collaborator interfaces
(transport, pacing, robots gate, content parser, response and element)
the orchestrator and the extraction engine are written against.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

from multidict import CIMultiDict
from yarl import URL

if TYPE_CHECKING:
    from colibri.core.errs import Errs
    from colibri.core.orchestrator import Colibri
    from colibri.core.rules import Rules


class ColibriError(Exception):
    """Base exception for colibri errors"""
    default_message = "colibri error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class MissingDependencyError(ColibriError):
    """A required collaborator is not configured"""
    default_message = "missing dependency"


class ClientIsNilError(MissingDependencyError):
    default_message = "Client is nil"


class ParserIsNilError(MissingDependencyError):
    default_message = "Parser is nil"


class InvalidInputError(ColibriError):
    """The orchestrator received unusable input"""
    default_message = "invalid input"


class RulesIsNilError(InvalidInputError):
    default_message = "Rules is nil"


class InvalidSelectorError(ColibriError):
    """A raw selector is neither a string nor a mapping"""
    default_message = "invalid selector"


class InvalidSelectorsError(ColibriError):
    """Raw selectors are not a string-keyed mapping"""
    default_message = "invalid selectors"


class NotAssignableError(ColibriError):
    """A converted value does not fit the field it is assigned to"""
    default_message = "value is not assignable to field"


class ConversionError(ColibriError):
    """A raw configuration value could not be converted"""
    default_message = "invalid value"


class MustBeStringError(ConversionError):
    default_message = "must be a string"


class MustBeConvBoolError(ConversionError):
    default_message = "must be a bool, string or number"


class MustBeConvDurationError(ConversionError):
    default_message = "must be a string or number"


class InvalidHeaderError(ConversionError):
    default_message = "invalid header"


class PartialConversionError(ConversionError):
    """
    Conversion produced a usable value but some parts of the input failed.

    Carries both the value built from the valid parts and the aggregate of
    the failures, so callers can keep the former and report the latter.
    """

    def __init__(self, value: Any, errors: "Errs"):
        super().__init__(str(errors))
        self.value = value
        self.errors = errors


class RobotsDeniedError(ColibriError):
    """The robots.txt policy of the target host forbids the request"""
    default_message = "Page not accessible due to robots.txt restriction"


class ExprTypeError(ColibriError):
    """The selector expression type is not supported by the element"""
    default_message = "ExprType not compatible with Element"


class NodeSetError(ColibriError):
    """An XPath expression evaluated to something other than a node-set"""
    default_message = "expression must evaluate to a node-set"


class NotMatchError(ColibriError):
    """No registered content parser matches the response Content-Type"""
    default_message = "Content-Type does not match"


class FaultError(ColibriError):
    """An unexpected fault contained at the orchestrator boundary"""
    default_message = "unexpected fault"


class ConfigurationError(ColibriError):
    """Configuration-related errors"""
    default_message = "configuration error"


class BaseComponent(ABC):
    """Base class for all colibri collaborators"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize the component"""
        self._initialized = True

    async def cleanup(self) -> None:
        """Clean up resources"""
        self._initialized = False

    def is_initialized(self) -> bool:
        """Check if component is initialized"""
        return self._initialized


class Response(ABC):
    """A fetched resource that can re-enter the orchestrator"""

    @property
    @abstractmethod
    def url(self) -> URL:
        """Resolved URL of the response, after redirects"""
        pass

    @property
    @abstractmethod
    def status_code(self) -> int:
        """HTTP status code"""
        pass

    @property
    @abstractmethod
    def header(self) -> CIMultiDict:
        """Response headers"""
        pass

    @property
    @abstractmethod
    def body(self) -> bytes:
        """Response body"""
        pass

    @abstractmethod
    async def do(self, rules: "Rules") -> "Response":
        """Fetch another resource through the owning orchestrator"""
        pass

    @abstractmethod
    async def extract(self, rules: "Rules") -> "ExtractResult":
        """Fetch and extract another resource through the owning orchestrator"""
        pass


@dataclass
class ExtractResult:
    """Result of a single extract call"""
    response: Optional[Response]
    output: Optional[Dict[str, Any]] = None
    errors: Optional["Errs"] = None


class Element(ABC):
    """A decoded, format agnostic content node"""

    @abstractmethod
    def find(self, expr: str, expr_type: str) -> Optional["Element"]:
        """Find the first child element matching the expression"""
        pass

    @abstractmethod
    def find_all(self, expr: str, expr_type: str) -> List["Element"]:
        """Find every child element matching the expression"""
        pass

    @abstractmethod
    def value(self) -> Any:
        """Scalar value of the element"""
        pass


class HTTPClient(BaseComponent):
    """Interface for the network transport"""

    @abstractmethod
    async def do(self, c: "Colibri", rules: "Rules") -> Response:
        """Perform the request described by the rules"""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Drop transport state such as cookies"""
        pass


class Delay(BaseComponent):
    """Interface for per-host request pacing"""

    @abstractmethod
    async def wait(self, url: URL, duration: float) -> None:
        """Block until a request to the URL may be sent"""
        pass

    @abstractmethod
    def done(self, url: URL) -> None:
        """Release the pacing token taken by wait"""
        pass

    @abstractmethod
    def stamp(self, url: URL) -> None:
        """Record the time of a request to the URL"""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Forget all recorded timestamps"""
        pass


class RobotsTxt(BaseComponent):
    """Interface for the robots.txt gate"""

    @abstractmethod
    async def is_allowed(self, c: "Colibri", rules: "Rules") -> None:
        """Raise RobotsDeniedError if the request is not allowed"""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Forget all cached robots.txt documents"""
        pass


class Parser(BaseComponent):
    """Interface for the content parser registry"""

    @abstractmethod
    def match(self, content_type: str) -> bool:
        """Check if some registered parser accepts the Content-Type"""
        pass

    @abstractmethod
    async def parse(self, rules: "Rules", resp: Response) -> Tuple[Optional[Dict[str, Any]], Optional["Errs"]]:
        """Decode the response and extract the rules' selectors from it"""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Remove every registered parser"""
        pass
