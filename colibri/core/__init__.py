"""
Core components for Colibri

This package contains the core components including:
- Base classes, interfaces and the exception taxonomy
- Rules/Selector model, conversion functions and pooling
- Error aggregator
- Extraction engine and orchestrator
- Configuration management and logging
"""

from colibri.core.base import (
    BaseComponent,
    Response,
    ExtractResult,
    Element,
    HTTPClient,
    Delay,
    RobotsTxt,
    Parser,
    ColibriError,
    MissingDependencyError,
    ClientIsNilError,
    ParserIsNilError,
    InvalidInputError,
    RulesIsNilError,
    InvalidSelectorError,
    InvalidSelectorsError,
    NotAssignableError,
    ConversionError,
    MustBeStringError,
    MustBeConvBoolError,
    MustBeConvDurationError,
    InvalidHeaderError,
    PartialConversionError,
    RobotsDeniedError,
    ExprTypeError,
    NodeSetError,
    NotMatchError,
    FaultError,
    ConfigurationError
)

from colibri.core.errs import (
    Errs,
    add_error
)

from colibri.core.convert import (
    default_conv_func,
    to_url,
    to_bool,
    to_duration,
    to_header,
    parse_duration
)

from colibri.core.rules import (
    Rules,
    Selector,
    new_rules,
    new_selector,
    new_selectors,
    clone_selectors,
    release_rules,
    release_selector
)

from colibri.core.engine import (
    ExtractionEngine
)

from colibri.core.orchestrator import (
    Colibri,
    DEFAULT_USER_AGENT,
    contain_faults
)

from colibri.core.config import (
    ConfigManager,
    ClientConfig,
    ColibriConfig,
    LoggingConfig
)

from colibri.core.logging import (
    LoggingManager,
    get_logger,
    setup_logging
)

__all__ = [
    # Base classes and interfaces
    'BaseComponent',
    'Response',
    'ExtractResult',
    'Element',
    'HTTPClient',
    'Delay',
    'RobotsTxt',
    'Parser',

    # Exceptions
    'ColibriError',
    'MissingDependencyError',
    'ClientIsNilError',
    'ParserIsNilError',
    'InvalidInputError',
    'RulesIsNilError',
    'InvalidSelectorError',
    'InvalidSelectorsError',
    'NotAssignableError',
    'ConversionError',
    'MustBeStringError',
    'MustBeConvBoolError',
    'MustBeConvDurationError',
    'InvalidHeaderError',
    'PartialConversionError',
    'RobotsDeniedError',
    'ExprTypeError',
    'NodeSetError',
    'NotMatchError',
    'FaultError',
    'ConfigurationError',
    'Errs',
    'add_error',

    # Rules model
    'default_conv_func',
    'to_url',
    'to_bool',
    'to_duration',
    'to_header',
    'parse_duration',
    'Rules',
    'Selector',
    'new_rules',
    'new_selector',
    'new_selectors',
    'clone_selectors',
    'release_rules',
    'release_selector',

    # Extraction
    'ExtractionEngine',
    'Colibri',
    'DEFAULT_USER_AGENT',
    'contain_faults',

    # Configuration and logging
    'ConfigManager',
    'ClientConfig',
    'ColibriConfig',
    'LoggingConfig',
    'LoggingManager',
    'get_logger',
    'setup_logging'
]
