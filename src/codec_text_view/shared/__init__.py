"""Shared utilities for codec-driven text iteration.

This module provides the configuration objects, exception hierarchy and
logging helpers used by the character, tools and CLI layers.
"""

from .config import (
    BenchmarkConfig,
    ConfigError,
    ConfigValidationError,
    MalformedInputPolicy,
    TextIteratorConfig,
)
from .errors import (
    CapabilityError,
    CodecContractError,
    EncodingError,
    InvalidatedIteratorError,
    MalformedInputError,
    TextIteratorError,
)
from .logging import (
    CorrelationLogger,
    code_unit_span,
    get_logger,
)

__all__ = [
    "BenchmarkConfig",
    "ConfigError",
    "ConfigValidationError",
    "MalformedInputPolicy",
    "TextIteratorConfig",
    "CapabilityError",
    "CodecContractError",
    "EncodingError",
    "InvalidatedIteratorError",
    "MalformedInputError",
    "TextIteratorError",
    "CorrelationLogger",
    "code_unit_span",
    "get_logger",
]
