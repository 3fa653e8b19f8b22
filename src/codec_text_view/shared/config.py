"""Configuration classes for codec-driven text iteration.

This module provides configuration objects for the decoding and encoding
iterators and for the benchmarking tools, enabling control over malformed
input handling, diagnostics and measurement behavior.
"""

import json
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class MalformedInputPolicy(Enum):
    """What a decoding iterator does when a codec reports malformed input."""

    SKIP = auto()   # Resynchronize silently past the offending code units
    LOG = auto()    # Resynchronize and emit a warning
    RAISE = auto()  # Stop with MalformedInputError


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class TextIteratorConfig:
    """Configuration shared by decoding and encoding iterators.

    Instances are immutable and may be shared freely between iterator copies.

    Attributes:
        malformed_input: Policy applied when a codec reports malformed input
        correlation_id: Optional correlation ID attached to log records
        trace_steps: Whether every skipped code-unit run is logged at DEBUG
    """

    malformed_input: MalformedInputPolicy = MalformedInputPolicy.SKIP
    correlation_id: Optional[str] = None
    trace_steps: bool = False

    def __post_init__(self) -> None:
        """Validate iterator configuration."""
        if not isinstance(self.malformed_input, MalformedInputPolicy):
            raise ConfigValidationError(
                f"malformed_input must be a MalformedInputPolicy, "
                f"got {self.malformed_input!r}",
                field_name="malformed_input",
                suggestions=[policy.name for policy in MalformedInputPolicy],
            )
        if self.correlation_id is not None and not self.correlation_id:
            raise ConfigValidationError(
                "correlation_id cannot be empty", field_name="correlation_id"
            )

    @classmethod
    def lenient(cls) -> "TextIteratorConfig":
        """Create configuration that silently skips malformed input."""
        return cls()

    @classmethod
    def strict(cls) -> "TextIteratorConfig":
        """Create configuration that fails on the first malformed sequence."""
        return cls(malformed_input=MalformedInputPolicy.RAISE)

    @classmethod
    def traced(cls, correlation_id: Optional[str] = None) -> "TextIteratorConfig":
        """Create configuration that logs every resynchronization."""
        return cls(
            malformed_input=MalformedInputPolicy.LOG,
            correlation_id=correlation_id,
            trace_steps=True,
        )

    def override(self, **kwargs: Any) -> "TextIteratorConfig":
        """Create a new configuration with specific overrides."""
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return {
            "malformed_input": self.malformed_input.name,
            "correlation_id": self.correlation_id,
            "trace_steps": self.trace_steps,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextIteratorConfig":
        """Create configuration from dictionary.

        Args:
            data: Dictionary containing configuration data

        Returns:
            TextIteratorConfig instance created from dictionary
        """
        values = dict(data)
        policy = values.get("malformed_input")
        if isinstance(policy, str):
            try:
                values["malformed_input"] = MalformedInputPolicy[policy.upper()]
            except KeyError as e:
                raise ConfigValidationError(
                    f"Unknown malformed_input policy: {policy}",
                    field_name="malformed_input",
                    suggestions=[p.name for p in MalformedInputPolicy],
                ) from e
        unknown = set(values) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration fields: {sorted(unknown)}"
            )
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "TextIteratorConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))


@dataclass
class BenchmarkConfig:
    """Configuration for traversal benchmarks."""

    warmup_runs: int = 3
    benchmark_runs: int = 10
    sample_characters: int = 10000
    random_access_probes: int = 1000

    def __post_init__(self) -> None:
        """Validate benchmark configuration."""
        if self.warmup_runs < 0:
            raise ValueError("warmup_runs must be >= 0")
        if self.benchmark_runs <= 0:
            raise ValueError("benchmark_runs must be > 0")
        if self.sample_characters <= 0:
            raise ValueError("sample_characters must be > 0")
        if self.random_access_probes < 0:
            raise ValueError("random_access_probes must be >= 0")

    @classmethod
    def quick(cls) -> "BenchmarkConfig":
        """Create a small configuration suitable for smoke runs."""
        return cls(
            warmup_runs=0,
            benchmark_runs=1,
            sample_characters=256,
            random_access_probes=32,
        )
