"""Structured logging utilities for codec-driven text iteration.

Log records carry the emitting component and an optional correlation ID so
that decode resynchronizations can be traced back to the caller that
requested them. Records about code units use the ``position``, ``consumed``
and ``reason`` fields built by ``code_unit_span``.
"""

import logging
from typing import Any, Dict, Optional


def code_unit_span(
    position: int,
    consumed: int,
    reason: Optional[str] = None
) -> Dict[str, Any]:
    """Build the extra fields describing a run of code units."""
    return {"position": position, "consumed": consumed, "reason": reason}


class CorrelationLogger:
    """Logger that tags records with a component and a correlation ID.

    Iterators and writers each hold one, bound to the correlation ID of
    their configuration.
    """

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        """Initialize correlation logger.

        Args:
            name: Logger name (typically __name__)
            correlation_id: Optional ID shared by every record of one traversal
            component: Component name; defaults to the last segment of ``name``
        """
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.split(".")[-1]

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        combined_extra = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }
        if extra:
            combined_extra.update(extra)
        return combined_extra

    def is_enabled_for(self, level: int) -> bool:
        """Return True when a record at ``level`` would be emitted."""
        return self.logger.isEnabledFor(level)

    def bind(self, correlation_id: Optional[str]) -> "CorrelationLogger":
        """Return a logger for the same component with another correlation ID."""
        if correlation_id == self.correlation_id:
            return self
        return CorrelationLogger(self.logger.name, correlation_id, self.component)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log a per-step trace record."""
        self.logger.debug(message, extra=self._get_extra(extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log progress of a longer run, such as a benchmark."""
        self.logger.info(message, extra=self._get_extra(extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log input that was skipped or dropped."""
        self.logger.warning(message, extra=self._get_extra(extra))

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = True
    ) -> None:
        """Log a failed operation, with the active exception by default."""
        self.logger.error(message, extra=self._get_extra(extra), exc_info=exc_info)


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Optional ID shared by every record of one traversal
        component: Component name for structured logging

    Returns:
        CorrelationLogger instance
    """
    return CorrelationLogger(name, correlation_id, component)
