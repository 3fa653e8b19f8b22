"""Exception hierarchy for text iteration.

Stepping logic never raises for ordinary malformed input; these exceptions
cover contract violations, lifetime violations and the opt-in strict
malformed-input policy.
"""

from typing import Optional


class TextIteratorError(Exception):
    """Base exception for decoding and encoding iterator errors."""


class CapabilityError(TextIteratorError, TypeError):
    """An operation was requested outside the iterator's resolved capability tier."""


class InvalidatedIteratorError(TextIteratorError):
    """The storage behind an iterator or cursor is gone or has moved on."""


class CodecContractError(TextIteratorError):
    """A codec declared or returned something its contract does not allow."""


class EncodingError(TextIteratorError, ValueError):
    """A codec cannot represent a character in its code units."""


class MalformedInputError(TextIteratorError, ValueError):
    """Malformed code units were met under MalformedInputPolicy.RAISE.

    Attributes:
        position: Code-unit index where the malformed run starts
        consumed: Number of code units the codec consumed for the run
        reason: Codec-supplied description of the problem
    """

    def __init__(
        self,
        reason: str,
        position: Optional[int] = None,
        consumed: int = 0
    ) -> None:
        location = f" at code unit {position}" if position is not None else ""
        super().__init__(f"Malformed input{location}: {reason}")
        self.reason = reason
        self.position = position
        self.consumed = consumed
