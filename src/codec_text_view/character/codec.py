"""Codec contract consumed by the decoding and encoding iterators.

A codec turns code units into characters and back. Iterators only ever call
the entry points below; they never look at code units themselves.

Required:
    decode(state, cursor, end) -> DecodeResult
        Read code units starting at ``cursor`` (advancing it in place, never
        past ``end``) and report the character produced, if any, and how many
        code units were consumed.

Optional, detected by presence:
    reverse_decode(state, rcursor, rend) -> DecodeResult
        Same contract over a ReverseCursor, reading code units backward.
    encode(state, out, character) -> int
        Append the code units of ``character`` to ``out``; return how many.
    encode_state_transition(state, out, token) -> int
        Append only the code units needed for a state transition.

Declarations:
    character_type, code_unit_type, state_type, state_transition_type,
    max_code_units (>= 1) and fixed_width. ``fixed_width = True`` promises
    that every character occupies exactly ``max_code_units`` code units.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, NamedTuple, Optional

from .state import EmptyState, TrivialStateTransition


class DecodeResult(NamedTuple):
    """Outcome of a single decode or reverse_decode call.

    Attributes:
        character: Decoded character, or None when none was produced
        consumed: Code units consumed by the call
        error: Reason the consumed code units were malformed, if they were
    """
    character: Any
    consumed: int
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """Whether a character was produced."""
        return self.character is not None


class Codec(ABC):
    """Base class for codecs.

    Subclasses implement ``decode`` and add ``reverse_decode``, ``encode``
    and ``encode_state_transition`` as their algorithm allows.
    """

    character_type: ClassVar[type] = str
    code_unit_type: ClassVar[type] = int
    state_type: ClassVar[Optional[Callable[[], Any]]] = EmptyState
    state_transition_type: ClassVar[type] = TrivialStateTransition
    max_code_units: ClassVar[int] = 1
    fixed_width: ClassVar[bool] = False

    @abstractmethod
    def decode(self, state: Any, cursor: Any, end: Any) -> DecodeResult:
        """Decode forward from ``cursor`` toward ``end``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def read_unit(cursor: Any) -> Any:
    """Read the code unit at ``cursor`` and advance past it."""
    unit = cursor.read()
    cursor.advance()
    return unit
