"""Encoding iterator: characters in, code units out.

A TextWriter is a write sink. Every value written is handed to the codec at
once and its code units land in the output cursor before ``write`` returns;
there is no buffer, no flush and nothing happens when a writer is dropped.
"""

import logging
from typing import Any, BinaryIO, Iterable, MutableSequence, Optional

from codec_text_view.shared.config import TextIteratorConfig
from codec_text_view.shared.errors import CapabilityError, CodecContractError
from codec_text_view.shared.logging import get_logger

from .state import StateTransition, copy_state, make_state

logger = get_logger(__name__, component="text_writer")


class AppendCursor:
    """Output cursor appending code units to a mutable sequence."""

    def __init__(self, target: MutableSequence[Any]) -> None:
        if not hasattr(target, "append"):
            raise TypeError(f"{type(target).__name__} has no append()")
        self.target = target
        self.count = 0

    def put(self, unit: Any) -> None:
        self.target.append(unit)
        self.count += 1

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AppendCursor):
            return self.target is other.target and self.count == other.count
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"AppendCursor(count={self.count})"


class BinaryIOCursor:
    """Output cursor writing integer code units to a binary file object."""

    def __init__(self, fp: BinaryIO, unit_size: int = 1, byteorder: str = "little") -> None:
        if unit_size <= 0:
            raise ValueError("unit_size must be > 0")
        if byteorder not in ("little", "big"):
            raise ValueError("byteorder must be 'little' or 'big'")
        self.fp = fp
        self.unit_size = unit_size
        self.byteorder = byteorder
        self.count = 0

    def put(self, unit: int) -> None:
        self.fp.write(unit.to_bytes(self.unit_size, self.byteorder))
        self.count += 1

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BinaryIOCursor):
            return self.fp is other.fp and self.count == other.count
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"BinaryIOCursor(count={self.count}, unit_size={self.unit_size})"


class TextWriter:
    """Encoding iterator over an output cursor.

    ``write`` accepts either a character, which is encoded, or a state
    transition token, which emits only the code units needed to move the
    codec's state (shift sequences, byte order marks).
    """

    def __init__(
        self,
        codec: Any,
        output: Any,
        state: Optional[Any] = None,
        config: Optional[TextIteratorConfig] = None,
    ) -> None:
        """Initialize the writer.

        Args:
            codec: Codec providing encode() and optionally encode_state_transition()
            output: Output cursor with put(); it is not owned by the writer
            state: Initial codec state; copied, never shared
            config: Iterator configuration

        Raises:
            CapabilityError: If the codec cannot encode
        """
        if not callable(getattr(codec, "encode", None)):
            raise CapabilityError(f"{type(codec).__name__} cannot encode")
        if not callable(getattr(output, "put", None)):
            raise CapabilityError(f"{type(output).__name__} is not an output cursor")
        self._codec = codec
        self._output = output
        self._state = make_state(codec, state)
        self._config = config or TextIteratorConfig()
        self._logger = logger.bind(self._config.correlation_id)
        self.units_written = 0

    @property
    def codec(self) -> Any:
        return self._codec

    @property
    def state(self) -> Any:
        """The codec state owned by this writer."""
        return self._state

    def base(self) -> Any:
        """The output cursor receiving code units."""
        return self._output

    def _is_transition(self, value: Any) -> bool:
        if isinstance(value, StateTransition):
            return True
        transition_type = getattr(self._codec, "state_transition_type", None)
        return isinstance(transition_type, type) and isinstance(value, transition_type)

    def write(self, value: Any) -> "TextWriter":
        """Encode one character or state transition into the output cursor."""
        if self._is_transition(value):
            encode_transition = getattr(self._codec, "encode_state_transition", None)
            if not callable(encode_transition):
                raise CapabilityError(
                    f"{type(self._codec).__name__} has no state transitions"
                )
            emitted = encode_transition(self._state, self._output, value)
        else:
            emitted = self._codec.encode(self._state, self._output, value)

        if not isinstance(emitted, int) or emitted < 0:
            raise CodecContractError(
                f"{type(self._codec).__name__} returned {emitted!r} code units"
            )
        self.units_written += emitted
        if self._config.trace_steps and self._logger.is_enabled_for(logging.DEBUG):
            self._logger.debug(
                "Encoded value",
                extra={"value": repr(value), "code_units": emitted},
            )
        return self

    def write_all(self, values: Iterable[Any]) -> "TextWriter":
        """Write each value in order."""
        for value in values:
            self.write(value)
        return self

    def copy(self) -> "TextWriter":
        """Return a writer with a copy of the state over the same output cursor."""
        duplicate = object.__new__(TextWriter)
        duplicate.__dict__.update(self.__dict__)
        duplicate._state = copy_state(self._state)
        return duplicate

    __copy__ = copy

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TextWriter):
            return self._output == other._output
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"TextWriter(codec={self._codec!r}, units_written={self.units_written})"


def make_text_writer(
    codec: Any,
    output: Any,
    state: Optional[Any] = None,
    config: Optional[TextIteratorConfig] = None,
) -> TextWriter:
    """Build a TextWriter over an output cursor or an appendable sequence.

    Args:
        codec: Codec used to encode
        output: Output cursor, or a list/bytearray/array to append to
        state: Initial codec state
        config: Iterator configuration

    Returns:
        TextWriter appending to ``output``
    """
    if not callable(getattr(output, "put", None)):
        output = AppendCursor(output)
    return TextWriter(codec, output, state, config)
