"""Code-unit storages and the cursors that traverse them.

Cursor contract used by iterators and codecs:
    position   code-unit index of the cursor
    read()     code unit at the cursor
    advance()  step one code unit forward, in place
    clone()    independent cursor at the same position
    ==         same storage, same position

Reversible cursors add ``retreat()``. Offsettable cursors add
``advance_by(n)``, ``cursor + n``, ``cursor - n``, ``cursor - cursor`` and
ordering. A cursor's class, through its ``power`` attribute, is what tells
the capability layer how far it can go.
"""

from typing import Any, BinaryIO, Dict, Iterable, Iterator, Sequence, Type

from codec_text_view.shared.errors import CapabilityError, InvalidatedIteratorError
from codec_text_view.shared.logging import get_logger

from .capability import StoragePower

DEFAULT_CHUNK_SIZE = 8192

logger = get_logger(__name__, component="code_unit_storage")

_NOTHING = object()


class _StreamSource:
    """One-pass source shared by every cursor of a CodeUnitStream.

    Holds at most one code unit of lookahead so that end-of-stream can be
    detected without consuming anything.
    """

    def __init__(self, units: Iterator[Any]) -> None:
        self._units = units
        self._lookahead: Any = _NOTHING
        self._exhausted = False
        self.position = 0

    def _fill(self) -> bool:
        if self._lookahead is _NOTHING and not self._exhausted:
            try:
                self._lookahead = next(self._units)
            except StopIteration:
                self._exhausted = True
        return self._lookahead is not _NOTHING

    def _check(self, position: int) -> None:
        if position != self.position:
            raise InvalidatedIteratorError(
                f"Stream cursor at code unit {position} is stale; "
                f"the stream has moved on to {self.position}"
            )

    def at_end(self, position: int) -> bool:
        # A stale cursor is behind the stream, never at its end.
        return position == self.position and not self._fill()

    def read(self, position: int) -> Any:
        self._check(position)
        if not self._fill():
            raise IndexError("read past the end of the code unit stream")
        return self._lookahead

    def advance(self, position: int) -> None:
        self._check(position)
        if not self._fill():
            raise IndexError("advance past the end of the code unit stream")
        self._lookahead = _NOTHING
        self.position += 1


class InputCursor:
    """Single-pass cursor over a CodeUnitStream.

    Copies share the underlying stream: once any copy advances, the others
    are stale and reading through them raises InvalidatedIteratorError.
    """

    power = StoragePower.SINGLE_PASS

    def __init__(self, source: _StreamSource, position: int) -> None:
        self._source = source
        self.position = position

    def read(self) -> Any:
        return self._source.read(self.position)

    def advance(self) -> None:
        self._source.advance(self.position)
        self.position += 1

    def clone(self) -> "InputCursor":
        return InputCursor(self._source, self.position)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, InputCursor):
            return self._source is other._source and self.position == other.position
        if isinstance(other, StreamEnd):
            return other == self
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"InputCursor(position={self.position})"


class StreamEnd:
    """End boundary of a CodeUnitStream.

    Compares equal to a cursor exactly when the stream is exhausted at that
    cursor's position. Stream boundaries have no ordering.
    """

    def __init__(self, source: _StreamSource) -> None:
        self._source = source

    def __eq__(self, other: object) -> bool:
        if isinstance(other, StreamEnd):
            return self._source is other._source
        if isinstance(other, InputCursor):
            return other._source is self._source and self._source.at_end(other.position)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return "StreamEnd()"


class CodeUnitStream:
    """Single-pass storage over any iterable of code units."""

    power = StoragePower.SINGLE_PASS

    def __init__(self, units: Iterable[Any]) -> None:
        self._source = _StreamSource(iter(units))

    @property
    def position(self) -> int:
        """Number of code units consumed from the stream so far."""
        return self._source.position

    def begin(self) -> InputCursor:
        """Cursor at the current stream position."""
        return InputCursor(self._source, self._source.position)

    def end(self) -> StreamEnd:
        return StreamEnd(self._source)

    @classmethod
    def from_binary_io(
        cls,
        fp: BinaryIO,
        unit_size: int = 1,
        byteorder: str = "little",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> "CodeUnitStream":
        """Stream integer code units out of a binary file object.

        Args:
            fp: Binary file object to read from
            unit_size: Bytes per code unit (1 for UTF-8, 2 for UTF-16, ...)
            byteorder: Byte order of multi-byte code units
            chunk_size: Bytes requested per read

        Returns:
            CodeUnitStream yielding one int per code unit
        """
        if unit_size <= 0:
            raise ValueError("unit_size must be > 0")
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if byteorder not in ("little", "big"):
            raise ValueError("byteorder must be 'little' or 'big'")
        return cls(_read_units(fp, unit_size, byteorder, chunk_size))


def _read_units(
    fp: BinaryIO, unit_size: int, byteorder: str, chunk_size: int
) -> Iterator[int]:
    pending = b""
    while True:
        chunk = fp.read(chunk_size)
        if not chunk:
            break
        data = pending + chunk
        usable = len(data) - len(data) % unit_size
        if unit_size == 1:
            yield from data
        else:
            for offset in range(0, usable, unit_size):
                yield int.from_bytes(data[offset:offset + unit_size], byteorder)
        pending = data[usable:]
    if pending:
        logger.warning(
            "Dropping trailing partial code unit",
            extra={"trailing_bytes": len(pending), "unit_size": unit_size},
        )


class ForwardCursor:
    """Multi-pass cursor over a Python sequence."""

    power = StoragePower.MULTI_PASS

    def __init__(self, units: Sequence[Any], position: int = 0) -> None:
        self._units = units
        self.position = position

    def read(self) -> Any:
        if self.position >= len(self._units):
            raise IndexError("read past the end of the code unit sequence")
        return self._units[self.position]

    def advance(self) -> None:
        if self.position >= len(self._units):
            raise IndexError("advance past the end of the code unit sequence")
        self.position += 1

    def clone(self) -> "ForwardCursor":
        return type(self)(self._units, self.position)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ForwardCursor):
            return self._units is other._units and self.position == other.position
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(position={self.position})"


class BidirectionalCursor(ForwardCursor):
    """Multi-pass cursor that can also step backward."""

    power = StoragePower.REVERSIBLE

    def retreat(self) -> None:
        if self.position <= 0:
            raise IndexError("retreat before the start of the code unit sequence")
        self.position -= 1


class RandomAccessCursor(BidirectionalCursor):
    """Cursor that can move by any offset in constant time and is ordered."""

    power = StoragePower.OFFSETTABLE

    def advance_by(self, n: int) -> None:
        target = self.position + n
        if not 0 <= target <= len(self._units):
            raise IndexError(
                f"offset {n} from code unit {self.position} leaves the sequence"
            )
        self.position = target

    def __add__(self, n: int) -> "RandomAccessCursor":
        if not isinstance(n, int):
            return NotImplemented
        moved = self.clone()
        moved.advance_by(n)
        return moved  # type: ignore[return-value]

    __radd__ = __add__

    def __sub__(self, other: Any) -> Any:
        if isinstance(other, int):
            return self + (-other)
        if isinstance(other, RandomAccessCursor):
            return self._distance(other)
        return NotImplemented

    def _distance(self, other: "RandomAccessCursor") -> int:
        if self._units is not other._units:
            raise CapabilityError("cursors over different storages have no distance")
        return self.position - other.position

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RandomAccessCursor):
            return NotImplemented
        return self._distance(other) < 0

    def __le__(self, other: object) -> bool:
        if not isinstance(other, RandomAccessCursor):
            return NotImplemented
        return self._distance(other) <= 0

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, RandomAccessCursor):
            return NotImplemented
        return self._distance(other) > 0

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, RandomAccessCursor):
            return NotImplemented
        return self._distance(other) >= 0


_CURSOR_TYPES: Dict[StoragePower, Type[ForwardCursor]] = {
    StoragePower.MULTI_PASS: ForwardCursor,
    StoragePower.REVERSIBLE: BidirectionalCursor,
    StoragePower.OFFSETTABLE: RandomAccessCursor,
}


class CodeUnitSequence:
    """Multi-pass storage over a Python sequence of code units.

    ``power`` may be lowered below OFFSETTABLE to model storages such as
    singly or doubly linked lists whose cursors cannot jump.
    """

    def __init__(
        self,
        units: Sequence[Any],
        power: StoragePower = StoragePower.OFFSETTABLE,
    ) -> None:
        if power not in _CURSOR_TYPES:
            raise CapabilityError(
                f"CodeUnitSequence cannot provide {power.name} cursors; "
                "use CodeUnitStream for single-pass input"
            )
        self.units = units
        self.power = power
        self._cursor_type = _CURSOR_TYPES[power]

    def begin(self) -> ForwardCursor:
        return self._cursor_type(self.units, 0)

    def end(self) -> ForwardCursor:
        return self._cursor_type(self.units, len(self.units))

    def cursor_at(self, position: int) -> ForwardCursor:
        """Cursor at an arbitrary code-unit index."""
        if not 0 <= position <= len(self.units):
            raise IndexError(f"code unit index {position} out of range")
        return self._cursor_type(self.units, position)

    def __len__(self) -> int:
        return len(self.units)

    def __repr__(self) -> str:
        return f"CodeUnitSequence(len={len(self.units)}, power={self.power.name})"


class ReverseCursor:
    """Adapts a reversible cursor for backward traversal.

    ``read()`` yields the code unit just before the base position and
    ``advance()`` steps the base backward, so codecs read code units in
    reverse order with the same calls they use going forward.
    """

    def __init__(self, base: BidirectionalCursor) -> None:
        if not hasattr(base, "retreat"):
            raise CapabilityError(
                f"{type(base).__name__} cannot be traversed backward"
            )
        self._base = base

    @property
    def position(self) -> int:
        return self._base.position

    def read(self) -> Any:
        probe = self._base.clone()
        probe.retreat()  # type: ignore[attr-defined]
        return probe.read()

    def advance(self) -> None:
        self._base.retreat()

    def base(self) -> BidirectionalCursor:
        """Forward cursor at the reverse cursor's position."""
        return self._base.clone()  # type: ignore[return-value]

    def clone(self) -> "ReverseCursor":
        return ReverseCursor(self._base.clone())  # type: ignore[arg-type]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ReverseCursor):
            return self._base == other._base
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ReverseCursor(position={self.position})"


class CodeUnitRange:
    """The code units ``[first, last)`` consumed to produce one character."""

    def __init__(self, first: Any, last: Any) -> None:
        self.first = first
        self.last = last

    def begin(self) -> Any:
        return self.first.clone()

    def end(self) -> Any:
        return self.last.clone()

    def __iter__(self) -> Iterator[Any]:
        cursor = self.first.clone()
        while cursor != self.last:
            yield cursor.read()
            cursor.advance()

    def __len__(self) -> int:
        return self.last.position - self.first.position

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CodeUnitRange):
            return self.first == other.first and self.last == other.last
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"CodeUnitRange({self.first.position}, {self.last.position})"
