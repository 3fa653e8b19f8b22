"""End marker for decoding iterators.

A sentinel remembers only a storage's end boundary, so it can terminate a
traversal even over storage that offers no end iterator, such as a
single-pass stream.
"""

from typing import Any

from codec_text_view.shared.errors import CapabilityError

from .iterator import InputTextIterator
from .storage import RandomAccessCursor


def _ordering_unsupported(boundary: Any) -> CapabilityError:
    return CapabilityError(
        f"{type(boundary).__name__} boundaries have no ordering; "
        "sentinels over this storage only support == and !="
    )


class TextSentinel:
    """Stateless end marker comparable against decoding iterators.

    Any two sentinels are equal. A sentinel equals an iterator exactly when
    the iterator's current character starts at the sentinel's boundary.
    Ordering against an iterator is available only when the storage's
    cursors are themselves ordered.
    """

    def __init__(self, boundary: Any) -> None:
        if isinstance(boundary, InputTextIterator):
            boundary = boundary.base()
        self._boundary = boundary

    @classmethod
    def from_storage(cls, storage: Any) -> "TextSentinel":
        """Sentinel at a storage's native end boundary."""
        return cls(storage.end())

    @classmethod
    def from_iterator(cls, iterator: InputTextIterator) -> "TextSentinel":
        """Sentinel at an iterator's current position."""
        return cls(iterator.base())

    def base(self) -> Any:
        return self._boundary

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TextSentinel):
            return True
        if isinstance(other, InputTextIterator):
            return other.base() == self._boundary
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None  # type: ignore[assignment]

    def _compare(self, other: InputTextIterator, op: str) -> bool:
        boundary = self._boundary
        position = other.base()
        if not (
            isinstance(boundary, RandomAccessCursor)
            and isinstance(position, RandomAccessCursor)
        ):
            raise _ordering_unsupported(boundary)
        return getattr(boundary, op)(position)

    def __lt__(self, other: object) -> bool:
        if isinstance(other, TextSentinel):
            return False
        if isinstance(other, InputTextIterator):
            return self._compare(other, "__lt__")
        return NotImplemented

    def __gt__(self, other: object) -> bool:
        if isinstance(other, TextSentinel):
            return False
        if isinstance(other, InputTextIterator):
            return self._compare(other, "__gt__")
        return NotImplemented

    def __le__(self, other: object) -> bool:
        if isinstance(other, TextSentinel):
            return True
        if isinstance(other, InputTextIterator):
            return self._compare(other, "__le__")
        return NotImplemented

    def __ge__(self, other: object) -> bool:
        if isinstance(other, TextSentinel):
            return True
        if isinstance(other, InputTextIterator):
            return self._compare(other, "__ge__")
        return NotImplemented

    def __repr__(self) -> str:
        return f"TextSentinel({self._boundary!r})"


def make_text_sentinel(storage: Any) -> TextSentinel:
    """Sentinel marking the end of ``storage``."""
    return TextSentinel.from_storage(storage)
