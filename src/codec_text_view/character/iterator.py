"""Decoding iterators over code-unit storages.

A decoding iterator pairs a codec with a storage and yields one decoded
character per step. Which steps are available depends on the capability tier
resolved for the pair (see ``capability``), and each tier has its own class:

    InputTextIterator          advance()
    ForwardTextIterator        + base_range()
    BidirectionalTextIterator  + retreat()
    RandomAccessTextIterator   + arithmetic, distance, indexing, ordering

``make_text_iterator`` picks the class; operations a tier does not support
are simply absent from it.

Iterators hold their storage through a weak reference. They never keep it
alive, and using an iterator after its storage is gone raises
InvalidatedIteratorError.
"""

import logging
import weakref
from typing import Any, Dict, Iterator, Optional, Type

from codec_text_view.shared.config import MalformedInputPolicy, TextIteratorConfig
from codec_text_view.shared.errors import (
    CapabilityError,
    CodecContractError,
    InvalidatedIteratorError,
    MalformedInputError,
    TextIteratorError,
)
from codec_text_view.shared.logging import code_unit_span, get_logger

from .capability import CapabilityDescriptor, TraversalTier
from .codec import DecodeResult
from .state import copy_state, make_state
from .storage import CodeUnitRange, ReverseCursor

logger = get_logger(__name__, component="text_iterator")

_UNSET = object()


class InputTextIterator:
    """Forward-only decoding iterator; the only tier single-pass storage allows.

    Construction lands on the first decodable character. Two iterators are
    equal when the code units of their current characters start at the same
    place; the decoded value and the codec state play no part.
    """

    tier = TraversalTier.INPUT

    def __init__(
        self,
        codec: Any,
        storage: Any,
        cursor: Optional[Any] = None,
        state: Optional[Any] = None,
        config: Optional[TextIteratorConfig] = None,
        *,
        capability: Optional[CapabilityDescriptor] = None,
    ) -> None:
        """Initialize the iterator and decode the first character.

        Args:
            codec: Codec used to decode the storage's code units
            storage: Storage providing begin()/end(); it must outlive the iterator
            cursor: Starting cursor (defaults to ``storage.begin()``)
            state: Initial codec state; copied, never shared
            config: Iterator configuration
            capability: Pre-resolved capability descriptor

        Raises:
            CapabilityError: If the codec/storage pair cannot support this tier
        """
        capability = capability or CapabilityDescriptor.resolve(codec, storage)
        capability.require(self.tier)

        self._codec = codec
        self._capability = capability
        self._storage_ref = weakref.ref(storage)
        self._state = make_state(codec, state)
        self._config = config or TextIteratorConfig()
        self._logger = logger.bind(self._config.correlation_id)

        start = storage.begin() if cursor is None else cursor.clone()
        self._first = start
        self._last = start.clone()
        self._value: Any = _UNSET
        self.advance()

    @property
    def codec(self) -> Any:
        return self._codec

    @property
    def state(self) -> Any:
        """The codec state owned by this iterator."""
        return self._state

    @property
    def capability(self) -> CapabilityDescriptor:
        return self._capability

    @property
    def config(self) -> TextIteratorConfig:
        return self._config

    @property
    def value(self) -> Any:
        """The most recently decoded character.

        Raises:
            TextIteratorError: If no character has been decoded yet
        """
        if self._value is _UNSET:
            raise TextIteratorError("No character has been decoded by this iterator")
        return self._value

    def base(self) -> Any:
        """Cursor at the first code unit of the current character."""
        return self._first.clone()

    def _storage(self) -> Any:
        storage = self._storage_ref()
        if storage is None:
            raise InvalidatedIteratorError(
                "The storage behind this text iterator no longer exists"
            )
        return storage

    def advance(self) -> "InputTextIterator":
        """Step to the next decodable character.

        Decode is called repeatedly from the end of the current character
        until it produces a character or the storage is exhausted. Code units
        consumed without producing a character are skipped, so every call
        finishes within as many decode calls as there are code units left.
        If no character remains the iterator becomes equal to the end.
        """
        end = self._storage().end()
        decode = self._codec.decode

        self._first = self._last
        cursor = self._last.clone()
        while cursor != end:
            start = cursor.position
            result = decode(self._state, cursor, end)
            self._last = cursor.clone()
            if cursor.position == start:
                raise CodecContractError(
                    f"{type(self._codec).__name__}.decode consumed no code units "
                    f"at position {start}"
                )
            if result.character is not None:
                self._value = result.character
                break
            self._first = self._last
            self._skipped(result, start, cursor.position)
        return self

    def _skipped(self, result: DecodeResult, low: int, high: int) -> None:
        """Apply the malformed-input policy to a step that produced nothing."""
        extra = code_unit_span(low, high - low, result.error)
        if result.error is not None:
            policy = self._config.malformed_input
            if policy is MalformedInputPolicy.RAISE:
                raise MalformedInputError(result.error, position=low, consumed=high - low)
            if policy is MalformedInputPolicy.LOG:
                self._logger.warning("Skipped malformed code units", extra=extra)
                return
        if self._config.trace_steps and self._logger.is_enabled_for(logging.DEBUG):
            self._logger.debug("Decode step produced no character", extra=extra)

    def copy(self) -> "InputTextIterator":
        """Return an independent copy with its own codec state.

        Copies of a single-pass iterator still share the underlying stream:
        advancing one leaves the others stale.
        """
        duplicate = object.__new__(type(self))
        duplicate.__dict__.update(self.__dict__)
        duplicate._state = copy_state(self._state)
        duplicate._first = self._first.clone()
        duplicate._last = self._last.clone()
        return duplicate

    __copy__ = copy

    def __eq__(self, other: object) -> bool:
        if isinstance(other, InputTextIterator):
            return self._first == other._first
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        value = "<none>" if self._value is _UNSET else repr(self._value)
        return f"{type(self).__name__}(position={self._first.position}, value={value})"


class ForwardTextIterator(InputTextIterator):
    """Multi-pass forward iterator that exposes the consumed code units."""

    tier = TraversalTier.FORWARD

    def base_range(self) -> CodeUnitRange:
        """The code units ``[first, last)`` decoded into the current character."""
        return CodeUnitRange(self._first.clone(), self._last.clone())


class BidirectionalTextIterator(ForwardTextIterator):
    """Forward iterator that can also step backward with reverse_decode."""

    tier = TraversalTier.BIDIRECTIONAL

    def retreat(self) -> "BidirectionalTextIterator":
        """Step to the previous decodable character.

        Scans backward from the start of the current character with the
        codec's reverse_decode until a character is produced or the start of
        the storage is reached. The consumed range matches what a forward
        step landing on the same character would have produced, provided the
        codec's two entry points agree.
        """
        storage = self._storage()
        reverse_decode = self._codec.reverse_decode

        self._last = self._first
        rcursor = ReverseCursor(self._last.clone())
        rend = ReverseCursor(storage.begin())
        while rcursor != rend:
            start = rcursor.position
            result = reverse_decode(self._state, rcursor, rend)
            self._first = rcursor.base()
            if rcursor.position == start:
                raise CodecContractError(
                    f"{type(self._codec).__name__}.reverse_decode consumed no code "
                    f"units at position {start}"
                )
            if result.character is not None:
                self._value = result.character
                break
            self._last = self._first
            self._skipped(result, rcursor.position, start)
        return self


class RandomAccessTextIterator(BidirectionalTextIterator):
    """Iterator over a fixed-width codec and offsettable storage.

    Offsets jump by whole characters with code-unit arithmetic and then
    decode exactly one character; distances never decode at all.
    """

    tier = TraversalTier.RANDOM_ACCESS

    def __iadd__(self, n: int) -> "RandomAccessTextIterator":
        if not isinstance(n, int):
            return NotImplemented
        width = self._codec.max_code_units
        if n < 0:
            self._first = self._first + (n + 1) * width
            self.retreat()
        elif n > 0:
            self._last = self._last + (n - 1) * width
            self.advance()
        return self

    def __isub__(self, n: int) -> "RandomAccessTextIterator":
        if not isinstance(n, int):
            return NotImplemented
        self += -n
        return self

    def __add__(self, n: int) -> "RandomAccessTextIterator":
        if not isinstance(n, int):
            return NotImplemented
        moved = self.copy()
        moved += n
        return moved  # type: ignore[return-value]

    __radd__ = __add__

    def __sub__(self, other: Any) -> Any:
        if isinstance(other, int):
            moved = self.copy()
            moved -= other
            return moved
        if isinstance(other, RandomAccessTextIterator):
            return self._distance(other)
        return NotImplemented

    def _distance(self, other: "RandomAccessTextIterator") -> int:
        units = self._first - other._first
        return units // self._codec.max_code_units

    def __getitem__(self, n: int) -> Any:
        # A value, not a reference: the character lives in a temporary iterator.
        return (self + n).value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RandomAccessTextIterator):
            return NotImplemented
        return other._distance(self) > 0

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, RandomAccessTextIterator):
            return NotImplemented
        return self._distance(other) > 0

    def __le__(self, other: object) -> bool:
        if not isinstance(other, RandomAccessTextIterator):
            return NotImplemented
        return not self > other

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, RandomAccessTextIterator):
            return NotImplemented
        return not self < other


_TIER_CLASSES: Dict[TraversalTier, Type[InputTextIterator]] = {
    TraversalTier.INPUT: InputTextIterator,
    TraversalTier.FORWARD: ForwardTextIterator,
    TraversalTier.BIDIRECTIONAL: BidirectionalTextIterator,
    TraversalTier.RANDOM_ACCESS: RandomAccessTextIterator,
}


def text_iterator_class(tier: TraversalTier) -> Type[InputTextIterator]:
    """Return the iterator class that implements ``tier``."""
    return _TIER_CLASSES[tier]


def make_text_iterator(
    codec: Any,
    storage: Any,
    cursor: Optional[Any] = None,
    state: Optional[Any] = None,
    config: Optional[TextIteratorConfig] = None,
) -> InputTextIterator:
    """Build the strongest decoding iterator the codec/storage pair supports.

    Args:
        codec: Codec used to decode the storage's code units
        storage: Storage providing begin()/end(); it must outlive the iterator
        cursor: Starting cursor (defaults to ``storage.begin()``)
        state: Initial codec state (defaults to a fresh ``codec.state_type()``)
        config: Iterator configuration

    Returns:
        An iterator of the class matching the resolved tier, positioned on
        the first decodable character at or after ``cursor``
    """
    capability = CapabilityDescriptor.resolve(codec, storage)
    iterator_class = _TIER_CLASSES[capability.tier]
    return iterator_class(codec, storage, cursor, state, config, capability=capability)


def make_text_end(
    codec: Any,
    storage: Any,
    state: Optional[Any] = None,
    config: Optional[TextIteratorConfig] = None,
) -> InputTextIterator:
    """Build the past-the-end iterator of a multi-pass storage.

    Raises:
        CapabilityError: For single-pass storage, whose end is only
            expressible as a TextSentinel
    """
    capability = CapabilityDescriptor.resolve(codec, storage)
    if capability.tier is TraversalTier.INPUT:
        raise CapabilityError(
            "Single-pass storage has no end iterator; compare against a TextSentinel"
        )
    return make_text_iterator(codec, storage, storage.end(), state, config)


def iter_characters(first: InputTextIterator, last: Any) -> Iterator[Any]:
    """Yield the characters from ``first`` up to, not including, ``last``.

    ``last`` may be an iterator or a TextSentinel. ``first`` itself is not
    moved, although for single-pass storage the stream underneath it is.
    """
    it = first.copy()
    while it != last:
        yield it.value
        it.advance()
