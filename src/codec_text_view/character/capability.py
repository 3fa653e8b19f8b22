"""Capability resolution for decoding iterators.

A decoding iterator can only traverse as far as both of its collaborators
allow. The storage cursor contributes its own power (single-pass,
multi-pass, reversible, offsettable) and the codec contributes what it can
decode (forward only, forward and reverse, or fixed width). The resulting
traversal tier is the weaker of the two:

    Storage cursor   Codec power                  Tier
    --------------   --------------------------   -------------
    single-pass      any                          INPUT
    multi-pass       any                          FORWARD
    reversible       decode only                  FORWARD
    reversible       reverse decode / fixed width BIDIRECTIONAL
    offsettable      decode only                  FORWARD
    offsettable      reverse decode               BIDIRECTIONAL
    offsettable      fixed width                  RANDOM_ACCESS

Resolution is done once when an iterator is built; the stepping code never
consults it again.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict

from codec_text_view.shared.errors import CapabilityError, CodecContractError


class StoragePower(IntEnum):
    """Traversal power of a storage cursor, weakest first."""
    SINGLE_PASS = 1
    MULTI_PASS = 2
    REVERSIBLE = 3
    OFFSETTABLE = 4


class CodecPower(IntEnum):
    """Decoding power of a codec, weakest first."""
    DECODE_ONLY = 1
    REVERSE_DECODE = 2
    FIXED_WIDTH = 3


class TraversalTier(IntEnum):
    """Operator set exposed by a decoding iterator, weakest first."""
    INPUT = 1
    FORWARD = 2
    BIDIRECTIONAL = 3
    RANDOM_ACCESS = 4

    @property
    def exposes_range(self) -> bool:
        """Whether the consumed code-unit range can be inspected."""
        return self >= TraversalTier.FORWARD

    @property
    def can_retreat(self) -> bool:
        """Whether the iterator can step backward."""
        return self >= TraversalTier.BIDIRECTIONAL

    @property
    def supports_arithmetic(self) -> bool:
        """Whether offsets, distances and ordering are available."""
        return self is TraversalTier.RANDOM_ACCESS


_STORAGE_CEILING: Dict[StoragePower, TraversalTier] = {
    StoragePower.SINGLE_PASS: TraversalTier.INPUT,
    StoragePower.MULTI_PASS: TraversalTier.FORWARD,
    StoragePower.REVERSIBLE: TraversalTier.BIDIRECTIONAL,
    StoragePower.OFFSETTABLE: TraversalTier.RANDOM_ACCESS,
}

_CODEC_CEILING: Dict[CodecPower, TraversalTier] = {
    CodecPower.DECODE_ONLY: TraversalTier.FORWARD,
    CodecPower.REVERSE_DECODE: TraversalTier.BIDIRECTIONAL,
    CodecPower.FIXED_WIDTH: TraversalTier.RANDOM_ACCESS,
}


def storage_power_of(storage: Any) -> StoragePower:
    """Return the declared power of a storage or cursor.

    Raises:
        CapabilityError: If the object does not declare a StoragePower
    """
    power = getattr(storage, "power", None)
    if not isinstance(power, StoragePower):
        raise CapabilityError(
            f"{type(storage).__name__} does not declare a StoragePower"
        )
    return power


def codec_power_of(codec: Any) -> CodecPower:
    """Classify a codec by what it guarantees.

    Random access is licensed by the fixed-width guarantee alone, never by
    the mere presence of a method.

    Raises:
        CodecContractError: If the codec's declarations are inconsistent
    """
    if not callable(getattr(codec, "decode", None)):
        raise CodecContractError(f"{type(codec).__name__} has no decode()")

    max_code_units = getattr(codec, "max_code_units", None)
    if not isinstance(max_code_units, int) or max_code_units < 1:
        raise CodecContractError(
            f"{type(codec).__name__}.max_code_units must be an integer >= 1, "
            f"got {max_code_units!r}"
        )

    reversible = callable(getattr(codec, "reverse_decode", None))
    if getattr(codec, "fixed_width", False):
        if not reversible:
            raise CodecContractError(
                f"{type(codec).__name__} declares fixed width but has no "
                "reverse_decode()"
            )
        return CodecPower.FIXED_WIDTH
    if reversible:
        return CodecPower.REVERSE_DECODE
    return CodecPower.DECODE_ONLY


def resolve_tier(storage_power: StoragePower, codec_power: CodecPower) -> TraversalTier:
    """Resolve the traversal tier for a storage/codec pair."""
    return min(_STORAGE_CEILING[storage_power], _CODEC_CEILING[codec_power])


@dataclass(frozen=True)
class CapabilityDescriptor:
    """Static classification of a codec x storage-cursor pair.

    Attributes:
        storage_power: Power of the storage cursor
        codec_power: Power of the codec
        tier: Resulting traversal tier
    """
    storage_power: StoragePower
    codec_power: CodecPower
    tier: TraversalTier

    @classmethod
    def resolve(cls, codec: Any, storage: Any) -> "CapabilityDescriptor":
        """Compute the descriptor for ``codec`` traversing ``storage``."""
        storage_power = storage_power_of(storage)
        codec_power = codec_power_of(codec)
        return cls(
            storage_power=storage_power,
            codec_power=codec_power,
            tier=resolve_tier(storage_power, codec_power),
        )

    def require(self, tier: TraversalTier) -> None:
        """Fail unless this pair supports at least ``tier``.

        Raises:
            CapabilityError: If the resolved tier is weaker than ``tier``
        """
        if self.tier < tier:
            raise CapabilityError(
                f"{tier.name} traversal requested but {self.storage_power.name} "
                f"storage with a {self.codec_power.name} codec only supports "
                f"{self.tier.name}"
            )
