"""Character layer: decoding and encoding iterators over code-unit storages.

This package resolves what traversal a codec/storage pair can offer, steps
through decoded characters at that tier, and writes characters back out as
code units.
"""

from .capability import (
    CapabilityDescriptor,
    CodecPower,
    StoragePower,
    TraversalTier,
    codec_power_of,
    resolve_tier,
    storage_power_of,
)
from .codec import Codec, DecodeResult, read_unit
from .codecs import (
    ASCIICodec,
    BOMState,
    BOMTransition,
    ForwardUTF8Codec,
    Latin1Codec,
    TrivialCodec,
    UTF8BOMCodec,
    UTF8Codec,
    UTF16Codec,
    UTF32Codec,
    get_codec,
    get_codec_spec,
)
from .iterator import (
    BidirectionalTextIterator,
    ForwardTextIterator,
    InputTextIterator,
    RandomAccessTextIterator,
    iter_characters,
    make_text_end,
    make_text_iterator,
    text_iterator_class,
)
from .output import AppendCursor, BinaryIOCursor, TextWriter, make_text_writer
from .sentinel import TextSentinel, make_text_sentinel
from .state import (
    EmptyState,
    StateTransition,
    TrivialStateTransition,
    copy_state,
    make_state,
)
from .storage import (
    BidirectionalCursor,
    CodeUnitRange,
    CodeUnitSequence,
    CodeUnitStream,
    ForwardCursor,
    InputCursor,
    RandomAccessCursor,
    ReverseCursor,
    StreamEnd,
)

__all__ = [
    # Modules
    "capability",
    "codec",
    "codecs",
    "iterator",
    "output",
    "sentinel",
    "state",
    "storage",
    # Capability resolution
    "CapabilityDescriptor",
    "CodecPower",
    "StoragePower",
    "TraversalTier",
    "codec_power_of",
    "resolve_tier",
    "storage_power_of",
    # Codec contract and reference codecs
    "Codec",
    "DecodeResult",
    "read_unit",
    "ASCIICodec",
    "BOMState",
    "BOMTransition",
    "ForwardUTF8Codec",
    "Latin1Codec",
    "TrivialCodec",
    "UTF8BOMCodec",
    "UTF8Codec",
    "UTF16Codec",
    "UTF32Codec",
    "get_codec",
    "get_codec_spec",
    # Decoding iterators
    "BidirectionalTextIterator",
    "ForwardTextIterator",
    "InputTextIterator",
    "RandomAccessTextIterator",
    "iter_characters",
    "make_text_end",
    "make_text_iterator",
    "text_iterator_class",
    "TextSentinel",
    "make_text_sentinel",
    # Encoding
    "AppendCursor",
    "BinaryIOCursor",
    "TextWriter",
    "make_text_writer",
    # State
    "EmptyState",
    "StateTransition",
    "TrivialStateTransition",
    "copy_state",
    "make_state",
    # Storage
    "BidirectionalCursor",
    "CodeUnitRange",
    "CodeUnitSequence",
    "CodeUnitStream",
    "ForwardCursor",
    "InputCursor",
    "RandomAccessCursor",
    "ReverseCursor",
    "StreamEnd",
]
