"""Codec Text View.

Iterate over the characters encoded in a sequence of code units through a
pluggable, possibly stateful codec, and write characters back out as code
units. The traversal an iterator offers (single pass, forward, bidirectional,
random access) is resolved from what both the storage and the codec support.

Progressive API Disclosure:
- Level 1: Factories - make_text_iterator(), make_text_sentinel(), make_text_writer()
- Level 2: Tier classes - InputTextIterator ... RandomAccessTextIterator
- Level 3: Contracts - Codec, storages and cursors for custom collaborators
"""

__version__ = "0.1.0"
__author__ = "Codec Text View Team"

# Level 1: Factories and the iteration helper
from .character.iterator import (
    BidirectionalTextIterator,
    ForwardTextIterator,
    InputTextIterator,
    RandomAccessTextIterator,
    iter_characters,
    make_text_end,
    make_text_iterator,
)
from .character.output import TextWriter, make_text_writer
from .character.sentinel import TextSentinel, make_text_sentinel

# Level 3: Collaborator contracts
from .character.capability import CapabilityDescriptor, TraversalTier
from .character.codec import Codec, DecodeResult
from .character.storage import CodeUnitSequence, CodeUnitStream

# Configuration and errors
from .shared.config import MalformedInputPolicy, TextIteratorConfig
from .shared.errors import (
    CapabilityError,
    CodecContractError,
    InvalidatedIteratorError,
    MalformedInputError,
    TextIteratorError,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Factories
    "make_text_iterator",
    "make_text_end",
    "make_text_sentinel",
    "make_text_writer",
    "iter_characters",

    # Level 2: Iterator tiers
    "InputTextIterator",
    "ForwardTextIterator",
    "BidirectionalTextIterator",
    "RandomAccessTextIterator",
    "TextSentinel",
    "TextWriter",

    # Level 3: Contracts
    "CapabilityDescriptor",
    "TraversalTier",
    "Codec",
    "DecodeResult",
    "CodeUnitSequence",
    "CodeUnitStream",

    # Configuration and errors
    "MalformedInputPolicy",
    "TextIteratorConfig",
    "CapabilityError",
    "CodecContractError",
    "InvalidatedIteratorError",
    "MalformedInputError",
    "TextIteratorError",
]
