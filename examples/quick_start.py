#!/usr/bin/env python3
"""Quick start for codec-driven text iteration.

Walks through the three iterator tiers you are most likely to meet, then
writes text back out through an encoding iterator.
"""

import io
import sys
from pathlib import Path

# Add src to path for running examples directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import codec_text_view as ctv
from codec_text_view.character import BOMTransition, ForwardUTF8Codec, UTF8BOMCodec, UTF8Codec, UTF32Codec


def example_stream():
    """Example 1: single-pass input from a file object."""
    print("=== Example 1: Streaming UTF-8 ===")

    stream = ctv.CodeUnitStream.from_binary_io(io.BytesIO("A€ and more".encode("utf-8")))
    it = ctv.make_text_iterator(ForwardUTF8Codec(), stream)
    end = ctv.make_text_sentinel(stream)

    print(f"Tier: {it.capability.tier.name}")
    print("Text:", "".join(ctv.iter_characters(it, end)))
    print()


def example_bidirectional():
    """Example 2: walking UTF-8 backward."""
    print("=== Example 2: Bidirectional UTF-8 ===")

    storage = ctv.CodeUnitSequence(list("héllo\U0001F600".encode("utf-8")))
    begin = ctv.make_text_iterator(UTF8Codec(), storage)
    it = ctv.make_text_end(UTF8Codec(), storage)

    while it != begin:
        it.retreat()
        consumed = it.base_range()
        print(f"{it.value!r} from code units {list(consumed)}")
    print()


def example_random_access():
    """Example 3: fixed-width random access."""
    print("=== Example 3: Random access UTF-32 ===")

    storage = ctv.CodeUnitSequence([ord(c) for c in "random access"])
    begin = ctv.make_text_iterator(UTF32Codec(), storage)
    end = ctv.make_text_end(UTF32Codec(), storage)

    print(f"Length: {end - begin} characters")
    print(f"Character 7: {begin[7]!r}")
    print(f"Last character: {end[-1]!r}")
    print()


def example_writer():
    """Example 4: encoding with state transitions."""
    print("=== Example 4: Writing UTF-8 with a BOM ===")

    with_bom = []
    ctv.make_text_writer(UTF8BOMCodec(), with_bom).write_all("hi")

    without_bom = []
    writer = ctv.make_text_writer(UTF8BOMCodec(), without_bom)
    writer.write(BOMTransition.ASSUME_BOM_WRITTEN).write_all("hi")

    print(f"With BOM:    {bytes(with_bom)!r}")
    print(f"Without BOM: {bytes(without_bom)!r}")
    print()


def example_strict():
    """Example 5: failing on malformed input."""
    print("=== Example 5: Strict malformed-input policy ===")

    storage = ctv.CodeUnitSequence([0x61, 0xFF, 0x62])
    it = ctv.make_text_iterator(UTF8Codec(), storage, config=ctv.TextIteratorConfig.strict())
    try:
        it.advance()
    except ctv.MalformedInputError as e:
        print(f"Caught: {e}")
        print(f"Resumed at code unit {it.base().position}: {it.advance().value!r}")
    print()


if __name__ == "__main__":
    example_stream()
    example_bidirectional()
    example_random_access()
    example_writer()
    example_strict()
