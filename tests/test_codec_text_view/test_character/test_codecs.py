"""Tests for the reference codecs and the codec registry."""

import pytest

from codec_text_view.character.codec import Codec, DecodeResult, read_unit
from codec_text_view.character.codecs import (
    ASCIICodec,
    BOMState,
    BOMTransition,
    CODEC_REGISTRY,
    ForwardUTF8Codec,
    Latin1Codec,
    TrivialCodec,
    UTF8BOMCodec,
    UTF8Codec,
    UTF16Codec,
    UTF32Codec,
    get_codec,
    get_codec_spec,
    normalize_codec_name,
)
from codec_text_view.character.output import AppendCursor
from codec_text_view.character.state import EmptyState
from codec_text_view.character.storage import CodeUnitSequence, ReverseCursor
from codec_text_view.shared.errors import EncodingError


def decode_at(codec, units, position=0, state=None):
    """Run one forward decode and return (result, cursor position after)."""
    storage = CodeUnitSequence(units)
    cursor = storage.cursor_at(position)
    result = codec.decode(state or codec.state_type(), cursor, storage.end())
    return result, cursor.position


def reverse_decode_at(codec, units, position=None, state=None):
    """Run one reverse decode ending at ``position`` (default: the end)."""
    storage = CodeUnitSequence(units)
    start = storage.end() if position is None else storage.cursor_at(position)
    rcursor = ReverseCursor(start)
    result = codec.reverse_decode(
        state or codec.state_type(), rcursor, ReverseCursor(storage.begin())
    )
    return result, rcursor.position


def encode(codec, character, state=None):
    """Encode a single character and return the emitted code units."""
    units = []
    count = codec.encode(state or codec.state_type(), AppendCursor(units), character)
    assert count == len(units)
    return units


class TestCodecContract:
    """Test the Codec base class and DecodeResult."""

    def test_decode_result_ok(self):
        """Test that ok reflects whether a character was produced."""
        assert DecodeResult("a", 1).ok
        assert not DecodeResult(None, 1, "bad").ok
        assert DecodeResult("a", 1).error is None

    def test_codec_is_abstract(self):
        """Test that decode must be implemented."""
        with pytest.raises(TypeError):
            Codec()  # type: ignore[abstract]

    def test_default_declarations(self):
        """Test the class-level declarations inherited by codecs."""
        codec = ForwardUTF8Codec()

        assert codec.character_type is str
        assert codec.code_unit_type is int
        assert codec.state_type is EmptyState
        assert codec.fixed_width is False
        assert repr(codec) == "ForwardUTF8Codec()"

    def test_read_unit_advances(self):
        """Test the read-then-advance helper."""
        cursor = CodeUnitSequence([5, 6]).begin()

        assert read_unit(cursor) == 5
        assert cursor.position == 1


class TestTrivialCodecs:
    """Test one-unit-per-character codecs."""

    def test_trivial_round_trip(self):
        """Test that code units are code points."""
        codec = TrivialCodec()

        assert decode_at(codec, [0x1F600]) == (DecodeResult("\U0001F600", 1), 1)
        assert encode(codec, "\U0001F600") == [0x1F600]

    def test_ascii_rejects_high_units(self):
        """Test that ASCII reports units above 0x7F as malformed."""
        result, position = decode_at(ASCIICodec(), [0x80])

        assert result.character is None
        assert result.consumed == 1
        assert "ASCIICodec" in result.error
        assert position == 1

    def test_ascii_cannot_encode_euro(self):
        """Test encoding outside the repertoire."""
        with pytest.raises(EncodingError):
            encode(ASCIICodec(), "€")

    def test_latin1(self):
        """Test Latin-1 decodes the full byte range."""
        assert decode_at(Latin1Codec(), [0xE9])[0].character == "é"
        assert encode(Latin1Codec(), "ÿ") == [0xFF]

    def test_reverse_decode(self):
        """Test reverse decoding of a fixed-width codec."""
        result, position = reverse_decode_at(TrivialCodec(), [0x41, 0x42])

        assert result == DecodeResult("B", 1)
        assert position == 1

    def test_encode_rejects_strings(self):
        """Test that only single characters can be encoded."""
        with pytest.raises(EncodingError):
            encode(TrivialCodec(), "AB")


class TestUTF8:
    """Test UTF-8 decoding and encoding."""

    @pytest.mark.parametrize("character,units", [
        ("A", [0x41]),
        ("é", [0xC3, 0xA9]),
        ("€", [0xE2, 0x82, 0xAC]),
        ("\U0001F600", [0xF0, 0x9F, 0x98, 0x80]),
    ])
    def test_decode_and_encode(self, character, units):
        """Test each sequence length in both directions."""
        codec = UTF8Codec()

        assert decode_at(codec, units) == (DecodeResult(character, len(units)), len(units))
        assert reverse_decode_at(codec, units) == (DecodeResult(character, len(units)), 0)
        assert encode(codec, character) == list(character.encode("utf-8"))

    def test_invalid_lead_byte(self):
        """Test that a stray byte is consumed alone."""
        result, position = decode_at(UTF8Codec(), [0xFF, 0x41])

        assert result.character is None
        assert result.consumed == 1
        assert "lead byte" in result.error
        assert position == 1

    def test_truncated_sequence_leaves_next_lead(self):
        """Test that the byte interrupting a sequence is left for the next call."""
        result, position = decode_at(UTF8Codec(), [0xE2, 0x82, 0x41])

        assert result == DecodeResult(None, 2, "truncated UTF-8 sequence")
        assert position == 2

    def test_truncated_at_end(self):
        """Test a sequence cut off by the end of storage."""
        result, position = decode_at(UTF8Codec(), [0xE2, 0x82])

        assert result.character is None
        assert position == 2

    def test_overlong_encoding(self):
        """Test that overlong forms are malformed."""
        result, _ = decode_at(UTF8Codec(), [0xE0, 0x80, 0x80])

        assert result.character is None
        assert "overlong" in result.error

    def test_encoded_surrogate(self):
        """Test that surrogates encoded as UTF-8 are malformed."""
        result, _ = decode_at(UTF8Codec(), [0xED, 0xA0, 0x80])

        assert result.character is None
        assert "invalid" in result.error

    def test_reverse_orphan_continuations(self):
        """Test continuation bytes with no lead byte in reverse."""
        result, position = reverse_decode_at(UTF8Codec(), [0x41, 0x82, 0xAC])

        assert result.character is None
        assert result.consumed == 2
        assert position == 1

    def test_reverse_stops_at_mismatched_lead(self):
        """Test that a lead byte of the wrong length is not consumed."""
        result, position = reverse_decode_at(UTF8Codec(), [0xC3, 0x82, 0xAC])

        assert result.character is None
        assert position == 1

    def test_encode_lone_surrogate(self):
        """Test that lone surrogates cannot be encoded."""
        with pytest.raises(EncodingError, match="surrogate"):
            encode(UTF8Codec(), "\ud800")

    def test_forward_codec_has_no_reverse(self):
        """Test that the forward-only variant omits reverse_decode."""
        assert not hasattr(ForwardUTF8Codec(), "reverse_decode")
        assert hasattr(UTF8Codec(), "reverse_decode")


class TestUTF8BOM:
    """Test the stateful byte-order-mark codec."""

    BOM = [0xEF, 0xBB, 0xBF]

    def test_leading_bom_skipped_once(self):
        """Test that only the first BOM is dropped."""
        codec = UTF8BOMCodec()
        state = BOMState()

        first, _ = decode_at(codec, self.BOM + self.BOM, 0, state)
        second, _ = decode_at(codec, self.BOM + self.BOM, 3, state)

        assert first == DecodeResult(None, 3)
        assert first.error is None
        assert state.bom_handled is True
        assert second.character == "\ufeff"

    def test_no_bom(self):
        """Test text without a BOM decodes normally."""
        state = BOMState()

        result, _ = decode_at(UTF8BOMCodec(), [0x41], 0, state)

        assert result.character == "A"
        assert state.bom_handled is True

    def test_reverse_drops_bom_at_start(self):
        """Test that the reverse direction drops a BOM at the start of storage."""
        result, position = reverse_decode_at(UTF8BOMCodec(), self.BOM + [0x41], 3)

        assert result == DecodeResult(None, 3)
        assert position == 0

    def test_bom_past_start_is_a_character(self):
        """Test that a fresh state does not drop U+FEFF away from the start."""
        state = BOMState()

        result, _ = decode_at(UTF8BOMCodec(), [0x41] + self.BOM, 1, state)

        assert result.character == "\ufeff"
        assert state.bom_handled is True

    def test_reverse_decode_tracks_leading_bom(self):
        """Test that reverse decoding marks whether the start BOM is behind us."""
        codec = UTF8BOMCodec()
        state = BOMState()

        reverse_decode_at(codec, self.BOM + [0x41], 4, state)
        assert state.bom_handled is True

        reverse_decode_at(codec, self.BOM + [0x41], 3, state)
        assert state.bom_handled is False

    def test_encode_writes_bom_first(self):
        """Test that the first encode emits the BOM."""
        codec = UTF8BOMCodec()
        state = BOMState()

        assert encode(codec, "A", state) == self.BOM + [0x41]
        assert encode(codec, "B", state) == [0x42]

    def test_state_transitions(self):
        """Test WRITE_BOM and ASSUME_BOM_WRITTEN transitions."""
        codec = UTF8BOMCodec()
        units = []
        out = AppendCursor(units)

        written = BOMState()
        assert codec.encode_state_transition(written, out, BOMTransition.WRITE_BOM) == 3
        assert codec.encode_state_transition(written, out, BOMTransition.WRITE_BOM) == 0
        assumed = BOMState()
        assert codec.encode_state_transition(
            assumed, out, BOMTransition.ASSUME_BOM_WRITTEN
        ) == 0

        assert units == self.BOM
        assert assumed.bom_handled is True

    def test_unknown_transition(self):
        """Test that foreign tokens are rejected."""
        with pytest.raises(EncodingError):
            UTF8BOMCodec().encode_state_transition(BOMState(), AppendCursor([]), "x")


class TestUTF16:
    """Test UTF-16 over 16-bit code units."""

    def test_surrogate_pair(self):
        """Test supplementary characters in both directions."""
        codec = UTF16Codec()
        units = [0xD83D, 0xDE00]

        assert decode_at(codec, units)[0] == DecodeResult("\U0001F600", 2)
        assert reverse_decode_at(codec, units)[0] == DecodeResult("\U0001F600", 2)
        assert encode(codec, "\U0001F600") == units

    def test_bmp_character(self):
        """Test a single-unit character."""
        assert decode_at(UTF16Codec(), [0x20AC])[0].character == "€"
        assert encode(UTF16Codec(), "€") == [0x20AC]

    @pytest.mark.parametrize("units", [[0xDE00], [0xD83D], [0xD83D, 0x0041]])
    def test_unpaired_surrogates_forward(self, units):
        """Test unpaired surrogates consume exactly one unit."""
        result, position = decode_at(UTF16Codec(), units)

        assert result.character is None
        assert "unpaired" in result.error
        assert position == 1

    @pytest.mark.parametrize("units", [[0xD83D], [0xDE00], [0x0041, 0xDE00]])
    def test_unpaired_surrogates_reverse(self, units):
        """Test unpaired surrogates in reverse consume exactly one unit."""
        result, position = reverse_decode_at(UTF16Codec(), units)

        assert result.character is None
        assert position == len(units) - 1

    @pytest.mark.parametrize("unit", [0x10000, 0x1F600, -1])
    def test_units_wider_than_16_bits(self, unit):
        """Test that values outside 16 bits are malformed in both directions."""
        forward, position = decode_at(UTF16Codec(), [unit])
        backward, _ = reverse_decode_at(UTF16Codec(), [unit])

        assert forward == DecodeResult(None, 1, forward.error)
        assert "exceeds 16 bits" in forward.error
        assert backward.character is None
        assert "exceeds 16 bits" in backward.error
        assert position == 1


class TestUTF32:
    """Test UTF-32."""

    def test_decode(self):
        """Test valid and invalid code units."""
        assert decode_at(UTF32Codec(), [0x1F600])[0].character == "\U0001F600"
        assert decode_at(UTF32Codec(), [0x110000])[0].character is None
        assert decode_at(UTF32Codec(), [0xD800])[0].character is None

    def test_encode(self):
        """Test encoding code points."""
        assert encode(UTF32Codec(), "€") == [0x20AC]


class TestCodecRegistry:
    """Test codec lookup by name."""

    @pytest.mark.parametrize("alias,key", [
        ("UTF8", "utf-8"),
        ("utf_8_sig", "utf-8-bom"),
        ("UTF-16", "utf-16"),
        (" latin1 ", "latin-1"),
        ("ISO-8859-1", "latin-1"),
    ])
    def test_normalize(self, alias, key):
        """Test alias normalization."""
        assert normalize_codec_name(alias) == key

    def test_get_codec(self):
        """Test instantiation by name."""
        assert isinstance(get_codec("utf8"), UTF8Codec)
        assert isinstance(get_codec("utf-8-forward"), ForwardUTF8Codec)

    def test_unit_sizes(self):
        """Test the byte width recorded for each codec."""
        assert get_codec_spec("utf-8").unit_size == 1
        assert get_codec_spec("utf-16").unit_size == 2
        assert get_codec_spec("utf-32").unit_size == 4

    def test_unknown_codec(self):
        """Test that unknown names raise LookupError listing the options."""
        with pytest.raises(LookupError, match="utf-8"):
            get_codec("ebcdic")

    def test_every_registered_codec_encodes_ascii(self):
        """Test that every registry entry can encode plain ASCII."""
        for name in CODEC_REGISTRY:
            codec = get_codec(name)
            assert encode(codec, "a")[-1] == 0x61
