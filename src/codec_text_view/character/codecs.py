"""Reference codecs for the iterator core.

These codecs transform between Unicode scalar values and code units and
nothing more: malformed code units are consumed and reported through
``DecodeResult.error`` and the iterator decides what to do with them.

    Codec             Code units   max_code_units  Power
    ----------------  -----------  --------------  --------------
    TrivialCodec      int          1               fixed width
    ASCIICodec        int < 0x80   1               fixed width
    Latin1Codec       int < 0x100  1               fixed width
    ForwardUTF8Codec  8-bit int    4               decode only
    UTF8Codec         8-bit int    4               reverse decode
    UTF8BOMCodec      8-bit int    4               reverse decode, stateful
    UTF16Codec        16-bit int   2               reverse decode
    UTF32Codec        32-bit int   1               fixed width
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple

from codec_text_view.shared.errors import EncodingError

from .codec import Codec, DecodeResult, read_unit

# Unicode limits
MAX_CODE_POINT = 0x10FFFF
SURROGATE_START = 0xD800
SURROGATE_END = 0xDFFF
HIGH_SURROGATE_END = 0xDBFF
SUPPLEMENTARY_START = 0x10000
UTF16_UNIT_MAX = 0xFFFF

# UTF-8 byte classes
UTF8_CONTINUATION_MIN = 0x80
UTF8_CONTINUATION_MAX = 0xBF
ASCII_MAX = 0x7F
LATIN1_MAX = 0xFF

BYTE_ORDER_MARK = "\ufeff"


def _is_surrogate(code_point: int) -> bool:
    return SURROGATE_START <= code_point <= SURROGATE_END


def _is_continuation(unit: int) -> bool:
    return UTF8_CONTINUATION_MIN <= unit <= UTF8_CONTINUATION_MAX


def _utf8_lead(unit: int) -> Optional[Tuple[int, int, int]]:
    """Return (sequence length, payload bits, smallest legal code point)."""
    if unit <= ASCII_MAX:
        return 1, unit, 0
    if 0xC2 <= unit <= 0xDF:
        return 2, unit & 0x1F, 0x80
    if 0xE0 <= unit <= 0xEF:
        return 3, unit & 0x0F, 0x800
    if 0xF0 <= unit <= 0xF4:
        return 4, unit & 0x07, SUPPLEMENTARY_START
    return None


def _check_scalar(code_point: int, minimum: int, consumed: int) -> DecodeResult:
    if code_point < minimum:
        return DecodeResult(None, consumed, f"overlong UTF-8 sequence for U+{code_point:04X}")
    if _is_surrogate(code_point) or code_point > MAX_CODE_POINT:
        return DecodeResult(None, consumed, f"UTF-8 sequence encodes invalid U+{code_point:04X}")
    return DecodeResult(chr(code_point), consumed)


def _check_encodable(character: str) -> int:
    if not isinstance(character, str) or len(character) != 1:
        raise EncodingError(f"Expected a single character, got {character!r}")
    code_point = ord(character)
    if _is_surrogate(code_point):
        raise EncodingError(f"Cannot encode lone surrogate U+{code_point:04X}")
    return code_point


class TrivialCodec(Codec):
    """One code unit per character, the code unit being the code point."""

    max_code_units: ClassVar[int] = 1
    fixed_width: ClassVar[bool] = True
    max_code_unit: ClassVar[int] = MAX_CODE_POINT

    def _decode_unit(self, unit: int) -> DecodeResult:
        if not 0 <= unit <= self.max_code_unit:
            return DecodeResult(
                None, 1, f"code unit 0x{unit:X} is outside {type(self).__name__}"
            )
        return DecodeResult(chr(unit), 1)

    def decode(self, state: Any, cursor: Any, end: Any) -> DecodeResult:
        return self._decode_unit(read_unit(cursor))

    def reverse_decode(self, state: Any, rcursor: Any, rend: Any) -> DecodeResult:
        return self._decode_unit(read_unit(rcursor))

    def encode(self, state: Any, out: Any, character: str) -> int:
        if not isinstance(character, str) or len(character) != 1:
            raise EncodingError(f"Expected a single character, got {character!r}")
        code_point = ord(character)
        if code_point > self.max_code_unit:
            raise EncodingError(
                f"U+{code_point:04X} cannot be encoded by {type(self).__name__}"
            )
        out.put(code_point)
        return 1

    def encode_state_transition(self, state: Any, out: Any, token: Any) -> int:
        return 0


class ASCIICodec(TrivialCodec):
    """Seven-bit ASCII."""

    max_code_unit: ClassVar[int] = ASCII_MAX


class Latin1Codec(TrivialCodec):
    """ISO-8859-1: bytes map straight onto the first 256 code points."""

    max_code_unit: ClassVar[int] = LATIN1_MAX


class ForwardUTF8Codec(Codec):
    """UTF-8 without reverse decoding, for streaming input."""

    max_code_units: ClassVar[int] = 4

    def decode(self, state: Any, cursor: Any, end: Any) -> DecodeResult:
        lead = read_unit(cursor)
        shape = _utf8_lead(lead)
        if shape is None:
            return DecodeResult(None, 1, f"invalid UTF-8 lead byte 0x{lead:02X}")
        length, code_point, minimum = shape
        if length == 1:
            return DecodeResult(chr(code_point), 1)

        consumed = 1
        while consumed < length:
            if cursor == end:
                return DecodeResult(None, consumed, "truncated UTF-8 sequence")
            unit = cursor.read()
            if not _is_continuation(unit):
                # Leave the unexpected byte for the next decode call.
                return DecodeResult(None, consumed, "truncated UTF-8 sequence")
            cursor.advance()
            consumed += 1
            code_point = (code_point << 6) | (unit & 0x3F)
        return _check_scalar(code_point, minimum, consumed)

    def encode(self, state: Any, out: Any, character: str) -> int:
        code_point = _check_encodable(character)
        if code_point <= ASCII_MAX:
            units = [code_point]
        elif code_point < 0x800:
            units = [0xC0 | (code_point >> 6), 0x80 | (code_point & 0x3F)]
        elif code_point < SUPPLEMENTARY_START:
            units = [
                0xE0 | (code_point >> 12),
                0x80 | ((code_point >> 6) & 0x3F),
                0x80 | (code_point & 0x3F),
            ]
        else:
            units = [
                0xF0 | (code_point >> 18),
                0x80 | ((code_point >> 12) & 0x3F),
                0x80 | ((code_point >> 6) & 0x3F),
                0x80 | (code_point & 0x3F),
            ]
        for unit in units:
            out.put(unit)
        return len(units)

    def encode_state_transition(self, state: Any, out: Any, token: Any) -> int:
        return 0


class UTF8Codec(ForwardUTF8Codec):
    """UTF-8 with reverse decoding."""

    def reverse_decode(self, state: Any, rcursor: Any, rend: Any) -> DecodeResult:
        last = read_unit(rcursor)
        if last <= ASCII_MAX:
            return DecodeResult(chr(last), 1)
        if not _is_continuation(last):
            return DecodeResult(None, 1, "truncated UTF-8 sequence")

        tail: List[int] = [last]
        while len(tail) < self.max_code_units:
            if rcursor == rend:
                break
            unit = rcursor.read()
            if _is_continuation(unit):
                rcursor.advance()
                tail.append(unit)
                continue
            shape = _utf8_lead(unit)
            if shape is None or shape[0] != len(tail) + 1:
                break
            rcursor.advance()
            _, code_point, minimum = shape
            for continuation in reversed(tail):
                code_point = (code_point << 6) | (continuation & 0x3F)
            return _check_scalar(code_point, minimum, len(tail) + 1)
        return DecodeResult(None, len(tail), "UTF-8 continuation bytes without a lead byte")


@dataclass
class BOMState:
    """Whether the byte order mark has been read or written yet."""
    bom_handled: bool = False


class BOMTransition(Enum):
    """State transitions of UTF8BOMCodec."""
    WRITE_BOM = "write_bom"
    ASSUME_BOM_WRITTEN = "assume_bom_written"


class UTF8BOMCodec(UTF8Codec):
    """UTF-8 whose text starts with a byte order mark.

    Decoding drops a BOM only at the very start of the storage, in either
    direction, so an iterator may start anywhere. ``bom_handled`` records
    whether decoding has moved past that start. Encoding writes a BOM before
    the first character unless a state transition says it is already there.
    """

    state_type: ClassVar[Optional[Callable[[], Any]]] = BOMState
    state_transition_type: ClassVar[type] = BOMTransition

    def decode(self, state: BOMState, cursor: Any, end: Any) -> DecodeResult:
        leading = not state.bom_handled and cursor.position == 0
        result = super().decode(state, cursor, end)
        state.bom_handled = True
        if leading and result.character == BYTE_ORDER_MARK:
            return DecodeResult(None, result.consumed)
        return result

    def reverse_decode(self, state: BOMState, rcursor: Any, rend: Any) -> DecodeResult:
        result = super().reverse_decode(state, rcursor, rend)
        if result.character == BYTE_ORDER_MARK and rcursor == rend:
            # Back before the leading BOM; the next forward decode drops it again.
            state.bom_handled = False
            return DecodeResult(None, result.consumed)
        state.bom_handled = True
        return result

    def _write_bom(self, state: BOMState, out: Any) -> int:
        state.bom_handled = True
        return super().encode(state, out, BYTE_ORDER_MARK)

    def encode(self, state: BOMState, out: Any, character: str) -> int:
        emitted = 0
        if not state.bom_handled:
            emitted += self._write_bom(state, out)
        return emitted + super().encode(state, out, character)

    def encode_state_transition(
        self, state: BOMState, out: Any, token: BOMTransition
    ) -> int:
        if token is BOMTransition.WRITE_BOM:
            return 0 if state.bom_handled else self._write_bom(state, out)
        if token is BOMTransition.ASSUME_BOM_WRITTEN:
            state.bom_handled = True
            return 0
        raise EncodingError(f"Unknown state transition {token!r}")


class UTF16Codec(Codec):
    """UTF-16 over 16-bit integer code units."""

    max_code_units: ClassVar[int] = 2

    @staticmethod
    def _out_of_range(unit: int) -> Optional[DecodeResult]:
        if not 0 <= unit <= UTF16_UNIT_MAX:
            return DecodeResult(None, 1, f"code unit 0x{unit:X} exceeds 16 bits")
        return None

    def decode(self, state: Any, cursor: Any, end: Any) -> DecodeResult:
        unit = read_unit(cursor)
        invalid = self._out_of_range(unit)
        if invalid is not None:
            return invalid
        if not _is_surrogate(unit):
            return DecodeResult(chr(unit), 1)
        if unit > HIGH_SURROGATE_END:
            return DecodeResult(None, 1, f"unpaired low surrogate 0x{unit:04X}")
        if cursor == end:
            return DecodeResult(None, 1, f"unpaired high surrogate 0x{unit:04X}")
        low = cursor.read()
        if not HIGH_SURROGATE_END < low <= SURROGATE_END:
            return DecodeResult(None, 1, f"unpaired high surrogate 0x{unit:04X}")
        cursor.advance()
        return DecodeResult(chr(self._combine(unit, low)), 2)

    def reverse_decode(self, state: Any, rcursor: Any, rend: Any) -> DecodeResult:
        unit = read_unit(rcursor)
        invalid = self._out_of_range(unit)
        if invalid is not None:
            return invalid
        if not _is_surrogate(unit):
            return DecodeResult(chr(unit), 1)
        if unit <= HIGH_SURROGATE_END:
            return DecodeResult(None, 1, f"unpaired high surrogate 0x{unit:04X}")
        if rcursor == rend:
            return DecodeResult(None, 1, f"unpaired low surrogate 0x{unit:04X}")
        high = rcursor.read()
        if not SURROGATE_START <= high <= HIGH_SURROGATE_END:
            return DecodeResult(None, 1, f"unpaired low surrogate 0x{unit:04X}")
        rcursor.advance()
        return DecodeResult(chr(self._combine(high, unit)), 2)

    @staticmethod
    def _combine(high: int, low: int) -> int:
        return SUPPLEMENTARY_START + ((high - SURROGATE_START) << 10) + (low - 0xDC00)

    def encode(self, state: Any, out: Any, character: str) -> int:
        code_point = _check_encodable(character)
        if code_point < SUPPLEMENTARY_START:
            out.put(code_point)
            return 1
        offset = code_point - SUPPLEMENTARY_START
        out.put(SURROGATE_START + (offset >> 10))
        out.put(0xDC00 + (offset & 0x3FF))
        return 2

    def encode_state_transition(self, state: Any, out: Any, token: Any) -> int:
        return 0


class UTF32Codec(Codec):
    """UTF-32: one 32-bit code unit per character."""

    max_code_units: ClassVar[int] = 1
    fixed_width: ClassVar[bool] = True

    def _decode_unit(self, unit: int) -> DecodeResult:
        if _is_surrogate(unit) or not 0 <= unit <= MAX_CODE_POINT:
            return DecodeResult(None, 1, f"invalid UTF-32 code unit 0x{unit:X}")
        return DecodeResult(chr(unit), 1)

    def decode(self, state: Any, cursor: Any, end: Any) -> DecodeResult:
        return self._decode_unit(read_unit(cursor))

    def reverse_decode(self, state: Any, rcursor: Any, rend: Any) -> DecodeResult:
        return self._decode_unit(read_unit(rcursor))

    def encode(self, state: Any, out: Any, character: str) -> int:
        out.put(_check_encodable(character))
        return 1

    def encode_state_transition(self, state: Any, out: Any, token: Any) -> int:
        return 0


@dataclass(frozen=True)
class CodecSpec:
    """Registry entry describing how to store a codec's code units as bytes."""
    factory: Callable[[], Codec]
    unit_size: int


CODEC_REGISTRY: Dict[str, CodecSpec] = {
    "trivial": CodecSpec(TrivialCodec, 4),
    "ascii": CodecSpec(ASCIICodec, 1),
    "latin-1": CodecSpec(Latin1Codec, 1),
    "utf-8": CodecSpec(UTF8Codec, 1),
    "utf-8-forward": CodecSpec(ForwardUTF8Codec, 1),
    "utf-8-bom": CodecSpec(UTF8BOMCodec, 1),
    "utf-16": CodecSpec(UTF16Codec, 2),
    "utf-32": CodecSpec(UTF32Codec, 4),
}

_ALIASES: Dict[str, str] = {
    "utf8": "utf-8",
    "utf-8-sig": "utf-8-bom",
    "utf8bom": "utf-8-bom",
    "utf16": "utf-16",
    "utf32": "utf-32",
    "us-ascii": "ascii",
    "latin1": "latin-1",
    "iso-8859-1": "latin-1",
}


def normalize_codec_name(name: str) -> str:
    """Normalize a codec name to its registry key."""
    key = name.strip().lower().replace("_", "-")
    return _ALIASES.get(key, key)


def get_codec_spec(name: str) -> CodecSpec:
    """Look up a codec by name or alias.

    Raises:
        LookupError: If no codec is registered under that name
    """
    key = normalize_codec_name(name)
    try:
        return CODEC_REGISTRY[key]
    except KeyError:
        raise LookupError(
            f"Unknown codec {name!r}; available: {', '.join(sorted(CODEC_REGISTRY))}"
        ) from None


def get_codec(name: str) -> Codec:
    """Instantiate a codec by name or alias."""
    return get_codec_spec(name).factory()

