"""Tests for the text iteration exception hierarchy."""

import pytest

from codec_text_view.shared.errors import (
    CapabilityError,
    CodecContractError,
    EncodingError,
    InvalidatedIteratorError,
    MalformedInputError,
    TextIteratorError,
)


@pytest.mark.parametrize("exc_type", [
    CapabilityError,
    CodecContractError,
    EncodingError,
    InvalidatedIteratorError,
    MalformedInputError,
])
def test_all_errors_share_base(exc_type):
    """Test that every error derives from TextIteratorError."""
    assert issubclass(exc_type, TextIteratorError)


def test_capability_error_is_type_error():
    """Test that unsupported operations look like type errors to callers."""
    assert issubclass(CapabilityError, TypeError)


def test_value_errors():
    """Test that data problems look like value errors to callers."""
    assert issubclass(EncodingError, ValueError)
    assert issubclass(MalformedInputError, ValueError)


class TestMalformedInputError:
    """Test MalformedInputError details."""

    def test_message_with_position(self):
        """Test the formatted message includes the position."""
        error = MalformedInputError("truncated UTF-8 sequence", position=7, consumed=2)

        assert str(error) == "Malformed input at code unit 7: truncated UTF-8 sequence"
        assert error.reason == "truncated UTF-8 sequence"
        assert error.position == 7
        assert error.consumed == 2

    def test_message_without_position(self):
        """Test the formatted message when the position is unknown."""
        error = MalformedInputError("bad")

        assert str(error) == "Malformed input: bad"
        assert error.position is None
        assert error.consumed == 0
