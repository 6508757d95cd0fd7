"""Unit tests for card protocol exceptions."""

from __future__ import annotations

from cardwire.protocol.exceptions import (
    DATA_PREVIEW_LENGTH,
    CardWireError,
    PacketDecodeError,
    PacketEncodeError,
    PacketFramingError,
    StreamReadError,
    TruncatedPacketError,
    UnknownSuitError,
)

LONG_DATA = bytes(range(40))


class TestExceptionHierarchy:
    """Tests for exception inheritance."""

    def test_all_exceptions_inherit_from_card_wire_error(self):
        """Test that every codec exception inherits from CardWireError."""
        assert issubclass(PacketDecodeError, CardWireError)
        assert issubclass(TruncatedPacketError, PacketDecodeError)
        assert issubclass(UnknownSuitError, PacketDecodeError)
        assert issubclass(StreamReadError, CardWireError)
        assert issubclass(PacketEncodeError, CardWireError)
        assert issubclass(PacketFramingError, CardWireError)

    def test_stream_errors_are_not_decode_errors(self):
        """Truncation and stream failure stay distinguishable."""
        assert not issubclass(StreamReadError, PacketDecodeError)

    def test_encode_error_is_value_error(self):
        assert issubclass(PacketEncodeError, ValueError)


class TestPacketDecodeError:
    def test_data_preview_is_capped(self):
        error = PacketDecodeError("invalid", LONG_DATA)
        assert error.data_preview == LONG_DATA[:DATA_PREVIEW_LENGTH]

    def test_message_without_detail(self):
        assert str(PacketDecodeError("invalid")) == "Packet decode failed: invalid"

    def test_truncated_fields(self):
        error = TruncatedPacketError(needed=9, available=4, data=b"\x00\x00")
        assert error.reason == "truncated"
        assert error.needed == 9
        assert error.available == 4
        assert "needed 9 bytes, have 4" in str(error)

    def test_unknown_suit_fields(self):
        error = UnknownSuitError(0x09)
        assert error.reason == "unknown_suit"
        assert error.suit_byte == 0x09
        assert "0x09" in str(error)


class TestOtherErrors:
    def test_stream_read_error(self):
        error = StreamReadError("eof", expected=3, received=1)
        assert error.reason == "eof"
        assert "expected 3 bytes, got 1" in str(error)

    def test_encode_error(self):
        error = PacketEncodeError("name", "too_long", "300 bytes")
        assert error.field == "name"
        assert error.reason == "too_long"
        assert str(error) == "Packet encode failed: name too_long (300 bytes)"

    def test_framing_error(self):
        error = PacketFramingError("buffer_overflow", buffer_size=5000)
        assert error.buffer_size == 5000
        assert "buffer_overflow" in str(error)
