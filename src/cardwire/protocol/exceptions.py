"""Custom exception types for card protocol errors.

This module defines the exception hierarchy for codec errors, following the
"No Nullability" principle where errors raise exceptions instead of
returning None.

Decode failures split into three kinds that callers handle differently:

- TruncatedPacketError: not enough bytes yet. Accumulate more input and
  retry the decode from the start of the message.
- UnknownSuitError: the message can never decode. Drop it.
- StreamReadError: the byte source failed or ended early. Connection-fatal.
"""

from __future__ import annotations

# Only this many bytes of offending input are kept on an error
DATA_PREVIEW_LENGTH = 16


class CardWireError(Exception):
    """Base exception for all card protocol errors.

    All codec exceptions inherit from this base class, enabling catch-all
    error handling when needed while keeping specific types for detailed
    handling.
    """


class PacketDecodeError(CardWireError):
    """Packet cannot be decoded.

    Attributes:
        reason: Specific failure reason (e.g., "truncated", "unknown_suit")
        data_preview: First 16 bytes of packet data

    """

    def __init__(self, reason: str, data: bytes = b"", detail: str = ""):
        self.reason = reason
        self.data_preview = bytes(data[:DATA_PREVIEW_LENGTH]) if data else b""
        message = f"Packet decode failed: {reason}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class TruncatedPacketError(PacketDecodeError):
    """Buffer ended before the message was complete.

    Raised only by buffer decoding. Never accompanied by a partial packet.

    Attributes:
        needed: Total bytes the decoder required at the failing read
        available: Bytes actually present in the buffer

    """

    def __init__(self, needed: int, available: int, data: bytes = b""):
        self.needed = needed
        self.available = available
        super().__init__("truncated", data, f"needed {needed} bytes, have {available}")


class UnknownSuitError(PacketDecodeError):
    """Suit byte does not match the fixed suit table.

    Attributes:
        suit_byte: The offending byte value

    """

    def __init__(self, suit_byte: int, data: bytes = b""):
        self.suit_byte = suit_byte
        super().__init__("unknown_suit", data, f"0x{suit_byte:02x}")


class StreamReadError(CardWireError):
    """Reading from a byte stream failed (end-of-stream, socket error, etc.)

    Raised when:
    - The stream ends before the declared bytes arrive ("eof")
    - The underlying read raises OSError ("read_failed")
    - A non-blocking source has no data ready ("would_block")

    Attributes:
        reason: Specific failure reason
        expected: Bytes requested by the failing read
        received: Bytes delivered before the failure

    """

    def __init__(self, reason: str, expected: int = 0, received: int = 0):
        self.reason = reason
        self.expected = expected
        self.received = received
        super().__init__(f"Stream read failed: {reason} (expected {expected} bytes, got {received})")


class PacketEncodeError(CardWireError, ValueError):
    """Caller passed a field the wire format cannot carry.

    Raised when a name exceeds 255 UTF-8 bytes, a roster holds more than
    255 names, or a value/offset falls outside the signed 32-bit range.

    Attributes:
        field: Name of the offending field
        reason: Specific failure reason (e.g., "too_long", "out_of_range")

    """

    def __init__(self, field: str, reason: str, detail: str = ""):
        self.field = field
        self.reason = reason
        message = f"Packet encode failed: {field} {reason}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class PacketFramingError(CardWireError):
    """Receive buffer error.

    Raised by PacketFramer when buffered bytes exceed the configured limit.

    Attributes:
        reason: Specific failure reason (e.g., "buffer_overflow")
        buffer_size: Size of buffer when error occurred

    """

    def __init__(self, reason: str, buffer_size: int = 0):
        self.reason = reason
        self.buffer_size = buffer_size
        super().__init__(f"Packet framing failed: {reason}")
