"""Incremental receive buffer for card protocol messages.

This module provides PacketFramer for turning arbitrarily split reads into
decoded packets, retrying decode from the message start whenever a read
leaves a message incomplete.
"""

from __future__ import annotations

from cardwire.const import CARDWIRE_MAX_BUFFER_SIZE
from cardwire.logging_abstraction import get_logger
from cardwire.metrics import record_framer_discard
from cardwire.protocol.cardwire_protocol import CardWireProtocol
from cardwire.protocol.exceptions import PacketFramingError, TruncatedPacketError, UnknownSuitError
from cardwire.protocol.packet_types import Packet, PacketKind

logger = get_logger(__name__)


class PacketFramer:
    r"""Extract decoded packets from a byte stream of one message kind.

    The wire carries no length header or discriminant, so the framer is told
    which kind to expect (and told again via set_kind() when the protocol
    phase changes).

    Algorithm:

    1. Buffer all incoming bytes
    2. Decode one message of the current kind from the buffer start
    3. On success, drop the consumed bytes and repeat
    4. On truncation, keep the buffer and wait for more data
    5. On an unknown suit, drop that message only (its length is known from
       the layout, even if its tail has not arrived yet) and continue

    Example:
        framer = PacketFramer(PacketKind.CLIENT_PACKET)
        packets = framer.feed(b'\x00\x00\x00')
        assert packets == []  # Incomplete

        packets = framer.feed(b'\x08\x03')
        assert packets == [ClientPacket(Card(8, Suit.HEARTS))]

    """

    def __init__(self, kind: PacketKind, max_buffer_size: int | None = CARDWIRE_MAX_BUFFER_SIZE) -> None:
        """Initialize framer with empty buffer.

        Args:
            kind: Message kind to decode
            max_buffer_size: Cap on bytes held for one incomplete message.
                None bounds the buffer by the largest legal message of the
                current kind; a smaller cap rejects legal messages above it.

        """
        self.kind: PacketKind = PacketKind(kind)
        self.max_buffer_size: int | None = max_buffer_size
        self.buffer: bytearray = bytearray()
        self.dropped_messages: int = 0
        # Tail bytes of a dropped message that have not arrived yet
        self._skip: int = 0

    @property
    def buffer_limit(self) -> int:
        if self.max_buffer_size is None:
            return CardWireProtocol.max_message_size(self.kind)
        return self.max_buffer_size

    def set_kind(self, kind: PacketKind) -> None:
        """Switch the expected message kind (e.g. handshake -> gameplay).

        Bytes already buffered are decoded as the new kind.
        """
        new_kind = PacketKind(kind)
        logger.debug("Framer switching kind", extra={"kind": self.kind.value, "new_kind": new_kind.value})
        self.kind = new_kind

    def reset(self) -> None:
        """Discard buffered bytes and any pending skip."""
        self.buffer = bytearray()
        self._skip = 0

    def feed(self, data: bytes) -> list[Packet]:
        """Add data to buffer and return list of complete packets.

        Args:
            data: Incoming bytes from a transport read

        Returns:
            Decoded packets in arrival order (may be empty). Messages with an
            unknown suit are left out and counted in dropped_messages.

        Raises:
            PacketFramingError: If an incomplete message exceeds buffer_limit.
                The buffer is cleared.

        """
        if self._skip:
            skipped = min(self._skip, len(data))
            data = data[skipped:]
            self._skip -= skipped
        self.buffer.extend(data)
        return self._extract_packets()

    def _extract_packets(self) -> list[Packet]:
        packets: list[Packet] = []

        while self.buffer:
            try:
                packet, consumed = CardWireProtocol.decode_with_length(self.kind, self.buffer)
            except TruncatedPacketError:
                if len(self.buffer) > self.buffer_limit:
                    self._overflow()
                break
            except UnknownSuitError as e:
                self._drop_message(e)
                continue

            packets.append(packet)
            del self.buffer[:consumed]

        return packets

    def _drop_message(self, error: UnknownSuitError) -> None:
        length = CardWireProtocol.message_length(self.kind, self.buffer)
        dropped = min(length, len(self.buffer))
        del self.buffer[:dropped]
        self._skip = length - dropped
        self.dropped_messages += 1
        record_framer_discard(self.kind.value, error.reason)
        logger.debug(
            "Dropped %d-byte message",
            length,
            extra={"kind": self.kind.value, "suit_byte": f"0x{error.suit_byte:02x}", "pending_skip": self._skip},
        )

    def _overflow(self) -> None:
        buffer_size = len(self.buffer)
        logger.error(
            "Buffer cleared: %d bytes without a complete message (max %d)",
            buffer_size,
            self.buffer_limit,
            extra={"kind": self.kind.value},
        )
        record_framer_discard(self.kind.value, "buffer_overflow")
        self.reset()
        raise PacketFramingError("buffer_overflow", buffer_size)
