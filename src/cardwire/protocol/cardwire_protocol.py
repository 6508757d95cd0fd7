"""Card protocol encoder/decoder implementation.

This module implements encoding and decoding for every card protocol
message. Layouts (all integers big-endian):

- ClientPacket:          i32 value, u8 suit                       (5 bytes)
- ClientHello:           u8 len, name
- ClientRoster:          u8 count, {u8 len, name} x count
- ServerNamePacket:      i32 value, u8 suit, u8 len, name
- ServerOffsetPacket:    i32 value, u8 suit, i32 offset           (9 bytes)
- ServerHandshakePacket: u8 count, {u8 len, name} x count

Each layout is written once as a parser (see wire_reader); buffer decoding
and both streaming decoders drive the same parser.
"""

from __future__ import annotations

import asyncio
import struct
from collections.abc import Callable, Sequence
from typing import BinaryIO

from cardwire.const import (
    CARD_LENGTH,
    I32_MAX,
    I32_MIN,
    MAX_NAME_BYTES,
    MAX_ROSTER_SIZE,
    SERVER_NAME_MIN_LENGTH,
    SERVER_OFFSET_LENGTH,
)
from cardwire.logging_abstraction import get_logger
from cardwire.metrics import record_decode_error, record_packet_decoded, record_packet_encoded
from cardwire.protocol.exceptions import (
    PacketDecodeError,
    PacketEncodeError,
    StreamReadError,
    TruncatedPacketError,
)
from cardwire.protocol.packet_types import (
    HANDSHAKE_KINDS,
    Card,
    ClientHello,
    ClientPacket,
    ClientRoster,
    Packet,
    PacketKind,
    ServerHandshakePacket,
    ServerNamePacket,
    ServerOffsetPacket,
    Suit,
    kind_of,
)
from cardwire.protocol.wire_reader import (
    Parser,
    decode_text,
    ensure_available,
    parse_buffer,
    read_stream,
    read_stream_async,
    read_text,
    read_text_list,
)

_CARD = struct.Struct(">iB")
_I32 = struct.Struct(">i")

logger = get_logger(__name__)


# =============================================================================
# Parsers (one per message layout)
# =============================================================================


def _card_from_bytes(raw: bytes) -> Card:
    value, suit_byte = _CARD.unpack(raw[:CARD_LENGTH])
    return Card(value=value, suit=Suit.from_byte(suit_byte))


def _parse_client_packet() -> Parser[ClientPacket]:
    raw = yield CARD_LENGTH
    return ClientPacket(card=_card_from_bytes(raw))


def _parse_client_hello() -> Parser[ClientHello]:
    name = yield from read_text()
    return ClientHello(name=name)


def _parse_client_roster() -> Parser[ClientRoster]:
    names = yield from read_text_list()
    return ClientRoster(names=names)


def _parse_server_name() -> Parser[ServerNamePacket]:
    # Card and name length arrive together: 6 bytes before any name byte
    head = yield SERVER_NAME_MIN_LENGTH
    card = _card_from_bytes(head)
    name_length = head[CARD_LENGTH]
    raw = (yield name_length) if name_length else b""
    return ServerNamePacket(card=card, name=decode_text(raw))


def _parse_server_offset() -> Parser[ServerOffsetPacket]:
    raw = yield SERVER_OFFSET_LENGTH
    card = _card_from_bytes(raw)
    (offset,) = _I32.unpack(raw[CARD_LENGTH:SERVER_OFFSET_LENGTH])
    return ServerOffsetPacket(card=card, offset=offset)


def _parse_server_handshake() -> Parser[ServerHandshakePacket]:
    names = yield from read_text_list()
    return ServerHandshakePacket(names=names)


PARSERS: dict[PacketKind, Callable[[], Parser[Packet]]] = {
    PacketKind.CLIENT_PACKET: _parse_client_packet,
    PacketKind.CLIENT_HELLO: _parse_client_hello,
    PacketKind.CLIENT_ROSTER: _parse_client_roster,
    PacketKind.SERVER_NAME: _parse_server_name,
    PacketKind.SERVER_OFFSET: _parse_server_offset,
    PacketKind.SERVER_HANDSHAKE: _parse_server_handshake,
}

# Every name and roster length is a single byte
_MAX_ROSTER_MESSAGE = 1 + MAX_ROSTER_SIZE * (1 + MAX_NAME_BYTES)

MAX_MESSAGE_SIZES: dict[PacketKind, int] = {
    PacketKind.CLIENT_PACKET: CARD_LENGTH,
    PacketKind.CLIENT_HELLO: 1 + MAX_NAME_BYTES,
    PacketKind.CLIENT_ROSTER: _MAX_ROSTER_MESSAGE,
    PacketKind.SERVER_NAME: SERVER_NAME_MIN_LENGTH + MAX_NAME_BYTES,
    PacketKind.SERVER_OFFSET: SERVER_OFFSET_LENGTH,
    PacketKind.SERVER_HANDSHAKE: _MAX_ROSTER_MESSAGE,
}

_FIXED_LENGTHS: dict[PacketKind, int] = {
    PacketKind.CLIENT_PACKET: CARD_LENGTH,
    PacketKind.SERVER_OFFSET: SERVER_OFFSET_LENGTH,
}


# =============================================================================
# Encoding helpers
# =============================================================================


def _check_i32(field: str, value: int) -> None:
    if not I32_MIN <= value <= I32_MAX:
        raise PacketEncodeError(field, "out_of_range", f"{value} not in signed 32-bit range")


def _encode_text(field: str, text: str) -> bytes:
    raw = text.encode("utf-8")
    if len(raw) > MAX_NAME_BYTES:
        raise PacketEncodeError(field, "too_long", f"{len(raw)} bytes, max {MAX_NAME_BYTES}")
    return bytes([len(raw)]) + raw


def _encode_text_list(field: str, names: Sequence[str]) -> bytes:
    if len(names) > MAX_ROSTER_SIZE:
        raise PacketEncodeError(field, "too_many", f"{len(names)} entries, max {MAX_ROSTER_SIZE}")
    encoded = bytearray([len(names)])
    for name in names:
        encoded.extend(_encode_text(field, name))
    return bytes(encoded)


class CardWireProtocol:
    """Card protocol encoder/decoder.

    Provides static methods for encoding and decoding card protocol
    packets. All methods are stateless - no instance state maintained.
    """

    # -------------------------------------------------------------------------
    # Suit / Card
    # -------------------------------------------------------------------------

    @staticmethod
    def encode_suit(suit: Suit) -> bytes:
        """Encode a suit as its single table byte."""
        return Suit(suit).to_byte()

    @staticmethod
    def decode_suit(data: bytes) -> Suit:
        """Decode the first byte of data as a suit.

        Raises:
            TruncatedPacketError: If data is empty
            UnknownSuitError: If the byte is not in the suit table

        """
        if not data:
            raise TruncatedPacketError(1, 0)
        return Suit.from_byte(data[0])

    @staticmethod
    def encode_card(card: Card) -> bytes:
        """Encode 5-byte card: big-endian i32 value, then suit byte.

        Raises:
            PacketEncodeError: If value is outside the signed 32-bit range
                or suit is not a Suit member

        Example:
            >>> CardWireProtocol.encode_card(Card(8, Suit.HEARTS))
            b'\\x00\\x00\\x00\\x08\\x03'

        """
        _check_i32("value", card.value)
        try:
            suit = Suit(card.suit)
        except ValueError as e:
            raise PacketEncodeError("suit", "unknown_suit", repr(card.suit)) from e
        return _CARD.pack(card.value, suit.value)

    @staticmethod
    def decode_card(data: bytes) -> tuple[Card, int]:
        """Decode a card from the start of data.

        Returns:
            Tuple of (card, bytes consumed). Bytes consumed is always 5.

        Raises:
            TruncatedPacketError: If fewer than 5 bytes are available
            UnknownSuitError: If byte 5 is not in the suit table

        """
        packet, consumed = parse_buffer(_parse_client_packet(), data)
        return packet.card, consumed

    # -------------------------------------------------------------------------
    # Message sizes
    # -------------------------------------------------------------------------

    @staticmethod
    def max_message_size(kind: PacketKind) -> int:
        """Largest legal encoding of a message kind, in bytes."""
        return MAX_MESSAGE_SIZES[PacketKind(kind)]

    @staticmethod
    def message_length(kind: PacketKind, data: bytes | bytearray | memoryview) -> int:
        """Length of the message at the start of data, read from its size fields.

        Suit bytes are not checked, so this also measures a message that
        decode_with_length rejects with UnknownSuitError. For ServerNamePacket
        the result can exceed len(data) once the 6-byte head has arrived.
        Handshake kinds carry no suit and must be fully present.

        Raises:
            TruncatedPacketError: If the size fields have not arrived yet

        """
        kind = PacketKind(kind)
        if kind in _FIXED_LENGTHS:
            return _FIXED_LENGTHS[kind]
        if kind is PacketKind.SERVER_NAME:
            ensure_available(data, SERVER_NAME_MIN_LENGTH)
            return SERVER_NAME_MIN_LENGTH + data[CARD_LENGTH]
        _, consumed = parse_buffer(PARSERS[kind](), data)
        return consumed

    # -------------------------------------------------------------------------
    # Encoding
    # -------------------------------------------------------------------------

    @staticmethod
    def encode_client_packet(packet: ClientPacket) -> bytes:
        """Encode ClientPacket (card only, 5 bytes)."""
        return CardWireProtocol.encode_card(packet.card)

    @staticmethod
    def encode_client_hello(packet: ClientHello) -> bytes:
        """Encode ClientHello: u8 length, then UTF-8 name."""
        return _encode_text("name", packet.name)

    @staticmethod
    def encode_client_roster(packet: ClientRoster) -> bytes:
        """Encode ClientRoster: u8 count, then length-prefixed names in order."""
        return _encode_text_list("names", packet.names)

    @staticmethod
    def encode_server_name(packet: ServerNamePacket) -> bytes:
        """Encode ServerNamePacket: card, u8 length, UTF-8 name."""
        return CardWireProtocol.encode_card(packet.card) + _encode_text("name", packet.name)

    @staticmethod
    def encode_server_offset(packet: ServerOffsetPacket) -> bytes:
        """Encode ServerOffsetPacket: card, big-endian i32 seat offset (9 bytes).

        Example:
            >>> CardWireProtocol.encode_server_offset(ServerOffsetPacket(Card(10, Suit.SPADES), 3)).hex(" ")
            '00 00 00 0a 04 00 00 00 03'

        """
        _check_i32("offset", packet.offset)
        return CardWireProtocol.encode_card(packet.card) + _I32.pack(packet.offset)

    @staticmethod
    def encode_server_handshake(packet: ServerHandshakePacket) -> bytes:
        """Encode ServerHandshakePacket: u8 count, then length-prefixed names in order."""
        return _encode_text_list("names", packet.names)

    @staticmethod
    def encode(packet: Packet) -> bytes:
        """Encode any packet, dispatching on its type.

        Raises:
            PacketEncodeError: If a field cannot be carried on the wire
            TypeError: If packet is not a card protocol packet

        """
        kind = kind_of(packet)
        encoder = _ENCODERS[kind]
        data = encoder(packet)
        record_packet_encoded(kind.value)
        logger.debug("Encoded %d bytes", len(data), extra={"kind": kind.value})
        return data

    # -------------------------------------------------------------------------
    # Buffer decoding
    # -------------------------------------------------------------------------

    @staticmethod
    def decode_with_length(kind: PacketKind, data: bytes | bytearray | memoryview) -> tuple[Packet, int]:
        """Decode one message of the given kind from the start of data.

        Trailing bytes after the message are left untouched; the returned
        length says where the next message begins.

        Args:
            kind: Message kind expected at this point of the protocol
            data: Received bytes

        Returns:
            Tuple of (packet, bytes consumed)

        Raises:
            TruncatedPacketError: If data ends before the message is complete.
                Accumulate more bytes and retry from the same start.
            UnknownSuitError: If a suit byte is invalid. Drop the message.

        """
        kind = PacketKind(kind)
        try:
            packet, consumed = parse_buffer(PARSERS[kind](), data)
        except TruncatedPacketError as e:
            record_packet_decoded(kind.value, "truncated")
            logger.debug(
                "Incomplete message: need %d bytes, have %d",
                e.needed,
                e.available,
                extra={"kind": kind.value},
            )
            raise
        except PacketDecodeError as e:
            record_packet_decoded(kind.value, "invalid")
            record_decode_error(kind.value, e.reason)
            logger.warning(
                "Dropping invalid message: %s",
                e,
                extra={"kind": kind.value, "data_preview": e.data_preview.hex(" ")},
            )
            raise

        record_packet_decoded(kind.value, "ok")
        logger.debug("Decoded %d bytes", consumed, extra={"kind": kind.value})
        return packet, consumed

    @staticmethod
    def decode(kind: PacketKind, data: bytes | bytearray | memoryview) -> Packet:
        """Decode one message of the given kind (see decode_with_length)."""
        packet, _ = CardWireProtocol.decode_with_length(kind, data)
        return packet

    @staticmethod
    def decode_client_packet(data: bytes) -> ClientPacket:
        """Decode ClientPacket from a buffer."""
        return CardWireProtocol.decode(PacketKind.CLIENT_PACKET, data)  # type: ignore[return-value]

    @staticmethod
    def decode_client_hello(data: bytes) -> ClientHello:
        """Decode ClientHello from a buffer."""
        return CardWireProtocol.decode(PacketKind.CLIENT_HELLO, data)  # type: ignore[return-value]

    @staticmethod
    def decode_client_roster(data: bytes) -> ClientRoster:
        """Decode ClientRoster from a buffer."""
        return CardWireProtocol.decode(PacketKind.CLIENT_ROSTER, data)  # type: ignore[return-value]

    @staticmethod
    def decode_server_name(data: bytes) -> ServerNamePacket:
        """Decode ServerNamePacket from a buffer."""
        return CardWireProtocol.decode(PacketKind.SERVER_NAME, data)  # type: ignore[return-value]

    @staticmethod
    def decode_server_offset(data: bytes) -> ServerOffsetPacket:
        """Decode ServerOffsetPacket from a buffer."""
        return CardWireProtocol.decode(PacketKind.SERVER_OFFSET, data)  # type: ignore[return-value]

    @staticmethod
    def decode_server_handshake(data: bytes) -> ServerHandshakePacket:
        """Decode ServerHandshakePacket from a buffer."""
        return CardWireProtocol.decode(PacketKind.SERVER_HANDSHAKE, data)  # type: ignore[return-value]

    # -------------------------------------------------------------------------
    # Streaming decoding
    # -------------------------------------------------------------------------

    @staticmethod
    def read_packet(kind: PacketKind, stream: BinaryIO) -> Packet:
        """Read one message of the given kind from a blocking binary stream.

        Raises:
            StreamReadError: If the stream fails or ends before the message
                is complete. Treat as connection-fatal.
            UnknownSuitError: If a suit byte is invalid

        """
        kind = PacketKind(kind)
        try:
            packet = read_stream(PARSERS[kind](), stream)
        except StreamReadError as e:
            record_packet_decoded(kind.value, "io_error")
            logger.warning("Stream read failed: %s", e, extra={"kind": kind.value, "reason": e.reason})
            raise
        except PacketDecodeError as e:
            record_packet_decoded(kind.value, "invalid")
            record_decode_error(kind.value, e.reason)
            logger.warning("Dropping invalid message from stream: %s", e, extra={"kind": kind.value})
            raise
        record_packet_decoded(kind.value, "ok")
        return packet

    @staticmethod
    async def read_packet_async(kind: PacketKind, reader: asyncio.StreamReader) -> Packet:
        """Read one message of the given kind from an asyncio StreamReader.

        Raises:
            StreamReadError: If the stream fails or ends before the message
                is complete. Treat as connection-fatal.
            UnknownSuitError: If a suit byte is invalid

        """
        kind = PacketKind(kind)
        try:
            packet = await read_stream_async(PARSERS[kind](), reader)
        except StreamReadError as e:
            record_packet_decoded(kind.value, "io_error")
            logger.warning("Stream read failed: %s", e, extra={"kind": kind.value, "reason": e.reason})
            raise
        except PacketDecodeError as e:
            record_packet_decoded(kind.value, "invalid")
            record_decode_error(kind.value, e.reason)
            logger.warning("Dropping invalid message from stream: %s", e, extra={"kind": kind.value})
            raise
        record_packet_decoded(kind.value, "ok")
        return packet

    @staticmethod
    def read_handshake(kind: PacketKind, stream: BinaryIO) -> ClientHello | ClientRoster | ServerHandshakePacket:
        """Read a handshake message from a blocking binary stream.

        Raises:
            ValueError: If kind is not a handshake kind
            StreamReadError: If the stream fails or ends early

        """
        _require_handshake_kind(kind)
        return CardWireProtocol.read_packet(kind, stream)  # type: ignore[return-value]

    @staticmethod
    async def read_handshake_async(
        kind: PacketKind,
        reader: asyncio.StreamReader,
    ) -> ClientHello | ClientRoster | ServerHandshakePacket:
        """Read a handshake message from an asyncio StreamReader.

        Raises:
            ValueError: If kind is not a handshake kind
            StreamReadError: If the stream fails or ends early

        """
        _require_handshake_kind(kind)
        return await CardWireProtocol.read_packet_async(kind, reader)  # type: ignore[return-value]


def _require_handshake_kind(kind: PacketKind) -> None:
    if PacketKind(kind) not in HANDSHAKE_KINDS:
        error_msg = f"{kind} is not a handshake message kind"
        raise ValueError(error_msg)


_ENCODERS: dict[PacketKind, Callable[..., bytes]] = {
    PacketKind.CLIENT_PACKET: CardWireProtocol.encode_client_packet,
    PacketKind.CLIENT_HELLO: CardWireProtocol.encode_client_hello,
    PacketKind.CLIENT_ROSTER: CardWireProtocol.encode_client_roster,
    PacketKind.SERVER_NAME: CardWireProtocol.encode_server_name,
    PacketKind.SERVER_OFFSET: CardWireProtocol.encode_server_offset,
    PacketKind.SERVER_HANDSHAKE: CardWireProtocol.encode_server_handshake,
}
