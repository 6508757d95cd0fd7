"""Card protocol package - packet encoding, decoding, and receive buffering.

This package implements the card game wire codec: the suit table, the card
layout, gameplay and handshake messages, and the drivers that decode them
from buffers or streams.

Public API:
- Packet dataclasses and kinds (ClientPacket, ServerHandshakePacket, ...)
- Protocol encoder/decoder (CardWireProtocol)
- Receive buffer (PacketFramer)
- Exception hierarchy (CardWireError and subclasses)
"""

from cardwire.protocol.cardwire_protocol import CardWireProtocol
from cardwire.protocol.exceptions import (
    CardWireError,
    PacketDecodeError,
    PacketEncodeError,
    PacketFramingError,
    StreamReadError,
    TruncatedPacketError,
    UnknownSuitError,
)
from cardwire.protocol.packet_framer import PacketFramer
from cardwire.protocol.packet_types import (
    Card,
    ClientHello,
    ClientPacket,
    ClientRoster,
    Direction,
    Packet,
    PacketKind,
    ProtocolPhase,
    ProtocolVersion,
    ServerHandshakePacket,
    ServerNamePacket,
    ServerOffsetPacket,
    Suit,
    expected_kind,
)

__all__ = [
    # Protocol encoder/decoder
    "CardWireProtocol",
    "PacketFramer",
    # Dataclasses and kinds
    "Card",
    "ClientHello",
    "ClientPacket",
    "ClientRoster",
    "Direction",
    "Packet",
    "PacketKind",
    "ProtocolPhase",
    "ProtocolVersion",
    "ServerHandshakePacket",
    "ServerNamePacket",
    "ServerOffsetPacket",
    "Suit",
    "expected_kind",
    # Exceptions
    "CardWireError",
    "PacketDecodeError",
    "PacketEncodeError",
    "PacketFramingError",
    "StreamReadError",
    "TruncatedPacketError",
    "UnknownSuitError",
]
