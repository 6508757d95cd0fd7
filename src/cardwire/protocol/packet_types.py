"""Card protocol packet kinds and dataclass structures.

This module defines the suit table, the Card value and one dataclass per
wire message. The wire carries no discriminant byte: both ends know which
kind comes next from the protocol version and phase (see expected_kind).

Message Overview:
- ClientHello / ClientRoster: client -> server handshake (version-specific)
- ServerHandshakePacket: server -> client authoritative roster
- ClientPacket: client -> server played card
- ServerNamePacket / ServerOffsetPacket: server -> client card broadcast
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, StrEnum

from cardwire.protocol.exceptions import UnknownSuitError


class Suit(IntEnum):
    """Card suit with its frozen one-byte wire value.

    Client and server builds must agree on this table. Never renumber an
    existing member; new suits take new byte values.
    """

    CLUBS = 1
    DIAMONDS = 2
    HEARTS = 3
    SPADES = 4

    @classmethod
    def from_byte(cls, value: int) -> Suit:
        """Map a wire byte to a Suit.

        Raises:
            UnknownSuitError: If the byte is not in the table

        """
        try:
            return cls(value)
        except ValueError as e:
            raise UnknownSuitError(value, bytes([value & 0xFF])) from e

    def to_byte(self) -> bytes:
        """Return the one-byte wire encoding."""
        return bytes([self.value])


@dataclass(frozen=True)
class Card:
    """A card as carried on the wire.

    Attributes:
        value: Rank/points, signed 32-bit (meaning is up to game logic)
        suit: Card suit

    """

    value: int
    suit: Suit


@dataclass(frozen=True)
class ClientPacket:
    """Client plays a card."""

    card: Card


@dataclass(frozen=True)
class ClientHello:
    """Single-name client handshake (protocol v1)."""

    name: str


@dataclass(frozen=True)
class ClientRoster:
    """Multi-name client handshake used during lobby setup (protocol v2)."""

    names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "names", tuple(self.names))


@dataclass(frozen=True)
class ServerNamePacket:
    """Card broadcast tagged with the display name of the player who played it."""

    card: Card
    name: str


@dataclass(frozen=True)
class ServerOffsetPacket:
    """Card broadcast tagged with a signed seat offset.

    The offset is opaque to the codec; game logic reads it as "passed N
    seats", sign giving the direction.
    """

    card: Card
    offset: int


@dataclass(frozen=True)
class ServerHandshakePacket:
    """Authoritative roster sent to every client once the lobby is final.

    Order is seating/turn order. Any iterable of names is stored as a tuple.
    """

    names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "names", tuple(self.names))


Packet = ClientPacket | ClientHello | ClientRoster | ServerNamePacket | ServerOffsetPacket | ServerHandshakePacket


class PacketKind(StrEnum):
    """Every message kind the codec knows how to encode and decode."""

    CLIENT_PACKET = "client_packet"
    CLIENT_HELLO = "client_hello"
    CLIENT_ROSTER = "client_roster"
    SERVER_NAME = "server_name"
    SERVER_OFFSET = "server_offset"
    SERVER_HANDSHAKE = "server_handshake"


PACKET_CLASSES: dict[PacketKind, type] = {
    PacketKind.CLIENT_PACKET: ClientPacket,
    PacketKind.CLIENT_HELLO: ClientHello,
    PacketKind.CLIENT_ROSTER: ClientRoster,
    PacketKind.SERVER_NAME: ServerNamePacket,
    PacketKind.SERVER_OFFSET: ServerOffsetPacket,
    PacketKind.SERVER_HANDSHAKE: ServerHandshakePacket,
}

HANDSHAKE_KINDS = frozenset(
    {PacketKind.CLIENT_HELLO, PacketKind.CLIENT_ROSTER, PacketKind.SERVER_HANDSHAKE},
)


def kind_of(packet: Packet) -> PacketKind:
    """Return the PacketKind of a packet instance.

    Raises:
        TypeError: If the object is not a packet dataclass

    """
    for kind, cls in PACKET_CLASSES.items():
        if type(packet) is cls:
            return kind
    error_msg = f"Not a card protocol packet: {type(packet).__name__}"
    raise TypeError(error_msg)


class ProtocolVersion(StrEnum):
    """Wire layout generation, agreed out of band by both ends.

    V1_NAMED: ClientHello handshake, ServerNamePacket card broadcasts
    V2_ROSTER: ClientRoster handshake, ServerOffsetPacket card broadcasts
    """

    V1_NAMED = "v1"
    V2_ROSTER = "v2"


class ProtocolPhase(StrEnum):
    HANDSHAKE = "handshake"
    GAMEPLAY = "gameplay"


class Direction(StrEnum):
    CLIENT_TO_SERVER = "c2s"
    SERVER_TO_CLIENT = "s2c"


_EXPECTED_KINDS: dict[tuple[ProtocolVersion, ProtocolPhase, Direction], PacketKind] = {
    (ProtocolVersion.V1_NAMED, ProtocolPhase.HANDSHAKE, Direction.CLIENT_TO_SERVER): PacketKind.CLIENT_HELLO,
    (ProtocolVersion.V1_NAMED, ProtocolPhase.HANDSHAKE, Direction.SERVER_TO_CLIENT): PacketKind.SERVER_HANDSHAKE,
    (ProtocolVersion.V1_NAMED, ProtocolPhase.GAMEPLAY, Direction.CLIENT_TO_SERVER): PacketKind.CLIENT_PACKET,
    (ProtocolVersion.V1_NAMED, ProtocolPhase.GAMEPLAY, Direction.SERVER_TO_CLIENT): PacketKind.SERVER_NAME,
    (ProtocolVersion.V2_ROSTER, ProtocolPhase.HANDSHAKE, Direction.CLIENT_TO_SERVER): PacketKind.CLIENT_ROSTER,
    (ProtocolVersion.V2_ROSTER, ProtocolPhase.HANDSHAKE, Direction.SERVER_TO_CLIENT): PacketKind.SERVER_HANDSHAKE,
    (ProtocolVersion.V2_ROSTER, ProtocolPhase.GAMEPLAY, Direction.CLIENT_TO_SERVER): PacketKind.CLIENT_PACKET,
    (ProtocolVersion.V2_ROSTER, ProtocolPhase.GAMEPLAY, Direction.SERVER_TO_CLIENT): PacketKind.SERVER_OFFSET,
}


def expected_kind(version: ProtocolVersion, phase: ProtocolPhase, direction: Direction) -> PacketKind:
    """Return the message kind the receiving side must decode next.

    Example:
        >>> expected_kind(ProtocolVersion.V2_ROSTER, ProtocolPhase.GAMEPLAY, Direction.SERVER_TO_CLIENT)
        <PacketKind.SERVER_OFFSET: 'server_offset'>

    """
    return _EXPECTED_KINDS[(ProtocolVersion(version), ProtocolPhase(phase), Direction(direction))]
