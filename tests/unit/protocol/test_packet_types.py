"""Unit tests for packet dataclasses, the suit table and kind selection."""

from __future__ import annotations

import dataclasses

import pytest

from cardwire.protocol.exceptions import UnknownSuitError
from cardwire.protocol.packet_types import (
    HANDSHAKE_KINDS,
    PACKET_CLASSES,
    Card,
    ClientPacket,
    ClientRoster,
    Direction,
    PacketKind,
    ProtocolPhase,
    ProtocolVersion,
    ServerHandshakePacket,
    Suit,
    expected_kind,
    kind_of,
)
from tests.fixtures.wire_packets import CLIENT_HELLO_ALICE_OBJ, SERVER_HANDSHAKE_ALICE_BOB_OBJ

UNKNOWN_SUIT_BYTES = [0x00, 0x05, 0x09, 0xFF]


class TestSuitTable:
    """Tests for the frozen suit byte table."""

    def test_wire_values(self) -> None:
        assert Suit.CLUBS.to_byte() == b"\x01"
        assert Suit.DIAMONDS.to_byte() == b"\x02"
        assert Suit.HEARTS.to_byte() == b"\x03"
        assert Suit.SPADES.to_byte() == b"\x04"

    def test_from_byte(self) -> None:
        for suit in Suit:
            assert Suit.from_byte(suit.value) is suit

    def test_from_byte_unknown(self) -> None:
        for value in UNKNOWN_SUIT_BYTES:
            with pytest.raises(UnknownSuitError) as exc_info:
                Suit.from_byte(value)
            assert exc_info.value.suit_byte == value


class TestPacketDataclasses:
    def test_packets_are_frozen(self) -> None:
        packet = ClientPacket(card=Card(value=1, suit=Suit.CLUBS))
        with pytest.raises(dataclasses.FrozenInstanceError):
            packet.card = Card(value=2, suit=Suit.CLUBS)  # type: ignore[misc]

    def test_rosters_store_hashable_tuples(self) -> None:
        packet = ClientRoster(names=["Alice", "Bob"])
        assert packet.names == ("Alice", "Bob")
        assert hash(packet) == hash(ClientRoster(names=("Alice", "Bob")))
        assert len({SERVER_HANDSHAKE_ALICE_BOB_OBJ, ServerHandshakePacket(names=["Alice", "Bob"])}) == 1

    def test_every_kind_has_a_class(self) -> None:
        assert set(PACKET_CLASSES) == set(PacketKind)

    def test_handshake_kinds(self) -> None:
        assert {
            PacketKind.CLIENT_HELLO,
            PacketKind.CLIENT_ROSTER,
            PacketKind.SERVER_HANDSHAKE,
        } == HANDSHAKE_KINDS


class TestKindOf:
    def test_kind_of_packets(self) -> None:
        assert kind_of(CLIENT_HELLO_ALICE_OBJ) is PacketKind.CLIENT_HELLO
        assert kind_of(SERVER_HANDSHAKE_ALICE_BOB_OBJ) is PacketKind.SERVER_HANDSHAKE

    def test_kind_of_non_packet(self) -> None:
        with pytest.raises(TypeError, match="Card"):
            kind_of(Card(value=1, suit=Suit.CLUBS))  # type: ignore[arg-type]


class TestExpectedKind:
    """Tests for message kind selection per version, phase and direction."""

    @pytest.mark.parametrize(
        ("version", "phase", "direction", "kind"),
        [
            (ProtocolVersion.V1_NAMED, ProtocolPhase.HANDSHAKE, Direction.CLIENT_TO_SERVER, PacketKind.CLIENT_HELLO),
            (ProtocolVersion.V1_NAMED, ProtocolPhase.HANDSHAKE, Direction.SERVER_TO_CLIENT, PacketKind.SERVER_HANDSHAKE),
            (ProtocolVersion.V1_NAMED, ProtocolPhase.GAMEPLAY, Direction.CLIENT_TO_SERVER, PacketKind.CLIENT_PACKET),
            (ProtocolVersion.V1_NAMED, ProtocolPhase.GAMEPLAY, Direction.SERVER_TO_CLIENT, PacketKind.SERVER_NAME),
            (ProtocolVersion.V2_ROSTER, ProtocolPhase.HANDSHAKE, Direction.CLIENT_TO_SERVER, PacketKind.CLIENT_ROSTER),
            (
                ProtocolVersion.V2_ROSTER,
                ProtocolPhase.HANDSHAKE,
                Direction.SERVER_TO_CLIENT,
                PacketKind.SERVER_HANDSHAKE,
            ),
            (ProtocolVersion.V2_ROSTER, ProtocolPhase.GAMEPLAY, Direction.CLIENT_TO_SERVER, PacketKind.CLIENT_PACKET),
            (ProtocolVersion.V2_ROSTER, ProtocolPhase.GAMEPLAY, Direction.SERVER_TO_CLIENT, PacketKind.SERVER_OFFSET),
        ],
    )
    def test_table(
        self,
        version: ProtocolVersion,
        phase: ProtocolPhase,
        direction: Direction,
        kind: PacketKind,
    ) -> None:
        assert expected_kind(version, phase, direction) is kind

    def test_accepts_plain_strings(self) -> None:
        assert expected_kind("v2", "gameplay", "s2c") is PacketKind.SERVER_OFFSET  # type: ignore[arg-type]

    def test_unknown_version(self) -> None:
        with pytest.raises(ValueError):
            expected_kind("v3", "gameplay", "s2c")  # type: ignore[arg-type]
