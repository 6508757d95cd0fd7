"""Codec settings model."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field

from cardwire.const import CARDWIRE_MAX_BUFFER_SIZE, CARDWIRE_METRICS_PORT, CARDWIRE_PROTOCOL_VERSION
from cardwire.protocol.packet_framer import PacketFramer
from cardwire.protocol.packet_types import (
    Direction,
    PacketKind,
    ProtocolPhase,
    ProtocolVersion,
    expected_kind,
)


class CodecSettings(BaseModel):
    """Settings shared by every connection speaking the card protocol.

    Both ends must be configured with the same protocol_version; the wire
    does not carry it.
    """

    protocol_version: ProtocolVersion = ProtocolVersion.V2_ROSTER
    # None: each framer is bounded by the largest legal message of its kind
    max_buffer_size: Annotated[int, Field(gt=0)] | None = CARDWIRE_MAX_BUFFER_SIZE
    metrics_port: int = Field(default=CARDWIRE_METRICS_PORT, ge=0, le=65535)

    @classmethod
    def from_env(cls) -> CodecSettings:
        """Build settings from CARDWIRE_* environment variables."""
        return cls(
            protocol_version=ProtocolVersion(CARDWIRE_PROTOCOL_VERSION),
            max_buffer_size=CARDWIRE_MAX_BUFFER_SIZE,
            metrics_port=CARDWIRE_METRICS_PORT,
        )

    def kind_for(self, phase: ProtocolPhase, direction: Direction) -> PacketKind:
        """Message kind received in the given phase and direction."""
        return expected_kind(self.protocol_version, phase, direction)

    def framer_for(self, phase: ProtocolPhase, direction: Direction) -> PacketFramer:
        """Create a receive buffer for the given phase and direction."""
        return PacketFramer(self.kind_for(phase, direction), max_buffer_size=self.max_buffer_size)
