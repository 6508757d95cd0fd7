"""Unit tests for metrics registry."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from cardwire.const import CARDWIRE_METRICS_PORT
from cardwire.metrics import registry
from cardwire.protocol.cardwire_protocol import CardWireProtocol
from cardwire.protocol.exceptions import UnknownSuitError
from cardwire.protocol.packet_types import PacketKind
from tests.fixtures.wire_packets import CLIENT_PACKET_8_HEARTS, CLIENT_PACKET_UNKNOWN_SUIT, SERVER_NAME_INVALID_UTF8


def _sample_value(counter, labels: dict[str, str]) -> float:  # type: ignore[no-untyped-def]
    for sample in counter.collect()[0].samples:
        if sample.name.endswith("_total") and sample.labels == labels:
            return sample.value
    return 0.0


class TestCodecMetrics:
    """Tests for encode/decode metrics."""

    def test_record_packet_encoded(self) -> None:
        """Test record_packet_encoded helper."""
        registry.record_packet_encoded("client_packet")
        samples = list(registry.cardwire_packets_encoded_total.collect()[0].samples)
        assert any(s.labels == {"kind": "client_packet"} for s in samples)

    def test_record_packet_decoded(self) -> None:
        """Test record_packet_decoded helper."""
        registry.record_packet_decoded("server_offset", "ok")
        samples = list(registry.cardwire_packets_decoded_total.collect()[0].samples)
        assert any(s.labels == {"kind": "server_offset", "outcome": "ok"} for s in samples)

    def test_record_decode_error(self) -> None:
        """Test record_decode_error helper."""
        registry.record_decode_error("client_packet", "unknown_suit")
        samples = list(registry.cardwire_decode_errors_total.collect()[0].samples)
        assert any(s.labels == {"kind": "client_packet", "reason": "unknown_suit"} for s in samples)

    def test_record_framer_discard(self) -> None:
        """Test record_framer_discard helper."""
        registry.record_framer_discard("server_handshake", "buffer_overflow")
        samples = list(registry.cardwire_framer_discards_total.collect()[0].samples)
        assert any(s.labels == {"kind": "server_handshake", "reason": "buffer_overflow"} for s in samples)


class TestCodecInstrumentation:
    """Tests that the codec itself feeds the counters."""

    def test_successful_decode_increments_ok(self) -> None:
        labels = {"kind": "client_packet", "outcome": "ok"}
        before = _sample_value(registry.cardwire_packets_decoded_total, labels)
        CardWireProtocol.decode(PacketKind.CLIENT_PACKET, CLIENT_PACKET_8_HEARTS)
        assert _sample_value(registry.cardwire_packets_decoded_total, labels) == before + 1

    def test_unknown_suit_increments_error(self) -> None:
        labels = {"kind": "client_packet", "reason": "unknown_suit"}
        before = _sample_value(registry.cardwire_decode_errors_total, labels)
        with pytest.raises(UnknownSuitError):
            CardWireProtocol.decode(PacketKind.CLIENT_PACKET, CLIENT_PACKET_UNKNOWN_SUIT)
        assert _sample_value(registry.cardwire_decode_errors_total, labels) == before + 1

    def test_lossy_text_increments(self) -> None:
        before = _sample_value(registry.cardwire_lossy_text_total, {})
        CardWireProtocol.decode(PacketKind.SERVER_NAME, SERVER_NAME_INVALID_UTF8)
        assert _sample_value(registry.cardwire_lossy_text_total, {}) == before + 1


class TestMetricsServer:
    """Tests for start_metrics_server."""

    def test_start_is_idempotent(self) -> None:
        with (
            patch.object(registry, "start_http_server") as mock_start,
            patch.dict(registry._server_state, {"started": False}),
        ):
            registry.start_metrics_server(9999)
            registry.start_metrics_server(9999)
        mock_start.assert_called_once_with(9999)

    def test_default_port_from_settings(self) -> None:
        with (
            patch.object(registry, "start_http_server") as mock_start,
            patch.dict(registry._server_state, {"started": False}),
        ):
            registry.start_metrics_server()
        mock_start.assert_called_once_with(CARDWIRE_METRICS_PORT)
