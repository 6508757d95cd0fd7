"""Prometheus metrics registry for the card protocol codec."""

import threading
from typing import Final

from prometheus_client import (  # type: ignore[import-untyped]
    Counter,
    start_http_server,
)

from cardwire.const import CARDWIRE_METRICS_PORT

# Metric definitions
cardwire_packets_encoded_total: Final = Counter(  # type: ignore[assignment]
    "cardwire_packets_encoded_total",
    "Total packets encoded",
    ["kind"],
)

cardwire_packets_decoded_total: Final = Counter(  # type: ignore[assignment]
    "cardwire_packets_decoded_total",
    "Total packet decode attempts",
    ["kind", "outcome"],
)

cardwire_decode_errors_total: Final = Counter(  # type: ignore[assignment]
    "cardwire_decode_errors_total",
    "Total decode errors",
    ["kind", "reason"],
)

cardwire_lossy_text_total: Final = Counter(  # type: ignore[assignment]
    "cardwire_lossy_text_total",
    "Total text fields decoded with UTF-8 substitution",
)

cardwire_framer_discards_total: Final = Counter(  # type: ignore[assignment]
    "cardwire_framer_discards_total",
    "Total messages or buffers discarded by receive framers",
    ["kind", "reason"],
)

_server_state = {"started": False}
_server_lock = threading.Lock()


def start_metrics_server(port: int = CARDWIRE_METRICS_PORT) -> None:
    """Start Prometheus HTTP metrics server (idempotent)."""
    with _server_lock:
        if not _server_state["started"]:
            start_http_server(port)  # type: ignore[no-untyped-call]
            _server_state["started"] = True


def record_packet_encoded(kind: str) -> None:
    """Record an encoded packet."""
    cardwire_packets_encoded_total.labels(kind=kind).inc()  # type: ignore[no-untyped-call]


def record_packet_decoded(kind: str, outcome: str) -> None:
    """Record a decode attempt ("ok", "truncated", "invalid", "io_error")."""
    cardwire_packets_decoded_total.labels(kind=kind, outcome=outcome).inc()  # type: ignore[no-untyped-call]


def record_decode_error(kind: str, reason: str) -> None:
    """Record a decode error."""
    cardwire_decode_errors_total.labels(kind=kind, reason=reason).inc()  # type: ignore[no-untyped-call]


def record_lossy_text() -> None:
    """Record a text field that needed UTF-8 substitution."""
    cardwire_lossy_text_total.inc()  # type: ignore[no-untyped-call]


def record_framer_discard(kind: str, reason: str) -> None:
    """Record a framer dropping a bad message ("unknown_suit") or its whole buffer ("buffer_overflow")."""
    cardwire_framer_discards_total.labels(kind=kind, reason=reason).inc()  # type: ignore[no-untyped-call]
