"""Metrics module."""

from .registry import (
    record_decode_error,
    record_framer_discard,
    record_lossy_text,
    record_packet_decoded,
    record_packet_encoded,
    start_metrics_server,
)

__all__ = [
    "record_decode_error",
    "record_framer_discard",
    "record_lossy_text",
    "record_packet_decoded",
    "record_packet_encoded",
    "start_metrics_server",
]
