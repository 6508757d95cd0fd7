"""Wire constants and environment-driven settings for cardwire.

Environment variables are read once at import time.
"""

import os

from cardwire import __version__

__all__ = [
    "CARDWIRE_DEBUG",
    "CARDWIRE_LOG_FORMAT",
    "CARDWIRE_LOG_HUMAN_OUTPUT",
    "CARDWIRE_LOG_JSON_FILE",
    "CARDWIRE_LOG_NAME",
    "CARDWIRE_MAX_BUFFER_SIZE",
    "CARDWIRE_METRICS_PORT",
    "CARDWIRE_PROTOCOL_VERSION",
    "CARDWIRE_VERSION",
    "CARD_LENGTH",
    "I32_MAX",
    "I32_MIN",
    "MAX_NAME_BYTES",
    "MAX_ROSTER_SIZE",
    "SERVER_NAME_MIN_LENGTH",
    "SERVER_OFFSET_LENGTH",
    "YES_ANSWER",
]

YES_ANSWER = ("true", "1", "yes", "y", "t", 1, "on", "o")
CARDWIRE_LOG_NAME: str = "cardwire"
CARDWIRE_VERSION: str = __version__

# Wire layout (all multi-byte integers big-endian)
CARD_LENGTH = 5  # i32 value + u8 suit
SERVER_NAME_MIN_LENGTH = CARD_LENGTH + 1  # card + u8 name length
SERVER_OFFSET_LENGTH = CARD_LENGTH + 4  # card + i32 offset
MAX_NAME_BYTES = 0xFF
MAX_ROSTER_SIZE = 0xFF
I32_MIN = -(2**31)
I32_MAX = 2**31 - 1

CARDWIRE_DEBUG = os.environ.get("CARDWIRE_DEBUG", "0").casefold() in YES_ANSWER

CARDWIRE_LOG_FORMAT: str = os.environ.get("CARDWIRE_LOG_FORMAT", "human")  # "json", "human", or "both"
_json_file = os.environ.get("CARDWIRE_LOG_JSON_FILE")
CARDWIRE_LOG_JSON_FILE: str | None = _json_file if _json_file else None
CARDWIRE_LOG_HUMAN_OUTPUT: str = os.environ.get("CARDWIRE_LOG_HUMAN_OUTPUT", "stderr")

_metrics_port = os.environ.get("CARDWIRE_METRICS_PORT", "9400")
try:
    _metrics_port_value: int = int(_metrics_port)
except ValueError:
    _metrics_port_value = 9400
CARDWIRE_METRICS_PORT: int = _metrics_port_value

# Unset: receive buffers are bounded only by the largest legal message
_max_buffer = os.environ.get("CARDWIRE_MAX_BUFFER_SIZE", "")
try:
    _max_buffer_value: int | None = int(_max_buffer)
except ValueError:
    _max_buffer_value = None
CARDWIRE_MAX_BUFFER_SIZE: int | None = _max_buffer_value if _max_buffer_value and _max_buffer_value > 0 else None

CARDWIRE_PROTOCOL_VERSION: str = os.environ.get("CARDWIRE_PROTOCOL_VERSION", "v2").casefold()
