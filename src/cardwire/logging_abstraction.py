"""Logging for cardwire.

Every module logs through get_logger(__name__), a thin wrapper over the
stdlib logger of the same name that carries structured context (message
kind, data preview, ...) on each record. Records propagate to the
"cardwire" package logger, where configure_logging() installs the JSON
and/or human-readable handlers. The library itself never installs
handlers; applications (and the cardwire-inspect CLI) call
configure_logging() once at startup.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import cast

from typing_extensions import override

from cardwire.correlation import get_correlation_id

__all__ = [
    "CardWireLogger",
    "HumanReadableFormatter",
    "JSONFormatter",
    "configure_logging",
    "get_logger",
]

# Marks handlers installed by configure_logging so a second call replaces them
_HANDLER_FLAG = "_cardwire_handler"


def _context(record: logging.LogRecord) -> Mapping[str, object] | None:
    extra_data = getattr(record, "extra_data", None)
    if isinstance(extra_data, Mapping) and extra_data:
        return cast("Mapping[str, object]", extra_data)
    return None


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    @override
    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, object] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
            "correlation_id": get_correlation_id(),
        }

        context = _context(record)
        if context:
            log_data["context"] = dict(context)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Single-line text: time, level, logger:line, short correlation ID, message, context."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s [%(name)s:%(lineno)d] %(correlation_id)s > %(message)s",
            datefmt="%m/%d/%y %H:%M:%S",
        )

    @override
    def format(self, record: logging.LogRecord) -> str:
        correlation_id = get_correlation_id()
        record.correlation_id = f"[{correlation_id[:8]}]" if correlation_id else "[--------]"

        formatted = super().format(record)

        context = _context(record)
        if context:
            formatted = f"{formatted} | " + " | ".join(f"{k}={v}" for k, v in context.items())

        return formatted


def _human_handler(human_output: str) -> logging.Handler:
    if human_output == "stdout":
        return logging.StreamHandler(sys.stdout)
    if human_output == "stderr":
        return logging.StreamHandler(sys.stderr)
    try:
        human_path = Path(human_output)
        human_path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(human_path, mode="a")
    except OSError as e:
        print(f"Warning: Failed to create human log file {human_output}: {e}", file=sys.stderr)
        return logging.StreamHandler(sys.stderr)


def _build_handlers(log_format: str, json_file: str | Path | None, human_output: str) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []

    if log_format in ("json", "both") and json_file:
        try:
            json_path = Path(json_file)
            json_path.parent.mkdir(parents=True, exist_ok=True)
            json_handler = logging.FileHandler(json_path, mode="a")
            json_handler.setFormatter(JSONFormatter())
            handlers.append(json_handler)
        except OSError as e:
            print(f"Warning: Failed to create JSON log file {json_file}: {e}", file=sys.stderr)

    if log_format in ("human", "both"):
        human_handler = _human_handler(human_output)
        human_handler.setFormatter(HumanReadableFormatter())
        handlers.append(human_handler)

    return handlers


def configure_logging(
    log_format: str | None = None,
    json_file: str | Path | None = None,
    human_output: str | None = None,
    level: int | None = None,
) -> logging.Logger:
    """Install handlers on the "cardwire" package logger.

    Arguments left as None fall back to the CARDWIRE_LOG_* environment
    settings; level falls back to DEBUG when CARDWIRE_DEBUG is set, else
    INFO. Calling again replaces the handlers from the previous call.

    Returns:
        The package logger

    """
    from cardwire.const import (
        CARDWIRE_DEBUG,
        CARDWIRE_LOG_FORMAT,
        CARDWIRE_LOG_HUMAN_OUTPUT,
        CARDWIRE_LOG_JSON_FILE,
        CARDWIRE_LOG_NAME,
    )

    package_logger = logging.getLogger(CARDWIRE_LOG_NAME)
    for handler in list(package_logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            package_logger.removeHandler(handler)
            handler.close()

    if level is None:
        level = logging.DEBUG if CARDWIRE_DEBUG else logging.INFO
    package_logger.setLevel(level)

    for handler in _build_handlers(
        log_format or CARDWIRE_LOG_FORMAT,
        json_file or CARDWIRE_LOG_JSON_FILE,
        human_output or CARDWIRE_LOG_HUMAN_OUTPUT,
    ):
        setattr(handler, _HANDLER_FLAG, True)
        package_logger.addHandler(handler)

    return package_logger


class CardWireLogger:
    """Module logger that attaches structured context to every record.

    Context passed as ``extra`` lands on the record as ``extra_data``, which
    both formatters render. Records report the caller's module and line.
    """

    def __init__(self, name: str) -> None:
        self.name: str = name
        self.logger: logging.Logger = logging.getLogger(name)

    def _log(self, level: int, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        self.logger.log(
            level,
            msg,
            *args,
            extra={"extra_data": dict(extra)} if extra else None,
            stacklevel=3,
        )

    def debug(self, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        self._log(logging.DEBUG, msg, *args, extra=extra)

    def info(self, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        self._log(logging.INFO, msg, *args, extra=extra)

    def warning(self, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        self._log(logging.WARNING, msg, *args, extra=extra)

    def error(self, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        self._log(logging.ERROR, msg, *args, extra=extra)


def get_logger(name: str) -> CardWireLogger:
    return CardWireLogger(name)
