"""
Correlation IDs tying log lines to one connection or one CLI run.

A server handling many connections wraps each connection's read loop in
correlation_context(); every codec and framer record logged inside it,
in any task spawned from it, carries that connection's ID.
"""

from __future__ import annotations

import contextvars
import uuid
from collections.abc import Generator
from contextlib import contextmanager

__all__ = [
    "correlation_context",
    "get_correlation_id",
    "new_correlation_id",
]

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "cardwire_correlation_id",
    default=None,
)


def new_correlation_id() -> str:
    return uuid.uuid4().hex


def get_correlation_id() -> str | None:
    return _correlation_id.get()


@contextmanager
def correlation_context(correlation_id: str | None = None) -> Generator[str]:
    """Scope a correlation ID, generating one if none is given.

    Example:
        async def handle(reader, writer):
            with correlation_context(f"{writer.get_extra_info('peername')}"):
                roster = await CardWireProtocol.read_handshake_async(PacketKind.CLIENT_ROSTER, reader)
    """
    correlation_id = correlation_id or new_correlation_id()
    token = _correlation_id.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id.reset(token)
