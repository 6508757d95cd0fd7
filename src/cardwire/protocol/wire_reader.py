"""Shared parser core with buffer, blocking-stream and asyncio drivers.

Each message layout is written once, as a generator that yields the number
of bytes it needs next and receives exactly that many bytes back:

    def parse_name() -> Parser[str]:
        length = yield from read_u8()
        raw = yield length
        return decode_text(raw)

A driver feeds the generator. parse_buffer() slices an in-memory buffer and
raises TruncatedPacketError when a request cannot be met; read_stream() and
read_stream_async() pull each request from a byte source and raise
StreamReadError when the source fails or ends early. No driver reads past
what the parser requested.
"""

from __future__ import annotations

import asyncio
from collections.abc import Generator
from typing import BinaryIO, TypeVar

from cardwire.logging_abstraction import get_logger
from cardwire.metrics import record_lossy_text
from cardwire.protocol.exceptions import StreamReadError, TruncatedPacketError

T = TypeVar("T")

# A parser yields byte counts, is sent bytes, returns the decoded value
Parser = Generator[int, bytes, T]

logger = get_logger(__name__)


# =============================================================================
# Bounds helpers
# =============================================================================


def ensure_available(data: bytes | bytearray | memoryview, needed: int) -> None:
    """Raise TruncatedPacketError unless data holds at least needed bytes."""
    if len(data) < needed:
        raise TruncatedPacketError(needed, len(data), bytes(data[:16]))


def decode_text(raw: bytes) -> str:
    """Decode UTF-8, substituting U+FFFD for invalid sequences.

    Malformed text in a display-name field must never fail the packet.
    """
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        record_lossy_text()
        logger.debug("Replaced invalid UTF-8 in text field", extra={"size": len(raw)})
        return raw.decode("utf-8", errors="replace")


# =============================================================================
# Parser primitives
# =============================================================================


def read_u8() -> Parser[int]:
    raw = yield 1
    return raw[0]


def read_text() -> Parser[str]:
    """Read a u8 length prefix followed by that many bytes of text."""
    length = yield from read_u8()
    raw = (yield length) if length else b""
    return decode_text(raw)


def read_text_list() -> Parser[tuple[str, ...]]:
    """Read a u8 count followed by count length-prefixed strings."""
    count = yield from read_u8()
    names: list[str] = []
    for _ in range(count):
        name = yield from read_text()
        names.append(name)
    return tuple(names)


# =============================================================================
# Drivers
# =============================================================================


def parse_buffer(parser: Parser[T], data: bytes | bytearray | memoryview) -> tuple[T, int]:
    """Run a parser over an in-memory buffer.

    Args:
        parser: Fresh parser generator
        data: Bytes received so far (may hold trailing bytes of later messages)

    Returns:
        Tuple of (decoded value, bytes consumed)

    Raises:
        TruncatedPacketError: If the buffer ends before the parser is satisfied
        UnknownSuitError: If a suit byte is not in the table

    """
    offset = 0
    # Released on exit so a caller's bytearray can be resized afterwards
    with memoryview(data) as view:
        try:
            wanted = next(parser)
            while True:
                end = offset + wanted
                ensure_available(view, end)
                chunk = bytes(view[offset:end])
                offset = end
                wanted = parser.send(chunk)
        except StopIteration as stop:
            return stop.value, offset
        finally:
            parser.close()


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    chunks = bytearray()
    while len(chunks) < size:
        try:
            chunk = stream.read(size - len(chunks))
        except OSError as e:
            raise StreamReadError("read_failed", size, len(chunks)) from e
        if chunk is None:
            raise StreamReadError("would_block", size, len(chunks))
        if not chunk:
            raise StreamReadError("eof", size, len(chunks))
        chunks.extend(chunk)
    return bytes(chunks)


def read_stream(parser: Parser[T], stream: BinaryIO) -> T:
    """Run a parser against a blocking binary stream.

    Blocks on every read the parser requests. Must only be called where
    blocking is acceptable (a worker thread, a dedicated connection thread).

    Raises:
        StreamReadError: If a read fails or the stream ends early
        UnknownSuitError: If a suit byte is not in the table

    """
    try:
        wanted = next(parser)
        while True:
            wanted = parser.send(_read_exact(stream, wanted))
    except StopIteration as stop:
        return stop.value
    finally:
        parser.close()


async def read_stream_async(parser: Parser[T], reader: asyncio.StreamReader) -> T:
    """Run a parser against an asyncio StreamReader.

    Suspends at every read the parser requests. Timeouts are the caller's
    concern (wrap in asyncio.wait_for).

    Raises:
        StreamReadError: If a read fails or the stream ends early
        UnknownSuitError: If a suit byte is not in the table

    """
    try:
        wanted = next(parser)
        while True:
            try:
                chunk = await reader.readexactly(wanted)
            except asyncio.IncompleteReadError as e:
                raise StreamReadError("eof", wanted, len(e.partial)) from e
            except OSError as e:
                raise StreamReadError("read_failed", wanted, 0) from e
            wanted = parser.send(chunk)
    except StopIteration as stop:
        return stop.value
    finally:
        parser.close()
