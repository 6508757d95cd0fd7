"""
Inspect card protocol bytes from the command line.

Usage:
    # Decode hex strings as a given message kind
    cardwire-inspect decode --kind server_offset "00 00 00 0a 04 00 00 00 03"

    # Decode every non-empty line of a capture file
    cardwire-inspect decode --kind client_roster --file captures/lobby.txt

    # Encode a roster (ClientRoster and ServerHandshakePacket share the layout)
    cardwire-inspect encode-roster Alice Bob
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from cardwire.const import CARDWIRE_VERSION
from cardwire.correlation import correlation_context
from cardwire.logging_abstraction import configure_logging, get_logger
from cardwire.protocol import (
    CardWireError,
    CardWireProtocol,
    PacketKind,
    ServerHandshakePacket,
    TruncatedPacketError,
)

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_DECODE_FAILED = 1
EXIT_USAGE = 2


def _hex_inputs(args: argparse.Namespace) -> list[str]:
    inputs: list[str] = list(args.hex)
    if args.file:
        with Path(args.file).open(encoding="utf-8") as f:
            inputs.extend(line.strip() for line in f if line.strip() and not line.startswith("#"))
    return inputs


def decode_command(args: argparse.Namespace) -> int:
    """Decode each hex input and print the packet or the failure reason."""
    kind = PacketKind(args.kind)
    inputs = _hex_inputs(args)
    if not inputs:
        print("No input given", file=sys.stderr)
        return EXIT_USAGE

    failures = 0
    for text in inputs:
        try:
            data = bytes.fromhex(text)
        except ValueError:
            print(f"{text!r}: not a hex string", file=sys.stderr)
            failures += 1
            continue

        try:
            packet, consumed = CardWireProtocol.decode_with_length(kind, data)
        except TruncatedPacketError as e:
            print(f"{data.hex(' ')}: truncated (need {e.needed} bytes, have {e.available})")
            failures += 1
            continue
        except CardWireError as e:
            print(f"{data.hex(' ')}: {e}")
            failures += 1
            continue

        trailing = len(data) - consumed
        suffix = f" (+{trailing} trailing bytes)" if trailing else ""
        print(f"{data.hex(' ')}: {packet}{suffix}")

    logger.debug("Decoded %d inputs, %d failed", len(inputs), failures, extra={"kind": kind.value})
    return EXIT_DECODE_FAILED if failures else EXIT_OK


def encode_roster_command(args: argparse.Namespace) -> int:
    """Print the hex encoding of a roster."""
    try:
        data = CardWireProtocol.encode(ServerHandshakePacket(names=list(args.names)))
    except CardWireError as e:
        print(str(e), file=sys.stderr)
        return EXIT_USAGE
    print(data.hex(" "))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cardwire-inspect", description="Decode and encode card protocol packets")
    parser.add_argument("--version", action="version", version=f"%(prog)s {CARDWIRE_VERSION}")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    decode_parser = subparsers.add_parser("decode", help="Decode hex bytes as a message kind")
    decode_parser.add_argument(
        "--kind",
        required=True,
        choices=[kind.value for kind in PacketKind],
        help="Message kind expected at this point of the protocol",
    )
    decode_parser.add_argument("--file", help="File with one hex message per line")
    decode_parser.add_argument("hex", nargs="*", help="Hex-encoded message bytes")
    decode_parser.set_defaults(func=decode_command)

    roster_parser = subparsers.add_parser("encode-roster", help="Encode a roster of player names")
    roster_parser.add_argument("names", nargs="*", help="Player names in seating order")
    roster_parser.set_defaults(func=encode_roster_command)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(level=logging.DEBUG if args.debug else None)

    with correlation_context():
        try:
            return args.func(args)
        except OSError as e:
            logger.error("Cannot read input: %s", e)
            return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
