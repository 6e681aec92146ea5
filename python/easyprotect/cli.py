"""easyprotect command-line tool."""

from __future__ import annotations

import argparse
import json
import logging
import struct
import sys

from .decoder import DecodeResult, decode_uplink
from .packets import PacketType
from .storage import LogReader, LogWriter


def _format_result(result: DecodeResult, as_json: bool) -> str:
    if as_json:
        return json.dumps(result.to_dict())
    rec = result.data
    if rec.is_empty:
        return "(empty payload)"
    try:
        name = PacketType(rec.packet_type).name
    except ValueError:
        name = f"type=0x{rec.packet_type:X}"
    status = rec.status_interpretation
    if status is not None and not isinstance(status, str):
        status = ", ".join(f"{k}={v}" for k, v in status.to_dict().items())
    line = f"{name}/{rec.packet_subtype} port={rec.port} " \
           f"{rec.packet_type_info}: {status}"
    if rec.date is not None:
        line += f" date={rec.date}"
    for err in result.errors:
        line += f" error={err}"
    return line


def _parse_hex(text: str) -> bytes:
    return bytes.fromhex(text.replace(":", "").replace(" ", ""))


def cmd_decode(args: argparse.Namespace) -> int:
    """Decode hex payloads given on the command line."""
    status = 0
    for text in args.payload:
        try:
            result = decode_uplink(_parse_hex(text), args.port)
        except ValueError as exc:
            print(f"{text}: {exc}", file=sys.stderr)
            status = 1
            continue
        print(_format_result(result, args.json))
    return status


def cmd_dump(args: argparse.Namespace) -> int:
    """Dump a log file to stdout."""
    with LogReader(args.file) as reader:
        for ts, result in reader.records():
            ts_s = ts / 1_000_000_000
            if args.json:
                print(json.dumps({"timestamp": ts, **result.to_dict()}))
            else:
                print(f"[{ts_s:12.6f}] {_format_result(result, False)}")
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    """Print per-variant packet counts for a log file."""
    counts: dict[str, int] = {}
    total = 0
    rejected = 0
    ts_min: int | None = None
    ts_max: int | None = None

    with LogReader(args.file) as reader:
        for ts, result in reader.records():
            total += 1
            if result.errors:
                rejected += 1
                continue
            rec = result.data
            if rec.is_empty:
                key = "empty"
            else:
                key = f"0x{rec.packet_type:X}/0x{rec.packet_subtype:X}"
            counts[key] = counts.get(key, 0) + 1
            if ts_min is None or ts < ts_min:
                ts_min = ts
            if ts_max is None or ts > ts_max:
                ts_max = ts

    print(f"File:       {args.file}")
    print(f"Uplinks:    {total:,}")
    print(f"Truncated:  {rejected:,}")
    if ts_min is not None and ts_max is not None:
        print(f"Time range: {ts_min / 1e9:.6f}s - {ts_max / 1e9:.6f}s")
    else:
        print("Time range: (empty)")
    print()
    for key in sorted(counts):
        print(f"  {key:<12s} {counts[key]:8,}")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    """Convert a text file of '[timestamp] fport hex' lines to a log file."""
    written = 0
    with open(args.file) as src, LogWriter(args.out) as writer:
        for lineno, line in enumerate(src, 1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            parts = line.split()
            try:
                if len(parts) == 3:
                    ts, port, text = int(parts[0]), int(parts[1]), parts[2]
                elif len(parts) == 2:
                    ts, port, text = 0, int(parts[0]), parts[1]
                else:
                    raise ValueError("expected '[timestamp] fport hex'")
                writer.write_uplink(ts, port, _parse_hex(text))
            except (ValueError, struct.error) as exc:
                print(f"{args.file}:{lineno}: {exc}", file=sys.stderr)
                return 1
            written += 1
    print(f"wrote {written} uplinks to {args.out}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="easyprotect", description="Easy Protect uplink decoder")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # decode
    p_decode = sub.add_parser("decode", help="Decode hex payloads")
    p_decode.add_argument("payload", nargs="+", help="Uplink payload as hex")
    p_decode.add_argument("--port", type=int, default=0, help="Uplink fPort")
    p_decode.add_argument("--json", action="store_true", help="JSON output")

    # dump
    p_dump = sub.add_parser("dump", help="Decode every uplink in a log file")
    p_dump.add_argument("file", help="Path to uplink log file")
    p_dump.add_argument("--json", action="store_true", help="JSON lines output")

    # info
    p_info = sub.add_parser("info", help="Show summary info about a log file")
    p_info.add_argument("file", help="Path to uplink log file")

    # import
    p_import = sub.add_parser("import", help="Build a log file from hex text")
    p_import.add_argument("file", help="Text file, one uplink per line")
    p_import.add_argument("out", help="Path of the log file to write")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s")

    if args.command == "decode":
        return cmd_decode(args)
    elif args.command == "dump":
        return cmd_dump(args)
    elif args.command == "info":
        return cmd_info(args)
    elif args.command == "import":
        return cmd_import(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
