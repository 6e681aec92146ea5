"""Binary uplink log file for capture and replay.

File format:
  [magic: "EPUL" 4 bytes]
  [version: uint16 LE]
  [record 0]
  [record 1]
  ...

Each record:
  [timestamp: uint64 LE, ns][f_port: uint8][length: uint16 LE][payload]

A record cut short at the end of the file (writer killed mid-write) is
ignored by the reader.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator

from .decoder import DecodeResult, UplinkDecoder

MAGIC = b"EPUL"
VERSION = 1
FILE_HEADER_FMT = "<4sH"
FILE_HEADER_SIZE = struct.calcsize(FILE_HEADER_FMT)  # 6

RECORD_HEADER_FMT = "<QBH"
RECORD_HEADER_SIZE = struct.calcsize(RECORD_HEADER_FMT)  # 11

MAX_PAYLOAD = 0xFFFF


@dataclass
class Uplink:
    timestamp: int
    f_port: int
    payload: bytes


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------

class LogWriter:
    """Appends uplinks to a log file."""

    def __init__(self, path: str | Path):
        self._f: BinaryIO = open(path, "wb")
        self._f.write(struct.pack(FILE_HEADER_FMT, MAGIC, VERSION))
        self.count = 0

    def write_uplink(self, timestamp: int, f_port: int, payload: bytes) -> None:
        payload = bytes(payload)
        if len(payload) > MAX_PAYLOAD:
            raise ValueError(f"payload too large: {len(payload)} bytes")
        self._f.write(struct.pack(RECORD_HEADER_FMT,
                                  timestamp, f_port, len(payload)))
        self._f.write(payload)
        self.count += 1

    def flush(self) -> None:
        self._f.flush()

    def close(self) -> None:
        self._f.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------

class LogReader:
    """Reads an uplink log file sequentially."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._f: BinaryIO | None = None
        self._data_start: int = 0

    def open(self) -> None:
        """Open the file and check its header."""
        self._f = open(self._path, "rb")

        try:
            header = self._f.read(FILE_HEADER_SIZE)
            if len(header) < FILE_HEADER_SIZE:
                raise ValueError("Truncated file header")

            magic, version = struct.unpack(FILE_HEADER_FMT, header)
            if magic != MAGIC:
                raise ValueError(f"Bad magic: {magic!r}")
            if version != VERSION:
                raise ValueError(f"Unsupported version: {version}")
        except ValueError:
            self.close()
            raise

        self._data_start = self._f.tell()

    def uplinks(self, ts_min: int | None = None,
                ts_max: int | None = None) -> Iterator[Uplink]:
        """Iterate over stored uplinks, optionally within a time range."""
        if self._f is None:
            self.open()

        assert self._f is not None
        self._f.seek(self._data_start)

        while True:
            hdr = self._f.read(RECORD_HEADER_SIZE)
            if len(hdr) < RECORD_HEADER_SIZE:
                break
            timestamp, f_port, length = struct.unpack(RECORD_HEADER_FMT, hdr)
            payload = self._f.read(length)
            if len(payload) < length:
                break

            if ts_min is not None and timestamp < ts_min:
                continue
            if ts_max is not None and timestamp > ts_max:
                continue
            yield Uplink(timestamp, f_port, payload)

    def records(self, ts_min: int | None = None, ts_max: int | None = None,
                decoder: UplinkDecoder | None = None
                ) -> Iterator[tuple[int, DecodeResult]]:
        """Decode stored uplinks; truncated payloads are reported in errors."""
        if decoder is None:
            decoder = UplinkDecoder(strict=False)
        for up in self.uplinks(ts_min, ts_max):
            yield up.timestamp, decoder.feed(up.payload, up.f_port)

    def close(self) -> None:
        if self._f:
            self._f.close()
            self._f = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *exc):
        self.close()
