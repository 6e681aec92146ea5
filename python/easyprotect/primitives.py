"""Low-level field decoders shared by the packet variants.

Date formats follow EN13757-3:2013 Annex A:
  type G  16-bit compressed date        [yyy ddddd][yyyy mmmm]
  type F  32-bit compressed date+time   [.. mmmmmm][... hhhhh][yyy ddddd][yyyy mmmm]

No validation of the 0xFF "invalid" sentinels is done here.
"""

from __future__ import annotations

import struct
from typing import Sequence


def _buf(data: Sequence[int]) -> bytes:
    return data if isinstance(data, (bytes, bytearray)) else bytes(data)


def get_4byte_value(start: int, data: Sequence[int]) -> int:
    """Read four bytes at *start*, least significant first, as uint32."""
    return struct.unpack_from("<I", _buf(data), start)[0]


def get_3byte_value(start: int, data: Sequence[int]) -> int:
    """Assemble three bytes at *start*, least significant first."""
    return data[start] | (data[start + 1] << 8) | (data[start + 2] << 16)


def get_2byte_value(start: int, data: Sequence[int]) -> int:
    """Read two bytes at *start*, least significant first."""
    return struct.unpack_from("<H", _buf(data), start)[0]


def get_be4_value(start: int, data: Sequence[int]) -> int:
    """Read four bytes at *start*, most significant first."""
    return struct.unpack_from(">I", _buf(data), start)[0]


def get_be2_value(start: int, data: Sequence[int]) -> int:
    """Read two bytes at *start*, most significant first."""
    return struct.unpack_from(">H", _buf(data), start)[0]


def hex_str(value: int, upper: bool = False) -> str:
    """Plain base-16 rendering, no padding and no prefix."""
    return f"{value:X}" if upper else f"{value:x}"


def hex_dotted(data: Sequence[int], *indices: int) -> str:
    """Join the hex of the bytes at *indices* with '.' (e.g. version triples)."""
    return ".".join(hex_str(data[i]) for i in indices)


def decode_date(v: int) -> str:
    """Decode a type G compressed date into 'YYYY-M-D' (unpadded)."""
    day = (v & 0x1F00) >> 8
    month = v & 0x000F
    year = ((v & 0xE000) >> 10) | ((v & 0x00F0) >> 4)
    return f"20{year}-{month}-{day}"


def decode_date_and_time(v: int) -> str:
    """Decode a type F compressed timestamp into 'YYYY-MM-DDThh:mm:00Z'."""
    minute = (v & 0x3F000000) >> 24
    hour = (v & 0x001F0000) >> 16
    day = (v & 0x00001F00) >> 8
    month = v & 0x0000000F
    year = ((v & 0x0000E000) >> 10) | ((v & 0x000000F0) >> 4)
    return f"20{year:02d}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:00Z"


def _summary_bits(value: int) -> str:
    # The decimal digits of the byte are read back as hex before going to
    # binary, so 10 -> "10" -> 0x10 -> "10000".
    return format(int(str(value), 16), "b")


def build_status_summary(a: int, b: int,
                         labels: Sequence[str]) -> list[str | None]:
    """Expand the two status-summary bytes of an SP9.1 packet into labels.

    Bit strings are most-significant first with leading zeros dropped, so
    string position (not bit weight) selects the label.  For every position
    ``i`` of the first byte's string, the second byte's string is tested at
    the same position ``i``; when set, one label per position of the second
    string is appended.  Indices past the end of *labels* yield ``None``.
    """
    bin1 = _summary_bits(a)
    bin2 = _summary_bits(b)
    result: list[str | None] = []

    def label(idx: int) -> str | None:
        return labels[idx] if idx < len(labels) else None

    for i in range(len(bin1)):
        if bin1[i] == "1":
            result.append(label(i))

        for j in range(len(bin2)):
            if i < len(bin2) and bin2[i] == "1":
                result.append(label(j))

    return result
