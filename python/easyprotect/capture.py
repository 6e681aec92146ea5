"""numpy extraction of decoded uplink series.

LiveCapture — caller feeds raw uplinks, series are accumulated in memory.
Capture — loads an uplink log file (see storage.py) into a LiveCapture.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import numpy as np

from .decoder import DecodedRecord, UplinkDecoder
from .packets import ASYNCHRONOUS, DailyStatus, KeyDateStatus
from .storage import LogReader

logger = logging.getLogger(__name__)

# series name -> value dtype
SERIES_DTYPES = {
    "packet_type": np.uint8,
    "packet_subtype": np.uint8,
    "day_value": np.uint32,
    "key_value": np.uint32,
}


class LiveCapture:
    """Accumulates decoded uplinks and exposes them as numpy arrays."""

    def __init__(self, decoder: UplinkDecoder | None = None):
        self.decoder = decoder or UplinkDecoder(strict=False)
        self._series: dict[str, tuple[list[int], list[int]]] = {
            name: ([], []) for name in SERIES_DTYPES
        }
        self._events: tuple[list[int], list[str]] = ([], [])
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def _append(self, name: str, timestamp: int, value: int) -> None:
        ts, values = self._series[name]
        ts.append(timestamp)
        values.append(value)

    def feed(self, timestamp: int, payload: Sequence[int],
             f_port: int = 0) -> DecodedRecord:
        """Decode one uplink and add its values to the series."""
        record = self.decoder.feed(payload, f_port).data
        if record.is_empty:
            return record

        self._count += 1
        self._append("packet_type", timestamp, record.packet_type)
        self._append("packet_subtype", timestamp, record.packet_subtype)

        status = record.status_interpretation
        if isinstance(status, DailyStatus):
            self._append("day_value", timestamp, status.day_value)
        elif isinstance(status, KeyDateStatus):
            self._append("key_value", timestamp, status.key_value)
        elif record.packet_type_info == ASYNCHRONOUS and status is not None:
            self._events[0].append(timestamp)
            self._events[1].append(status)
        return record

    def series(self, name: str, t0: int | None = None,
               t1: int | None = None) -> tuple[np.ndarray, np.ndarray]:
        """Return (timestamps uint64, values) for a numeric series.

        Raises KeyError for unknown series names.
        """
        if name not in SERIES_DTYPES:
            raise KeyError(name)
        ts_list, values_list = self._series[name]
        ts = np.asarray(ts_list, dtype=np.uint64)
        values = np.asarray(values_list, dtype=SERIES_DTYPES[name])
        mask = _time_mask(ts, t0, t1)
        return ts[mask], values[mask]

    def events(self, t0: int | None = None,
               t1: int | None = None) -> tuple[np.ndarray, np.ndarray]:
        """Return (timestamps uint64, labels object array) for AP1 events."""
        ts = np.asarray(self._events[0], dtype=np.uint64)
        labels = np.asarray(self._events[1], dtype=object)
        mask = _time_mask(ts, t0, t1)
        return ts[mask], labels[mask]

    def clear(self) -> None:
        for ts, values in self._series.values():
            ts.clear()
            values.clear()
        self._events[0].clear()
        self._events[1].clear()
        self._count = 0


def _time_mask(ts: np.ndarray, t0: int | None, t1: int | None) -> np.ndarray:
    mask = np.ones(len(ts), dtype=bool)
    if t0 is not None:
        mask &= ts >= np.uint64(t0)
    if t1 is not None:
        mask &= ts <= np.uint64(t1)
    return mask


class Capture(LiveCapture):
    """A LiveCapture pre-filled from an uplink log file."""

    def __init__(self, path: str | Path):
        super().__init__()
        with LogReader(path) as reader:
            for up in reader.uplinks():
                self.feed(up.timestamp, up.payload, up.f_port)
        if self.decoder.rejected:
            logger.warning("%s: %d truncated uplinks skipped",
                           path, self.decoder.rejected)

    def close(self) -> None:
        """Nothing to release; the file is closed once loaded."""

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
