#!/usr/bin/env python3
"""Replay an uplink log file and print daily counters and alarm events.

Build a log file from captured hex payloads first:
    easyprotect import uplinks.txt uplinks.epul

Then:
    python examples/replay_log.py uplinks.epul
"""

import sys

from easyprotect.capture import Capture

with Capture(sys.argv[1]) as cap:
    ts, day_values = cap.series("day_value")
    for t, v in zip(ts, day_values):
        print(f"[{t / 1e9:12.3f}] day_value={v}")

    ts, labels = cap.events()
    for t, label in zip(ts, labels):
        print(f"[{t / 1e9:12.3f}] event: {label}")
