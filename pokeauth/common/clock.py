"""
Time sources.
"""

from __future__ import annotations

import time


class SystemClock:
    """Clock backed by the system wall time."""

    def current_time_millis(self) -> int:
        return time.time_ns() // 1_000_000


class FixedClock:
    """Manually advanced clock for deterministic expiry checks."""

    def __init__(self, now_ms: int = 0) -> None:
        self.now_ms = now_ms

    def current_time_millis(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)
