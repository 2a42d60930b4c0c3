"""Call counters and a rolling latency window for a sender."""

from __future__ import annotations

import threading
from collections import deque
from typing import NamedTuple


class StatsSnapshot(NamedTuple):
    total: int
    successful: int
    failed: int
    average_latency_micros: float


class LatencyStats:
    """Thread-safe success/failure counts with an average over recent latencies."""

    def __init__(self, history_size: int = 1000) -> None:
        if history_size < 1:
            raise ValueError("history_size must be positive")
        self._lock = threading.Lock()
        self._total = 0
        self._successful = 0
        self._failed = 0
        self._history: deque[int] = deque(maxlen=history_size)

    def record(self, success: bool, latency_micros: int) -> None:
        """Count a call; successful calls add their latency to the window."""
        with self._lock:
            self._total += 1
            if success:
                self._successful += 1
                self._history.append(latency_micros)
            else:
                self._failed += 1

    def snapshot(self) -> StatsSnapshot:
        """Return (total, successful, failed, average latency in microseconds)."""
        with self._lock:
            average = sum(self._history) / len(self._history) if self._history else 0.0
            return StatsSnapshot(self._total, self._successful, self._failed, average)