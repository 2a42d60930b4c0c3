"""Non-blocking event log: producers enqueue events, a consumer formats them."""

from __future__ import annotations

import queue
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, auto
from typing import TextIO

_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def _b58encode(data: bytes) -> str:
    number = int.from_bytes(data, "big")
    digits = []
    while number:
        number, rem = divmod(number, 58)
        digits.append(_B58_ALPHABET[rem])
    leading = len(data) - len(data.lstrip(b"\x00"))
    return "1" * leading + "".join(reversed(digits))


class EventType(Enum):
    """Known event kinds; any other plain string is a custom event name."""

    GRPC_DETECTION_PROCESSING = auto()
    ARPC_DETECTION_PROCESSING = auto()
    GRPC_LANDED = auto()
    RAYDIUM_LAUNCHPAD_BUY = auto()
    RAYDIUM_SELL = auto()
    SLOT_UPDATE = auto()


@dataclass(frozen=True)
class Event:
    event_type: EventType | str
    sig: bytes
    reference_time: float
    blocks_to_land: int | None = None


def _format_duration(seconds: float) -> str:
    if seconds >= 1.0:
        return f"{seconds:.2f}s"
    if seconds >= 1e-3:
        return f"{seconds * 1e3:.2f}ms"
    if seconds >= 1e-6:
        return f"{seconds * 1e6:.2f}µs"
    return f"{seconds * 1e9:.2f}ns"


def _format_timestamp(now: datetime) -> str:
    return f"{now:%Y-%m-%d %H:%M:%S}.{now.microsecond // 1000:03d}"


def format_event(event: Event, now: datetime) -> str:
    """Render one event as a log line stamped with ``now``."""
    elapsed = _format_duration(max(0.0, time.monotonic() - event.reference_time))
    stamp = _format_timestamp(now)
    sig = _b58encode(event.sig)
    kind = event.event_type

    if kind is EventType.GRPC_DETECTION_PROCESSING:
        body = f"[grpc] Detection event | elapsed: {elapsed} | sig: {sig}"
    elif kind is EventType.GRPC_LANDED:
        blocks = -1 if event.blocks_to_land is None else event.blocks_to_land
        body = (
            f"[grpc] Tranasction landed | sig: {sig} | blocks to land: {blocks} "
            f"| time to land: {elapsed} | Queueing sell tx, waiting 4 seconds"
        )
    elif kind is EventType.ARPC_DETECTION_PROCESSING:
        body = f"[arpc] Detection event | elapsed: {elapsed} | sig: {sig}"
    elif kind is EventType.RAYDIUM_LAUNCHPAD_BUY:
        body = f"[arpc] Raydium Launchpad buy detected | elapsed: {elapsed} | sig: {sig}"
    elif kind is EventType.RAYDIUM_SELL:
        body = f"[arpc] Raydium Launchpad sell detected | elapsed: {elapsed} | sig: {sig}"
    elif kind is EventType.SLOT_UPDATE:
        body = f"[arpc] Slot update | elapsed: {elapsed} | sig: {sig}"
    else:
        body = f"[arpc] {kind} | elapsed: {elapsed} | sig: {sig}"

    return f"[{stamp}] - {body}"


class EventLogger:
    """Bounded event queue; events beyond capacity are dropped, never blocking."""

    def __init__(self, capacity: int = 1024, stream: TextIO | None = None) -> None:
        self._queue: queue.Queue[Event] = queue.Queue(maxsize=capacity)
        self._stream = stream

    def log_event(
        self,
        event_type: EventType | str,
        sig: bytes,
        reference_time: float,
        blocks_to_land: int | None = None,
    ) -> bool:
        """Enqueue an event; return False if it was dropped because the queue is full."""
        event = Event(event_type, bytes(sig), reference_time, blocks_to_land)
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            return False
        return True

    def drain(self) -> list[str]:
        """Format and write every pending event, returning the written lines."""
        lines = []
        while True:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                break
            lines.append(format_event(event, datetime.now(timezone.utc)))

        stream = self._stream if self._stream is not None else sys.stdout
        for line in lines:
            print(line, file=stream)
        return lines