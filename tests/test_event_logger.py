import io
import time
from datetime import datetime
from unittest import mock

from txrelay.event_logger import Event, EventLogger, EventType, format_event

NOW = datetime(2024, 1, 2, 3, 4, 5, 678000)


def test_format_event_timestamp_and_elapsed():
    event = Event(EventType.GRPC_DETECTION_PROCESSING, b"", 0.0)
    with mock.patch("txrelay.event_logger.time.monotonic", return_value=0.0015):
        line = format_event(event, NOW)
    assert line.startswith("[2024-01-02 03:04:05.678] - [grpc] Detection event")
    assert "| elapsed: 1.50ms |" in line


def test_format_event_encodes_signature():
    event = Event(EventType.ARPC_DETECTION_PROCESSING, b"hello world", time.monotonic())
    line = format_event(event, NOW)
    assert line.endswith("| sig: StV1DL6CwTryKyV")
    assert "[arpc] Detection event" in line


def test_landed_without_blocks_uses_minus_one():
    event = Event(EventType.GRPC_LANDED, b"", time.monotonic())
    line = format_event(event, NOW)
    assert "blocks to land: -1" in line
    assert line.endswith("Queueing sell tx, waiting 4 seconds")


def test_landed_with_blocks():
    event = Event(EventType.GRPC_LANDED, b"", time.monotonic(), blocks_to_land=7)
    assert "blocks to land: 7 |" in format_event(event, NOW)


def test_custom_event_name():
    event = Event("my-event", b"", time.monotonic())
    assert "[arpc] my-event | elapsed:" in format_event(event, NOW)


def test_raydium_and_slot_messages():
    ref = time.monotonic()
    assert "Raydium Launchpad buy detected" in format_event(
        Event(EventType.RAYDIUM_LAUNCHPAD_BUY, b"", ref), NOW
    )
    assert "Raydium Launchpad sell detected" in format_event(
        Event(EventType.RAYDIUM_SELL, b"", ref), NOW
    )
    assert "[arpc] Slot update" in format_event(Event(EventType.SLOT_UPDATE, b"", ref), NOW)


def test_leading_zero_bytes_map_to_ones():
    event = Event(EventType.SLOT_UPDATE, b"\x00\x00", time.monotonic())
    assert format_event(event, NOW).endswith("| sig: 11")


def test_drain_writes_queued_events_in_order():
    stream = io.StringIO()
    logger = EventLogger(stream=stream)
    ref = time.monotonic()
    assert logger.log_event(EventType.GRPC_DETECTION_PROCESSING, b"", ref) is True
    assert logger.log_event("second", b"", ref) is True
    lines = logger.drain()
    assert len(lines) == 2
    assert "[grpc] Detection event" in lines[0]
    assert "[arpc] second" in lines[1]
    assert stream.getvalue() == "\n".join(lines) + "\n"


def test_drain_empties_queue():
    logger = EventLogger(stream=io.StringIO())
    logger.log_event(EventType.SLOT_UPDATE, b"", time.monotonic())
    assert len(logger.drain()) == 1
    assert logger.drain() == []


def test_full_queue_drops_events():
    logger = EventLogger(capacity=2, stream=io.StringIO())
    ref = time.monotonic()
    results = [logger.log_event(EventType.SLOT_UPDATE, b"", ref) for _ in range(3)]
    assert results == [True, True, False]
    assert len(logger.drain()) == 2


def test_logged_signature_is_copied():
    logger = EventLogger(stream=io.StringIO())
    sig = bytearray(b"hello world")
    logger.log_event(EventType.RAYDIUM_SELL, sig, time.monotonic())
    sig[0] = 0
    (line,) = logger.drain()
    assert line.endswith("| sig: StV1DL6CwTryKyV")