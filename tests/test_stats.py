import threading

import pytest

from txrelay.stats import LatencyStats


def test_empty_snapshot():
    assert tuple(LatencyStats().snapshot()) == (0, 0, 0, 0.0)


def test_average_of_successes():
    stats = LatencyStats()
    stats.record(True, 10)
    stats.record(True, 20)
    snap = stats.snapshot()
    assert snap.successful == 2
    assert snap.average_latency_micros == 15.0


def test_failures_counted_but_not_averaged():
    stats = LatencyStats()
    stats.record(True, 40)
    stats.record(False, 999_999)
    snap = stats.snapshot()
    assert (snap.total, snap.successful, snap.failed) == (2, 1, 1)
    assert snap.average_latency_micros == 40


def test_window_keeps_last_thousand():
    stats = LatencyStats()
    stats.record(True, 1_000_000)
    for _ in range(1000):
        stats.record(True, 5)
    snap = stats.snapshot()
    assert snap.average_latency_micros == 5
    assert snap.total == 1001


def test_custom_window():
    stats = LatencyStats(history_size=2)
    for latency in (100, 7, 7):
        stats.record(True, latency)
    assert stats.snapshot().average_latency_micros == 7


def test_invalid_window():
    with pytest.raises(ValueError):
        LatencyStats(history_size=0)


def test_concurrent_records():
    stats = LatencyStats()

    def work():
        for n in range(500):
            stats.record(n % 2 == 0, 3)

    threads = [threading.Thread(target=work) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    snap = stats.snapshot()
    assert snap.total == 4 * 500
    assert snap.successful + snap.failed == snap.total
    assert snap.successful == snap.failed