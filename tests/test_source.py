from __future__ import annotations

import numpy as np

from eegpipes.core.scheduler import ManualScheduler
from eegpipes.core.source import ReadingSource, SyntheticHeadset, readings_from_array, replay


def test_subscribe_returns_unsubscribe(source) -> None:
    got = []
    unsubscribe = source.subscribe(got.append)
    assert source.observer_count == 1
    unsubscribe()
    unsubscribe()
    assert source.observer_count == 0


def test_readings_from_array_packets_per_electrode() -> None:
    data = np.arange(2 * 30, dtype=float).reshape(2, 30)
    readings = list(readings_from_array(data, 256.0, start_ms=100.0))

    # 30 samples make two full packets; the trailing six are dropped
    assert len(readings) == 4
    assert [(r.index, r.electrode) for r in readings] == [(0, 0), (0, 1), (1, 0), (1, 1)]
    assert readings[0].timestamp == 100.0
    assert readings[2].timestamp == 100.0 + 12 * 1000.0 / 256.0
    assert readings[3].samples == tuple(float(v) for v in range(42, 54))


def test_synthetic_headset_continues_timeline(headset) -> None:
    first = list(headset.readings(1.0))
    second = list(headset.readings(1.0))
    assert len(first) == len(second) == 4 * 21
    assert second[0].timestamp == first[-1].timestamp + 12 * 1000.0 / 256.0
    assert second[0].index == first[-1].index + 1


def test_synthetic_headset_is_seeded() -> None:
    a = SyntheticHeadset(2, 256.0, seed=5).generate(64)
    b = SyntheticHeadset(2, 256.0, seed=5).generate(64)
    np.testing.assert_array_equal(a, b)
    assert a.shape == (2, 64)


def test_replay_drives_scheduler_clock() -> None:
    source = ReadingSource()
    scheduler = ManualScheduler()
    fired_at = []
    scheduler.call_later(0.1, lambda: fired_at.append(scheduler.time()))
    got = []
    source.subscribe(got.append)

    count = replay(SyntheticHeadset(1, 256.0, seed=0).readings(0.5), source, scheduler)

    assert count == len(got) == 10
    assert fired_at == [0.1]
    assert scheduler.time() == got[-1].timestamp / 1000.0
