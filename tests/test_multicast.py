from __future__ import annotations

import logging

import numpy as np
import pytest

from eegpipes.core.models import EEGReading, FrequencySnapshot
from eegpipes.core.multicast import HubState, MulticastHub
from eegpipes.core.pipeline import Pipeline, build_pipeline
from eegpipes.core.source import ReadingSource
from eegpipes.core.stages import StageError


class CountingStage:
    """Turns every reading into one snapshot and counts how often it ran."""

    name = "count"

    def __init__(self, fail_on: float | None = None) -> None:
        self.calls = 0
        self.fail_on = fail_on

    def process(self, reading: EEGReading):
        self.calls += 1
        if self.fail_on is not None and reading.timestamp == self.fail_on:
            raise StageError(self.name, "bad reading")
        return [FrequencySnapshot.from_arrays(reading.timestamp, [1.0, 2.0], np.ones((2, 2)))]


def _reading(ts: float) -> EEGReading:
    return EEGReading(index=0, electrode=0, timestamp=ts, samples=(0.0,) * 12)


def _hub(source: ReadingSource, stage: CountingStage) -> MulticastHub:
    return MulticastHub(source, Pipeline(stages=[stage]), name="test-hub")


def test_hub_is_inert_until_connected(source) -> None:
    stage = CountingStage()
    hub = _hub(source, stage)
    received = []
    hub.register(received.append)

    source.push(_reading(0.0))
    assert stage.calls == 0
    assert received == []
    assert source.observer_count == 0

    hub.connect()
    hub.connect()
    assert source.observer_count == 1
    source.push(_reading(1.0))
    assert len(received) == 1


def test_chain_computed_once_for_all_consumers(source) -> None:
    stage = CountingStage()
    hub = _hub(source, stage)
    seen_a, seen_b, seen_c = [], [], []
    hub.register(seen_a.append)
    hub.register(seen_b.append)
    hub.connect()
    source.push(_reading(0.0))
    hub.register(seen_c.append)
    source.push(_reading(1.0))

    assert stage.calls == 2
    assert hub.emitted_count == 2
    assert len(seen_a) == len(seen_b) == 2
    assert all(a is b for a, b in zip(seen_a, seen_b))
    # late consumer only sees what was emitted after it joined
    assert len(seen_c) == 1
    assert seen_c[0] is seen_a[1]


def test_unregister_stops_delivery(source) -> None:
    hub = _hub(source, CountingStage())
    seen = []
    reg_id = hub.register(seen.append)
    hub.connect()
    source.push(_reading(0.0))
    assert hub.unregister(reg_id) is True
    assert hub.unregister(reg_id) is False
    source.push(_reading(1.0))
    assert len(seen) == 1
    # the chain keeps running with no consumers
    assert hub.connected


def test_disconnect_closes_every_consumer(source) -> None:
    hub = _hub(source, CountingStage())
    closed = []
    hub.register(lambda snap: None, on_close=closed.append)
    hub.register(lambda snap: None, on_close=closed.append)
    hub.connect()

    hub.disconnect()
    hub.disconnect()

    assert closed == [None, None]
    assert hub.state is HubState.CLOSED
    assert source.observer_count == 0
    assert hub.consumer_count == 0
    with pytest.raises(RuntimeError):
        hub.connect()


def test_register_on_closed_hub_closes_immediately(source) -> None:
    hub = _hub(source, CountingStage())
    hub.connect()
    hub.disconnect()
    closed = []
    hub.register(lambda snap: None, on_close=closed.append)
    assert closed == [None]
    assert hub.consumer_count == 0


def test_stage_error_terminates_chain(source, caplog) -> None:
    stage = CountingStage(fail_on=1.0)
    hub = _hub(source, stage)
    seen, errors = [], []
    hub.register(seen.append, on_close=errors.append)
    hub.connect()

    with caplog.at_level(logging.ERROR, logger="eegpipes.core.multicast"):
        source.push(_reading(0.0))
        source.push(_reading(1.0))
        source.push(_reading(2.0))

    assert len(seen) == 1
    assert stage.calls == 2
    assert hub.state is HubState.FAILED
    assert isinstance(hub.error, StageError)
    assert len(errors) == 1 and errors[0] is hub.error
    assert source.observer_count == 0
    assert "stopped" in caplog.text


def test_failing_consumer_does_not_starve_others(source, caplog) -> None:
    hub = _hub(source, CountingStage())

    def broken(snapshot):
        raise ValueError("consumer bug")

    seen = []
    hub.register(broken)
    hub.register(seen.append)
    hub.connect()
    with caplog.at_level(logging.ERROR, logger="eegpipes.core.multicast"):
        source.push(_reading(0.0))
    assert len(seen) == 1
    assert hub.connected
    assert "consumer bug" in caplog.text


def test_consumer_can_unregister_itself_mid_emission(source) -> None:
    hub = _hub(source, CountingStage())
    calls = []
    ids = {}

    def once(snapshot):
        calls.append(snapshot)
        hub.unregister(ids["once"])

    ids["once"] = hub.register(once)
    hub.connect()
    source.push(_reading(0.0))
    source.push(_reading(1.0))
    assert len(calls) == 1
    assert hub.consumer_count == 0


def test_build_pipeline_returns_unconnected_hub(source, settings) -> None:
    hub = build_pipeline(source, settings, name="Ssvep")
    assert hub.name == "Ssvep"
    assert hub.state is HubState.IDLE
    assert hub.pipeline.stage_names == ["align", "bandpass", "epoch", "fft", "slice"]
    assert source.observer_count == 0
