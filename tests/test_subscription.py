from __future__ import annotations

import pytest

from eegpipes.config.modules import MODULE_PROFILES
from eegpipes.core.multicast import HubState
from eegpipes.core.pipeline import build_pipeline
from eegpipes.core.scheduler import ManualScheduler
from eegpipes.core.subscription import PipelineRegistry, SubscriptionManager
from eegpipes.dataio.export import MemoryExporter


def test_reconfigure_keeps_a_single_subscription(source, settings, headset) -> None:
    manager = SubscriptionManager(source, name="Ssvep")
    seen = []
    hubs = []
    for low in (1.0, 2.0, 3.0, 4.0):
        sub = manager.reconfigure(seen.append, settings.with_changes(cut_off_low=low))
        hubs.append(sub.hub)

    assert source.observer_count == 1
    assert manager.subscription.settings.cut_off_low == 4.0
    assert all(h.state is HubState.CLOSED for h in hubs[:-1])
    assert hubs[-1].connected

    source.push_many(headset.readings(5.0))
    assert seen
    assert hubs[-1].emitted_count == len(seen)


def test_reconfigure_closes_previous_consumer(source, settings) -> None:
    manager = SubscriptionManager(source)
    closed = []
    manager.reconfigure(lambda snap: None, settings, on_close=closed.append)
    manager.reconfigure(lambda snap: None, settings)
    assert closed == [None]


def test_teardown_is_idempotent(source, settings) -> None:
    manager = SubscriptionManager(source)
    manager.teardown()
    sub = manager.reconfigure(lambda snap: None, settings)
    manager.teardown()
    manager.teardown()
    assert manager.subscription is None
    assert manager.hub is None
    assert not sub.active
    assert source.observer_count == 0


def test_reconfigure_uses_injected_builder(source, settings) -> None:
    built = []

    def builder(src, cfg, *, name=""):
        built.append(cfg)
        return build_pipeline(src, cfg, name=name)

    manager = SubscriptionManager(source, name="custom", builder=builder)
    manager.reconfigure(lambda snap: None, settings)
    assert built == [settings]


def test_manager_apply_settings_rebuilds(source, headset) -> None:
    registry = PipelineRegistry(source, exporter=MemoryExporter(), scheduler=ManualScheduler())
    manager = registry.get("Predict")
    manager.start()
    first_hub = manager.hub
    manager.apply_settings(slice_high=20.0)

    assert first_hub.closed
    assert manager.running
    assert manager.settings.slice_high == 20.0
    assert source.observer_count == 1

    source.push_many(headset.readings(5.0))
    assert manager.chart.updates > 0
    assert len(manager.chart.read(0).labels) == 20

    manager.stop()
    assert not manager.running
    assert source.observer_count == 0


def test_registry_returns_one_manager_per_module(source) -> None:
    registry = PipelineRegistry(source)
    assert registry.get("ssvep") is registry.get("Ssvep")
    assert registry.get("Predict") is not registry.get("Ssvep")
    assert set(registry.managers()) == {"Ssvep", "Predict"}
    with pytest.raises(KeyError):
        registry.get("Nope")


def test_modules_are_isolated(source, headset) -> None:
    registry = PipelineRegistry(source, exporter=MemoryExporter(), scheduler=ManualScheduler())
    ssvep = registry.get("Ssvep")
    predict = registry.get("Predict")
    ssvep.start()
    predict.start()
    assert source.observer_count == 2

    # one module failing or rebuilding leaves the other untouched
    predict_hub = predict.hub
    ssvep.apply_settings(cut_off_high=30.0)
    assert predict.hub is predict_hub and predict_hub.connected

    source.push_many(headset.readings(5.0))
    assert ssvep.chart.updates == predict.chart.updates > 0

    ssvep.stop()
    source.push_many(headset.readings(1.0))
    assert predict.chart.updates > ssvep.chart.updates
    registry.stop_all()
    assert source.observer_count == 0


def test_start_capture_requires_exporter(source) -> None:
    registry = PipelineRegistry(source, MODULE_PROFILES)
    manager = registry.get("Ssvep")
    manager.start()
    with pytest.raises(RuntimeError, match="exporter"):
        manager.start_capture("Slow Frequency")
    manager.stop()
