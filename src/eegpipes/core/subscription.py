"""Ownership of the one live pipeline per module.

:class:`SubscriptionManager` guarantees that rebuilding always tears the
previous chain down first, so a module never has two chains reading the
source. :class:`PipelineManager` bundles a manager with the module's
settings, chart buffer and captures, and :class:`PipelineRegistry` hands
out one manager per module name.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional

from ..config.modules import MODULE_PROFILES, ModuleProfile, get_profile
from ..config.settings import PipelineSettings
from ..dataio.export import FileExporter
from .capture import CaptureRecorder, CaptureResult, CaptureSession
from .consumer import ChartBuffer, SnapshotConsumer
from .multicast import CloseCallback, MulticastHub, SnapshotCallback
from .pipeline import build_pipeline
from .scheduler import Scheduler
from .source import ReadingSource

logger = logging.getLogger(__name__)

PipelineBuilder = Callable[..., MulticastHub]


class Subscription:
    """Handle binding one hub and one consumer registration to a settings value."""

    def __init__(self, hub: MulticastHub, registration_id: int, settings: PipelineSettings) -> None:
        self.hub = hub
        self.registration_id = registration_id
        self.settings = settings

    @property
    def active(self) -> bool:
        return not self.hub.closed

    def cancel(self) -> None:
        """Stop the whole chain this subscription belongs to. Idempotent."""
        self.hub.disconnect()

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Subscription(hub={self.hub.name!r}, id={self.registration_id}, active={self.active})"


class SubscriptionManager:
    """Owns the single active :class:`Subscription` of one module."""

    def __init__(
        self,
        source: ReadingSource,
        *,
        name: str = "",
        builder: PipelineBuilder = build_pipeline,
    ) -> None:
        self.name = name or source.name
        self._source = source
        self._builder = builder
        self._subscription: Optional[Subscription] = None
        self._lock = threading.RLock()

    @property
    def subscription(self) -> Optional[Subscription]:
        return self._subscription

    @property
    def hub(self) -> Optional[MulticastHub]:
        sub = self._subscription
        return sub.hub if sub is not None else None

    def teardown(self) -> None:
        """Cancel the current subscription, if any, and forget it."""
        with self._lock:
            sub, self._subscription = self._subscription, None
        if sub is not None:
            sub.cancel()
            logger.info("Unsubscribed %s", self.name)

    def reconfigure(
        self,
        consumer: SnapshotCallback,
        settings: PipelineSettings,
        *,
        on_close: Optional[CloseCallback] = None,
    ) -> Subscription:
        """
        Tear down, rebuild for ``settings``, register ``consumer`` and connect.

        Returns the new (and only) active subscription.
        """
        with self._lock:
            self.teardown()
            logger.info("Subscribing to %s", self.name)
            hub = self._builder(self._source, settings, name=self.name)
            registration_id = hub.register(consumer, on_close)
            subscription = Subscription(hub, registration_id, settings)
            self._subscription = subscription
            hub.connect()
            logger.info("Subscribed to %s", self.name)
            return subscription


class PipelineManager:
    """
    One module's live pipeline: settings, chart buffer, subscription and captures.

    Every settings change goes through :meth:`apply_settings`, which always
    performs a full :meth:`SubscriptionManager.reconfigure`.
    """

    def __init__(
        self,
        profile: ModuleProfile,
        source: ReadingSource,
        *,
        exporter: FileExporter | None = None,
        scheduler: Scheduler | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.profile = profile
        self.source = source
        self.settings = profile.settings
        self.chart = ChartBuffer(visible_channels=profile.visible_channels)
        self.consumer = SnapshotConsumer(self.chart)
        self.subscriptions = SubscriptionManager(source, name=profile.name)
        self.exporter = exporter
        self.scheduler = scheduler
        self.clock = clock
        self._recorder: Optional[CaptureRecorder] = None

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def hub(self) -> Optional[MulticastHub]:
        return self.subscriptions.hub

    @property
    def running(self) -> bool:
        hub = self.hub
        return hub is not None and hub.connected

    def start(self) -> Subscription:
        return self.subscriptions.reconfigure(self.consumer, self.settings)

    def apply_settings(self, **changes) -> Subscription:
        """Replace some settings fields and rebuild the pipeline with them."""
        self.settings = self.settings.with_changes(**changes)
        return self.start()

    def stop(self) -> None:
        self.subscriptions.teardown()

    # ---------------------------------------------------------------- capture
    @property
    def recorder(self) -> Optional[CaptureRecorder]:
        return self._recorder

    def start_capture(
        self,
        condition: str,
        *,
        exporter: FileExporter | None = None,
        on_finished: Callable[[CaptureResult], None] | None = None,
    ) -> CaptureSession:
        """Record the live hub for ``settings.capture_seconds`` under ``condition``."""
        target = exporter or self.exporter
        if target is None:
            raise RuntimeError(f"{self.name}: no exporter configured for captures")
        if self._recorder is not None and self._recorder.in_progress:
            raise RuntimeError(f"{self.name}: a capture is already running")
        self._recorder = CaptureRecorder(
            self.name,
            lambda: self.hub,
            target,
            scheduler=self.scheduler,
            clock=self.clock,
            on_finished=on_finished,
        )
        return self._recorder.start_capture(self.settings, condition)


class PipelineRegistry:
    """Hands out one :class:`PipelineManager` per module name."""

    def __init__(
        self,
        source: ReadingSource,
        profiles: Dict[str, ModuleProfile] | None = None,
        *,
        exporter: FileExporter | None = None,
        scheduler: Scheduler | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.source = source
        self.profiles = dict(MODULE_PROFILES if profiles is None else profiles)
        self._exporter = exporter
        self._scheduler = scheduler
        self._clock = clock
        self._managers: Dict[str, PipelineManager] = {}

    def get(self, name: str) -> PipelineManager:
        profile = get_profile(name, self.profiles)
        manager = self._managers.get(profile.name)
        if manager is None:
            manager = PipelineManager(
                profile,
                self.source,
                exporter=self._exporter,
                scheduler=self._scheduler,
                clock=self._clock,
            )
            self._managers[profile.name] = manager
        return manager

    def managers(self) -> Dict[str, PipelineManager]:
        return dict(self._managers)

    def stop_all(self) -> None:
        for manager in self._managers.values():
            manager.stop()


__all__ = [
    "Subscription",
    "SubscriptionManager",
    "PipelineManager",
    "PipelineRegistry",
]
