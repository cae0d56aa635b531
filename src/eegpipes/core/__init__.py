"""Core streaming pipeline: stages, fan-out, subscriptions and captures.

This package sits between the headset source and its consumers: readings
are aligned, filtered, windowed and transformed once per epoch by a
:class:`Pipeline`, broadcast by a :class:`MulticastHub` to the chart
buffer and to timed CSV captures, and rebuilt safely on every settings
change by a :class:`SubscriptionManager`.
"""

from .capture import CaptureRecorder, CaptureResult, CaptureSession, CaptureState
from .consumer import ChannelSeries, ChartBuffer, SnapshotConsumer
from .models import EEGReading, Epoch, FrequencySnapshot, Sample
from .multicast import HubState, MulticastHub
from .pipeline import Pipeline, build_pipeline, build_stages
from .scheduler import Deadline, ManualScheduler, ThreadScheduler
from .source import ReadingSource, SyntheticHeadset, readings_from_array, replay
from .stages import StageError
from .subscription import PipelineManager, PipelineRegistry, Subscription, SubscriptionManager

__all__ = [
    "CaptureRecorder",
    "CaptureResult",
    "CaptureSession",
    "CaptureState",
    "ChannelSeries",
    "ChartBuffer",
    "SnapshotConsumer",
    "EEGReading",
    "Epoch",
    "FrequencySnapshot",
    "Sample",
    "HubState",
    "MulticastHub",
    "Pipeline",
    "build_pipeline",
    "build_stages",
    "Deadline",
    "ManualScheduler",
    "ThreadScheduler",
    "ReadingSource",
    "SyntheticHeadset",
    "readings_from_array",
    "replay",
    "StageError",
    "PipelineManager",
    "PipelineRegistry",
    "Subscription",
    "SubscriptionManager",
]
