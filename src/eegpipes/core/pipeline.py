"""Readings → aligned samples → band-pass → epochs → FFT → sliced spectra."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Sequence

from ..config.settings import PipelineSettings
from ..tools.debug import time_block
from .models import EEGReading, FrequencySnapshot
from .multicast import MulticastHub
from .source import ReadingSource
from .stages import (
    BandpassStage,
    ChannelAligner,
    EpochStage,
    FFTStage,
    SliceStage,
    Stage,
    StageError,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Pipeline:
    """
    Ordered list of stages run synchronously for each incoming reading.

    The output of one stage is fed item by item into the next; whatever
    comes out of the last stage is returned by :meth:`push`.
    """

    stages: Sequence[Stage] = field(default_factory=list)

    def push(self, reading: EEGReading) -> List[FrequencySnapshot]:
        items: List[Any] = [reading]
        for stage in self.stages:
            produced: List[Any] = []
            for item in items:
                try:
                    with time_block(f"stage {stage.name}"):
                        produced.extend(stage.process(item))
                except StageError:
                    raise
                except Exception as exc:
                    raise StageError(stage.name, f"{type(exc).__name__}: {exc}") from exc
            if not produced:
                return []
            items = produced
        return items

    @property
    def stage_names(self) -> List[str]:
        return [stage.name for stage in self.stages]


def build_stages(settings: PipelineSettings) -> List[Stage]:
    """Create a fresh set of stages for ``settings``."""
    return [
        ChannelAligner(settings.channel_count, settings.sample_rate),
        BandpassStage(
            settings.cut_off_low,
            settings.cut_off_high,
            settings.sample_rate,
            settings.channel_count,
            order=settings.filter_order,
        ),
        EpochStage(
            settings.epoch_duration,
            settings.epoch_interval,
            settings.sample_rate,
            settings.channel_count,
        ),
        FFTStage(settings.bin_count),
        SliceStage(settings.slice_low, settings.slice_high),
    ]


def build_pipeline(
    source: ReadingSource,
    settings: PipelineSettings,
    *,
    name: str = "",
) -> MulticastHub:
    """
    Build the spectrum chain for ``settings`` and wrap it in a hub.

    Nothing is read from ``source`` until the hub is connected.
    """
    pipeline = Pipeline(stages=build_stages(settings))
    logger.debug("Built pipeline %s: %s", name or source.name, " -> ".join(pipeline.stage_names))
    return MulticastHub(source, pipeline, name=name)


__all__ = ["Pipeline", "build_stages", "build_pipeline"]
