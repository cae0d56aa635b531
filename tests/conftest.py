from __future__ import annotations

import pytest

from eegpipes.config.settings import PipelineSettings
from eegpipes.core.source import ReadingSource, SyntheticHeadset


@pytest.fixture
def settings() -> PipelineSettings:
    return PipelineSettings()


@pytest.fixture
def source() -> ReadingSource:
    return ReadingSource(name="test")


@pytest.fixture
def headset() -> SyntheticHeadset:
    return SyntheticHeadset(4, 256.0, tones={0: 10.0, 1: 10.0, 2: 10.0, 3: 10.0}, seed=1234)
