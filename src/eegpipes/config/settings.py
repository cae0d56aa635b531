"""Reconfigurable numeric parameters for one spectrum pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Mapping, MutableMapping


@dataclass(frozen=True, slots=True)
class PipelineSettings:
    """
    Filter, epoch, FFT and capture knobs for a single module.

    The defaults match a Muse headset streaming 256 Hz: a 2-20 Hz bandpass,
    4 s epochs re-evaluated every 100 samples and a 1-30 Hz spectrum slice.
    Instances are immutable; the UI swaps in a new value through
    :meth:`with_changes` and then reconfigures the pipeline.
    """

    cut_off_low: float = 2.0
    cut_off_high: float = 20.0
    channel_count: int = 4
    epoch_duration: int = 1024
    epoch_interval: int = 100
    bin_count: int = 256
    slice_low: float = 1.0
    slice_high: float = 30.0
    sample_rate: float = 256.0
    capture_seconds: float = 10.0
    filter_order: int = 4

    @property
    def nyquist(self) -> float:
        return 0.5 * float(self.sample_rate)

    @property
    def epoch_period_s(self) -> float:
        """Nominal spacing between two successive epochs in seconds."""
        return float(self.epoch_interval) / float(self.sample_rate)

    def with_changes(self, **changes: Any) -> PipelineSettings:
        """Return a copy with ``changes`` applied (unknown names raise TypeError)."""
        return replace(self, **changes)

    def violations(self) -> list[str]:
        """
        List every broken invariant, empty when the settings are usable.

        The pipeline itself never calls this; it is meant for whoever
        mutates settings (config loader, CLI, sliders) so out-of-range
        values are refused before a rebuild.
        """
        problems: list[str] = []
        nyquist = self.nyquist
        if self.sample_rate <= 0:
            problems.append(f"sample_rate must be > 0, got {self.sample_rate}")
        if not 0 < self.cut_off_low < self.cut_off_high < nyquist:
            problems.append(
                "cut-offs must satisfy 0 < low < high < sample_rate/2, got "
                f"low={self.cut_off_low} high={self.cut_off_high} nyquist={nyquist}"
            )
        if self.channel_count <= 0:
            problems.append(f"channel_count must be > 0, got {self.channel_count}")
        if not 0 < self.epoch_interval <= self.epoch_duration:
            problems.append(
                "epoch window must satisfy 0 < interval <= duration, got "
                f"interval={self.epoch_interval} duration={self.epoch_duration}"
            )
        if self.bin_count < 2:
            problems.append(f"bin_count must be >= 2, got {self.bin_count}")
        if not 0 <= self.slice_low < self.slice_high <= nyquist:
            problems.append(
                "slice must satisfy 0 <= low < high <= sample_rate/2, got "
                f"low={self.slice_low} high={self.slice_high} nyquist={nyquist}"
            )
        if self.capture_seconds <= 0:
            problems.append(f"capture_seconds must be > 0, got {self.capture_seconds}")
        if self.filter_order < 1:
            problems.append(f"filter_order must be >= 1, got {self.filter_order}")
        return problems

    def to_mapping(self) -> dict:
        return asdict(self)


# camelCase names used by exported slider states. Accepted on load so those
# can be dropped into a YAML file unchanged.
_LEGACY_KEYS = {
    "cutOffLow": "cut_off_low",
    "cutOffHigh": "cut_off_high",
    "nbChannels": "channel_count",
    "duration": "epoch_duration",
    "interval": "epoch_interval",
    "bins": "bin_count",
    "sliceFFTLow": "slice_low",
    "sliceFFTHigh": "slice_high",
    "srate": "sample_rate",
    "secondsToSave": "capture_seconds",
}

_INT_FIELDS = {"channel_count", "epoch_duration", "epoch_interval", "bin_count", "filter_order"}


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`PipelineSettings`."""
    return {f.name for f in fields(PipelineSettings)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    normalized: MutableMapping[str, Any] = {}
    for key, value in data.items():
        normalized[_LEGACY_KEYS.get(str(key), str(key))] = value
    return normalized


def config_from_mapping(
    data: Mapping[str, Any] | None,
    *,
    base: PipelineSettings | None = None,
) -> PipelineSettings:
    """
    Build :class:`PipelineSettings` from ``data`` on top of ``base``.

    Unknown keys are ignored. Values are coerced to the field types; a value
    that cannot be coerced raises ``ValueError`` naming the key.
    """
    base = base or PipelineSettings()
    if not data:
        return base
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload: dict[str, Any] = {}
    for key in normalized.keys() & known:
        raw = normalized[key]
        try:
            payload[key] = int(raw) if key in _INT_FIELDS else float(raw)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid value for {key!r}: {raw!r}") from exc
    return base.with_changes(**payload)


__all__ = ["PipelineSettings", "config_from_mapping"]
