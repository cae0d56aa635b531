"""Per-module pipeline profiles and their YAML descriptor."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from .settings import PipelineSettings, config_from_mapping


@dataclass(frozen=True)
class ModuleProfile:
    """
    Everything that distinguishes one module from another.

    All modules share the same filter/epoch/FFT/slice chain; only the
    defaults, the number of chart channels the consumer draws and the
    capture condition labels differ.
    """

    name: str
    settings: PipelineSettings = field(default_factory=PipelineSettings)
    visible_channels: int = 4
    conditions: tuple[str, ...] = ()


# Ssvep draws five chart slots (four electrodes plus aux) while filtering
# four channels; Predict draws four.
MODULE_PROFILES: Dict[str, ModuleProfile] = {
    "Ssvep": ModuleProfile(
        name="Ssvep",
        settings=PipelineSettings(capture_seconds=10.0),
        visible_channels=5,
        conditions=("Slow Frequency", "Fast Frequency"),
    ),
    "Predict": ModuleProfile(
        name="Predict",
        settings=PipelineSettings(),
        visible_channels=4,
    ),
}


def get_profile(name: str, profiles: Mapping[str, ModuleProfile] | None = None) -> ModuleProfile:
    """Return the profile registered under ``name`` (case-insensitive)."""
    table = MODULE_PROFILES if profiles is None else profiles
    if name in table:
        return table[name]
    lowered = name.strip().lower()
    for key, profile in table.items():
        if key.lower() == lowered:
            return profile
    raise KeyError(f"Unknown module {name!r}; known modules: {', '.join(sorted(table))}")


def profiles_from_mapping(data: Mapping[str, Any] | None) -> Dict[str, ModuleProfile]:
    """
    Merge a ``modules:`` mapping over the built-in profiles.

    Supported shape::

        modules:
          Ssvep:
            visible_channels: 5
            conditions: [Slow Frequency, Fast Frequency]
            settings:
              cutOffLow: 2
              secondsToSave: 20
    """
    profiles = dict(MODULE_PROFILES)
    payload: Mapping[str, Any] = data or {}
    block = payload.get("modules") if isinstance(payload, Mapping) else None
    if not isinstance(block, Mapping):
        return profiles

    for raw_name, entry in block.items():
        name = str(raw_name)
        entry = entry if isinstance(entry, Mapping) else {}
        current = profiles.get(name) or ModuleProfile(name=name)

        settings = config_from_mapping(entry.get("settings"), base=current.settings)
        visible = entry.get("visible_channels", current.visible_channels)
        try:
            visible_int = max(1, int(visible))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid visible_channels for {name!r}: {visible!r}") from exc
        conditions = entry.get("conditions", current.conditions)
        if isinstance(conditions, str):
            conditions = [conditions]

        profiles[name] = replace(
            current,
            settings=settings,
            visible_channels=visible_int,
            conditions=tuple(str(c) for c in conditions or ()),
        )
    return profiles


def load_profiles(path: str | Path | None) -> Dict[str, ModuleProfile]:
    """
    Load module profiles from a YAML file.

    Missing files fall back to :data:`MODULE_PROFILES`.
    """
    if path is None:
        return dict(MODULE_PROFILES)
    cfg_path = Path(path)
    if not cfg_path.exists():
        return dict(MODULE_PROFILES)
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return profiles_from_mapping(raw)


def save_profiles(path: Path, profiles: Mapping[str, ModuleProfile]) -> None:
    """Write ``profiles`` back into the YAML shape read by :func:`load_profiles`."""
    data = {
        "modules": {
            name: {
                "visible_channels": profile.visible_channels,
                "conditions": list(profile.conditions),
                "settings": profile.settings.to_mapping(),
            }
            for name, profile in profiles.items()
        }
    }
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(data, fh, default_flow_style=False, sort_keys=False)


__all__ = [
    "ModuleProfile",
    "MODULE_PROFILES",
    "get_profile",
    "profiles_from_mapping",
    "load_profiles",
    "save_profiles",
]
