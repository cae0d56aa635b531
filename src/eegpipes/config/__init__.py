"""Configuration objects and helpers for eegpipes.

:mod:`settings` holds the numeric knobs of one pipeline, :mod:`modules`
maps module names (Ssvep, Predict, ...) to their defaults and chart layout
and knows how to read/write them as YAML, and :mod:`app_config` centralises
where recordings land on disk.
"""

from .app_config import AppPaths
from .modules import MODULE_PROFILES, ModuleProfile, get_profile, load_profiles
from .settings import PipelineSettings, config_from_mapping

__all__ = [
    "AppPaths",
    "MODULE_PROFILES",
    "ModuleProfile",
    "PipelineSettings",
    "config_from_mapping",
    "get_profile",
    "load_profiles",
]
