"""Calendar view configuration profiles."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from prodgrid.core.errors import ProdgridValueError
from prodgrid.timeline.layout import LayoutConfig

API_URL_ENV = "PRODGRID_API_URL"
DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_MACHINES: tuple[str, ...] = ("Linea_1", "Linea_2")


@dataclass(frozen=True)
class ViewSettings:
    """Rendering constants shared by every column of a calendar view."""

    pixels_per_hour: float = 80.0
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    max_visible_machines: int = 7
    week_days: int = 7
    timezone: str = "America/Santiago"
    machine_ids: tuple[str, ...] = DEFAULT_MACHINES

    def __post_init__(self) -> None:
        if self.max_visible_machines < 1 or self.week_days < 1:
            raise ProdgridValueError("max_visible_machines and week_days must be >= 1")


@dataclass(frozen=True)
class ViewProfile:
    """Named bundle of view settings selectable from the CLI."""

    name: str
    description: str
    settings: ViewSettings = field(default_factory=ViewSettings)


DEFAULT_PROFILES: dict[str, ViewProfile] = {
    "default": ViewProfile(
        name="default",
        description="Desktop calendar: 80 px per hour, 2 px gaps, 40 px minimum blocks.",
    ),
    "compact": ViewProfile(
        name="compact",
        description="Dense overview for small screens (40 px per hour, 20 px minimum blocks).",
        settings=ViewSettings(
            pixels_per_hour=40.0,
            layout=LayoutConfig(gap_px=1.0, min_height_px=20.0),
            max_visible_machines=3,
        ),
    ),
    "tall": ViewProfile(
        name="tall",
        description="Zoomed-in column (120 px per hour) for inspecting short setups.",
        settings=ViewSettings(pixels_per_hour=120.0),
    ),
}


def get_profile(name: str) -> ViewProfile:
    key = name.lower()
    if key not in DEFAULT_PROFILES:
        available = ", ".join(sorted(DEFAULT_PROFILES))
        raise KeyError(f"Unknown profile '{name}'. Available: {available}")
    return DEFAULT_PROFILES[key]


def list_profiles() -> tuple[ViewProfile, ...]:
    return tuple(DEFAULT_PROFILES[key] for key in sorted(DEFAULT_PROFILES))


_LAYOUT_KEYS = {"gap_px", "min_height_px", "adjacency_tolerance_px"}
_SETTINGS_KEYS = {"pixels_per_hour", "max_visible_machines", "week_days", "timezone", "machine_ids"}


def merge_settings(base: ViewSettings, overrides: Mapping[str, Any]) -> ViewSettings:
    """Apply a flat or nested (``layout:``) mapping of overrides on top of ``base``."""
    unknown = set(overrides) - _SETTINGS_KEYS - _LAYOUT_KEYS - {"layout", "profile"}
    if unknown:
        raise ProdgridValueError(f"Unknown view setting(s): {', '.join(sorted(unknown))}")
    layout_overrides = dict(overrides.get("layout") or {})
    layout_overrides.update({k: overrides[k] for k in _LAYOUT_KEYS if k in overrides})
    bad_layout = set(layout_overrides) - _LAYOUT_KEYS
    if bad_layout:
        raise ProdgridValueError(f"Unknown layout setting(s): {', '.join(sorted(bad_layout))}")
    updates: dict[str, Any] = {k: overrides[k] for k in _SETTINGS_KEYS if k in overrides}
    if "machine_ids" in updates:
        updates["machine_ids"] = tuple(str(m) for m in updates["machine_ids"])
    if layout_overrides:
        updates["layout"] = replace(base.layout, **layout_overrides)
    return replace(base, **updates)


def load_settings(path: str | Path | None = None, profile: str = "default") -> ViewSettings:
    """Resolve view settings from a profile plus an optional YAML override file.

    The YAML file may name its own ``profile``; explicit keys override that profile.
    """
    if path is None:
        return get_profile(profile).settings
    with Path(path).open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        raise ProdgridValueError(f"View settings file {path} must contain a mapping")
    base = get_profile(str(data.get("profile", profile))).settings
    return merge_settings(base, data)


def api_base_url() -> str:
    return os.getenv(API_URL_ENV, DEFAULT_API_URL).rstrip("/")


__all__ = [
    "API_URL_ENV",
    "DEFAULT_API_URL",
    "ViewSettings",
    "ViewProfile",
    "DEFAULT_PROFILES",
    "get_profile",
    "list_profiles",
    "merge_settings",
    "load_settings",
    "api_base_url",
]
