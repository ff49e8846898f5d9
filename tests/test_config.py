from __future__ import annotations

import pytest

from prodgrid.config import (
    DEFAULT_API_URL,
    ViewSettings,
    api_base_url,
    get_profile,
    list_profiles,
    load_settings,
    merge_settings,
)
from prodgrid.core.errors import ProdgridValueError


def test_profiles_are_listed_and_resolved():
    names = [profile.name for profile in list_profiles()]
    assert names == ["compact", "default", "tall"]
    assert get_profile("COMPACT").settings.pixels_per_hour == 40.0
    assert get_profile("default").settings.layout.gap_px == 2.0


def test_unknown_profile_lists_available():
    with pytest.raises(KeyError) as info:
        get_profile("huge")
    assert "Available: compact, default, tall" in info.value.args[0]


def test_merge_settings_flat_and_nested():
    merged = merge_settings(
        ViewSettings(),
        {"pixels_per_hour": 60, "gap_px": 4, "layout": {"min_height_px": 30}, "machine_ids": ["L1", "L2", "L3"]},
    )
    assert merged.pixels_per_hour == 60
    assert merged.layout.gap_px == 4
    assert merged.layout.min_height_px == 30
    assert merged.layout.adjacency_tolerance_px == 1.0
    assert merged.machine_ids == ("L1", "L2", "L3")


def test_merge_settings_rejects_unknown_keys():
    with pytest.raises(ProdgridValueError):
        merge_settings(ViewSettings(), {"colour": "red"})
    with pytest.raises(ProdgridValueError):
        merge_settings(ViewSettings(), {"layout": {"padding": 3}})


def test_load_settings_from_yaml(tmp_path):
    path = tmp_path / "view.yaml"
    path.write_text("profile: compact\nmin_height_px: 10\ntimezone: UTC\n", encoding="utf-8")
    settings = load_settings(path)
    assert settings.pixels_per_hour == 40.0
    assert settings.layout.gap_px == 1.0
    assert settings.layout.min_height_px == 10
    assert settings.timezone == "UTC"


def test_load_settings_rejects_non_mapping(tmp_path):
    path = tmp_path / "view.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ProdgridValueError):
        load_settings(path)


def test_invalid_settings_raise():
    with pytest.raises(ProdgridValueError):
        ViewSettings(max_visible_machines=0)


def test_api_base_url(monkeypatch):
    monkeypatch.delenv("PRODGRID_API_URL", raising=False)
    assert api_base_url() == DEFAULT_API_URL
    monkeypatch.setenv("PRODGRID_API_URL", "https://plant.example/")
    assert api_base_url() == "https://plant.example"
