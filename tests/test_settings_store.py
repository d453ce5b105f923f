"""Tests for persisted preferences in marketpulse.settings_store."""

from __future__ import annotations

import json
from pathlib import Path

from marketpulse.config import DEFAULT_SETTINGS
from marketpulse.settings_store import load_settings, save_settings, toggle_theme


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    assert load_settings(tmp_path / "absent.json") == DEFAULT_SETTINGS


def test_known_keys_override_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"theme": "light", "country": "jp", "unknown": 1}), encoding="utf-8")
    settings = load_settings(path)
    assert settings["theme"] == "light"
    assert settings["country"] == "jp"
    assert "unknown" not in settings


def test_invalid_theme_and_non_object_fall_back(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"theme": "neon"}), encoding="utf-8")
    assert load_settings(path)["theme"] == "dark"
    path.write_text(json.dumps(["not", "a", "dict"]), encoding="utf-8")
    assert load_settings(path) == DEFAULT_SETTINGS


def test_save_then_load_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    settings = dict(DEFAULT_SETTINGS, topic="macro", debug_mode=True)
    save_settings(settings, path)
    assert load_settings(path) == settings


def test_toggle_theme_flips_in_place() -> None:
    settings = dict(DEFAULT_SETTINGS)
    assert toggle_theme(settings) == "light"
    assert settings["theme"] == "light"
    assert toggle_theme(settings) == "dark"
