"""Persistent settings helpers for MarketPulse.

The dashboard remembers its theme, the last country/time/topic filters and
the debug toggle between runs in a small JSON file.

Updates: v0.1 - 2026-10-19 - JSON preference file with theme toggle.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .config import DEFAULT_SETTINGS, SETTINGS_PATH, THEME_PALETTES, merge_settings

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _settings_path(path: Optional[PathLike]) -> Path:
    return Path(path) if path is not None else SETTINGS_PATH


def load_settings(path: Optional[PathLike] = None) -> Dict[str, Any]:
    """Load application settings from disk, falling back to defaults."""

    settings_path = _settings_path(path)
    settings = DEFAULT_SETTINGS.copy()
    try:
        if settings_path.exists():
            with settings_path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
            if isinstance(data, dict):
                settings = merge_settings(data)
            else:
                logger.warning("Ignoring settings file %s: expected a JSON object.", settings_path)
    except Exception as exc:  # pragma: no cover - IO issues
        logger.warning("Unable to load settings: %s", exc)
    if settings.get("theme") not in THEME_PALETTES:
        settings["theme"] = DEFAULT_SETTINGS["theme"]
    settings["debug_mode"] = bool(settings.get("debug_mode"))
    return settings


def save_settings(settings: Mapping[str, Any], path: Optional[PathLike] = None) -> None:
    """Persist application settings to disk."""

    settings_path = _settings_path(path)
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        with settings_path.open("w", encoding="utf-8") as handle:
            json.dump(merge_settings(settings), handle, indent=2)
    except Exception as exc:  # pragma: no cover - IO issues
        logger.warning("Unable to save settings: %s", exc)


def toggle_theme(settings: Dict[str, Any]) -> str:
    """Flip between the dark and light themes in place; returns the new theme."""

    new_theme = "light" if settings.get("theme", DEFAULT_SETTINGS["theme"]) == "dark" else "dark"
    settings["theme"] = new_theme
    logger.info("Theme switched to %s.", new_theme)
    return new_theme


__all__ = ["load_settings", "save_settings", "toggle_theme"]
