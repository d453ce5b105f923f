"""Configuration primitives and static data for MarketPulse.

This module centralises feed endpoints, network defaults, model names, cache
settings and persisted preference defaults so other layers can import them
without side effects beyond loading an optional ``.env`` file.

Updates: v0.1 - 2026-10-19 - Feed, redirect, extraction and inference defaults.
Updates: v0.2 - 2026-10-19 - Added Redis story cache TTL and theme palettes.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping

try:  # pragma: no cover - optional dependency
    from dotenv import load_dotenv as _config_load_dotenv  # type: ignore
except ImportError:  # pragma: no cover - optional dependency
    _config_load_dotenv = None
else:
    _config_load_dotenv()


def _int_env(name: str, default: int, minimum: int) -> int:
    try:
        return max(minimum, int(os.getenv(name, str(default))))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


# --- Feed source -------------------------------------------------------------------------------

FEED_BASE_URL = "https://www.bing.com/news/search"
FEED_MARKET = "en-US"

COUNTRY_QUERIES: Dict[str, str] = {
    "us": "US economy finance market",
    "cn": "china economy finance market",
    "jp": "japan economy finance market",
    "de": "germany economy finance market",
    "in": "india economy finance market",
}
COUNTRY_LABELS: Dict[str, str] = {
    "us": "United States (Top Market)",
    "cn": "China",
    "jp": "Japan",
    "de": "Germany",
    "in": "India",
}
DEFAULT_COUNTRY = "us"

# Bing "qft=interval" codes: 4 = past 24 hours, 7 = past week, 8 = past month.
TIME_FILTER_INTERVALS: Dict[str, str] = {
    "today": "4",
    "week": "7",
    "month": "8",
}
TIME_FILTER_LABELS: Dict[str, str] = {
    "today": "Trending Today",
    "week": "This Week",
    "month": "This Month",
}
DEFAULT_TIME_FILTER = "today"

TOPIC_CHOICES: tuple[str, ...] = ("all", "macro", "micro")
TOPIC_LABELS: Dict[str, str] = {
    "all": "Trending",
    "macro": "Macro Insights",
    "micro": "Micro Catalysts",
}

FEED_LIMIT = _int_env("MARKETPULSE_FEED_LIMIT", 30, 1)
DIGEST_HEADLINE_LIMIT = 10


# --- HTTP and redirect resolution --------------------------------------------------------------

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/128.0.0.0 Safari/537.36"
)
BROWSER_HEADERS: Dict[str, str] = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

HTTP_TIMEOUT = _int_env("MARKETPULSE_HTTP_TIMEOUT", 15, 1)
MAX_REDIRECT_HOPS = _int_env("MARKETPULSE_MAX_HOPS", 3, 1)


# --- Article extraction ------------------------------------------------------------------------

ARTICLE_CHAR_BUDGET = _int_env("MARKETPULSE_ARTICLE_BUDGET", 4000, 100)
MIN_ARTICLE_CHARS = _int_env("MARKETPULSE_MIN_ARTICLE_CHARS", 200, 0)
TRUNCATION_MARKER = "..."
EXTRACTION_PLACEHOLDER = "Failed to extract article text."


# --- Inference ---------------------------------------------------------------------------------

CLASSIFICATION_TASK = "text-classification"
SUMMARIZATION_TASK = "summarization"

CLASSIFIER_MODEL = os.getenv(
    "MARKETPULSE_CLASSIFIER_MODEL", "distilbert-base-uncased-finetuned-sst-2-english"
)
SUMMARIZER_MODEL = os.getenv("MARKETPULSE_SUMMARIZER_MODEL", "sshleifer/distilbart-cnn-6-6")
SUMMARY_BACKEND = (os.getenv("MARKETPULSE_SUMMARY_BACKEND") or "transformers").strip().lower()
SUMMARY_MAX_NEW_TOKENS = 150
SUMMARY_MIN_LENGTH = 30
SUMMARY_TIMEOUT = _int_env("MARKETPULSE_SUMMARY_TIMEOUT", 60, 5)
SENTIMENT_CONFIDENCE_THRESHOLD = _float_env("MARKETPULSE_SENTIMENT_THRESHOLD", 0.75)

PENDING_TIMEOUT_SECONDS = _int_env("MARKETPULSE_PENDING_TIMEOUT", 60, 1)
ERROR_CLEAR_SECONDS = 3


# --- Redis caching -----------------------------------------------------------------------------

REDIS_URL = os.getenv("REDIS_URL")
CACHE_PREFIX = os.getenv("MARKETPULSE_CACHE_PREFIX", "marketpulse:v1")
FEED_CACHE_TTL_SECONDS = _int_env("MARKETPULSE_FEED_CACHE_TTL", 60, 10)
SUMMARY_CACHE_TTL_SECONDS = _int_env("MARKETPULSE_SUMMARY_CACHE_TTL", 86400, 300)


# --- Terminal themes ---------------------------------------------------------------------------

THEME_PALETTES: Dict[str, Dict[str, str]] = {
    "dark": {
        "title": "\033[97m",
        "meta": "\033[90m",
        "macro": "\033[96m",
        "micro": "\033[95m",
        "bullish": "\033[92m",
        "bearish": "\033[91m",
        "neutral": "\033[93m",
        "untagged": "\033[90m",
    },
    "light": {
        "title": "\033[30m",
        "meta": "\033[37m",
        "macro": "\033[34m",
        "micro": "\033[35m",
        "bullish": "\033[32m",
        "bearish": "\033[31m",
        "neutral": "\033[33m",
        "untagged": "\033[37m",
    },
}
DEFAULT_THEME = "dark"


# --- Settings persistence ----------------------------------------------------------------------

_XDG_CONFIG_HOME = os.getenv("XDG_CONFIG_HOME")
_LOCAL_APPDATA = os.getenv("LOCALAPPDATA")

if os.name == "nt":
    base_dir = Path(_LOCAL_APPDATA) if _LOCAL_APPDATA else Path.home() / "AppData" / "Local"
else:
    base_dir = Path(_XDG_CONFIG_HOME) if _XDG_CONFIG_HOME else Path.home() / ".config"
_DEFAULT_SETTINGS_FILE = base_dir / "MarketPulse" / "settings.json"

SETTINGS_PATH = Path(os.getenv("MARKETPULSE_SETTINGS", str(_DEFAULT_SETTINGS_FILE)))

DEFAULT_SETTINGS: Dict[str, Any] = {
    "theme": DEFAULT_THEME,
    "country": DEFAULT_COUNTRY,
    "time_filter": DEFAULT_TIME_FILTER,
    "topic": "all",
    "debug_mode": False,
}


def merge_settings(overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Apply overrides on top of the default settings."""

    merged = DEFAULT_SETTINGS.copy()
    merged.update({key: value for key, value in overrides.items() if key in merged})
    return merged


__all__ = [
    "ARTICLE_CHAR_BUDGET",
    "BROWSER_HEADERS",
    "CACHE_PREFIX",
    "CLASSIFICATION_TASK",
    "CLASSIFIER_MODEL",
    "COUNTRY_LABELS",
    "COUNTRY_QUERIES",
    "DEFAULT_COUNTRY",
    "DEFAULT_SETTINGS",
    "DEFAULT_THEME",
    "DEFAULT_TIME_FILTER",
    "DIGEST_HEADLINE_LIMIT",
    "ERROR_CLEAR_SECONDS",
    "EXTRACTION_PLACEHOLDER",
    "FEED_BASE_URL",
    "FEED_CACHE_TTL_SECONDS",
    "FEED_LIMIT",
    "FEED_MARKET",
    "HTTP_TIMEOUT",
    "MAX_REDIRECT_HOPS",
    "MIN_ARTICLE_CHARS",
    "PENDING_TIMEOUT_SECONDS",
    "REDIS_URL",
    "SENTIMENT_CONFIDENCE_THRESHOLD",
    "SETTINGS_PATH",
    "SUMMARIZATION_TASK",
    "SUMMARIZER_MODEL",
    "SUMMARY_BACKEND",
    "SUMMARY_CACHE_TTL_SECONDS",
    "SUMMARY_MAX_NEW_TOKENS",
    "SUMMARY_MIN_LENGTH",
    "SUMMARY_TIMEOUT",
    "THEME_PALETTES",
    "TIME_FILTER_INTERVALS",
    "TIME_FILTER_LABELS",
    "TOPIC_CHOICES",
    "TOPIC_LABELS",
    "TRUNCATION_MARKER",
    "USER_AGENT",
    "merge_settings",
]
