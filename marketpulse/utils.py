"""Utility helpers shared across MarketPulse modules.

Updates: v0.1 - 2026-10-19 - Seeded module with environment, timing, domain and age helpers.
"""

from __future__ import annotations

import calendar
import os
import time
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

_AGE_UNITS: tuple[tuple[int, str], ...] = (
    (31536000, "y"),
    (2592000, "mo"),
    (86400, "d"),
    (3600, "h"),
    (60, "m"),
)


def read_optional_env(name: str) -> Optional[str]:
    """Return trimmed environment variable or ``None`` when unset/blank."""

    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def compute_deadline_timeout(deadline: Optional[float], fallback: float) -> Optional[float]:
    """Resolve remaining timeout based on a monotonic deadline."""

    if deadline is None:
        return float(fallback)
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        return None
    return max(1.0, min(float(fallback), remaining))


def parse_iso8601_utc(value: Optional[str]) -> Optional[datetime]:
    """Parse ISO-8601 strings into aware UTC datetimes."""

    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    normalized = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        timestamp = datetime.fromisoformat(normalized)
    except ValueError:
        return None
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def isoformat_utc(timestamp: datetime) -> str:
    """Render an aware datetime as a ``Z``-suffixed UTC ISO-8601 string."""

    iso_value = timestamp.astimezone(timezone.utc).isoformat()
    return iso_value[:-6] + "Z" if iso_value.endswith("+00:00") else iso_value


def struct_time_to_iso(value: Optional[time.struct_time]) -> Optional[str]:
    """Convert a feedparser ``*_parsed`` UTC struct into an ISO-8601 string."""

    if value is None:
        return None
    try:
        epoch = calendar.timegm(value)
        timestamp = datetime.fromtimestamp(epoch, tz=timezone.utc)
    except (TypeError, OverflowError, OSError, ValueError):
        return None
    return isoformat_utc(timestamp)


def get_domain(url: Optional[str]) -> str:
    """Return the link hostname without a leading ``www.``; ``unknown`` on failure."""

    if not isinstance(url, str):
        return "unknown"
    try:
        hostname = urlparse(url.strip()).hostname
    except ValueError:
        return "unknown"
    if not hostname:
        return "unknown"
    return hostname[4:] if hostname.startswith("www.") else hostname


def time_since(value: Optional[str], now: Optional[datetime] = None) -> str:
    """Humanise the age of an ISO timestamp as ``3h ago`` style labels."""

    published = parse_iso8601_utc(value)
    if published is None:
        return "recently"
    reference = now or datetime.now(timezone.utc)
    seconds = max(0, int((reference - published).total_seconds()))
    for unit_seconds, suffix in _AGE_UNITS:
        interval = seconds // unit_seconds
        if interval >= 1:
            return f"{interval}{suffix} ago"
    return f"{seconds}s ago"


__all__ = [
    "compute_deadline_timeout",
    "get_domain",
    "isoformat_utc",
    "parse_iso8601_utc",
    "read_optional_env",
    "struct_time_to_iso",
    "time_since",
]
