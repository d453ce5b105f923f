"""Unit tests for utility functions in marketpulse.utils.

Covers:
- read_optional_env
- compute_deadline_timeout
- parse_iso8601_utc / isoformat_utc / struct_time_to_iso
- get_domain
- time_since
"""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone

import pytest

from marketpulse.utils import (
    compute_deadline_timeout,
    get_domain,
    isoformat_utc,
    parse_iso8601_utc,
    read_optional_env,
    struct_time_to_iso,
    time_since,
)

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def test_read_optional_env_returns_trimmed_value(monkeypatch: pytest.MonkeyPatch) -> None:
    """Environment value should be trimmed and returned when non-blank."""
    monkeypatch.setenv("TEST_ENV_VAR", "  value  ")
    assert read_optional_env("TEST_ENV_VAR") == "value"


def test_read_optional_env_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    """Blank environment variable should yield None."""
    monkeypatch.setenv("BLANK_ENV_VAR", "   ")
    assert read_optional_env("BLANK_ENV_VAR") is None


def test_compute_deadline_timeout_none_deadline() -> None:
    """When deadline is None, fallback should be used as timeout."""
    assert compute_deadline_timeout(None, fallback=5.0) == 5.0


def test_compute_deadline_timeout_past_deadline() -> None:
    """When deadline has passed, timeout should be None."""
    deadline = time.monotonic() - 0.5
    assert compute_deadline_timeout(deadline, fallback=5.0) is None


def test_parse_iso8601_utc_accepts_z_suffix() -> None:
    parsed = parse_iso8601_utc("2026-10-19T10:30:00Z")
    assert parsed == datetime(2026, 10, 19, 10, 30, tzinfo=timezone.utc)


def test_parse_iso8601_utc_converts_offsets() -> None:
    parsed = parse_iso8601_utc("2026-10-19T12:30:00+02:00")
    assert parsed == datetime(2026, 10, 19, 10, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", [None, "", "   ", "yesterday"])
def test_parse_iso8601_utc_rejects_garbage(value: object) -> None:
    assert parse_iso8601_utc(value) is None  # type: ignore[arg-type]


def test_isoformat_utc_uses_z_suffix() -> None:
    assert isoformat_utc(NOW) == "2026-10-19T12:00:00Z"


def test_struct_time_to_iso_treats_struct_as_utc() -> None:
    parsed = time.strptime("2026-10-19 08:15:00", "%Y-%m-%d %H:%M:%S")
    assert struct_time_to_iso(parsed) == "2026-10-19T08:15:00Z"
    assert struct_time_to_iso(None) is None


def test_get_domain_strips_www_prefix() -> None:
    """Leading www. is dropped from the hostname."""
    assert get_domain("https://www.reuters.com/markets/x") == "reuters.com"


def test_get_domain_keeps_other_subdomains() -> None:
    assert get_domain("https://finance.yahoo.com/news/a") == "finance.yahoo.com"


@pytest.mark.parametrize("value", ["not a url", "", None, "#"])
def test_get_domain_unknown_for_unparseable(value: object) -> None:
    assert get_domain(value) == "unknown"  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(seconds=42), "42s ago"),
        (timedelta(minutes=5), "5m ago"),
        (timedelta(hours=3, minutes=20), "3h ago"),
        (timedelta(days=2), "2d ago"),
        (timedelta(days=65), "2mo ago"),
        (timedelta(days=800), "2y ago"),
    ],
)
def test_time_since_units(delta: timedelta, expected: str) -> None:
    assert time_since(isoformat_utc(NOW - delta), NOW) == expected


def test_time_since_future_timestamp_clamps_to_zero() -> None:
    assert time_since(isoformat_utc(NOW + timedelta(minutes=10)), NOW) == "0s ago"


def test_time_since_missing_timestamp_reads_recently() -> None:
    assert time_since(None, NOW) == "recently"
    assert time_since("not-a-date", NOW) == "recently"
