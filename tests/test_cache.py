"""Tests for the Redis cache helpers in marketpulse.cache.

Covers:
- story bundle round trip with TTL and invalid payload handling
- summary keys by URL and title digest
- cache clearing and the unconfigured fallback
"""

from __future__ import annotations

import fnmatch
from typing import Dict, Optional, Tuple

import pytest

from marketpulse import cache
from marketpulse.models import Story


class FakeRedis:
    def __init__(self) -> None:
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}

    def get(self, key: str) -> Optional[str]:
        return self.store.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self.store[key] = value
        self.ttls[key] = ttl

    def scan_iter(self, match: str = "*"):
        return [key for key in list(self.store) if fnmatch.fnmatch(key, match)]

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed


@pytest.fixture()
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> FakeRedis:
    client = FakeRedis()
    monkeypatch.setattr(cache, "get_redis_client", lambda: client)
    return client


def _story(story_id: str = "0") -> Story:
    return Story(
        id=story_id,
        title="GDP beats forecasts",
        link="https://pub.example.com/gdp",
        domain="pub.example.com",
        time_ago="5m ago",
        factor="macro",
        sentiment="bullish",
        impact_label="Economic Tailwind",
        published_at="2026-10-19T11:55:00Z",
    )


def test_stories_round_trip_with_ttl(fake_redis: FakeRedis) -> None:
    cache.store_cached_stories("us", "today", [_story("0"), _story("1")])
    key = cache.stories_cache_key("us", "today")
    assert key.endswith(":stories:us:today")
    assert fake_redis.ttls[key] == cache.FEED_CACHE_TTL_SECONDS
    loaded = cache.load_cached_stories("us", "today")
    assert loaded == [_story("0"), _story("1")]


def test_invalid_payload_is_ignored(fake_redis: FakeRedis) -> None:
    fake_redis.store[cache.stories_cache_key("us", "week")] = "{not json"
    assert cache.load_cached_stories("us", "week") is None


def test_malformed_story_entries_are_skipped(fake_redis: FakeRedis) -> None:
    payload = '{"country": "us", "time_filter": "month", "stories": [{"id": "x"}]}'
    fake_redis.store[cache.stories_cache_key("us", "month")] = payload
    assert cache.load_cached_stories("us", "month") is None


def test_empty_story_list_is_not_stored(fake_redis: FakeRedis) -> None:
    cache.store_cached_stories("us", "today", [])
    assert fake_redis.store == {}


def test_summary_keyed_by_both_urls_and_title(fake_redis: FakeRedis) -> None:
    cache.store_cached_article_summary(
        "https://jump.example.com/r", "https://pub.example.com/final/", "GDP beats forecasts", "Summary"
    )
    assert cache.get_cached_article_summary("https://jump.example.com/r", "GDP beats forecasts") == "Summary"
    assert cache.get_cached_article_summary("https://pub.example.com/final", "  gdp   BEATS forecasts ") == "Summary"
    assert all(ttl == cache.SUMMARY_CACHE_TTL_SECONDS for ttl in fake_redis.ttls.values())


def test_summary_lookup_falls_back_to_url_only_key(fake_redis: FakeRedis) -> None:
    cache.store_cached_article_summary("https://pub.example.com/a", None, "Old title", "Summary")
    assert cache.get_cached_article_summary("https://pub.example.com/a", "Different title") == "Summary"


def test_placeholder_links_are_never_cached(fake_redis: FakeRedis) -> None:
    cache.store_cached_article_summary("#", None, "Title", "Summary")
    assert fake_redis.store == {}
    assert cache.get_cached_article_summary("#", "Title") is None


def test_clear_cached_stories_removes_prefixed_keys(fake_redis: FakeRedis) -> None:
    cache.store_cached_stories("us", "today", [_story()])
    fake_redis.store["unrelated"] = "keep"
    ok, message = cache.clear_cached_stories()
    assert ok
    assert message == "Redis cache cleared (1 key)."
    assert fake_redis.store == {"unrelated": "keep"}


def test_helpers_are_noops_without_redis() -> None:
    cache.store_cached_stories("us", "today", [_story()])
    assert cache.load_cached_stories("us", "today") is None
    assert cache.get_cached_article_summary("https://pub.example.com/a", "t") is None
    result: Tuple[bool, str] = cache.clear_cached_stories()
    assert result == (False, "Redis cache not configured.")
