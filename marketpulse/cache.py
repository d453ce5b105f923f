"""Redis cache helpers for assembled story feeds and article summaries."""

from __future__ import annotations

import hashlib
import json
import logging
import re
import threading
from typing import Any, List, Optional, Sequence, Set, Tuple

try:
    import redis  # type: ignore
except ImportError:  # pragma: no cover - optional dependency
    redis = None  # type: ignore

from .config import (
    CACHE_PREFIX,
    FEED_CACHE_TTL_SECONDS,
    REDIS_URL,
    SUMMARY_CACHE_TTL_SECONDS,
)
from .models import Story, StoryBundle

logger = logging.getLogger(__name__)

_redis_client: Optional[Any] = None
_redis_lock = threading.Lock()


def get_redis_client() -> Optional[Any]:
    """Return a cached Redis client if available."""

    global _redis_client
    if redis is None or not REDIS_URL:
        return None
    if _redis_client is not None:
        return _redis_client
    with _redis_lock:
        if _redis_client is not None:
            return _redis_client
        try:
            _redis_client = redis.from_url(  # type: ignore[attr-defined]
                REDIS_URL, decode_responses=True
            )
        except Exception as exc:  # pragma: no cover - redis connection failure
            logger.warning("Unable to connect to Redis cache: %s", exc)
            _redis_client = None
    return _redis_client


def _prefix() -> str:
    return CACHE_PREFIX.strip() or "marketpulse"


def stories_cache_key(country: str, time_filter: str) -> str:
    return f"{_prefix()}:stories:{country}:{time_filter}"


def load_cached_stories(country: str, time_filter: str) -> Optional[List[Story]]:
    """Return cached stories for a country/time selection, if still fresh."""

    client = get_redis_client()
    if client is None:
        return None
    key = stories_cache_key(country, time_filter)
    try:
        raw = client.get(key)  # type: ignore[attr-defined]
    except Exception as exc:  # pragma: no cover - redis failure
        logger.warning("Redis cache read failed for '%s': %s", key, exc)
        return None
    if not raw:
        return None
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Cached stories payload for '%s' is not valid JSON.", key)
        return None
    bundle = StoryBundle.from_payload(payload)
    if bundle is None or not bundle.stories:
        return None
    return list(bundle.stories)


def store_cached_stories(country: str, time_filter: str, stories: Sequence[Story]) -> None:
    client = get_redis_client()
    if client is None or not stories:
        return
    key = stories_cache_key(country, time_filter)
    bundle = StoryBundle(country=country, time_filter=time_filter, stories=list(stories))
    try:
        payload = json.dumps(bundle.to_payload(), ensure_ascii=False)
        client.setex(key, FEED_CACHE_TTL_SECONDS, payload)  # type: ignore[attr-defined]
    except Exception as exc:  # pragma: no cover - redis failure
        logger.warning("Redis cache write failed for '%s': %s", key, exc)


def _normalise_summary_title(title: Optional[str]) -> Optional[str]:
    if not isinstance(title, str):
        return None
    compact = re.sub(r"\s+", " ", title.strip().lower())
    return compact or None


def _summary_cache_keys(url: str, title: Optional[str]) -> List[str]:
    if not isinstance(url, str):
        return []
    stripped = url.strip()
    if not stripped or stripped == "#":
        return []
    normalized = stripped.rstrip("/")
    url_candidates: List[str] = []
    for candidate in (stripped, normalized):
        if candidate and candidate not in url_candidates:
            url_candidates.append(candidate)

    keys: List[str] = []
    normalised_title = _normalise_summary_title(title)
    if normalised_title:
        digest = hashlib.sha256(normalised_title.encode("utf-8")).hexdigest()[:16]
        for candidate in url_candidates:
            keys.append(f"{_prefix()}:summary:{candidate}#t:{digest}")
    keys.extend(f"{_prefix()}:summary:{candidate}" for candidate in url_candidates)

    deduplicated: List[str] = []
    seen: Set[str] = set()
    for key in keys:
        if key not in seen:
            deduplicated.append(key)
            seen.add(key)
    return deduplicated


def get_cached_article_summary(url: str, title: Optional[str]) -> Optional[str]:
    """Return a cached article summary for the given URL if available."""

    client = get_redis_client()
    if client is None:
        return None
    for key in _summary_cache_keys(url, title):
        try:
            summary = client.get(key)  # type: ignore[attr-defined]
        except Exception as exc:  # pragma: no cover - redis failure
            logger.warning("Redis summary read failed for '%s': %s", key, exc)
            return None
        if isinstance(summary, str) and summary.strip():
            return summary
    return None


def store_cached_article_summary(
    original_url: str, final_url: Optional[str], title: Optional[str], summary: str
) -> None:
    """Persist an article summary keyed by both the feed link and final URL."""

    if not summary.strip():
        return
    client = get_redis_client()
    if client is None:
        return
    keys: List[str] = []
    for candidate in (original_url, final_url):
        if isinstance(candidate, str):
            keys.extend(_summary_cache_keys(candidate, title))
    try:
        for key in dict.fromkeys(keys):
            client.setex(key, SUMMARY_CACHE_TTL_SECONDS, summary)  # type: ignore[attr-defined]
    except Exception as exc:  # pragma: no cover - redis failure
        logger.warning("Redis summary write failed: %s", exc)


def clear_cached_stories() -> Tuple[bool, str]:
    """Remove cached story feeds and summaries if the cache is configured."""

    client = get_redis_client()
    if client is None:
        logger.info("Redis cache not configured; nothing to clear.")
        return False, "Redis cache not configured."

    pattern = f"{_prefix()}:*"
    try:
        keys = [
            raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)
            for raw in client.scan_iter(match=pattern)  # type: ignore[attr-defined]
        ]
        removed = client.delete(*keys) if keys else 0  # type: ignore[attr-defined]
    except Exception as exc:  # pragma: no cover - redis failure
        logger.warning("Unable to clear Redis cache: %s", exc)
        return False, "Failed to clear Redis cache. Check logs for details."

    if removed:
        plural = "s" if removed != 1 else ""
        logger.info("Cleared %s Redis cache key%s under '%s'.", removed, plural, pattern)
        return True, f"Redis cache cleared ({removed} key{plural})."
    logger.info("Redis cache under '%s' already empty.", pattern)
    return True, "Redis cache already empty."


__all__ = [
    "clear_cached_stories",
    "get_cached_article_summary",
    "get_redis_client",
    "load_cached_stories",
    "stories_cache_key",
    "store_cached_article_summary",
    "store_cached_stories",
]
