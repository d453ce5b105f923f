"""Finance headline feed retrieval and story assembly.

Headlines come from a Bing News RSS search per country and time window. The
feed XML is downloaded with the shared ``requests`` session and parsed with
``feedparser``; each entry is classified and decorated with its domain and
relative age. Any failure yields an empty list so the dashboard can show its
"no stories" state.

Updates: v0.1 - 2026-10-19 - Bing RSS fetch, story assembly and Redis-backed revalidation window.
Updates: v0.2 - 2026-10-19 - Undated items keep a null published_at so cached reloads still read "recently".
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional
from urllib.parse import urlencode

import feedparser  # type: ignore

from .cache import load_cached_stories, store_cached_stories
from .classifier import classify, pending_classification
from .config import (
    COUNTRY_QUERIES,
    DEFAULT_COUNTRY,
    DEFAULT_TIME_FILTER,
    FEED_BASE_URL,
    FEED_LIMIT,
    FEED_MARKET,
    HTTP_TIMEOUT,
    TIME_FILTER_INTERVALS,
    USER_AGENT,
)
from .http_client import get_http_session
from .models import HeadlineItem, Story
from .utils import get_domain, struct_time_to_iso, time_since

logger = logging.getLogger(__name__)


def normalise_country(country: Optional[str]) -> str:
    candidate = (country or "").strip().lower()
    return candidate if candidate in COUNTRY_QUERIES else DEFAULT_COUNTRY


def normalise_time_filter(time_filter: Optional[str]) -> str:
    candidate = (time_filter or "").strip().lower()
    return candidate if candidate in TIME_FILTER_INTERVALS else DEFAULT_TIME_FILTER


def build_feed_url(country: str = DEFAULT_COUNTRY, time_filter: str = DEFAULT_TIME_FILTER) -> str:
    """Return the Bing News RSS search URL for a country/time selection."""

    query = COUNTRY_QUERIES[normalise_country(country)]
    interval = TIME_FILTER_INTERVALS[normalise_time_filter(time_filter)]
    params = {
        "q": query,
        "format": "rss",
        "qft": f'interval="{interval}"',
        "setmkt": FEED_MARKET,
    }
    return f"{FEED_BASE_URL}?{urlencode(params)}"


def _entry_value(entry: Any, name: str) -> Optional[str]:
    value = entry.get(name) if hasattr(entry, "get") else getattr(entry, name, None)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_feed_entries(entries: Iterable[Any]) -> List[HeadlineItem]:
    """Convert feedparser entries into headline items."""

    items: List[HeadlineItem] = []
    for entry in entries:
        published_at = None
        for field_name in ("published_parsed", "updated_parsed"):
            parsed = entry.get(field_name) if hasattr(entry, "get") else None
            published_at = struct_time_to_iso(parsed)
            if published_at:
                break
        items.append(
            HeadlineItem(
                title=_entry_value(entry, "title"),
                link=_entry_value(entry, "link"),
                published_at=published_at,
                guid=_entry_value(entry, "id"),
            )
        )
    return items


def fetch_headline_items(url: str) -> List[HeadlineItem]:
    """Download and parse the RSS feed at ``url``; raises on transport errors."""

    session = get_http_session()
    response = session.get(
        url,
        headers={"User-Agent": USER_AGENT, "Accept": "application/rss+xml, application/xml;q=0.9, */*;q=0.8"},
        timeout=HTTP_TIMEOUT,
    )
    response.raise_for_status()
    parsed = feedparser.parse(response.content)
    if getattr(parsed, "bozo", False) and not parsed.entries:
        raise ValueError(f"Unparseable feed at {url}: {parsed.get('bozo_exception')}")
    return parse_feed_entries(parsed.entries)


def assemble_stories(
    items: Iterable[HeadlineItem],
    *,
    limit: int = FEED_LIMIT,
    await_refinement: bool = False,
    now: Optional[datetime] = None,
) -> List[Story]:
    """Map headline items into classified stories, keeping feed order."""

    reference = now or datetime.now(timezone.utc)
    stories: List[Story] = []
    for index, item in enumerate(items):
        if index >= limit:
            break
        title = item.title or "Untitled"
        link = item.link or "#"
        tags = pending_classification(item.title) if await_refinement else classify(item.title)
        stories.append(
            Story(
                id=f"{item.guid}-{index}" if item.guid else str(index),
                title=title,
                link=link,
                domain=get_domain(link),
                time_ago=time_since(item.published_at, reference) if item.published_at else "recently",
                factor=tags.factor,
                sentiment=tags.sentiment,
                impact_label=tags.impact_label,
                published_at=item.published_at,
            )
        )
    return stories


def fetch_finance_news(
    country: str = DEFAULT_COUNTRY,
    time_filter: str = DEFAULT_TIME_FILTER,
    *,
    force_refresh: bool = False,
    await_refinement: bool = False,
) -> List[Story]:
    """Return up to ``FEED_LIMIT`` classified stories; ``[]`` on any failure."""

    country = normalise_country(country)
    time_filter = normalise_time_filter(time_filter)

    if not force_refresh and not await_refinement:
        cached = load_cached_stories(country, time_filter)
        if cached:
            logger.info("Loaded %s cached stories for %s/%s.", len(cached), country, time_filter)
            now = datetime.now(timezone.utc)
            return [replace(story, time_ago=time_since(story.published_at, now)) for story in cached]

    url = build_feed_url(country, time_filter)
    logger.debug("Fetching feed %s", url)
    try:
        items = fetch_headline_items(url)
    except Exception as exc:
        logger.warning("Failed to fetch RSS feed for %s/%s: %s", country, time_filter, exc)
        return []

    stories = assemble_stories(items, await_refinement=await_refinement)
    logger.info("Fetched %s stories for %s/%s.", len(stories), country, time_filter)
    if not await_refinement:
        store_cached_stories(country, time_filter, stories)
    return stories


__all__ = [
    "assemble_stories",
    "build_feed_url",
    "fetch_finance_news",
    "fetch_headline_items",
    "normalise_country",
    "normalise_time_filter",
    "parse_feed_entries",
]
