"""Domain models backing the MarketPulse dashboard.

Feed items, classified stories, redirect traces and summary payloads are
plain frozen dataclasses so they can cross thread boundaries (inference
worker, CLI loop) and be serialised into the Redis cache without surprises.

Updates: v0.1 - 2026-10-19 - Introduced headline, story and classification models.
Updates: v0.2 - 2026-10-19 - Added redirect trace and summary resolution payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Literal, Optional

Factor = Literal["macro", "micro"]
Sentiment = Literal["bullish", "bearish", "neutral", "untagged"]
RedirectState = Literal["following", "resolved", "failed"]


@dataclass(frozen=True)
class AppMetadata:
    name: str
    version: str
    description: str


@dataclass(frozen=True)
class HeadlineItem:
    """A single entry produced by the feed parser."""

    title: Optional[str]
    link: Optional[str]
    published_at: Optional[str] = None
    guid: Optional[str] = None


@dataclass(frozen=True)
class Classification:
    factor: Factor
    sentiment: Sentiment
    impact_label: str


@dataclass(frozen=True)
class Story:
    """A headline enriched with heuristic (or refined) tags for display."""

    id: str
    title: str
    link: str
    domain: str
    time_ago: str
    factor: Factor
    sentiment: Sentiment
    impact_label: str
    published_at: Optional[str] = None

    def with_classification(self, classification: Classification) -> "Story":
        return replace(
            self,
            factor=classification.factor,
            sentiment=classification.sentiment,
            impact_label=classification.impact_label,
        )

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "domain": self.domain,
            "time_ago": self.time_ago,
            "factor": self.factor,
            "sentiment": self.sentiment,
            "impact_label": self.impact_label,
            "published_at": self.published_at,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> Optional["Story"]:
        keys = (
            "id",
            "title",
            "link",
            "domain",
            "time_ago",
            "factor",
            "sentiment",
            "impact_label",
        )
        if not all(isinstance(payload.get(key), str) for key in keys):
            return None
        published_at = payload.get("published_at")
        if published_at is not None and not isinstance(published_at, str):
            return None
        if payload["factor"] not in ("macro", "micro"):
            return None
        if payload["sentiment"] not in ("bullish", "bearish", "neutral", "untagged"):
            return None
        return cls(**{key: payload[key] for key in keys}, published_at=published_at)


@dataclass(frozen=True)
class StoryBundle:
    """Cached collection of stories for one country/time selection."""

    country: str
    time_filter: str
    stories: List[Story] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "country": self.country,
            "time_filter": self.time_filter,
            "stories": [story.as_dict() for story in self.stories],
        }

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["StoryBundle"]:
        if not isinstance(payload, dict):
            return None
        country = payload.get("country")
        time_filter = payload.get("time_filter")
        entries = payload.get("stories")
        if not isinstance(country, str) or not isinstance(time_filter, str):
            return None
        if not isinstance(entries, list):
            return None
        stories: List[Story] = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            story = Story.from_dict(entry)
            if story is not None:
                stories.append(story)
        return cls(country=country, time_filter=time_filter, stories=stories)


@dataclass
class RedirectTrace:
    """Ephemeral state of one jump-page resolution."""

    current_url: str
    hops: int = 0
    html: str = ""
    html_url: Optional[str] = None
    state: RedirectState = "following"
    exhausted: bool = False
    visited: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ArticleContent:
    url: str
    text: str


@dataclass(frozen=True)
class SentimentResult:
    label: str
    score: float


@dataclass(frozen=True)
class SummaryResolution:
    summary: str
    article_text: Optional[str]
    from_cache: bool
    source_url: Optional[str] = None
    issue: Optional[str] = None


__all__ = [
    "AppMetadata",
    "ArticleContent",
    "Classification",
    "Factor",
    "HeadlineItem",
    "RedirectState",
    "RedirectTrace",
    "Sentiment",
    "SentimentResult",
    "Story",
    "StoryBundle",
    "SummaryResolution",
]
