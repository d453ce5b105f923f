"""Topic filtering for the story list.

Updates: v0.1 - 2026-10-19 - Macro/micro topic filter extracted from the CLI loop.
"""

from __future__ import annotations

import logging
from typing import Any, List, Sequence

from ..config import TOPIC_CHOICES
from ..models import Story

logger = logging.getLogger(__name__)


def normalise_topic(topic: Any) -> str:
    """Return a valid topic key, falling back to ``"all"``."""

    if isinstance(topic, str):
        candidate = topic.strip().lower()
        if candidate in TOPIC_CHOICES:
            return candidate
        if candidate:
            logger.debug("Unknown topic '%s'; showing all stories.", topic)
    return "all"


def filter_stories(stories: Sequence[Story], topic: Any) -> List[Story]:
    """Return the stories tagged with ``topic`` (every story for ``"all"``)."""

    if not stories:
        return []
    selected = normalise_topic(topic)
    if selected == "all":
        return list(stories)
    return [story for story in stories if story.factor == selected]


__all__ = ["filter_stories", "normalise_topic"]
