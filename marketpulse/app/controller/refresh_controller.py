"""Refresh controller: encapsulates the story fetch lifecycle.

Updates: v0.1 - 2026-10-19 - Fetch, topic filter and board replacement with service injection.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ...models import Story
from ..filtering import filter_stories, normalise_topic
from ..services import fetch_stories
from .board_controller import StoryBoard

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshResult:
    stories: List[Story]
    fetched: int
    fetched_at: datetime


class RefreshController:
    """Load the feed for the current filters into a :class:`StoryBoard`.

    A new country or time filter replaces the board wholesale; the topic
    filter is applied to the fetched list before it reaches the board.
    """

    def __init__(
        self,
        board: StoryBoard,
        *,
        country: str,
        time_filter: str,
        topic: str = "all",
    ) -> None:
        self.board = board
        self.country = country
        self.time_filter = time_filter
        self.topic = normalise_topic(topic)

    def refresh(self, *, force_refresh: bool = False, await_refinement: bool = False) -> RefreshResult:
        logger.info(
            "Refreshing stories (country=%s, time=%s, topic=%s, force_refresh=%s)",
            self.country,
            self.time_filter,
            self.topic,
            force_refresh,
        )
        fetched_at = datetime.now(timezone.utc)
        try:
            fetched = fetch_stories(
                self.country,
                self.time_filter,
                force_refresh=force_refresh,
                await_refinement=await_refinement,
            )
        except Exception:
            logger.exception("Failed to update stories:")
            fetched = []
        stories = filter_stories(fetched, self.topic)
        self.board.replace(stories)
        return RefreshResult(stories=stories, fetched=len(fetched), fetched_at=fetched_at)

    def refresh_in_background(
        self,
        on_done: Callable[[RefreshResult], None],
        *,
        force_refresh: bool = False,
        await_refinement: bool = False,
    ) -> threading.Thread:
        """Run :meth:`refresh` on a daemon thread and hand the result to ``on_done``."""

        def _worker() -> None:
            on_done(self.refresh(force_refresh=force_refresh, await_refinement=await_refinement))

        thread = threading.Thread(target=_worker, name="marketpulse-refresh", daemon=True)
        thread.start()
        return thread

    def change_filters(
        self,
        *,
        country: Optional[str] = None,
        time_filter: Optional[str] = None,
        topic: Optional[str] = None,
    ) -> bool:
        """Update filters; returns True when a refetch is needed."""

        refetch = False
        if country is not None and country != self.country:
            self.country = country
            refetch = True
        if time_filter is not None and time_filter != self.time_filter:
            self.time_filter = time_filter
            refetch = True
        if topic is not None:
            self.topic = normalise_topic(topic)
        return refetch


__all__ = ["RefreshController", "RefreshResult"]
