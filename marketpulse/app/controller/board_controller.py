"""Story board: the displayed story collection and its pending inference state.

The inference worker replies on its own thread, so every mutation goes
through a lock. Replies are matched to stories by ``story_id``; replies for
stories no longer on the board (a new feed was loaded meanwhile) are
dropped. Two in-flight requests for the same story race and the later reply
wins.

Updates: v0.1 - 2026-10-19 - Id-matched refinement, summaries and pending indicator timeouts.
Updates: v0.2 - 2026-10-19 - Blocking wait for one story summary so callers can route articles through the worker.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from ...articles import build_feed_digest
from ...classifier import refine_classification
from ...config import ERROR_CLEAR_SECONDS, PENDING_TIMEOUT_SECONDS, SENTIMENT_CONFIDENCE_THRESHOLD
from ...models import Story
from ...worker import (
    ClassificationComplete,
    ClassifyRequest,
    InferenceWorker,
    SummarizeArticleRequest,
    SummarizeFeedRequest,
    SummaryComplete,
    WorkerFailure,
    WorkerMessage,
    WorkerProgress,
)

logger = logging.getLogger(__name__)

PendingKind = Literal["sentiment", "summary", "digest"]
PendingKey = Tuple[Optional[str], PendingKind]

FEED_KEY: Optional[str] = None


@dataclass
class PendingIndicator:
    request_id: str
    kind: PendingKind
    deadline: float
    progress: Dict[str, Any] = field(default_factory=dict)


class StoryBoard:
    """Hold stories plus per-story summaries and pending inference indicators."""

    def __init__(
        self,
        stories: Iterable[Story] = (),
        *,
        pending_timeout: float = PENDING_TIMEOUT_SECONDS,
        error_clear_delay: float = ERROR_CLEAR_SECONDS,
        confidence_threshold: float = SENTIMENT_CONFIDENCE_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lock = threading.Lock()
        self._changed = threading.Condition(self._lock)
        self._stories: List[Story] = list(stories)
        self._summaries: Dict[str, str] = {}
        self._feed_summary: Optional[str] = None
        self._pending: Dict[PendingKey, PendingIndicator] = {}
        self._status: Optional[str] = None
        self.pending_timeout = pending_timeout
        self.error_clear_delay = error_clear_delay
        self.confidence_threshold = confidence_threshold
        self._clock = clock

    # --- read access -------------------------------------------------------------------------

    @property
    def stories(self) -> List[Story]:
        with self._lock:
            return list(self._stories)

    @property
    def summaries(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._summaries)

    @property
    def feed_summary(self) -> Optional[str]:
        return self._feed_summary

    @property
    def status_message(self) -> Optional[str]:
        return self._status

    def get(self, story_id: str) -> Optional[Story]:
        with self._lock:
            return next((story for story in self._stories if story.id == story_id), None)

    def pending(self) -> Dict[PendingKey, PendingIndicator]:
        with self._lock:
            return dict(self._pending)

    def pending_story_ids(self, kind: Optional[PendingKind] = None) -> List[str]:
        with self._lock:
            return [
                story_id
                for (story_id, pending_kind) in self._pending
                if story_id is not None and (kind is None or pending_kind == kind)
            ]

    # --- lifecycle ---------------------------------------------------------------------------

    def replace(self, stories: Sequence[Story]) -> None:
        """Swap in a freshly fetched feed, discarding derived state."""

        with self._lock:
            self._stories = list(stories)
            self._summaries.clear()
            self._feed_summary = None
            self._pending.clear()
            self._status = None
            self._changed.notify_all()

    def _mark_pending(self, story_id: Optional[str], kind: PendingKind, request_id: str) -> None:
        with self._lock:
            self._pending[(story_id, kind)] = PendingIndicator(
                request_id=request_id,
                kind=kind,
                deadline=self._clock() + self.pending_timeout,
            )

    def request_refinement(
        self, worker: InferenceWorker, story_ids: Optional[Iterable[str]] = None
    ) -> List[str]:
        """Queue ML sentiment refinement for the given (or all) stories."""

        wanted = set(story_ids) if story_ids is not None else None
        request_ids: List[str] = []
        for story in self.stories:
            if wanted is not None and story.id not in wanted:
                continue
            request = ClassifyRequest(story_id=story.id, text=story.title)
            self._mark_pending(story.id, "sentiment", request.request_id)
            request_ids.append(worker.submit(request))
        return request_ids

    def request_summary(self, worker: InferenceWorker, story_id: str, text: str) -> str:
        request = SummarizeArticleRequest(story_id=story_id, text=text)
        with self._lock:
            self._summaries.pop(story_id, None)
        self._mark_pending(story_id, "summary", request.request_id)
        return worker.submit(request)

    def request_feed_summary(self, worker: InferenceWorker, text: Optional[str] = None) -> str:
        request = SummarizeFeedRequest(text=text if text is not None else build_feed_digest(self.stories))
        self._mark_pending(FEED_KEY, "digest", request.request_id)
        return worker.submit(request)

    # --- worker replies ----------------------------------------------------------------------

    def handle(self, message: WorkerMessage) -> None:
        """Apply a worker reply; safe to call from the worker thread."""

        if isinstance(message, WorkerProgress):
            self._on_progress(message)
        elif isinstance(message, ClassificationComplete):
            self._on_classification(message)
        elif isinstance(message, SummaryComplete):
            self._on_summary(message)
        elif isinstance(message, WorkerFailure):
            self._on_failure(message)
        else:
            logger.debug("Ignoring unknown worker message %r", message)

    def _on_progress(self, message: WorkerProgress) -> None:
        with self._lock:
            for indicator in self._pending.values():
                if indicator.request_id == message.request_id:
                    indicator.progress = dict(message.data)
            if message.data.get("status") == "download":
                self._status = f"Loading {message.data.get('model', 'model')}…"

    def _on_classification(self, message: ClassificationComplete) -> None:
        with self._lock:
            self._pending.pop((message.story_id, "sentiment"), None)
            for index, story in enumerate(self._stories):
                if story.id != message.story_id:
                    continue
                refined = refine_classification(
                    story.factor, message.label, message.score, self.confidence_threshold
                )
                self._stories[index] = story.with_classification(refined)
                return
        logger.debug("Dropping classification for unknown story %s", message.story_id)

    def _on_summary(self, message: SummaryComplete) -> None:
        with self._lock:
            if message.story_id is None:
                self._pending.pop((FEED_KEY, "digest"), None)
                self._feed_summary = message.summary
                return
            self._pending.pop((message.story_id, "summary"), None)
            if any(story.id == message.story_id for story in self._stories):
                self._summaries[message.story_id] = message.summary
                self._changed.notify_all()
                return
        logger.debug("Dropping summary for unknown story %s", message.story_id)

    def _on_failure(self, message: WorkerFailure) -> None:
        clear_at = self._clock() + self.error_clear_delay
        with self._lock:
            self._status = f"Inference error ({message.action}): {message.error}"
            matched = [
                indicator
                for indicator in self._pending.values()
                if indicator.request_id == message.request_id
            ]
            for indicator in matched or list(self._pending.values()):
                indicator.deadline = min(indicator.deadline, clear_at)

    def wait_for_summary(self, story_id: str, poll_interval: float = 0.25) -> Optional[str]:
        """Block until the story's summary arrives or its pending indicator clears.

        Returns ``None`` when the indicator expired (timeout or worker error).
        """

        key: PendingKey = (story_id, "summary")
        while True:
            self.expire_pending()
            with self._changed:
                if story_id in self._summaries:
                    return self._summaries[story_id]
                if key not in self._pending:
                    return None
                self._changed.wait(poll_interval)

    def expire_pending(self, now: Optional[float] = None) -> List[PendingKey]:
        """Force-reset indicators whose deadline has passed."""

        current = self._clock() if now is None else now
        with self._lock:
            expired = [key for key, indicator in self._pending.items() if indicator.deadline <= current]
            for key in expired:
                del self._pending[key]
            if expired:
                self._changed.notify_all()
        if expired:
            logger.debug("Reset %s stale inference indicator(s).", len(expired))
        return expired


__all__ = ["PendingIndicator", "StoryBoard"]
