"""Summary controller: article summaries for selected stories.

When constructed with a story board and an inference worker, generation is
routed through the worker as id-correlated ``SummarizeArticleRequest``
messages; cache lookup, article retrieval and fallbacks stay with the
summary service.

Updates: v0.1 - 2026-10-19 - Concurrent per-rank summary resolution through the service facade.
Updates: v0.2 - 2026-10-19 - Worker-backed summarizer tied to the story board.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ...config import EXTRACTION_PLACEHOLDER
from ...models import Story, SummaryResolution
from ...worker import InferenceWorker
from ..services import resolve_article_summary
from .board_controller import StoryBoard

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedSummary:
    rank: int
    story: Optional[Story]
    resolution: Optional[SummaryResolution]
    error: Optional[str] = None


class SummaryController:
    """Resolve summaries for 1-based ranks of the displayed list."""

    def __init__(
        self,
        max_workers: int = 4,
        *,
        board: Optional[StoryBoard] = None,
        worker: Optional[InferenceWorker] = None,
    ) -> None:
        self.max_workers = max(1, max_workers)
        self.board = board
        self.worker = worker

    def _worker_summarizer(self, story: Story) -> Optional[Callable[[str], str]]:
        board, worker = self.board, self.worker
        if board is None or worker is None:
            return None

        def _summarize(text: str) -> str:
            board.request_summary(worker, story.id, text)
            summary = board.wait_for_summary(story.id)
            if summary is None:
                raise RuntimeError(board.status_message or f"Summary request for story {story.id} expired")
            return summary

        return _summarize

    def _resolve(self, rank: int, stories: Sequence[Story]) -> RankedSummary:
        if rank < 1 or rank > len(stories):
            return RankedSummary(rank=rank, story=None, resolution=None, error=f"No story at rank {rank}")
        story = stories[rank - 1]
        options: Dict[str, Any] = {}
        summarizer = self._worker_summarizer(story)
        if summarizer is not None:
            options["summarizer"] = summarizer
        try:
            resolution = resolve_article_summary(story, **options)
        except Exception as exc:
            logger.warning("Summary resolution failed for %s: %s", story.link, exc)
            resolution = SummaryResolution(
                summary=EXTRACTION_PLACEHOLDER,
                article_text=None,
                from_cache=False,
                issue="summary_resolution_error",
            )
        return RankedSummary(rank=rank, story=story, resolution=resolution)

    def summarize_ranks(self, stories: Sequence[Story], ranks: Iterable[int]) -> List[RankedSummary]:
        """Results come back in the order ``ranks`` were given; duplicates collapse."""

        ordered = list(dict.fromkeys(ranks))
        if not ordered:
            return []
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(ordered))) as executor:
            return list(executor.map(lambda rank: self._resolve(rank, stories), ordered))


__all__ = ["RankedSummary", "SummaryController"]
