"""Tests for the story board controller.

Covers:
- id-matched refinement and summaries, unknown ids ignored
- last-write-wins for concurrent requests on one story
- pending indicator deadlines and error-shortened expiry
- end-to-end refinement through a real InferenceWorker
- blocking waits for a single story summary
"""

from __future__ import annotations

from typing import Any, List, Optional

import pytest

from marketpulse.app.controller.board_controller import StoryBoard
from marketpulse.models import SentimentResult, Story
from marketpulse.worker import (
    ClassificationComplete,
    InferenceWorker,
    SummaryComplete,
    WorkerFailure,
    WorkerProgress,
)


def make_story(story_id: str, title: str, factor: str = "micro") -> Story:
    return Story(
        id=story_id,
        title=title,
        link=f"https://pub.example.com/{story_id}",
        domain="pub.example.com",
        time_ago="1h ago",
        factor=factor,  # type: ignore[arg-type]
        sentiment="untagged",
        impact_label="Awaiting Analysis",
        published_at="2026-10-19T11:00:00Z",
    )


class FakeClock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


class RecordingWorker:
    """Stands in for InferenceWorker; records submissions without a thread."""

    def __init__(self) -> None:
        self.requests: List[Any] = []

    def submit(self, request: Any) -> str:
        self.requests.append(request)
        return request.request_id


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def board(clock: FakeClock) -> StoryBoard:
    stories = [make_story("a", "Chip orders"), make_story("b", "Rate path", factor="macro")]
    return StoryBoard(stories, pending_timeout=60, error_clear_delay=3, confidence_threshold=0.75, clock=clock)


def test_classification_restamps_matching_story(board: StoryBoard) -> None:
    board.handle(ClassificationComplete(request_id="r1", story_id="b", label="NEGATIVE", score=0.97))
    story = board.get("b")
    assert story is not None
    assert (story.sentiment, story.impact_label) == ("bearish", "Economic Headwind")
    untouched = board.get("a")
    assert untouched is not None and untouched.sentiment == "untagged"


def test_low_confidence_result_is_neutral(board: StoryBoard) -> None:
    board.handle(ClassificationComplete(request_id="r1", story_id="a", label="POSITIVE", score=0.6))
    story = board.get("a")
    assert story is not None
    assert (story.sentiment, story.impact_label) == ("neutral", "Market Mover")


def test_unknown_story_ids_are_ignored(board: StoryBoard) -> None:
    before = board.stories
    board.handle(ClassificationComplete(request_id="r1", story_id="zzz", label="POSITIVE", score=0.99))
    board.handle(SummaryComplete(request_id="r2", story_id="zzz", summary="orphan"))
    assert board.stories == before
    assert board.summaries == {}


def test_last_reply_wins_for_same_story(board: StoryBoard) -> None:
    board.handle(ClassificationComplete(request_id="r1", story_id="a", label="POSITIVE", score=0.9))
    board.handle(ClassificationComplete(request_id="r2", story_id="a", label="NEGATIVE", score=0.9))
    story = board.get("a")
    assert story is not None and story.sentiment == "bearish"


def test_replies_after_replace_are_dropped(board: StoryBoard) -> None:
    worker = RecordingWorker()
    board.request_refinement(worker)  # type: ignore[arg-type]
    board.replace([make_story("c", "New feed story")])
    board.handle(ClassificationComplete(request_id="r1", story_id="a", label="POSITIVE", score=0.99))
    assert [story.id for story in board.stories] == ["c"]
    assert board.pending() == {}


def test_summaries_are_stored_per_story_and_for_feed(board: StoryBoard) -> None:
    worker = RecordingWorker()
    board.request_summary(worker, "a", "article text")  # type: ignore[arg-type]
    board.request_feed_summary(worker)  # type: ignore[arg-type]
    assert set(board.pending()) == {("a", "summary"), (None, "digest")}
    assert worker.requests[-1].text == "Chip orders. Rate path."

    board.handle(SummaryComplete(request_id=worker.requests[0].request_id, story_id="a", summary="A summary"))
    board.handle(SummaryComplete(request_id=worker.requests[1].request_id, story_id=None, summary="Digest"))
    assert board.summaries == {"a": "A summary"}
    assert board.feed_summary == "Digest"
    assert board.pending() == {}


def test_pending_indicators_expire_after_timeout(board: StoryBoard, clock: FakeClock) -> None:
    worker = RecordingWorker()
    board.request_refinement(worker)  # type: ignore[arg-type]
    assert sorted(board.pending_story_ids("sentiment")) == ["a", "b"]

    clock.now += 59
    assert board.expire_pending() == []
    clock.now += 1
    assert sorted(key[0] for key in board.expire_pending()) == ["a", "b"]
    assert board.pending() == {}


def test_failure_sets_status_and_shortens_deadline(board: StoryBoard, clock: FakeClock) -> None:
    worker = RecordingWorker()
    board.request_refinement(worker, ["a"])  # type: ignore[arg-type]
    request_id = worker.requests[0].request_id

    board.handle(WorkerFailure(request_id=request_id, action="classify", story_id="a", error="OOM"))
    assert board.status_message == "Inference error (classify): OOM"
    assert board.expire_pending(clock.now + 2) == []
    assert board.expire_pending(clock.now + 3) == [("a", "sentiment")]


def test_progress_download_updates_status(board: StoryBoard) -> None:
    worker = RecordingWorker()
    board.request_refinement(worker, ["a"])  # type: ignore[arg-type]
    request_id = worker.requests[0].request_id
    board.handle(WorkerProgress(request_id=request_id, action="classify", data={"status": "download", "model": "tiny"}))
    assert board.status_message == "Loading tiny…"
    assert board.pending()[("a", "sentiment")].progress["status"] == "download"


def test_refinement_through_real_worker(board: StoryBoard) -> None:
    def classify_fn(text: str, *, registry: Optional[Any] = None, progress: Optional[Any] = None) -> SentimentResult:
        return SentimentResult(label="POSITIVE", score=0.99)

    worker = InferenceWorker(board.handle, classify_fn=classify_fn)
    try:
        board.request_refinement(worker)
        worker.wait_idle()
    finally:
        worker.stop()
    assert [story.sentiment for story in board.stories] == ["bullish", "bullish"]
    assert [story.impact_label for story in board.stories] == ["Sector Upside", "Economic Tailwind"]
    assert board.pending() == {}


def test_wait_for_summary_returns_arrived_summary(board: StoryBoard) -> None:
    worker = RecordingWorker()
    board.request_summary(worker, "a", "article text")  # type: ignore[arg-type]
    board.handle(SummaryComplete(request_id=worker.requests[0].request_id, story_id="a", summary="Short take"))
    assert board.wait_for_summary("a") == "Short take"


def test_wait_for_summary_gives_up_once_indicator_expires(board: StoryBoard, clock: FakeClock) -> None:
    worker = RecordingWorker()
    board.request_summary(worker, "a", "article text")  # type: ignore[arg-type]
    clock.now += 60
    assert board.wait_for_summary("a") is None


def test_new_summary_request_discards_previous_summary(board: StoryBoard) -> None:
    worker = RecordingWorker()
    board.request_summary(worker, "a", "first text")  # type: ignore[arg-type]
    board.handle(SummaryComplete(request_id=worker.requests[0].request_id, story_id="a", summary="Old"))
    board.request_summary(worker, "a", "second text")  # type: ignore[arg-type]
    assert board.summaries == {}
    assert ("a", "summary") in board.pending()
