"""Background inference worker.

A single long-lived daemon thread consumes inference requests from a queue
and reports back through a listener callable. Requests and replies are
tagged dataclasses correlated by ``request_id``; article summaries and the
whole-feed digest are distinct request types, so a reply's ``story_id`` is
only ``None`` for the feed digest.

Replies may arrive in any order relative to submission. There is no
cancellation: a request that never completes leaves its caller-side
indicator pending until the caller's own timeout resets it.

Updates: v0.1 - 2026-10-19 - Queue-backed worker with tagged request/response variants.
Updates: v0.2 - 2026-10-19 - stop() keeps a still-busy thread registered instead of orphaning it.
"""

from __future__ import annotations

import logging
import queue
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, Optional, Union

from .inference import PipelineRegistry, classify_sentiment, summarize

logger = logging.getLogger(__name__)


def new_request_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class ClassifyRequest:
    story_id: str
    text: str
    request_id: str = field(default_factory=new_request_id)
    action: ClassVar[str] = "classify"


@dataclass(frozen=True)
class SummarizeArticleRequest:
    story_id: str
    text: str
    request_id: str = field(default_factory=new_request_id)
    action: ClassVar[str] = "summarize"


@dataclass(frozen=True)
class SummarizeFeedRequest:
    text: str
    request_id: str = field(default_factory=new_request_id)
    action: ClassVar[str] = "summarize"


WorkerRequest = Union[ClassifyRequest, SummarizeArticleRequest, SummarizeFeedRequest]


@dataclass(frozen=True)
class WorkerProgress:
    request_id: str
    action: str
    data: Dict[str, Any]


@dataclass(frozen=True)
class ClassificationComplete:
    request_id: str
    story_id: str
    label: str
    score: float


@dataclass(frozen=True)
class SummaryComplete:
    request_id: str
    story_id: Optional[str]
    summary: str


@dataclass(frozen=True)
class WorkerFailure:
    request_id: str
    action: str
    story_id: Optional[str]
    error: str


WorkerMessage = Union[WorkerProgress, ClassificationComplete, SummaryComplete, WorkerFailure]
WorkerListener = Callable[[WorkerMessage], None]


class InferenceWorker:
    """Serve classification and summarisation requests on one background thread."""

    def __init__(
        self,
        listener: WorkerListener,
        *,
        registry: Optional[PipelineRegistry] = None,
        classify_fn: Callable[..., Any] = classify_sentiment,
        summarize_fn: Callable[..., str] = summarize,
    ) -> None:
        self._listener = listener
        self._registry = registry
        self._classify_fn = classify_fn
        self._summarize_fn = summarize_fn
        self._queue: "queue.Queue[Optional[WorkerRequest]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._thread_lock = threading.Lock()
        self._stop_sent = False

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._thread_lock:
            if self.running:
                if self._stop_sent:
                    raise RuntimeError("Inference worker is shutting down")
                return
            self._stop_sent = False
            self._thread = threading.Thread(
                target=self._run, name="marketpulse-inference", daemon=True
            )
            self._thread.start()

    def submit(self, request: WorkerRequest) -> str:
        """Queue ``request`` and return its correlation id without waiting."""

        self.start()
        self._queue.put(request)
        return request.request_id

    def wait_idle(self) -> None:
        """Block until every queued request has been processed."""

        self._queue.join()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Ask the thread to exit after the queued requests and join it.

        A thread still busy after ``timeout`` stays registered, so no second
        consumer is started on the same queue.
        """

        with self._thread_lock:
            thread = self._thread
            if thread is None:
                return
            if not self._stop_sent:
                self._queue.put(None)
                self._stop_sent = True
        thread.join(timeout)
        if thread.is_alive():
            logger.warning("Inference worker still busy after %ss; leaving it to finish.", timeout)
            return
        with self._thread_lock:
            if self._thread is thread:
                self._thread = None
                self._stop_sent = False

    def _run(self) -> None:
        while True:
            request = self._queue.get()
            try:
                if request is None:
                    return
                self._handle(request)
            finally:
                self._queue.task_done()

    def _post(self, message: WorkerMessage) -> None:
        try:
            self._listener(message)
        except Exception:  # pragma: no cover - listener failure
            logger.exception("Inference listener raised while handling %s", type(message).__name__)

    def _handle(self, request: WorkerRequest) -> None:
        action = request.action

        def relay(data: Dict[str, Any]) -> None:
            self._post(WorkerProgress(request_id=request.request_id, action=action, data=dict(data)))

        relay({"status": "initiate"})
        story_id = getattr(request, "story_id", None)
        try:
            if isinstance(request, ClassifyRequest):
                result = self._classify_fn(request.text, registry=self._registry, progress=relay)
                relay({"status": "done"})
                self._post(
                    ClassificationComplete(
                        request_id=request.request_id,
                        story_id=request.story_id,
                        label=result.label,
                        score=result.score,
                    )
                )
            elif isinstance(request, SummarizeArticleRequest):
                summary = self._summarize_fn(request.text, registry=self._registry, progress=relay)
                relay({"status": "done"})
                self._post(
                    SummaryComplete(
                        request_id=request.request_id, story_id=request.story_id, summary=summary
                    )
                )
            elif isinstance(request, SummarizeFeedRequest):
                summary = self._summarize_fn(request.text, registry=self._registry, progress=relay)
                relay({"status": "done"})
                self._post(SummaryComplete(request_id=request.request_id, story_id=None, summary=summary))
            else:
                raise TypeError(f"Unsupported worker request: {type(request).__name__}")
        except Exception as exc:
            logger.warning("Inference %s request %s failed: %s", action, request.request_id, exc)
            self._post(
                WorkerFailure(
                    request_id=request.request_id,
                    action=action,
                    story_id=story_id,
                    error=str(exc),
                )
            )


__all__ = [
    "ClassificationComplete",
    "ClassifyRequest",
    "InferenceWorker",
    "SummarizeArticleRequest",
    "SummarizeFeedRequest",
    "SummaryComplete",
    "WorkerFailure",
    "WorkerListener",
    "WorkerMessage",
    "WorkerProgress",
    "WorkerRequest",
    "new_request_id",
]
