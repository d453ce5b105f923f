"""Transformer pipelines for sentiment refinement and summarisation.

Pipelines are expensive to build (model download plus weight loading), so a
process-wide :class:`PipelineRegistry` constructs each task's pipeline on
first use and shares it afterwards. Progress events (``download`` on first
construction, ``ready`` once usable) go to an optional callback so the
worker can relay them to the dashboard.

Updates: v0.1 - 2026-10-19 - Lazy task-keyed registry over ``transformers.pipeline``.
Updates: v0.2 - 2026-10-19 - Routed summaries to LiteLLM when configured.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional

from .config import (
    CLASSIFICATION_TASK,
    CLASSIFIER_MODEL,
    SUMMARIZATION_TASK,
    SUMMARIZER_MODEL,
    SUMMARY_BACKEND,
    SUMMARY_MAX_NEW_TOKENS,
    SUMMARY_MIN_LENGTH,
)
from .models import SentimentResult
from .summaries import summarize_with_litellm

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Dict[str, Any]], None]
PipelineLoader = Callable[[str, str], Any]


def load_transformers_pipeline(task: str, model: str) -> Any:
    """Build a Hugging Face pipeline; imported lazily to keep startup light."""

    from transformers import pipeline  # type: ignore

    return pipeline(task, model=model)


def _emit(progress: Optional[ProgressCallback], payload: Dict[str, Any]) -> None:
    if progress is None:
        return
    try:
        progress(payload)
    except Exception as exc:  # pragma: no cover - listener failure
        logger.debug("Progress callback failed: %s", exc)


class PipelineRegistry:
    """Lazily constructed, shared pipelines keyed by task type."""

    def __init__(
        self,
        loader: Optional[PipelineLoader] = None,
        models: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._loader = loader or load_transformers_pipeline
        self._models: Dict[str, str] = {
            CLASSIFICATION_TASK: CLASSIFIER_MODEL,
            SUMMARIZATION_TASK: SUMMARIZER_MODEL,
        }
        if models:
            self._models.update(models)
        self._instances: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def model_for(self, task: str) -> str:
        try:
            return self._models[task]
        except KeyError:
            raise ValueError(f"Unsupported inference task '{task}'") from None

    def get(self, task: str, progress: Optional[ProgressCallback] = None) -> Any:
        model = self.model_for(task)
        instance = self._instances.get(task)
        if instance is None:
            with self._lock:
                instance = self._instances.get(task)
                if instance is None:
                    logger.info("Loading %s pipeline with model '%s'.", task, model)
                    _emit(progress, {"status": "download", "task": task, "model": model})
                    instance = self._loader(task, model)
                    self._instances[task] = instance
        _emit(progress, {"status": "ready", "task": task, "model": model})
        return instance

    def loaded_tasks(self) -> List[str]:
        return sorted(self._instances)

    def clear(self) -> None:
        with self._lock:
            self._instances.clear()


_registry: Optional[PipelineRegistry] = None
_registry_lock = threading.Lock()


def get_pipeline_registry() -> PipelineRegistry:
    """Return the process-wide pipeline registry."""

    global _registry
    if _registry is not None:
        return _registry
    with _registry_lock:
        if _registry is None:
            _registry = PipelineRegistry()
    return _registry


def classify_sentiment(
    text: str,
    *,
    registry: Optional[PipelineRegistry] = None,
    progress: Optional[ProgressCallback] = None,
) -> SentimentResult:
    """Return the POSITIVE/NEGATIVE verdict and confidence for ``text``."""

    classifier = (registry or get_pipeline_registry()).get(CLASSIFICATION_TASK, progress)
    output = classifier(text, truncation=True)
    if not output:
        raise RuntimeError("Sentiment pipeline returned no result")
    first = output[0]
    return SentimentResult(label=str(first["label"]).upper(), score=float(first["score"]))


def summarize(
    text: str,
    max_new_tokens: int = SUMMARY_MAX_NEW_TOKENS,
    min_length: int = SUMMARY_MIN_LENGTH,
    *,
    registry: Optional[PipelineRegistry] = None,
    progress: Optional[ProgressCallback] = None,
    backend: Optional[str] = None,
) -> str:
    """Summarise ``text`` with the configured backend."""

    if (backend or SUMMARY_BACKEND) == "litellm":
        return summarize_with_litellm(text, max_tokens=max_new_tokens, min_length=min_length)

    summarizer = (registry or get_pipeline_registry()).get(SUMMARIZATION_TASK, progress)
    output = summarizer(
        text,
        max_new_tokens=max_new_tokens,
        min_length=min_length,
        truncation=True,
    )
    if not output:
        raise RuntimeError("Summarization pipeline returned no result")
    return str(output[0]["summary_text"]).strip()


__all__ = [
    "PipelineRegistry",
    "ProgressCallback",
    "classify_sentiment",
    "get_pipeline_registry",
    "load_transformers_pipeline",
    "summarize",
]
