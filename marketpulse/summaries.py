"""LiteLLM summarisation backend for MarketPulse.

Selected with ``MARKETPULSE_SUMMARY_BACKEND=litellm`` as an alternative to
the local transformers summariser. Provider settings come from the standard
``LITELLM_*`` variables, overridable per feature with ``MARKETPULSE_LLM_*``.

Updates: v0.1 - 2026-10-19 - LiteLLM completion adapter with bounded executor.
Updates: v0.2 - 2026-10-19 - Completion text read from the ModelResponse message content only.
"""

from __future__ import annotations

import atexit
import logging
import os
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from typing import Any, Dict, Optional, Sequence

from .config import SUMMARY_MAX_NEW_TOKENS, SUMMARY_MIN_LENGTH, SUMMARY_TIMEOUT
from .utils import read_optional_env

logger = logging.getLogger(__name__)

try:  # pragma: no cover - optional dependency
    import litellm  # type: ignore
except ImportError:  # pragma: no cover - optional dependency
    litellm = None  # type: ignore
else:  # pragma: no cover - provider quirks
    if hasattr(litellm, "drop_params"):
        litellm.drop_params = True  # type: ignore[attr-defined]


_LITELLM_EXECUTOR = ThreadPoolExecutor(max_workers=2)


def shutdown_executor() -> None:
    _LITELLM_EXECUTOR.shutdown(wait=False)


def configure_litellm_debug(enabled: bool) -> None:
    logger_level = logging.DEBUG if enabled else logging.WARNING
    for logger_name in ("LiteLLM", "litellm"):
        llm_logger = logging.getLogger(logger_name)
        llm_logger.setLevel(logger_level)
        for handler in llm_logger.handlers:
            handler.setLevel(logger_level)


def _configured_model_name() -> str:
    return (
        read_optional_env("MARKETPULSE_LLM_MODEL")
        or read_optional_env("LITELLM_MODEL")
        or ""
    )


def prepare_completion_kwargs(
    *,
    messages: Sequence[Dict[str, Any]],
    temperature: float,
    timeout: int,
    max_tokens: Optional[int] = None,
    model_override: Optional[str] = None,
    api_base_override: Optional[str] = None,
    api_key_override: Optional[str] = None,
) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {
        "messages": list(messages),
        "temperature": temperature,
        "max_tokens": max_tokens,
        "request_timeout": timeout,
        "model": model_override or _configured_model_name() or None,
    }

    api_base = (
        api_base_override
        or read_optional_env("MARKETPULSE_LLM_API_BASE")
        or read_optional_env("LITELLM_API_BASE")
    )
    api_key = (
        api_key_override
        or read_optional_env("MARKETPULSE_LLM_API_KEY")
        or read_optional_env("LITELLM_API_KEY")
    )
    if api_base:
        kwargs["api_base"] = api_base.rstrip("/")
    if api_key:
        kwargs["api_key"] = api_key

    model = (kwargs.get("model") or "").lower()
    if model.startswith("azure/"):
        kwargs["api_version"] = os.getenv("AZURE_OPENAI_API_VERSION") or "2024-10-01-preview"

    return {key: value for key, value in kwargs.items() if value is not None}


def call_litellm(completion_kwargs: Dict[str, Any]) -> Any:
    if litellm is None:
        raise RuntimeError("LiteLLM is not installed")
    if not completion_kwargs.get("model"):
        raise RuntimeError("No LiteLLM model configured; set LITELLM_MODEL")

    future = _LITELLM_EXECUTOR.submit(litellm.completion, **completion_kwargs)
    try:
        return future.result(timeout=completion_kwargs.get("request_timeout"))
    except FuturesTimeoutError:
        future.cancel()
        raise


def _field(source: Any, name: str) -> Any:
    if isinstance(source, dict):
        return source.get(name)
    return getattr(source, name, None)


def extract_completion_text(response: Any) -> Optional[str]:
    """Pull ``choices[0].message.content`` out of a LiteLLM ``ModelResponse``.

    Plain dict payloads (as returned by cached or mocked completions) are
    read the same way. Empty or non-text content yields ``None``.
    """

    choices = _field(response, "choices")
    if not choices:
        return None
    content = _field(_field(choices[0], "message"), "content")
    if not isinstance(content, str):
        return None
    return content.strip() or None


def summarize_with_litellm(
    text: str,
    *,
    max_tokens: int = SUMMARY_MAX_NEW_TOKENS,
    min_length: int = SUMMARY_MIN_LENGTH,
    timeout: int = SUMMARY_TIMEOUT,
) -> str:
    """Summarise ``text`` through LiteLLM; raises when no summary comes back."""

    messages = [
        {
            "role": "system",
            "content": (
                "Summarize financial news accurately in plain prose. "
                f"Use at least {min_length} words. "
                "Do not invent facts and avoid marketing language."
            ),
        },
        {"role": "user", "content": text},
    ]
    completion_kwargs = prepare_completion_kwargs(
        messages=messages,
        temperature=0.2,
        timeout=timeout,
        max_tokens=max_tokens,
    )
    logger.info("Requesting LiteLLM summary using model '%s'.", completion_kwargs.get("model"))
    response = call_litellm(completion_kwargs)
    summary = extract_completion_text(response)
    if not summary:
        raise RuntimeError("LiteLLM returned an empty summary")
    return summary


__all__ = [
    "call_litellm",
    "configure_litellm_debug",
    "extract_completion_text",
    "prepare_completion_kwargs",
    "shutdown_executor",
    "summarize_with_litellm",
]

atexit.register(shutdown_executor)
