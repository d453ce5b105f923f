"""Late-bound service facade used by the dashboard controllers.

Updates: v0.1 - 2026-10-19 - Story fetch and article summary services injected at startup.
Updates: v0.2 - 2026-10-19 - Summary service forwards keyword options such as the summarizer.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional

from ..models import Story, SummaryResolution


# Module-level service implementations injected at app startup.
_fetch_stories_impl: Optional[Callable[..., List[Story]]] = None
_resolve_article_summary_impl: Optional[Callable[..., SummaryResolution]] = None


def configure_app_services(
    *,
    fetch_stories: Callable[..., List[Story]],
    resolve_article_summary: Callable[..., SummaryResolution],
) -> None:
    """Configure MarketPulse service implementations.

    Controllers call through this module so tests can swap in fakes without
    touching the network.
    """
    global _fetch_stories_impl
    global _resolve_article_summary_impl

    _fetch_stories_impl = fetch_stories
    _resolve_article_summary_impl = resolve_article_summary


def reset_app_services() -> None:
    global _fetch_stories_impl
    global _resolve_article_summary_impl

    _fetch_stories_impl = None
    _resolve_article_summary_impl = None


def fetch_stories(*args: Any, **kwargs: Any) -> List[Story]:
    """Fetch classified stories for a country and time filter."""
    if _fetch_stories_impl is None:
        raise RuntimeError("fetch_stories service not configured")
    return _fetch_stories_impl(*args, **kwargs)


def resolve_article_summary(story: Story, **kwargs: Any) -> SummaryResolution:
    """Resolve or generate a summary for a story's article."""
    if _resolve_article_summary_impl is None:
        raise RuntimeError("resolve_article_summary service not configured")
    return _resolve_article_summary_impl(story, **kwargs)


__all__ = [
    "configure_app_services",
    "fetch_stories",
    "reset_app_services",
    "resolve_article_summary",
]
