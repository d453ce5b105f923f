"""Article text retrieval and summary resolution for individual stories.

Updates: v0.1 - 2026-10-19 - Jump-page resolution, extraction and cached summaries.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from .cache import get_cached_article_summary, store_cached_article_summary
from .config import ARTICLE_CHAR_BUDGET, DIGEST_HEADLINE_LIMIT, EXTRACTION_PLACEHOLDER
from .extraction import ExtractionError, extract_readable_text, is_usable_text, truncate_text
from .inference import summarize
from .models import ArticleContent, Story, SummaryResolution
from .redirects import RedirectResolver

logger = logging.getLogger(__name__)

Summarizer = Callable[[str], str]


def fetch_article_content(
    url: str, *, resolver: Optional[RedirectResolver] = None
) -> Optional[ArticleContent]:
    """Resolve ``url`` through jump pages and return its clean, truncated text."""

    if not url or url == "#":
        return None
    trace = (resolver or RedirectResolver()).trace(url)
    if not trace.html:
        logger.warning("Unable to fetch article for %s (state=%s, hops=%s)", url, trace.state, trace.hops)
        return None

    final_url = trace.html_url or url
    try:
        text = extract_readable_text(trace.html, final_url)
    except ExtractionError as exc:
        logger.info("No readable content for %s: %s", final_url, exc)
        return None
    if not is_usable_text(text):
        logger.info("Extracted text for %s is too short to summarise (%s chars).", final_url, len(text))
        return None
    return ArticleContent(url=final_url, text=truncate_text(text, ARTICLE_CHAR_BUDGET))


def build_feed_digest(stories: Sequence[Story], limit: int = DIGEST_HEADLINE_LIMIT) -> str:
    """Concatenate the top headlines into one text for a whole-feed summary."""

    titles = [story.title.strip().rstrip(".") for story in stories[:limit] if story.title.strip()]
    if not titles:
        return ""
    return ". ".join(titles) + "."


def _excerpt(article_text: str) -> str:
    excerpt = "\n\n".join(article_text.splitlines()[:4])
    if len(excerpt) > 800:
        excerpt = excerpt[:800].rstrip() + "…"
    return excerpt


def resolve_article_summary(
    story: Story,
    *,
    summarizer: Optional[Summarizer] = None,
    resolver: Optional[RedirectResolver] = None,
) -> SummaryResolution:
    """Return a summary for ``story``; failures degrade to placeholder text."""

    cached_summary = get_cached_article_summary(story.link, story.title)
    if cached_summary:
        logger.info("Using cached summary for %s", story.link)
        return SummaryResolution(
            summary=cached_summary,
            article_text=None,
            from_cache=True,
            source_url=story.link,
        )

    article = fetch_article_content(story.link, resolver=resolver)
    if article is None:
        return SummaryResolution(
            summary=EXTRACTION_PLACEHOLDER,
            article_text=None,
            from_cache=False,
            issue="article_fetch_failed",
        )

    cached_final = get_cached_article_summary(article.url, story.title)
    if cached_final:
        logger.info("Using cached summary for resolved URL %s (requested %s)", article.url, story.link)
        store_cached_article_summary(story.link, article.url, story.title, cached_final)
        return SummaryResolution(
            summary=cached_final,
            article_text=article.text,
            from_cache=True,
            source_url=article.url,
        )

    try:
        summary_text = (summarizer or summarize)(article.text)
    except Exception as exc:
        logger.warning("Summarisation failed for %s: %s", article.url, exc)
        return SummaryResolution(
            summary=_excerpt(article.text),
            article_text=article.text,
            from_cache=False,
            source_url=article.url,
            issue="summary_generation_failed",
        )

    if summary_text.strip():
        store_cached_article_summary(story.link, article.url, story.title, summary_text)
        return SummaryResolution(
            summary=summary_text,
            article_text=article.text,
            from_cache=False,
            source_url=article.url,
        )

    return SummaryResolution(
        summary=_excerpt(article.text),
        article_text=article.text,
        from_cache=False,
        source_url=article.url,
        issue="summary_generation_empty",
    )


__all__ = [
    "build_feed_digest",
    "fetch_article_content",
    "resolve_article_summary",
]
