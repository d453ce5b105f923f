"""Readability-style article text extraction.

Updates: v0.1 - 2026-10-19 - BeautifulSoup paragraph extraction with chrome stripping and truncation.
Updates: v0.2 - 2026-10-19 - Chrome markers match whole class/id tokens and never remove article containers.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .config import ARTICLE_CHAR_BUDGET, MIN_ARTICLE_CHARS, TRUNCATION_MARKER

logger = logging.getLogger(__name__)

_CHROME_TAGS: tuple[str, ...] = (
    "script",
    "style",
    "noscript",
    "nav",
    "header",
    "footer",
    "aside",
    "form",
    "iframe",
    "svg",
)
_CHROME_MARKERS: frozenset[str] = frozenset(
    {
        "menu",
        "sidebar",
        "cookie",
        "cookies",
        "subscribe",
        "newsletter",
        "share",
        "social",
        "comment",
        "comments",
        "advert",
        "ad",
        "ads",
        "promo",
        "related",
    }
)
_TOKEN_SPLIT = re.compile(r"[\s\-_]+")
_CANDIDATE_SELECTORS: tuple[str, ...] = (
    "article",
    "[role='main'] article",
    "[role='main']",
    "main",
    ".article",
    ".post",
    ".story",
)
_CONTENT_TAGS: tuple[str, ...] = ("article", "main")
_CONTENT_CLASSES = frozenset({"article", "post", "story"})
_CONTAINER_QUERY = "article, main, [role='main']"
_STRUCTURAL_TAGS: tuple[str, ...] = ("header", "footer", "aside", "form", "nav")
_MIN_BLOCK_WORDS = 5
_MIN_CONTAINER_WORDS = 60


class ExtractionError(RuntimeError):
    """Raised when a page has no extractable article body."""


def _marker_tokens(node: Tag) -> set[str]:
    attrs = node.attrs or {}
    classes = attrs.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    raw = " ".join([*classes, str(attrs.get("id") or "")]).lower()
    return {token for token in _TOKEN_SPLIT.split(raw) if token}


def _is_content_container(node: Tag) -> bool:
    if node.name in _CONTENT_TAGS or str(node.get("role") or "").lower() == "main":
        return True
    if set(node.get("class") or []) & _CONTENT_CLASSES:
        return True
    return node.select_one(_CONTAINER_QUERY) is not None


def _strip_chrome(soup: BeautifulSoup) -> None:
    for node in soup.find_all(_CHROME_TAGS):
        if not isinstance(node, Tag) or node.decomposed:
            continue
        if node.name in _STRUCTURAL_TAGS and _is_content_container(node):
            continue
        node.decompose()
    for node in soup.find_all(True):
        if not isinstance(node, Tag) or node.decomposed or node.name in ("html", "body"):
            continue
        # Article bodies and their wrappers survive whatever their class names say.
        if _is_content_container(node):
            continue
        if _marker_tokens(node) & _CHROME_MARKERS:
            node.decompose()


def _paragraph_text(node: Tag, tags: tuple[str, ...]) -> str:
    paragraphs: List[str] = []
    for element in node.find_all(list(tags)):
        text = element.get_text(" ", strip=True)
        if len(text.split()) >= _MIN_BLOCK_WORDS:
            paragraphs.append(text)
    return "\n\n".join(paragraphs)


def extract_readable_text(html: str, base_url: Optional[str] = None) -> str:
    """Return the substantive paragraph text of an article page.

    Raises ``ExtractionError`` when the page holds no usable paragraphs.
    """

    if not html or not html.strip():
        raise ExtractionError(f"Empty document for {base_url or '<unknown>'}")

    soup = BeautifulSoup(html, "html.parser")
    _strip_chrome(soup)

    for selector in _CANDIDATE_SELECTORS:
        node = soup.select_one(selector)
        if isinstance(node, Tag):
            content = _paragraph_text(node, ("p", "li"))
            if len(content.split()) > _MIN_CONTAINER_WORDS:
                return content

    content = _paragraph_text(soup, ("p",))
    if not content:
        raise ExtractionError(f"No readable paragraphs in {base_url or '<unknown>'}")
    return content


def truncate_text(text: str, limit: int = ARTICLE_CHAR_BUDGET) -> str:
    """Clip ``text`` to ``limit`` characters plus an ellipsis marker."""

    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def is_usable_text(text: Optional[str], minimum: int = MIN_ARTICLE_CHARS) -> bool:
    return isinstance(text, str) and len(text.strip()) >= minimum


__all__ = [
    "ExtractionError",
    "extract_readable_text",
    "is_usable_text",
    "truncate_text",
]
