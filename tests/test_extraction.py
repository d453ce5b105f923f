"""Tests for article text extraction in marketpulse.extraction.

Covers:
- container-first extraction with page chrome stripped
- paragraph fallback when no article container exists
- ExtractionError for empty or paragraph-less pages
- truncation to the character budget plus marker
"""

from __future__ import annotations

import pytest

from marketpulse.extraction import (
    ExtractionError,
    extract_readable_text,
    is_usable_text,
    truncate_text,
)

PARAGRAPH = (
    "Central bank officials signalled that borrowing costs would stay elevated "
    "for longer as price pressures in services remained stubborn this quarter."
)


def _article_page(paragraphs: int = 4) -> str:
    body = "".join(f"<p>{PARAGRAPH} Paragraph {index}.</p>" for index in range(paragraphs))
    return (
        "<html><head><title>Story</title><script>var tracking = 1;</script></head><body>"
        "<nav><p>Markets World Business Tech Opinion Video Podcasts Live</p></nav>"
        '<div class="newsletter-signup"><p>Subscribe to our daily briefing for the latest updates now</p></div>'
        f'<article class="article-body"><h1>Story</h1>{body}</article>'
        "<footer><p>Copyright 2026 Example Media Group. All rights reserved worldwide.</p></footer>"
        "</body></html>"
    )


def test_extracts_article_container_without_chrome() -> None:
    text = extract_readable_text(_article_page(), "https://pub.example.com/story")
    assert "Paragraph 0." in text
    assert "Paragraph 3." in text
    assert "Podcasts" not in text
    assert "Subscribe" not in text
    assert "Copyright" not in text
    assert "tracking" not in text
    assert text.count("\n\n") == 3


def test_article_with_chrome_like_class_is_kept() -> None:
    body = "".join(f"<p>{PARAGRAPH} Paragraph {index}.</p>" for index in range(6))
    page = f'<html><body><article class="story has-share-bar">{body}</article></body></html>'
    text = extract_readable_text(page, "https://example.com/a")
    assert "Paragraph 0." in text
    assert "Paragraph 5." in text


def test_wrapper_with_sidebar_class_keeps_nested_article() -> None:
    body = "".join(f"<p>{PARAGRAPH} Paragraph {index}.</p>" for index in range(6))
    page = (
        '<html><body><div class="layout-with-sidebar">'
        f"<article>{body}</article>"
        '<div class="sidebar"><p>Most read stories this week from around the newsroom</p></div>'
        "</div></body></html>"
    )
    text = extract_readable_text(page, "https://example.com/a")
    assert "Paragraph 5." in text
    assert "Most read" not in text


def test_markers_match_whole_tokens_only() -> None:
    page = (
        "<html><body>"
        f'<div class="shared-market-data"><p>{PARAGRAPH}</p></div>'
        '<div id="social_links"><p>Follow us on every network for the latest market chatter</p></div>'
        "</body></html>"
    )
    text = extract_readable_text(page)
    assert text.startswith("Central bank officials")
    assert "Follow us" not in text


def test_form_wrapping_the_page_is_not_removed() -> None:
    body = "".join(f"<p>{PARAGRAPH} Paragraph {index}.</p>" for index in range(6))
    page = f'<html><body><form id="aspnetForm"><main>{body}</main></form></body></html>'
    assert "Paragraph 2." in extract_readable_text(page)


def test_falls_back_to_page_paragraphs() -> None:
    page = (
        "<html><body><div><p>Short.</p>"
        f"<p>{PARAGRAPH}</p><p>Another paragraph with enough words to be kept.</p></div></body></html>"
    )
    text = extract_readable_text(page)
    assert text.startswith("Central bank officials")
    assert "Short." not in text
    assert text.endswith("enough words to be kept.")


@pytest.mark.parametrize("html", ["", "   "])
def test_empty_document_raises(html: str) -> None:
    with pytest.raises(ExtractionError):
        extract_readable_text(html, "https://pub.example.com/empty")


def test_page_without_paragraphs_raises() -> None:
    with pytest.raises(ExtractionError):
        extract_readable_text("<html><body><div>Just a div</div></body></html>")


def test_truncate_text_clips_to_budget_plus_marker() -> None:
    text = "x" * 5000
    truncated = truncate_text(text, 4000)
    assert truncated == "x" * 4000 + "..."
    assert len(truncated) == 4003


def test_truncate_text_leaves_short_text_alone() -> None:
    assert truncate_text("brief", 4000) == "brief"
    assert truncate_text("y" * 4000, 4000) == "y" * 4000


def test_is_usable_text_requires_minimum_length() -> None:
    assert is_usable_text("z" * 200, minimum=200)
    assert not is_usable_text("z" * 199, minimum=200)
    assert not is_usable_text(None)
