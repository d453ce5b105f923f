"""Tests for terminal rendering and topic filtering in marketpulse.app.

Covers:
- sentiment badges and factor tags
- colour toggling and theme palettes
- empty-list message and pending markers
- macro/micro topic filtering
"""

from __future__ import annotations

from marketpulse.app.filtering import filter_stories, normalise_topic
from marketpulse.app.rendering import (
    ANSI_RESET,
    EMPTY_LIST_MESSAGE,
    render_story_list,
    render_summary_block,
    resolve_palette,
    sentiment_badge,
)
from marketpulse.config import THEME_PALETTES
from marketpulse.models import Story


def make_story(story_id: str, factor: str, sentiment: str, label: str) -> Story:
    return Story(
        id=story_id,
        title=f"Headline {story_id}",
        link=f"https://www.reuters.com/{story_id}",
        domain="reuters.com",
        time_ago="4h ago",
        factor=factor,  # type: ignore[arg-type]
        sentiment=sentiment,  # type: ignore[arg-type]
        impact_label=label,
        published_at="2026-10-19T08:00:00Z",
    )


STORIES = [
    make_story("a", "macro", "bullish", "Economic Tailwind"),
    make_story("b", "micro", "bearish", "Sector Downside"),
    make_story("c", "micro", "untagged", "Awaiting Analysis"),
]


def test_sentiment_badges() -> None:
    assert sentiment_badge("bullish") == "↑ Bullish"
    assert sentiment_badge("bearish") == "↓ Bearish"
    assert sentiment_badge("neutral") == "→ Neutral"
    assert sentiment_badge("untagged") == "… Untagged"
    assert sentiment_badge("unexpected") == "… Untagged"


def test_plain_rendering_lists_ranked_stories() -> None:
    output = render_story_list(STORIES, color=False, pending_ids={"c"})
    lines = output.splitlines()
    assert lines[0] == " 1. Headline a"
    assert lines[1] == "    [MACRO] ↑ Bullish · Economic Tailwind · reuters.com · 4h ago"
    assert lines[2] == " 2. Headline b"
    assert lines[5].endswith("(analysing…)")
    assert ANSI_RESET not in output


def test_colour_rendering_uses_theme_palette() -> None:
    output = render_story_list(STORIES[:1], theme="light", color=True)
    assert THEME_PALETTES["light"]["bullish"] + "↑ Bullish" + ANSI_RESET in output


def test_unknown_theme_uses_default_palette() -> None:
    assert resolve_palette("neon") == THEME_PALETTES["dark"]


def test_empty_list_message() -> None:
    assert render_story_list([], color=False) == EMPTY_LIST_MESSAGE


def test_summary_block_wraps_text() -> None:
    block = render_summary_block("#1 Headline", "word " * 40, color=False, width=40)
    lines = block.splitlines()
    assert lines[0] == "#1 Headline"
    assert all(line.startswith("    ") and len(line) <= 40 for line in lines[1:])


def test_filter_stories_by_topic() -> None:
    assert [story.id for story in filter_stories(STORIES, "macro")] == ["a"]
    assert [story.id for story in filter_stories(STORIES, "micro")] == ["b", "c"]
    assert filter_stories(STORIES, "all") == STORIES
    assert filter_stories([], "macro") == []


def test_normalise_topic_falls_back_to_all() -> None:
    assert normalise_topic(" MACRO ") == "macro"
    assert normalise_topic("crypto") == "all"
    assert normalise_topic(None) == "all"
