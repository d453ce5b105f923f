"""Terminal rendering of the ranked story list.

Updates: v0.1 - 2026-10-19 - Sentiment badges, factor tags and ANSI theme palettes.
"""

from __future__ import annotations

import textwrap
from typing import Collection, Dict, List, Mapping, Optional, Sequence

from ..config import DEFAULT_THEME, THEME_PALETTES
from ..models import Story

ANSI_RESET = "\033[0m"
EMPTY_LIST_MESSAGE = "Loading signals or no news found..."
PENDING_MARKER = "(analysing…)"

SENTIMENT_BADGES: Dict[str, str] = {
    "bullish": "↑ Bullish",
    "bearish": "↓ Bearish",
    "neutral": "→ Neutral",
    "untagged": "… Untagged",
}

FACTOR_TAGS: Dict[str, str] = {
    "macro": "MACRO",
    "micro": "MICRO",
}


def resolve_palette(theme: Optional[str]) -> Dict[str, str]:
    """Return the ANSI palette for ``theme`` (unknown themes use the default)."""

    return THEME_PALETTES.get(theme or DEFAULT_THEME, THEME_PALETTES[DEFAULT_THEME])


def colorize(text: str, role: str, palette: Mapping[str, str], enabled: bool = True) -> str:
    if not enabled:
        return text
    code = palette.get(role)
    if not code:
        return text
    return f"{code}{text}{ANSI_RESET}"


def sentiment_badge(sentiment: str) -> str:
    return SENTIMENT_BADGES.get(sentiment, SENTIMENT_BADGES["untagged"])


def format_story_lines(
    rank: int,
    story: Story,
    *,
    palette: Mapping[str, str],
    color: bool = True,
    pending: bool = False,
) -> List[str]:
    """Two display lines for one story: headline, then tags and metadata."""

    headline = f"{rank:>2}. " + colorize(story.title, "title", palette, color)
    factor = colorize(f"[{FACTOR_TAGS.get(story.factor, story.factor.upper())}]", story.factor, palette, color)
    badge = colorize(sentiment_badge(story.sentiment), story.sentiment, palette, color)
    meta = colorize(f"{story.domain} · {story.time_ago}", "meta", palette, color)
    details = f"    {factor} {badge} · {story.impact_label} · {meta}"
    if pending:
        details += " " + colorize(PENDING_MARKER, "meta", palette, color)
    return [headline, details]


def render_story_list(
    stories: Sequence[Story],
    *,
    theme: Optional[str] = None,
    color: bool = True,
    pending_ids: Collection[str] = (),
) -> str:
    """Render the ranked list; ranks are 1-based positions in ``stories``."""

    palette = resolve_palette(theme)
    if not stories:
        return colorize(EMPTY_LIST_MESSAGE, "meta", palette, color)
    lines: List[str] = []
    for rank, story in enumerate(stories, start=1):
        lines.extend(
            format_story_lines(
                rank, story, palette=palette, color=color, pending=story.id in pending_ids
            )
        )
    return "\n".join(lines)


def render_summary_block(
    heading: str,
    summary: str,
    *,
    theme: Optional[str] = None,
    color: bool = True,
    width: int = 88,
) -> str:
    palette = resolve_palette(theme)
    body = textwrap.fill(summary.strip(), width=width, initial_indent="    ", subsequent_indent="    ")
    return "\n".join([colorize(heading, "title", palette, color), body])


__all__ = [
    "ANSI_RESET",
    "EMPTY_LIST_MESSAGE",
    "SENTIMENT_BADGES",
    "colorize",
    "format_story_lines",
    "render_story_list",
    "render_summary_block",
    "resolve_palette",
    "sentiment_badge",
]
