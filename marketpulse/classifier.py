"""Keyword heuristics that tag finance headlines with factor and sentiment.

``classify`` is a pure function of the headline text: lower-case substring
membership against fixed keyword sets decides the macro/micro factor and the
bullish/bearish/neutral sentiment, and a lookup table turns the pair into an
impact label. Conflicting sentiment signals resolve to neutral.

The keyword sets are English only; headlines from non-US feeds are tagged
with the same rules.

Updates: v0.1 - 2026-10-19 - Heuristic factor/sentiment classification.
Updates: v0.2 - 2026-10-19 - Pending and ML-refined classification helpers.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from .config import SENTIMENT_CONFIDENCE_THRESHOLD
from .models import Classification, Factor, Sentiment

MACRO_KEYWORDS: tuple[str, ...] = (
    "fed",
    "inflation",
    "cpi",
    "rate",
    "rates",
    "economy",
    "gdp",
    "job",
    "unemployment",
    "bank",
    "treasury",
    "yield",
    "macro",
    "china",
    "global",
)

BULLISH_KEYWORDS: tuple[str, ...] = (
    "surge",
    "soar",
    "rally",
    "rallies",
    "gains",
    "jumps",
    "climbs",
    "rebound",
    "record high",
    "beats",
    "upgrade",
    "boom",
    "bullish",
    "optimism",
    "outperform",
)

BEARISH_KEYWORDS: tuple[str, ...] = (
    "plunge",
    "slump",
    "crash",
    "tumble",
    "falls",
    "drops",
    "decline",
    "sell-off",
    "selloff",
    "misses",
    "downgrade",
    "recession",
    "layoffs",
    "bearish",
    "fears",
    "losses",
)

IMPACT_LABELS: Dict[Tuple[str, str], str] = {
    ("macro", "bullish"): "Economic Tailwind",
    ("macro", "bearish"): "Economic Headwind",
    ("macro", "neutral"): "Macro Indicator",
    ("micro", "bullish"): "Sector Upside",
    ("micro", "bearish"): "Sector Downside",
    ("micro", "neutral"): "Market Mover",
}
PENDING_IMPACT_LABEL = "Awaiting Analysis"


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def classify_factor(title: Optional[str]) -> Factor:
    text = (title or "").lower()
    return "macro" if _contains_any(text, MACRO_KEYWORDS) else "micro"


def resolve_sentiment(is_bullish: bool, is_bearish: bool) -> Sentiment:
    """Return the one-sided signal, or neutral when both or neither fire."""

    if is_bullish and not is_bearish:
        return "bullish"
    if is_bearish and not is_bullish:
        return "bearish"
    return "neutral"


def impact_label_for(factor: Factor, sentiment: Sentiment) -> str:
    if sentiment == "untagged":
        return PENDING_IMPACT_LABEL
    return IMPACT_LABELS[(factor, sentiment)]


def classify(title: Optional[str]) -> Classification:
    """Tag a headline with factor, sentiment and impact label.

    Always returns a value; empty input falls through to
    ``micro``/``neutral``/``"Market Mover"``.
    """

    text = (title or "").lower()
    factor: Factor = "macro" if _contains_any(text, MACRO_KEYWORDS) else "micro"
    sentiment = resolve_sentiment(
        _contains_any(text, BULLISH_KEYWORDS),
        _contains_any(text, BEARISH_KEYWORDS),
    )
    return Classification(
        factor=factor,
        sentiment=sentiment,
        impact_label=impact_label_for(factor, sentiment),
    )


def pending_classification(title: Optional[str]) -> Classification:
    """Factor-only tagging for stories whose sentiment awaits the ML worker."""

    return Classification(
        factor=classify_factor(title),
        sentiment="untagged",
        impact_label=PENDING_IMPACT_LABEL,
    )


def sentiment_from_model(
    label: str, score: float, threshold: float = SENTIMENT_CONFIDENCE_THRESHOLD
) -> Sentiment:
    """Map a POSITIVE/NEGATIVE model verdict onto the dashboard sentiment."""

    if score < threshold:
        return "neutral"
    normalized = (label or "").strip().upper()
    if normalized == "POSITIVE":
        return "bullish"
    if normalized == "NEGATIVE":
        return "bearish"
    return "neutral"


def refine_classification(
    factor: Factor,
    label: str,
    score: float,
    threshold: float = SENTIMENT_CONFIDENCE_THRESHOLD,
) -> Classification:
    sentiment = sentiment_from_model(label, score, threshold)
    return Classification(
        factor=factor,
        sentiment=sentiment,
        impact_label=impact_label_for(factor, sentiment),
    )


__all__ = [
    "BEARISH_KEYWORDS",
    "BULLISH_KEYWORDS",
    "IMPACT_LABELS",
    "MACRO_KEYWORDS",
    "PENDING_IMPACT_LABEL",
    "classify",
    "classify_factor",
    "impact_label_for",
    "pending_classification",
    "refine_classification",
    "resolve_sentiment",
    "sentiment_from_model",
]
