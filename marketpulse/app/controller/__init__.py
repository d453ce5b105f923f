"""Controller package re-exports.

Updates: v0.1 - 2026-10-19 - Story board, refresh and summary controllers.
"""
from __future__ import annotations

from .board_controller import PendingIndicator, StoryBoard
from .refresh_controller import RefreshController, RefreshResult
from .summary_controller import RankedSummary, SummaryController

__all__ = [
    "PendingIndicator",
    "RankedSummary",
    "RefreshController",
    "RefreshResult",
    "StoryBoard",
    "SummaryController",
]
