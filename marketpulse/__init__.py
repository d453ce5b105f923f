"""MarketPulse application package.

Finance headline dashboard: RSS feed ingestion with heuristic macro/micro
and sentiment tagging, jump-page resolution and article extraction, plus
transformer-based sentiment refinement and summaries on a background
worker.

Updates: v0.1 - 2026-10-19 - Created package with feed, classifier and worker layers.
"""

from .main import main

__all__ = ["main"]
