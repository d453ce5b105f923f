"""Application entrypoint wiring for MarketPulse.

Parses the command line, restores persisted preferences, configures
logging and the late-bound services, then renders one pass of the story
dashboard to the terminal. ML refinement and the feed digest run on the
background inference worker; article summaries resolve concurrently and
queue their generation on the same worker.

Updates: v0.1 - 2026-10-19 - Added metadata and argparse terminal dashboard.
Updates: v0.2 - 2026-10-19 - Wired the inference worker for refinement and feed digests.
Updates: v0.3 - 2026-10-19 - Article summaries are generated on the inference worker too.
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from typing import Any, Dict, List, Optional, Sequence

from .app.controller import RankedSummary, RefreshController, StoryBoard, SummaryController
from .app.helpers.env_helpers import describe_environment
from .app.rendering import colorize, render_story_list, render_summary_block, resolve_palette
from .app.services import configure_app_services
from .articles import resolve_article_summary
from .cache import clear_cached_stories
from .config import (
    COUNTRY_LABELS,
    COUNTRY_QUERIES,
    TIME_FILTER_INTERVALS,
    TIME_FILTER_LABELS,
    TOPIC_CHOICES,
    TOPIC_LABELS,
)
from .feed import fetch_finance_news, normalise_country, normalise_time_filter
from .models import AppMetadata
from .settings_store import load_settings, save_settings, toggle_theme
from .summaries import configure_litellm_debug
from .worker import InferenceWorker

logger = logging.getLogger(__name__)

APP_VERSION = "0.1"
APP_METADATA = AppMetadata(
    name="MarketPulse",
    version=f"v{APP_VERSION}",
    description=(
        "Terminal dashboard for finance headlines tagged by macro/micro factor and "
        "market sentiment, with ML refinement and article summaries."
    ),
)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
LOG_DATEFMT = "%H:%M:%S"
_WAIT_POLL_SECONDS = 0.5


def configure_logging(debug: bool = False) -> None:
    """Install the console handler on the root logger."""

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, "_marketpulse_console", False):
            root_logger.removeHandler(handler)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    console_handler._marketpulse_console = True  # type: ignore[attr-defined]
    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    configure_litellm_debug(debug)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="marketpulse", description=APP_METADATA.description)
    parser.add_argument("--country", choices=sorted(COUNTRY_QUERIES), help="Market to pull headlines for.")
    parser.add_argument("--time", dest="time_filter", choices=sorted(TIME_FILTER_INTERVALS), help="Headline age window.")
    parser.add_argument("--topic", choices=TOPIC_CHOICES, help="Show only macro or micro stories.")
    parser.add_argument("--refresh", action="store_true", help="Bypass the story cache.")
    parser.add_argument("--clear-cache", action="store_true", help="Drop cached stories and summaries first.")
    parser.add_argument("--refine", action="store_true", help="Refine sentiment with the ML classifier.")
    parser.add_argument(
        "--summarize",
        metavar="RANK",
        type=int,
        action="append",
        default=[],
        help="Summarise the article at this list position (repeatable).",
    )
    parser.add_argument("--digest", action="store_true", help="Summarise the whole feed.")
    parser.add_argument("--toggle-theme", action="store_true", help="Switch between dark and light themes.")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colours.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument("--settings", metavar="PATH", help="Use an alternative settings file.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_METADATA.version}")
    return parser


def apply_cli_overrides(settings: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Fold explicit command-line choices into the persisted settings."""

    updated = dict(settings)
    if args.country:
        updated["country"] = args.country
    if args.time_filter:
        updated["time_filter"] = args.time_filter
    if args.topic:
        updated["topic"] = args.topic
    if args.debug:
        updated["debug_mode"] = True
    if args.toggle_theme:
        toggle_theme(updated)
    updated["country"] = normalise_country(updated.get("country"))
    updated["time_filter"] = normalise_time_filter(updated.get("time_filter"))
    return updated


def dashboard_header(settings: Dict[str, Any]) -> str:
    return " · ".join(
        [
            APP_METADATA.name,
            COUNTRY_LABELS.get(settings["country"], settings["country"]),
            TIME_FILTER_LABELS.get(settings["time_filter"], settings["time_filter"]),
            TOPIC_LABELS.get(settings.get("topic", "all"), "Trending"),
        ]
    )


def wait_for_board(worker: InferenceWorker, board: StoryBoard) -> None:
    """Block until the worker drains or every pending indicator has expired."""

    waiter = threading.Thread(target=worker.wait_idle, name="marketpulse-wait", daemon=True)
    waiter.start()
    while waiter.is_alive():
        waiter.join(_WAIT_POLL_SECONDS)
        board.expire_pending()
        if not board.pending():
            break
    if waiter.is_alive():
        logger.warning("Gave up waiting on the inference worker; showing partial results.")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one dashboard pass; returns the process exit code."""

    args = build_parser().parse_args(argv)
    settings = apply_cli_overrides(load_settings(args.settings), args)
    configure_logging(bool(settings.get("debug_mode")))
    logger.debug("Bootstrapping %s %s", APP_METADATA.name, APP_METADATA.version)
    for name, value in describe_environment().items():
        logger.debug("%s=%s", name, value)
    save_settings(settings, args.settings)

    configure_app_services(
        fetch_stories=fetch_finance_news,
        resolve_article_summary=resolve_article_summary,
    )

    if args.clear_cache:
        _, message = clear_cached_stories()
        logger.info(message)

    theme = settings["theme"]
    color = not args.no_color and sys.stdout.isatty()
    board = StoryBoard()
    refresher = RefreshController(
        board,
        country=settings["country"],
        time_filter=settings["time_filter"],
        topic=settings.get("topic", "all"),
    )
    refresher.refresh(force_refresh=args.refresh, await_refinement=args.refine)

    ranked: List[RankedSummary] = []
    wants_worker = bool(args.refine or args.digest or args.summarize)
    worker = InferenceWorker(board.handle) if wants_worker and board.stories else None
    try:
        summaries = SummaryController(board=board, worker=worker)
        ranked = summaries.summarize_ranks(board.stories, args.summarize)
        if worker is not None:
            if args.refine:
                board.request_refinement(worker)
            if args.digest:
                board.request_feed_summary(worker)
            wait_for_board(worker, board)
    finally:
        if worker is not None:
            worker.stop()

    stories = board.stories
    print(colorize(dashboard_header(settings), "title", resolve_palette(theme), color))
    print(render_story_list(stories, theme=theme, color=color, pending_ids=board.pending_story_ids()))
    if board.status_message:
        print(f"\n{board.status_message}")

    if args.digest and board.feed_summary:
        print()
        print(render_summary_block("Feed digest", board.feed_summary, theme=theme, color=color))

    failures: List[str] = []
    for result in ranked:
        if result.story is None or result.resolution is None:
            failures.append(result.error or f"No story at rank {result.rank}")
            continue
        heading = f"#{result.rank} {result.story.title}"
        if result.resolution.from_cache:
            heading += " (cached)"
        print()
        print(render_summary_block(heading, result.resolution.summary, theme=theme, color=color))
    for failure in failures:
        logger.warning(failure)
    return 0


__all__ = ["APP_METADATA", "APP_VERSION", "build_parser", "configure_logging", "dashboard_header", "main"]
