"""Pytest configuration to ensure imports resolve cleanly for tests.

- Prepend project root to sys.path so 'marketpulse' is importable with testpaths.
- Keep the Redis cache and LiteLLM routing off unless a test opts in.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_project_root_on_syspath() -> None:
    """Prepend repository root to sys.path for package imports."""
    tests_dir = Path(__file__).resolve().parent
    project_root = tests_dir.parent
    root_str = str(project_root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)


_ensure_project_root_on_syspath()


@pytest.fixture(autouse=True)
def _isolate_redis(monkeypatch: pytest.MonkeyPatch) -> None:
    """Disable the shared Redis client so tests never touch a real server."""
    from marketpulse import cache

    monkeypatch.setattr(cache, "get_redis_client", lambda: None)
