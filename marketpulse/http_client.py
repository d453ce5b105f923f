"""Shared HTTP session management for MarketPulse network requests.

Feed fetches, jump-page resolution and article downloads all go through a
thread-local pooled ``requests`` session. Failures are never retried at the
transport level; callers degrade to fallbacks instead.

Updates: v0.1 - 2026-10-19 - Pooled session helpers with retries disabled.
"""

from __future__ import annotations

import atexit
import threading
from typing import Sequence, Set

import requests
from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util import Retry

_HTTP_THREAD_LOCAL = threading.local()
_HTTP_SESSION_LOCK = threading.Lock()
_HTTP_SESSIONS: Set[Session] = set()


def _build_retry() -> Retry:
    return Retry(  # pragma: no cover - network configuration
        total=0,
        allowed_methods=["HEAD", "GET", "OPTIONS"],
        raise_on_status=False,
    )


def get_http_session() -> Session:
    """Return a thread-local shared requests session."""

    session = getattr(_HTTP_THREAD_LOCAL, "session", None)
    if session is not None:
        return session
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=4, pool_maxsize=8, max_retries=_build_retry())
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    with _HTTP_SESSION_LOCK:
        _HTTP_SESSIONS.add(session)
    _HTTP_THREAD_LOCAL.session = session
    return session


def close_all_sessions() -> None:
    """Close pooled HTTP sessions at shutdown."""

    with _HTTP_SESSION_LOCK:
        sessions: Sequence[Session] = tuple(_HTTP_SESSIONS)
        _HTTP_SESSIONS.clear()
    for session in sessions:
        try:
            session.close()
        except Exception:  # pragma: no cover - close failure
            continue
    if getattr(_HTTP_THREAD_LOCAL, "session", None) is not None:
        _HTTP_THREAD_LOCAL.session = None


atexit.register(close_all_sessions)


__all__ = ["get_http_session", "close_all_sessions"]
