"""Jump-page resolution for news aggregator links.

Aggregator feeds (Bing ``apiclick.aspx``, Google News) hand out tracking
links that forward to the publisher through HTTP redirects, ``<meta
http-equiv="refresh">`` tags or a ``location.replace`` script. The resolver
follows HTTP redirects with ``requests`` and then walks the embedded
redirects for at most ``max_hops`` fetches, returning the HTML of the last
page it reached.

Meta refresh targets win over script redirects. Markup is parsed with
BeautifulSoup first; raw patterns are only a fallback for malformed pages.

Updates: v0.1 - 2026-10-19 - Bounded meta-refresh/JS redirect walker.
Updates: v0.2 - 2026-10-19 - Structured meta/script parsing ahead of raw patterns.
"""

from __future__ import annotations

import html as html_lib
import logging
import re
import time
from typing import Dict, Mapping, Optional
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup, Tag

from .config import BROWSER_HEADERS, HTTP_TIMEOUT, MAX_REDIRECT_HOPS
from .http_client import get_http_session
from .models import RedirectTrace
from .utils import compute_deadline_timeout

logger = logging.getLogger(__name__)

_REFRESH_CONTENT = re.compile(r"^\s*\d*(?:\.\d+)?\s*[;,]?\s*url\s*=\s*['\"]?([^'\">]+)", re.IGNORECASE)
_META_REFRESH_MARKUP = re.compile(
    r"""content=["']\d+; *url=['"]?([^"'>]+)['"]?["']""", re.IGNORECASE
)
_GENERIC_URL_MARKUP = re.compile(r"""URL=['"]?([^"'>]+)['"]?""", re.IGNORECASE)
_JS_LOCATION_REPLACE = re.compile(
    r"""location\.replace\(\s*["']([^"']+)["']\s*\)""", re.IGNORECASE
)
_JS_LOCATION_HREF = re.compile(r"""location\.href\s*=\s*["']([^"']+)["']""", re.IGNORECASE)


def _parse(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _is_refresh_tag(tag: Tag) -> bool:
    value = tag.get("http-equiv")
    return isinstance(value, str) and value.strip().lower() == "refresh"


def find_meta_refresh_target(soup: BeautifulSoup, html: str) -> Optional[str]:
    """Return the raw target of a meta refresh redirect, if any."""

    for meta in soup.find_all("meta"):
        if not isinstance(meta, Tag) or not _is_refresh_tag(meta):
            continue
        content = meta.get("content")
        if not isinstance(content, str):
            continue
        match = _REFRESH_CONTENT.match(content)
        if match and match.group(1).strip():
            return match.group(1).strip()

    match = _META_REFRESH_MARKUP.search(html)
    if match:
        return match.group(1)

    # The bare URL= form is only trusted inside <head>.
    scope = str(soup.head) if isinstance(soup.head, Tag) else html
    match = _GENERIC_URL_MARKUP.search(scope)
    if match:
        return match.group(1)
    return None


def _match_script_redirect(source: str) -> Optional[str]:
    for pattern in (_JS_LOCATION_REPLACE, _JS_LOCATION_HREF):
        match = pattern.search(source)
        if match:
            return match.group(1)
    return None


def find_script_redirect_target(soup: BeautifulSoup) -> Optional[str]:
    """Return the target of a ``location.replace``/``location.href`` redirect."""

    for script in soup.find_all("script"):
        if not isinstance(script, Tag):
            continue
        target = _match_script_redirect(script.get_text())
        if target:
            return target
    for node in soup.find_all(attrs={"onload": True}):
        handler = node.get("onload") if isinstance(node, Tag) else None
        if isinstance(handler, str):
            target = _match_script_redirect(handler)
            if target:
                return target
    return None


def normalize_redirect_target(raw: str, current_url: str) -> Optional[str]:
    """Unescape entities and absolutise a redirect target against ``current_url``."""

    candidate = html_lib.unescape(raw.strip())
    if not candidate:
        return None
    absolute = urljoin(current_url, candidate)
    if urlparse(absolute).scheme not in ("http", "https"):
        return None
    return absolute


def find_next_hop(html: str, current_url: str) -> Optional[str]:
    """Return the absolute next-hop URL embedded in ``html``, if any."""

    if not html:
        return None
    soup = _parse(html)
    raw = find_meta_refresh_target(soup, html) or find_script_redirect_target(soup)
    if raw is None:
        return None
    return normalize_redirect_target(raw, current_url)


class RedirectResolver:
    """Walk a jump-page chain with a hard hop bound.

    Every hop is one GET with automatic HTTP redirect following. A failed hop
    keeps the HTML captured on an earlier hop; a failure before any HTML was
    captured leaves the trace in the ``failed`` state with empty HTML.
    """

    def __init__(
        self,
        *,
        max_hops: int = MAX_REDIRECT_HOPS,
        timeout: float = HTTP_TIMEOUT,
        total_timeout: Optional[float] = None,
        headers: Optional[Mapping[str, str]] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.max_hops = max(1, int(max_hops))
        self.timeout = timeout
        self.total_timeout = total_timeout
        self.headers: Dict[str, str] = dict(headers or BROWSER_HEADERS)
        self._session = session

    def trace(self, initial_url: str) -> RedirectTrace:
        session = self._session or get_http_session()
        deadline = (
            time.monotonic() + self.total_timeout if self.total_timeout is not None else None
        )
        trace = RedirectTrace(current_url=initial_url)

        while trace.hops < self.max_hops:
            timeout = compute_deadline_timeout(deadline, self.timeout)
            if timeout is None:
                logger.debug("Redirect deadline expired at %s", trace.current_url)
                self._settle_after_failure(trace)
                return trace

            trace.hops += 1
            trace.visited.append(trace.current_url)
            try:
                response = session.get(
                    trace.current_url,
                    headers=self.headers,
                    timeout=timeout,
                    allow_redirects=True,
                )
            except requests.RequestException as exc:
                logger.debug("Redirect hop %s failed for %s: %s", trace.hops, trace.current_url, exc)
                self._settle_after_failure(trace)
                return trace

            if not response.ok:
                logger.debug(
                    "Redirect hop %s returned HTTP %s for %s",
                    trace.hops,
                    response.status_code,
                    trace.current_url,
                )
                self._settle_after_failure(trace)
                return trace

            trace.current_url = response.url or trace.current_url
            trace.html = response.text
            trace.html_url = trace.current_url

            next_url = find_next_hop(trace.html, trace.current_url)
            if next_url is None or next_url == trace.current_url:
                trace.state = "resolved"
                return trace
            logger.debug("Following embedded redirect %s -> %s", trace.current_url, next_url)
            trace.current_url = next_url

        logger.debug("Redirect hop limit (%s) reached for %s", self.max_hops, initial_url)
        trace.exhausted = True
        trace.state = "resolved" if trace.html else "failed"
        return trace

    def resolve(self, initial_url: str) -> str:
        return self.trace(initial_url).html

    @staticmethod
    def _settle_after_failure(trace: RedirectTrace) -> None:
        trace.state = "resolved" if trace.html else "failed"


def resolve(
    initial_url: str,
    max_hops: int = MAX_REDIRECT_HOPS,
    *,
    session: Optional[requests.Session] = None,
) -> str:
    """Return the HTML of the final page behind ``initial_url`` ("" on total failure)."""

    return RedirectResolver(max_hops=max_hops, session=session).resolve(initial_url)


__all__ = [
    "RedirectResolver",
    "find_meta_refresh_target",
    "find_next_hop",
    "find_script_redirect_target",
    "normalize_redirect_target",
    "resolve",
]
