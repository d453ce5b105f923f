"""Environment helper functions for MarketPulse.

Updates: v0.1 - 2026-10-19 - Masked secrets before logging the runtime configuration.
"""

from __future__ import annotations

import os
import re
from typing import Dict, Iterable, Optional

_SENSITIVE_ENV_PATTERN = re.compile(r"(KEY|TOKEN|SECRET|PASSWORD)", re.IGNORECASE)
_CREDENTIAL_URL_PATTERN = re.compile(r"^(?P<scheme>[a-z][a-z0-9+.-]*://)[^@/]*@", re.IGNORECASE)
_MAX_LOGGED_LENGTH = 80

LOGGED_ENVIRONMENT = (
    "MARKETPULSE_SUMMARY_BACKEND",
    "MARKETPULSE_CLASSIFIER_MODEL",
    "MARKETPULSE_SUMMARIZER_MODEL",
    "MARKETPULSE_MAX_HOPS",
    "MARKETPULSE_FEED_LIMIT",
    "MARKETPULSE_SETTINGS",
    "LITELLM_MODEL",
    "LITELLM_API_BASE",
    "LITELLM_API_KEY",
    "REDIS_URL",
)


def sanitize_env_value(name: str, value: Optional[str]) -> Optional[str]:
    """Mask an environment value for logging.

    Secrets collapse to ``***``, credentials embedded in URLs are masked,
    and long values are shortened with an ellipsis. Empty values give None.
    """
    if not value:
        return None
    if _SENSITIVE_ENV_PATTERN.search(name):
        return "***"
    value = _CREDENTIAL_URL_PATTERN.sub(r"\g<scheme>***@", value)
    if len(value) > _MAX_LOGGED_LENGTH:
        return value[: _MAX_LOGGED_LENGTH - 3] + "…"
    return value


def describe_environment(names: Iterable[str] = LOGGED_ENVIRONMENT) -> Dict[str, str]:
    """Sanitised values of the set variables among ``names``."""

    described: Dict[str, str] = {}
    for name in names:
        sanitized = sanitize_env_value(name, os.getenv(name))
        if sanitized is not None:
            described[name] = sanitized
    return described


__all__ = ["LOGGED_ENVIRONMENT", "describe_environment", "sanitize_env_value"]
