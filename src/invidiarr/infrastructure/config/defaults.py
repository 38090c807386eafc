"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

from invidiarr.infrastructure.invidious.constants import (
    DEFAULT_CIPHER_PARAM,
    DEFAULT_CLIENT_TIMEOUT,
    DEFAULT_PLAYER_BASE_URL,
    DEFAULT_PROBE_TIMEOUT,
    DEFAULT_USER_AGENT,
    DEFAULT_WATCH_URL,
    RELATED_SONGS_LIMIT,
)

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "invidiarr",
    "environment": "dev",
    "invidious": {
        "instance": "yewtu.be",
        "timeout_seconds": DEFAULT_CLIENT_TIMEOUT,
    },
    "http": {
        "user_agent": DEFAULT_USER_AGENT,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cipher": {
        "watch_url": DEFAULT_WATCH_URL,
        "player_base_url": DEFAULT_PLAYER_BASE_URL,
        "param": DEFAULT_CIPHER_PARAM,
    },
    "streams": {
        "probe_timeout_seconds": DEFAULT_PROBE_TIMEOUT,
        "allow_unvalidated_fallback": True,
        "related_limit": RELATED_SONGS_LIMIT,
    },
}
