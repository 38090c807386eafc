"""Shared constants for the Invidious extractor."""

from __future__ import annotations

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

# Headers the video CDN expects from a browser-originated media request.
BROWSER_MEDIA_HEADERS: dict[str, str] = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
    "Origin": "https://www.youtube.com",
    "Referer": "https://www.youtube.com/",
    "Sec-Fetch-Dest": "empty",
    "Sec-Fetch-Mode": "cors",
    "Sec-Fetch-Site": "cross-site",
}

DEFAULT_CLIENT_TIMEOUT = 10.0
DEFAULT_PROBE_TIMEOUT = 5.0
RELATED_SONGS_LIMIT = 10

# Any public video works; only the player reference on the page matters.
DEFAULT_WATCH_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
DEFAULT_PLAYER_BASE_URL = "https://www.youtube.com"
DEFAULT_CIPHER_PARAM = "n"
