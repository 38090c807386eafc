"""YouTube link recognition and rewriting to an Invidious instance.

Path-based helpers strip the query string first, so shared links such as
``https://youtu.be/ID?si=xxx`` behave like their clean form.  Watch and
playlist ids live in the query, so those are read from the raw URL.
"""

from __future__ import annotations

import re

_YOUTUBE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p)
    for p in (
        r"^https?://(?:www\.|m\.|music\.)?youtube\.com/watch\?",
        r"^https?://youtu\.be/",
        r"^https?://(?:www\.)?youtube\.com/shorts/",
        r"^https?://(?:www\.)?youtube\.com/live/",
        r"^https?://(?:www\.)?youtube\.com/embed/",
        r"^https?://(?:www\.|music\.)?youtube\.com/playlist\?",
        r"^https?://(?:www\.)?youtube\.com/channel/",
        r"^https?://(?:www\.)?youtube\.com/c/",
        r"^https?://(?:www\.)?youtube\.com/user/",
        r"^https?://(?:www\.)?youtube\.com/@",
    )
)

_WATCH_ID_RE = re.compile(r"[?&]v=([^&#]+)")
_PLAYLIST_ID_RE = re.compile(r"[?&]list=([^&#]+)")
_PATH_ID_RES: tuple[re.Pattern[str], ...] = (
    re.compile(r"youtu\.be/([^/?#]+)"),
    re.compile(r"youtube\.com/shorts/([^/?#]+)"),
    re.compile(r"youtube\.com/live/([^/?#]+)"),
    re.compile(r"youtube\.com/embed/([^/?#]+)"),
)
_CHANNEL_RES: tuple[re.Pattern[str], ...] = (
    re.compile(r"/channel/([^/?#]+)"),
    re.compile(r"/c/([^/?#]+)"),
    re.compile(r"/user/([^/?#]+)"),
    re.compile(r"/@([^/?#]+)"),
)

# (pattern, target path template); group 1 is the id.
_REWRITES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^https?://(?:www\.|m\.|music\.)?youtube\.com/watch\?(?:.*&)?v=([^&#]+)"), "/watch?v={}"),
    (re.compile(r"^https?://youtu\.be/([^/?#]+)"), "/watch?v={}"),
    (re.compile(r"^https?://(?:www\.)?youtube\.com/shorts/([^/?#]+)"), "/watch?v={}"),
    (re.compile(r"^https?://(?:www\.)?youtube\.com/live/([^/?#]+)"), "/watch?v={}"),
    (re.compile(r"^https?://(?:www\.)?youtube\.com/embed/([^/?#]+)"), "/watch?v={}"),
    (re.compile(r"^https?://(?:www\.|music\.)?youtube\.com/playlist\?(?:.*&)?list=([^&#]+)"), "/playlist?list={}"),
    (re.compile(r"^https?://(?:www\.)?youtube\.com/channel/([^/?#]+)"), "/channel/{}"),
    (re.compile(r"^https?://(?:www\.)?youtube\.com/c/([^/?#]+)"), "/channel/{}"),
    (re.compile(r"^https?://(?:www\.)?youtube\.com/user/([^/?#]+)"), "/user/{}"),
    (re.compile(r"^https?://(?:www\.)?youtube\.com/@([^/?#]+)"), "/@{}"),
)


def strip_query(url: str) -> str:
    """Drop everything from the first ``?`` onward."""
    return url.split("?", 1)[0]


def is_youtube_url(url: str) -> bool:
    """Whether *url* is any recognised YouTube link."""
    return any(p.search(url) for p in _YOUTUBE_PATTERNS)


def is_playlist_url(url: str) -> bool:
    """Playlist link without a specific video (``list=`` but no ``v=``)."""
    return extract_playlist_id(url) is not None and _WATCH_ID_RE.search(url) is None


def extract_video_id(url: str) -> str | None:
    """Video id from watch, youtu.be, shorts, live or embed links."""
    match = _WATCH_ID_RE.search(url)
    if match:
        return match.group(1)
    clean = strip_query(url)
    for pattern in _PATH_ID_RES:
        match = pattern.search(clean)
        if match:
            return match.group(1)
    return None


def extract_playlist_id(url: str) -> str | None:
    match = _PLAYLIST_ID_RE.search(url)
    return match.group(1) if match else None


def extract_channel(url: str) -> str | None:
    """Channel id, custom name, user name or handle."""
    clean = strip_query(url)
    for pattern in _CHANNEL_RES:
        match = pattern.search(clean)
        if match:
            return match.group(1)
    return None


def to_invidious(url: str, instance: str) -> str:
    """Rewrite a YouTube link to the equivalent page on *instance*.

    Unrecognised URLs are returned unchanged.
    """
    for pattern, template in _REWRITES:
        match = pattern.search(url)
        if match:
            return instance + template.format(match.group(1))
    return url
