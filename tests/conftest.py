"""Shared test fixtures for the invidiarr test suite."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from invidiarr.domain.exceptions import UpstreamUnavailable

# ---------------------------------------------------------------------------
# Player script fixtures
# ---------------------------------------------------------------------------

WATCH_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
PLAYER_URL = "https://www.youtube.com/s/player/abc123/player_ias.vflset/en_US/base.js"

WATCH_HTML = (
    "<html><head><script>ytcfg.set({"
    '"INNERTUBE_API_KEY":"key",'
    '"jsUrl":"/s/player/abc123/player_ias.vflset/en_US/base.js"'
    "});</script></head><body></body></html>"
)

# cd(1) drops one char, AB reverses, Ef(2) swaps index 0 and 2:
# "abcdef" -> "bcdef" -> "fedcb" -> "defcb"
PLAYER_JS = (
    'var _yt_player={};(function(g){var window=this;'
    "var Xy={AB:function(a){a.reverse()},\n"
    "cd:function(a,b){a.splice(0,b)},\n"
    "Ef:function(a,b){var c=a[0];a[0]=a[b%a.length];a[b%a.length]=c}};\n"
    'var Gh=function(a){a=a.split("");Xy.cd(a,1);Xy.AB(a,45);Xy.Ef(a,2);'
    'return a.join("")};\n'
    'g.Qz=function(a){var b;a.D&&(b=a.get("n"))&&(b=Gh(b),a.set("n",b))};'
    "})(_yt_player);"
)


class FakeFetcher:
    """In-memory ``TextFetcherPort`` recording every requested URL."""

    def __init__(self, pages: dict[str, str], *, fail: dict[str, int] | None = None) -> None:
        self.pages = pages
        self.calls: list[str] = []
        # url -> number of leading calls that fail
        self.fail = dict(fail or {})

    async def fetch_text(self, url: str) -> str:
        self.calls.append(url)
        await asyncio.sleep(0)
        if self.fail.get(url, 0) > 0:
            self.fail[url] -= 1
            raise UpstreamUnavailable(url, status=503)
        if url not in self.pages:
            raise UpstreamUnavailable(url, status=404)
        return self.pages[url]

    def count(self, url: str) -> int:
        return self.calls.count(url)


@pytest.fixture()
def player_js() -> str:
    return PLAYER_JS


@pytest.fixture()
def watch_html() -> str:
    return WATCH_HTML


@pytest.fixture()
def player_url() -> str:
    return PLAYER_URL


@pytest.fixture()
def fake_fetcher() -> FakeFetcher:
    """Fetcher serving the watch page and player script."""
    return FakeFetcher({WATCH_URL: WATCH_HTML, PLAYER_URL: PLAYER_JS})


# ---------------------------------------------------------------------------
# Video metadata fixtures
# ---------------------------------------------------------------------------


def make_format(
    url: str,
    mime: str,
    *,
    bitrate: str | None = None,
    itag: str = "",
    encoding: str | None = None,
) -> dict[str, Any]:
    fmt: dict[str, Any] = {"url": url, "type": mime, "itag": itag}
    if bitrate is not None:
        fmt["bitrate"] = bitrate
    if encoding is not None:
        fmt["encoding"] = encoding
    return fmt


@pytest.fixture()
def video_response() -> dict[str, Any]:
    """Minimal ``/api/v1/videos/:id`` response."""
    return {
        "videoId": "dQw4w9WgXcQ",
        "title": "Never Gonna Give You Up",
        "author": "Rick Astley",
        "authorId": "UCuAXFkgsw1L7xaCfnd5JJOw",
        "authorUrl": "/channel/UCuAXFkgsw1L7xaCfnd5JJOw",
        "lengthSeconds": 212,
        "viewCount": 1_500_000_000,
        "likeCount": 17_000_000,
        "liveNow": False,
        "videoThumbnails": [
            {"quality": "default", "url": "https://i.ytimg.com/vi/x/default.jpg", "width": 120, "height": 90},
            {"quality": "maxres", "url": "https://i.ytimg.com/vi/x/maxres.jpg", "width": 1280, "height": 720},
        ],
        "formatStreams": [
            make_format(
                "https://rr1.googlevideo.com/videoplayback?itag=18",
                'video/mp4; codecs="avc1.42001E, mp4a.40.2"',
                itag="18",
            ),
        ],
        "adaptiveFormats": [
            make_format(
                "https://rr1.googlevideo.com/videoplayback?itag=140&n=abcdef",
                'audio/mp4; codecs="mp4a.40.2"',
                bitrate="130000",
                itag="140",
            ),
            make_format(
                "https://rr1.googlevideo.com/videoplayback?itag=251&n=abcdef",
                'audio/webm; codecs="opus"',
                bitrate="160000",
                itag="251",
            ),
            make_format(
                "https://rr1.googlevideo.com/videoplayback?itag=137",
                'video/mp4; codecs="avc1.640028"',
                bitrate="4000000",
                itag="137",
            ),
        ],
        "recommendedVideos": [
            {
                "videoId": f"rel{i}",
                "title": f"Related {i}",
                "author": "Someone",
                "authorId": "UC123",
                "lengthSeconds": 100 + i,
                "viewCount": i,
                "videoThumbnails": [],
            }
            for i in range(12)
        ],
    }
