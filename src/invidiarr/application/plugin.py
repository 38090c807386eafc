"""Extractor plugin: resolves YouTube links through an Invidious instance.

The plugin owns every per-instance resource: the shared HTTP client,
the API client, the cipher session and the stream selector.  Two
plugins pointing at different instances never share cipher state.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from invidiarr.domain.entities.media import Playlist, Song
from invidiarr.domain.exceptions import InvalidMediaUrl
from invidiarr.infrastructure.cipher.session import CipherSession
from invidiarr.infrastructure.config.schema import AppConfig
from invidiarr.infrastructure.invidious.adapter import (
    first_search_video_id,
    playlist_from_response,
    song_from_related,
    song_from_video,
)
from invidiarr.infrastructure.invidious.client import InvidiousClient
from invidiarr.infrastructure.invidious.url_utils import (
    extract_playlist_id,
    extract_video_id,
    is_playlist_url,
    is_youtube_url,
)
from invidiarr.infrastructure.streams.selector import StreamSelector

log = structlog.get_logger(__name__)


class InvidiousPlugin:
    """Satisfies ``ExtractorPluginPort`` for the playback host."""

    name = "invidious"

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or AppConfig()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=self._config.invidious_timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": self._config.http_user_agent},
        )

        self.api = InvidiousClient(
            self._http,
            self._config.invidious_instance,
            timeout=self._config.invidious_timeout_seconds,
        )
        self.instance = self.api.instance
        self.cipher = CipherSession(
            self.api,
            watch_url=self._config.cipher.watch_url,
            player_base_url=self._config.cipher.player_base_url,
            param=self._config.cipher.param,
        )
        self.selector = StreamSelector(
            self._http,
            self.cipher,
            probe_timeout=self._config.streams.probe_timeout_seconds,
            allow_unvalidated_fallback=self._config.streams.allow_unvalidated_fallback,
            probe_headers={"User-Agent": self._config.http_user_agent},
        )

    @property
    def ffmpeg_args(self) -> list[str]:
        """Global player arguments so media requests look browser-originated."""
        return ["-user_agent", self._config.http_user_agent]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def cleanup(self) -> None:
        """Drop cipher state and close the HTTP client if we created it."""
        self.cipher.reset()
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> InvidiousPlugin:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.cleanup()

    # ------------------------------------------------------------------
    # Host operations
    # ------------------------------------------------------------------

    def validate(self, url: str) -> bool:
        return is_youtube_url(url)

    async def resolve(self, url: str, metadata: Any = None) -> Song | Playlist:
        """Resolve a video or playlist link."""
        if is_playlist_url(url):
            return await self.playlist(url, metadata)

        video_id = extract_video_id(url)
        if not video_id:
            raise InvalidMediaUrl(url)

        data = await self.api.video(video_id)
        return song_from_video(data, self.instance, plugin=self, metadata=metadata)

    async def search_song(self, query: str, metadata: Any = None) -> Song | None:
        """Return the first video hit for *query*, fully resolved."""
        video_id = first_search_video_id(await self.api.search(query))
        if video_id is None:
            log.info("invidious_search_empty", query=query)
            return None
        data = await self.api.video(video_id)
        return song_from_video(data, self.instance, plugin=self, metadata=metadata)

    async def get_stream_url(self, song: Song) -> str:
        """Select a direct audio URL for *song*.

        Raises ``NoPlayableStream`` when every selection stage is exhausted.
        """
        log.info("invidious_stream_lookup", video_id=song.id)
        data = await self.api.video(song.id)
        url = await self.selector.select_audio_url(data)
        song.stream_url = url
        return url

    async def get_related_songs(self, song: Song) -> list[Song]:
        data = await self.api.video(song.id)
        related = [v for v in data.get("recommendedVideos") or [] if isinstance(v, dict)]
        limit = self._config.streams.related_limit
        return [
            song_from_related(video, self.instance, plugin=self)
            for video in related[:limit]
        ]

    async def playlist(self, url: str, metadata: Any = None) -> Playlist:
        playlist_id = extract_playlist_id(url)
        if not playlist_id:
            raise InvalidMediaUrl(url, reason="Invalid playlist URL")

        data = await self.api.playlist(playlist_id)
        result = playlist_from_response(data, self.instance, plugin=self, metadata=metadata)
        log.info(
            "invidious_playlist_resolved",
            playlist_id=playlist_id,
            songs=len(result.songs),
        )
        return result
