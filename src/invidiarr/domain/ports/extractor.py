"""Port for the extractor plugin exposed to the playback host."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from invidiarr.domain.entities.media import Playlist, Song


@runtime_checkable
class ExtractorPluginPort(Protocol):
    """Resolves video platform URLs and queries into playable songs.

    The host calls ``get_stream_url`` right before playback, so the
    returned URL must be a single direct media resource (no manifest).
    """

    @property
    def name(self) -> str: ...

    def validate(self, url: str) -> bool: ...

    async def resolve(self, url: str, metadata: Any = None) -> Song | Playlist: ...

    async def search_song(self, query: str, metadata: Any = None) -> Song | None: ...

    async def get_stream_url(self, song: Song) -> str: ...

    async def get_related_songs(self, song: Song) -> list[Song]: ...
