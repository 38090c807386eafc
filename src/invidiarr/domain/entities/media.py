"""Domain entities for audio stream extraction.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any


class AudioCodec(IntEnum):
    """Ranked audio codec preference (higher value = preferred)."""

    OTHER = 10
    AAC = 20
    OPUS = 30


class SelectionTier(str, Enum):
    """Which selection stage produced a stream URL."""

    PRESIGNED = "presigned"
    ADAPTIVE = "adaptive"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class CandidateFormat:
    """One entry of a video response's ``formatStreams`` or ``adaptiveFormats``."""

    url: str
    mime_type: str = ""  # "audio/webm; codecs=\"opus\""
    encoding: str = ""  # "opus", "aac", ...
    bitrate: int = 0  # 0 = unknown
    itag: str = ""
    is_manifest: bool = False
    presigned: bool = False

    @property
    def is_audio(self) -> bool:
        return self.mime_type.lower().startswith("audio/")

    @property
    def codec(self) -> AudioCodec:
        hint = f"{self.mime_type} {self.encoding}".lower()
        if "opus" in hint:
            return AudioCodec.OPUS
        if "mp4a" in hint or "aac" in hint:
            return AudioCodec.AAC
        return AudioCodec.OTHER


@dataclass(frozen=True)
class SelectionResult:
    """The chosen stream URL plus how it was chosen (for diagnostics)."""

    url: str
    tier: SelectionTier
    codec: AudioCodec
    bitrate: int = 0
    itag: str = ""
    validated: bool = False


@dataclass(frozen=True)
class Uploader:
    """Channel that published a video."""

    name: str = ""
    url: str = ""


@dataclass
class Song:
    """A playable video entry handed to the playback host."""

    id: str
    name: str
    url: str
    source: str = "youtube"
    play_from_source: bool = True
    thumbnail: str = ""
    duration: int = 0
    is_live: bool = False
    views: int = 0
    likes: int = 0
    uploader: Uploader = field(default_factory=Uploader)
    plugin: Any = None
    metadata: Any = None
    stream_url: str | None = None


@dataclass
class Playlist:
    """A named, ordered collection of songs."""

    id: str
    name: str
    url: str
    songs: list[Song] = field(default_factory=list)
    source: str = "youtube"
    thumbnail: str = ""
    metadata: Any = None

    def __len__(self) -> int:
        return len(self.songs)
