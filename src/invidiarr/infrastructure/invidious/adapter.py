"""Maps Invidious API JSON into domain entities.

Responses are consumed as loosely-typed dicts; missing or malformed
fields fall back to neutral defaults instead of raising.
"""

from __future__ import annotations

from typing import Any

from invidiarr.domain.entities.media import (
    CandidateFormat,
    Playlist,
    Song,
    Uploader,
)

_MANIFEST_SUFFIXES: tuple[str, ...] = (".mpd", ".m3u8")
_MANIFEST_MARKERS: tuple[str, ...] = ("/dash/", "/api/manifest/", "/hls_playlist/")


def is_manifest_url(url: str) -> bool:
    """Whether *url* points at a streaming manifest instead of a media file."""
    lowered = url.lower()
    path = lowered.split("?", 1)[0]
    if path.endswith(_MANIFEST_SUFFIXES) or lowered.endswith(_MANIFEST_SUFFIXES):
        return True
    return any(marker in lowered for marker in _MANIFEST_MARKERS)


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def format_bitrate(fmt: dict[str, Any]) -> int:
    """Signalled bitrate, falling back to content length; 0 when unknown."""
    for key in ("bitrate", "contentLength", "clen"):
        value = _to_int(fmt.get(key))
        if value > 0:
            return value
    return 0


def _candidate(fmt: Any, *, presigned: bool) -> CandidateFormat | None:
    if not isinstance(fmt, dict):
        return None
    url = fmt.get("url")
    if not isinstance(url, str) or not url:
        return None
    return CandidateFormat(
        url=url,
        mime_type=str(fmt.get("mimeType") or fmt.get("type") or ""),
        encoding=str(fmt.get("encoding") or ""),
        bitrate=format_bitrate(fmt),
        itag=str(fmt.get("itag") or ""),
        is_manifest=is_manifest_url(url),
        presigned=presigned,
    )


def parse_formats(
    metadata: dict[str, Any],
) -> tuple[list[CandidateFormat], list[CandidateFormat]]:
    """Return ``(presigned, adaptive)`` candidates in response order."""
    presigned = [
        c
        for c in (
            _candidate(f, presigned=True) for f in metadata.get("formatStreams") or []
        )
        if c is not None
    ]
    adaptive = [
        c
        for c in (
            _candidate(f, presigned=False)
            for f in metadata.get("adaptiveFormats") or []
        )
        if c is not None
    ]
    return presigned, adaptive


def best_thumbnail(thumbnails: list[dict[str, Any]] | None) -> str:
    """Return the URL of the largest thumbnail (width * height)."""
    if not thumbnails:
        return ""
    best = max(
        (t for t in thumbnails if isinstance(t, dict)),
        key=lambda t: _to_int(t.get("width")) * _to_int(t.get("height")),
        default=None,
    )
    return str(best.get("url") or "") if best else ""


def song_from_video(
    data: dict[str, Any],
    instance: str,
    *,
    plugin: Any = None,
    metadata: Any = None,
) -> Song:
    """Build a ``Song`` from a ``/api/v1/videos/:id`` response."""
    video_id = str(data.get("videoId") or "")
    author_url = data.get("authorUrl") or f"/channel/{data.get('authorId', '')}"
    return Song(
        id=video_id,
        name=str(data.get("title") or ""),
        url=f"{instance}/watch?v={video_id}",
        thumbnail=best_thumbnail(data.get("videoThumbnails")),
        duration=_to_int(data.get("lengthSeconds")),
        is_live=bool(data.get("liveNow", False)),
        views=_to_int(data.get("viewCount")),
        likes=_to_int(data.get("likeCount")),
        uploader=Uploader(
            name=str(data.get("author") or ""),
            url=f"{instance}{author_url}",
        ),
        plugin=plugin,
        metadata=metadata,
    )


def song_from_related(data: dict[str, Any], instance: str, *, plugin: Any = None) -> Song:
    """Build a ``Song`` from a ``recommendedVideos`` entry."""
    video_id = str(data.get("videoId") or "")
    return Song(
        id=video_id,
        name=str(data.get("title") or ""),
        url=f"{instance}/watch?v={video_id}",
        thumbnail=best_thumbnail(data.get("videoThumbnails")),
        duration=_to_int(data.get("lengthSeconds")),
        is_live=bool(data.get("liveNow", False)),
        views=_to_int(data.get("viewCount")),
        likes=_to_int(data.get("likeCount")),
        uploader=Uploader(
            name=str(data.get("author") or ""),
            url=f"{instance}/channel/{data.get('authorId', '')}",
        ),
        plugin=plugin,
    )


def playlist_from_response(
    data: dict[str, Any],
    instance: str,
    *,
    plugin: Any = None,
    metadata: Any = None,
) -> Playlist:
    """Build a ``Playlist`` from a ``/api/v1/playlists/:id`` response."""
    author_id = data.get("authorId", "")
    videos = [v for v in data.get("videos") or [] if isinstance(v, dict)]
    songs = [
        song_from_related({**video, "authorId": author_id}, instance, plugin=plugin)
        for video in videos
    ]
    for song in songs:
        song.metadata = metadata

    playlist_id = str(data.get("playlistId") or "")
    first_thumbs = videos[0].get("videoThumbnails") if videos else None
    return Playlist(
        id=playlist_id,
        name=str(data.get("title") or ""),
        url=f"{instance}/playlist?list={playlist_id}",
        songs=songs,
        thumbnail=best_thumbnail(first_thumbs),
        metadata=metadata,
    )


def first_search_video_id(results: Any) -> str | None:
    """Return the video id of the first search hit, if any."""
    if not isinstance(results, list) or not results:
        return None
    first = results[0]
    if not isinstance(first, dict):
        return None
    video_id = first.get("videoId")
    return str(video_id) if video_id else None
