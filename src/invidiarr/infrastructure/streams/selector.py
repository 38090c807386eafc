"""Audio stream selection for a video metadata response.

Selection order (each stage exhausted before the next):

1. Pre-signed ``formatStreams`` with an audio media type.  Their URLs
   are valid as delivered and are returned without probing.
2. Adaptive audio formats.  The cipher parameter is decoded when
   present, then the URL is probed with a one-byte range request;
   unreachable candidates are skipped.
3. The best adaptive audio candidate, unvalidated.  Probing sometimes
   rejects URLs the player can still open, so this stage is on by
   default.

Within every stage candidates are ordered opus -> AAC -> other, then
by descending bitrate (unknown bitrates keep response order).  Manifest
URLs are never returned.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import httpx
import structlog

from invidiarr.domain.entities.media import (
    AudioCodec,
    CandidateFormat,
    SelectionResult,
    SelectionTier,
)
from invidiarr.domain.exceptions import InvidiarrError, NoPlayableStream
from invidiarr.infrastructure.cipher.session import CipherSession
from invidiarr.infrastructure.invidious.adapter import parse_formats
from invidiarr.infrastructure.invidious.constants import DEFAULT_PROBE_TIMEOUT

from .probe import probe_stream_url

log = structlog.get_logger(__name__)


def rank_audio(candidates: Iterable[CandidateFormat]) -> list[CandidateFormat]:
    """Keep direct audio-only candidates, best codec and bitrate first."""
    audio = [c for c in candidates if c.is_audio and not c.is_manifest]
    return sorted(audio, key=lambda c: (-c.codec.value, -c.bitrate))


def _codec_counts(candidates: list[CandidateFormat]) -> dict[str, int]:
    return {
        codec.name.lower(): sum(1 for c in candidates if c.codec is codec)
        for codec in (AudioCodec.OPUS, AudioCodec.AAC, AudioCodec.OTHER)
    }


class StreamSelector:
    """Picks the best reachable audio-only URL from a video response."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        cipher: CipherSession | None = None,
        *,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
        allow_unvalidated_fallback: bool = True,
        probe_headers: dict[str, str] | None = None,
    ) -> None:
        self._http = http_client
        self._cipher = cipher
        self._probe_timeout = probe_timeout
        self._allow_fallback = allow_unvalidated_fallback
        self._probe_headers = probe_headers or {}

    async def select_audio_url(self, metadata: dict[str, Any]) -> str:
        """Return the selected stream URL; see ``select``."""
        result = await self.select(metadata)
        return result.url

    async def select(self, metadata: dict[str, Any]) -> SelectionResult:
        """Run the selection stages over *metadata*.

        Raises ``NoPlayableStream`` with per-stage candidate counts when
        nothing can be returned.
        """
        video_id = str(metadata.get("videoId") or "")
        presigned, adaptive = parse_formats(metadata)
        presigned_audio = rank_audio(presigned)
        adaptive_audio = rank_audio(adaptive)
        manifests = sum(1 for c in (*presigned, *adaptive) if c.is_manifest)

        log.info(
            "stream_candidates",
            video_id=video_id,
            presigned=len(presigned_audio),
            manifests_excluded=manifests,
            **_codec_counts(adaptive_audio),
        )

        if presigned_audio:
            best = presigned_audio[0]
            return self._selected(
                video_id, best, best.url, SelectionTier.PRESIGNED, validated=False
            )

        tried: list[tuple[CandidateFormat, str]] = []
        cipher_broken = False
        for candidate in adaptive_audio:
            url = candidate.url
            if not cipher_broken:
                url, cipher_broken = await self._decode(video_id, url)
            tried.append((candidate, url))

            if await probe_stream_url(
                self._http,
                url,
                headers=self._probe_headers,
                timeout=self._probe_timeout,
            ):
                return self._selected(
                    video_id, candidate, url, SelectionTier.ADAPTIVE, validated=True
                )
            log.debug(
                "stream_candidate_unreachable",
                video_id=video_id,
                itag=candidate.itag,
                codec=candidate.codec.name.lower(),
            )

        if self._allow_fallback and tried:
            candidate, url = tried[0]
            log.warning(
                "stream_fallback_unvalidated",
                video_id=video_id,
                itag=candidate.itag,
                tried=len(tried),
            )
            return self._selected(
                video_id, candidate, url, SelectionTier.FALLBACK, validated=False
            )

        counts = {
            "presigned": len(presigned_audio),
            **_codec_counts(adaptive_audio),
            "probed": len(tried),
            "manifests_excluded": manifests,
        }
        log.error("stream_not_found", video_id=video_id, **counts)
        raise NoPlayableStream(video_id, counts)

    async def _decode(self, video_id: str, url: str) -> tuple[str, bool]:
        """Decode the cipher parameter of *url*.

        Returns ``(url, cipher_broken)``; on failure the URL is returned
        unmodified and the flag stops further attempts for this selection.
        """
        if self._cipher is None or not self._cipher.has_cipher(url):
            return url, False
        try:
            return await self._cipher.fix_url(url), False
        except InvidiarrError as exc:
            log.warning(
                "stream_decode_failed",
                video_id=video_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return url, True

    @staticmethod
    def _selected(
        video_id: str,
        candidate: CandidateFormat,
        url: str,
        tier: SelectionTier,
        *,
        validated: bool,
    ) -> SelectionResult:
        log.info(
            "stream_selected",
            video_id=video_id,
            tier=tier.value,
            codec=candidate.codec.name.lower(),
            bitrate=candidate.bitrate,
            itag=candidate.itag,
            validated=validated,
            url=url[:100],
        )
        return SelectionResult(
            url=url,
            tier=tier,
            codec=candidate.codec,
            bitrate=candidate.bitrate,
            itag=candidate.itag,
            validated=validated,
        )
