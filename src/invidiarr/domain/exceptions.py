"""Extractor error hierarchy."""

from __future__ import annotations

from collections.abc import Mapping


class InvidiarrError(Exception):
    """Base class for all extractor errors."""


class ExtractionFailed(InvidiarrError):
    """Raised when no pattern for an extraction role matched the source text."""

    def __init__(self, role: object) -> None:
        self.role = str(getattr(role, "value", role))
        super().__init__(f"No pattern matched for role '{self.role}'")


class UpstreamUnavailable(InvidiarrError):
    """Raised on transport failure or an error status from an upstream."""

    def __init__(self, url: str, status: int | None = None, detail: str = "") -> None:
        self.url = url
        self.status = status
        message = f"Upstream unavailable: {url}"
        if status is not None:
            message += f" (HTTP {status})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class UpstreamTimeout(UpstreamUnavailable):
    """Raised when an upstream request exceeded its timeout."""

    def __init__(self, url: str, timeout: float | None = None) -> None:
        self.timeout = timeout
        detail = f"timed out after {timeout}s" if timeout is not None else "timed out"
        super().__init__(url, detail=detail)


class NoPlayableStream(InvidiarrError):
    """Raised when every selection tier is exhausted.

    ``counts`` maps tier names to the number of candidates considered,
    so callers can tell an empty response apart from a broken extractor.
    """

    def __init__(self, video_id: str, counts: Mapping[str, int]) -> None:
        self.video_id = video_id
        self.counts = dict(counts)
        summary = ", ".join(f"{tier}={n}" for tier, n in self.counts.items())
        super().__init__(
            f"No playable audio stream found for '{video_id}' ({summary}). "
            "Try a different Invidious instance or check if the video is available."
        )


class InvalidMediaUrl(InvidiarrError):
    """Raised when a URL cannot be resolved to a video or playlist id."""

    def __init__(self, url: str, reason: str = "Invalid YouTube URL") -> None:
        self.url = url
        super().__init__(f"{reason}: {url}")
