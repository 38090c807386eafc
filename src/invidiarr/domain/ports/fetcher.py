"""Ports for the HTTP fetch capabilities the extractor consumes."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class TextFetcherPort(Protocol):
    """Fetches a URL and returns its body as text.

    Implementations raise ``UpstreamUnavailable`` on transport errors or
    error statuses, and ``UpstreamTimeout`` when the bounded timeout expires.
    """

    async def fetch_text(self, url: str) -> str: ...


@runtime_checkable
class JsonFetcherPort(Protocol):
    """Fetches a URL and returns its decoded JSON body."""

    async def fetch_json(self, url: str) -> Any: ...
