"""Thin async client for the Invidious REST API.

Implements the ``TextFetcherPort`` / ``JsonFetcherPort`` capabilities on
top of a shared ``httpx.AsyncClient``.  Failures are raised as typed
errors: ``UpstreamTimeout`` for timeouts, ``UpstreamUnavailable`` for
everything else.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
import structlog

from invidiarr.domain.exceptions import UpstreamTimeout, UpstreamUnavailable

from .constants import DEFAULT_CLIENT_TIMEOUT

log = structlog.get_logger(__name__)


def normalize_instance(instance: str) -> str:
    """Strip trailing slashes and default the scheme to https.

    ``"yewtu.be/"`` -> ``"https://yewtu.be"``;
    ``"http://localhost:8095"`` stays as is.
    """
    normalized = instance.strip().rstrip("/")
    if not normalized.startswith(("http://", "https://")):
        normalized = f"https://{normalized}"
    return normalized


class InvidiousClient:
    """Fetches JSON from an Invidious instance and text from anywhere."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        instance: str,
        *,
        timeout: float = DEFAULT_CLIENT_TIMEOUT,
    ) -> None:
        self._http = http_client
        self.instance = normalize_instance(instance)
        self._timeout = timeout

    def api_url(self, path: str) -> str:
        return f"{self.instance}/api/v1/{path.lstrip('/')}"

    # ------------------------------------------------------------------
    # Fetch capabilities
    # ------------------------------------------------------------------

    async def _get(self, url: str, context: str) -> httpx.Response:
        try:
            resp = await self._http.get(url, timeout=self._timeout)
            resp.raise_for_status()
        except httpx.TimeoutException as exc:
            log.warning("invidious_timeout", url=url, context=context)
            raise UpstreamTimeout(url, self._timeout) from exc
        except httpx.HTTPStatusError as exc:
            log.warning(
                "invidious_http_error",
                url=url,
                status=exc.response.status_code,
                context=context,
            )
            raise UpstreamUnavailable(url, status=exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            log.warning(
                "invidious_fetch_error",
                url=url,
                error=str(exc),
                context=context,
            )
            raise UpstreamUnavailable(url, detail=str(exc)) from exc
        return resp

    async def fetch_text(self, url: str) -> str:
        resp = await self._get(url, context="text")
        return resp.text

    async def fetch_json(self, url: str) -> Any:
        resp = await self._get(url, context="json")
        try:
            return resp.json()
        except ValueError as exc:
            log.warning("invidious_invalid_json", url=url)
            raise UpstreamUnavailable(url, detail="invalid JSON") from exc

    # ------------------------------------------------------------------
    # API endpoints
    # ------------------------------------------------------------------

    async def video(self, video_id: str) -> dict[str, Any]:
        url = self.api_url(f"videos/{quote(video_id)}")
        data = await self.fetch_json(url)
        if not isinstance(data, dict):
            raise UpstreamUnavailable(url, detail="unexpected shape")
        return data

    async def playlist(self, playlist_id: str) -> dict[str, Any]:
        url = self.api_url(f"playlists/{quote(playlist_id)}")
        data = await self.fetch_json(url)
        if not isinstance(data, dict):
            raise UpstreamUnavailable(url, detail="unexpected shape")
        return data

    async def search(self, query: str) -> list[dict[str, Any]]:
        url = self.api_url(f"search?q={quote(query)}&type=video")
        data = await self.fetch_json(url)
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict)]
