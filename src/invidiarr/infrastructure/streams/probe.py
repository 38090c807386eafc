"""Reachability probe for candidate media URLs."""

from __future__ import annotations

import httpx
import structlog

from invidiarr.infrastructure.invidious.constants import (
    BROWSER_MEDIA_HEADERS,
    DEFAULT_PROBE_TIMEOUT,
)

log = structlog.get_logger(__name__)


async def probe_stream_url(
    http_client: httpx.AsyncClient,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> bool:
    """Request the first byte of *url* to check it is reachable.

    Sends a ``Range: bytes=0-0`` GET and closes the response without
    reading the body.  Returns ``True`` for 2xx/3xx; ``False`` for any
    other status, a timeout or a transport error.

    Parameters
    ----------
    http_client:
        Shared async HTTP client.
    url:
        The media URL to check.
    headers:
        Extra request headers, merged over the browser defaults.
    timeout:
        Per-probe timeout in seconds.
    """
    request_headers = {**BROWSER_MEDIA_HEADERS, **(headers or {}), "Range": "bytes=0-0"}
    try:
        async with http_client.stream(
            "GET",
            url,
            headers=request_headers,
            follow_redirects=True,
            timeout=timeout,
        ) as resp:
            status = resp.status_code
    except httpx.TimeoutException:
        log.info("stream_probe_timeout", url=url[:120], timeout=timeout)
        return False
    except httpx.HTTPError as exc:
        log.warning("stream_probe_error", url=url[:120], error=str(exc))
        return False

    if 200 <= status < 400:
        return True
    log.warning("stream_probe_failed", status=status, url=url[:120])
    return False
