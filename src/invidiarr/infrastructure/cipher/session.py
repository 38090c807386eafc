"""Lazily built, memoized player-script cipher.

One ``CipherSession`` belongs to one plugin instance.  The first caller
that needs the transform fetches the watch page and the player script,
extracts the symbols and compiles the transform; concurrent callers
await that same build instead of starting their own.

States: *uninitialized* until a build succeeds, then *ready* for the
lifetime of the session.  A failed build leaves nothing cached, so the
next call retries from scratch.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

import structlog

from invidiarr.domain.entities.cipher import ExtractedSymbols, PlayerScript
from invidiarr.domain.exceptions import InvidiarrError
from invidiarr.domain.ports.fetcher import TextFetcherPort
from invidiarr.infrastructure.invidious.constants import (
    DEFAULT_CIPHER_PARAM,
    DEFAULT_PLAYER_BASE_URL,
    DEFAULT_WATCH_URL,
)

from .operations import Operation, build_operation_table
from .patterns import ExtractionRole, Matcher, extract_symbols, locate
from .transform import Transform, compile_transform

log = structlog.get_logger(__name__)


class CipherSession:
    """Owns the fetch -> extract -> compile pipeline and its result.

    Usage::

        session = CipherSession(client)
        plain = await session.decode("CIPHERED")
        url = await session.fix_url(url)
    """

    def __init__(
        self,
        fetcher: TextFetcherPort,
        *,
        watch_url: str = DEFAULT_WATCH_URL,
        player_base_url: str = DEFAULT_PLAYER_BASE_URL,
        param: str = DEFAULT_CIPHER_PARAM,
        patterns: Mapping[ExtractionRole, Sequence[Matcher]] | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._watch_url = watch_url
        self._player_base_url = player_base_url
        self._patterns = patterns
        self.param = param

        self._script: PlayerScript | None = None
        self._symbols: ExtractedSymbols | None = None
        self._table: Mapping[str, Operation] | None = None
        self._transform: Transform | None = None
        self._build_task: asyncio.Task[Transform] | None = None

    @property
    def is_ready(self) -> bool:
        return self._transform is not None

    @property
    def symbols(self) -> ExtractedSymbols | None:
        return self._symbols

    @property
    def player_url(self) -> str | None:
        return self._script.url if self._script is not None else None

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def get_player_script(self) -> PlayerScript:
        """Fetch the watch page, locate the player script and fetch it."""
        if self._script is not None:
            return self._script

        page = await self._fetcher.fetch_text(self._watch_url)
        matchers = (
            self._patterns.get(ExtractionRole.PLAYER_SCRIPT_URL)
            if self._patterns is not None
            else None
        )
        path = locate(page, ExtractionRole.PLAYER_SCRIPT_URL, matchers)
        url = urljoin(self._player_base_url, path.replace("\\/", "/"))

        source = await self._fetcher.fetch_text(url)
        self._script = PlayerScript(url=url, source=source)
        log.info("cipher_player_script_fetched", url=url, size=len(source))
        return self._script

    async def get_transform(self) -> Transform:
        """Return the compiled transform, building it at most once at a time."""
        if self._transform is not None:
            return self._transform

        if self._build_task is None:
            self._build_task = asyncio.ensure_future(self._build())
            self._build_task.add_done_callback(self._on_build_done)

        # A cancelled caller must not cancel the build other callers wait on
        return await asyncio.shield(self._build_task)

    async def _build(self) -> Transform:
        try:
            script = await self.get_player_script()
            symbols = extract_symbols(script.source, self._patterns)
            table = build_operation_table(symbols.helper_body)
            transform = compile_transform(symbols.function_body, table)
        except InvidiarrError as exc:
            self._clear()
            log.warning(
                "cipher_build_failed",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise
        except BaseException:
            self._clear()
            raise

        self._symbols = symbols
        self._table = table
        self._transform = transform
        log.info(
            "cipher_transform_built",
            function=symbols.function_name,
            helper=symbols.helper_name,
            operations=len(table),
            steps=len(transform.instructions),
        )
        return transform

    def _on_build_done(self, task: asyncio.Task[Transform]) -> None:
        if self._build_task is task:
            self._build_task = None
        if not task.cancelled():
            # Mark the exception as retrieved even if every waiter went away
            task.exception()

    def _clear(self) -> None:
        self._script = None
        self._symbols = None
        self._table = None
        self._transform = None

    def reset(self) -> None:
        """Drop every cached piece; the next call rebuilds."""
        if self._build_task is not None:
            self._build_task.cancel()
            self._build_task = None
        self._clear()

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    async def decode(self, value: str) -> str:
        """Run *value* through the transform.

        Raises ``ExtractionFailed`` / ``UpstreamUnavailable`` when the
        transform cannot be built; the caller decides how to degrade.
        """
        transform = await self.get_transform()
        return transform(value)

    async def fix_url(self, url: str) -> str:
        """Decode the cipher query parameter of *url* in place.

        Adds ``ratebypass=yes`` when missing.  Every other parameter is
        kept, in order.
        """
        parts = urlsplit(url)
        params = parse_qsl(parts.query, keep_blank_values=True)
        fixed: list[tuple[str, str]] = []
        for key, value in params:
            if key == self.param and value:
                value = await self.decode(value)
            fixed.append((key, value))
        if not any(key == "ratebypass" for key, _ in fixed):
            fixed.append(("ratebypass", "yes"))
        return urlunsplit(parts._replace(query=urlencode(fixed)))

    def has_cipher(self, url: str) -> bool:
        """Whether *url* carries the cipher query parameter."""
        query = urlsplit(url).query
        return any(
            key == self.param and value
            for key, value in parse_qsl(query, keep_blank_values=True)
        )
