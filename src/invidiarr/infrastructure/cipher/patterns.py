"""Pattern cascade for locating the transform inside the player script.

The player script is minified and its obfuscation changes between
platform releases, so every extraction role owns an ordered list of
matchers.  The first matcher that produces a non-empty capture wins.

Matchers for a role are never removed, only appended: the platform
occasionally rolls back to an older player build.

All expressions are lazy and free of nested quantifiers so a
multi-megabyte script cannot trigger catastrophic backtracking.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Mapping, Sequence

import structlog

from invidiarr.domain.entities.cipher import ExtractedSymbols
from invidiarr.domain.exceptions import ExtractionFailed

log = structlog.get_logger(__name__)

_PLACEHOLDER_RE = re.compile(r"%\((\w+)\)s")


class ExtractionRole(str, enum.Enum):
    """Named sub-expressions the cipher pipeline needs."""

    PLAYER_SCRIPT_URL = "player-script-url"
    TRANSFORM_FUNCTION_NAME = "transform-function-name"
    FUNCTION_BODY = "function-body"
    HELPER_NAME = "helper-name"
    HELPER_BODY = "helper-body"


class RegexMatcher:
    """Single regular expression with one capture group.

    *template* may reference keyword parameters as ``%(name)s``; values
    are regex-escaped before substitution.  Templates without parameters
    are compiled once.
    """

    def __init__(self, template: str, *, group: int = 1, flags: int = 0) -> None:
        self.template = template
        self._group = group
        self._flags = flags
        self._compiled: re.Pattern[str] | None = None
        if "%(" not in template:
            self._compiled = re.compile(template, flags)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.template!r})"

    def _pattern(self, params: Mapping[str, str]) -> re.Pattern[str] | None:
        if self._compiled is not None:
            return self._compiled
        # Only ``%(name)s`` placeholders are substituted; a bare ``%`` is regex text.
        if any(key not in params for key in _PLACEHOLDER_RE.findall(self.template)):
            return None
        expr = _PLACEHOLDER_RE.sub(
            lambda m: re.escape(params[m.group(1)]), self.template
        )
        try:
            return re.compile(expr, self._flags)
        except re.error as exc:
            log.warning("cipher_pattern_invalid", template=self.template, error=str(exc))
            return None

    def search(self, text: str, **params: str) -> str | None:
        pattern = self._pattern(params)
        if pattern is None:
            return None
        match = pattern.search(text)
        if match is None:
            return None
        return match.group(self._group) or None


class IndexedNameMatcher(RegexMatcher):
    """Matches a name that may be referenced through an array slot.

    Newer players call the transform as ``Xy[0](b)`` where
    ``var Xy=[realName]``.  Group 1 captures the array (or plain) name,
    group 2 the optional index.
    """

    def search(self, text: str, **params: str) -> str | None:
        pattern = self._pattern(params)
        if pattern is None:
            return None
        match = pattern.search(text)
        if match is None:
            return None

        name, index = match.group(1), match.group(2)
        if not index:
            return name or None

        array = re.search(
            r"var\s+%s\s*=\s*\[([^\]]+)\]" % re.escape(name),
            text,
        )
        if array is None:
            return None
        items = [item.strip() for item in array.group(1).split(",")]
        position = int(index)
        if position >= len(items):
            return None
        return items[position] or None


Matcher = RegexMatcher

_IDENT = r"[a-zA-Z0-9$_]"

DEFAULT_PATTERNS: dict[ExtractionRole, tuple[Matcher, ...]] = {
    ExtractionRole.PLAYER_SCRIPT_URL: (
        RegexMatcher(r'"jsUrl"\s*:\s*"([^"]+)"'),
        RegexMatcher(r'"PLAYER_JS_URL"\s*:\s*"([^"]+)"'),
        RegexMatcher(r'<script[^>]+src="([^"]+/base\.js)"'),
        RegexMatcher(r"(/s/player/[\w-]+/[\w./-]+/base\.js)"),
    ),
    ExtractionRole.TRANSFORM_FUNCTION_NAME: (
        IndexedNameMatcher(
            r'\.get\("n"\)\)&&\(b=(%s+)(?:\[(\d+)\])?\([a-zA-Z0-9]\)' % _IDENT
        ),
        IndexedNameMatcher(
            r'a\.[a-zA-Z]\s*&&\s*\([a-z]\s*=\s*a\.get\("n"\)\)\s*&&\s*'
            r"\([a-z]\s*=\s*(%s+)(?:\[(\d+)\])?\([a-z]\)" % _IDENT
        ),
        RegexMatcher(
            r"\b[cs]\s*&&\s*[adf]\.set\([^,]+\s*,\s*encodeURIComponent\s*\(\s*"
            r"(%s{2,})\s*\(" % _IDENT
        ),
        RegexMatcher(
            r'(?:^|[;,\s])(%s{2,})\s*=\s*function\s*\(\s*a\s*\)\s*\{\s*'
            r'a\s*=\s*a\.split\(\s*""\s*\)' % _IDENT
        ),
    ),
    ExtractionRole.FUNCTION_BODY: (
        RegexMatcher(
            r"(?<![\w$])%(name)s\s*=\s*function\s*\(\s*\w+\s*\)\s*\{(.*?)\}",
            flags=re.DOTALL,
        ),
        RegexMatcher(
            r"function\s+%(name)s\s*\(\s*\w+\s*\)\s*\{(.*?)\}",
            flags=re.DOTALL,
        ),
        RegexMatcher(
            r"(?<![\w$])%(name)s\s*=\s*\(?\s*\w+\s*\)?\s*=>\s*\{(.*?)\}",
            flags=re.DOTALL,
        ),
    ),
    ExtractionRole.HELPER_NAME: (
        RegexMatcher(r"(%s{2,})\.%s{2}\(\s*\w+\s*,\s*\d+\s*\)" % (_IDENT, _IDENT)),
        RegexMatcher(
            r"(%s{2,})\[\s*[\"'][\w$]+[\"']\s*\]\(\s*\w+\s*,\s*\d+\s*\)" % _IDENT
        ),
        RegexMatcher(r"(%s{2,})\.%s+\(\s*\w+\s*\)" % (_IDENT, _IDENT)),
        RegexMatcher(r"(%s{2,})\.%s+\(\s*\w+\s*,\s*\d+\s*\)" % (_IDENT, _IDENT)),
    ),
    ExtractionRole.HELPER_BODY: (
        RegexMatcher(r"var\s+%(name)s\s*=\s*\{(.*?)\};", flags=re.DOTALL),
        RegexMatcher(r"(?<![\w$.])%(name)s\s*=\s*\{(.*?)\};", flags=re.DOTALL),
        RegexMatcher(
            r"(?:let|const)\s+%(name)s\s*=\s*\{(.*?)\}\s*[;,]", flags=re.DOTALL
        ),
    ),
}


def locate(
    text: str,
    role: ExtractionRole,
    matchers: Sequence[Matcher] | None = None,
    **params: str,
) -> str:
    """Return the first capture produced by *role*'s matchers.

    Raises ``ExtractionFailed(role)`` when no matcher produces a capture.
    """
    candidates = DEFAULT_PATTERNS[role] if matchers is None else matchers
    for index, matcher in enumerate(candidates):
        value = matcher.search(text, **params)
        if value:
            log.debug("cipher_pattern_matched", role=role.value, index=index)
            return value
    log.warning("cipher_pattern_exhausted", role=role.value, tried=len(candidates))
    raise ExtractionFailed(role)


def extract_symbols(
    source: str,
    patterns: Mapping[ExtractionRole, Sequence[Matcher]] | None = None,
) -> ExtractedSymbols:
    """Locate transform name, body, helper name and helper body, in that order."""
    table = DEFAULT_PATTERNS if patterns is None else patterns

    def _get(role: ExtractionRole) -> Sequence[Matcher]:
        return table.get(role, DEFAULT_PATTERNS[role])

    function_name = locate(
        source,
        ExtractionRole.TRANSFORM_FUNCTION_NAME,
        _get(ExtractionRole.TRANSFORM_FUNCTION_NAME),
    )
    function_body = locate(
        source,
        ExtractionRole.FUNCTION_BODY,
        _get(ExtractionRole.FUNCTION_BODY),
        name=function_name,
    )
    helper_name = locate(
        function_body,
        ExtractionRole.HELPER_NAME,
        _get(ExtractionRole.HELPER_NAME),
    )
    helper_body = locate(
        source,
        ExtractionRole.HELPER_BODY,
        _get(ExtractionRole.HELPER_BODY),
        name=helper_name,
    )
    return ExtractedSymbols(
        function_name=function_name,
        function_body=function_body,
        helper_name=helper_name,
        helper_body=helper_body,
    )
