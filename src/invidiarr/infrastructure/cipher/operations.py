"""Operation table built from the player's helper object.

The helper object is a literal such as::

    var Xy={AB:function(a){a.reverse()},
            cd:function(a,b){a.splice(0,b)},
            Ef:function(a,b){var c=a[0];a[0]=a[b%a.length];a[b%a.length]=c}};

Each entry is classified by characteristic source fragments, not by
parsing JavaScript.  Entries with an unknown shape are left out of the
table; the transform skips calls to them.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType

import structlog

from invidiarr.domain.exceptions import ExtractionFailed

from .patterns import ExtractionRole

log = structlog.get_logger(__name__)

Operation = Callable[[list[str], int], None]


def reverse(seq: list[str], _argument: int = 0) -> None:
    """Reverse *seq* in place."""
    seq.reverse()


def drop_prefix(seq: list[str], count: int) -> None:
    """Remove the first *count* elements (``a.splice(0, b)``)."""
    del seq[:count]


def swap_at_offset(seq: list[str], offset: int) -> None:
    """Exchange element 0 with element ``offset % len(seq)``."""
    if not seq:
        return
    index = offset % len(seq)
    seq[0], seq[index] = seq[index], seq[0]


def rotate_left(seq: list[str], count: int) -> None:
    """Move the first element to the end, *count* times."""
    if not seq:
        return
    shift = count % len(seq)
    seq[:] = seq[shift:] + seq[:shift]


# Entry heads: ``AB:function(``, ``"AB":function(``, ``AB:(a,b)=>``.
_ENTRY_HEAD_RE = re.compile(
    r"(?:^|[,{\s])([\"']?)([\w$]+)\1\s*:\s*(?=function\b|\(\s*[\w$]+)"
)

_SWAP_RE = re.compile(
    r"var\s+[\w$]+\s*=\s*[\w$]+\[0\];\s*[\w$]+\[0\]\s*=\s*"
    r"[\w$]+\[[\w$]+\s*%\s*[\w$]+\.length\]"
)
_ROTATE_RE = re.compile(r"\.push\(\s*[\w$]+\.shift\(\s*\)\s*\)")
_NESTED_SPLICE_SWAP_RE = re.compile(r"\.splice\(0,1,[\w$]+\.splice\(")


def split_entries(helper_body: str) -> Iterator[tuple[str, str]]:
    """Yield ``(name, implementation)`` pairs from a helper object body.

    Entries are cut at their ``name:function`` heads, so ``},`` sequences
    inside an implementation (or repeated separators) do not split it.
    """
    heads = list(_ENTRY_HEAD_RE.finditer(helper_body))
    for i, head in enumerate(heads):
        end = heads[i + 1].start() if i + 1 < len(heads) else len(helper_body)
        implementation = helper_body[head.end() : end].rstrip(" \t\r\n,")
        yield head.group(2), implementation


def classify(implementation: str) -> Operation | None:
    """Map an implementation fragment to one of the known primitives."""
    fragment = re.sub(r"\s+", "", implementation).lower()
    if "reverse" in fragment:
        return reverse
    if _NESTED_SPLICE_SWAP_RE.search(fragment):
        return swap_at_offset
    if _SWAP_RE.search(implementation):
        return swap_at_offset
    if _ROTATE_RE.search(implementation):
        return rotate_left
    if "splice" in fragment:
        return drop_prefix
    return None


def build_operation_table(helper_body: str) -> Mapping[str, Operation]:
    """Build a read-only mnemonic -> operation table.

    Raises ``ExtractionFailed`` when not a single entry was recognised;
    a partially recognised helper is accepted.
    """
    table: dict[str, Operation] = {}
    skipped: list[str] = []
    for name, implementation in split_entries(helper_body):
        operation = classify(implementation)
        if operation is None:
            skipped.append(name)
            continue
        table[name] = operation

    if skipped:
        log.debug("cipher_operations_skipped", names=skipped)
    if not table:
        raise ExtractionFailed(ExtractionRole.HELPER_BODY)

    log.debug(
        "cipher_operations_built",
        operations={name: op.__name__ for name, op in table.items()},
    )
    return MappingProxyType(table)
