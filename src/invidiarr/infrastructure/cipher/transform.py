"""Compiles the transform function body into a callable."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

import structlog

from invidiarr.domain.entities.cipher import Instruction
from invidiarr.domain.exceptions import ExtractionFailed

from .operations import Operation
from .patterns import ExtractionRole

log = structlog.get_logger(__name__)

# ``Xy.ab(a,3)`` or ``Xy["ab"](a,3)``
_CALL_RE = re.compile(
    r"[\w$]+(?:\.([\w$]+)|\[\s*[\"']([\w$]+)[\"']\s*\])"
    r"\(\s*[\w$]+\s*,\s*(\d+)\s*\)"
)


def parse_instructions(function_body: str) -> tuple[Instruction, ...]:
    """Return every helper call in *function_body*, in textual order."""
    return tuple(
        Instruction(mnemonic=match.group(1) or match.group(2), argument=int(match.group(3)))
        for match in _CALL_RE.finditer(function_body)
    )


class Transform:
    """Pure ``str -> str`` function over a fixed table and instruction list.

    Every call works on its own character list, so one instance can be
    shared by any number of concurrent callers.
    """

    __slots__ = ("_instructions", "_table")

    def __init__(
        self,
        table: Mapping[str, Operation],
        instructions: Sequence[Instruction],
    ) -> None:
        self._table = table
        self._instructions = tuple(instructions)

    @property
    def instructions(self) -> tuple[Instruction, ...]:
        return self._instructions

    def __call__(self, value: str) -> str:
        seq = list(value)
        for instruction in self._instructions:
            operation = self._table.get(instruction.mnemonic)
            if operation is None:
                continue
            operation(seq, instruction.argument)
        return "".join(seq)

    def __repr__(self) -> str:
        return f"Transform(steps={len(self._instructions)})"


def compile_transform(
    function_body: str,
    table: Mapping[str, Operation],
) -> Transform:
    """Parse *function_body* and bind its calls to *table*.

    Raises ``ExtractionFailed`` when the body contains no helper calls.
    """
    instructions = parse_instructions(function_body)
    if not instructions:
        raise ExtractionFailed(ExtractionRole.FUNCTION_BODY)

    unknown = sorted({i.mnemonic for i in instructions if i.mnemonic not in table})
    if unknown:
        # Calls to these are skipped at runtime
        log.warning("cipher_unknown_operations", mnemonics=unknown)

    log.debug("cipher_transform_compiled", steps=len(instructions))
    return Transform(table, instructions)
