"""Value objects produced by the player-script cipher pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PlayerScript:
    """Fetched player script text and the URL it came from."""

    url: str
    source: str


@dataclass(frozen=True)
class ExtractedSymbols:
    """Named sub-expressions located inside the player script."""

    function_name: str
    function_body: str
    helper_name: str
    helper_body: str


@dataclass(frozen=True)
class Instruction:
    """A single ``helper.method(a, argument)`` call, in source order."""

    mnemonic: str
    argument: int
