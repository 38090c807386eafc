from .cipher import ExtractedSymbols, Instruction, PlayerScript
from .media import (
    AudioCodec,
    CandidateFormat,
    Playlist,
    SelectionResult,
    SelectionTier,
    Song,
    Uploader,
)

__all__ = [
    "AudioCodec",
    "CandidateFormat",
    "ExtractedSymbols",
    "Instruction",
    "PlayerScript",
    "Playlist",
    "SelectionResult",
    "SelectionTier",
    "Song",
    "Uploader",
]
