from .operations import Operation, build_operation_table
from .patterns import (
    DEFAULT_PATTERNS,
    ExtractionRole,
    IndexedNameMatcher,
    RegexMatcher,
    extract_symbols,
    locate,
)
from .session import CipherSession
from .transform import Transform, compile_transform, parse_instructions

__all__ = [
    "DEFAULT_PATTERNS",
    "CipherSession",
    "ExtractionRole",
    "IndexedNameMatcher",
    "Operation",
    "RegexMatcher",
    "Transform",
    "build_operation_table",
    "compile_transform",
    "extract_symbols",
    "locate",
    "parse_instructions",
]
