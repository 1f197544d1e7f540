"""Parsing utilities for locating call sites."""

from parse.treesitter_calls import (
    ExtractionError,
    ExtractionResult,
    extract_call_sites,
    read_source,
)

__all__ = [
    "ExtractionError",
    "ExtractionResult",
    "extract_call_sites",
    "read_source",
]
