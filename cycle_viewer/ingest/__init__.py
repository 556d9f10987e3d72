"""Ingest package - CSV section parsing.

This package handles:
- Splitting an export into trimmed lines
- Extracting ``key,value`` metadata lines
- Parsing the "Raw Data" and "Corrected Data" sections into cycle axes and series

Key classes:
- CycleCsvReader: reads exports from disk or uploaded bytes

Design principle:
- Parsing is lenient: malformed numbers become NaN, absent sections become None
- Section presence is checked downstream (deriver / store), not here
"""

from .section_parser import (
    CycleCsvReader,
    extract_metadata,
    parse_section,
    parse_text,
    split_lines,
)

__all__ = [
    "CycleCsvReader",
    "extract_metadata",
    "parse_section",
    "parse_text",
    "split_lines",
]
