from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Pattern, Sequence, Union
import re

import numpy as np

from cycle_viewer.config import ParserConfig
from cycle_viewer.models.series import ParsedFile, Section, Series


_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_LEADING_DIGIT = re.compile(r"^[0-9]")
_DEFAULT_TERMINATOR = re.compile(ParserConfig().terminator_pattern)


def split_lines(text: str) -> List[str]:
    """Split on LF, CRLF or a bare CR and strip every line. A leading byte-order mark is dropped."""
    if text.startswith("\ufeff"):
        text = text[1:]
    return [ln.strip() for ln in _LINE_BREAK.split(text)]


def _to_float(field: str) -> float:
    """Lenient numeric conversion: anything that is not a plain number becomes NaN."""
    s = field.strip()
    if not s or "_" in s:
        return float("nan")
    try:
        return float(s)
    except ValueError:
        return float("nan")


def _to_floats(fields: Sequence[str]) -> np.ndarray:
    return np.array([_to_float(f) for f in fields], dtype=np.float64)


def extract_metadata(lines: Sequence[str]) -> Dict[str, str]:
    """
    Collect ``key,value`` pairs from every comma-containing line that does not
    start with a digit.

    The scan covers the whole file, section bodies included, so a series row such
    as ``R,10,20,30`` also yields ``{"R": "10"}``. Only the second field is kept as
    the value. Later lines overwrite earlier ones with the same key.
    """
    meta: Dict[str, str] = {}
    for line in lines:
        if "," not in line or _LEADING_DIGIT.match(line):
            continue
        fields = line.split(",")
        key = fields[0].strip()
        value = fields[1].strip()
        if key and value:
            meta[key] = value
    return meta


def _fit_row(name: str, values: np.ndarray, n_cycles: int, warnings: List[str]) -> np.ndarray:
    n = int(values.size)
    if n == n_cycles:
        return values
    if n < n_cycles:
        warnings.append(f"series '{name}': {n} values for {n_cycles} cycles; padded with NaN")
        return np.concatenate([values, np.full(n_cycles - n, np.nan)])
    warnings.append(f"series '{name}': {n} values for {n_cycles} cycles; dropped {n - n_cycles} extra value(s)")
    return values[:n_cycles]


def parse_section(
    lines: Sequence[str],
    name: str,
    terminator: Optional[Pattern[str]] = None,
) -> Optional[Section]:
    """
    Parse the block opened by the first line exactly equal to ``name``.

    Returns None when the header line is absent or when no body line follows it
    before the terminator / end of input. Blank lines inside the block are skipped.
    """
    term = terminator or _DEFAULT_TERMINATOR
    lines = list(lines)
    try:
        start = lines.index(name)
    except ValueError:
        return None

    block: List[str] = []
    for line in lines[start + 1:]:
        if term.match(line):
            break
        if line:
            block.append(line)

    if not block:
        return None

    cycles = _to_floats(block[0].split(",")[1:])
    n_cycles = int(cycles.size)

    warnings: List[str] = []
    series: List[Series] = []
    for row in block[1:]:
        fields = row.split(",")
        values = _fit_row(fields[0], _to_floats(fields[1:]), n_cycles, warnings)
        series.append(Series(name=fields[0], values=values))

    return Section(
        cycles=cycles,
        series=tuple(series),
        warnings=tuple(f"{name}: {m}" for m in warnings),
    )


def parse_text(text: str, config: Optional[ParserConfig] = None) -> ParsedFile:
    """Parse one export into metadata plus the raw and corrected sections."""
    cfg = config or ParserConfig()
    term = re.compile(cfg.terminator_pattern)
    lines = split_lines(text)
    return ParsedFile(
        meta=extract_metadata(lines),
        raw=parse_section(lines, cfg.raw_section, term),
        corrected=parse_section(lines, cfg.corrected_section, term),
    )


class CycleCsvReader:
    """
    Reads cycle CSV exports from disk or from uploaded bytes.

    The reader never validates section presence; that is the deriver's precondition
    and the store's job to report.
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()

    def parse(self, text: str) -> ParsedFile:
        return parse_text(text, self.config)

    def parse_bytes(self, data: Union[bytes, bytearray, memoryview]) -> ParsedFile:
        return self.parse(self.decode(data))

    def decode(self, data: Union[bytes, bytearray, memoryview]) -> str:
        return bytes(data).decode(self.config.encoding)

    def read_text(self, path: Union[str, Path]) -> str:
        p = Path(path).expanduser()
        return p.read_text(encoding=self.config.encoding)

    def read(self, path: Union[str, Path]) -> ParsedFile:
        return self.parse(self.read_text(path))
