"""Viewer configuration.

All settings live in frozen dataclasses. Override field-by-field with
``dataclasses.replace()``::

    cfg = replace(ViewerConfig(), tooltip_decimals=4)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class ParserConfig:
    """
    Reader configuration for cycle CSV exports.

    raw_section / corrected_section:
      exact (case-sensitive) header lines that open each section.
    terminator_pattern:
      regular expression matched at line start; a matching line closes the section.
    encoding:
      text encoding for files read from disk or uploaded as bytes. "utf-8-sig"
      accepts files with and without a byte-order mark.
    """
    raw_section: str = "Raw Data"
    corrected_section: str = "Corrected Data"
    terminator_pattern: str = r"^\*{3}"
    encoding: str = "utf-8-sig"


DEFAULT_SERIES_COLORS: Dict[str, str] = {
    "R": "#ff0000e6",
    "G": "#009600e6",
    "B": "#0000ffe6",
}


@dataclass(frozen=True)
class ViewerConfig:
    """
    GUI configuration.

    series_colors: line colour per series name; other names use fallback_color.
    tooltip_decimals: digits shown in the hover label ("R: 1.000").
    figure_size: matplotlib figure size in inches for each chart view.
    log_max_entries / log_height_px: HtmlLog bounds.
    collation_locale: LC_COLLATE applied when the viewer is built (e.g. "ja_JP.UTF-8"),
      so the file list sorts for the display language. None keeps the process locale.
    """
    parser: ParserConfig = field(default_factory=ParserConfig)
    series_colors: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SERIES_COLORS))
    fallback_color: str = "black"
    tooltip_decimals: int = 3
    figure_size: Tuple[float, float] = (8.0, 3.6)
    log_max_entries: int = 500
    log_height_px: int = 180
    collation_locale: Optional[str] = None
