from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class Series:
    """
    One named channel aligned to the cycle axis of its section.

    Notes
    - values is always float64; malformed fields are stored as NaN.
    - the name is kept verbatim (never parsed as a number).
    """
    name: str
    values: np.ndarray

    @property
    def n_values(self) -> int:
        return int(self.values.size)


@dataclass(frozen=True)
class Section:
    """
    A named block ("Raw Data" / "Corrected Data") of one file.

    cycles: x-axis shared by every series of the section.
    series: channels in file order.
    warnings: row-shape fix-ups applied while parsing (padding / truncation).
    """
    cycles: np.ndarray
    series: Tuple[Series, ...]
    warnings: Tuple[str, ...] = ()

    @property
    def n_cycles(self) -> int:
        return int(self.cycles.size)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(s.name for s in self.series)


@dataclass(frozen=True)
class ParsedFile:
    """Parser output. A missing or empty section is None, never an empty Section."""
    meta: Dict[str, str] = field(default_factory=dict)
    raw: Optional[Section] = None
    corrected: Optional[Section] = None

    @property
    def missing_sections(self) -> Tuple[str, ...]:
        missing = []
        if self.raw is None:
            missing.append("raw")
        if self.corrected is None:
            missing.append("corrected")
        return tuple(missing)

    @property
    def warnings(self) -> Tuple[str, ...]:
        out: Tuple[str, ...] = ()
        for sec in (self.raw, self.corrected):
            if sec is not None:
                out += sec.warnings
        return out


@dataclass(frozen=True)
class Dataset:
    """
    Everything the viewer plots for one file.

    relative and delta carry the raw series names in raw order.
    """
    cycles: np.ndarray
    corrected: Section
    raw: Section
    relative: Tuple[Series, ...]
    delta: Tuple[Series, ...]
