from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from cycle_viewer.models.series import Dataset, ParsedFile


@dataclass(frozen=True)
class StoreEntry:
    """One successfully loaded file: the parser output and the derived dataset."""
    filename: str
    parsed: ParsedFile
    dataset: Dataset

    @property
    def meta(self) -> Dict[str, str]:
        return self.parsed.meta

    @property
    def warnings(self) -> Tuple[str, ...]:
        return self.parsed.warnings
