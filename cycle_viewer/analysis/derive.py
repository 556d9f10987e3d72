from __future__ import annotations

from typing import Tuple

import numpy as np

from cycle_viewer.models.series import Dataset, ParsedFile, Series


def _first_value(series: Series) -> float:
    if series.values.size == 0:
        raise ValueError(f"series '{series.name}' has no values; cannot derive relative/delta views")
    return float(series.values[0])


def relative_series(series: Series) -> Series:
    """Every value divided by the first value. A zero first value gives inf / NaN (IEEE)."""
    v0 = _first_value(series)
    with np.errstate(divide="ignore", invalid="ignore"):
        values = series.values / v0
    return Series(name=series.name, values=values)


def delta_series(series: Series) -> Series:
    """Every value minus the first value."""
    v0 = _first_value(series)
    return Series(name=series.name, values=series.values - v0)


def compute(parsed: ParsedFile) -> Dataset:
    """Build the plotted dataset of one file.

    Parameters
    ----------
    parsed:
        Parser output. Both the raw and the corrected section must be present.

    Returns
    -------
    Dataset
        ``cycles`` copied from the raw section; ``relative`` and ``delta`` follow the
        raw series order and names.

    Raises
    ------
    ValueError
        If a section is missing or a raw series is empty.
    """
    if parsed.missing_sections:
        raise ValueError(f"missing section(s): {', '.join(parsed.missing_sections)}")
    raw = parsed.raw
    corrected = parsed.corrected

    relative: Tuple[Series, ...] = tuple(relative_series(s) for s in raw.series)
    delta: Tuple[Series, ...] = tuple(delta_series(s) for s in raw.series)

    return Dataset(
        cycles=raw.cycles.copy(),
        corrected=corrected,
        raw=raw,
        relative=relative,
        delta=delta,
    )
