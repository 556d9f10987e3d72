"""Derived views.

Analysis consumes a :class:`~cycle_viewer.models.series.ParsedFile` and produces a
:class:`~cycle_viewer.models.series.Dataset` with the relative and delta views of
every raw series. Inputs are never modified.
"""

from .derive import compute, delta_series, relative_series

__all__ = [
    "compute",
    "delta_series",
    "relative_series",
]
