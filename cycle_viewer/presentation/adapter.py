"""
Presentation adapter -- dataset to chart series, table rows and HTML.

Everything here is read-only with respect to the dataset: arrays are borrowed,
never modified. Every string that ends up inside markup (filenames, metadata
keys/values, series names, numbers) goes through :func:`escape_html`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Mapping, Optional, Sequence, Tuple
import html
import math

import numpy as np
import pandas as pd

from cycle_viewer.config import DEFAULT_SERIES_COLORS
from cycle_viewer.models.series import Dataset, Series


ChartView = Literal["corrected", "raw", "relative", "delta"]

# Draw order of the four chart panes.
CHART_VIEWS: Tuple[ChartView, ...] = ("corrected", "delta", "relative", "raw")

VIEW_TITLES: Dict[str, str] = {
    "corrected": "Corrected Data",
    "delta": "Delta (value - first value)",
    "relative": "Relative (value / first value)",
    "raw": "Raw Data",
}


@dataclass(frozen=True)
class ChartSeries:
    name: str
    values: np.ndarray


@dataclass(frozen=True)
class TableRow:
    label: str
    values: np.ndarray


# --------------------------------------------------------------------------------------
# Text helpers
# --------------------------------------------------------------------------------------

def escape_html(text: object) -> str:
    """Escape the five reserved markup characters: & < > " '."""
    return html.escape(str(text), quote=True)


def format_number(value: float) -> str:
    """Shortest text form of a float: 3.0 -> '3', NaN -> 'NaN', inf -> 'Infinity'."""
    v = float(value)
    if math.isnan(v):
        return "NaN"
    if math.isinf(v):
        return "Infinity" if v > 0 else "-Infinity"
    if v.is_integer() and abs(v) < 1e21:
        return str(int(v))
    return repr(v)


def format_tooltip(name: str, value: float, decimals: int = 3) -> str:
    """Hover label of one point, e.g. ``'R: 1.000'``."""
    v = float(value)
    if math.isnan(v):
        return f"{name}: NaN"
    return f"{name}: {v:.{int(decimals)}f}"


def series_color(name: str, colors: Optional[Mapping[str, str]] = None, fallback: str = "black") -> str:
    table = DEFAULT_SERIES_COLORS if colors is None else colors
    return table.get(name, fallback)


# --------------------------------------------------------------------------------------
# Charts
# --------------------------------------------------------------------------------------

def _view_series(dataset: Dataset, view: str) -> Sequence[Series]:
    if view == "corrected":
        return dataset.corrected.series
    if view == "raw":
        return dataset.raw.series
    if view == "relative":
        return dataset.relative
    if view == "delta":
        return dataset.delta
    raise KeyError(f"unknown chart view '{view}' (expected one of {', '.join(CHART_VIEWS)})")


def to_chart_series(dataset: Dataset, view: ChartView) -> Tuple[List[str], List[ChartSeries]]:
    """
    Map one view of ``dataset`` to x labels plus one line per series.

    Labels always come from ``dataset.cycles`` (the raw cycle axis), for every view.
    """
    series = _view_series(dataset, view)
    labels = [format_number(c) for c in dataset.cycles]
    return labels, [ChartSeries(name=s.name, values=s.values) for s in series]


# --------------------------------------------------------------------------------------
# Tables
# --------------------------------------------------------------------------------------

def table_header(dataset: Dataset) -> List[str]:
    return ["Channel"] + [format_number(c) for c in dataset.cycles]


def to_table_rows(dataset: Dataset) -> List[TableRow]:
    """Corrected rows ``'<name> (Corrected)'`` first, then raw rows ``'<name> (Raw)'``."""
    rows = [TableRow(label=f"{s.name} (Corrected)", values=s.values) for s in dataset.corrected.series]
    rows += [TableRow(label=f"{s.name} (Raw)", values=s.values) for s in dataset.raw.series]
    return rows


def to_table_frame(dataset: Dataset) -> pd.DataFrame:
    """Combined table as a DataFrame (index = row label, columns = cycle labels).

    Rows are padded with NaN or cut to the length of the raw cycle axis.
    """
    header = table_header(dataset)[1:]
    rows = to_table_rows(dataset)
    data = [list(r.values) + [np.nan] * (len(header) - len(r.values)) for r in rows]
    return pd.DataFrame(
        [d[: len(header)] for d in data],
        index=pd.Index([r.label for r in rows], name="Channel"),
        columns=header,
        dtype=np.float64,
    )


def to_meta_rows(meta: Mapping[str, str]) -> List[Tuple[str, str]]:
    return [(k, v) for k, v in meta.items()]


# --------------------------------------------------------------------------------------
# HTML rendering
# --------------------------------------------------------------------------------------

def render_table_html(dataset: Dataset) -> str:
    head = "".join(f"<th>{escape_html(h)}</th>" for h in table_header(dataset))
    parts = [f"<table><tr>{head}</tr>"]
    for row in to_table_rows(dataset):
        cells = "".join(f"<td>{escape_html(format_number(v))}</td>" for v in row.values)
        parts.append(f"<tr><td>{escape_html(row.label)}</td>{cells}</tr>")
    parts.append("</table>")
    return "".join(parts)


def render_meta_html(meta: Mapping[str, str]) -> str:
    rows = "".join(
        f"<tr><td>{escape_html(k)}</td><td>{escape_html(v)}</td></tr>" for k, v in to_meta_rows(meta)
    )
    return f"<table>{rows}</table>"
