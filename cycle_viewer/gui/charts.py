"""
Chart handles for the four dataset views.

A :class:`ChartSet` owns every matplotlib figure it created. Each redraw first
disposes the previous figures (closing them and dropping their event
connections), so repeated selections never accumulate open figures.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from cycle_viewer.config import ViewerConfig
from cycle_viewer.models.series import Dataset
from cycle_viewer.presentation.adapter import (
    CHART_VIEWS,
    VIEW_TITLES,
    ChartView,
    format_tooltip,
    series_color,
    to_chart_series,
)


def _get_pyplot():
    """Import pyplot lazily (backend must already be configured)."""
    import matplotlib.pyplot as plt  # late import by design
    return plt


def legend_label(name: str) -> str:
    """Series name as a literal legend label (no mathtext, not hidden by a leading '_')."""
    label = name.replace("$", r"\$")
    if label.startswith("_"):
        label = " " + label
    return label


@dataclass
class ChartHandle:
    view: str
    fig: object
    hover_cid: Optional[int] = None

    @property
    def n_lines(self) -> int:
        return len(self.fig.axes[0].get_lines()) if self.fig.axes else 0


def _attach_tooltip(fig, ax, names: Dict[object, str], decimals: int) -> int:
    """Show ``'<name>: <value>'`` next to the point under the mouse (``names`` maps line -> series name)."""
    annot = ax.annotate(
        "",
        xy=(0, 0),
        xytext=(10, 10),
        textcoords="offset points",
        bbox=dict(boxstyle="round", fc="white", alpha=0.9),
    )
    annot.set_visible(False)

    def _on_move(event) -> None:
        if event.inaxes is not ax:
            if annot.get_visible():
                annot.set_visible(False)
                fig.canvas.draw_idle()
            return
        for line, name in names.items():
            hit, info = line.contains(event)
            if not hit or not len(info.get("ind", ())):
                continue
            idx = int(info["ind"][0])
            x, y = line.get_data()
            annot.xy = (x[idx], y[idx])
            annot.set_text(format_tooltip(name, y[idx], decimals))
            annot.set_visible(True)
            fig.canvas.draw_idle()
            return
        if annot.get_visible():
            annot.set_visible(False)
            fig.canvas.draw_idle()

    return fig.canvas.mpl_connect("motion_notify_event", _on_move)


class ChartSet:
    """Owned collection of active chart handles."""

    def __init__(self, config: Optional[ViewerConfig] = None) -> None:
        self.config = config or ViewerConfig()
        self._handles: List[ChartHandle] = []

    @property
    def handles(self) -> List[ChartHandle]:
        return list(self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    def dispose_all(self) -> None:
        plt = _get_pyplot()
        for h in self._handles:
            if h.hover_cid is not None:
                h.fig.canvas.mpl_disconnect(h.hover_cid)
            plt.close(h.fig)
        self._handles = []

    def draw(self, dataset: Dataset, view: ChartView) -> ChartHandle:
        """Create one figure for ``view`` (one line per series against the cycle axis)."""
        plt = _get_pyplot()
        cfg = self.config
        labels, series = to_chart_series(dataset, view)

        fig = plt.figure(figsize=cfg.figure_size)
        ax = fig.add_subplot(1, 1, 1)
        names = {}
        for s in series:
            x = np.arange(s.values.size)
            (line,) = ax.plot(
                x,
                s.values,
                label=legend_label(s.name),
                color=series_color(s.name, cfg.series_colors, cfg.fallback_color),
                marker="o",
                markersize=3,
            )
            names[line] = s.name
        ax.set_xticks(np.arange(len(labels)))
        ax.set_xticklabels(labels)
        ax.set_xlabel("Cycle")
        ax.set_title(VIEW_TITLES[view])
        ax.grid(True)
        if series:
            ax.legend(loc="best")

        handle = ChartHandle(view=view, fig=fig, hover_cid=_attach_tooltip(fig, ax, names, cfg.tooltip_decimals))
        self._handles.append(handle)
        return handle

    def draw_all(self, dataset: Dataset, views: Sequence[ChartView] = CHART_VIEWS) -> List[ChartHandle]:
        self.dispose_all()
        return [self.draw(dataset, v) for v in views]
