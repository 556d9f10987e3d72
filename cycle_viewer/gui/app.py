from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import logging

import ipywidgets as w
from IPython.display import display

from cycle_viewer.config import ViewerConfig
from cycle_viewer.gui.charts import ChartSet
from cycle_viewer.gui.log_view import HtmlLog
from cycle_viewer.presentation.adapter import (
    CHART_VIEWS,
    escape_html,
    render_meta_html,
    render_table_html,
)
from cycle_viewer.store.dataset_store import BatchResult, DatasetStore, set_collation_locale


logger = logging.getLogger(__name__)

# Keep a single active GUI instance per kernel to avoid duplicated callbacks / stacked widgets.
_ACTIVE_GUI: Optional["ViewerApp"] = None


def _uploaded_files(value: Any) -> List[Tuple[str, bytes]]:
    """Normalize ``FileUpload.value`` (ipywidgets 8: tuple of dicts) to (name, bytes) pairs."""
    if not value:
        return []
    if isinstance(value, dict):  # ipywidgets 7: {name: {"metadata": ..., "content": ...}}
        items = [dict(v, name=k) for k, v in value.items()]
    else:
        items = list(value)
    out = []
    for item in items:
        name = str(item.get("name") or item.get("metadata", {}).get("name", ""))
        out.append((name, bytes(item["content"])))
    return out


class ViewerApp:
    """
    Multi-file viewer: upload CSV exports, pick one, inspect charts / table / metadata.

    Layout:
      - top row: file upload, file dropdown, status
      - tabs: Charts (corrected, delta, relative, raw), Table, Metadata
      - log panel (package log records are routed into it)
    """

    def __init__(self, config: Optional[ViewerConfig] = None, store: Optional[DatasetStore] = None) -> None:
        self.config = config or ViewerConfig()
        self.store = store or DatasetStore(self.config.parser)
        self.charts = ChartSet(self.config)

        self.log = HtmlLog(title="Log", height_px=self.config.log_height_px, max_entries=self.config.log_max_entries)
        self.log.attach("cycle_viewer")
        if self.config.collation_locale:
            set_collation_locale(self.config.collation_locale)

        self.upload = w.FileUpload(accept=".csv", multiple=True, description="Open CSV")
        self.dd_file = w.Dropdown(options=[], description="File", disabled=True, layout=w.Layout(width="360px"))
        self.status = w.HTML()

        self.chart_outputs: Dict[str, w.Output] = {
            v: w.Output(layout=w.Layout(border="1px solid #ddd", padding="6px")) for v in CHART_VIEWS
        }
        self.table_html = w.HTML()
        self.meta_html = w.HTML()

        self.upload.observe(self._on_upload, names="value")
        self.dd_file.observe(self._on_select, names="value")

        charts_box = w.VBox([self.chart_outputs[v] for v in CHART_VIEWS])
        self.tabs = w.Tab(children=[charts_box, self.table_html, self.meta_html])
        for i, title in enumerate(("Charts", "Table", "Metadata")):
            self.tabs.set_title(i, title)

        top = w.HBox([self.upload, self.dd_file, self.status])
        self.widget = w.VBox([top, self.tabs, self.log.panel])
        self._set_status(self._idle_status())

    # -------------------------
    # Status
    # -------------------------
    def _set_status(self, s: str) -> None:
        self.status.value = f"<b>Status:</b> {escape_html(s)}"

    def _idle_status(self) -> str:
        st = self.store.status
        if st == "idle":
            return "no files loaded yet"
        if st == "empty":
            return "no valid files loaded"
        return f"{len(self.store)} file(s) loaded"

    # -------------------------
    # Loading
    # -------------------------
    def load_files(self, files: Sequence[Tuple[str, Union[str, bytes]]]) -> Optional[BatchResult]:
        """Load ``(filename, text or bytes)`` pairs as one batch and show the first file."""
        if not files:
            return None
        if self.store.busy:
            self.log.warning("WARNING: a load is already running; request ignored.")
            return None

        self._set_status("Loading...")
        try:
            result = self.store.load_batch(files)
            self._refresh_dropdown()
            if self.store.is_empty():
                self._clear_views()
                self._set_status("no valid files loaded")
            else:
                self.show(self.store.selected)
                self._set_status(f"Completed ({len(self.store)} file(s))")
            return result
        except Exception as exc:
            self.log.error(f"ERROR: {exc!r}")
            self._set_status(self._idle_status())
            return None

    def _on_upload(self, change) -> None:
        # bytes go to the store as-is; undecodable files become per-file warnings there
        self.load_files(_uploaded_files(change.get("new")))

    # -------------------------
    # Selection / rendering
    # -------------------------
    def _refresh_dropdown(self) -> None:
        names = self.store.list_filenames()
        self.dd_file.unobserve(self._on_select, names="value")
        try:
            self.dd_file.options = names
            self.dd_file.value = self.store.selected if names else None
            self.dd_file.disabled = not names
        finally:
            self.dd_file.observe(self._on_select, names="value")

    def _on_select(self, change) -> None:
        name = change.get("new")
        if name:
            self.show(name)

    def show(self, filename: Optional[str]) -> bool:
        """Render ``filename``; unknown names are ignored and return False."""
        if filename is None:
            return False
        entry = self.store.select(filename)
        if entry is None:
            return False
        try:
            handles = self.charts.draw_all(entry.dataset)
            for h in handles:
                out = self.chart_outputs[h.view]
                with out:
                    out.clear_output(wait=True)
                    display(h.fig)
            self.table_html.value = render_table_html(entry.dataset)
            self.meta_html.value = render_meta_html(entry.meta)
            logger.debug("Rendered '%s'", filename)
        except Exception as exc:
            self.log.error(f"ERROR: rendering {filename}: {exc!r}")
            return False
        return True

    def _clear_views(self) -> None:
        self.charts.dispose_all()
        for out in self.chart_outputs.values():
            out.clear_output()
        self.table_html.value = ""
        self.meta_html.value = ""

    def close(self) -> None:
        self.log.detach()
        self.charts.dispose_all()
        self.widget.close()


def build_gui(config: Optional[ViewerConfig] = None) -> w.Widget:
    """
    Build the viewer (Jupyter / VSCode notebooks).

    Closes the previous instance created from this module, so re-running the cell
    does not stack callbacks or log handlers.
    """
    global _ACTIVE_GUI

    if _ACTIVE_GUI is not None:
        try:
            _ACTIVE_GUI.close()
        except Exception:
            pass
        _ACTIVE_GUI = None

    app = ViewerApp(config)
    _ACTIVE_GUI = app
    return app.widget


__all__ = ["ViewerApp", "build_gui"]
