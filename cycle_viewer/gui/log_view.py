from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import List, Literal, Optional

import ipywidgets as w


Level = Literal["info", "warning", "error"]


@dataclass
class _Entry:
    level: Level
    message: str
    count: int = 1


class HtmlLog:
    """
    Viewer log rendered into a single HTML widget.

    Features:
      - severity coloring: warnings in orange, errors in red
      - coalescing of consecutive identical messages (shows xN)
      - bounded history (drops oldest entries beyond max_entries)
      - every message is HTML-escaped (filenames and CSV content are untrusted)
      - :meth:`attach` forwards ``logging`` records of the package into the view
    """

    def __init__(self, *, title: str | None = None, height_px: int = 180, max_entries: int = 500) -> None:
        self._entries: List[_Entry] = []
        self._height_px = int(height_px)
        self._max_entries = int(max_entries)
        self._handler: Optional[HtmlLogHandler] = None
        self.widget = w.HTML()
        if title:
            self.panel = w.VBox([w.HTML(f"<b>{html.escape(str(title))}</b>"), self.widget])
        else:
            self.panel = self.widget
        self.clear()

    @property
    def messages(self) -> List[str]:
        return [e.message for e in self._entries]

    def clear(self) -> None:
        self._entries.clear()
        self._render()

    def info(self, message: str) -> None:
        self._add("info", message)

    def warning(self, message: str) -> None:
        self._add("warning", message)

    def error(self, message: str) -> None:
        self._add("error", message)

    def attach(self, logger_name: str = "cycle_viewer", level: int = logging.INFO) -> "HtmlLogHandler":
        """Route records of ``logger_name`` (and its children) into this log."""
        self.detach()
        handler = HtmlLogHandler(self, level=level)
        lg = logging.getLogger(logger_name)
        lg.addHandler(handler)
        if lg.level == logging.NOTSET or lg.level > level:
            lg.setLevel(level)
        self._handler = handler
        handler.logger_name = logger_name
        return handler

    def detach(self) -> None:
        if self._handler is None:
            return
        logging.getLogger(self._handler.logger_name).removeHandler(self._handler)
        self._handler = None

    # -------------------------
    # Internals
    # -------------------------
    def _add(self, level: Level, message: str) -> None:
        msg = "" if message is None else str(message)

        if self._entries and self._entries[-1].level == level and self._entries[-1].message == msg:
            self._entries[-1].count += 1
            self._render()
            return

        self._entries.append(_Entry(level=level, message=msg, count=1))
        if len(self._entries) > self._max_entries:
            self._entries = self._entries[-self._max_entries :]
        self._render()

    def _render(self) -> None:
        def color(level: Level) -> str:
            if level == "error":
                return "#b00020"
            if level == "warning":
                return "#b26a00"
            return "#222222"

        rows = []
        for e in self._entries:
            suffix = f" (x{e.count})" if e.count > 1 else ""
            rows.append(
                f"<div style='color:{color(e.level)}; white-space:pre-wrap; font-family:monospace;'>"
                f"{html.escape(e.message)}{html.escape(suffix)}</div>"
            )

        inner = "".join(rows) if rows else "<div style='color:#666;'>Log is empty.</div>"
        self.widget.value = (
            f"<div style='border:1px solid #ddd; padding:8px; height:{self._height_px}px; "
            f"overflow-y:auto; background:#fff;'>{inner}</div>"
        )


class HtmlLogHandler(logging.Handler):
    """logging.Handler that appends formatted records to an :class:`HtmlLog`."""

    def __init__(self, log: HtmlLog, level: int = logging.INFO) -> None:
        super().__init__(level=level)
        self._log = log
        self.logger_name = ""
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:
            self.handleError(record)
            return
        if record.levelno >= logging.ERROR:
            self._log.error(msg)
        elif record.levelno >= logging.WARNING:
            self._log.warning(msg)
        else:
            self._log.info(msg)
