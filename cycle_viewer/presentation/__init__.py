"""Presentation package - dataset to chart series, tables and escaped HTML.

The adapter only borrows datasets owned by the store; nothing here mutates them.
"""

from .adapter import (
    CHART_VIEWS,
    VIEW_TITLES,
    ChartSeries,
    ChartView,
    TableRow,
    escape_html,
    format_number,
    format_tooltip,
    render_meta_html,
    render_table_html,
    series_color,
    table_header,
    to_chart_series,
    to_meta_rows,
    to_table_frame,
    to_table_rows,
)

__all__ = [
    "CHART_VIEWS",
    "VIEW_TITLES",
    "ChartSeries",
    "ChartView",
    "TableRow",
    "escape_html",
    "format_number",
    "format_tooltip",
    "render_meta_html",
    "render_table_html",
    "series_color",
    "table_header",
    "to_chart_series",
    "to_meta_rows",
    "to_table_frame",
    "to_table_rows",
]
