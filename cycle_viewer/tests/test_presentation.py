from __future__ import annotations

import numpy as np
import pytest

from cycle_viewer.analysis.derive import compute
from cycle_viewer.ingest.section_parser import parse_text
from cycle_viewer.presentation.adapter import (
    CHART_VIEWS,
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


TEXT = (
    "Device,X1\n"
    "Raw Data\nCycle,1,2,3\nR,10,20,30\nG,5,5,10\n***\n"
    "Corrected Data\nCycle,1,2,3\nR,9,19,29\nG,4,4,9\n***\n"
)


@pytest.fixture()
def dataset():
    return compute(parse_text(TEXT))


def test_chart_views_and_order() -> None:
    assert CHART_VIEWS == ("corrected", "delta", "relative", "raw")


@pytest.mark.parametrize(
    "view, expected_r",
    [
        ("corrected", [9.0, 19.0, 29.0]),
        ("raw", [10.0, 20.0, 30.0]),
        ("relative", [1.0, 2.0, 3.0]),
        ("delta", [0.0, 10.0, 20.0]),
    ],
)
def test_to_chart_series(dataset, view, expected_r) -> None:
    labels, series = to_chart_series(dataset, view)
    assert labels == ["1", "2", "3"]
    assert [s.name for s in series] == ["R", "G"]
    np.testing.assert_allclose(series[0].values, expected_r)


def test_unknown_view_raises(dataset) -> None:
    with pytest.raises(KeyError):
        to_chart_series(dataset, "smoothed")


def test_table_rows_corrected_first(dataset) -> None:
    rows = to_table_rows(dataset)
    assert [r.label for r in rows] == ["R (Corrected)", "G (Corrected)", "R (Raw)", "G (Raw)"]
    assert table_header(dataset) == ["Channel", "1", "2", "3"]


def test_table_frame(dataset) -> None:
    df = to_table_frame(dataset)
    assert list(df.index) == ["R (Corrected)", "G (Corrected)", "R (Raw)", "G (Raw)"]
    assert list(df.columns) == ["1", "2", "3"]
    assert df.loc["G (Raw)", "3"] == 10.0


def test_meta_rows_keep_mapping_order() -> None:
    assert to_meta_rows({"b": "1", "a": "2"}) == [("b", "1"), ("a", "2")]


def test_escape_html_covers_reserved_characters() -> None:
    assert escape_html("&<>\"'") == "&amp;&lt;&gt;&quot;&#x27;"


def test_meta_html_escapes_script() -> None:
    out = render_meta_html({"Note": "<script>alert(1)</script>", "K&\"'": "v"})
    assert "&lt;script&gt;" in out
    assert "<script>" not in out
    assert "K&amp;&quot;&#x27;" in out


def test_table_html_escapes_series_names() -> None:
    text = (
        "Raw Data\nCycle,1,2\n<b>x</b>,1,2\n***\n"
        "Corrected Data\nCycle,1,2\n<img src=x onerror=y>,3,4\n***\n"
    )
    out = render_table_html(compute(parse_text(text)))
    assert "<b>" not in out and "<img" not in out
    assert "&lt;b&gt;x&lt;/b&gt; (Raw)" in out
    assert out.startswith("<table><tr><th>Channel</th><th>1</th><th>2</th></tr>")
    assert out.index("(Corrected)") < out.index("(Raw)")


def test_table_html_shows_nan_cells() -> None:
    text = "Raw Data\nCycle,1,2\nR,1,oops\n***\nCorrected Data\nCycle,1,2\nR,1,2\n***\n"
    out = render_table_html(compute(parse_text(text)))
    assert "<td>NaN</td>" in out


@pytest.mark.parametrize(
    "value, text",
    [(3.0, "3"), (2.5, "2.5"), (-0.125, "-0.125"), (float("nan"), "NaN"), (float("inf"), "Infinity")],
)
def test_format_number(value, text) -> None:
    assert format_number(value) == text


def test_format_tooltip() -> None:
    assert format_tooltip("R", 1.0) == "R: 1.000"
    assert format_tooltip("G", 2.34567) == "G: 2.346"
    assert format_tooltip("B", 2.0, decimals=1) == "B: 2.0"


def test_series_color_fallback() -> None:
    assert series_color("R").startswith("#ff0000")
    assert series_color("Z") == "black"
    assert series_color("Z", {"Z": "purple"}) == "purple"
