"""Tests for the multi-file dataset store.

Covers:
- batch replacement semantics (clear, then load; no merge across batches)
- per-file failure isolation and warnings keyed by filename
- empty batch = no-op; all-failed batch = empty, valid store
- filename collation, selection, batch serialisation
"""

from __future__ import annotations

import locale
import logging

import pytest

from cycle_viewer.store.dataset_store import DatasetStore, collation_key, set_collation_locale


def _csv(raw_values="10,20,30", corrected_values="9,19,29", device="X1") -> str:
    return (
        f"Device,{device}\n"
        "Raw Data\nCycle,1,2,3\n"
        f"R,{raw_values}\n***\n"
        "Corrected Data\nCycle,1,2,3\n"
        f"R,{corrected_values}\n***\n"
    )


NO_RAW = "Device,X2\nCorrected Data\nCycle,1,2,3\nR,1,2,3\n***\n"


def test_partial_failure_keeps_other_files(caplog) -> None:
    store = DatasetStore()
    with caplog.at_level(logging.WARNING, logger="cycle_viewer"):
        result = store.load_batch([("one.csv", _csv()), ("two.csv", NO_RAW), ("three.csv", _csv())])

    assert len(store) == 2
    assert set(store.keys()) == {"one.csv", "three.csv"}
    assert "two.csv" in store.warnings
    assert "raw" in store.warnings["two.csv"]
    assert result.n_failed == 1
    assert result.loaded == ("one.csv", "three.csv")
    assert any("two.csv" in r.getMessage() for r in caplog.records)
    assert store.status == "ready"


def test_new_batch_replaces_previous_content() -> None:
    store = DatasetStore()
    store.load_batch([("a.csv", _csv()), ("b.csv", _csv())])
    store.load_batch([("c.csv", _csv())])
    assert store.keys() == ["c.csv"]
    assert store.get("a.csv") is None


def test_warnings_are_reset_by_next_batch() -> None:
    store = DatasetStore()
    store.load_batch([("bad.csv", NO_RAW)])
    assert "bad.csv" in store.warnings
    store.load_batch([("good.csv", _csv())])
    assert store.warnings == {}


def test_empty_batch_is_noop() -> None:
    store = DatasetStore()
    store.load_batch([("a.csv", _csv())])
    result = store.load_batch([])
    assert store.keys() == ["a.csv"]
    assert result.loaded == () and result.warnings == {}
    assert store.status == "ready"


def test_status_distinguishes_never_loaded_from_all_failed() -> None:
    store = DatasetStore()
    assert store.status == "idle"
    assert store.is_empty()

    store.load_batch([("x.csv", NO_RAW), ("y.csv", "nothing here")])
    assert store.is_empty()
    assert store.status == "empty"
    assert set(store.warnings) == {"x.csv", "y.csv"}
    assert store.selected is None
    assert store.current() is None


def test_duplicate_name_last_one_wins() -> None:
    store = DatasetStore()
    store.load_batch([("a.csv", _csv(device="first")), ("a.csv", _csv(device="second"))])
    assert len(store) == 1
    assert store.get("a.csv").meta["Device"] == "second"


def test_duplicate_name_later_failure_drops_entry() -> None:
    store = DatasetStore()
    store.load_batch([("a.csv", _csv()), ("a.csv", NO_RAW)])
    assert store.get("a.csv") is None
    assert "a.csv" in store.warnings


def test_empty_series_is_a_per_file_failure() -> None:
    store = DatasetStore()
    empty = "Raw Data\nCycle\nR\n***\nCorrected Data\nCycle\nR\n***\n"
    store.load_batch([("empty.csv", empty), ("ok.csv", _csv())])
    assert store.keys() == ["ok.csv"]
    assert "no values" in store.warnings["empty.csv"]


def test_entry_contents() -> None:
    store = DatasetStore()
    store.load_batch([("a.csv", _csv())])
    entry = store.get("a.csv")
    assert entry.filename == "a.csv"
    assert entry.meta["Device"] == "X1"
    assert entry.dataset.delta[0].values.tolist() == [0.0, 10.0, 20.0]


def test_list_filenames_sorted() -> None:
    store = DatasetStore()
    store.load_batch([("b.csv", _csv()), ("a.csv", _csv())])
    assert store.list_filenames() == ["a.csv", "b.csv"]


def test_collation_ignores_case_and_width() -> None:
    names = ["b.csv", "\uff43.csv", "A.csv"]
    assert sorted(names, key=collation_key) == ["A.csv", "b.csv", "\uff43.csv"]


def test_selection_defaults_to_first_and_ignores_unknown() -> None:
    store = DatasetStore()
    store.load_batch([("b.csv", _csv()), ("a.csv", _csv())])
    assert store.selected == "a.csv"

    assert store.select("b.csv") is not None
    assert store.selected == "b.csv"

    assert store.select("missing.csv") is None
    assert store.selected == "b.csv"
    assert store.current().filename == "b.csv"


def test_load_paths_reports_unreadable_files(tmp_path) -> None:
    good = tmp_path / "good.csv"
    good.write_text(_csv(), encoding="utf-8")
    missing = tmp_path / "missing.csv"

    store = DatasetStore()
    result = store.load_paths([good, missing])
    assert result.loaded == ("good.csv",)
    assert "missing.csv" in result.warnings
    assert result.warnings["missing.csv"].startswith("FileNotFoundError")


def test_overlapping_batch_is_rejected() -> None:
    store = DatasetStore()
    seen = {}

    original = store._load_one

    def reentrant(filename, text):
        with pytest.raises(RuntimeError):
            store.load_batch([("inner.csv", _csv())])
        seen["checked"] = True
        return original(filename, text)

    store._load_one = reentrant
    store.load_batch([("outer.csv", _csv())])

    assert seen["checked"]
    assert store.keys() == ["outer.csv"]
    assert not store.busy


# -------------------------
# Byte sources (uploads)
# -------------------------
UNDECODABLE = b"Device,\xff\xfe\nRaw Data\n"


def test_bytes_sources_are_decoded_per_file() -> None:
    store = DatasetStore()
    result = store.load_batch([("good.csv", _csv().encode("utf-8")), ("bad.csv", UNDECODABLE)])

    assert result.loaded == ("good.csv",)
    assert store.warnings["bad.csv"].startswith("UnicodeDecodeError")
    assert store.get("good.csv").meta["Device"] == "X1"


def test_undecodable_batch_still_replaces_previous_content() -> None:
    store = DatasetStore()
    store.load_batch([("old.csv", _csv(device="OLD"))])

    result = store.load_batch([("new.csv", UNDECODABLE)])

    assert store.keys() == []
    assert store.status == "empty"
    assert set(result.warnings) == {"new.csv"}
    assert store.selected is None


def test_bytes_with_bom_are_accepted() -> None:
    store = DatasetStore()
    store.load_batch([("bom.csv", b"\xef\xbb\xbf" + _csv().encode("utf-8"))])
    assert store.get("bom.csv").meta["Device"] == "X1"


# -------------------------
# Collation locale
# -------------------------
def test_set_collation_locale_unknown_name_keeps_current(caplog) -> None:
    before = locale.setlocale(locale.LC_COLLATE)
    with caplog.at_level(logging.WARNING, logger="cycle_viewer"):
        assert set_collation_locale("xx_NOT_A_LOCALE.UTF-8") is False
    assert locale.setlocale(locale.LC_COLLATE) == before
    assert any("xx_NOT_A_LOCALE" in r.getMessage() for r in caplog.records)


def test_set_collation_locale_applies_known_name() -> None:
    before = locale.setlocale(locale.LC_COLLATE)
    try:
        assert set_collation_locale("C") is True
        assert locale.setlocale(locale.LC_COLLATE) == "C"
    finally:
        locale.setlocale(locale.LC_COLLATE, before)
