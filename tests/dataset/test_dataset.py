from __future__ import annotations
import math
from datetime import datetime
import pandas as pd
import pytest

from dataclean.dataset import BLANK_KEY, CellKind, Dataset, cell_key, cell_kind, is_blank
from dataclean.errors import DatasetShapeError, UnknownColumnError


def test_is_blank_variants():
    assert is_blank(None)
    assert is_blank("")
    assert is_blank("   ")
    assert is_blank(float("nan"))
    assert is_blank(pd.NA)
    assert is_blank(pd.NaT)
    assert not is_blank(0)
    assert not is_blank("0")
    assert not is_blank(False)


def test_cell_kind_tags():
    assert cell_kind(None) is CellKind.NULL
    assert cell_kind(True) is CellKind.BOOLEAN
    assert cell_kind(3) is CellKind.NUMBER
    assert cell_kind(2.5) is CellKind.NUMBER
    assert cell_kind(datetime(2024, 1, 1)) is CellKind.DATE
    assert cell_kind("3") is CellKind.TEXT


def test_cell_key_normalizes_numbers_and_blanks():
    assert cell_key(1) == cell_key(1.0) == "1"
    assert cell_key(2.5) == "2.5"
    assert cell_key(True) == "true"
    assert cell_key(None) == cell_key("  ") == cell_key(math.nan) == BLANK_KEY


def test_from_records_schema_is_union_in_first_seen_order():
    ds = Dataset.from_records([{"a": 1}, {"b": 2, "a": 3}, {"c": None}])
    assert ds.columns == ("a", "b", "c")
    assert ds.rows()[0] == {"a": 1, "b": None, "c": None}
    assert len(ds) == 3


def test_schema_only_sampled_from_first_rows():
    ds = Dataset.from_records([{"a": 1}, {"a": 2, "late": 3}], schema_sample_rows=1)
    assert ds.columns == ("a",)


def test_ints_are_not_coerced_next_to_blanks():
    ds = Dataset.from_records([{"v": 1}, {"v": None}, {"v": 3}])
    col = ds.column("v")
    assert col == [1, None, 3]
    assert type(col[0]) is int


def test_non_mapping_row_is_shape_error():
    with pytest.raises(DatasetShapeError):
        Dataset.from_records([{"a": 1}, ["not", "a", "row"]])
    with pytest.raises(DatasetShapeError):
        Dataset.from_records("a,b")


def test_accessors_return_copies():
    ds = Dataset.from_records([{"a": 1}, {"a": 2}])
    f = ds.frame
    f.loc[0, "a"] = 99
    col = ds.column("a")
    col.append(5)
    assert ds.column("a") == [1, 2]


def test_unknown_column():
    ds = Dataset.from_records([{"a": 1}])
    with pytest.raises(UnknownColumnError):
        ds.column("zzz")


def test_fingerprint_and_equals_track_content():
    a = Dataset.from_records([{"x": 1, "y": "k"}])
    b = Dataset.from_records([{"x": 1, "y": "k"}])
    c = Dataset.from_records([{"x": 1.5, "y": "k"}])
    assert a.fingerprint() == b.fingerprint()
    assert a.equals(b)
    assert not a.equals(c)


def test_head_and_empty():
    ds = Dataset.from_records([{"a": i} for i in range(10)])
    assert len(ds.head(3)) == 3
    e = Dataset.empty()
    assert len(e) == 0 and e.columns == () and e.is_empty


def test_from_frame_turns_nan_into_none():
    df = pd.DataFrame({"a": [1.0, float("nan")], "b": ["x", None]})
    ds = Dataset.from_frame(df)
    assert ds.column("a")[1] is None
    assert ds.column("b") == ["x", None]
