from __future__ import annotations
import pandas as pd

from dataclean.cleaning.rules_builtin.dedupe import dedupe_rows, row_keys


def _df(**cols):
    return pd.DataFrame({k: pd.Series(v, dtype=object) for k, v in cols.items()})


def test_keeps_first_occurrence_in_order():
    df = _df(k=["a", "b", "a", "c", "b"], v=[1, 2, 3, 4, 5])
    out, removed = dedupe_rows(df, ["k"])
    assert removed == 2
    assert out["v"].tolist() == [1, 2, 4]
    assert list(out.index) == [0, 1, 2]


def test_blank_cells_share_one_key():
    out, removed = dedupe_rows(_df(k=[None, "", "x"]), ["k"])
    assert removed == 1
    assert out["k"].tolist() == [None, "x"]


def test_numeric_keys_compare_by_value():
    _, removed = dedupe_rows(_df(k=[1, 1.0, "1"]), ["k"])
    assert removed == 2


def test_composite_keys():
    df = _df(a=["x", "x", "x"], b=[1, 2, 1])
    out, removed = dedupe_rows(df, ["a", "b"])
    assert removed == 1
    assert row_keys(out, ["a", "b"]) == [("x", "1"), ("x", "2")]


def test_fuzzy_threshold_on_single_key():
    df = _df(name=["Jean Dupont", "Jean Dupond", "Marie Curie"])
    out, removed = dedupe_rows(df, ["name"], fuzzy_threshold=0.9)
    assert removed == 1
    assert out["name"].tolist() == ["Jean Dupont", "Marie Curie"]
    # exact only without a threshold
    assert dedupe_rows(df, ["name"])[1] == 0


def test_input_frame_untouched_and_empty():
    df = _df(k=["a", "a"])
    dedupe_rows(df, ["k"])
    assert len(df) == 2
    out, removed = dedupe_rows(_df(k=[]), ["k"])
    assert (len(out), removed) == (0, 0)
