from __future__ import annotations
from datetime import datetime
import pandas as pd
import pytest

from dataclean.cleaning.rules_builtin.standardize import standardize_values
from dataclean.profiling.handlers import (
    standardize_date,
    standardize_email,
    standardize_iban,
    standardize_phone,
)


def test_email():
    assert standardize_email("  John.Doe@Example.COM ") == "john.doe@example.com"
    assert standardize_email(12) == 12


@pytest.mark.parametrize("raw,expected", [
    ("0033612345678", "+33612345678"),
    ("+33612345678", "+33612345678"),
    ("+33 6 12-34.56 78", "+33612345678"),
    ("06 12 34 56 78", "+0612345678"),
    ("no digits", "no digits"),
])
def test_phone_without_region(raw, expected):
    assert standardize_phone(raw) == expected


def test_phone_with_region_uses_e164():
    assert standardize_phone("06 12 34 56 78", region="FR") == "+33612345678"
    # invalid for the region: digit fallback
    assert standardize_phone("12", region="FR") == "+12"


def test_date_iso_or_unchanged():
    assert standardize_date("05.02.2024") == "2024-02-05"
    assert standardize_date("2024/01/05") == "2024-01-05"
    assert standardize_date(datetime(2024, 3, 4, 10, 0)) == "2024-03-04"
    assert standardize_date("soon") == "soon"


def test_iban_compact_upper():
    assert standardize_iban("fr14 2004 1010 0505 0001 3m02 606") == "FR1420041010050500013M02606"


def test_standardize_values_counts_changes_and_skips_blanks():
    s = pd.Series([" A@B.com ", "a@b.com", None, ""], dtype=object)
    out, changed = standardize_values(s, standardize_email)
    assert out.tolist() == ["a@b.com", "a@b.com", None, ""]
    assert changed == 1
    assert s.tolist()[0] == " A@B.com "


def test_standardize_values_leaves_failures_in_place():
    def boom(v):
        raise ValueError("nope")
    out, changed = standardize_values(pd.Series(["x"], dtype=object), boom)
    assert out.tolist() == ["x"]
    assert changed == 0


def test_type_change_counts_as_change():
    out, changed = standardize_values(pd.Series([1], dtype=object), str)
    assert out.tolist() == ["1"]
    assert changed == 1
