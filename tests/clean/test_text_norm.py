from __future__ import annotations
import pandas as pd

from dataclean.cleaning.rules_builtin.text_norm import normalize_text, strip_accents


def test_strip_accents_and_trim():
    assert strip_accents("  Élodie ") == "Elodie"
    assert strip_accents("Zoé Ça") == "Zoe Ca"
    assert strip_accents(5) == 5


def test_normalize_text_series():
    s = pd.Series(["  Élodie ", "Marc", None, 3], dtype=object)
    out, changed = normalize_text(s)
    assert out.tolist() == ["Elodie", "Marc", None, 3]
    assert changed == 1


def test_normalize_text_idempotent():
    s = pd.Series(["Crème brûlée "], dtype=object)
    once, _ = normalize_text(s)
    twice, changed = normalize_text(once)
    assert twice.tolist() == once.tolist() == ["Creme brulee"]
    assert changed == 0
