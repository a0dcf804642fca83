from __future__ import annotations
from functools import partial
from typing import Any, Tuple
import unicodedata
import pandas as pd

from ...utils.fp import pipe
from .standardize import standardize_values

__all__ = ["strip_accents", "normalize_text"]


def _drop_marks(s: str) -> str:
    return "".join(ch for ch in s if not unicodedata.combining(ch))


def strip_accents(x: Any) -> Any:
    # NFD, drop combining marks, trim; non-text untouched
    if not isinstance(x, str):
        return x
    return pipe(x, partial(unicodedata.normalize, "NFD"), _drop_marks, str.strip)


def normalize_text(s: pd.Series) -> Tuple[pd.Series, int]:
    return standardize_values(s, strip_accents)
