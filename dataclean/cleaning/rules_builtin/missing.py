from __future__ import annotations
from typing import Any, Dict, Optional, Tuple
import numpy as np
import pandas as pd

from ...dataset import cell_key, is_blank
from ...profiling.recognizers import parse_number

__all__ = ["blank_mask", "fill_blanks", "impute_mean", "impute_mode"]


def blank_mask(s: pd.Series) -> pd.Series:
    return s.map(is_blank).astype(bool)


def fill_blanks(s: pd.Series, value: Any) -> Tuple[pd.Series, int]:
    """
    Replace blank cells with ``value``. Pure: returns a new object Series
    and the number of cells filled.
    """
    out = s.astype(object).copy(deep=True)
    m = blank_mask(out)
    n = int(m.sum())
    if n:
        out[m] = value
    return out, n


def impute_mean(s: pd.Series) -> Tuple[pd.Series, int, Optional[float]]:
    """
    Fill blanks with the mean of the parseable numeric values.
    No numeric value at all: returned unchanged with mean ``None``.
    """
    nums = [f for f in (parse_number(v) for v in s.tolist() if not is_blank(v)) if f is not None]
    if not nums:
        return s.astype(object).copy(deep=True), 0, None
    mean = float(np.mean(nums))
    out, n = fill_blanks(s, mean)
    return out, n, mean


def impute_mode(s: pd.Series) -> Tuple[pd.Series, int, Any]:
    """
    Fill blanks with the most frequent non-blank value.
    - Ties: the value encountered first wins.
    - The fill is the original cell value, not its key.
    """
    counts: Dict[str, int] = {}
    first: Dict[str, Any] = {}
    for v in s.tolist():
        if is_blank(v):
            continue
        k = cell_key(v)
        if k not in counts:
            counts[k] = 0
            first[k] = v
        counts[k] += 1
    if not counts:
        return s.astype(object).copy(deep=True), 0, None
    best = None
    for k, c in counts.items():
        if best is None or c > counts[best]:
            best = k
    out, n = fill_blanks(s, first[best])
    return out, n, first[best]
