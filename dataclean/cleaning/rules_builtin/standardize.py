from __future__ import annotations
from typing import Any, Callable, Tuple
import pandas as pd

from ...dataset import is_blank

__all__ = ["standardize_values"]


def _same(a: Any, b: Any) -> bool:
    return type(a) is type(b) and a == b


def standardize_values(s: pd.Series, fn: Callable[[Any], Any]) -> Tuple[pd.Series, int]:
    """
    Map ``fn`` over non-blank cells. A cell ``fn`` cannot handle stays as is.
    Returns (new Series, values changed).
    """
    changed = 0
    out = []
    for v in s.tolist():
        if is_blank(v):
            out.append(v)
            continue
        try:
            nv = fn(v)
        except (TypeError, ValueError, OverflowError):
            nv = v
        if not _same(nv, v):
            changed += 1
        out.append(nv)
    return pd.Series(out, index=s.index, dtype=object), changed
