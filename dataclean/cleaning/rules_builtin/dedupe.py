from __future__ import annotations
from typing import Any, List, Optional, Sequence, Tuple
import pandas as pd

from ...dataset import cell_key, is_blank
from ...profiling.fuzzy import is_near_duplicate

__all__ = ["row_keys", "dedupe_rows"]


def row_keys(df: pd.DataFrame, keys: Sequence[str]) -> List[Tuple[str, ...]]:
    cols = [df[k].tolist() for k in keys]
    return [tuple(cell_key(v) for v in vals) for vals in zip(*cols)] if cols else []


def dedupe_rows(
    df: pd.DataFrame,
    keys: Sequence[str],
    *,
    fuzzy_threshold: Optional[float] = None,
    max_rows: int = 200,
) -> Tuple[pd.DataFrame, int]:
    """
    Keep the first row per distinct key (blank is one key), preserving order.
    With ``fuzzy_threshold`` on a single key column, rows whose value is
    near-identical to one of the first ``max_rows`` kept values go too.
    Returns (new frame, rows removed).
    """
    if df.empty or not keys:
        return df.copy(deep=True), 0

    fuzzy = fuzzy_threshold is not None and len(keys) == 1
    raw: List[Any] = df[keys[0]].tolist() if fuzzy else []
    seen: set = set()
    kept_values: List[Any] = []
    mask: List[bool] = []
    for i, k in enumerate(row_keys(df, keys)):
        if k in seen:
            mask.append(False)
            continue
        if fuzzy and not is_blank(raw[i]) and is_near_duplicate(raw[i], kept_values, float(fuzzy_threshold)):
            mask.append(False)
            continue
        seen.add(k)
        if fuzzy and not is_blank(raw[i]) and len(kept_values) < max_rows:
            kept_values.append(raw[i])
        mask.append(True)

    out = df.loc[mask].reset_index(drop=True)
    return out, int(len(df) - len(out))
