from __future__ import annotations
from typing import Any, Iterable, List, Sequence
import itertools
import re

from ..dataset import is_blank
from ..utils.fp import take_first

__all__ = ["levenshtein", "similarity", "near_duplicate_pct", "is_name_like", "is_near_duplicate"]


def levenshtein(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    # keep the shorter string on the inner loop
    if len(a) < len(b):
        a, b = b, a
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        cur = [i]
        for j, cb in enumerate(b, 1):
            cur.append(min(
                cur[j - 1] + 1,
                prev[j] + 1,
                prev[j - 1] + (ca != cb),
            ))
        prev = cur
    return prev[-1]


def _norm(v: Any) -> str:
    return str(v).strip().lower()


def similarity(a: Any, b: Any) -> float:
    """1 - edit distance / longer length, on lowercased trimmed text."""
    x, y = _norm(a), _norm(b)
    longest = max(len(x), len(y))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(x, y) / longest


def is_name_like(column: str, pattern: str) -> bool:
    return bool(pattern) and re.search(pattern, column, flags=re.IGNORECASE) is not None


def near_duplicate_pct(values: Iterable[Any], *, threshold: float = 0.9, max_rows: int = 200) -> float:
    """
    Share (0-100) of value pairs among the first ``max_rows`` non-blank values
    whose similarity is strictly above ``threshold``.
    """
    sample: List[str] = [_norm(v) for v in take_first(values, max_rows, pred=lambda v: not is_blank(v))]
    if len(sample) < 2:
        return 0.0
    total = near = 0
    for a, b in itertools.combinations(sample, 2):
        total += 1
        if similarity(a, b) > threshold:
            near += 1
    return min(100.0, 100.0 * near / total)


def is_near_duplicate(value: Any, kept: Sequence[Any], threshold: float) -> bool:
    return any(similarity(value, k) > threshold for k in kept)
