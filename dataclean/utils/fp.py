from __future__ import annotations
from functools import wraps
from typing import Any, Callable, Iterable, List, TypeVar

from toolz import compose as _compose, pipe as _pipe
from more_itertools import take as _take, unique_everseen as _unique_everseen

A = TypeVar("A")
B = TypeVar("B")

def pipe(x: A, *fns: Callable[[Any], Any]) -> Any:
    return _pipe(x, *fns) if fns else x

def compose(*fns: Callable[[Any], Any]) -> Callable[[Any], Any]:
    # right-to-left, like toolz
    return _compose(*fns)

def try_or(default: B) -> Callable[[Callable[[A], B]], Callable[[A], B]]:
    """Decorator: any exception inside ``fn`` yields ``default`` instead."""
    def _wrap(fn: Callable[[A], B]) -> Callable[[A], B]:
        @wraps(fn)
        def _inner(x: A) -> B:
            try:
                return fn(x)
            except Exception:
                return default
        return _inner
    return _wrap

def unique_stable(seq: Iterable[A]) -> List[A]:
    # first-seen order
    return list(_unique_everseen(seq))

def take_first(it: Iterable[A], n: int, pred: Callable[[A], bool] | None = None) -> List[A]:
    """First ``n`` items of ``it`` (optionally only those satisfying ``pred``)."""
    if n < 0:
        raise ValueError("n must be >= 0")
    src = it if pred is None else (x for x in it if pred(x))
    return _take(n, src)
