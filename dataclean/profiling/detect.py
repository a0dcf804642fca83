from __future__ import annotations
from typing import Any, Dict, Iterable, Mapping, Optional

from ..config_model.model import RootCfg, resolve_config
from ..dataset import is_blank
from ..utils.fp import take_first, try_or
from .handlers import TYPE_PRIORITY, DetectedType, TypeHandler, build_handlers

__all__ = ["detect", "detect_scores"]


def detect_scores(
    values: Iterable[Any],
    cfg: RootCfg | None = None,
    *,
    handlers: Optional[Mapping[DetectedType, TypeHandler]] = None,
) -> Dict[DetectedType, int]:
    """Matches per candidate type over the first K non-blank values."""
    cfg = resolve_config(cfg)
    table = handlers if handlers is not None else build_handlers(cfg)
    sample = take_first(values, cfg.profiling.type_sample_size, pred=lambda v: not is_blank(v))
    scores: Dict[DetectedType, int] = {}
    for t in TYPE_PRIORITY:
        check = try_or(False)(table[t].validate)
        scores[t] = sum(1 for v in sample if check(v))
    return scores


def detect(
    values: Iterable[Any],
    cfg: RootCfg | None = None,
    *,
    handlers: Optional[Mapping[DetectedType, TypeHandler]] = None,
) -> DetectedType:
    """
    Semantic type of a column from its values.

    Highest recognizer score wins, ties go to the earlier type in
    ``TYPE_PRIORITY``; no match at all is ``text``, no non-blank value is
    ``unknown``.
    """
    values = list(values)
    if all(is_blank(v) for v in values):
        return DetectedType.UNKNOWN
    scores = detect_scores(values, cfg, handlers=handlers)
    best = max(TYPE_PRIORITY, key=lambda t: (scores[t], -TYPE_PRIORITY.index(t)))
    return best if scores[best] > 0 else DetectedType.TEXT
