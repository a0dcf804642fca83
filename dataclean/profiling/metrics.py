from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple
import numpy as np

from ..config_model.model import RootCfg, WeightsCfg, resolve_config
from ..dataset import Dataset, cell_key, is_blank
from ..utils.fp import try_or
from .detect import detect
from .fuzzy import is_name_like, near_duplicate_pct
from .handlers import DetectedType, TypeHandler, build_handlers
from .recognizers import parse_number

__all__ = [
    "ColumnProfile",
    "DatasetProfile",
    "quality_score",
    "outlier_pct",
    "compute_profile",
    "profile_column",
    "profile_dataset",
]


# ---- Data classes ----

@dataclass(frozen=True)
class ColumnProfile:
    name: str
    detected_type: DetectedType
    missing_pct: float = 0.0
    duplicate_pct: float = 0.0
    invalid_pct: float = 0.0
    outlier_pct: float = 0.0
    quality_score: float = 0.0
    row_count: int = 0
    near_duplicate_pct: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["detected_type"] = self.detected_type.value
        return d


@dataclass(frozen=True)
class DatasetProfile:
    columns: Tuple[ColumnProfile, ...] = ()
    global_score: float = 0.0
    row_count: int = 0

    def __iter__(self) -> Iterator[ColumnProfile]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    @property
    def names(self) -> List[str]:
        return [c.name for c in self.columns]

    def get(self, name: str) -> Optional[ColumnProfile]:
        return next((c for c in self.columns if c.name == name), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "global_score": self.global_score,
            "row_count": self.row_count,
            "columns": [c.to_dict() for c in self.columns],
        }


# ---- helpers ----

def _pct(n: int | float, d: int | float) -> float:
    if not d:
        return 0.0
    return float(min(100.0, max(0.0, 100.0 * n / d)))


def quality_score(
    missing_pct: float,
    duplicate_pct: float,
    invalid_pct: float,
    outlier_pct: float,
    weights: WeightsCfg | None = None,
) -> float:
    w = weights or WeightsCfg()
    penalty = (
        w.missing * missing_pct
        + w.duplicate * duplicate_pct
        + w.invalid * invalid_pct
        + w.outlier * outlier_pct
    )
    return float(min(100.0, max(0.0, 100.0 - penalty)))


def outlier_pct(
    values: Sequence[Any],
    *,
    threshold: float = 3.0,
    denominator: str = "numeric",
) -> float:
    """
    Share of numeric values with |z| > threshold (population std).
    ``denominator`` is the parsed numeric subset or, with ``"rows"``, every row.
    """
    nums = [f for f in (parse_number(v) for v in values if not is_blank(v)) if f is not None]
    if not nums:
        return 0.0
    x = np.asarray(nums, dtype=float)
    std = float(x.std(ddof=0))
    if std == 0 or not np.isfinite(std):
        return 0.0
    z = np.abs((x - x.mean()) / std)
    n_out = int((z > threshold).sum())
    base = len(values) if denominator == "rows" else len(nums)
    return _pct(n_out, base)


def _invalid_count(values: Sequence[Any], handler: TypeHandler) -> int:
    check = try_or(False)(handler.validate)
    return sum(1 for v in values if not is_blank(v) and not check(v))


# ---- Public API ----

def compute_profile(
    values: Sequence[Any],
    detected_type: DetectedType,
    *,
    name: str = "",
    cfg: RootCfg | None = None,
    handlers: Optional[Mapping[DetectedType, TypeHandler]] = None,
) -> ColumnProfile:
    """
    Metrics and score for one column already typed by ``detect``.
    A zero-row column profiles as ``unknown`` with every metric and the score at 0.
    """
    cfg = resolve_config(cfg)
    values = list(values)
    total = len(values)
    if total == 0:
        return ColumnProfile(name=name, detected_type=DetectedType.UNKNOWN)

    table = handlers if handlers is not None else build_handlers(cfg)
    t = DetectedType(detected_type)

    missing = _pct(sum(1 for v in values if is_blank(v)), total)
    distinct = len({cell_key(v) for v in values})
    duplicate = _pct(total - distinct, total)
    invalid = 0.0
    if t not in (DetectedType.TEXT, DetectedType.UNKNOWN):
        invalid = _pct(_invalid_count(values, table[t]), total)
    outliers = 0.0
    if t is DetectedType.NUMBER:
        outliers = outlier_pct(
            values,
            threshold=cfg.scoring.zscore_threshold,
            denominator=cfg.scoring.outlier_denominator,
        )

    near = 0.0
    fz = cfg.fuzzy
    if fz.enabled and t is DetectedType.TEXT and is_name_like(name, fz.name_pattern):
        near = near_duplicate_pct(values, threshold=fz.similarity_threshold, max_rows=fz.max_rows)
        duplicate = min(100.0, duplicate + near)

    return ColumnProfile(
        name=name,
        detected_type=t,
        missing_pct=missing,
        duplicate_pct=duplicate,
        invalid_pct=invalid,
        outlier_pct=outliers,
        quality_score=quality_score(missing, duplicate, invalid, outliers, cfg.scoring.weights),
        row_count=total,
        near_duplicate_pct=near,
    )


def profile_column(
    name: str,
    values: Sequence[Any],
    cfg: RootCfg | None = None,
    *,
    handlers: Optional[Mapping[DetectedType, TypeHandler]] = None,
) -> ColumnProfile:
    cfg = resolve_config(cfg)
    table = handlers if handlers is not None else build_handlers(cfg)
    values = list(values)
    t = detect(values, cfg, handlers=table)
    return compute_profile(values, t, name=name, cfg=cfg, handlers=table)


def profile_dataset(dataset: Dataset, cfg: RootCfg | None = None) -> DatasetProfile:
    """Profile every column over the preview window (first ``preview_rows`` rows)."""
    cfg = resolve_config(cfg)
    if dataset.is_empty:
        # no rows: no sampled keys, hence no columns
        return DatasetProfile(columns=(), global_score=0.0, row_count=len(dataset))
    table = build_handlers(cfg)
    window = dataset.head(cfg.profiling.preview_rows)
    cols = tuple(
        profile_column(c, window.column(c), cfg, handlers=table) for c in window.columns
    )
    score = float(sum(c.quality_score for c in cols) / len(cols))
    return DatasetProfile(columns=cols, global_score=score, row_count=len(dataset))
