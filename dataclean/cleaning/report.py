from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence

from ..profiling.metrics import ColumnProfile, DatasetProfile

__all__ = ["column_issues", "kpis", "build_comparison_report"]

_METRICS = ("missing_pct", "duplicate_pct", "invalid_pct", "outlier_pct", "quality_score")


def _has_issue(c: ColumnProfile) -> bool:
    return c.missing_pct > 0 or c.duplicate_pct > 0 or c.invalid_pct > 0 or c.outlier_pct > 0


def column_issues(profile: DatasetProfile) -> List[ColumnProfile]:
    """Columns with at least one non-zero defect metric, worst score first."""
    bad = [c for c in profile.columns if _has_issue(c)]
    return sorted(bad, key=lambda c: (c.quality_score, c.name))


def kpis(profile: DatasetProfile) -> Dict[str, Any]:
    n = len(profile.columns)
    dup = sum(c.duplicate_pct for c in profile.columns) / n if n else 0.0
    return {
        "rows": profile.row_count,
        "columns": n,
        "anomalies": len(column_issues(profile)),
        "duplicates_pct": float(dup),
        "global_score": profile.global_score,
    }


def _metric_deltas(
    before: Optional[ColumnProfile],
    after: Optional[ColumnProfile],
) -> Dict[str, Dict[str, float | None]]:
    out: Dict[str, Dict[str, float | None]] = {}
    for k in _METRICS:
        b = float(getattr(before, k)) if before is not None else None
        a = float(getattr(after, k)) if after is not None else None
        out[k] = {"before": b, "after": a, "delta": None if (a is None or b is None) else a - b}
    return out


def build_comparison_report(
    before: DatasetProfile,
    after: DatasetProfile,
    log: Sequence[str] = (),
) -> Dict[str, Any]:
    """
    Serializable before/after summary of one apply: shape, global score,
    per-column metric deltas and type changes, and the applier log.
    """
    names = list(before.names) + [n for n in after.names if n not in before.names]
    columns: Dict[str, Dict[str, Any]] = {}
    type_changes: Dict[str, Dict[str, str]] = {}
    for name in names:
        b, a = before.get(name), after.get(name)
        columns[name] = _metric_deltas(b, a)
        if b is not None and a is not None and b.detected_type != a.detected_type:
            type_changes[name] = {"before": b.detected_type.value, "after": a.detected_type.value}

    summary = (
        f"Rows: {before.row_count} -> {after.row_count}. "
        f"Global score: {before.global_score:.1f} -> {after.global_score:.1f}. "
        f"Actions logged: {len(log)}."
    )
    return {
        "shape": {
            "before": {"rows": before.row_count, "columns": len(before)},
            "after": {"rows": after.row_count, "columns": len(after)},
        },
        "global_score": {
            "before": before.global_score,
            "after": after.global_score,
            "delta": after.global_score - before.global_score,
        },
        "columns": columns,
        "type_changes": type_changes,
        "kpis": {"before": kpis(before), "after": kpis(after)},
        "log": list(log),
        "summary": summary,
    }
