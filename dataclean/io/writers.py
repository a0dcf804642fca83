from __future__ import annotations
from io import BytesIO
from typing import Any, Dict, Optional, Sequence
import json
import zipfile
import pandas as pd

from ..cleaning.report import column_issues, kpis
from ..dataset import Dataset
from ..profiling.metrics import DatasetProfile

__all__ = [
    "to_csv_bytes",
    "to_xlsx_bytes",
    "to_json_bytes",
    "quality_report",
    "export_bundle",
    "BUNDLE_NAMES",
]

BUNDLE_NAMES = ("dataset_clean.csv", "dataset_clean.xlsx", "quality_report.json")


def _dumps(obj: Any) -> bytes:
    return json.dumps(obj, ensure_ascii=False, indent=2, default=str).encode("utf-8")


def to_csv_bytes(dataset: Dataset) -> bytes:
    buf = BytesIO()
    dataset.frame.to_csv(buf, index=False, encoding="utf-8")
    return buf.getvalue()


def to_xlsx_bytes(dataset: Dataset, *, sheet_name: str = "clean") -> bytes:
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as xw:
        dataset.frame.to_excel(xw, sheet_name=sheet_name, index=False)
    return buf.getvalue()


def to_json_bytes(dataset: Dataset) -> bytes:
    return _dumps(dataset.rows())


def quality_report(
    dataset: Dataset,
    profile: DatasetProfile,
    *,
    log: Sequence[str] = (),
    generated_at: Optional[str] = None,
) -> Dict[str, Any]:
    """Serializable quality summary: global score, KPIs, per-column metrics."""
    out: Dict[str, Any] = {
        "rows": len(dataset),
        "columns": list(dataset.columns),
        "global_score": profile.global_score,
        "kpis": kpis(profile),
        "profiles": [c.to_dict() for c in profile.columns],
        "issues": [c.name for c in column_issues(profile)],
    }
    if log:
        out["log"] = list(log)
    if generated_at:
        out["generated_at"] = generated_at
    return out


def export_bundle(
    dataset: Dataset,
    profile: DatasetProfile,
    *,
    log: Sequence[str] = (),
) -> bytes:
    """ZIP with the cleaned table (csv, xlsx) and ``quality_report.json``."""
    csv_name, xlsx_name, report_name = BUNDLE_NAMES
    buf = BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(csv_name, to_csv_bytes(dataset))
        zf.writestr(xlsx_name, to_xlsx_bytes(dataset))
        zf.writestr(report_name, _dumps(quality_report(dataset, profile, log=log)))
    return buf.getvalue()
