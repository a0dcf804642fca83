from __future__ import annotations

from .readers import parse, read_path
from .writers import export_bundle, quality_report, to_csv_bytes, to_json_bytes, to_xlsx_bytes
