from __future__ import annotations
from io import BytesIO, StringIO
from pathlib import Path
from typing import Any, Dict, List, Optional
import json
import pandas as pd
import pyarrow.parquet as pq

from ..config_model.model import RootCfg, resolve_config
from ..dataset import Dataset
from ..errors import ParseError, SizeExceeded, UnsupportedFormat
from ..utils.log import get_logger

__all__ = ["SUPPORTED_FORMATS", "normalize_format", "parse", "read_path"]

_log = get_logger("dataclean.io")

SUPPORTED_FORMATS = ("csv", "txt", "json", "ndjson", "xlsx", "xls", "parquet")
_ALIASES = {"tsv": "txt", "jsonl": "ndjson", "pq": "parquet", "xlsm": "xlsx"}
_DELIMS = (",", ";", "\t", "|")


def normalize_format(fmt: str) -> str:
    f = (fmt or "").strip().lower().lstrip(".")
    f = _ALIASES.get(f, f)
    if f not in SUPPORTED_FORMATS:
        raise UnsupportedFormat(fmt)
    return f


def _decode(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("cp1252", errors="replace")


def _sniff_delimiter(text: str) -> str:
    first = next((ln for ln in text.splitlines() if ln.strip()), "")
    counts = {d: first.count(d) for d in _DELIMS}
    best = max(_DELIMS, key=lambda d: counts[d])
    return best if counts[best] > 0 else ","


def _read_delimited(data: bytes, sep: Optional[str]) -> Dataset:
    text = _decode(data)
    if not text.strip():
        return Dataset.empty()
    df = pd.read_csv(
        StringIO(text),
        sep=sep or _sniff_delimiter(text),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )
    return Dataset.from_frame(df)


def _rows_from_json(obj: Any) -> List[Dict[str, Any]]:
    if isinstance(obj, dict) and isinstance(obj.get("data"), list):
        return obj["data"]
    if isinstance(obj, dict):
        return [obj]
    if isinstance(obj, list):
        return obj
    raise ParseError("JSON payload is not a table", {"got": type(obj).__name__})


def _read_ndjson(text: str) -> List[Dict[str, Any]]:
    return [json.loads(ln) for ln in text.splitlines() if ln.strip()]


def _read_json(data: bytes, json_lines: bool, schema_rows: int) -> Dataset:
    text = _decode(data)
    if not text.strip():
        return Dataset.empty()
    try:
        rows = _rows_from_json(json.loads(text))
    except json.JSONDecodeError:
        if not json_lines:
            raise
        rows = _read_ndjson(text)
    return Dataset.from_records(rows, schema_sample_rows=schema_rows)


# ---- Public API ----

def parse(data: bytes, declared_format: str, *, cfg: RootCfg | None = None) -> Dataset:
    """
    Decode a payload into a Dataset.
    - csv: delimiter sniffed from the header line (, ; tab |); cells read as text
    - txt: tab separated
    - json: array of objects, ``{"data": [...]}`` or a single object
    - ndjson: one object per line
    - xlsx/xls: first sheet; empty cells become None
    - parquet
    """
    cfg = resolve_config(cfg)
    fmt = normalize_format(declared_format)
    limit = cfg.ingest.max_bytes
    schema_rows = cfg.profiling.schema_sample_rows
    if len(data) > limit:
        raise SizeExceeded(len(data), limit)

    try:
        if fmt == "csv":
            ds = _read_delimited(data, None)
        elif fmt == "txt":
            ds = _read_delimited(data, "\t")
        elif fmt == "json":
            ds = _read_json(data, cfg.ingest.json_lines, schema_rows)
        elif fmt == "ndjson":
            ds = Dataset.from_records(_read_ndjson(_decode(data)), schema_sample_rows=schema_rows)
        elif fmt in ("xlsx", "xls"):
            engine = "openpyxl" if fmt == "xlsx" else "xlrd"
            df = pd.read_excel(BytesIO(data), sheet_name=0, dtype=object, engine=engine)
            ds = Dataset.from_frame(df)
        else:
            ds = Dataset.from_frame(pq.read_table(BytesIO(data)).to_pandas())
    except ParseError:
        raise
    except Exception as e:
        raise ParseError(f"could not read {fmt} payload: {e}", {"format": fmt}) from e

    _log.info("parsed", extra={"format": fmt, "bytes": len(data), "rows": len(ds), "columns": len(ds.columns)})
    return ds


def read_path(path: str | Path, *, fmt: Optional[str] = None, cfg: RootCfg | None = None) -> Dataset:
    p = Path(path)
    return parse(p.read_bytes(), fmt or p.suffix, cfg=cfg)
