from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple
import numbers
import numpy as np
import pandas as pd

from .errors import DatasetShapeError, UnknownColumnError
from .utils.fp import unique_stable
from .utils.ids import stable_hash

__all__ = [
    "CellKind",
    "BLANK_KEY",
    "is_blank",
    "cell_kind",
    "cell_key",
    "Dataset",
]

SCHEMA_SAMPLE_ROWS = 1000

# dedupe/duplicate key shared by every blank cell
BLANK_KEY = "\x00<blank>"


class CellKind(str, Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    DATE = "date"
    TEXT = "text"


# ---- cell tagging ----

def is_blank(v: Any) -> bool:
    """None, NaN/NA/NaT, or a string that is empty once trimmed."""
    if v is None:
        return True
    if isinstance(v, str):
        return not v.strip()
    try:
        return bool(pd.isna(v))
    except (TypeError, ValueError):
        # containers: pd.isna is element-wise
        return False


def cell_kind(v: Any) -> CellKind:
    if is_blank(v):
        return CellKind.NULL
    if isinstance(v, (bool, np.bool_)):
        return CellKind.BOOLEAN
    if isinstance(v, (numbers.Number, Decimal)):
        return CellKind.NUMBER
    if isinstance(v, (datetime, date, pd.Timestamp, np.datetime64)):
        return CellKind.DATE
    return CellKind.TEXT


def _number_key(v: Any) -> str:
    if isinstance(v, (int, np.integer)):
        return str(int(v))
    try:
        f = float(v)
    except (TypeError, ValueError, OverflowError):
        return str(v)
    if f.is_integer():
        return str(int(f))
    return repr(f)


def cell_key(v: Any) -> str:
    """Stringified value used for duplicate counting and dedupe (1 == 1.0)."""
    kind = cell_kind(v)
    if kind is CellKind.NULL:
        return BLANK_KEY
    if kind is CellKind.BOOLEAN:
        return "true" if bool(v) else "false"
    if kind is CellKind.NUMBER:
        return _number_key(v)
    if kind is CellKind.DATE:
        return pd.Timestamp(v).isoformat()
    return str(v)


def _plain(v: Any) -> Any:
    # numpy scalars -> Python scalars; non-text missing -> None
    if isinstance(v, np.generic):
        v = v.item()
    if v is None or isinstance(v, str):
        return v
    try:
        if pd.isna(v):
            return None
    except (TypeError, ValueError):
        pass
    return v


def _fp_cell(v: Any) -> Any:
    if v is None:
        return None
    return [type(v).__name__, str(v)]


# ---- value type ----

@dataclass(frozen=True, eq=False)
class Dataset:
    """
    Immutable, column-oriented table snapshot.

    Backed by an object-dtype DataFrame so cells keep their Python values
    (no int -> float coercion next to blanks). Every accessor hands out copies.
    """
    _frame: pd.DataFrame
    columns: Tuple[str, ...]

    # ---- construction ----

    @classmethod
    def from_records(
        cls,
        rows: Iterable[Mapping[str, Any]],
        *,
        schema_sample_rows: int = SCHEMA_SAMPLE_ROWS,
    ) -> "Dataset":
        if isinstance(rows, (str, bytes, Mapping)):
            raise DatasetShapeError("expected a sequence of rows", {"got": type(rows).__name__})
        try:
            materialized: List[Mapping[str, Any]] = list(rows)
        except TypeError as e:
            raise DatasetShapeError("rows are not iterable", {"got": type(rows).__name__}) from e

        for i, r in enumerate(materialized):
            if not isinstance(r, Mapping):
                raise DatasetShapeError(
                    "every row must be a mapping",
                    {"row": i, "got": type(r).__name__},
                )

        columns = tuple(unique_stable(
            str(k) for r in materialized[:schema_sample_rows] for k in r.keys()
        ))
        norm = [{str(k): v for k, v in r.items()} for r in materialized]
        data = {
            c: pd.Series([_plain(r.get(c)) for r in norm], dtype=object)
            for c in columns
        }
        frame = pd.DataFrame(data, index=pd.RangeIndex(len(norm)), columns=list(columns))
        return cls(frame, columns)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "Dataset":
        """Snapshot of any DataFrame; NaN-like cells become ``None``."""
        if not isinstance(df, pd.DataFrame):
            raise DatasetShapeError("expected a DataFrame", {"got": type(df).__name__})
        columns = tuple(str(c) for c in df.columns)
        if len(set(columns)) != len(columns):
            raise DatasetShapeError("duplicate column names", {"columns": list(columns)})
        data = {
            name: pd.Series([_plain(v) for v in df.iloc[:, i].tolist()], dtype=object)
            for i, name in enumerate(columns)
        }
        frame = pd.DataFrame(data, index=pd.RangeIndex(len(df)), columns=list(columns))
        return cls(frame, columns)

    @classmethod
    def empty(cls) -> "Dataset":
        return cls.from_records([])

    # ---- accessors ----

    def __len__(self) -> int:
        return int(len(self._frame))

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame.copy(deep=True)

    @property
    def is_empty(self) -> bool:
        return len(self) == 0 or not self.columns

    def has_column(self, name: str) -> bool:
        return name in self.columns

    def column(self, name: str) -> List[Any]:
        if name not in self.columns:
            raise UnknownColumnError(name, list(self.columns))
        return self._frame[name].tolist()

    def rows(self) -> List[Dict[str, Any]]:
        cols = list(self.columns)
        if not cols:
            return [{} for _ in range(len(self))]
        return [
            dict(zip(cols, vals))
            for vals in self._frame[cols].itertuples(index=False, name=None)
        ]

    def head(self, n: int) -> "Dataset":
        return self.with_frame(self._frame.head(max(0, int(n))))

    def with_frame(self, df: pd.DataFrame) -> "Dataset":
        out = df.astype(object).reset_index(drop=True)
        return Dataset(out, tuple(str(c) for c in out.columns))

    # ---- content identity ----

    def fingerprint(self) -> str:
        cols = list(self.columns)
        body = [[_fp_cell(v) for v in self._frame[c].tolist()] for c in cols]
        return stable_hash({"columns": cols, "n": len(self), "cells": body})

    def equals(self, other: object) -> bool:
        if not isinstance(other, Dataset):
            return False
        return self.columns == other.columns and self.fingerprint() == other.fingerprint()

    def __repr__(self) -> str:
        return f"Dataset(rows={len(self)}, columns={list(self.columns)!r})"
