from __future__ import annotations
from typing import Iterable, Optional
from datetime import date, datetime
import re
import warnings
import pandas as pd
import pytz

DEFAULT_FORMATS = (
    "%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y", "%d/%m/%Y", "%d.%m.%Y",
    "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S",
)

# a date needs three digit groups split by - / . or a month name
_DATE_SHAPE_RE = re.compile(r"\d{1,4}[-/.]\d{1,2}[-/.]\d{1,4}")
_MONTH_NAME_RE = re.compile(
    r"\b(jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?\s+\d|\d\s+(jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)",
    re.I,
)

def parse_any_datetime(
    s: str,
    formats: Iterable[str] = DEFAULT_FORMATS,
) -> Optional[datetime]:
    s = s.strip()
    if not s:
        return None
    for f in formats:
        try:
            return datetime.strptime(s, f)
        except ValueError:
            continue
    if not (_DATE_SHAPE_RE.search(s) or _MONTH_NAME_RE.search(s)):
        return None
    # pandas as fallback, only for date-shaped strings
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            dt = pd.to_datetime(s, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(dt):
        return None
    return dt.to_pydatetime()

def as_calendar_date(value: object, formats: Iterable[str] = DEFAULT_FORMATS) -> Optional[date]:
    """Date part of a datetime-like or date-shaped string; None otherwise."""
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    dt = parse_any_datetime(value, formats)
    return dt.date() if dt is not None else None

def to_timezone(dt: datetime, tz: str) -> datetime:
    tzinfo = pytz.timezone(tz)
    if dt.tzinfo is None:
        return tzinfo.localize(dt)
    return dt.astimezone(tzinfo)
