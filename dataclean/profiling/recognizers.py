from __future__ import annotations
from datetime import date, datetime
from typing import Any, Iterable, Optional
from urllib.parse import urlparse
import math
import numbers
import re
import numpy as np
import pandas as pd
import phonenumbers

from ..utils.time import DEFAULT_FORMATS, as_calendar_date

__all__ = [
    "parse_number",
    "is_number",
    "is_date",
    "is_email",
    "is_url",
    "is_phone",
    "is_iban",
    "iban_checksum_ok",
    "is_boolean",
    "BOOL_TOKENS",
]

# plain decimal notation; a leading "+" is left to phone numbers
_NUMBER_RE = re.compile(r"^-?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_CHARS_RE = re.compile(r"^\+?[\d\s().\-/]+$")
_IBAN_RE = re.compile(r"^[A-Z]{2}\d{2}[A-Z0-9]{11,30}$")
_WS_RE = re.compile(r"\s+")

BOOL_TOKENS = frozenset({"true", "false", "0", "1", "yes", "no", "oui", "non"})


# ---- number ----

def parse_number(v: Any) -> Optional[float]:
    """Float value of a numeric cell or numeric string; None otherwise."""
    if isinstance(v, (bool, np.bool_)):
        return None
    if isinstance(v, numbers.Number):
        try:
            f = float(v)
        except (TypeError, ValueError, OverflowError):
            return None
        return f if math.isfinite(f) else None
    if not isinstance(v, str):
        return None
    s = v.strip()
    if s.count(",") == 1 and "." not in s:
        s = s.replace(",", ".")
    if not _NUMBER_RE.match(s):
        return None
    try:
        f = float(s)
    except ValueError:
        return None
    return f if math.isfinite(f) else None


def is_number(v: Any) -> bool:
    return parse_number(v) is not None


# ---- date ----

def is_date(v: Any, formats: Iterable[str] = DEFAULT_FORMATS) -> bool:
    # bare numbers are never dates
    if isinstance(v, (datetime, date, pd.Timestamp)):
        return not pd.isna(v)
    if not isinstance(v, str) or is_number(v):
        return False
    return as_calendar_date(v, formats) is not None


# ---- text shapes ----

def is_email(v: Any) -> bool:
    return isinstance(v, str) and bool(_EMAIL_RE.match(v.strip()))


def is_url(v: Any) -> bool:
    if not isinstance(v, str):
        return False
    s = v.strip()
    if not s or _WS_RE.search(s):
        return False
    try:
        p = urlparse(s)
    except ValueError:
        return False
    return bool(p.scheme) and bool(p.netloc)


def _phone_digits(s: str) -> str:
    return re.sub(r"\D", "", s)


def is_phone(v: Any, region: str = "FR", mode: str = "strict") -> bool:
    """
    ``strict``: region-aware validation with phonenumbers.
    ``digits``: 8-15 digits written with phone punctuation only.
    """
    if isinstance(v, (bool, np.bool_)):
        return False
    if isinstance(v, numbers.Integral):
        v = str(v)
    if not isinstance(v, str):
        return False
    s = v.strip()
    if not s or not _PHONE_CHARS_RE.match(s):
        return False
    if mode == "digits":
        return 8 <= len(_phone_digits(s)) <= 15
    try:
        parsed = phonenumbers.parse(s, region or None)
    except phonenumbers.NumberParseException:
        return False
    return phonenumbers.is_valid_number(parsed)


def iban_checksum_ok(s: str) -> bool:
    """ISO 13616 mod-97: move the first four chars to the end, letters -> 10..35."""
    rearranged = s[4:] + s[:4]
    digits = "".join(str(int(ch, 36)) for ch in rearranged)
    return int(digits) % 97 == 1


def is_iban(v: Any) -> bool:
    if not isinstance(v, str):
        return False
    s = _WS_RE.sub("", v).upper()
    if not _IBAN_RE.match(s):
        return False
    return iban_checksum_ok(s)


# ---- boolean ----

def is_boolean(v: Any, extra_tokens: Iterable[str] = ()) -> bool:
    if isinstance(v, (bool, np.bool_)):
        return True
    if isinstance(v, numbers.Number):
        return v in (0, 1)
    if not isinstance(v, str):
        return False
    tok = v.strip().lower()
    return tok in BOOL_TOKENS or tok in {t.lower() for t in extra_tokens}
