from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, Iterable, Optional
import re
import phonenumbers

from ..config_model.model import RootCfg, resolve_config
from ..utils.fp import compose
from ..utils.time import DEFAULT_FORMATS, as_calendar_date
from . import recognizers as rz

__all__ = [
    "DetectedType",
    "TYPE_PRIORITY",
    "TypeHandler",
    "build_handlers",
    "standardize_email",
    "standardize_date",
    "standardize_phone",
    "standardize_iban",
]


class DetectedType(str, Enum):
    NUMBER = "number"
    DATE = "date"
    EMAIL = "email"
    PHONE = "phone"
    URL = "url"
    IBAN = "iban"
    BOOLEAN = "boolean"
    TEXT = "text"
    UNKNOWN = "unknown"


# tie-break order for detection; text is the fallback, never scored
TYPE_PRIORITY = (
    DetectedType.NUMBER,
    DetectedType.DATE,
    DetectedType.EMAIL,
    DetectedType.PHONE,
    DetectedType.URL,
    DetectedType.BOOLEAN,
    DetectedType.IBAN,
)


@dataclass(frozen=True)
class TypeHandler:
    type: DetectedType
    validate: Callable[[Any], bool]
    standardize: Optional[Callable[[Any], Any]] = None


def _always_valid(_: Any) -> bool:
    return True


# ---- value standardizers (unparseable input comes back unchanged) ----

# right-to-left: trim, then lowercase
_trim_lower = compose(str.lower, str.strip)


def standardize_email(v: Any) -> Any:
    return _trim_lower(v) if isinstance(v, str) else v


def standardize_date(v: Any, formats: Iterable[str] = DEFAULT_FORMATS) -> Any:
    d = as_calendar_date(v, formats)
    return d.isoformat() if d is not None else v


def standardize_phone(v: Any, region: Optional[str] = None) -> Any:
    """
    Keep digits and a leading ``+``; ``00`` becomes ``+``; ``+`` is added when
    absent. With ``region`` set, numbers valid for that region are written in
    E.164 instead.
    """
    if isinstance(v, bool) or not isinstance(v, (str, int)):
        return v
    s = str(v).strip()
    if not re.search(r"\d", s):
        return v
    if region:
        try:
            parsed = phonenumbers.parse(s, region)
            if phonenumbers.is_valid_number(parsed):
                return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
        except phonenumbers.NumberParseException:
            pass
    plus = s.startswith("+")
    digits = re.sub(r"\D", "", s)
    if not plus and digits.startswith("00"):
        digits = digits[2:]
    return "+" + digits


def standardize_iban(v: Any) -> Any:
    return re.sub(r"\s+", "", v).upper() if isinstance(v, str) else v


# ---- dispatch table ----

def build_handlers(cfg: RootCfg | None = None) -> Dict[DetectedType, TypeHandler]:
    """Validator/standardizer pair per type, bound to the profiling config."""
    p = resolve_config(cfg).profiling
    formats = tuple(p.datetime_formats)
    return {
        DetectedType.NUMBER: TypeHandler(DetectedType.NUMBER, rz.is_number),
        DetectedType.DATE: TypeHandler(
            DetectedType.DATE,
            partial(rz.is_date, formats=formats),
            partial(standardize_date, formats=formats),
        ),
        DetectedType.EMAIL: TypeHandler(DetectedType.EMAIL, rz.is_email, standardize_email),
        DetectedType.PHONE: TypeHandler(
            DetectedType.PHONE,
            partial(rz.is_phone, region=p.phone_region, mode=p.phone_validation),
            standardize_phone,
        ),
        DetectedType.URL: TypeHandler(DetectedType.URL, rz.is_url),
        DetectedType.IBAN: TypeHandler(DetectedType.IBAN, rz.is_iban, standardize_iban),
        DetectedType.BOOLEAN: TypeHandler(
            DetectedType.BOOLEAN,
            partial(rz.is_boolean, extra_tokens=tuple(p.extra_bool_tokens)),
        ),
        DetectedType.TEXT: TypeHandler(DetectedType.TEXT, _always_valid),
        DetectedType.UNKNOWN: TypeHandler(DetectedType.UNKNOWN, _always_valid),
    }
