from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..config_model.model import RootCfg, resolve_config
from ..profiling.handlers import DetectedType
from ..profiling.metrics import ColumnProfile
from ..utils.ids import make_suggestion_id

__all__ = [
    "ActionKind",
    "CorrectionSuggestion",
    "CorrectionPlan",
    "STANDARDIZABLE_TYPES",
    "suggest",
    "suggest_all",
    "select_defaults",
    "default_plan",
    "plan_to_dict",
    "plan_from_dict",
]


class ActionKind(str, Enum):
    DEDUPE = "dedupe"
    DEDUPE_COMPOSITE = "dedupe_composite"
    IMPUTE_MEAN = "impute_mean"
    IMPUTE_MODE = "impute_mode"
    STANDARDIZE = "standardize"
    NORMALIZE_TEXT = "normalize_text"
    KEEP_AS_IS = "keep_as_is"


STANDARDIZABLE_TYPES = (
    DetectedType.EMAIL,
    DetectedType.DATE,
    DetectedType.PHONE,
    DetectedType.IBAN,
)

_STANDARDIZE_LABELS = {
    DetectedType.EMAIL: "Standardize emails (trim, lowercase)",
    DetectedType.DATE: "Standardize dates (ISO 8601)",
    DetectedType.PHONE: "Standardize phone numbers (E.164)",
    DetectedType.IBAN: "Standardize IBANs (compact, uppercase)",
}


def _freeze_args(args: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    # read-only view; list values become tuples
    return MappingProxyType({
        str(k): tuple(v) if isinstance(v, (list, tuple)) else v
        for k, v in dict(args or {}).items()
    })


@dataclass(frozen=True)
class CorrectionSuggestion:
    """A proposed action: plain data, interpreted by the applier."""
    id: str
    label: str
    action_kind: str
    column: str
    args: Mapping[str, Any] = field(default_factory=dict, hash=False)
    selected_by_default: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", _freeze_args(self.args))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "action_kind": self.action_kind,
            "column": self.column,
            "args": {k: list(v) if isinstance(v, tuple) else v for k, v in self.args.items()},
            "selected_by_default": self.selected_by_default,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "CorrectionSuggestion":
        return cls(
            id=str(d["id"]),
            label=str(d.get("label", "")),
            action_kind=str(d["action_kind"]),
            column=str(d["column"]),
            args=dict(d.get("args") or {}),
            selected_by_default=bool(d.get("selected_by_default", False)),
        )


# column -> ordered selected suggestions
CorrectionPlan = Mapping[str, Tuple[CorrectionSuggestion, ...]]


def _make(kind: ActionKind, column: str, label: str, args: Dict[str, Any], default: bool) -> CorrectionSuggestion:
    return CorrectionSuggestion(
        id=make_suggestion_id(kind.value, column),
        label=label,
        action_kind=kind.value,
        column=column,
        args=args,
        selected_by_default=default,
    )


# ---- Public API ----

def suggest(
    profile: ColumnProfile,
    *,
    composite_keys: Optional[Sequence[str]] = None,
    cfg: RootCfg | None = None,
) -> List[CorrectionSuggestion]:
    """
    Ordered suggestions for one column. Rules are independent; several may fire.
    ``composite_keys`` (or ``suggestions.composite_keys`` in config) asks for the
    composite dedupe variant.
    """
    col = profile.name
    t = DetectedType(profile.detected_type)
    if composite_keys is None:
        composite_keys = resolve_config(cfg).suggestions.composite_keys.get(col)

    out: List[CorrectionSuggestion] = []
    if profile.duplicate_pct > 0:
        out.append(_make(ActionKind.DEDUPE, col, "Remove duplicate rows (this column)", {"keys": [col]}, True))
        if composite_keys:
            keys = list(composite_keys)
            out.append(_make(
                ActionKind.DEDUPE_COMPOSITE, col,
                f"Remove duplicate rows (composite key: {', '.join(keys)})",
                {"keys": keys}, False,
            ))
    if profile.missing_pct > 0:
        if t is DetectedType.NUMBER:
            out.append(_make(ActionKind.IMPUTE_MEAN, col, "Fill missing values (mean)", {}, True))
        else:
            out.append(_make(ActionKind.IMPUTE_MODE, col, "Fill missing values (most frequent)", {}, True))
    if t in STANDARDIZABLE_TYPES:
        out.append(_make(
            ActionKind.STANDARDIZE, col, _STANDARDIZE_LABELS[t],
            {"type": t.value}, profile.invalid_pct > 0,
        ))
    if t is DetectedType.TEXT:
        out.append(_make(ActionKind.NORMALIZE_TEXT, col, "Normalize text (trim, strip accents)", {}, True))
    out.append(_make(ActionKind.KEEP_AS_IS, col, "Keep as is", {}, False))
    return out


def suggest_all(
    profiles: Iterable[ColumnProfile],
    cfg: RootCfg | None = None,
) -> Dict[str, List[CorrectionSuggestion]]:
    return {p.name: suggest(p, cfg=cfg) for p in profiles}


def select_defaults(suggestions: Mapping[str, Sequence[CorrectionSuggestion]]) -> Dict[str, Tuple[CorrectionSuggestion, ...]]:
    plan: Dict[str, Tuple[CorrectionSuggestion, ...]] = {}
    for col, items in suggestions.items():
        chosen = tuple(s for s in items if s.selected_by_default)
        if chosen:
            plan[col] = chosen
    return plan


def default_plan(profiles: Iterable[ColumnProfile], cfg: RootCfg | None = None) -> Dict[str, Tuple[CorrectionSuggestion, ...]]:
    """Plan made of every suggestion selected by default."""
    return select_defaults(suggest_all(profiles, cfg))


# ---- persistence helpers (job store) ----

def plan_to_dict(plan: CorrectionPlan) -> Dict[str, List[Dict[str, Any]]]:
    return {col: [s.to_dict() for s in items] for col, items in plan.items()}


def plan_from_dict(d: Mapping[str, Sequence[Mapping[str, Any]]]) -> Dict[str, Tuple[CorrectionSuggestion, ...]]:
    return {str(col): tuple(CorrectionSuggestion.from_dict(x) for x in items) for col, items in (d or {}).items()}
