from __future__ import annotations
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple
import pandas as pd

from ..config_model.model import RootCfg, resolve_config
from ..dataset import Dataset
from ..errors import ApplyCancelled, UnknownActionError, UnknownColumnError
from ..profiling.handlers import DetectedType, TypeHandler, build_handlers, standardize_phone
from ..utils.log import get_logger
from .rules_builtin.dedupe import dedupe_rows
from .rules_builtin.missing import impute_mean, impute_mode
from .rules_builtin.standardize import standardize_values
from .rules_builtin.text_norm import normalize_text
from .suggestions import ActionKind, CorrectionPlan, CorrectionSuggestion

_log = get_logger("dataclean.cleaning")

# stage -> action kinds it runs, in execution order
STAGES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("dedupe", (ActionKind.DEDUPE.value, ActionKind.DEDUPE_COMPOSITE.value)),
    ("impute", (ActionKind.IMPUTE_MEAN.value, ActionKind.IMPUTE_MODE.value)),
    ("standardize", (ActionKind.STANDARDIZE.value, ActionKind.NORMALIZE_TEXT.value)),
)
KNOWN_ACTIONS = frozenset(k.value for k in ActionKind)


# ---- Data classes ----

@dataclass
class CancelToken:
    """Cooperative cancellation, checked by the applier between stages."""
    _cancelled: bool = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self, stage: str) -> None:
        if self._cancelled:
            raise ApplyCancelled(stage)


@dataclass(frozen=True)
class ApplyResult:
    dataset: Dataset
    log: Tuple[str, ...] = ()
    passes: int = 1

    def __iter__(self) -> Iterator[Any]:
        # allows ``new_ds, log = apply_plan(...)``
        return iter((self.dataset, list(self.log)))


@dataclass(frozen=True)
class _Ctx:
    cfg: RootCfg
    handlers: Mapping[DetectedType, TypeHandler]
    first_pass: bool
    log: List[str] = field(default_factory=list)


# ---- actions: (frame, suggestion, ctx) -> frame ----

def _act_dedupe(df: pd.DataFrame, s: CorrectionSuggestion, ctx: _Ctx) -> pd.DataFrame:
    keys = list(s.args.get("keys") or [s.column])
    out, removed = dedupe_rows(
        df,
        keys,
        fuzzy_threshold=s.args.get("fuzzy_threshold"),
        max_rows=ctx.cfg.fuzzy.max_rows,
    )
    if ctx.first_pass or removed:
        where = f"column {keys[0]}" if len(keys) == 1 else f"columns {', '.join(keys)}"
        ctx.log.append(f"removed {removed} duplicate rows on {where}")
    _log.debug("dedupe", extra={"column": s.column, "keys": keys, "removed": removed})
    return out


def _act_impute_mean(df: pd.DataFrame, s: CorrectionSuggestion, ctx: _Ctx) -> pd.DataFrame:
    col, n, mean = impute_mean(df[s.column])
    if mean is None:
        return df
    out = df.copy(deep=True)
    out[s.column] = col
    if n:
        ctx.log.append(f"imputed mean {mean:g} on column {s.column} ({n} cells)")
    return out


def _act_impute_mode(df: pd.DataFrame, s: CorrectionSuggestion, ctx: _Ctx) -> pd.DataFrame:
    col, n, mode = impute_mode(df[s.column])
    if mode is None:
        return df
    out = df.copy(deep=True)
    out[s.column] = col
    if n:
        ctx.log.append(f"imputed mode {mode!r} on column {s.column} ({n} cells)")
    return out


def _standardizer(s: CorrectionSuggestion, ctx: _Ctx) -> Callable[[Any], Any]:
    raw = s.args.get("type")
    try:
        t = DetectedType(raw)
    except ValueError:
        raise UnknownActionError(f"{s.action_kind}:{raw}", s.column) from None
    fn = ctx.handlers[t].standardize
    if fn is None:
        raise UnknownActionError(f"{s.action_kind}:{t.value}", s.column)
    if t is DetectedType.PHONE and s.args.get("region"):
        fn = partial(standardize_phone, region=str(s.args["region"]))
    return fn


def _act_standardize(df: pd.DataFrame, s: CorrectionSuggestion, ctx: _Ctx) -> pd.DataFrame:
    col, changed = standardize_values(df[s.column], _standardizer(s, ctx))
    out = df.copy(deep=True)
    out[s.column] = col
    if ctx.first_pass:
        ctx.log.append(f"standardized {s.args.get('type')} on column {s.column} ({changed} values changed)")
    return out


def _act_normalize_text(df: pd.DataFrame, s: CorrectionSuggestion, ctx: _Ctx) -> pd.DataFrame:
    col, changed = normalize_text(df[s.column])
    out = df.copy(deep=True)
    out[s.column] = col
    if ctx.first_pass:
        ctx.log.append(f"normalized text on column {s.column} ({changed} values changed)")
    return out


_REGISTRY: Dict[str, Callable[[pd.DataFrame, CorrectionSuggestion, _Ctx], pd.DataFrame]] = {
    ActionKind.DEDUPE.value: _act_dedupe,
    ActionKind.DEDUPE_COMPOSITE.value: _act_dedupe,
    ActionKind.IMPUTE_MEAN.value: _act_impute_mean,
    ActionKind.IMPUTE_MODE.value: _act_impute_mode,
    ActionKind.STANDARDIZE.value: _act_standardize,
    ActionKind.NORMALIZE_TEXT.value: _act_normalize_text,
}


# ---- helpers ----

def validate_plan(
    dataset: Dataset,
    plan: CorrectionPlan,
    handlers: Mapping[DetectedType, TypeHandler],
) -> List[CorrectionSuggestion]:
    """Flatten the plan in order; unknown columns or actions are caller errors."""
    cols = list(dataset.columns)
    flat: List[CorrectionSuggestion] = []
    for column, items in plan.items():
        if column not in dataset.columns:
            raise UnknownColumnError(column, cols)
        for s in items:
            if s.action_kind not in KNOWN_ACTIONS:
                raise UnknownActionError(s.action_kind, column)
            for k in s.args.get("keys") or []:
                if k not in dataset.columns:
                    raise UnknownColumnError(k, cols)
            if s.action_kind == ActionKind.STANDARDIZE.value:
                t = s.args.get("type")
                if t not in {h.value for h, th in handlers.items() if th.standardize is not None}:
                    raise UnknownActionError(f"{s.action_kind}:{t}", column)
            if s.column != column:
                s = CorrectionSuggestion(s.id, s.label, s.action_kind, column, dict(s.args), s.selected_by_default)
            flat.append(s)
    return flat


def _run_pass(
    df: pd.DataFrame,
    actions: Sequence[CorrectionSuggestion],
    ctx: _Ctx,
    cancel_token: Optional[CancelToken],
) -> pd.DataFrame:
    for stage, kinds in STAGES:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(stage)
        for s in actions:
            if s.action_kind in kinds:
                df = _REGISTRY[s.action_kind](df, s, ctx)
    return df


# ---- Public API ----

def apply_plan(
    dataset: Dataset,
    plan: CorrectionPlan,
    cfg: RootCfg | None = None,
    *,
    cancel_token: Optional[CancelToken] = None,
) -> ApplyResult:
    """
    Apply the selected suggestions in fixed stage order: dedupe, impute,
    standardize. Pure: the input snapshot is never mutated.

    Imputation and standardization can create new dedupe key collisions, so
    the pass repeats until the content stops changing (``cleaning.max_passes``);
    follow-up passes only log dedupe removals. The result is a fixed point of
    the plan, hence applying it again changes nothing.
    """
    cfg = resolve_config(cfg)
    handlers = build_handlers(cfg)
    actions = validate_plan(dataset, plan, handlers)

    log: List[str] = []
    if not actions:
        _log.info("apply: empty plan", extra={"rows": len(dataset)})
        return ApplyResult(dataset=dataset, log=(), passes=0)

    current = dataset
    passes = 0
    while passes < cfg.cleaning.max_passes:
        passes += 1
        ctx = _Ctx(cfg=cfg, handlers=handlers, first_pass=passes == 1, log=log)
        nxt = current.with_frame(_run_pass(current.frame, actions, ctx, cancel_token))
        changed = not nxt.equals(current)
        current = nxt
        if not changed:
            break

    _log.info(
        "apply: done",
        extra={"rows_before": len(dataset), "rows_after": len(current), "passes": passes, "actions": len(actions)},
    )
    return ApplyResult(dataset=current, log=tuple(log), passes=passes)


class CorrectionApplier:
    """Config-bound applier, the form the orchestrator holds."""

    def __init__(self, cfg: RootCfg | None = None):
        self.cfg = resolve_config(cfg)

    def apply(
        self,
        dataset: Dataset,
        plan: CorrectionPlan,
        *,
        cancel_token: Optional[CancelToken] = None,
    ) -> ApplyResult:
        return apply_plan(dataset, plan, self.cfg, cancel_token=cancel_token)
