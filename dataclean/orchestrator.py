from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from .cleaning.engine import ApplyResult, CancelToken, CorrectionApplier
from .cleaning.report import build_comparison_report
from .cleaning.suggestions import CorrectionSuggestion, select_defaults, suggest_all
from .config_model.model import RootCfg, resolve_config
from .dataset import Dataset
from .errors import DatasetShapeError, InvalidTransition, UnknownColumnError, UnknownSuggestionError
from .profiling.metrics import ColumnProfile, DatasetProfile, profile_dataset
from .utils.log import get_logger

__all__ = ["State", "HistoryEntry", "ProfileOrchestrator"]


class State(str, Enum):
    EMPTY = "empty"
    PROFILED = "profiled"
    PLAN_DRAFTED = "plan_drafted"
    APPLYING = "applying"


# operation -> states it may start from
_ALLOWED: Dict[str, FrozenSet[State]] = {
    "ingest": frozenset({State.EMPTY, State.PROFILED}),
    "select_suggestion": frozenset({State.PROFILED, State.PLAN_DRAFTED}),
    "load_plan": frozenset({State.PROFILED, State.PLAN_DRAFTED}),
    "apply": frozenset({State.PROFILED, State.PLAN_DRAFTED}),
    "report": frozenset({State.PROFILED, State.PLAN_DRAFTED}),
}


@dataclass(frozen=True)
class HistoryEntry:
    applied_at: datetime
    log: Tuple[str, ...]
    rows_before: int
    rows_after: int
    score_before: float
    score_after: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "applied_at": self.applied_at.isoformat(),
            "log": list(self.log),
            "rows_before": self.rows_before,
            "rows_after": self.rows_after,
            "score_before": self.score_before,
            "score_after": self.score_after,
        }


class ProfileOrchestrator:
    """
    Session state machine around one dataset:
    EMPTY -> PROFILED -> PLAN_DRAFTED -> APPLYING -> PROFILED, ``reset`` from anywhere.
    """

    def __init__(self, cfg: RootCfg | None = None, *, applier: Optional[CorrectionApplier] = None):
        self.cfg = resolve_config(cfg)
        self._applier = applier or CorrectionApplier(self.cfg)
        self._log = get_logger("dataclean.orchestrator")
        self._clear()

    def _clear(self) -> None:
        self._state = State.EMPTY
        self._dataset: Optional[Dataset] = None
        self._previous: Optional[Dataset] = None
        self._profile = DatasetProfile()
        self._previous_profile: Optional[DatasetProfile] = None
        self._suggestions: Dict[str, List[CorrectionSuggestion]] = {}
        self._plan: Dict[str, List[CorrectionSuggestion]] = {}
        self._history: List[HistoryEntry] = []

    # ---- read-only views ----

    @property
    def state(self) -> State:
        return self._state

    @property
    def dataset(self) -> Optional[Dataset]:
        return self._dataset

    @property
    def previous(self) -> Optional[Dataset]:
        return self._previous

    @property
    def profile(self) -> DatasetProfile:
        return self._profile

    @property
    def profiles(self) -> Tuple[ColumnProfile, ...]:
        return self._profile.columns

    @property
    def global_score(self) -> float:
        return self._profile.global_score

    @property
    def suggestions(self) -> Dict[str, List[CorrectionSuggestion]]:
        return {c: list(items) for c, items in self._suggestions.items()}

    @property
    def plan(self) -> Dict[str, Tuple[CorrectionSuggestion, ...]]:
        return {c: tuple(items) for c, items in self._plan.items() if items}

    @property
    def history(self) -> List[HistoryEntry]:
        return list(self._history)

    # ---- transitions ----

    def _require(self, operation: str) -> None:
        if self._state not in _ALLOWED[operation]:
            raise InvalidTransition(operation, self._state.value)

    def _move(self, new: State, operation: str) -> None:
        self._log.info(
            "transition",
            extra={"operation": operation, "from_state": self._state.value, "to_state": new.value},
        )
        self._state = new

    def _refresh(self, dataset: Dataset) -> None:
        self._dataset = dataset
        self._profile = profile_dataset(dataset, self.cfg)
        self._suggestions = suggest_all(self._profile.columns, self.cfg)

    def ingest(self, dataset: Dataset) -> DatasetProfile:
        """Profile a fresh dataset and draft the default plan."""
        self._require("ingest")
        if not isinstance(dataset, Dataset):
            raise DatasetShapeError("ingest expects a Dataset", {"got": type(dataset).__name__})
        self._clear()
        self._refresh(dataset)
        self._plan = {c: list(items) for c, items in select_defaults(self._suggestions).items()}
        self._move(State.PROFILED, "ingest")
        self._log.info(
            "ingested",
            extra={"rows": len(dataset), "columns": len(dataset.columns), "global_score": self.global_score},
        )
        return self._profile

    def select_suggestion(self, column: str, suggestion_id: str, selected: bool) -> None:
        self._require("select_suggestion")
        if column not in self._suggestions:
            raise UnknownColumnError(column, list(self._suggestions))
        current = self._plan.get(column, [])
        known = {s.id: s for s in self._suggestions[column]}
        if suggestion_id not in known and all(s.id != suggestion_id for s in current):
            raise UnknownSuggestionError(column, suggestion_id)

        if selected:
            if all(s.id != suggestion_id for s in current):
                self._plan[column] = current + [known[suggestion_id]]
        else:
            self._plan[column] = [s for s in current if s.id != suggestion_id]
        self._move(State.PLAN_DRAFTED, "select_suggestion")

    def load_plan(self, plan: Mapping[str, Sequence[CorrectionSuggestion]]) -> None:
        """Replace the drafted plan wholesale (stored plans, scheduled jobs)."""
        self._require("load_plan")
        for column in plan:
            if column not in self._suggestions:
                raise UnknownColumnError(column, list(self._suggestions))
        self._plan = {c: list(items) for c, items in plan.items()}
        self._move(State.PLAN_DRAFTED, "load_plan")

    def apply(self, cancel_token: Optional[CancelToken] = None) -> ApplyResult:
        """
        Run the current plan. The plan is kept, the prior snapshot stays
        available for comparison, and profiles/suggestions are refreshed.
        On error the state is restored and the error propagates.
        """
        self._require("apply")
        if self._dataset is None:
            raise InvalidTransition("apply", self._state.value)
        prior_state = self._state
        self._move(State.APPLYING, "apply")
        before_ds, before_profile, before_sugg = self._dataset, self._profile, self._suggestions
        try:
            result = self._applier.apply(before_ds, self.plan, cancel_token=cancel_token)
            self._refresh(result.dataset)
        except Exception:
            self._dataset, self._profile = before_ds, before_profile
            self._suggestions = before_sugg
            self._move(prior_state, "apply_failed")
            raise

        self._previous, self._previous_profile = before_ds, before_profile
        self._history.append(HistoryEntry(
            applied_at=datetime.now(timezone.utc),
            log=tuple(result.log),
            rows_before=len(before_ds),
            rows_after=len(result.dataset),
            score_before=before_profile.global_score,
            score_after=self._profile.global_score,
        ))
        self._move(State.PROFILED, "apply")
        return result

    def reset(self) -> None:
        self._move(State.EMPTY, "reset")
        self._clear()

    def report(self) -> Dict[str, Any]:
        """Before/after comparison of the latest apply (identity before any apply)."""
        self._require("report")
        before = self._previous_profile or self._profile
        log = self._history[-1].log if self._history else ()
        return build_comparison_report(before, self._profile, log)
