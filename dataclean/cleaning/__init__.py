from __future__ import annotations

# Public API re-exports (keep small & stable)
from .suggestions import (
    ActionKind,
    CorrectionSuggestion,
    CorrectionPlan,
    suggest,
    suggest_all,
    default_plan,
)
from .engine import (
    ApplyResult,
    CancelToken,
    CorrectionApplier,
    apply_plan,
)
from .report import build_comparison_report
