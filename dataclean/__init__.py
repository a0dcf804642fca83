from __future__ import annotations

# Public API re-exports (keep small & stable)
from .config_model.model import RootCfg, load_config
from .dataset import CellKind, Dataset, cell_key, cell_kind, is_blank
from .errors import (
    ApplyCancelled,
    DataCleanError,
    DatasetShapeError,
    InvalidTransition,
    UnknownActionError,
    UnknownColumnError,
    UnknownSuggestionError,
)
from .profiling import ColumnProfile, DatasetProfile, DetectedType, compute_profile, detect, profile_dataset
from .cleaning import (
    ApplyResult,
    CancelToken,
    CorrectionApplier,
    CorrectionSuggestion,
    apply_plan,
    default_plan,
    suggest,
)
from .orchestrator import ProfileOrchestrator, State

__version__ = "0.1.0"
