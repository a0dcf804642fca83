from __future__ import annotations

# Public API re-exports (keep small & stable)
from .handlers import DetectedType, TypeHandler, build_handlers
from .detect import detect, detect_scores
from .metrics import (
    ColumnProfile,
    DatasetProfile,
    compute_profile,
    profile_column,
    profile_dataset,
    quality_score,
)
