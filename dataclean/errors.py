from __future__ import annotations
from typing import Any, Dict, Optional

__all__ = [
    "DataCleanError",
    "DatasetShapeError",
    "UnknownColumnError",
    "UnknownSuggestionError",
    "UnknownActionError",
    "InvalidTransition",
    "ApplyCancelled",
    "UnsupportedFormat",
    "SizeExceeded",
    "ParseError",
    "JobNotFound",
]


class DataCleanError(Exception):
    """Base error; ``details`` carries structured context for logs and reports."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        ctx = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({ctx})"


# ---- core engine ----

class DatasetShapeError(DataCleanError):
    """Input rows are not a table (non-mapping row, non-Dataset input)."""


class UnknownColumnError(DataCleanError):
    def __init__(self, column: str, available: Optional[list] = None):
        details: Dict[str, Any] = {"column": column}
        if available is not None:
            details["available"] = list(available)
        super().__init__(f"unknown column {column!r}", details)
        self.column = column


class UnknownSuggestionError(DataCleanError):
    def __init__(self, column: str, suggestion_id: str):
        super().__init__(
            f"unknown suggestion {suggestion_id!r} for column {column!r}",
            {"column": column, "suggestion_id": suggestion_id},
        )
        self.column = column
        self.suggestion_id = suggestion_id


class UnknownActionError(DataCleanError):
    def __init__(self, action_kind: str, column: Optional[str] = None):
        super().__init__(
            f"unknown action {action_kind!r}",
            {"action_kind": action_kind, "column": column},
        )
        self.action_kind = action_kind


class InvalidTransition(DataCleanError):
    def __init__(self, operation: str, state: str):
        super().__init__(
            f"cannot {operation} while {state}",
            {"operation": operation, "state": state},
        )
        self.operation = operation
        self.state = state


class ApplyCancelled(DataCleanError):
    def __init__(self, stage: str):
        super().__init__(f"apply cancelled before {stage}", {"stage": stage})
        self.stage = stage


# ---- ingestion ----

class UnsupportedFormat(DataCleanError):
    def __init__(self, fmt: str):
        super().__init__(f"unsupported format {fmt!r}", {"format": fmt})
        self.format = fmt


class SizeExceeded(DataCleanError):
    def __init__(self, size: int, limit: int):
        super().__init__(
            f"payload of {size} bytes exceeds the {limit} byte limit",
            {"size": size, "limit": limit},
        )
        self.size = size
        self.limit = limit


class ParseError(DataCleanError):
    """The payload could not be read in its declared format."""


# ---- jobs ----

class JobNotFound(DataCleanError):
    def __init__(self, job_id: str):
        super().__init__(f"unknown job {job_id!r}", {"job_id": job_id})
        self.job_id = job_id
