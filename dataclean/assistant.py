from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional
import json

from .cleaning.report import column_issues
from .config_model.model import RootCfg, resolve_config
from .profiling.metrics import DatasetProfile
from .utils.log import get_logger

__all__ = ["SYSTEM_PROMPT", "Message", "ChatBackend", "build_summary", "Assistant"]

_log = get_logger("dataclean.assistant")

Message = Dict[str, str]
# messages in, reply text out
ChatBackend = Callable[[List[Message]], str]

SYSTEM_PROMPT = (
    "You are a data-cleaning assistant for business spreadsheets. Answer briefly "
    "and concretely. Propose validation rules (email, E.164 phone numbers, ISO 8601 "
    "dates, IBAN, URL), deduplication strategies (fuzzy, composite keys), imputations "
    "(mean, mode) and ways to raise the quality score."
)


def build_summary(profile: DatasetProfile, top_n: int = 3) -> Dict[str, Any]:
    """Global score plus the ``top_n`` lowest-scoring columns that have defects."""
    top = column_issues(profile)[: max(0, top_n)]
    return {
        "global_score": round(profile.global_score, 1),
        "rows": profile.row_count,
        "columns": len(profile),
        "top_issues": [
            {
                "column": c.name,
                "type": c.detected_type.value,
                "score": round(c.quality_score, 1),
                "missing_pct": round(c.missing_pct, 1),
                "duplicate_pct": round(c.duplicate_pct, 1),
                "invalid_pct": round(c.invalid_pct, 1),
                "outlier_pct": round(c.outlier_pct, 1),
            }
            for c in top
        ],
    }


class Assistant:
    """
    Chat front for an injected backend. Any backend failure, or no backend at
    all, degrades to the configured fallback message.
    """

    def __init__(self, backend: Optional[ChatBackend] = None, cfg: RootCfg | None = None):
        self.backend = backend
        self.cfg = resolve_config(cfg).assistant
        self._history: List[Message] = []

    @property
    def history(self) -> List[Message]:
        return list(self._history)

    def reset(self) -> None:
        self._history = []

    def summarize(self, profile: DatasetProfile) -> Dict[str, Any]:
        return build_summary(profile, self.cfg.top_issues)

    def _messages(self, question: str, summary: Optional[Dict[str, Any]]) -> List[Message]:
        system = SYSTEM_PROMPT
        if summary:
            system += "\nDataset summary: " + json.dumps(summary, ensure_ascii=False, default=str)
        return [{"role": "system", "content": system}, *self._history, {"role": "user", "content": question}]

    def _remember(self, *msgs: Message) -> None:
        self._history.extend(msgs)
        overflow = len(self._history) - self.cfg.max_history
        if overflow > 0:
            del self._history[:overflow]

    def ask(self, question: str, summary: Optional[Dict[str, Any]] = None) -> str:
        question = (question or "").strip()
        if not question:
            return ""
        reply: Optional[str] = None
        if self.backend is None:
            _log.warning("assistant: no backend configured")
        else:
            try:
                reply = self.backend(self._messages(question, summary))
            except Exception as e:
                _log.warning("assistant: backend failed", extra={"error": repr(e)})
        if not isinstance(reply, str) or not reply.strip():
            reply = self.cfg.fallback_message
        self._remember({"role": "user", "content": question}, {"role": "assistant", "content": reply})
        return reply
