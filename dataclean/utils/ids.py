from __future__ import annotations
import hashlib, json
from typing import Any
from slugify import slugify as _slugify

def slugify(s: str) -> str:
    return _slugify(str(s), lowercase=True, separator="-") or "col"

def _json_dumps_stable(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), default=str)

def stable_hash(obj: Any, algo: str = "sha256") -> str:
    h = hashlib.new(algo)
    if hasattr(obj, "to_dict"):
        obj = obj.to_dict()
    h.update(_json_dumps_stable(obj).encode("utf-8"))
    return h.hexdigest()

def short_id(obj: Any, n: int = 10) -> str:
    return stable_hash(obj)[:n]

def make_suggestion_id(action_kind: str, column: str) -> str:
    return f"{action_kind.replace('_', '-')}-{slugify(column)}"
