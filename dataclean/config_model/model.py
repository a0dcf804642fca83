from __future__ import annotations
from typing import Dict, List, Literal, Optional
from pathlib import Path
import os
import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_CONFIG_PATH = "config/config.toml"
CONFIG_ENV_VAR = "DATACLEAN_CFG"


# ---------- Leaf models ----------

class ProfilingCfg(BaseModel):
    type_sample_size: int = Field(200, ge=1)
    preview_rows: int = Field(1000, ge=1)
    schema_sample_rows: int = Field(1000, ge=1)
    datetime_formats: List[str] = [
        "%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y", "%d/%m/%Y", "%d.%m.%Y",
        "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S",
    ]
    dayfirst: bool = False
    phone_region: str = "FR"
    phone_validation: Literal["strict", "digits"] = "strict"
    extra_bool_tokens: List[str] = ["oui", "non"]

    @model_validator(mode="after")
    def _dayfirst_order(self):
        # with dayfirst, try d/m/Y before m/d/Y
        if self.dayfirst and "%d/%m/%Y" in self.datetime_formats and "%m/%d/%Y" in self.datetime_formats:
            fmts = [f for f in self.datetime_formats if f not in ("%d/%m/%Y", "%m/%d/%Y")]
            idx = min(self.datetime_formats.index("%d/%m/%Y"), self.datetime_formats.index("%m/%d/%Y"))
            fmts[idx:idx] = ["%d/%m/%Y", "%m/%d/%Y"]
            object.__setattr__(self, "datetime_formats", fmts)
        return self


class WeightsCfg(BaseModel):
    missing: float = 0.4
    duplicate: float = 0.25
    invalid: float = 0.25
    outlier: float = 0.1

    @field_validator("missing", "duplicate", "invalid", "outlier")
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("quality weights must be >= 0")
        return v

    @model_validator(mode="after")
    def _weights_ok(self):
        total = self.missing + self.duplicate + self.invalid + self.outlier
        if total <= 0:
            # all-zero means "unset": back to defaults
            object.__setattr__(self, "missing", 0.4)
            object.__setattr__(self, "duplicate", 0.25)
            object.__setattr__(self, "invalid", 0.25)
            object.__setattr__(self, "outlier", 0.1)
        return self


class ScoringCfg(BaseModel):
    weights: WeightsCfg = WeightsCfg()
    zscore_threshold: float = Field(3.0, gt=0)
    outlier_denominator: Literal["numeric", "rows"] = "numeric"


class FuzzyCfg(BaseModel):
    enabled: bool = False
    similarity_threshold: float = Field(0.9, ge=0.0, le=1.0)
    max_rows: int = Field(200, ge=2)
    name_pattern: str = r"name|nom|fullname|full_name"


class SuggestionsCfg(BaseModel):
    # column -> composite dedupe key
    composite_keys: Dict[str, List[str]] = {}


class CleaningCfg(BaseModel):
    max_passes: int = Field(3, ge=1)


class IngestCfg(BaseModel):
    max_bytes: int = Field(50 * 1024 * 1024, ge=1)
    json_lines: bool = False


class JobsCfg(BaseModel):
    store_path: str = "data/jobs.json"
    default_time: str = "09:00"
    timezone: str = "Europe/Paris"


class AssistantCfg(BaseModel):
    fallback_message: str = (
        "The assistant is unavailable right now. Review the columns with the lowest "
        "quality score first and apply the suggested corrections."
    )
    top_issues: int = Field(3, ge=1)
    max_history: int = Field(20, ge=1)


class LoggingCfg(BaseModel):
    level: str = "INFO"
    structured_json: bool = True


# ---------- Root ----------

class RootCfg(BaseModel):
    model_config = ConfigDict(extra="ignore")

    profiling: ProfilingCfg = ProfilingCfg()
    scoring: ScoringCfg = ScoringCfg()
    fuzzy: FuzzyCfg = FuzzyCfg()
    suggestions: SuggestionsCfg = SuggestionsCfg()
    cleaning: CleaningCfg = CleaningCfg()
    ingest: IngestCfg = IngestCfg()
    jobs: JobsCfg = JobsCfg()
    assistant: AssistantCfg = AssistantCfg()
    logging: LoggingCfg = LoggingCfg()

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str]) -> "RootCfg":
        p = Path(path)

        def _parse_raw_dict() -> dict:
            try:
                with p.open("rb") as f:
                    return tomllib.load(f)
            except tomllib.TOMLDecodeError:
                pass
            # Retry without a BOM / stray zero-width chars
            text = p.read_text(encoding="utf-8-sig", errors="replace")
            cleaned = text.strip().lstrip("\ufeff\u200b\u200c\u200d\u2060")
            try:
                return tomllib.loads(cleaned)
            except tomllib.TOMLDecodeError as e:
                snippet = cleaned[:80].replace("\n", "\\n")
                raise RuntimeError(
                    f"Failed to parse TOML at {p}. First chars: {snippet!r}"
                ) from e

        raw = _parse_raw_dict()

        # shim: [scoring] may carry the weights flat (w_missing = ...)
        scoring = raw.setdefault("scoring", {})
        flat = {k[2:]: scoring.pop(k) for k in list(scoring) if k.startswith("w_")}
        if flat:
            scoring.setdefault("weights", {}).update(flat)

        return cls.model_validate(raw)

    @classmethod
    def load(cls, path: str | None = None) -> "RootCfg":
        final = Path(path or os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))
        if not final.exists():
            if path is not None:
                raise FileNotFoundError(f"config file not found: {final}")
            return cls()
        return cls.from_toml(final.resolve())


def load_config(path: str | None = None) -> RootCfg:
    return RootCfg.load(path)


def resolve_config(cfg: Optional[RootCfg]) -> RootCfg:
    return cfg if cfg is not None else RootCfg()
