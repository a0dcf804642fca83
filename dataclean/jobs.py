from __future__ import annotations
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol
import calendar
import json
import os
import re
import pytz

from .cleaning.suggestions import CorrectionPlan, plan_from_dict, plan_to_dict
from .config_model.model import RootCfg, resolve_config
from .dataset import Dataset
from .errors import JobNotFound
from .orchestrator import ProfileOrchestrator
from .utils.ids import short_id
from .utils.log import get_logger
from .utils.time import to_timezone

__all__ = [
    "Frequency",
    "JobStatus",
    "Job",
    "JobRun",
    "JobStore",
    "InMemoryJobStore",
    "JsonFileJobStore",
    "next_run_at",
    "create_job",
    "due_jobs",
    "run_job",
    "export_ics",
]

_log = get_logger("dataclean.jobs")
_HHMM_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# ---- Data classes ----

@dataclass(frozen=True)
class Job:
    id: str
    name: str
    frequency: str
    time: str
    timezone: str
    source: str
    plan: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    status: str = JobStatus.PENDING.value
    next_run: Optional[str] = None
    last_run: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Job":
        return cls(**{k: d[k] for k in cls.__dataclass_fields__ if k in d})

    def correction_plan(self) -> Dict[str, tuple]:
        return plan_from_dict(self.plan)


@dataclass(frozen=True)
class JobRun:
    id: str
    job_id: str
    started_at: str
    finished_at: Optional[str] = None
    status: str = JobStatus.RUNNING.value
    note: str = ""
    log: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "JobRun":
        return cls(**{k: d[k] for k in cls.__dataclass_fields__ if k in d})


# ---- stores ----

class JobStore(Protocol):
    def save_job(self, job: Job) -> None: ...
    def get_job(self, job_id: str) -> Optional[Job]: ...
    def list_jobs(self) -> List[Job]: ...
    def delete_job(self, job_id: str) -> bool: ...
    def add_run(self, run: JobRun) -> None: ...
    def list_runs(self, job_id: Optional[str] = None) -> List[JobRun]: ...


class InMemoryJobStore:
    def __init__(self) -> None:
        self._jobs: Dict[str, Job] = {}
        self._runs: List[JobRun] = []

    def save_job(self, job: Job) -> None:
        self._jobs[job.id] = job

    def get_job(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)

    def list_jobs(self) -> List[Job]:
        return list(self._jobs.values())

    def delete_job(self, job_id: str) -> bool:
        return self._jobs.pop(job_id, None) is not None

    def add_run(self, run: JobRun) -> None:
        # newest first
        self._runs.insert(0, run)

    def list_runs(self, job_id: Optional[str] = None) -> List[JobRun]:
        return [r for r in self._runs if job_id is None or r.job_id == job_id]


class JsonFileJobStore:
    """Jobs and runs in one JSON document; every write replaces the file atomically."""

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)

    def _load(self) -> Dict[str, List[Dict[str, Any]]]:
        if not self.path.exists():
            return {"jobs": [], "runs": []}
        raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        return {"jobs": list(raw.get("jobs", [])), "runs": list(raw.get("runs", []))}

    def _dump(self, doc: Dict[str, List[Dict[str, Any]]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(doc, ensure_ascii=False, indent=2, default=str), encoding="utf-8")
        os.replace(tmp, self.path)

    def save_job(self, job: Job) -> None:
        doc = self._load()
        doc["jobs"] = [j for j in doc["jobs"] if j.get("id") != job.id] + [job.to_dict()]
        self._dump(doc)

    def get_job(self, job_id: str) -> Optional[Job]:
        for j in self._load()["jobs"]:
            if j.get("id") == job_id:
                return Job.from_dict(j)
        return None

    def list_jobs(self) -> List[Job]:
        return [Job.from_dict(j) for j in self._load()["jobs"]]

    def delete_job(self, job_id: str) -> bool:
        doc = self._load()
        kept = [j for j in doc["jobs"] if j.get("id") != job_id]
        if len(kept) == len(doc["jobs"]):
            return False
        doc["jobs"] = kept
        self._dump(doc)
        return True

    def add_run(self, run: JobRun) -> None:
        doc = self._load()
        doc["runs"].insert(0, run.to_dict())
        self._dump(doc)

    def list_runs(self, job_id: Optional[str] = None) -> List[JobRun]:
        return [
            JobRun.from_dict(r) for r in self._load()["runs"]
            if job_id is None or r.get("job_id") == job_id
        ]


# ---- schedule ----

def _parse_hhmm(time_hhmm: str) -> tuple[int, int]:
    m = _HHMM_RE.match((time_hhmm or "").strip())
    if not m:
        raise ValueError(f"time must be HH:MM, got {time_hhmm!r}")
    return int(m.group(1)), int(m.group(2))


def _add_period(d: datetime, frequency: Frequency) -> datetime:
    if frequency is Frequency.DAILY:
        return d + timedelta(days=1)
    if frequency is Frequency.WEEKLY:
        return d + timedelta(days=7)
    year, month = (d.year + 1, 1) if d.month == 12 else (d.year, d.month + 1)
    day = min(d.day, calendar.monthrange(year, month)[1])
    return d.replace(year=year, month=month, day=day)


def next_run_at(
    frequency: str,
    time_hhmm: str,
    tz: str = "Europe/Paris",
    now: Optional[datetime] = None,
) -> datetime:
    """
    Next wall-clock ``HH:MM`` in ``tz`` strictly after ``now``: today's slot
    if still ahead, otherwise one period (day, week, month) later.
    """
    freq = Frequency(frequency)
    hour, minute = _parse_hhmm(time_hhmm)
    zone = pytz.timezone(tz)
    local_now = to_timezone(now or datetime.now(pytz.utc), tz)
    slot = datetime(local_now.year, local_now.month, local_now.day, hour, minute)
    if zone.localize(slot) <= local_now:
        slot = _add_period(slot, freq)
    return zone.localize(slot)


# ---- Public API ----

def create_job(
    store: JobStore,
    name: str,
    frequency: str,
    *,
    source: str,
    time: Optional[str] = None,
    plan: Optional[CorrectionPlan] = None,
    cfg: RootCfg | None = None,
    now: Optional[datetime] = None,
) -> Job:
    cfg = resolve_config(cfg)
    hhmm = time or cfg.jobs.default_time
    tz = cfg.jobs.timezone
    when = next_run_at(frequency, hhmm, tz, now)
    created = (now or datetime.now(pytz.utc)).isoformat()
    job = Job(
        id="job_" + short_id({"name": name, "source": source, "created": created}),
        name=name,
        frequency=Frequency(frequency).value,
        time=hhmm,
        timezone=tz,
        source=source,
        plan=plan_to_dict(plan or {}),
        next_run=when.isoformat(),
    )
    store.save_job(job)
    _log.info("job created", extra={"job_id": job.id, "next_run": job.next_run})
    return job


def due_jobs(store: JobStore, now: Optional[datetime] = None) -> List[Job]:
    """
    Jobs whose next run is at or before ``now``, earliest first.
    A naive ``now`` is read as UTC.
    """
    at = to_timezone(now, "UTC") if now is not None else datetime.now(pytz.utc)
    due = [j for j in store.list_jobs() if j.next_run and datetime.fromisoformat(j.next_run) <= at]
    return sorted(due, key=lambda j: datetime.fromisoformat(j.next_run))


def run_job(
    store: JobStore,
    job_id: str,
    loader: Callable[[str], Dataset],
    cfg: RootCfg | None = None,
    *,
    now: Optional[datetime] = None,
) -> JobRun:
    """
    Load the job's source, profile it and apply the stored plan (the default
    plan when none was stored) through a fresh orchestrator. Failures are
    recorded on the run, never raised.
    """
    cfg = resolve_config(cfg)
    job = store.get_job(job_id)
    if job is None:
        raise JobNotFound(job_id)

    started = now or datetime.now(pytz.utc)
    run_id = "run_" + short_id({"job": job.id, "at": started.isoformat()})
    store.save_job(replace(job, status=JobStatus.RUNNING.value))

    try:
        orch = ProfileOrchestrator(cfg)
        orch.ingest(loader(job.source))
        stored = job.correction_plan()
        if stored:
            orch.load_plan(stored)
        before = orch.global_score
        result = orch.apply()
        status = JobStatus.COMPLETED
        rows_before = len(orch.previous) if orch.previous is not None else 0
        note = f"{rows_before} -> {len(result.dataset)} rows, score {before:.1f} -> {orch.global_score:.1f}"
        log = list(result.log)
    except Exception as e:
        _log.warning("job run failed", extra={"job_id": job.id, "error": repr(e)})
        status, note, log = JobStatus.FAILED, f"{type(e).__name__}: {e}", []

    finished = datetime.now(pytz.utc) if now is None else now
    run = JobRun(
        id=run_id,
        job_id=job.id,
        started_at=started.isoformat(),
        finished_at=finished.isoformat(),
        status=status.value,
        note=note,
        log=log,
    )
    store.add_run(run)
    store.save_job(replace(
        job,
        status=status.value,
        last_run=started.isoformat(),
        next_run=next_run_at(job.frequency, job.time, job.timezone, started).isoformat(),
    ))
    _log.info("job run", extra={"job_id": job.id, "run_id": run.id, "status": run.status})
    return run


def export_ics(job: Job) -> str:
    """iCalendar event recurring on the job's frequency."""
    start = datetime.fromisoformat(job.next_run) if job.next_run else next_run_at(job.frequency, job.time, job.timezone)
    dt = start.astimezone(pytz.utc).strftime("%Y%m%dT%H%M%SZ")
    return "\r\n".join([
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//dataclean//EN",
        "BEGIN:VEVENT",
        f"UID:{job.id}@dataclean",
        f"DTSTAMP:{dt}",
        f"DTSTART:{dt}",
        f"RRULE:FREQ={Frequency(job.frequency).value.upper()}",
        f"SUMMARY:dataclean job - {job.name}",
        "END:VEVENT",
        "END:VCALENDAR",
    ])
