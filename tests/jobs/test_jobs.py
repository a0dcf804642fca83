from __future__ import annotations
from datetime import datetime
from pathlib import Path
import pytest
import pytz

from dataclean.cleaning.suggestions import CorrectionSuggestion
from dataclean.errors import JobNotFound
from dataclean.jobs import (
    InMemoryJobStore,
    Job,
    JobStatus,
    JsonFileJobStore,
    create_job,
    due_jobs,
    export_ics,
    next_run_at,
    run_job,
)

PARIS = pytz.timezone("Europe/Paris")
NOW = datetime(2024, 1, 10, 7, 0, tzinfo=pytz.utc)  # 08:00 in Paris


def test_next_run_same_day_when_slot_ahead():
    nxt = next_run_at("daily", "09:00", "Europe/Paris", NOW)
    assert nxt == PARIS.localize(datetime(2024, 1, 10, 9, 0))


def test_next_run_rolls_over_per_frequency():
    assert next_run_at("daily", "07:30", "Europe/Paris", NOW) == PARIS.localize(datetime(2024, 1, 11, 7, 30))
    assert next_run_at("weekly", "07:30", "Europe/Paris", NOW) == PARIS.localize(datetime(2024, 1, 17, 7, 30))
    end_of_month = PARIS.localize(datetime(2024, 1, 31, 13, 0))
    assert next_run_at("monthly", "09:00", "Europe/Paris", end_of_month) == PARIS.localize(datetime(2024, 2, 29, 9, 0))


def test_next_run_rejects_bad_input():
    with pytest.raises(ValueError):
        next_run_at("daily", "25:00", now=NOW)
    with pytest.raises(ValueError):
        next_run_at("hourly", "09:00", now=NOW)


def test_create_job_defaults(cfg):
    store = InMemoryJobStore()
    job = create_job(store, "nightly", "daily", source="data/customers.csv", cfg=cfg, now=NOW)
    assert job.id.startswith("job_")
    assert job.time == "09:00"
    assert job.timezone == "Europe/Paris"
    assert job.status == JobStatus.PENDING.value
    assert job.next_run == PARIS.localize(datetime(2024, 1, 10, 9, 0)).isoformat()
    assert store.get_job(job.id) == job


def test_run_job_with_default_plan(customers):
    store = InMemoryJobStore()
    job = create_job(store, "nightly", "daily", source="mem://customers", now=NOW)
    seen = []

    def loader(src):
        seen.append(src)
        return customers

    run = run_job(store, job.id, loader, now=NOW)
    assert seen == ["mem://customers"]
    assert run.status == JobStatus.COMPLETED.value
    assert run.note.startswith("5 -> 4 rows")
    assert run.log
    updated = store.get_job(job.id)
    assert updated.status == JobStatus.COMPLETED.value
    assert updated.last_run == NOW.isoformat()
    assert store.list_runs(job.id) == [run]


def test_run_job_with_stored_plan(customers):
    store = InMemoryJobStore()
    s = CorrectionSuggestion("normalize-text-name", "norm", "normalize_text", "name")
    job = create_job(store, "names", "weekly", source="x", plan={"name": (s,)}, now=NOW)
    run = run_job(store, job.id, lambda _: customers, now=NOW)
    assert run.log == ["normalized text on column name (2 values changed)"]


def test_run_job_failure_is_recorded():
    store = InMemoryJobStore()
    job = create_job(store, "broken", "daily", source="missing.csv", now=NOW)

    def loader(src):
        raise FileNotFoundError(src)

    run = run_job(store, job.id, loader, now=NOW)
    assert run.status == JobStatus.FAILED.value
    assert run.note.startswith("FileNotFoundError")
    assert store.get_job(job.id).status == JobStatus.FAILED.value


def test_run_unknown_job():
    with pytest.raises(JobNotFound):
        run_job(InMemoryJobStore(), "job_nope", lambda _: None)


def test_json_store_round_trip(tmp_path: Path, customers):
    store = JsonFileJobStore(tmp_path / "state" / "jobs.json")
    assert store.list_jobs() == []
    job = create_job(store, "nightly", "monthly", source="x", now=NOW)
    assert store.get_job(job.id) == job
    r1 = run_job(store, job.id, lambda _: customers, now=NOW)
    r2 = run_job(store, job.id, lambda _: customers, now=datetime(2024, 1, 11, 7, 0, tzinfo=pytz.utc))
    assert [r.id for r in store.list_runs(job.id)] == [r2.id, r1.id]
    assert not (tmp_path / "state" / "jobs.json.tmp").exists()
    assert store.delete_job(job.id) is True
    assert store.delete_job(job.id) is False
    assert store.get_job(job.id) is None


def test_job_dict_round_trip():
    job = Job(id="job_1", name="n", frequency="daily", time="09:00", timezone="UTC", source="s")
    assert Job.from_dict(job.to_dict()) == job
    assert job.correction_plan() == {}


def test_export_ics():
    job = create_job(InMemoryJobStore(), "weekly report", "weekly", source="x", now=NOW)
    ics = export_ics(job)
    lines = ics.split("\r\n")
    assert lines[0] == "BEGIN:VCALENDAR"
    assert "RRULE:FREQ=WEEKLY" in lines
    assert "DTSTART:20240110T080000Z" in lines
    assert f"UID:{job.id}@dataclean" in lines
    assert lines[-1] == "END:VCALENDAR"


def test_due_jobs_by_next_run():
    store = InMemoryJobStore()
    early = create_job(store, "early", "daily", source="a", time="08:30", now=NOW)
    late = create_job(store, "late", "daily", source="b", time="10:00", now=NOW)
    at_nine = datetime(2024, 1, 10, 8, 0, tzinfo=pytz.utc)
    assert [j.id for j in due_jobs(store, at_nine)] == [early.id]
    assert [j.id for j in due_jobs(store, datetime(2024, 1, 11, tzinfo=pytz.utc))] == [early.id, late.id]
    assert due_jobs(store, NOW) == []


def test_due_jobs_reads_naive_now_as_utc():
    store = InMemoryJobStore()
    early = create_job(store, "early", "daily", source="a", time="08:30", now=NOW)
    create_job(store, "late", "daily", source="b", time="10:00", now=NOW)
    assert [j.id for j in due_jobs(store, datetime(2024, 1, 10, 8, 0))] == [early.id]
