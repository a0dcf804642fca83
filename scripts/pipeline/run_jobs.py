from __future__ import annotations
from datetime import datetime
import argparse
import sys
import pytz

from dataclean.config_model.model import RootCfg
from dataclean.io.readers import read_path
from dataclean.jobs import JsonFileJobStore, create_job, due_jobs, export_ics, run_job
from dataclean.utils.log import configure_from

def _cmd_add(store: JsonFileJobStore, cfg: RootCfg, args) -> None:
    job = create_job(store, args.name, args.frequency, source=args.source, time=args.time, cfg=cfg)
    print(f"[jobs] {job.id} next run {job.next_run}")
    if args.ics:
        with open(args.ics, "w", encoding="utf-8", newline="") as f:
            f.write(export_ics(job))
        print(f"[jobs] calendar entry -> {args.ics}", file=sys.stderr)

def _cmd_list(store: JsonFileJobStore) -> None:
    for j in store.list_jobs():
        print(f"{j.id}  {j.name:<20} {j.frequency:<8} {j.time}  next={j.next_run}  status={j.status}")

def _cmd_run(store: JsonFileJobStore, cfg: RootCfg, job_ids: list[str]) -> int:
    failed = 0
    loader = lambda src: read_path(src, cfg=cfg)
    for jid in job_ids:
        run = run_job(store, jid, loader, cfg)
        print(f"[run] {jid}: {run.status} {run.note}")
        failed += run.status == "failed"
    return failed

def main() -> None:
    ap = argparse.ArgumentParser(description="Manage and run scheduled cleaning jobs.")
    ap.add_argument("--config", default=None)
    sub = ap.add_subparsers(dest="cmd", required=True)

    add = sub.add_parser("add", help="Create a job")
    add.add_argument("name")
    add.add_argument("source", help="Input file the job reads on every run")
    add.add_argument("--frequency", choices=["daily", "weekly", "monthly"], default="daily")
    add.add_argument("--time", default=None, help="HH:MM (default: jobs.default_time)")
    add.add_argument("--ics", default=None, help="Also write an .ics calendar entry")

    sub.add_parser("list", help="List jobs")

    run = sub.add_parser("run", help="Run the given jobs, or every due job")
    run.add_argument("job_ids", nargs="*")

    args = ap.parse_args()
    cfg = RootCfg.load(args.config)
    configure_from(cfg.logging)
    store = JsonFileJobStore(cfg.jobs.store_path)

    if args.cmd == "add":
        _cmd_add(store, cfg, args)
    elif args.cmd == "list":
        _cmd_list(store)
    else:
        ids = args.job_ids or [j.id for j in due_jobs(store, datetime.now(pytz.utc))]
        if not ids:
            print("[run] nothing due")
        sys.exit(1 if _cmd_run(store, cfg, ids) else 0)

if __name__ == "__main__":
    main()
