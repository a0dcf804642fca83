from __future__ import annotations
import argparse, json, sys
from pathlib import Path
from typing import List, Tuple

from dataclean.config_model.model import RootCfg
from dataclean.io.readers import read_path
from dataclean.io.writers import export_bundle
from dataclean.orchestrator import ProfileOrchestrator
from dataclean.profiling.metrics import DatasetProfile
from dataclean.utils.log import configure_from


def _print_profile(tag: str, profile: DatasetProfile) -> None:
    print(f"\n=== {tag}: global score {profile.global_score:.1f} ({profile.row_count} rows) ===")
    for c in profile.columns:
        print(
            f"  {c.name:<24} {c.detected_type.value:<8} score={c.quality_score:6.1f}  "
            f"missing={c.missing_pct:5.1f}%  dup={c.duplicate_pct:5.1f}%  "
            f"invalid={c.invalid_pct:5.1f}%  outliers={c.outlier_pct:5.1f}%"
        )


def _pairs(items: List[str]) -> List[Tuple[str, str]]:
    out = []
    for it in items:
        col, sep, sid = it.partition(":")
        if not sep:
            raise SystemExit(f"expected COLUMN:SUGGESTION_ID, got {it!r}")
        out.append((col, sid))
    return out


def main():
    ap = argparse.ArgumentParser(description="Profile one file, apply the (default) correction plan once, report.")
    ap.add_argument("path", help="Input file (csv, txt, json, ndjson, xlsx, xls, parquet)")
    ap.add_argument("--config", default=None, help="TOML config (default: $DATACLEAN_CFG or config/config.toml)")
    ap.add_argument("--format", default=None, help="Override the format inferred from the extension")
    ap.add_argument("--select", nargs="*", default=[], metavar="COL:ID",
                    help="Extra suggestions to select, e.g. email:dedupe-composite-email")
    ap.add_argument("--deselect", nargs="*", default=[], metavar="COL:ID",
                    help="Default suggestions to drop from the plan")
    ap.add_argument("--out", default=None, help="Write the export bundle (zip) here")
    ap.add_argument("--report-json", action="store_true", help="Print the before/after report as JSON")
    args = ap.parse_args()

    cfg = RootCfg.load(args.config)
    configure_from(cfg.logging)

    ds = read_path(args.path, fmt=args.format, cfg=cfg)
    orch = ProfileOrchestrator(cfg)
    _print_profile("BEFORE", orch.ingest(ds))

    for col, sid in _pairs(args.select):
        orch.select_suggestion(col, sid, True)
    for col, sid in _pairs(args.deselect):
        orch.select_suggestion(col, sid, False)

    print("\n=== PLAN ===")
    plan = orch.plan
    if not plan:
        print("  (empty)")
    for col, items in plan.items():
        print(f"  {col}: {', '.join(s.id for s in items)}")

    result = orch.apply()
    print("\n=== LOG ===")
    for line in result.log or ["(nothing to do)"]:
        print(f"  {line}")

    _print_profile("AFTER", orch.profile)
    report = orch.report()
    print(f"\n{report['summary']}")
    if args.report_json:
        print(json.dumps(report, indent=2, default=str))

    if args.out:
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(export_bundle(orch.dataset, orch.profile, log=result.log))
        print(f"[export] wrote {out}", file=sys.stderr)


if __name__ == "__main__":
    main()
