from __future__ import annotations

import argparse
import json
import sys

from dutyrota.io.csv_loader import load_repository, save_repository, save_slots
from dutyrota.models.config import EngineConfig, TieBreak
from dutyrota.models.validated import ValidatedScheduleRequest
from dutyrota.solver.allocator import DutyAllocator
from dutyrota.solver.validation import validate_slots
from dutyrota.utils.logging_setup import setup_logging, verbosity_to_level
from dutyrota.utils.structured_logging import configure_structlog


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="dutyrota", description="Fair duty allocation")
    p.add_argument("--data", required=True, help="Directory holding the roster CSV files")
    p.add_argument("--unit", required=True, help="Target unit ID (descendant units included)")
    p.add_argument("--start", required=True, help="First date, YYYY-MM-DD")
    p.add_argument("--end", required=True, help="Last date (inclusive), YYYY-MM-DD")
    p.add_argument("--assigned-by", default="system", help="ID recorded on created slots")
    p.add_argument("--preview", action="store_true", help="Forecast only, write nothing")
    p.add_argument("--clear-existing", action="store_true", help="Delete the unit's slots in range first")
    p.add_argument("--tie-break", choices=[t.value for t in TieBreak], default=TieBreak.RANDOM.value)
    p.add_argument("--seed", type=int, default=None, help="Seed for the random tie-break")
    p.add_argument("--max-range-days", type=int, default=90)
    p.add_argument("--out", default=None, help="Also write the run's slots to this CSV")
    p.add_argument("--json", dest="json_out", action="store_true", help="JSON output")
    p.add_argument("--log-file", default=None)
    p.add_argument("--json-logs", action="store_true", help="Structured logs as JSON")
    p.add_argument("-v", "--verbose", action="count", default=0)
    return p


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    setup_logging(level="DEBUG", log_file=args.log_file, console_level=verbosity_to_level(args.verbose))
    configure_structlog(json_output=args.json_logs)

    try:
        validated = ValidatedScheduleRequest(
            unit_id=args.unit,
            start_date=args.start,
            end_date=args.end,
            assigned_by=args.assigned_by,
            clear_existing=args.clear_existing,
            preview=args.preview,
            max_range_days=args.max_range_days,
        )
        repo = load_repository(args.data)
        config = EngineConfig(
            tie_break=TieBreak(args.tie_break),
            seed=args.seed,
            max_range_days=args.max_range_days,
        )
        allocator = DutyAllocator(repo, config)
        request = validated.to_request()
        if args.preview:
            result = allocator.preview_schedule(request)
        else:
            result = allocator.generate_schedule(request)
    except (ValueError, FileNotFoundError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if not args.preview:
        save_repository(repo, args.data)
    if args.out:
        save_slots(result.slots, args.out)

    check = validate_slots(repo.get_all_duty_slots() + (result.slots if args.preview else []), repo.duty_types)

    if args.json_out:
        payload = result.to_dict()
        payload["validation"] = check.as_dict()
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print("Preview:" if args.preview else "Schedule:")
        for k, v in result.summary().items():
            print(f" - {k}: {v}")
        for w in result.warnings:
            print(f" ! {w}")
        for e in result.errors:
            print(f" ✖ {e}")
        df = result.to_dataframe()
        if not df.empty:
            print(df[["date", "duty_type_id", "person_id", "points"]].to_string(index=False))
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
