"""Command-line interface for the scheduling-equity engine."""

from __future__ import annotations

import argparse
from datetime import date

from .config import load_config
from .engine.orchestrator import EquityEngine
from .io.export_csv import export_heatmap_csv, export_statuses_csv
from .io.import_csv import read_participants_csv, read_policies_csv
from .log import init_logging
from .services.holidays import upcoming_holidays
from .services.scoring import score_quality
from .services.timeplan import parse_utc_instant

DEGRADED_WARNING = "[WARN] Holiday data could not be verified for: {keys}. Holiday conflicts may be missing."


def _build_engine(args: argparse.Namespace) -> EquityEngine:
    cfg = load_config(args.config)
    if args.db:
        cfg.cache.db_url = args.db
    init_logging(args.log_level or cfg.log_level, json_output=args.log_json)
    return EquityEngine.from_config(cfg)


def _custom_policies(args: argparse.Namespace):
    return read_policies_csv(args.policies) if args.policies else ()


def _print_degraded(degraded_keys) -> None:
    if degraded_keys:
        keys = ", ".join(f"{code} {year}" for code, year in sorted(degraded_keys))
        print(DEGRADED_WARNING.format(keys=keys))


def _cmd_evaluate(args: argparse.Namespace) -> None:
    engine = _build_engine(args)
    participants = read_participants_csv(args.roster)
    result = engine.evaluate(participants, parse_utc_instant(args.at), _custom_policies(args))

    for s in result.statuses:
        flag = " (provisional)" if s.provisional else ""
        print(f"{s.participant.name:<24} {s.local_time:%a %Y-%m-%d %H:%M} {s.status.value:<8} {s.reason}{flag}")
    print(f"Equity score: {result.equity.score:.1f} ({score_quality(result.equity.score)})")
    _print_degraded(result.degraded_keys)

    if args.out:
        count = export_statuses_csv(result.statuses, args.out)
        print(f"[OK] Exported {count} participant statuses to {args.out}")


def _cmd_heatmap(args: argparse.Namespace) -> None:
    engine = _build_engine(args)
    participants = read_participants_csv(args.roster)
    result = engine.find_optimal_times(
        participants,
        date.fromisoformat(args.date),
        _custom_policies(args),
        top_n=args.top,
        anchor_timezone=args.anchor,
    )

    print(f"Best times on {result.target_date} ({result.anchor_timezone}):")
    for rank, slot in enumerate(result.suggestions, start=1):
        print(f"  {rank}. {slot.hour:02d}:00  score {slot.equity.score:.1f}  {slot.equity.breakdown()}")
    _print_degraded(result.degraded_keys)

    if args.out:
        count = export_heatmap_csv(result.slots, args.out)
        print(f"[OK] Exported {count} heatmap slots to {args.out}")


def _cmd_holidays(args: argparse.Namespace) -> None:
    engine = _build_engine(args)
    holidays, degraded = engine.holiday_cache.get(args.country, args.year)
    if args.upcoming is not None:
        start = date.fromisoformat(args.since) if args.since else date.today()
        holidays = upcoming_holidays(holidays, start, args.upcoming)
    for h in holidays:
        print(f"{h.date.isoformat()}  {h.name}")
    if degraded:
        _print_degraded({(args.country.upper(), args.year)})
    print(f"[OK] {len(holidays)} holidays")


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="equity-scheduler",
        description="Fair meeting-time scoring across timezones, work weeks and holidays",
    )

    # Global options
    parser.add_argument("--config", help="YAML or JSON config file")
    parser.add_argument("--db", help="Database URL for a persistent holiday cache")
    parser.add_argument("--log-level", help="Log level (default from config)")
    parser.add_argument("--log-json", action="store_true", help="Emit logs as JSON")

    sub = parser.add_subparsers(dest="command", required=True)

    e = sub.add_parser("evaluate", help="Score a proposed meeting time")
    e.add_argument("--roster", required=True, help="Participants CSV")
    e.add_argument("--at", required=True, help="Meeting instant, e.g. 2025-01-15T10:00Z")
    e.add_argument("--policies", help="Custom policies CSV")
    e.add_argument("--out", help="Write statuses to CSV")
    e.set_defaults(func=_cmd_evaluate)

    h = sub.add_parser("heatmap", help="Scan 24 hours of a day for the fairest times")
    h.add_argument("--roster", required=True, help="Participants CSV")
    h.add_argument("--date", required=True, help="Date to scan (YYYY-MM-DD)")
    h.add_argument("--anchor", help="Timezone whose hours are scanned (default from config)")
    h.add_argument("--top", type=int, help="Number of suggestions")
    h.add_argument("--policies", help="Custom policies CSV")
    h.add_argument("--out", help="Write all 24 slots to CSV")
    h.set_defaults(func=_cmd_heatmap)

    d = sub.add_parser("holidays", help="List national holidays for a country and year")
    d.add_argument("--country", required=True)
    d.add_argument("--year", required=True, type=int)
    d.add_argument("--upcoming", type=int, help="Only the next N holidays")
    d.add_argument("--since", help="Reference date for --upcoming (default today)")
    d.set_defaults(func=_cmd_holidays)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
