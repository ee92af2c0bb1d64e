"""Command-line interface for the technician utilization analytics."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from utilization.config import load_config
from utilization.domain.db import get_session, init_database, reset_database
from utilization.domain.facts import parse_date
from utilization.errors import AnalyticsError, ValidationError, to_error_payload
from utilization.io.export_csv import export_technician_summaries_csv, export_trend_csv
from utilization.io.import_csv import (
    import_appointments_csv,
    import_employees_csv,
    import_provinces_csv,
    import_sites_csv,
    import_ticket_employees_csv,
    import_tickets_csv,
    import_work_types_csv,
)
from utilization.reports.composer import build_composer
from utilization.services.trends import INTERVALS


def _db_url(args: argparse.Namespace) -> str:
    return args.db or load_config(args.config).db_url


def _print_report(report: dict) -> None:
    print(json.dumps(report, ensure_ascii=False, indent=2))


def _composer(args: argparse.Namespace):
    cfg = load_config(args.config)
    return build_composer(cfg, db_url=args.db)


def _check_dates(*values: str) -> None:
    for value in values:
        parse_date(value)


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database."""
    db_url = _db_url(args)
    init_database(db_url)
    print(f"[OK] Database initialized: {db_url}")


def _cmd_reset_db(args: argparse.Namespace) -> None:
    """Drop all data and recreate the schema."""
    if not args.yes:
        raise ValidationError("reset-db deletes all data; pass --yes to confirm")
    db_url = _db_url(args)
    reset_database(db_url)
    print(f"[OK] Database reset: {db_url}")


def _cmd_import_csv(args: argparse.Namespace) -> None:
    """Import CSV data into database."""
    session = get_session(_db_url(args))
    
    # Reference data before the rows that point at it
    steps = [
        ("employees", args.employees, import_employees_csv),
        ("work types", args.work_types, import_work_types_csv),
        ("provinces", args.provinces, import_provinces_csv),
        ("sites", args.sites, import_sites_csv),
        ("appointments", args.appointments, import_appointments_csv),
        ("tickets", args.tickets, import_tickets_csv),
        ("assignments", args.assigned, lambda s, p: import_ticket_employees_csv(s, p, confirmed=False)),
        ("confirmations", args.confirmed, lambda s, p: import_ticket_employees_csv(s, p, confirmed=True)),
    ]
    
    try:
        for label, path, importer in steps:
            if path:
                count = importer(session, path)
                print(f"[OK] Imported {count} {label}")
        print("[OK] CSV import complete")
    except Exception as e:
        session.rollback()
        print(f"[ERROR] Import failed: {e}")
        raise
    finally:
        session.close()


def _cmd_snapshot(args: argparse.Namespace) -> None:
    """Utilization snapshot for one date."""
    _check_dates(args.date)
    _print_report(_composer(args).daily_snapshot(args.date))


def _cmd_summary(args: argparse.Namespace) -> None:
    """Utilization summary over a date range."""
    _check_dates(args.start, args.end)
    report = _composer(args).range_summary(args.start, args.end)
    if args.out:
        count = export_technician_summaries_csv(report["by_technician"], args.out)
        print(f"[OK] Exported {count} technician rows to {args.out}", file=sys.stderr)
    _print_report(report)


def _cmd_workload(args: argparse.Namespace) -> None:
    """Workload distribution for a date or a range."""
    composer = _composer(args)
    if args.date:
        _check_dates(args.date)
        _print_report(composer.workload(args.date))
    elif args.start and args.end:
        _check_dates(args.start, args.end)
        _print_report(composer.workload_distribution(args.start, args.end))
    else:
        raise ValidationError("Provide --date or both --start and --end")


def _cmd_trends(args: argparse.Namespace) -> None:
    """Utilization trend over a date range."""
    _check_dates(args.start, args.end)
    report = _composer(args).trends(args.start, args.end, args.interval)
    if args.out:
        count = export_trend_csv(report, args.out)
        print(f"[OK] Exported {count} data points to {args.out}", file=sys.stderr)
    _print_report(report)


def _cmd_technician(args: argparse.Namespace) -> None:
    """Detail for one technician."""
    _check_dates(args.start, args.end)
    _print_report(_composer(args).technician_detail(args.id, args.start, args.end))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="utilization",
        description="Technician utilization and workload analytics",
    )
    
    # Global options
    parser.add_argument("--db", help="Database URL (default: from config, sqlite:///utilization.db)")
    parser.add_argument("--config", help="Path to config YAML/JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    
    sub = parser.add_subparsers(dest="command", required=True)
    
    # init-db command
    init = sub.add_parser("init-db", help="Initialize database")
    init.set_defaults(func=_cmd_init_db)

    # reset-db command
    reset = sub.add_parser("reset-db", help="Drop all data and recreate the schema")
    reset.add_argument("--yes", action="store_true", help="Confirm deleting all data")
    reset.set_defaults(func=_cmd_reset_db)
    
    # import-csv command
    imp = sub.add_parser("import-csv", help="Import CSV data into database")
    imp.add_argument("--employees", help="Path to employees CSV")
    imp.add_argument("--work-types", dest="work_types", help="Path to work types CSV")
    imp.add_argument("--provinces", help="Path to provinces CSV")
    imp.add_argument("--sites", help="Path to sites CSV")
    imp.add_argument("--appointments", help="Path to appointments CSV")
    imp.add_argument("--tickets", help="Path to tickets CSV")
    imp.add_argument("--assigned", help="Path to ticket assignments CSV")
    imp.add_argument("--confirmed", help="Path to ticket confirmations CSV")
    imp.set_defaults(func=_cmd_import_csv)
    
    # snapshot command
    snap = sub.add_parser("snapshot", help="Utilization snapshot for a date")
    snap.add_argument("--date", required=True, help="Date (YYYY-MM-DD)")
    snap.set_defaults(func=_cmd_snapshot)
    
    # summary command
    summ = sub.add_parser("summary", help="Utilization summary over a date range")
    summ.add_argument("--start", required=True, help="Start date (YYYY-MM-DD)")
    summ.add_argument("--end", required=True, help="End date (YYYY-MM-DD)")
    summ.add_argument("--out", help="Optional: export technician rows to CSV")
    summ.set_defaults(func=_cmd_summary)
    
    # workload command
    work = sub.add_parser("workload", help="Workload distribution for a date or range")
    work.add_argument("--date", help="Appointment date (YYYY-MM-DD)")
    work.add_argument("--start", help="Start date (YYYY-MM-DD)")
    work.add_argument("--end", help="End date (YYYY-MM-DD)")
    work.set_defaults(func=_cmd_workload)
    
    # trends command
    trend = sub.add_parser("trends", help="Utilization trend over a date range")
    trend.add_argument("--start", required=True, help="Start date (YYYY-MM-DD)")
    trend.add_argument("--end", required=True, help="End date (YYYY-MM-DD)")
    trend.add_argument("--interval", choices=INTERVALS, default="daily", help="daily or weekly")
    trend.add_argument("--out", help="Optional: export data points to CSV")
    trend.set_defaults(func=_cmd_trends)
    
    # technician command
    tech = sub.add_parser("technician", help="Detail for a single technician")
    tech.add_argument("--id", required=True, help="Technician (employee) ID")
    tech.add_argument("--start", required=True, help="Start date (YYYY-MM-DD)")
    tech.add_argument("--end", required=True, help="End date (YYYY-MM-DD)")
    tech.set_defaults(func=_cmd_technician)
    
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    
    try:
        args.func(args)
    except AnalyticsError as e:
        payload = to_error_payload(e)
        print(f"[ERROR] {payload['code']}: {payload['message']}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
