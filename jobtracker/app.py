import argparse
import json
from pathlib import Path

from . import __version__
from .auth import issue_token
from .database import init_database
from .env import get_settings
from .errors import StorageError
from .export import build_rows, to_csv, to_xlsx
from .logger import get_logger
from .repository import JobRepository
from .stats import StatsAggregator


def cmd_init_db(args: argparse.Namespace) -> None:
    init_database(args.settings.database_url)
    print(f"Database ready: {args.settings.database_url}")


def cmd_issue_token(args: argparse.Namespace) -> None:
    init_database(args.settings.database_url)
    try:
        token = issue_token(args.owner)
    except StorageError as e:
        raise SystemExit(str(e))
    print(f"Owner: {args.owner}")
    print(f"Token: {token}")


def cmd_serve(args: argparse.Namespace) -> None:
    from .web import create_app

    app = create_app(args.settings)
    app.run(host=args.host, port=args.port, debug=args.debug)


def cmd_stats(args: argparse.Namespace) -> None:
    init_database(args.settings.database_url)
    aggregator = StatsAggregator(args.owner, trend_months=args.settings.trend_months)
    counts = aggregator.counts_by_status()
    print(f"Jobs for {args.owner}:")
    for status, count in counts.items():
        print(f"  {status}: {count}")
    trend = aggregator.monthly_trend()
    if trend:
        print("Applications per month:")
        for point in trend:
            print(f"  {point['date']}: {point['count']}")
    if args.json:
        print(json.dumps({"stats": counts, "charts": trend}, indent=2))


def cmd_export(args: argparse.Namespace) -> None:
    init_database(args.settings.database_url)
    jobs = JobRepository(args.owner).list_all_for_owner()
    rows = build_rows(jobs)
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    if args.format == "csv":
        output.write_text(to_csv(rows), encoding="utf-8")
    else:
        output.write_bytes(to_xlsx(rows))
    print(f"Exported {len(jobs)} jobs to {output}")


def main(argv=None):
    settings = get_settings()
    get_logger(level=settings.log_level, log_dir=settings.log_dir)
    parser = argparse.ArgumentParser(prog="jobtracker", description="Job application tracker")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--database-url", help="Override JOBTRACKER_DATABASE_URL")

    subparsers = parser.add_subparsers(dest="command")
    init = subparsers.add_parser("init-db", help="Create database tables")
    init.set_defaults(func=cmd_init_db)

    tok = subparsers.add_parser("issue-token", help="Issue a bearer token for an owner identity")
    tok.add_argument("--owner", required=True, help="Owner identity the token resolves to")
    tok.set_defaults(func=cmd_issue_token)

    srv = subparsers.add_parser("serve", help="Run the HTTP API (development server)")
    srv.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    srv.add_argument("--port", type=int, default=5000, help="Port (default: 5000)")
    srv.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    srv.set_defaults(func=cmd_serve)

    sts = subparsers.add_parser("stats", help="Print status counts and monthly trend for an owner")
    sts.add_argument("--owner", required=True, help="Owner identity")
    sts.add_argument("--json", action="store_true", help="Also print the raw JSON")
    sts.set_defaults(func=cmd_stats)

    exp = subparsers.add_parser("export", help="Export an owner's jobs to CSV or XLSX")
    exp.add_argument("--owner", required=True, help="Owner identity")
    exp.add_argument("--format", choices=["csv", "xlsx"], default="csv", help="Output format (default: csv)")
    exp.add_argument("--output", required=True, help="Destination file path")
    exp.set_defaults(func=cmd_export)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if args.database_url:
        settings.database_url = args.database_url
    args.settings = settings

    if hasattr(args, "func"):
        try:
            args.func(args)
        finally:
            get_logger().log_metrics_summary()
        return

    parser.print_help()


if __name__ == "__main__":
    main()
