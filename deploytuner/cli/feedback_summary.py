"""Print a project's recent deployment feedback summary.

Purpose:
  - Show the accuracy history the context builder feeds into recentTrend.
Inputs:
  - --db: audit SQLite path (defaults to $DEPLOYTUNER_DB).
  - --project: project name.
  - --days: window size in days (default 7).
Outputs:
  - FeedbackSummary JSON on stdout.
Example:
  - python -m deploytuner.cli.feedback_summary --db deploytuner_audit.db --project web --days 7
"""

from __future__ import annotations

import argparse
import json
import sqlite3
import sys

from deploytuner.infra.sqlite.db import get_readonly_connection, resolve_db_path
from deploytuner.infra.sqlite.repos.feedback_repo import FeedbackRepo


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize deployment feedback for a project")
    parser.add_argument("--db", help="Audit SQLite path")
    parser.add_argument("--project", required=True, help="Project name")
    parser.add_argument("--days", type=int, default=7, help="Window size in days")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.days < 1:
        print("ERROR: --days must be >= 1", file=sys.stderr)
        return 2

    db_path = args.db or resolve_db_path()
    try:
        conn = get_readonly_connection(db_path)
    except FileNotFoundError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    try:
        summary = FeedbackRepo(conn).summary(args.project, days=args.days)
    except sqlite3.Error as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2
    finally:
        conn.close()

    payload = {"project": args.project, "days": args.days, **summary.as_dict()}
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
