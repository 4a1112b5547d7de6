#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Employee Insights API (SQLite + FastAPI)

Commands:
  serve               Run the HTTP API with uvicorn
  report              Print dashboard ratios / top insights and export insight_summary as CSV

Notes:
- The insight_summary table is filled by an external ingestion job; this tool only reads it.
- DB path comes from --db, INSIGHTS_DB_PATH or config.yaml (see insights_api/config.py).
"""

import argparse
import os

import pandas as pd

from insights_api.config import load_settings
from insights_api.db import SqliteStore, get_conn
from insights_api.errors import RepositoryError
from insights_api.repository.insight_repo import InsightRepository
from insights_api.services.insight_svc import InsightService


def cmd_serve(args):
    import uvicorn

    # create_app() 在服务进程内调用 load_settings()，通过环境变量把 --config 传过去
    if args.config:
        os.environ["INSIGHTS_CONFIG"] = os.path.abspath(args.config)
    uvicorn.run("insights_api.api:create_app", factory=True, host=args.host, port=args.port)


def cmd_report(args):
    settings = load_settings(args.config)
    db_path = args.db or settings.db_path

    svc = InsightService(InsightRepository(SqliteStore(db_path)))
    try:
        stats = svc.get_dashboard().data
    except RepositoryError as e:
        raise SystemExit(f"report failed: {e}")

    pd.set_option("display.max_rows", 200)
    pd.set_option("display.width", 160)

    print("\n=== Dashboard ===")
    print(f"insights: {stats.total_insight_count}  feedback: {stats.total_feedback_count}")
    print(
        f"positive: {stats.positive_ratio}%  "
        f"negative: {stats.negative_ratio}%  "
        f"neutral: {stats.neutral_ratio}%"
    )

    cols = ["word", "total_count", "positive_pct", "negative_pct", "neutral_pct"]
    for label, rows in (("Top Positive", stats.top_positive), ("Top Negative", stats.top_negative)):
        print(f"\n=== {label} ===")
        if rows:
            print(pd.DataFrame([r.model_dump() for r in rows])[cols].to_string(index=False))
        else:
            print("(none)")

    with get_conn(db_path) as conn:
        df = pd.read_sql_query(
            "SELECT * FROM insight_summary ORDER BY total_count DESC",
            conn,
        )

    out_dir = args.out or os.path.join(os.path.dirname(os.path.abspath(__file__)), "exports")
    os.makedirs(out_dir, exist_ok=True)
    out_path = os.path.join(out_dir, "insight_summary.csv")
    df.to_csv(out_path, index=False, encoding="utf-8-sig")
    print(f"\nCSV exported to {out_path}")


# ---------------- Entry ----------------

def main(argv=None):
    parser = argparse.ArgumentParser(description="Employee insights API (SQLite + FastAPI)")
    parser.add_argument("--config", default=None, help="path to config.yaml (serve and report)")
    sub = parser.add_subparsers()

    p_serve = sub.add_parser("serve", help="run the HTTP API")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", default=8000, type=int)
    p_serve.set_defaults(func=cmd_serve)

    p_rep = sub.add_parser("report", help="print dashboard numbers and export CSV")
    p_rep.add_argument("--db", required=False, help="SQLite file (default from config)")
    p_rep.add_argument("--out", required=False, help="export directory (default ./exports)")
    p_rep.set_defaults(func=cmd_report)

    args = parser.parse_args(argv)
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
