#!/usr/bin/env python3
"""
Entry point for the Review Sentiment ETL pipeline.

Usage:
  # Analyze a page (falls back to generated reviews if the fetch fails):
  python main.py analyze https://example.com/product --csv out.csv --json out.json

  # Start the FastAPI server:
  python main.py api

  # Run tests:
  python main.py test
"""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys
from typing import Tuple

from config.settings import settings
from models.schemas import StageStatus

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("main")


def print_progress(stages: Tuple) -> None:
    done = sum(1 for s in stages if s.is_terminal)
    current = next((s for s in stages if s.status == StageStatus.RUNNING), None)
    label = current.name if current else stages[done - 1].name if done else ""
    print(f"  [{done}/{len(stages)}] {label}")


def analyze(args) -> int:
    """End-to-end run for one URL; prints a formatted report to stdout."""
    from etl.pipeline import AnalysisPipeline
    from models.exceptions import StageFailure
    from utils.export import export_csv, export_json

    print("\n" + "=" * 70)
    print("  🔍 REVIEW SENTIMENT ETL")
    print("=" * 70 + "\n")

    pipeline = AnalysisPipeline(on_progress=print_progress, keyword_top_n=args.top_n)
    try:
        result = pipeline.run(args.url)
    except StageFailure as e:
        print(f"\n❌ Pipeline failed at '{e.stage_name}': {e.message}")
        return 1

    content = result.extracted_content
    print("\n" + "=" * 70)
    print(f"  Source     : {result.source_url}")
    print(f"  Title      : {content.title}")
    print(f"  Content    : {content.metadata.content_type} ({content.metadata.word_count} words)")
    print(f"  Completed  : {result.completed_at.isoformat()}")
    print("=" * 70)
    print(result.summary())

    s = result.statistics
    print("\n📊 POLARITY STATISTICS")
    print("-" * 70)
    print(f"  mean={s.mean:+.4f}  median={s.median:+.4f}  mode={s.mode:+.4f}")
    print(f"  sd={s.std_dev:.4f}  var={s.variance:.4f}  range={s.range:.4f}")
    print(f"  skew={s.skewness:+.4f}  kurtosis={s.kurtosis:+.4f}")

    print("\n🔑 TOP KEYWORDS")
    print("-" * 70)
    for k in result.keywords:
        print(f"  {k.word:<20} n={k.count:>3}  sentiment={k.avg_sentiment:+.2f}")

    q = result.quality_metrics
    print("\n✅ DATA QUALITY")
    print("-" * 70)
    print(
        f"  completeness={q.completeness:.1f}  accuracy={q.accuracy:.1f}  "
        f"consistency={q.consistency:.1f}  timeliness={q.timeliness:.1f}  validity={q.validity:.1f}"
    )
    print(f"  overall={q.overall:.1f}  grade={q.grade}  {q.details}")

    if args.csv:
        export_csv(result, args.csv)
        print(f"\nSentiment rows exported to {args.csv}")
    if args.json:
        export_json(result, args.json)
        print(f"Full result exported to {args.json}")
    return 0


def start_api() -> None:
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )


def run_tests() -> int:
    result = subprocess.run(
        [sys.executable, "-m", "pytest", "tests/", "-v", "--tb=short"],
        cwd=os.path.dirname(os.path.abspath(__file__)),
    )
    return result.returncode


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=settings.APP_NAME)
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser("analyze", help="Run the pipeline for a URL")
    analyze_parser.add_argument("url", help="http(s) URL of the page to analyze")
    analyze_parser.add_argument("--top-n", type=int, default=settings.KEYWORD_TOP_N,
                                help="Number of keywords to report")
    analyze_parser.add_argument("--csv", help="Write sentiment rows to this CSV file")
    analyze_parser.add_argument("--json", help="Write the full result to this JSON file")

    subparsers.add_parser("api", help="Start the FastAPI server")
    subparsers.add_parser("test", help="Run the test suite")

    args = parser.parse_args(argv)

    if args.command == "analyze":
        return analyze(args)
    if args.command == "api":
        start_api()
        return 0
    if args.command == "test":
        return run_tests()

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
