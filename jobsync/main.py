#!/usr/bin/env python3
"""
Job Listings Crawler

Crawls a paginated job board and keeps a deduplicated dataset in the
output directory: index.json (current state), jobs.jsonl (every
observation), jobs.json and jobs.csv (snapshots).

Usage:
    python -m jobsync.main --mode=today
    python -m jobsync.main --mode=all --max-age-days=180
    python -m jobsync.main --mode=all --max-age-days=365 --delay=0.8

Defaults come from CRAWL_* environment variables (a .env file is read).
"""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

from jobsync.config import CrawlConfig, env_settings
from jobsync.crawler import FetchError, crawl


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Crawl job listings into a local dataset.")
    parser.add_argument("--mode", help="today (incremental) or all (backfill)")
    parser.add_argument("--base-url", dest="base_url")
    parser.add_argument("--start-page", dest="start_page", type=int)
    parser.add_argument("--delay", type=float, help="seconds to wait between pages")
    parser.add_argument("--max-age-days", dest="max_age_days", type=int)
    parser.add_argument("--out-dir", dest="out_dir", type=Path)
    parser.add_argument("--commit-every-pages", dest="commit_every_pages", type=int)
    parser.add_argument("--max-pages", dest="max_pages", type=int, help="0 means no limit")
    parser.add_argument("--parser-type", dest="parser_type", help="site parser to use")
    return parser


def load_config(argv: list[str] | None = None) -> CrawlConfig:
    """Environment defaults, overridden by any flags given."""
    args = _build_arg_parser().parse_args(argv)
    overrides = {k: v for k, v in vars(args).items() if v is not None}
    settings = env_settings(exclude=set(overrides))
    settings.update(overrides)
    return CrawlConfig(**settings)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    print("=" * 60)
    print(f"Job Crawler started at {datetime.now(timezone.utc).isoformat()}")
    print("=" * 60)

    try:
        config = load_config(argv)
    except ValueError as e:
        print(f"[FATAL] Invalid configuration: {e}")
        return 1

    print(f"[INFO] Mode: {config.mode} | Start page: {config.start_page} | Output: {config.out_dir}")
    if config.mode == "all":
        print(f"[INFO] Max age: {config.max_age_days} days")
    print("-" * 60)

    try:
        stats = crawl(config)
    except FetchError as e:
        print(f"[FATAL] {e}")
        return 1

    # Print summary
    print("=" * 60)
    print("Crawl Summary:")
    print(f"  - PAGES:   {stats['PAGES']}")
    print(f"  - NEW:     {stats['NEW']}")
    print(f"  - UPDATED: {stats['UPDATED']}")
    print(f"  - EVENTS:  {stats['EVENTS']}")
    print("=" * 60)
    print(f"Job Crawler finished at {datetime.now(timezone.utc).isoformat()}")

    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
