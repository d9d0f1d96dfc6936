#!/usr/bin/env python3
"""
Entry point for the network diagnostic collector. Loads config, runs one
collection pass, prints the live report and saves the full report file.

Exit status is 0 once a run completes, even when individual probes failed;
those are reported inline. Non-zero means an unexpected internal failure.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parent
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from netdiag.collector import Collector
from netdiag.config_loader import load_config
from netdiag.errors import PersistenceFailure
from netdiag.report import render_document, render_live
from netdiag.sinks import write_console, write_report


def setup_logging(log_path: Path) -> None:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handlers = [
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(log_path, encoding="utf-8"),
    ]
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        handlers=handlers,
        force=True,
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="One-shot host network and system diagnostics report.")
    parser.add_argument("--config", default=str(PROJECT_ROOT / "config.json"), help="Path to config JSON (default: config.json beside this script)")
    parser.add_argument("--report", help="Override the report file path.")
    parser.add_argument("--no-speedtest", action="store_true", help="Skip the bandwidth speed test.")
    parser.add_argument("--workers", type=int, help="Override how many targets are probed concurrently.")
    parser.add_argument("--deadline", type=float, help="Overall run deadline in seconds.")
    parser.add_argument("--no-prompt", action="store_true", help="Exit without waiting for Enter.")
    return parser.parse_args(argv)


def _resolve(path: str) -> Path:
    p = Path(path)
    return p if p.is_absolute() else PROJECT_ROOT / p


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = load_config(args.config)

    if args.report:
        config.report_path = args.report
    if args.no_speedtest:
        config.enable_speedtest = False
    if args.workers is not None:
        config.max_workers = max(1, args.workers)
    if args.deadline is not None:
        config.run_deadline_seconds = args.deadline

    report_path = _resolve(config.report_path)
    log_path = _resolve(config.log_path)
    setup_logging(log_path)

    logging.info("Starting network diagnostics")
    logging.info("Logging to %s", log_path)
    logging.info("Report will be saved to %s", report_path)

    try:
        summary = Collector(config).collect()
    except Exception:
        logging.exception("Diagnostics run failed before the summary was complete")
        return 1

    write_console(render_live(summary))
    try:
        write_report(report_path, render_document(summary))
        logging.info("Report saved to %s", report_path)
    except PersistenceFailure as exc:
        logging.error("Report not saved: %s", exc)

    if not args.no_prompt and sys.stdin.isatty():
        try:
            input("Press Enter to exit...")
        except (EOFError, KeyboardInterrupt):
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
