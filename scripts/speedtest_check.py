#!/usr/bin/env python3
"""
Standalone speedtest runner for debugging speedtest CLI issues.
Uses the SpeedTester class from src/netdiag/speedtester.py.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from netdiag.invoker import ProbeInvoker  # type: ignore
from netdiag.models import Unavailable  # type: ignore
from netdiag.speedtester import DEFAULT_SERVER_ID, SpeedTester  # type: ignore


def main() -> None:
    parser = argparse.ArgumentParser(description="Debug speedtest CLI.")
    parser.add_argument("--timeout", type=float, default=120, help="Timeout in seconds (default: 120)")
    parser.add_argument("--server", default=DEFAULT_SERVER_ID, help="Server ID to force (run `speedtest --servers` to find one)")
    parser.add_argument("--path", help="Path to the speedtest binary (default: discover)")
    args = parser.parse_args()

    tester = SpeedTester(ProbeInvoker(), timeout=args.timeout, server_id=args.server, path=args.path)
    result = tester.run()

    if isinstance(result, Unavailable):
        print("Speedtest unavailable:", result.reason)
        sys.exit(1)

    print("Tool:", result.tool)
    print("Download:", result.download or "N/A")
    print("Upload:", result.upload or "N/A")
    print("\nRaw output:")
    print(result.raw_output)


if __name__ == "__main__":
    main()
