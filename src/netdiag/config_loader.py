from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from netdiag.models import DEFAULT_SERVER_ID, Config, Target

DEFAULT_TARGETS: List[Target] = [
    Target(name="Google DNS", host="8.8.8.8"),
    Target(name="Google DNS secondary", host="8.8.4.4"),
    Target(name="Cloudflare DNS", host="1.1.1.1"),
    Target(name="Quad9 DNS", host="9.9.9.9"),
    Target(name="OpenDNS", host="208.67.222.222"),
    Target(name="google.com", host="google.com"),
    Target(name="cloudflare.com", host="cloudflare.com"),
    Target(name="microsoft.com", host="microsoft.com"),
    Target(name="amazon.com", host="amazon.com"),
]


def load_config(path: Optional[str] = None) -> Config:
    data = _read_json(path) if path else {}
    targets = _parse_targets(data["targets"]) if "targets" in data else list(DEFAULT_TARGETS)
    deadline = data.get("run_deadline_seconds")
    # An explicit null lets the CLI pick its own server.
    server_id = data.get("speedtest_server_id", DEFAULT_SERVER_ID)
    return Config(
        targets=targets,
        ping_count=int(data.get("ping_count", 15)),
        dns_timeout_seconds=float(data.get("dns_timeout_seconds", 15)),
        ping_timeout_seconds=float(data.get("ping_timeout_seconds", 60)),
        traceroute_timeout_seconds=float(data.get("traceroute_timeout_seconds", 120)),
        traceroute_max_hops=int(data.get("traceroute_max_hops", 30)),
        command_timeout_seconds=float(data.get("command_timeout_seconds", 30)),
        max_workers=max(1, int(data.get("max_workers", 4))),
        run_deadline_seconds=float(deadline) if deadline is not None else None,
        enable_speedtest=bool(data.get("enable_speedtest", True)),
        speedtest_path=str(data["speedtest_path"]) if data.get("speedtest_path") else None,
        speedtest_server_id=str(server_id) if server_id else None,
        speedtest_timeout_seconds=float(data.get("speedtest_timeout_seconds", 120)),
        report_path=str(data.get("report_path", "network_diagnostics_report.txt")),
        log_path=str(data.get("log_path", "logs/netdiag.log")),
    )


def _read_json(path: str) -> Dict[str, Any]:
    if not Path(path).exists():
        logging.warning("Config file %s not found; using defaults", path)
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _parse_targets(raw: List[Union[str, Dict[str, Any]]]) -> List[Target]:
    targets: List[Target] = []
    for entry in raw:
        if isinstance(entry, str):
            entry = {"host": entry}
        host = entry.get("host")
        if not host:
            continue
        targets.append(Target(name=entry.get("name") or host, host=host))
    return targets
