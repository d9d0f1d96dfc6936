"""
Text renderings of a Summary.

render_live() is the console view; render_document() is the saved report.
Both are built from the same section helpers, so every live line appears
verbatim in the document.
"""
from __future__ import annotations

from datetime import timedelta
from typing import List, Optional, Sequence

import pandas as pd

from netdiag.models import (
    AdapterInfo,
    MemoryUsage,
    ProbeResult,
    SpeedtestResult,
    Summary,
    TargetReport,
    Unavailable,
)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
TITLE = "Network Diagnostics Report"


def _rule(title: str) -> str:
    return f"===== {title} ====="


def format_uptime(uptime: timedelta) -> str:
    total = int(uptime.total_seconds())
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60
    return f"{days} days, {hours} hours, {minutes} minutes"


def format_memory(memory: MemoryUsage) -> str:
    return f"{memory.used_mb} MB used of {memory.total_mb} MB ({memory.percent:.2f}%)"


def format_link_speed(mbps: Optional[int]) -> str:
    return f"{mbps} Mbps" if mbps is not None else "unknown"


def format_cpu(percent: float) -> str:
    return f"{percent:.1f}%"


def format_latency(average_ms: Optional[float]) -> str:
    return f"{average_ms:.2f} ms" if average_ms is not None else "no replies"


def _value(value, formatter=str) -> str:
    if isinstance(value, Unavailable):
        return str(value)
    return formatter(value)


def _table(columns: Sequence[str], rows: Sequence[Sequence[str]]) -> List[str]:
    if not rows:
        return ["  ".join(columns)]
    frame = pd.DataFrame([list(r) for r in rows], columns=list(columns))
    return frame.to_string(index=False).splitlines()


def _host_lines(summary: Summary) -> List[str]:
    return [
        TITLE,
        f"Timestamp: {summary.collected_at.strftime(TIMESTAMP_FORMAT)}",
        f"Hostname: {_value(summary.hostname)}",
        f"Uptime: {_value(summary.uptime, format_uptime)}",
    ]


def _wifi_lines(wifi) -> List[str]:
    if isinstance(wifi, Unavailable):
        return [f"WiFi: {wifi}"]
    return [f"WiFi SSID: {wifi.ssid}", f"WiFi signal: {wifi.signal_percent}"]


def _performance_lines(summary: Summary) -> List[str]:
    return [
        f"CPU load: {_value(summary.cpu_load_percent, format_cpu)}",
        f"Memory: {_value(summary.memory, format_memory)}",
    ]


def _disk_lines(summary: Summary) -> List[str]:
    if isinstance(summary.disks, Unavailable):
        return [f"Disks: {summary.disks}"]
    rows = [
        (d.volume_name, f"{d.used_gb:.2f}", f"{d.free_gb:.2f}", f"{d.total_gb:.2f}")
        for d in summary.disks
    ]
    return ["Disks:"] + _table(("Volume", "Used GB", "Free GB", "Total GB"), rows)


def _adapter_lines(adapters) -> List[str]:
    if isinstance(adapters, Unavailable):
        return [f"Adapters: {adapters}"]
    rows = [
        (a.name, a.status, a.connection_type, format_link_speed(a.link_speed_mbps))
        for a in adapters
    ]
    return ["Adapters:"] + _table(("Adapter", "Status", "Type", "Link speed"), rows)


def _probe_status(probe: ProbeResult) -> str:
    if probe.succeeded:
        return "ok"
    return f"failed ({probe.error_detail})" if probe.error_detail else "failed"


def _target_lines(report: TargetReport) -> List[str]:
    label = f"{report.target.name} ({report.target.host})"
    stats = report.ping_stats
    return [
        f"{label} {report.dns.kind.value}: {_probe_status(report.dns)}",
        f"{label} {report.ping.kind.value}: {_probe_status(report.ping)}, "
        f"average {format_latency(stats.average_ms)}, {stats.replies}/{stats.attempts} replies, "
        f"rating {stats.rating.value}",
        f"{label} {report.traceroute.kind.value}: {_probe_status(report.traceroute)}",
    ]


def _speedtest_lines(speedtest) -> List[str]:
    if isinstance(speedtest, Unavailable):
        return [f"Speedtest: {speedtest}"]
    return [
        f"Speedtest download: {speedtest.download or 'N/A'}",
        f"Speedtest upload: {speedtest.upload or 'N/A'}",
    ]


def render_live(summary: Summary) -> List[str]:
    """Console lines in collection order: host, WLAN, targets, adapters, performance, speedtest."""
    lines = _host_lines(summary)
    lines += _wifi_lines(summary.wifi)
    lines.append(_rule("Targets"))
    for report in summary.targets:
        lines += _target_lines(report)
    lines.append(_rule("Adapters"))
    lines += _adapter_lines(summary.adapters)
    lines.append(_rule("Performance"))
    lines += _performance_lines(summary)
    lines += _disk_lines(summary)
    lines.append(_rule("Speedtest"))
    lines += _speedtest_lines(summary.speedtest)
    return lines


def _mac_lines(adapters) -> List[str]:
    if isinstance(adapters, Unavailable):
        return [f"MAC addresses: {adapters}"]
    return ["MAC addresses:"] + [f"{a.name}: {a.mac_address}" for a in adapters]


def _counter_lines(summary: Summary) -> List[str]:
    counters = summary.interface_counters
    if isinstance(counters, Unavailable):
        return [f"Interface counters: {counters}"]
    rows = [(c.name, str(c.bytes_sent), str(c.bytes_recv)) for c in counters]
    return ["Interface counters:"] + _table(("Interface", "Bytes sent", "Bytes received"), rows)


def _probe_detail_lines(report: TargetReport) -> List[str]:
    lines: List[str] = []
    for probe in report.probes:
        lines.append(f"----- {probe.kind.value}: {report.target.name} ({report.target.host}) -----")
        lines.append(f"Status: {_probe_status(probe)}")
        output = probe.raw_output.rstrip()
        if output:
            lines += output.splitlines()
        lines.append("")
    return lines


def _adapter_detail(adapter: AdapterInfo) -> List[str]:
    return [
        f"Name: {adapter.name}",
        f"Description: {adapter.description}",
        f"MAC address: {adapter.mac_address}",
        f"Link speed: {format_link_speed(adapter.link_speed_mbps)}",
        f"Connection type: {adapter.connection_type}",
        f"Status: {adapter.status}",
        "",
    ]


def render_document(summary: Summary) -> str:
    """Full report text for the saved file, including raw tool output."""
    lines = _host_lines(summary)
    lines.append("")
    lines.append(_rule("Performance"))
    lines += _performance_lines(summary)
    lines += _disk_lines(summary)
    lines.append("")
    lines += _wifi_lines(summary.wifi)
    lines.append("")

    lines.append(_rule("IP Configuration"))
    lines += _value(summary.ip_config).rstrip().splitlines()
    lines.append("")
    lines += _mac_lines(summary.adapters)
    lines.append("")
    lines.append(_rule("Adapters"))
    lines += _adapter_lines(summary.adapters)
    lines.append("")
    lines += _counter_lines(summary)
    lines.append("")

    lines.append(_rule("Targets"))
    for report in summary.targets:
        lines += _target_lines(report)
    lines.append("")
    for report in summary.targets:
        lines += _probe_detail_lines(report)

    lines.append(_rule("Speedtest"))
    lines += _speedtest_lines(summary.speedtest)
    if isinstance(summary.speedtest, SpeedtestResult):
        lines += summary.speedtest.raw_output.rstrip().splitlines()
    lines.append("")

    lines.append(_rule("Adapter Details"))
    if isinstance(summary.adapters, Unavailable):
        lines.append(str(summary.adapters))
    else:
        for adapter in summary.adapters:
            lines += _adapter_detail(adapter)
    return "\n".join(lines).rstrip() + "\n"
