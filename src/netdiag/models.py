from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Tuple, Union


@dataclass(frozen=True)
class Target:
    name: str
    host: str


@dataclass(frozen=True)
class Unavailable:
    """Marker stored in place of a field whose probe or provider failed."""

    reason: str

    def __str__(self) -> str:
        return f"unavailable ({self.reason})"


class ProbeKind(str, Enum):
    DNS_LOOKUP = "DNS lookup"
    PING = "Ping"
    TRACEROUTE = "Traceroute"


class LatencyRating(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    ACCEPTABLE = "Acceptable"
    POOR = "Poor"
    BAD = "Bad"


# Ookla server the speed test is pinned to unless the config says otherwise.
DEFAULT_SERVER_ID = "10390"

# Upper bounds (inclusive) in milliseconds, best band first.
LATENCY_BANDS: Tuple[Tuple[float, LatencyRating], ...] = (
    (20.0, LatencyRating.EXCELLENT),
    (40.0, LatencyRating.GOOD),
    (100.0, LatencyRating.ACCEPTABLE),
    (200.0, LatencyRating.POOR),
)


def classify_latency(average_ms: Optional[float]) -> LatencyRating:
    """Map an average round-trip time to a rating; no replies rates as Bad."""
    if average_ms is None:
        return LatencyRating.BAD
    for upper, rating in LATENCY_BANDS:
        if average_ms <= upper:
            return rating
    return LatencyRating.BAD


@dataclass(frozen=True)
class ProbeResult:
    target: Target
    kind: ProbeKind
    raw_output: str
    succeeded: bool
    error_detail: Optional[str] = None


@dataclass(frozen=True)
class PingStats:
    attempts: int
    replies: int
    average_ms: Optional[float]

    @property
    def rating(self) -> LatencyRating:
        return classify_latency(self.average_ms)


@dataclass(frozen=True)
class TargetReport:
    target: Target
    dns: ProbeResult
    ping: ProbeResult
    ping_stats: PingStats
    traceroute: ProbeResult

    @property
    def probes(self) -> Tuple[ProbeResult, ProbeResult, ProbeResult]:
        return (self.dns, self.ping, self.traceroute)


@dataclass(frozen=True)
class MemoryUsage:
    total_mb: int
    free_mb: int

    @property
    def used_mb(self) -> int:
        return self.total_mb - self.free_mb

    @property
    def percent(self) -> float:
        if self.total_mb <= 0:
            return 0.0
        return round(self.used_mb / self.total_mb * 100, 2)


@dataclass(frozen=True)
class DiskInfo:
    volume_name: str
    used_gb: float
    free_gb: float

    @property
    def total_gb(self) -> float:
        return self.used_gb + self.free_gb


@dataclass(frozen=True)
class AdapterInfo:
    name: str
    description: str
    mac_address: str
    link_speed_mbps: Optional[int]
    connection_type: str
    status: str


@dataclass(frozen=True)
class InterfaceCounters:
    name: str
    bytes_sent: int
    bytes_recv: int


@dataclass(frozen=True)
class WifiState:
    ssid: str
    signal_percent: str


@dataclass(frozen=True)
class SpeedtestResult:
    tool: str
    download: Optional[str]
    upload: Optional[str]
    raw_output: str


@dataclass(frozen=True)
class Summary:
    collected_at: datetime
    hostname: Union[str, Unavailable]
    cpu_load_percent: Union[float, Unavailable]
    memory: Union[MemoryUsage, Unavailable]
    uptime: Union[timedelta, Unavailable]
    wifi: Union[WifiState, Unavailable]
    adapters: Union[Tuple[AdapterInfo, ...], Unavailable]
    disks: Union[Tuple[DiskInfo, ...], Unavailable]
    interface_counters: Union[Tuple[InterfaceCounters, ...], Unavailable]
    targets: Tuple[TargetReport, ...]
    speedtest: Union[SpeedtestResult, Unavailable]
    ip_config: Union[str, Unavailable]

    @property
    def probe_results(self) -> List[ProbeResult]:
        return [probe for report in self.targets for probe in report.probes]


@dataclass
class Config:
    targets: List[Target]
    ping_count: int = 15
    dns_timeout_seconds: float = 15
    ping_timeout_seconds: float = 60
    traceroute_timeout_seconds: float = 120
    traceroute_max_hops: int = 30
    command_timeout_seconds: float = 30
    max_workers: int = 4
    run_deadline_seconds: Optional[float] = None
    enable_speedtest: bool = True
    speedtest_path: Optional[str] = None
    speedtest_server_id: Optional[str] = DEFAULT_SERVER_ID
    speedtest_timeout_seconds: float = 120
    report_path: str = "network_diagnostics_report.txt"
    log_path: str = "logs/netdiag.log"
