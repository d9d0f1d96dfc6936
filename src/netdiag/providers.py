from __future__ import annotations

import socket
import time
from datetime import timedelta
from typing import Callable, List, Tuple, TypeVar

import psutil

from netdiag.errors import ProviderUnavailable
from netdiag.models import AdapterInfo, DiskInfo, InterfaceCounters, MemoryUsage
from netdiag.parsers import classify_connection_type, parse_link_speed

MB = 1024 ** 2
GB = 1024 ** 3

T = TypeVar("T")


def _query(name: str, fn: Callable[[], T]) -> T:
    try:
        return fn()
    except (psutil.Error, OSError) as exc:
        raise ProviderUnavailable(f"{name} query failed: {exc}") from exc


class SystemMetrics:
    """OS metric snapshots backed by psutil. Every method raises ProviderUnavailable on failure."""

    def __init__(self, cpu_sample_seconds: float = 1.0) -> None:
        self.cpu_sample_seconds = cpu_sample_seconds

    def hostname(self) -> str:
        return _query("hostname", socket.gethostname)

    def cpu_load(self) -> float:
        return float(_query("CPU load", lambda: psutil.cpu_percent(interval=self.cpu_sample_seconds)))

    def memory(self) -> MemoryUsage:
        vm = _query("memory", psutil.virtual_memory)
        return MemoryUsage(total_mb=int(vm.total // MB), free_mb=int(vm.available // MB))

    def uptime(self) -> timedelta:
        boot = _query("uptime", psutil.boot_time)
        return timedelta(seconds=int(max(0.0, time.time() - boot)))

    def disks(self) -> Tuple[DiskInfo, ...]:
        volumes: List[DiskInfo] = []
        for partition in _query("disk", lambda: psutil.disk_partitions(all=False)):
            try:
                usage = psutil.disk_usage(partition.mountpoint)
            except (psutil.Error, OSError):
                # Unmounted media and permission-restricted mounts are skipped, not fatal.
                continue
            volumes.append(
                DiskInfo(
                    volume_name=partition.mountpoint,
                    used_gb=round(usage.used / GB, 2),
                    free_gb=round(usage.free / GB, 2),
                )
            )
        return tuple(volumes)

    def adapters(self) -> Tuple[AdapterInfo, ...]:
        stats = _query("adapter", psutil.net_if_stats)
        addrs = _query("adapter", psutil.net_if_addrs)
        adapters: List[AdapterInfo] = []
        for name in sorted(stats):
            stat = stats[name]
            if not stat.isup:
                continue
            mac = next(
                (a.address for a in addrs.get(name, []) if a.family == psutil.AF_LINK),
                "N/A",
            )
            descriptor = f"{stat.speed} Mbps" if stat.speed > 0 else ""
            duplex = {
                psutil.NIC_DUPLEX_FULL: "full duplex",
                psutil.NIC_DUPLEX_HALF: "half duplex",
            }.get(stat.duplex, "duplex unknown")
            adapters.append(
                AdapterInfo(
                    name=name,
                    description=f"MTU {stat.mtu}, {duplex}",
                    mac_address=mac,
                    link_speed_mbps=parse_link_speed(descriptor),
                    connection_type=classify_connection_type(name),
                    status="Up",
                )
            )
        return tuple(adapters)

    def interface_counters(self) -> Tuple[InterfaceCounters, ...]:
        counters = _query("interface counter", lambda: psutil.net_io_counters(pernic=True))
        return tuple(
            InterfaceCounters(name=name, bytes_sent=io.bytes_sent, bytes_recv=io.bytes_recv)
            for name, io in sorted(counters.items())
        )
