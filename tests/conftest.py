# ============================================================================
# conftest.py -- shared fakes for the netdiag test suite
# ============================================================================
#
# FakeInvoker stands in for ProbeInvoker and FakeMetrics for SystemMetrics,
# so no test spawns a process or queries the real host.
# ============================================================================
from __future__ import annotations

import sys
import threading
import time
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from netdiag.collector import Collector  # noqa: E402
from netdiag.errors import ProbeUnavailable, ProviderUnavailable  # noqa: E402
from netdiag.invoker import CommandOutput, InvocationFailure  # noqa: E402
from netdiag.models import (  # noqa: E402
    AdapterInfo,
    Config,
    DiskInfo,
    InterfaceCounters,
    MemoryUsage,
    Target,
)
from netdiag.probes import CommandSet  # noqa: E402


# -- captured tool output ----------------------------------------------------

NETSH_WLAN_CONNECTED = """
There is 1 interface on the system:

    Name                   : Wi-Fi
    Description            : Intel(R) Wi-Fi 6 AX201 160MHz
    GUID                   : 3f1c2a64-1111-2222-3333-444455556666
    Physical address       : a4:b1:c1:00:11:22
    State                  : connected
    SSID                   : HomeNet
    BSSID                  : 11:22:33:44:55:66
    Network type           : Infrastructure
    Radio type             : 802.11ax
    Authentication         : WPA2-Personal
    Channel                : 44
    Receive rate (Mbps)    : 866.7
    Transmit rate (Mbps)   : 866.7
    Signal                 : 82%
    Profile                : HomeNet
"""

NETSH_WLAN_SERVICE_STOPPED = "The Wireless AutoConfig Service (wlansvc) is not running.\n"

NMCLI_WIFI = "no:Neighbour:40\nyes:Home\\:Net:72\nno:Cafe:18\n"

IP_ADDR = """1: lo: <LOOPBACK,UP,LOWER_UP> mtu 65536 qdisc noqueue state UNKNOWN
    link/loopback 00:00:00:00:00:00 brd 00:00:00:00:00:00
    inet 127.0.0.1/8 scope host lo
2: eth0: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 qdisc fq_codel state UP
    link/ether aa:bb:cc:00:11:22 brd ff:ff:ff:ff:ff:ff
    inet 192.168.1.20/24 brd 192.168.1.255 scope global eth0
"""

NSLOOKUP_OK = """Server:\t\t127.0.0.53
Address:\t127.0.0.53#53

Non-authoritative answer:
Name:\tgoogle.com
Address: 142.250.74.46
"""

TRACEROUTE_OK = """traceroute to 8.8.8.8 (8.8.8.8), 30 hops max, 60 byte packets
 1  192.168.1.1  1.123 ms  1.050 ms  0.998 ms
 2  10.0.0.1  8.512 ms  8.430 ms  8.611 ms
 3  8.8.8.8  17.902 ms  18.004 ms  17.850 ms
"""

SPEEDTEST_OK = """
   Speedtest by Ookla

      Server: Example ISP - Springfield (id: 10390)
         ISP: Example ISP
Idle Latency:    12.34 ms   (jitter: 0.50ms, low: 12.00ms, high: 13.00ms)
    Download:    94.12 Mbps (data used: 100.0 MB)
      Upload:     9.87 Mbps (data used: 10.0 MB)
 Packet Loss:     0.0%
  Result URL: https://www.speedtest.net/result/c/00000000-0000-0000-0000-000000000000
"""


def linux_ping_output(host: str, times: Iterable[float]) -> str:
    times = list(times)
    lines = [f"PING {host} ({host}) 56(84) bytes of data."]
    for seq, t in enumerate(times, start=1):
        lines.append(f"64 bytes from {host}: icmp_seq={seq} ttl=117 time={t} ms")
    lines.append("")
    lines.append(f"--- {host} ping statistics ---")
    lines.append(f"{len(times)} packets transmitted, {len(times)} received, 0% packet loss, time 14012ms")
    return "\n".join(lines) + "\n"


def ok(stdout: str = "", code: int = 0, stderr: str = "", command=("fake",)) -> CommandOutput:
    return CommandOutput(command=tuple(command), stdout=stdout, stderr=stderr, exit_code=code)


# -- fakes -------------------------------------------------------------------


class FakeInvoker:
    """
    Returns canned output keyed by (command, host) or by command alone.
    Unknown commands come back as a ProbeUnavailable failure, like a missing binary.
    """

    def __init__(self, responses: Optional[Dict] = None, delays: Optional[Dict[str, float]] = None) -> None:
        self.responses: Dict = dict(responses or {})
        self.delays = dict(delays or {})
        self.calls: List = []
        self._lock = threading.Lock()

    def invoke(self, command: str, args, timeout: float):
        args = list(args)
        with self._lock:
            self.calls.append((command, tuple(args), timeout))
        host = args[-1] if args else ""
        if command == "ping" and host in self.delays:
            time.sleep(self.delays[host])
        response = self.responses.get((command, host), self.responses.get(command))
        if response is None:
            return InvocationFailure((command, *args), ProbeUnavailable(f"{command} command not found"))
        if callable(response):
            return response(command, args)
        return response


class FakeMetrics:
    def __init__(
        self,
        disks: Iterable[DiskInfo] = (DiskInfo("/", 40.25, 59.75), DiskInfo("/home", 120.5, 379.5)),
        fail: Iterable[str] = (),
    ) -> None:
        self._disks = tuple(disks)
        self.fail = set(fail)

    def _check(self, name: str) -> None:
        if name in self.fail:
            raise ProviderUnavailable(f"{name} query failed: access denied")

    def hostname(self) -> str:
        self._check("hostname")
        return "test-host"

    def cpu_load(self) -> float:
        self._check("cpu")
        return 12.5

    def memory(self) -> MemoryUsage:
        self._check("memory")
        return MemoryUsage(total_mb=8192, free_mb=2048)

    def uptime(self) -> timedelta:
        self._check("uptime")
        return timedelta(days=1, hours=2, minutes=3, seconds=4)

    def disks(self):
        self._check("disks")
        return self._disks

    def adapters(self):
        self._check("adapters")
        return (
            AdapterInfo("eth0", "MTU 1500, full duplex", "aa:bb:cc:00:11:22", 1000, "Ethernet", "Up"),
            AdapterInfo("wlan0", "MTU 1500, duplex unknown", "a4:b1:c1:00:11:22", None, "Wireless", "Up"),
        )

    def interface_counters(self):
        self._check("counters")
        return (
            InterfaceCounters("eth0", 123456, 654321),
            InterfaceCounters("lo", 1000, 1000),
        )


def ping_response(times_by_host: Optional[Dict[str, List[float]]] = None) -> Callable:
    default = [17.0, 18.0, 19.0] * 5
    times_by_host = times_by_host or {}

    def respond(command, args):
        host = args[-1]
        return ok(linux_ping_output(host, times_by_host.get(host, default)))

    return respond


def default_responses() -> Dict:
    return {
        "ip": ok(IP_ADDR),
        "nmcli": ok(NMCLI_WIFI),
        "nslookup": ok(NSLOOKUP_OK),
        "ping": ping_response(),
        "traceroute": ok(TRACEROUTE_OK),
    }


FIXED_TIME = datetime(2026, 1, 2, 3, 4, 5)


def make_config(tmp_path: Path, hosts=("8.8.8.8", "1.1.1.1", "google.com"), **overrides) -> Config:
    values = dict(
        targets=[Target(name=h, host=h) for h in hosts],
        max_workers=1,
        speedtest_path=str(tmp_path / "missing" / "speedtest"),
    )
    values.update(overrides)
    return Config(**values)


def make_collector(config: Config, invoker=None, metrics=None, clock=lambda: FIXED_TIME, speedtester=None) -> Collector:
    return Collector(
        config,
        invoker=invoker if invoker is not None else FakeInvoker(default_responses()),
        metrics=metrics if metrics is not None else FakeMetrics(),
        speedtester=speedtester,
        commands=CommandSet("linux"),
        clock=clock,
    )


@pytest.fixture
def fake_invoker() -> FakeInvoker:
    return FakeInvoker(default_responses())


@pytest.fixture
def config(tmp_path) -> Config:
    return make_config(tmp_path)
