from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar, Union

from netdiag.errors import DiagnosticError, ProbeUnavailable
from netdiag.invoker import InvocationFailure, ProbeInvoker
from netdiag.models import (
    Config,
    PingStats,
    ProbeKind,
    ProbeResult,
    SpeedtestResult,
    Summary,
    Target,
    TargetReport,
    Unavailable,
    WifiState,
)
from netdiag.parsers import (
    networksetup_to_key_value,
    nmcli_to_key_value,
    parse_wifi_state,
    summarize_ping,
)
from netdiag.probes import CommandSet
from netdiag.providers import SystemMetrics
from netdiag.speedtester import SpeedTester

T = TypeVar("T")

DEADLINE_EXCEEDED = "run deadline exceeded"

# WLAN tools whose output is not already "key : value" text.
_WLAN_NORMALISERS: Dict[str, Callable[[str], str]] = {
    "nmcli": nmcli_to_key_value,
    "networksetup": networksetup_to_key_value,
}


class SummaryBuilder:
    """Accumulates step results; build() hands out the one immutable Summary."""

    _FIELDS = (
        "hostname",
        "cpu_load_percent",
        "memory",
        "uptime",
        "wifi",
        "adapters",
        "disks",
        "interface_counters",
        "speedtest",
        "ip_config",
    )

    def __init__(self, collected_at: datetime) -> None:
        self._collected_at = collected_at
        self._values: Dict[str, Any] = {}
        self._targets: List[TargetReport] = []
        self._built = False

    def set(self, name: str, value: Any) -> "SummaryBuilder":
        if name not in self._FIELDS:
            raise KeyError(f"unknown summary field: {name}")
        self._values[name] = value
        return self

    def add_target(self, report: TargetReport) -> "SummaryBuilder":
        self._targets.append(report)
        return self

    def build(self) -> Summary:
        if self._built:
            raise RuntimeError("summary already built for this run")
        self._built = True
        values = {name: self._values.get(name, Unavailable("not collected")) for name in self._FIELDS}
        return Summary(collected_at=self._collected_at, targets=tuple(self._targets), **values)


class Collector:
    def __init__(
        self,
        config: Config,
        invoker: Optional[ProbeInvoker] = None,
        metrics: Optional[SystemMetrics] = None,
        speedtester: Optional[SpeedTester] = None,
        commands: Optional[CommandSet] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config
        self.invoker = invoker or ProbeInvoker()
        self.metrics = metrics or SystemMetrics()
        self.speedtester = speedtester or SpeedTester(
            self.invoker,
            timeout=config.speedtest_timeout_seconds,
            server_id=config.speedtest_server_id,
            path=config.speedtest_path,
        )
        self.commands = commands or CommandSet()
        self.clock = clock
        self._started = 0.0

    def collect(self) -> Summary:
        self._started = time.monotonic()
        builder = SummaryBuilder(self.clock())

        logging.info("Collecting host information")
        builder.set("hostname", self._step("hostname", self.metrics.hostname))
        builder.set("uptime", self._step("uptime", self.metrics.uptime))
        builder.set("ip_config", self._step("IP configuration", self._ip_config))
        builder.set("wifi", self._step("WLAN state", self._wifi))

        for report in self._probe_targets(self.config.targets):
            builder.add_target(report)

        logging.info("Collecting adapter information")
        builder.set("adapters", self._step("adapters", self.metrics.adapters))
        builder.set("interface_counters", self._step("interface counters", self.metrics.interface_counters))

        logging.info("Collecting performance information")
        builder.set("cpu_load_percent", self._step("CPU load", self.metrics.cpu_load))
        builder.set("memory", self._step("memory", self.metrics.memory))
        builder.set("disks", self._step("disks", self.metrics.disks))

        builder.set("speedtest", self._speedtest())
        return builder.build()

    def _step(self, name: str, fn: Callable[[], T]) -> Union[T, Unavailable]:
        try:
            return fn()
        except DiagnosticError as exc:
            logging.warning("%s unavailable: %s", name, exc)
            return Unavailable(str(exc))
        except Exception as exc:
            logging.warning("%s failed unexpectedly: %s", name, exc, exc_info=True)
            return Unavailable(f"{name} failed: {exc}")

    def _remaining(self) -> Optional[float]:
        deadline = self.config.run_deadline_seconds
        if deadline is None:
            return None
        return max(0.0, deadline - (time.monotonic() - self._started))

    def _budget(self, timeout: float) -> Optional[float]:
        """Per-probe timeout capped by what is left of the run; None once the run deadline has passed."""
        remaining = self._remaining()
        if remaining is None:
            return timeout
        if remaining <= 0:
            return None
        return min(timeout, remaining)

    def _ip_config(self) -> str:
        command, args = self.commands.ip_config()
        outcome = self.invoker.invoke(command, args, self.config.command_timeout_seconds)
        if isinstance(outcome, InvocationFailure):
            raise outcome.error
        if not outcome.ok:
            raise ProbeUnavailable(outcome.text.strip() or f"{command} failed with code {outcome.exit_code}")
        return outcome.stdout

    def _wifi(self) -> WifiState:
        command, args = self.commands.wlan()
        outcome = self.invoker.invoke(command, args, self.config.command_timeout_seconds)
        if isinstance(outcome, InvocationFailure):
            raise outcome.error
        # A non-zero exit here usually means no WLAN hardware or service; the parser defaults cover it.
        normalise = _WLAN_NORMALISERS.get(self.commands.wlan_format)
        text = normalise(outcome.stdout) if normalise else outcome.text
        return parse_wifi_state(text)

    def _probe_targets(self, targets: Sequence[Target]) -> List[TargetReport]:
        if not targets:
            return []
        workers = max(1, min(self.config.max_workers, len(targets)))
        logging.info("Probing %d targets with %d worker(s)", len(targets), workers)

        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="probe")
        futures = [executor.submit(self._probe_target, target) for target in targets]
        _, pending = wait(futures, timeout=self._remaining())

        reports: List[TargetReport] = []
        # Resequence into configured order regardless of completion order.
        for target, future in zip(targets, futures):
            if future in pending:
                logging.warning("%s (%s): %s", target.name, target.host, DEADLINE_EXCEEDED)
                reports.append(self._failed_report(target, DEADLINE_EXCEEDED))
                continue
            exc = future.exception()
            if exc is not None:
                logging.warning("%s (%s): probing failed: %s", target.name, target.host, exc)
                reports.append(self._failed_report(target, f"probing failed: {exc}"))
                continue
            reports.append(future.result())

        executor.shutdown(wait=not pending, cancel_futures=True)
        return reports

    def _probe_target(self, target: Target) -> TargetReport:
        cfg = self.config

        command, args = self.commands.dns_lookup(target.host)
        dns = self._run_probe(target, ProbeKind.DNS_LOOKUP, command, args, cfg.dns_timeout_seconds)
        if dns.succeeded:
            logging.info("%s (%s): DNS lookup ok", target.name, target.host)
        else:
            logging.warning("%s (%s): DNS lookup failed: %s", target.name, target.host, dns.error_detail)

        command, args = self.commands.ping(target.host, cfg.ping_count)
        ping = self._run_probe(target, ProbeKind.PING, command, args, cfg.ping_timeout_seconds)
        stats = summarize_ping(ping.raw_output, cfg.ping_count)
        if stats.average_ms is not None:
            logging.info(
                "%s (%s) reachable: avg=%.2f ms, %d/%d replies, rating=%s",
                target.name,
                target.host,
                stats.average_ms,
                stats.replies,
                stats.attempts,
                stats.rating.value,
            )
        else:
            logging.warning(
                "%s (%s) unreachable: %s, rating=%s",
                target.name,
                target.host,
                ping.error_detail or "no replies",
                stats.rating.value,
            )

        command, args = self.commands.traceroute(target.host, cfg.traceroute_max_hops)
        trace = self._run_probe(target, ProbeKind.TRACEROUTE, command, args, cfg.traceroute_timeout_seconds)
        if not trace.succeeded:
            logging.warning("%s (%s): traceroute failed: %s", target.name, target.host, trace.error_detail)

        return TargetReport(target=target, dns=dns, ping=ping, ping_stats=stats, traceroute=trace)

    def _run_probe(
        self,
        target: Target,
        kind: ProbeKind,
        command: str,
        args: Sequence[str],
        timeout: float,
    ) -> ProbeResult:
        budget = self._budget(timeout)
        if budget is None:
            # The run has already given up on this target; do not start another tool.
            return ProbeResult(target=target, kind=kind, raw_output="", succeeded=False, error_detail=DEADLINE_EXCEEDED)
        outcome = self.invoker.invoke(command, args, budget)
        if isinstance(outcome, InvocationFailure):
            return ProbeResult(
                target=target,
                kind=kind,
                raw_output=outcome.output,
                succeeded=False,
                error_detail=outcome.detail,
            )
        error = None
        if not outcome.ok:
            error = outcome.stderr.strip() or f"{command} failed with code {outcome.exit_code}"
        return ProbeResult(
            target=target,
            kind=kind,
            raw_output=outcome.text,
            succeeded=outcome.ok,
            error_detail=error,
        )

    def _failed_report(self, target: Target, detail: str) -> TargetReport:
        def failed(kind: ProbeKind) -> ProbeResult:
            return ProbeResult(target=target, kind=kind, raw_output="", succeeded=False, error_detail=detail)

        return TargetReport(
            target=target,
            dns=failed(ProbeKind.DNS_LOOKUP),
            ping=failed(ProbeKind.PING),
            ping_stats=PingStats(attempts=self.config.ping_count, replies=0, average_ms=None),
            traceroute=failed(ProbeKind.TRACEROUTE),
        )

    def _speedtest(self) -> Union[SpeedtestResult, Unavailable]:
        if not self.config.enable_speedtest:
            logging.info("Speedtest disabled")
            return Unavailable("speed test disabled")
        remaining = self._remaining()
        if remaining is not None and remaining <= 0:
            logging.warning("Speedtest skipped: %s", DEADLINE_EXCEEDED)
            return Unavailable(DEADLINE_EXCEEDED)
        logging.info("Running speedtest")
        result = self._step("speedtest", self.speedtester.run)
        if isinstance(result, Unavailable):
            logging.warning("Speedtest unavailable: %s", result.reason)
        else:
            logging.info("Speedtest (%s): down=%s up=%s", result.tool, result.download, result.upload)
        return result
