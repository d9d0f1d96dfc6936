"""
Pure text extraction for diagnostic tool output.

None of these raise on unexpected input: a missing pattern yields None or the
documented default, since tool output differs between hosts and locales.
"""
from __future__ import annotations

import re
from typing import List, Optional, Tuple

import numpy as np

from netdiag.models import PingStats, WifiState

NO_WIFI_SSID = "No active WiFi connections detected"
NO_WIFI_SIGNAL = "N/A"

_SSID_RE = re.compile(r"^[ \t]*SSID[ \t]*:[ \t]*(\S.*?)[ \t]*$", re.IGNORECASE | re.MULTILINE)
_SIGNAL_RE = re.compile(r"^[ \t]*Signal[ \t]*:[ \t]*(\S.*?)[ \t]*$", re.IGNORECASE | re.MULTILINE)
_PING_TIME_RE = re.compile(r"time[=<]\s*([0-9.]+)\s*ms", re.IGNORECASE)
_LINK_SPEED_RE = re.compile(r"([0-9]+(?:\.[0-9]+)?)\s*([KMG])bps", re.IGNORECASE)
_NMCLI_FIELD_SPLIT_RE = re.compile(r"(?<!\\):")
_AIRPORT_NETWORK_RE = re.compile(r"^[ \t]*Current Wi-Fi Network[ \t]*:[ \t]*(\S.*?)[ \t]*$", re.MULTILINE)

_LINK_SPEED_SCALE = {"k": 0.001, "m": 1.0, "g": 1000.0}


def parse_wifi_state(text: str) -> WifiState:
    """Pull SSID and signal from ``key : value`` WLAN text; first match wins."""
    text = text or ""
    ssid = _SSID_RE.search(text)
    signal = _SIGNAL_RE.search(text)
    return WifiState(
        ssid=ssid.group(1) if ssid else NO_WIFI_SSID,
        signal_percent=signal.group(1) if signal else NO_WIFI_SIGNAL,
    )


def nmcli_to_key_value(text: str) -> str:
    """
    Turn terse ``nmcli -t -f ACTIVE,SSID,SIGNAL device wifi`` output into the
    ``SSID : ...`` / ``Signal : ...%`` lines parse_wifi_state reads. Only the
    active network is kept.
    """
    for line in (text or "").splitlines():
        fields = [f.replace("\\:", ":") for f in _NMCLI_FIELD_SPLIT_RE.split(line.strip())]
        if len(fields) < 3 or fields[0].lower() != "yes":
            continue
        ssid, signal = fields[1], fields[2]
        lines = []
        if ssid:
            lines.append(f"SSID : {ssid}")
        if signal:
            lines.append(f"Signal : {signal}%")
        return "\n".join(lines)
    return ""


def networksetup_to_key_value(text: str) -> str:
    """``Current Wi-Fi Network: X`` from ``networksetup -getairportnetwork`` becomes ``SSID : X``."""
    match = _AIRPORT_NETWORK_RE.search(text or "")
    return f"SSID : {match.group(1)}" if match else ""


def parse_ping_times(text: str) -> List[float]:
    times: List[float] = []
    for raw in _PING_TIME_RE.findall(text or ""):
        try:
            times.append(float(raw))
        except ValueError:
            continue
    return times


def summarize_ping(text: str, attempts: int) -> PingStats:
    """Average the per-reply round-trip times; no replies leaves the average undefined."""
    times = parse_ping_times(text)
    average = round(float(np.mean(times)), 2) if times else None
    return PingStats(attempts=attempts, replies=len(times), average_ms=average)


def _labelled_value(text: str, label: str) -> Optional[str]:
    for line in text.splitlines():
        if label in line:
            value = line.split(label, 1)[1].strip()
            return value or None
    return None


def parse_speedtest(text: str) -> Tuple[Optional[str], Optional[str]]:
    """Return the text after the first ``Download:`` and ``Upload:`` labels."""
    text = text or ""
    return _labelled_value(text, "Download:"), _labelled_value(text, "Upload:")


def parse_link_speed(descriptor: Optional[str]) -> Optional[int]:
    """Link speed in Mbps from a descriptor such as ``"866.7 Mbps"``; None when unknown."""
    if not descriptor:
        return None
    match = _LINK_SPEED_RE.search(descriptor)
    if not match:
        return None
    mbps = float(match.group(1)) * _LINK_SPEED_SCALE[match.group(2).lower()]
    return int(round(mbps))


def classify_connection_type(name: str) -> str:
    lowered = name.lower()
    if lowered == "lo" or lowered.startswith("loopback"):
        return "Loopback"
    if lowered.startswith(("docker", "veth", "br-", "virbr", "vmnet", "vethernet", "tun", "tap", "wg", "utun", "vboxnet")):
        return "Virtual"
    if lowered.startswith(("wl", "wi-fi", "wifi", "wireless", "ath")):
        return "Wireless"
    if lowered.startswith(("eth", "en", "em", "ethernet")):
        return "Ethernet"
    return "Other"
