"""
Command lines for the external diagnostic tools, per platform.

Each method returns ``(command, args)`` ready for ``ProbeInvoker.invoke``.
"""
from __future__ import annotations

import sys
from typing import List, Optional, Tuple

Command = Tuple[str, List[str]]


class CommandSet:
    def __init__(self, platform: Optional[str] = None) -> None:
        self.platform = platform or sys.platform

    @property
    def is_windows(self) -> bool:
        return self.platform.startswith("win")

    def ip_config(self) -> Command:
        if self.is_windows:
            return ("ipconfig", ["/all"])
        if self.platform == "darwin":
            return ("ifconfig", ["-a"])
        return ("ip", ["addr", "show"])

    def wlan(self) -> Command:
        if self.is_windows:
            return ("netsh", ["wlan", "show", "interfaces"])
        if self.platform == "darwin":
            return ("networksetup", ["-getairportnetwork", "en0"])
        return ("nmcli", ["-t", "-f", "ACTIVE,SSID,SIGNAL", "device", "wifi"])

    def dns_lookup(self, host: str) -> Command:
        return ("nslookup", ["-type=A", host])

    def ping(self, host: str, count: int) -> Command:
        if self.is_windows:
            return ("ping", ["-n", str(count), host])
        return ("ping", ["-c", str(count), host])

    def traceroute(self, host: str, max_hops: int) -> Command:
        if self.is_windows:
            return ("tracert", ["-d", "-h", str(max_hops), host])
        return ("traceroute", ["-n", "-m", str(max_hops), host])

    @property
    def wlan_format(self) -> str:
        """Name of the WLAN tool, so its output can be normalised before parsing."""
        return self.wlan()[0]
