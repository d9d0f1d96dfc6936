from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional, Union

from netdiag.invoker import InvocationFailure, ProbeInvoker
from netdiag.models import DEFAULT_SERVER_ID, SpeedtestResult, Unavailable
from netdiag.parsers import parse_speedtest


class SpeedTester:
    def __init__(
        self,
        invoker: ProbeInvoker,
        timeout: float,
        server_id: Optional[str] = DEFAULT_SERVER_ID,
        path: Optional[str] = None,
    ) -> None:
        self.invoker = invoker
        self.timeout = timeout
        self.server_id = server_id
        self.path = path

    def run(self) -> Union[SpeedtestResult, Unavailable]:
        exe = self._find_speedtest()
        if not exe:
            where = self.path or "PATH"
            return Unavailable(
                f"speedtest CLI not found at {where}; install the Ookla speedtest CLI to measure throughput"
            )

        args = ["--accept-license", "--accept-gdpr"]
        if self.server_id:
            args.append(f"--server-id={self.server_id}")

        outcome = self.invoker.invoke(exe, args, self.timeout)
        if isinstance(outcome, InvocationFailure):
            return Unavailable(outcome.detail)

        output = outcome.text
        if not outcome.ok:
            return Unavailable(output.strip() or f"speedtest failed with code {outcome.exit_code}")

        download, upload = parse_speedtest(output)
        return SpeedtestResult(tool=Path(exe).name, download=download, upload=upload, raw_output=output)

    def _find_speedtest(self) -> Optional[str]:
        """
        A configured path must exist as given. Otherwise prefer the official
        Ookla binary in its usual install locations, falling back to PATH.
        """
        if self.path:
            return self.path if Path(self.path).exists() else None
        preferred = [
            Path("/usr/bin/speedtest"),
            Path("/usr/local/bin/speedtest"),
            Path("/opt/homebrew/bin/speedtest"),
        ]
        for candidate in preferred:
            if candidate.exists():
                return str(candidate)
        return self._which("speedtest")

    def _which(self, exe: str) -> Optional[str]:
        """
        Like shutil.which but also tries the common user install bin path.
        """
        path = shutil.which(exe)
        if path:
            return path
        user_path = Path.home() / ".local" / "bin" / exe
        if user_path.exists():
            return str(user_path)
        return None
