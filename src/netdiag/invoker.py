from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

from netdiag.errors import DiagnosticError, ProbeTimeout, ProbeUnavailable

# Keeps Windows from flashing a console window per probe.
_CREATE_NO_WINDOW = 0x08000000 if sys.platform.startswith("win") else 0


@dataclass(frozen=True)
class CommandOutput:
    command: Tuple[str, ...]
    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def text(self) -> str:
        return (self.stdout or "") + (self.stderr or "")


@dataclass(frozen=True)
class InvocationFailure:
    command: Tuple[str, ...]
    error: DiagnosticError
    # Whatever the command printed before it was stopped, e.g. the replies of a ping that timed out.
    output: str = ""

    @property
    def detail(self) -> str:
        return str(self.error)


InvocationResult = Union[CommandOutput, InvocationFailure]


class ProbeInvoker:
    """Runs one external diagnostic command. Never raises; failures come back as values."""

    def invoke(self, command: str, args: Sequence[str], timeout: float) -> InvocationResult:
        cmd = (command, *args)
        kwargs = {}
        if _CREATE_NO_WINDOW:
            kwargs["creationflags"] = _CREATE_NO_WINDOW
        try:
            completed = subprocess.run(
                list(cmd),
                capture_output=True,
                text=True,
                errors="replace",
                timeout=timeout,
                check=False,
                **kwargs,
            )
        except subprocess.TimeoutExpired as exc:
            return InvocationFailure(
                cmd,
                ProbeTimeout(f"{command} timed out after {timeout:g}s"),
                output=_partial(exc.stdout) + _partial(exc.stderr),
            )
        except FileNotFoundError:
            return InvocationFailure(cmd, ProbeUnavailable(f"{command} command not found"))
        except OSError as exc:
            return InvocationFailure(cmd, ProbeUnavailable(f"{command} could not be started: {exc}"))

        return CommandOutput(
            command=cmd,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            exit_code=completed.returncode,
        )


def _partial(data: Union[bytes, str, None]) -> str:
    # TimeoutExpired carries bytes even when the run was in text mode.
    if not data:
        return ""
    if isinstance(data, bytes):
        return data.decode(errors="replace")
    return data
