from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, Optional, TextIO

from netdiag.errors import PersistenceFailure


def write_console(lines: Iterable[str], stream: Optional[TextIO] = None) -> None:
    out = stream or sys.stdout
    for line in lines:
        out.write(line + "\n")
    out.flush()


def write_report(path: Path, text: str) -> Path:
    """Overwrite the report file at path with text (UTF-8)."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as exc:
        raise PersistenceFailure(f"could not write report to {path}: {exc}") from exc
    return path
