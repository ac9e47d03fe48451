"""Reading program text — a file path or '-' for standard input."""

from __future__ import annotations

import pathlib
import sys


def read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return pathlib.Path(path).read_text(encoding="utf-8")
