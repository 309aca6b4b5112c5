"""Consistent JSON and text output for the command-line shells."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def dump_json(data: Any, *, pretty: bool = False, indent: int = 2) -> str:
    """Serialize *data* compactly, or indented when *pretty* is set.

    Key order is preserved, so documents come out in model order.
    """
    if pretty:
        return json.dumps(data, indent=indent, ensure_ascii=False)
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def save_text(path: Path, text: str) -> Path:
    """Write *text* with a trailing newline, creating parent directories.

    Returns the resolved output path.
    """
    path = path.resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
        if not text.endswith("\n"):
            f.write("\n")
    return path
