"""Atomic filesystem write helpers."""

from __future__ import annotations

from pathlib import Path
import json
import os
import tempfile
from typing import Any


def atomic_write_bytes(path: Path, content: bytes) -> None:
    """Write bytes atomically using a temp file + rename."""

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(content)
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)


def atomic_write_text(path: Path, content: str) -> None:
    """Write UTF-8 text atomically, creating the parent directory."""

    path.parent.mkdir(parents=True, exist_ok=True)
    atomic_write_bytes(path, content.encode("utf-8"))


def atomic_write_json(path: Path, payload: Any, indent: int = 2) -> None:
    """Write JSON atomically."""

    atomic_write_text(path, json.dumps(payload, indent=indent, sort_keys=True) + "\n")
