"""Helpers for ordering and filtering frame filenames."""

from __future__ import annotations

from pathlib import Path
import re

_DIGITS = re.compile(r"(\d+)")


def frame_sort_key(path: Path) -> tuple[tuple[int, int | str], ...]:
    """Digit-aware sort key so that frame_10.jpg follows frame_9.jpg."""

    parts: list[tuple[int, int | str]] = []
    for token in _DIGITS.split(path.name):
        if not token:
            continue
        if token.isdigit():
            parts.append((0, int(token)))
        else:
            parts.append((1, token.lower()))
    return tuple(parts)


def normalize_extensions(extensions: tuple[str, ...] | list[str]) -> frozenset[str]:
    """Lower-case extensions and make sure each starts with a dot."""

    normalized = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        normalized.add(ext if ext.startswith(".") else f".{ext}")
    return frozenset(normalized)


def has_frame_extension(path: Path, extensions: frozenset[str]) -> bool:
    return path.suffix.lower() in extensions
