"""Scan a frame directory and build an ordered frame manifest."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from framedelta.config.schema import DEFAULT_EXTENSIONS
from framedelta.errors import ConfigurationError
from framedelta.ingest.sequence import frame_sort_key, has_frame_extension, normalize_extensions


@dataclass(frozen=True, slots=True)
class FrameRef:
    frame_idx: int
    path: Path


@dataclass(slots=True)
class FrameScanResult:
    input_path: Path
    frames: list[FrameRef]
    skipped: list[Path]

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    def default_background(self) -> Path | None:
        """The last frame in sequence order is the background unless one is configured."""

        if not self.frames:
            return None
        return self.frames[-1].path


def scan_frames(
    input_path: Path,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
) -> FrameScanResult:
    """Return frames with a recognized extension, indexed 0..N-1 in filename order."""

    if not input_path.exists():
        raise ConfigurationError(f"{input_path} does not exist.")
    if not input_path.is_dir():
        raise ConfigurationError(f"Input folder must be a directory: {input_path}")

    allowed = normalize_extensions(extensions)
    candidates: list[Path] = []
    skipped: list[Path] = []
    for child in input_path.iterdir():
        if not child.is_file():
            continue
        if has_frame_extension(child, allowed):
            candidates.append(child)
        else:
            skipped.append(child)

    candidates.sort(key=frame_sort_key)
    frames = [FrameRef(frame_idx=idx, path=path) for idx, path in enumerate(candidates)]
    skipped.sort(key=frame_sort_key)
    return FrameScanResult(input_path=input_path, frames=frames, skipped=skipped)


def clear_output_folder(output_path: Path) -> int:
    """Remove files directly inside the output folder; returns how many were removed."""

    removed = 0
    for child in output_path.iterdir():
        if child.is_file() or child.is_symlink():
            child.unlink()
            removed += 1
    return removed
