"""`framedelta inspect` command."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import sys
from typing import Annotated

import tyro

from framedelta.config.schema import DEFAULT_EXTENSIONS
from framedelta.errors import FrameDeltaError
from framedelta.imaging.codec import decode_rgb
from framedelta.ingest.scanner import scan_frames
from framedelta.pipeline.sequencer import iter_chunks


@dataclass(slots=True)
class InspectCommand:
    """Show the frames, background and chunk plan a run would use."""

    path: Annotated[Path, tyro.conf.arg(prefix_name=False)]
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    background: Path | None = None
    chunk_size: int = 128


def describe(command: InspectCommand) -> list[str]:
    scan = scan_frames(command.path, command.extensions)
    lines = [
        f"path: {scan.input_path}",
        f"frames: {scan.frame_count}",
        f"skipped_files: {len(scan.skipped)}",
    ]
    if scan.frames:
        lines.append(f"first: {scan.frames[0].path.name}")
        lines.append(f"last: {scan.frames[-1].path.name}")

    background = command.background or scan.default_background()
    if background is None:
        lines.append("background: none")
    else:
        pixels = decode_rgb(background)
        lines.append(f"background: {background} ({pixels.shape[1]}x{pixels.shape[0]})")

    sizes = [len(chunk) for chunk in iter_chunks(scan.frames, command.chunk_size)]
    lines.append(f"chunks: {len(sizes)} {sizes}")
    return lines


def execute(command: InspectCommand) -> None:
    try:
        lines = describe(command)
    except (FrameDeltaError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    for line in lines:
        print(line)
