"""Delta images between temporally adjacent foreground masks."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from framedelta.errors import FrameDimensionMismatch
from framedelta.imaging.codec import encode_gray
from framedelta.pipeline.stage import DeltaImage, ForegroundMask

DELTA_GAIN = 2


def compose_delta(previous: np.ndarray, current: np.ndarray) -> np.ndarray:
    """``clip(2 * |previous - current|, 0, 255)`` per pixel, as uint8."""

    if previous.shape != current.shape:
        raise FrameDimensionMismatch(
            expected=(int(previous.shape[1]), int(previous.shape[0])),
            actual=(int(current.shape[1]), int(current.shape[0])),
        )
    diff = np.abs(previous.astype(np.int16) - current.astype(np.int16))
    return np.clip(DELTA_GAIN * diff, 0, 255).astype(np.uint8)


def delta_output_path(output_dir: Path, source_path: Path) -> Path:
    return output_dir / source_path.name


def create_and_save_delta(
    output_dir: Path,
    previous: ForegroundMask | None,
    current: ForegroundMask,
) -> DeltaImage | None:
    """Write the delta of ``current`` against ``previous``.

    Returns None without writing anything when there is no previous mask yet.
    """

    if previous is None:
        return None

    out_path = delta_output_path(output_dir, current.path)
    encode_gray(compose_delta(previous.mask, current.mask), out_path)
    return DeltaImage(
        frame_idx=current.frame_idx,
        predecessor_idx=previous.frame_idx,
        output_path=out_path,
    )
