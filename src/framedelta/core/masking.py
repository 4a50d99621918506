"""Foreground masking against a fixed background reference."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from framedelta.config.schema import MaskConfig
from framedelta.errors import FrameDecodeError, FrameDimensionMismatch, FrameProcessingError
from framedelta.imaging.codec import decode_rgb
from framedelta.imaging.resample import ResampleFilter, resize
from framedelta.ingest.scanner import FrameRef
from framedelta.pipeline.stage import ForegroundMask, MaskFailure, MaskResult

MASK_ON = 255
MASK_OFF = 0


def _size(arr: np.ndarray) -> tuple[int, int]:
    return int(arr.shape[1]), int(arr.shape[0])


def check_dimensions(
    frame: np.ndarray,
    background: np.ndarray,
    path: Path | None = None,
) -> None:
    """Raise FrameDimensionMismatch unless frame and background share width/height."""

    if frame.shape[:2] != background.shape[:2]:
        raise FrameDimensionMismatch(expected=_size(background), actual=_size(frame), path=path)


def compute_foreground_mask(
    frame: np.ndarray,
    background: np.ndarray,
    threshold: float,
) -> np.ndarray:
    """Binary mask of pixels whose RGB distance to the background exceeds ``threshold``.

    Both inputs are ``(h, w, c)`` uint8 arrays with ``c >= 3``; channels past
    the third (alpha) are ignored. The comparison is strict, so a pixel exactly
    ``threshold`` away stays off.
    """

    check_dimensions(frame, background)
    diff = frame[..., :3].astype(np.int32) - background[..., :3].astype(np.int32)
    dist_sq = np.sum(diff * diff, axis=-1)
    threshold_sq = float(threshold) * float(threshold)
    return np.where(dist_sq > threshold_sq, MASK_ON, MASK_OFF).astype(np.uint8)


def soften_mask(mask: np.ndarray, iterations: int) -> np.ndarray:
    """Approximate a blur by shrinking to a quarter size and growing back, ``iterations`` times."""

    if iterations <= 0:
        return mask
    height, width = mask.shape
    small_w = max(1, width // 4)
    small_h = max(1, height // 4)
    out = mask
    for _ in range(iterations):
        out = resize(out, small_w, small_h, ResampleFilter.SOFT)
        out = resize(out, width, height, ResampleFilter.SHARP)
    return out


def create_foreground_mask(
    frame: FrameRef,
    background: np.ndarray,
    config: MaskConfig,
) -> MaskResult:
    """Decode one frame and build its softened foreground mask.

    Unreadable frames, frames whose size differs from the background and
    frames whose masking raises come back as a MaskFailure for that index.
    """

    try:
        pixels = decode_rgb(frame.path)
        check_dimensions(pixels, background, path=frame.path)
    except (FrameDecodeError, FrameDimensionMismatch) as exc:
        return MaskFailure(frame_idx=frame.frame_idx, path=frame.path, error=exc)

    try:
        mask = compute_foreground_mask(pixels, background, config.threshold)
        mask = soften_mask(mask, config.blur_iterations)
    except Exception as exc:
        error = FrameProcessingError(frame.path, exc)
        return MaskFailure(frame_idx=frame.frame_idx, path=frame.path, error=error)
    return ForegroundMask(frame_idx=frame.frame_idx, path=frame.path, mask=mask)
