"""Resize primitives used to approximate a low-pass blur."""

from __future__ import annotations

from enum import Enum

import numpy as np
from PIL import Image


class ResampleFilter(Enum):
    SOFT = Image.Resampling.BILINEAR
    SHARP = Image.Resampling.BICUBIC


def resize(arr: np.ndarray, width: int, height: int, kind: ResampleFilter) -> np.ndarray:
    """Resize a single-channel uint8 array to ``width`` x ``height``."""

    image = Image.fromarray(arr)
    resized = image.resize((width, height), resample=kind.value)
    return np.asarray(resized, dtype=np.uint8)
