"""Pillow-backed image decode/encode for frames and delta images."""

from __future__ import annotations

import io
from pathlib import Path

import numpy as np
from PIL import Image

from framedelta.errors import FrameDecodeError, ImageEncodeError
from framedelta.storage.atomic import atomic_write_bytes


def decode_rgb(path: Path) -> np.ndarray:
    """Read an image as an ``(h, w, 3)`` uint8 array, dropping any alpha channel."""

    try:
        with Image.open(path) as image:
            rgb = image.convert("RGB")
            # convert() loads the pixel data, so truncated files fail here.
            arr = np.asarray(rgb, dtype=np.uint8)
    except (OSError, SyntaxError, EOFError, ValueError, Image.DecompressionBombError) as exc:
        raise FrameDecodeError(path, f"{type(exc).__name__}: {exc}") from exc
    return arr


def encode_gray(arr: np.ndarray, path: Path) -> None:
    """Write a single-channel uint8 array, format chosen by the path suffix."""

    if arr.ndim != 2 or arr.dtype != np.uint8:
        raise ImageEncodeError(path, f"expected 2-D uint8 array, got {arr.dtype} {arr.shape}")
    image_format = Image.registered_extensions().get(path.suffix.lower())
    if image_format is None:
        raise ImageEncodeError(path, f"unsupported output extension '{path.suffix}'")

    buffer = io.BytesIO()
    try:
        Image.fromarray(arr).save(buffer, format=image_format)
        atomic_write_bytes(path, buffer.getvalue())
    except (OSError, ValueError, KeyError) as exc:
        raise ImageEncodeError(path, f"{type(exc).__name__}: {exc}") from exc
