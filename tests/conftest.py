from pathlib import Path

import numpy as np
import pytest
from PIL import Image


def write_rgb(path: Path, arr: np.ndarray) -> Path:
    Image.fromarray(arr.astype(np.uint8)).save(path)
    return path


def moving_square_frames(folder: Path, count: int, size: int = 32, square: int = 8) -> list[Path]:
    """Black frames with a white square stepping right; the last frame is empty."""

    folder.mkdir(parents=True, exist_ok=True)
    paths = []
    for idx in range(count):
        arr = np.zeros((size, size, 3), dtype=np.uint8)
        if idx < count - 1:
            x0 = (idx * 4) % (size - square)
            arr[8 : 8 + square, x0 : x0 + square] = 255
        paths.append(write_rgb(folder / f"frame_{idx:04d}.png", arr))
    return paths


@pytest.fixture
def frames_dir(tmp_path):
    folder = tmp_path / "frames"
    moving_square_frames(folder, 5)
    return folder


@pytest.fixture
def out_dir(tmp_path):
    folder = tmp_path / "out"
    folder.mkdir()
    return folder
