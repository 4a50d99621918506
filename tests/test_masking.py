from pathlib import Path

import numpy as np
from PIL import Image
import pytest

from conftest import write_rgb
from framedelta.config.schema import MaskConfig
from framedelta.core import masking
from framedelta.core.masking import (
    compute_foreground_mask,
    create_foreground_mask,
    soften_mask,
)
from framedelta.errors import FrameDecodeError, FrameDimensionMismatch, FrameProcessingError
from framedelta.imaging.codec import decode_rgb
from framedelta.ingest.scanner import FrameRef
from framedelta.pipeline.stage import ForegroundMask, MaskFailure


def _solid(color, shape=(6, 5)):
    arr = np.zeros(shape + (3,), dtype=np.uint8)
    arr[...] = color
    return arr


@pytest.mark.parametrize("threshold", [0.0, 1.0, 48.0, 500.0])
def test_identical_images_give_empty_mask(threshold):
    rng = np.random.default_rng(7)
    img = rng.integers(0, 256, size=(12, 9, 3), dtype=np.uint8)
    mask = compute_foreground_mask(img, img.copy(), threshold)
    assert mask.shape == (12, 9)
    assert mask.dtype == np.uint8
    assert not mask.any()


def test_distance_equal_to_threshold_stays_off():
    bg = _solid((0, 0, 0))
    assert not compute_foreground_mask(_solid((48, 0, 0)), bg, 48.0).any()
    # 24^2 + 32^2 == 40^2
    assert not compute_foreground_mask(_solid((24, 32, 0)), bg, 40.0).any()


def test_distance_above_threshold_turns_on():
    bg = _solid((0, 0, 0))
    mask = compute_foreground_mask(_solid((49, 0, 0)), bg, 48.0)
    assert (mask == 255).all()
    mask = compute_foreground_mask(_solid((10, 20, 30)), _solid((40, 20, 0)), 42.0)
    assert (mask == 255).all()


def test_uint8_channels_do_not_wrap():
    bg = _solid((250, 250, 250))
    fg = _solid((5, 250, 250))
    assert (compute_foreground_mask(fg, bg, 200.0) == 255).all()


def test_alpha_channel_is_ignored():
    bg = np.zeros((4, 4, 4), dtype=np.uint8)
    fg = bg.copy()
    fg[..., 3] = 255
    assert not compute_foreground_mask(fg, bg, 0.0).any()


def test_only_changed_pixels_are_marked():
    bg = _solid((30, 30, 30), shape=(4, 4))
    fg = bg.copy()
    fg[1, 2] = (200, 30, 30)
    mask = compute_foreground_mask(fg, bg, 48.0)
    assert mask[1, 2] == 255
    assert mask.sum() == 255


def test_mismatched_sizes_raise():
    with pytest.raises(FrameDimensionMismatch):
        compute_foreground_mask(_solid(0, (4, 4)), _solid(0, (4, 5)), 48.0)


def test_zero_blur_iterations_is_identity():
    rng = np.random.default_rng(3)
    mask = np.where(rng.random((20, 24)) > 0.5, 255, 0).astype(np.uint8)
    out = soften_mask(mask, 0)
    np.testing.assert_array_equal(out, mask)


def test_blur_softens_edges_and_keeps_size():
    mask = np.zeros((64, 48), dtype=np.uint8)
    mask[16:48, 12:36] = 255
    out = soften_mask(mask, 2)
    assert out.shape == mask.shape
    assert out.dtype == np.uint8
    assert len(np.unique(out)) > 2
    assert out[32, 24] > 128
    assert out[0, 0] < 128


def test_blur_handles_frames_smaller_than_four_pixels():
    mask = np.full((3, 2), 255, dtype=np.uint8)
    out = soften_mask(mask, 3)
    assert out.shape == (3, 2)


def test_create_mask_success(tmp_path):
    bg = _solid((0, 0, 0), shape=(8, 8))
    fg = bg.copy()
    fg[2:4, 2:4] = 255
    path = write_rgb(tmp_path / "f.png", fg)
    background = bg.copy()

    result = create_foreground_mask(FrameRef(3, path), background, MaskConfig(48.0, 0))

    assert isinstance(result, ForegroundMask)
    assert result.frame_idx == 3
    assert result.path == path
    assert result.mask[2:4, 2:4].min() == 255
    assert result.mask.sum() == 4 * 255
    np.testing.assert_array_equal(background, bg)


def test_create_mask_reports_decode_failure(tmp_path):
    path = tmp_path / "broken.jpg"
    path.write_bytes(b"not an image at all")

    result = create_foreground_mask(FrameRef(2, path), _solid(0), MaskConfig())

    assert isinstance(result, MaskFailure)
    assert result.frame_idx == 2
    assert isinstance(result.error, FrameDecodeError)


def test_create_mask_reports_missing_file(tmp_path):
    result = create_foreground_mask(FrameRef(0, tmp_path / "gone.png"), _solid(0), MaskConfig())
    assert isinstance(result, MaskFailure)
    assert isinstance(result.error, FrameDecodeError)


def test_create_mask_reports_dimension_mismatch(tmp_path):
    path = write_rgb(tmp_path / "small.png", _solid(0, (4, 4)))
    result = create_foreground_mask(FrameRef(1, path), _solid(0, (8, 8)), MaskConfig())
    assert isinstance(result, MaskFailure)
    assert isinstance(result.error, FrameDimensionMismatch)
    assert result.error.expected == (8, 8)
    assert result.error.actual == (4, 4)


def test_create_mask_reports_processing_failure(tmp_path, monkeypatch):
    path = write_rgb(tmp_path / "f.png", _solid(0, (8, 8)))

    def broken_resize(mask, iterations):
        raise ValueError("resize failed")

    monkeypatch.setattr(masking, "soften_mask", broken_resize)
    result = create_foreground_mask(FrameRef(4, path), _solid(0, (8, 8)), MaskConfig())

    assert isinstance(result, MaskFailure)
    assert result.frame_idx == 4
    assert isinstance(result.error, FrameProcessingError)
    assert isinstance(result.error.cause, ValueError)
    assert "resize failed" in str(result.error)


def test_oversized_frame_is_a_decode_failure(tmp_path, monkeypatch):
    path = write_rgb(tmp_path / "huge.png", _solid(0, (8, 8)))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)

    with pytest.raises(FrameDecodeError, match="DecompressionBombError"):
        decode_rgb(path)

    result = create_foreground_mask(FrameRef(0, path), _solid(0, (8, 8)), MaskConfig())
    assert isinstance(result, MaskFailure)
    assert isinstance(result.error, FrameDecodeError)
