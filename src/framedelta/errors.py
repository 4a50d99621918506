"""Error types raised by the framedelta pipeline."""

from __future__ import annotations

from pathlib import Path


class FrameDeltaError(Exception):
    """Base class for framedelta errors."""


class ConfigurationError(FrameDeltaError):
    """Missing or invalid required paths or options."""


class FrameDecodeError(FrameDeltaError):
    """An input image could not be read or decoded."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to load image {path}: {reason}")
        self.path = path
        self.reason = reason


class FrameDimensionMismatch(FrameDeltaError):
    """A frame's size differs from the background reference."""

    def __init__(
        self,
        expected: tuple[int, int],
        actual: tuple[int, int],
        path: Path | None = None,
    ) -> None:
        where = f" for {path}" if path is not None else ""
        super().__init__(
            f"Frame size {actual[0]}x{actual[1]}{where} does not match "
            f"background size {expected[0]}x{expected[1]}"
        )
        self.expected = expected
        self.actual = actual
        self.path = path


class FrameProcessingError(FrameDeltaError):
    """Masking or softening a decoded frame raised an error."""

    def __init__(self, path: Path, cause: Exception) -> None:
        super().__init__(f"Failed to process image {path}: {type(cause).__name__}: {cause}")
        self.path = path
        self.cause = cause


class ImageEncodeError(FrameDeltaError):
    """An output image could not be written."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to save image {path}: {reason}")
        self.path = path
        self.reason = reason
