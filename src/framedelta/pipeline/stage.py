"""Frame, mask and delta models passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from framedelta.ingest.scanner import FrameRef


@dataclass(frozen=True, slots=True)
class ForegroundMask:
    """Successful masking result for one frame."""

    frame_idx: int
    path: Path
    mask: np.ndarray = field(repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class MaskFailure:
    """Masking failed for one frame; carries the typed error."""

    frame_idx: int
    path: Path
    error: Exception


MaskResult = ForegroundMask | MaskFailure


@dataclass(frozen=True, slots=True)
class DeltaImage:
    """One written delta image and the mask it was diffed against."""

    frame_idx: int
    predecessor_idx: int
    output_path: Path

    @property
    def has_gap(self) -> bool:
        return self.frame_idx - self.predecessor_idx > 1


@dataclass(frozen=True, slots=True)
class FrameFailure:
    """Non-fatal per-frame failure recorded in a run."""

    frame_idx: int
    path: Path
    stage: str
    kind: str
    message: str

    @classmethod
    def from_error(
        cls,
        frame: FrameRef | ForegroundMask | MaskFailure,
        stage: str,
        error: Exception,
    ) -> FrameFailure:
        return cls(
            frame_idx=frame.frame_idx,
            path=frame.path,
            stage=stage,
            kind=type(error).__name__,
            message=str(error),
        )


@dataclass(frozen=True, slots=True)
class ChunkOutcome:
    """Everything one chunk produced, plus the seam for the next chunk."""

    chunk_idx: int
    start_idx: int
    end_idx: int
    frame_count: int
    deltas: list[DeltaImage]
    failures: list[FrameFailure]
    seam: ForegroundMask | None
