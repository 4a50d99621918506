"""Chunked, order-preserving scheduling of mask and delta tasks.

Masks for a chunk are computed concurrently on a shared pool. Once the chunk
is full (or the input ends) the sequencer waits for all of them, sorts the
results by frame index and emits deltas between neighbouring valid masks.
The last valid mask of a chunk is the seam the next chunk diffs against.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future
from enum import Enum
import logging
from pathlib import Path
from typing import Callable, Iterable

from framedelta.errors import ImageEncodeError
from framedelta.ingest.scanner import FrameRef
from framedelta.observability.logging import get_logger, log_event
from framedelta.pipeline.stage import (
    ChunkOutcome,
    DeltaImage,
    ForegroundMask,
    FrameFailure,
    MaskFailure,
    MaskResult,
)


_LOGGER = get_logger("framedelta.sequencer")

MaskFn = Callable[[FrameRef], MaskResult]
DeltaFn = Callable[[ForegroundMask | None, ForegroundMask], DeltaImage | None]


class SequencerState(str, Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    DRAINING = "draining"
    SEQUENCING = "sequencing"
    EMITTING = "emitting"
    DONE = "done"


def _cancel_all(futures: Iterable[Future]) -> None:
    for future in futures:
        future.cancel()


def iter_chunks(frames: list[FrameRef], chunk_size: int) -> Iterable[list[FrameRef]]:
    """Split frames into contiguous chunks of at most ``chunk_size``."""

    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
    for offset in range(0, len(frames), chunk_size):
        yield frames[offset : offset + chunk_size]


class ChunkSequencer:
    """Admit frames in chunks, then emit deltas in frame order.

    ``push`` submits a mask task without waiting. When ``chunk_size`` tasks are
    pending the chunk is drained, sorted and emitted before ``push`` returns.
    ``finish`` flushes a partial final chunk.
    """

    def __init__(
        self,
        executor: Executor,
        mask_fn: MaskFn,
        delta_fn: DeltaFn,
        chunk_size: int,
        seam: ForegroundMask | None = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
        self._executor = executor
        self._mask_fn = mask_fn
        self._delta_fn = delta_fn
        self._chunk_size = chunk_size
        self._seam = seam
        self._pending: list[tuple[FrameRef, Future[MaskResult]]] = []
        self._chunk_idx = 0
        self.state = SequencerState.IDLE

    @property
    def seam(self) -> ForegroundMask | None:
        return self._seam

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def chunks_completed(self) -> int:
        return self._chunk_idx

    def push(self, frame: FrameRef) -> ChunkOutcome | None:
        """Admit one frame; returns the chunk outcome when this frame closes a chunk."""

        if self.state is SequencerState.DONE:
            raise RuntimeError("Cannot push frames into a finished sequencer.")
        self.state = SequencerState.ACCUMULATING
        self._pending.append((frame, self._executor.submit(self._mask_fn, frame)))
        if len(self._pending) >= self._chunk_size:
            return self.flush()
        return None

    def flush(self) -> ChunkOutcome | None:
        """Complete whatever is pending as one chunk."""

        if not self._pending:
            return None
        pending, self._pending = self._pending, []
        outcome = self._complete_chunk(self._chunk_idx, pending, self._seam)
        self._seam = outcome.seam
        self._chunk_idx += 1
        self.state = SequencerState.IDLE
        return outcome

    def finish(self) -> ChunkOutcome | None:
        outcome = self.flush()
        self.state = SequencerState.DONE
        return outcome

    def process_chunk(
        self,
        frames: list[FrameRef],
        seam: ForegroundMask | None,
        chunk_idx: int = 0,
    ) -> ChunkOutcome:
        """Run one whole chunk against an explicit seam.

        Does not touch the sequencer's own pending frames or seam; the
        returned outcome's ``seam`` is what the following chunk should use.
        """

        if not frames:
            raise ValueError("Cannot process an empty chunk.")
        self.state = SequencerState.ACCUMULATING
        pending = [(frame, self._executor.submit(self._mask_fn, frame)) for frame in frames]
        outcome = self._complete_chunk(chunk_idx, pending, seam)
        self.state = SequencerState.IDLE
        return outcome

    def _complete_chunk(
        self,
        chunk_idx: int,
        pending: list[tuple[FrameRef, Future[MaskResult]]],
        seam: ForegroundMask | None,
    ) -> ChunkOutcome:
        results = self._drain(pending)

        self.state = SequencerState.SEQUENCING
        results.sort(key=lambda item: item.frame_idx)

        self.state = SequencerState.EMITTING
        deltas, failures, last_valid = self._emit(results, seam)

        indices = [frame.frame_idx for frame, _ in pending]
        outcome = ChunkOutcome(
            chunk_idx=chunk_idx,
            start_idx=min(indices),
            end_idx=max(indices),
            frame_count=len(pending),
            deltas=deltas,
            failures=failures,
            seam=last_valid,
        )
        log_event(
            _LOGGER,
            "chunk_completed",
            level=logging.DEBUG,
            chunk_idx=chunk_idx,
            start_idx=outcome.start_idx,
            end_idx=outcome.end_idx,
            frame_count=outcome.frame_count,
            delta_count=len(deltas),
            failure_count=len(failures),
        )
        return outcome

    def _drain(
        self,
        pending: list[tuple[FrameRef, Future[MaskResult]]],
    ) -> list[MaskResult]:
        self.state = SequencerState.DRAINING
        results: list[MaskResult] = []
        try:
            for _, future in pending:
                results.append(future.result())
        except BaseException:
            _cancel_all(future for _, future in pending)
            raise
        return results

    def _emit(
        self,
        ordered: list[MaskResult],
        seam: ForegroundMask | None,
    ) -> tuple[list[DeltaImage], list[FrameFailure], ForegroundMask | None]:
        failures: list[FrameFailure] = []
        jobs: list[tuple[ForegroundMask, Future[DeltaImage | None]]] = []

        previous = seam
        for result in ordered:
            if isinstance(result, MaskFailure):
                failures.append(FrameFailure.from_error(result, "mask", result.error))
                _log_failure(result.frame_idx, result.path, "mask", result.error)
                continue
            jobs.append((result, self._executor.submit(self._delta_fn, previous, result)))
            previous = result

        deltas: list[DeltaImage] = []
        try:
            for mask, future in jobs:
                try:
                    delta = future.result()
                except ImageEncodeError as exc:
                    failures.append(FrameFailure.from_error(mask, "delta", exc))
                    _log_failure(mask.frame_idx, mask.path, "delta", exc)
                    continue
                if delta is not None:
                    deltas.append(delta)
        except BaseException:
            _cancel_all(future for _, future in jobs)
            raise

        failures.sort(key=lambda item: item.frame_idx)
        return deltas, failures, previous


def _log_failure(frame_idx: int, path: Path, stage: str, error: Exception) -> None:
    log_event(
        _LOGGER,
        "frame_failed",
        level=logging.WARNING,
        frame_idx=frame_idx,
        path=str(path),
        stage=stage,
        error=f"{type(error).__name__}: {error}",
    )
