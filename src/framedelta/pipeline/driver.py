"""Run the full frame-to-delta pipeline for one input folder."""

from __future__ import annotations

from concurrent.futures import Executor
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from functools import partial
import logging
from pathlib import Path
import time
from typing import Any

import numpy as np

from framedelta.config.loader import validate_config
from framedelta.config.schema import PipelineConfig
from framedelta.core.delta import create_and_save_delta
from framedelta.core.masking import create_foreground_mask
from framedelta.imaging.codec import decode_rgb
from framedelta.ingest.scanner import FrameRef, clear_output_folder, scan_frames
from framedelta.observability.logging import get_logger, log_event
from framedelta.observability.progress import ProgressSink, percent_done
from framedelta.pipeline.sequencer import ChunkSequencer
from framedelta.pipeline.stage import ChunkOutcome, DeltaImage, ForegroundMask, FrameFailure
from framedelta.storage.atomic import atomic_write_json
from framedelta.workers.pool import create_frame_pool, normalize_worker_count


_LOGGER = get_logger("framedelta.driver")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True)
class RunReport:
    """Summary of one pipeline run."""

    input_path: Path
    output_path: Path
    background: Path | None = None
    started_at: str = field(default_factory=_now)
    finished_at: str | None = None
    frame_count: int = 0
    chunk_count: int = 0
    chunk_sizes: list[int] = field(default_factory=list)
    elapsed_sec: float = 0.0
    deltas: list[DeltaImage] = field(default_factory=list)
    failures: list[FrameFailure] = field(default_factory=list)

    @property
    def delta_count(self) -> int:
        return len(self.deltas)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def avg_ms_per_frame(self) -> float:
        if self.frame_count <= 0:
            return 0.0
        return 1000.0 * self.elapsed_sec / self.frame_count

    def add_chunk(self, outcome: ChunkOutcome) -> None:
        self.chunk_count += 1
        self.chunk_sizes.append(outcome.frame_count)
        self.deltas.extend(outcome.deltas)
        self.failures.extend(outcome.failures)

    def to_record(self) -> dict[str, Any]:
        return {
            "input": str(self.input_path),
            "output": str(self.output_path),
            "background": str(self.background) if self.background else None,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "frame_count": self.frame_count,
            "chunk_count": self.chunk_count,
            "chunk_sizes": list(self.chunk_sizes),
            "delta_count": self.delta_count,
            "failure_count": self.failure_count,
            "elapsed_sec": self.elapsed_sec,
            "avg_ms_per_frame": self.avg_ms_per_frame,
            "deltas": [
                {
                    "frame_idx": delta.frame_idx,
                    "predecessor_idx": delta.predecessor_idx,
                    "path": str(delta.output_path),
                }
                for delta in self.deltas
            ],
            "failures": [
                {**asdict(failure), "path": str(failure.path)} for failure in self.failures
            ],
        }


def run_pipeline(
    config: PipelineConfig,
    *,
    progress: ProgressSink | None = None,
    executor: Executor | None = None,
    seam: ForegroundMask | None = None,
) -> RunReport:
    """Mask every frame against the background and write ordered delta images.

    Configuration problems and an unreadable background abort before any
    frame is processed. Per-frame failures are collected in the report.
    """

    validate_config(config)
    input_path = Path(config.ingest.root)
    output_path = Path(config.output.root)

    scan = scan_frames(input_path, config.ingest.extensions)
    report = RunReport(input_path=input_path, output_path=output_path, frame_count=scan.frame_count)
    log_event(
        _LOGGER,
        "pipeline_started",
        input=str(input_path),
        output=str(output_path),
        frame_count=scan.frame_count,
        skipped_files=len(scan.skipped),
        chunk_size=config.chunk_size,
        threshold=config.mask.threshold,
        blur_iterations=config.mask.blur_iterations,
        workers=normalize_worker_count(config.max_workers),
    )

    if config.ingest.background is not None:
        report.background = Path(config.ingest.background)
    else:
        report.background = scan.default_background()

    background = None
    if report.background is not None:
        background = decode_rgb(report.background)
        log_event(
            _LOGGER,
            "background_loaded",
            path=str(report.background),
            width=int(background.shape[1]),
            height=int(background.shape[0]),
        )

    if config.output.clear_existing:
        removed = clear_output_folder(output_path)
        log_event(_LOGGER, "output_cleared", path=str(output_path), removed=removed)

    if background is not None and scan.frames:
        owns_pool = executor is None
        pool = executor if executor is not None else create_frame_pool(config.max_workers)
        try:
            _run_frames(config, scan.frames, background, pool, report, progress, seam)
        finally:
            if owns_pool:
                pool.shutdown(wait=True, cancel_futures=True)

    report.finished_at = _now()
    if config.output.report_path is not None:
        atomic_write_json(Path(config.output.report_path), report.to_record())

    log_event(
        _LOGGER,
        "pipeline_finished",
        level=logging.WARNING if report.failures else logging.INFO,
        frame_count=report.frame_count,
        chunk_count=report.chunk_count,
        delta_count=report.delta_count,
        failure_count=report.failure_count,
        avg_ms_per_frame=round(report.avg_ms_per_frame, 3),
    )
    return report


def _run_frames(
    config: PipelineConfig,
    frames: list[FrameRef],
    background: np.ndarray,
    pool: Executor,
    report: RunReport,
    progress: ProgressSink | None,
    seam: ForegroundMask | None,
) -> None:
    sequencer = ChunkSequencer(
        executor=pool,
        mask_fn=partial(create_foreground_mask, background=background, config=config.mask),
        delta_fn=partial(create_and_save_delta, Path(config.output.root)),
        chunk_size=config.chunk_size,
        seam=seam,
    )

    total = len(frames)
    for done, frame in enumerate(frames, start=1):
        started = time.perf_counter()
        outcome = sequencer.push(frame)
        if done == total:
            final = sequencer.finish()
            outcome = final if final is not None else outcome
        report.elapsed_sec += time.perf_counter() - started

        if outcome is not None:
            report.add_chunk(outcome)
            log_event(
                _LOGGER,
                "chunk_progress",
                chunk_idx=outcome.chunk_idx,
                frames_done=done,
                total=total,
                percent=round(percent_done(done, total), 1),
            )
        if progress is not None:
            progress(done, total, 1000.0 * report.elapsed_sec / done)
