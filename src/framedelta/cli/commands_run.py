"""`framedelta run` command."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import sys

from framedelta.config.loader import load_pipeline_config
from framedelta.config.profiles import apply_profile
from framedelta.config.schema import DEFAULT_EXTENSIONS, PipelineConfig
from framedelta.errors import FrameDeltaError
from framedelta.observability.logging import configure_logging
from framedelta.observability.progress import TqdmProgress
from framedelta.pipeline.driver import run_pipeline


@dataclass(slots=True)
class RunCommand:
    """Write motion-boundary delta images for a folder of video frames.

    Options left unset fall back to the config reference, then the profile,
    then the built-in defaults (threshold 48, chunk size 128, 3 blur passes).
    """

    input: Path
    """Folder containing the video frame images."""
    output: Path
    """Existing folder that receives the delta images."""
    bg_threshold: float | None = None
    """RGB distance above which a pixel counts as foreground; lower is noisier."""
    chunk_size: int | None = None
    """Number of frames processed in parallel per chunk."""
    blur_iterations: int | None = None
    """Number of times the mask blur is applied."""
    background: Path | None = None
    """Background image; defaults to the last frame of the sequence."""
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    workers: int | None = None
    keep_existing: bool = False
    """Do not clear files already in the output folder."""
    profile: str | None = None
    config: str | None = None
    """Python config reference in the form module_or_path:attribute."""
    report: Path | None = None
    """Write a JSON run report to this path."""
    log_level: str = "INFO"
    progress: bool = True


def build_config(command: RunCommand) -> PipelineConfig:
    cfg = load_pipeline_config(
        config_ref=command.config,
        input_path=command.input,
        output_path=command.output,
    )
    if command.profile is not None:
        apply_profile(cfg, command.profile)
    if command.bg_threshold is not None:
        cfg.mask.threshold = command.bg_threshold
    if command.chunk_size is not None:
        cfg.chunk_size = command.chunk_size
    if command.blur_iterations is not None:
        cfg.mask.blur_iterations = command.blur_iterations
    if command.background is not None:
        cfg.ingest.background = str(command.background)
    if command.workers is not None:
        cfg.max_workers = command.workers
    if command.report is not None:
        cfg.output.report_path = str(command.report)
    cfg.ingest.extensions = tuple(command.extensions)
    cfg.output.clear_existing = not command.keep_existing
    return cfg


def execute(command: RunCommand) -> None:
    configure_logging(command.log_level)
    try:
        cfg = build_config(command)
        with TqdmProgress(disable=not command.progress) as progress:
            report = run_pipeline(cfg, progress=progress)
    except (FrameDeltaError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    for failure in report.failures:
        print(
            f"frame {failure.frame_idx} ({failure.path.name}) skipped: {failure.message}",
            file=sys.stderr,
        )
    print(
        f"done frames={report.frame_count} chunks={report.chunk_count} "
        f"deltas={report.delta_count} failed={report.failure_count} "
        f"avg_ms={report.avg_ms_per_frame:.1f}"
    )
