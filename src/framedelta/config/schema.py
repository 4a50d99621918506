"""Dataclass-based configuration schema for framedelta."""

from dataclasses import dataclass, field


DEFAULT_EXTENSIONS = (".jpg", ".jpeg", ".png")


@dataclass(slots=True)
class IngestConfig:
    """Input frame folder options."""

    root: str
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    background: str | None = None


@dataclass(slots=True)
class OutputConfig:
    """Delta image output options."""

    root: str
    clear_existing: bool = True
    report_path: str | None = None


@dataclass(slots=True)
class MaskConfig:
    """Foreground mask options."""

    threshold: float = 48.0
    blur_iterations: int = 3


@dataclass(slots=True)
class PipelineConfig:
    """Top-level pipeline configuration."""

    ingest: IngestConfig
    output: OutputConfig
    mask: MaskConfig = field(default_factory=MaskConfig)
    chunk_size: int = 128
    max_workers: int | None = None
