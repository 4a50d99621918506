"""Load and validate pipeline configs."""

from __future__ import annotations

import importlib
import importlib.util
from pathlib import Path
from types import ModuleType
from typing import Any

from framedelta.config.schema import (
    DEFAULT_EXTENSIONS,
    IngestConfig,
    MaskConfig,
    OutputConfig,
    PipelineConfig,
)
from framedelta.errors import ConfigurationError


def _load_module(module_ref: str) -> ModuleType:
    path_candidate = Path(module_ref).expanduser()
    if path_candidate.exists():
        module_name = f"_framedelta_cfg_{path_candidate.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path_candidate)
        if spec is None or spec.loader is None:
            raise ConfigurationError(f"Could not load module from path: {path_candidate}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module
    try:
        return importlib.import_module(module_ref)
    except ImportError as exc:
        raise ConfigurationError(f"Could not import config module '{module_ref}': {exc}") from exc


def _resolve_attr(obj: Any, attr_path: str) -> Any:
    value = obj
    for part in attr_path.split("."):
        try:
            value = getattr(value, part)
        except AttributeError as exc:
            raise ConfigurationError(f"Config attribute '{attr_path}' not found") from exc
    return value


def load_object(reference: str) -> Any:
    """Load object by `module_or_path:attribute` reference."""

    if ":" not in reference:
        raise ConfigurationError("Config reference must be in form 'module_or_path:attribute'.")
    module_ref, attr = reference.split(":", maxsplit=1)
    module = _load_module(module_ref)
    return _resolve_attr(module, attr)


def default_pipeline_config(input_path: Path, output_path: Path) -> PipelineConfig:
    """Build a default pipeline config bound to specific input and output folders."""

    return PipelineConfig(
        ingest=IngestConfig(root=str(input_path)),
        output=OutputConfig(root=str(output_path)),
    )


def load_pipeline_config(
    config_ref: str | None,
    input_path: Path,
    output_path: Path,
) -> PipelineConfig:
    """Load a PipelineConfig from reference or create a default."""

    if config_ref is None:
        return default_pipeline_config(input_path=input_path, output_path=output_path)

    loaded = load_object(config_ref)
    if not isinstance(loaded, PipelineConfig):
        type_name = type(loaded).__name__
        raise ConfigurationError(
            f"Config reference must resolve to PipelineConfig, got {type_name}."
        )

    # CLI folders stay the source of truth.
    loaded.ingest.root = str(input_path)
    loaded.output.root = str(output_path)
    return loaded


def pipeline_config_from_dict(payload: dict[str, Any]) -> PipelineConfig:
    """Reconstruct a PipelineConfig from a plain dictionary."""

    ingest = dict(payload.get("ingest", {}))
    output = dict(payload.get("output", {}))
    mask = payload.get("mask", {})
    if "root" not in ingest or "root" not in output:
        raise ConfigurationError("Both ingest.root and output.root must be set.")
    ingest["extensions"] = tuple(ingest.get("extensions", DEFAULT_EXTENSIONS))
    workers = payload.get("max_workers")
    return PipelineConfig(
        ingest=IngestConfig(**ingest),
        output=OutputConfig(**output),
        mask=MaskConfig(**mask),
        chunk_size=int(payload.get("chunk_size", 128)),
        max_workers=None if workers is None else int(workers),
    )


def validate_config(config: PipelineConfig) -> None:
    """Raise ConfigurationError unless the config can drive a run."""

    input_path = Path(config.ingest.root)
    if not input_path.exists():
        raise ConfigurationError(f"Input folder does not exist: {input_path}")
    if not input_path.is_dir():
        raise ConfigurationError(f"Input folder must be a directory: {input_path}")

    output_path = Path(config.output.root)
    if not output_path.is_dir():
        raise ConfigurationError(f"Output folder must exist. Folder={output_path}")
    if output_path.resolve() == input_path.resolve():
        raise ConfigurationError("Output folder must differ from the input folder.")

    if config.ingest.background is not None and not Path(config.ingest.background).is_file():
        raise ConfigurationError(f"Background image does not exist: {config.ingest.background}")
    if not config.ingest.extensions:
        raise ConfigurationError("At least one frame extension must be configured.")
    if config.chunk_size < 1:
        raise ConfigurationError(f"chunk_size must be >= 1, got {config.chunk_size}")
    if config.mask.blur_iterations < 0:
        raise ConfigurationError(
            f"blur_iterations must be >= 0, got {config.mask.blur_iterations}"
        )
    if config.mask.threshold < 0:
        raise ConfigurationError(f"threshold must be >= 0, got {config.mask.threshold}")
    if config.max_workers is not None and config.max_workers < 1:
        raise ConfigurationError(f"max_workers must be >= 1, got {config.max_workers}")
