"""Built-in configuration profiles for common runs."""

from __future__ import annotations

from dataclasses import dataclass

from framedelta.config.schema import PipelineConfig


@dataclass(frozen=True, slots=True)
class ProfileSpec:
    """Declarative config defaults for a named profile."""

    name: str
    description: str
    chunk_size: int
    blur_iterations: int


_PROFILES: dict[str, ProfileSpec] = {
    "balanced": ProfileSpec(
        name="balanced",
        description="Default chunking and smoothing.",
        chunk_size=128,
        blur_iterations=3,
    ),
    "preview": ProfileSpec(
        name="preview",
        description="Unsmoothed masks for a quick look at motion boundaries.",
        chunk_size=64,
        blur_iterations=0,
    ),
    "smooth": ProfileSpec(
        name="smooth",
        description="Heavier smoothing for noisy footage.",
        chunk_size=128,
        blur_iterations=6,
    ),
    "low-memory": ProfileSpec(
        name="low-memory",
        description="Small chunks for large frames or constrained hosts.",
        chunk_size=16,
        blur_iterations=3,
    ),
}


def available_profiles() -> dict[str, ProfileSpec]:
    """Return built-in profiles by name."""

    return dict(_PROFILES)


def resolve_profile(name: str) -> ProfileSpec:
    """Resolve one profile by name."""

    key = name.strip().lower()
    profile = _PROFILES.get(key)
    if profile is None:
        known = ", ".join(sorted(_PROFILES))
        raise ValueError(f"Unknown profile '{name}'. Available profiles: {known}")
    return profile


def apply_profile(config: PipelineConfig, profile_name: str) -> ProfileSpec:
    """Apply a profile directly onto a PipelineConfig instance."""

    profile = resolve_profile(profile_name)
    config.chunk_size = profile.chunk_size
    config.mask.blur_iterations = profile.blur_iterations
    return profile
