"""
Runtime defaults for lofting and export.

Values can be overridden via environment variables so the CLI and library
callers share the same tuning.
"""

from __future__ import annotations

from dataclasses import dataclass
import os


ENV_TEMPLATE_SAMPLES = "LAPSTRAKE_TEMPLATE_SAMPLES"
ENV_MESH_SECTIONS = "LAPSTRAKE_MESH_SECTIONS"
ENV_MESH_LEVELS = "LAPSTRAKE_MESH_LEVELS"
ENV_MAX_WORKERS = "LAPSTRAKE_MAX_WORKERS"


@dataclass(frozen=True)
class RuntimeDefaults:
    template_samples: int
    mesh_sections: int
    mesh_levels: int
    max_workers: int


def _read_int_env(
    env_name: str,
    default: int,
    *,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    raw = os.environ.get(env_name)
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default

    if min_value is not None and value < min_value:
        return default
    if max_value is not None and value > max_value:
        return default
    return value


def load_runtime_defaults() -> RuntimeDefaults:
    return RuntimeDefaults(
        template_samples=_read_int_env(ENV_TEMPLATE_SAMPLES, 64, min_value=2, max_value=10000),
        mesh_sections=_read_int_env(ENV_MESH_SECTIONS, 60, min_value=2, max_value=2000),
        mesh_levels=_read_int_env(ENV_MESH_LEVELS, 24, min_value=2, max_value=2000),
        max_workers=_read_int_env(ENV_MAX_WORKERS, 4, min_value=1, max_value=64),
    )


DEFAULTS = load_runtime_defaults()
