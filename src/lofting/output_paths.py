"""
Output path helpers for project exports.

Centralizes naming conventions so the CLI and library callers stay in sync.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]

PLANKS_SVG = "planks.svg"
STATIONS_SVG = "stations.svg"
HALF_BREADTH_SVG = "half_breadth.svg"
HULL_MESH = "hull.stl"


def _as_path(value: PathLike) -> Path:
    return value if isinstance(value, Path) else Path(value)


def _resolve_output_path(project_dir: PathLike, output_path: Optional[PathLike], filename: str) -> Path:
    if output_path:
        return _as_path(output_path)
    return _as_path(project_dir) / filename


def planks_svg_path(project_dir: PathLike, output_path: Optional[PathLike] = None) -> Path:
    return _resolve_output_path(project_dir, output_path, PLANKS_SVG)


def stations_svg_path(project_dir: PathLike, output_path: Optional[PathLike] = None) -> Path:
    return _resolve_output_path(project_dir, output_path, STATIONS_SVG)


def half_breadth_svg_path(project_dir: PathLike, output_path: Optional[PathLike] = None) -> Path:
    return _resolve_output_path(project_dir, output_path, HALF_BREADTH_SVG)


def station_svg_path(project_dir: PathLike, position: float, output_path: Optional[PathLike] = None) -> Path:
    return _resolve_output_path(project_dir, output_path, f"station_{position:g}.svg")


def hull_mesh_path(project_dir: PathLike, output_path: Optional[PathLike] = None) -> Path:
    return _resolve_output_path(project_dir, output_path, HULL_MESH)
