"""
Hull / plank band -> triangle mesh (trimesh), for previewing the lofted hull
in any mesh viewer.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import trimesh

from .hull_surface import HullSurface
from .plank_band import PlankBand
from .runtime_defaults import DEFAULTS

_LOGGER = logging.getLogger(__name__)


def _grid_faces(n_rows: int, n_cols: int) -> np.ndarray:
    """Two triangles per cell of an (n_rows x n_cols) vertex grid, row-major."""
    r, c = np.meshgrid(np.arange(n_rows - 1), np.arange(n_cols - 1), indexing="ij")
    v00 = (r * n_cols + c).reshape(-1)
    v01 = v00 + 1
    v10 = v00 + n_cols
    v11 = v10 + 1
    return np.vstack([
        np.column_stack([v00, v10, v11]),
        np.column_stack([v00, v11, v01]),
    ]).astype(np.int64)


def _mirrored(vertices: np.ndarray, faces: np.ndarray):
    """Add the port side (negative breadth) with reversed winding."""
    port = vertices.copy()
    port[:, 1] *= -1.0
    port_faces = faces[:, ::-1] + vertices.shape[0]
    return np.vstack([vertices, port]), np.vstack([faces, port_faces])


def build_hull_mesh(
    surface: HullSurface,
    *,
    sections: Optional[int] = None,
    levels: Optional[int] = None,
    mirror: bool = False,
) -> trimesh.Trimesh:
    """
    Sample the surface on a (sections x levels) grid.

    Each section spans the surface's height range at its position, so the grid
    follows the keel and sheer. Vertices are (position, breadth, height).
    """
    n_sec = int(sections or DEFAULTS.mesh_sections)
    n_lev = int(levels or DEFAULTS.mesh_levels)
    if n_sec < 2 or n_lev < 2:
        raise ValueError("build_hull_mesh needs at least 2 sections and 2 levels")

    lo, hi = surface.length_range
    positions = np.union1d(np.linspace(lo, hi, n_sec), np.asarray(surface.station_positions))
    keep = np.concatenate([[True], np.diff(positions) > surface.epsilon])
    positions = positions[keep]

    rows = []
    for x in positions:
        h_lo, h_hi = surface.height_range_at(float(x))
        heights = np.linspace(h_lo, h_hi, n_lev)
        breadths = surface.breadths_at(float(x), heights)
        rows.append(np.column_stack([np.full(n_lev, float(x)), breadths, heights]))

    vertices = np.vstack(rows)
    faces = _grid_faces(len(rows), n_lev)
    if mirror:
        vertices, faces = _mirrored(vertices, faces)

    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


def build_band_mesh(band: PlankBand, *, mirror: bool = False) -> trimesh.Trimesh:
    """Triangle strip between a band's bottom and top edges."""
    vertices = np.empty((band.n_stations * 2, 3), dtype=np.float64)
    vertices[0::2] = band.bottom_edge
    vertices[1::2] = band.top_edge
    faces = _grid_faces(band.n_stations, 2)
    if mirror:
        vertices, faces = _mirrored(vertices, faces)
    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


def export_hull_mesh(
    surface: HullSurface,
    output_path: str | Path,
    *,
    bands: Sequence[PlankBand] = (),
    mirror: bool = True,
) -> str:
    """
    Write the hull (plus any plank bands) to a mesh file; the format follows
    the file extension (.stl, .ply, .obj, ...).
    """
    output_path = Path(output_path)
    meshes = [build_hull_mesh(surface, mirror=mirror)]
    meshes.extend(build_band_mesh(band, mirror=mirror) for band in bands)
    mesh = meshes[0] if len(meshes) == 1 else trimesh.util.concatenate(meshes)
    mesh.export(str(output_path))
    _LOGGER.info(
        "Wrote hull mesh (%d vertices, %d faces) to %s",
        len(mesh.vertices), len(mesh.faces), output_path,
    )
    return str(output_path)
