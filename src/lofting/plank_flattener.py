"""
Plank Flattener - develops a curved plank band into a flat cutting pattern.

Two developments are available:

- 'chord': each edge is unrolled along a straight baseline, every vertex
  placed at the accumulated 3D chord length of its own edge. The top edge
  sits at the plank's 3D width at the first station. Edge lengths are exact;
  width further along is not.
- 'triangulated': the band is split into triangles between the two edges and
  the triangles are laid flat one after another with their true 3D side
  lengths (the loftsman's method). Edge chords, station widths and diagonals
  are all exact; the plank's curvature in plan (its "spiling") appears in the
  flat shape.

For lapstrake construction the overlapped edge gets a parallel offset equal to
the land (overlap) width.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np

from .errors import DegenerateBand, NonPositiveOverlap
from .plank_band import PlankBand

FLATTEN_METHODS = ("chord", "triangulated")

_EPS = 1e-12


class ConstructionMode(Enum):
    """Plank edge construction."""
    CARVEL = "carvel"
    LAPSTRAKE = "lapstrake"


class LapEdge(Enum):
    """Long edge that receives the lapstrake allowance."""
    TOP = "top"
    BOTTOM = "bottom"


@dataclass(frozen=True)
class FlattenOptions:
    mode: ConstructionMode = ConstructionMode.CARVEL
    overlap_width: float = 0.0
    lap_edge: LapEdge = LapEdge.TOP
    method: str = "chord"


@dataclass(frozen=True, eq=False)
class FlatPlankShape:
    """
    Flat cutting pattern of one plank.

    Attributes:
        plank_index: index of the plank in the layout
        bottom_edge: (N, 2) bottom edge, left to right
        top_edge: (N, 2) top edge, left to right (includes any lap allowance)
        mode: construction mode used
        overlap_width: allowance applied (0 for carvel)
        lap_edge: edge that carries the allowance (None for carvel)
        lap_line: (N, 2) the overlapped edge before the allowance, for marking
    """
    plank_index: int
    bottom_edge: np.ndarray
    top_edge: np.ndarray
    mode: ConstructionMode = ConstructionMode.CARVEL
    overlap_width: float = 0.0
    lap_edge: Optional[LapEdge] = None
    lap_line: Optional[np.ndarray] = None

    def __post_init__(self):
        for name in ("bottom_edge", "top_edge", "lap_line"):
            value = getattr(self, name)
            if value is None:
                continue
            arr = np.asarray(value, dtype=np.float64).reshape(-1, 2)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    @property
    def n_stations(self) -> int:
        return int(self.bottom_edge.shape[0])

    @property
    def boundary(self) -> np.ndarray:
        """Closed outline: bottom edge left to right, then top edge right to left."""
        return np.vstack([self.bottom_edge, self.top_edge[::-1]])

    @property
    def bounds(self) -> np.ndarray:
        """2D bounds [[min_x, min_y], [max_x, max_y]]"""
        pts = self.boundary
        return np.array([pts.min(axis=0), pts.max(axis=0)])

    @property
    def extents(self) -> np.ndarray:
        return self.bounds[1] - self.bounds[0]

    @property
    def bottom_length(self) -> float:
        return float(np.sum(np.linalg.norm(np.diff(self.bottom_edge, axis=0), axis=1)))

    @property
    def top_length(self) -> float:
        return float(np.sum(np.linalg.norm(np.diff(self.top_edge, axis=0), axis=1)))

    def _transformed(self, fn) -> "FlatPlankShape":
        return FlatPlankShape(
            plank_index=self.plank_index,
            bottom_edge=fn(self.bottom_edge),
            top_edge=fn(self.top_edge),
            mode=self.mode,
            overlap_width=self.overlap_width,
            lap_edge=self.lap_edge,
            lap_line=None if self.lap_line is None else fn(self.lap_line),
        )

    def translated(self, dx: float, dy: float) -> "FlatPlankShape":
        offset = np.array([float(dx), float(dy)], dtype=np.float64)
        return self._transformed(lambda pts: pts + offset)

    def oriented(self) -> "FlatPlankShape":
        """Rotate about the first bottom vertex so the bottom edge chord is horizontal."""
        origin = self.bottom_edge[0].copy()
        chord = self.bottom_edge[-1] - origin
        length = float(np.linalg.norm(chord))
        if length < _EPS:
            return self
        c, s = chord / length
        # Rotation by -angle(chord).
        rot = np.array([[c, s], [-s, c]], dtype=np.float64)
        return self._transformed(lambda pts: (pts - origin) @ rot.T + origin)


class PlankFlattener:
    """
    Develops PlankBands into FlatPlankShapes.

    Args:
        options: construction mode, overlap allowance and development method
    """

    def __init__(self, options: Optional[FlattenOptions] = None):
        self.options = options or FlattenOptions()
        if self.options.method not in FLATTEN_METHODS:
            raise ValueError(
                f"Unknown flatten method: {self.options.method!r} (expected one of {FLATTEN_METHODS})"
            )

    def flatten(self, band: PlankBand) -> FlatPlankShape:
        """
        Raises:
            DegenerateBand: fewer than 2 stations
            NonPositiveOverlap: lapstrake mode with overlap width <= 0
        """
        opts = self.options
        if band.n_stations < 2:
            raise DegenerateBand(band.plank_index, band.n_stations)
        if opts.mode is ConstructionMode.LAPSTRAKE and not opts.overlap_width > 0:
            raise NonPositiveOverlap(opts.overlap_width)

        bottom3 = band.bottom_edge
        top3 = band.top_edge
        if opts.method == "triangulated":
            bottom, top = develop_triangulated(bottom3, top3)
        else:
            bottom, top = develop_chord(bottom3, top3)

        if opts.mode is ConstructionMode.CARVEL:
            return FlatPlankShape(
                plank_index=band.plank_index,
                bottom_edge=bottom,
                top_edge=top,
                mode=ConstructionMode.CARVEL,
                overlap_width=0.0,
            )

        width = float(opts.overlap_width)
        if opts.lap_edge is LapEdge.TOP:
            lap_line = top
            top = offset_polyline(top, width, side="left")
        else:
            lap_line = bottom
            bottom = offset_polyline(bottom, width, side="right")

        return FlatPlankShape(
            plank_index=band.plank_index,
            bottom_edge=bottom,
            top_edge=top,
            mode=ConstructionMode.LAPSTRAKE,
            overlap_width=width,
            lap_edge=opts.lap_edge,
            lap_line=lap_line,
        )

    def flatten_all(self, bands: Sequence[PlankBand]) -> List[FlatPlankShape]:
        return [self.flatten(band) for band in bands]


def _cumulative_chords(points: np.ndarray) -> np.ndarray:
    seg = np.linalg.norm(np.diff(points, axis=0), axis=1)
    return np.concatenate([[0.0], np.cumsum(seg)])


def develop_chord(bottom3: np.ndarray, top3: np.ndarray):
    """Unroll each edge along its own baseline; returns (bottom2d, top2d)."""
    width0 = float(np.linalg.norm(top3[0] - bottom3[0]))
    sb = _cumulative_chords(bottom3)
    st = _cumulative_chords(top3)
    bottom = np.column_stack([sb, np.zeros_like(sb)])
    top = np.column_stack([st, np.full_like(st, width0)])
    return bottom, top


def _place(a: np.ndarray, b: np.ndarray, dist_a: float, dist_b: float) -> np.ndarray:
    """
    Third vertex of a triangle with side `dist_a` from `a` and `dist_b` from `b`,
    on the clockwise side of a->b (forward along the plank).
    """
    ab = b - a
    d = float(np.linalg.norm(ab))
    if d < _EPS:
        return a + np.array([dist_a, 0.0])
    if dist_a < _EPS:
        return a.copy()
    cos_t = (d * d + dist_a * dist_a - dist_b * dist_b) / (2.0 * d * dist_a)
    cos_t = float(np.clip(cos_t, -1.0, 1.0))
    sin_t = float(np.sqrt(max(0.0, 1.0 - cos_t * cos_t)))
    u = ab / d
    direction = np.array([u[0] * cos_t + u[1] * sin_t, -u[0] * sin_t + u[1] * cos_t])
    return a + dist_a * direction


def develop_triangulated(bottom3: np.ndarray, top3: np.ndarray):
    """Lay the band's triangles flat in sequence; returns (bottom2d, top2d)."""
    n = bottom3.shape[0]
    bottom = np.zeros((n, 2), dtype=np.float64)
    top = np.zeros((n, 2), dtype=np.float64)
    top[0] = (0.0, float(np.linalg.norm(top3[0] - bottom3[0])))

    for i in range(1, n):
        bottom_chord = float(np.linalg.norm(bottom3[i] - bottom3[i - 1]))
        diagonal = float(np.linalg.norm(bottom3[i] - top3[i - 1]))
        bottom[i] = _place(bottom[i - 1], top[i - 1], bottom_chord, diagonal)

        rung = float(np.linalg.norm(top3[i] - bottom3[i]))
        top_chord = float(np.linalg.norm(top3[i] - top3[i - 1]))
        top[i] = _place(bottom[i], top[i - 1], rung, top_chord)
    return bottom, top


def offset_polyline(points: np.ndarray, distance: float, *, side: str = "left") -> np.ndarray:
    """
    Parallel (mitred) offset of an open polyline.

    Every segment moves `distance` along its normal; 'left' is the normal to the
    left of the direction of travel.
    """
    pts = np.asarray(points, dtype=np.float64)
    n = pts.shape[0]
    if n < 2:
        return pts.copy()

    seg = np.diff(pts, axis=0)
    lengths = np.linalg.norm(seg, axis=1)
    lengths[lengths < _EPS] = 1.0
    tangents = seg / lengths[:, None]
    normals = np.column_stack([-tangents[:, 1], tangents[:, 0]])
    if side == "right":
        normals = -normals
    elif side != "left":
        raise ValueError(f"side must be 'left' or 'right', got {side!r}")

    out = np.empty_like(pts)
    out[0] = pts[0] + distance * normals[0]
    out[-1] = pts[-1] + distance * normals[-1]
    for i in range(1, n - 1):
        n1 = normals[i - 1]
        n2 = normals[i]
        miter = n1 + n2
        norm = float(np.linalg.norm(miter))
        if norm < _EPS:
            out[i] = pts[i] + distance * n1
            continue
        miter /= norm
        cos_half = float(np.dot(miter, n1))
        out[i] = pts[i] + (distance / max(cos_half, _EPS)) * miter
    return out


def arrange_flat_planks(shapes: Sequence[FlatPlankShape], gap: float = 0.0) -> List[FlatPlankShape]:
    """
    Orient each plank horizontally and stack them upward without overlap,
    left-aligned at x = 0, in the given order.
    """
    arranged: List[FlatPlankShape] = []
    last_top: Optional[float] = None
    for shape in shapes:
        placed = shape.oriented()
        (min_x, min_y), (_, max_y) = placed.bounds
        dy = -min_y if last_top is None else last_top + float(gap) - min_y
        placed = placed.translated(-min_x, dy)
        last_top = float(placed.bounds[1][1])
        arranged.append(placed)
    return arranged
