"""
Plank Band Extractor

Slices the hull surface into the strip assigned to one plank, sampled at
every station from fore to aft.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .errors import InvertedPlankEdges, PositionOutOfRange
from .hull_surface import HullSurface
from .parallel import parallel_map
from .plank_layout import PlankLayout


@dataclass(frozen=True, eq=False)
class PlankBand:
    """
    One plank's strip of hull surface.

    Attributes:
        plank_index: index in the layout (0 = lowest plank)
        positions: (N,) fore-aft sample positions, ascending
        bottom_heights, top_heights: (N,) edge heights at each position
        bottom_breadths, top_breadths: (N,) half-breadths of the edges
    """
    plank_index: int
    positions: np.ndarray
    bottom_heights: np.ndarray
    top_heights: np.ndarray
    bottom_breadths: np.ndarray
    top_breadths: np.ndarray

    def __post_init__(self):
        for name in ("positions", "bottom_heights", "top_heights", "bottom_breadths", "top_breadths"):
            arr = np.asarray(getattr(self, name), dtype=np.float64).reshape(-1)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)
        n = self.positions.shape[0]
        for name in ("bottom_heights", "top_heights", "bottom_breadths", "top_breadths"):
            if getattr(self, name).shape[0] != n:
                raise ValueError(f"PlankBand.{name} must have {n} values")

    @property
    def n_stations(self) -> int:
        return int(self.positions.shape[0])

    @property
    def bottom_edge(self) -> np.ndarray:
        """(N, 3) bottom edge points as (position, breadth, height)."""
        return np.column_stack([self.positions, self.bottom_breadths, self.bottom_heights])

    @property
    def top_edge(self) -> np.ndarray:
        """(N, 3) top edge points as (position, breadth, height)."""
        return np.column_stack([self.positions, self.top_breadths, self.top_heights])

    @property
    def widths(self) -> np.ndarray:
        """3D distance between the edges at each position."""
        return np.linalg.norm(self.top_edge - self.bottom_edge, axis=1)

    @property
    def triples(self):
        return list(zip(self.positions.tolist(), self.bottom_heights.tolist(), self.top_heights.tolist()))


class PlankBandExtractor:
    """Extracts PlankBands from a HullSurface according to a PlankLayout."""

    def __init__(self, surface: HullSurface):
        self.surface = surface

    def sample_positions(self, layout: PlankLayout, plank_index: int) -> List[float]:
        """
        Every station of the surface, plus any layout position for this plank
        that falls between stations.
        """
        stations = list(self.surface.station_positions)
        lo, hi = self.surface.length_range
        eps = self.surface.epsilon
        extra = []
        for pos in layout.positions_for(plank_index):
            if pos < lo - eps or pos > hi + eps:
                raise PositionOutOfRange(pos, (lo, hi))
            if all(abs(pos - s) > eps for s in stations):
                extra.append(pos)
        return sorted(stations + extra)

    def extract(self, layout: PlankLayout, plank_index: int) -> PlankBand:
        """
        Raises:
            LayoutIncomplete: the layout skips a station this plank spans
            InvertedPlankEdges: resolved bottom height is not below the top
            PositionOutOfRange: a layout position lies outside the hull
        """
        surface = self.surface
        positions = self.sample_positions(layout, plank_index)

        bottoms, tops, b_breadths, t_breadths = [], [], [], []
        for pos in positions:
            bottom_f, top_f = layout.fractions_at(plank_index, pos)
            h_lo, h_hi = surface.height_range_at(pos)
            span = h_hi - h_lo
            bottom = h_lo + bottom_f * span
            top = h_lo + top_f * span
            if not bottom < top:
                raise InvertedPlankEdges(plank_index, pos, bottom, top)
            bottoms.append(bottom)
            tops.append(top)
            b_breadths.append(surface.breadth_at(pos, bottom))
            t_breadths.append(surface.breadth_at(pos, top))

        return PlankBand(
            plank_index=int(plank_index),
            positions=np.asarray(positions, dtype=np.float64),
            bottom_heights=np.asarray(bottoms, dtype=np.float64),
            top_heights=np.asarray(tops, dtype=np.float64),
            bottom_breadths=np.asarray(b_breadths, dtype=np.float64),
            top_breadths=np.asarray(t_breadths, dtype=np.float64),
        )

    def extract_all(self, layout: PlankLayout, max_workers: Optional[int] = 1) -> List[PlankBand]:
        return parallel_map(
            lambda idx: self.extract(layout, idx),
            layout.plank_indices,
            max_workers=max_workers,
        )
