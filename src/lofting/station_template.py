"""
Station Template Generator

Full-size outline of the hull section at a chosen fore-aft position, for
cutting a mould or checking frames. Points are (height, breadth); the drawing
outline is (breadth, height) and is mirrored about the centreline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .hull_surface import HullSurface
from .parallel import parallel_map
from .runtime_defaults import DEFAULTS


@dataclass(frozen=True, eq=False)
class StationTemplate:
    """
    Attributes:
        position: fore-aft position of the section
        points: (M, 2) (height, breadth) pairs, heights strictly ascending
        name: station label when the section is a measured station
    """
    position: float
    points: np.ndarray
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "position", float(self.position))
        pts = np.asarray(self.points, dtype=np.float64).reshape(-1, 2)
        pts.setflags(write=False)
        object.__setattr__(self, "points", pts)

    @property
    def label(self) -> str:
        return self.name or f"{self.position:g}"

    @property
    def heights(self) -> np.ndarray:
        return self.points[:, 0]

    @property
    def breadths(self) -> np.ndarray:
        return self.points[:, 1]

    @property
    def height_range(self):
        return (float(self.heights[0]), float(self.heights[-1]))

    @property
    def max_breadth(self) -> float:
        return float(np.max(self.breadths))

    def outline(self, mirrored: bool = True) -> np.ndarray:
        """
        Drawing outline as (breadth, height) rows.

        With `mirrored`, the port half (negative breadth) is appended in reverse
        order so the outline runs round the whole section, from the top of one
        side to the top of the other.
        """
        half = np.column_stack([self.breadths, self.heights])
        if not mirrored:
            return half
        port = half[::-1].copy()
        port[:, 0] *= -1.0
        return np.vstack([port, half])


class StationTemplateGenerator:
    def __init__(self, surface: HullSurface, samples: Optional[int] = None):
        self.surface = surface
        self.samples = int(samples) if samples is not None else DEFAULTS.template_samples
        if self.samples < 2:
            raise ValueError("StationTemplateGenerator needs at least 2 samples")

    def generate(self, position: float) -> StationTemplate:
        """
        Sample the surface at `position` across its full height range.

        On a station the measured heights are always included so the template
        passes through every measured offset.

        Raises:
            PositionOutOfRange: position lies outside the hull
            HeightOutOfRange: bracketing stations share no height range
        """
        lo, hi = self.surface.height_range_at(position)
        heights = np.linspace(lo, hi, self.samples)
        try:
            curve = self.surface.curve_at(position)
        except KeyError:
            curve = None
        if curve is not None:
            heights = np.union1d(heights, curve.heights)
            heights = _dedupe_sorted(heights, self.surface.epsilon)
        breadths = self.surface.breadths_at(position, heights)
        return StationTemplate(
            position=position,
            points=np.column_stack([heights, breadths]),
            name=curve.name if curve is not None else "",
        )

    def generate_all(
        self,
        positions: Optional[Sequence[float]] = None,
        max_workers: Optional[int] = 1,
    ) -> List[StationTemplate]:
        """One template per position (every station when `positions` is None)."""
        if positions is None:
            positions = self.surface.station_positions
        return parallel_map(self.generate, list(positions), max_workers=max_workers)


def _dedupe_sorted(values: np.ndarray, eps: float) -> np.ndarray:
    keep = np.concatenate([[True], np.diff(values) > eps])
    return values[keep]
