"""
Station Curve Builder

Fits a smooth half-breadth profile through one station's measured offsets.
The curve is a single-valued function of height and passes exactly through
every measured point.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
from scipy.interpolate import CubicSpline, PchipInterpolator

from .errors import DuplicateHeight, HeightOutOfRange, InsufficientData
from .offsets import Station

EPSILON = 1e-9

CURVE_METHODS = ("natural", "pchip")


@dataclass(frozen=True, eq=False)
class StationCurve:
    """
    Half-breadth as a function of height for one station.

    Attributes:
        position: fore-aft position of the station
        heights: (N,) measured heights, strictly ascending
        breadths: (N,) measured half-breadths matching `heights`
        method: interpolation family ('natural' | 'pchip')
        name: station label from the offset table
    """
    position: float
    heights: np.ndarray
    breadths: np.ndarray
    method: str = "natural"
    epsilon: float = EPSILON
    name: str = ""
    _interp: object = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        heights = np.asarray(self.heights, dtype=np.float64).reshape(-1)
        breadths = np.asarray(self.breadths, dtype=np.float64).reshape(-1)
        heights.setflags(write=False)
        breadths.setflags(write=False)
        object.__setattr__(self, "heights", heights)
        object.__setattr__(self, "breadths", breadths)
        object.__setattr__(self, "_interp", _make_interpolator(heights, breadths, self.method))

    @property
    def min_height(self) -> float:
        return float(self.heights[0])

    @property
    def max_height(self) -> float:
        return float(self.heights[-1])

    @property
    def height_range(self) -> Tuple[float, float]:
        return (self.min_height, self.max_height)

    def contains(self, height: float) -> bool:
        h = float(height)
        return (self.min_height - self.epsilon) <= h <= (self.max_height + self.epsilon)

    def evaluate(self, height: float) -> float:
        """
        Half-breadth at `height`.

        Raises:
            HeightOutOfRange: height lies outside this station's measured range
        """
        h = float(height)
        if not self.contains(h):
            raise HeightOutOfRange(self.position, h, self.height_range)
        h = min(max(h, self.min_height), self.max_height)
        return float(self._interp(h))

    def sample(self, heights) -> np.ndarray:
        """Vectorised `evaluate`; fails on the first out-of-range height."""
        hs = np.asarray(heights, dtype=np.float64).reshape(-1)
        lo = self.min_height - self.epsilon
        hi = self.max_height + self.epsilon
        bad = (hs < lo) | (hs > hi) | ~np.isfinite(hs)
        if np.any(bad):
            raise HeightOutOfRange(self.position, float(hs[np.argmax(bad)]), self.height_range)
        hs = np.clip(hs, self.min_height, self.max_height)
        return np.asarray(self._interp(hs), dtype=np.float64)


def _make_interpolator(heights: np.ndarray, breadths: np.ndarray, method: str):
    if method == "natural":
        return CubicSpline(heights, breadths, bc_type="natural", extrapolate=False)
    if method == "pchip":
        return PchipInterpolator(heights, breadths, extrapolate=False)
    raise ValueError(f"Unknown curve method: {method!r} (expected one of {CURVE_METHODS})")


def build_station_curve(
    station: Station,
    *,
    method: str = "natural",
    epsilon: float = EPSILON,
) -> StationCurve:
    """
    Fit a StationCurve through a station's measured offsets.

    Args:
        station: station with its offsets in any height order
        method: 'natural' (natural cubic spline) or 'pchip' (shape-preserving cubic)
        epsilon: heights closer than this are treated as equal

    Raises:
        InsufficientData: fewer than 2 measured offsets
        DuplicateHeight: two offsets share a height
    """
    if method not in CURVE_METHODS:
        raise ValueError(f"Unknown curve method: {method!r} (expected one of {CURVE_METHODS})")

    measured = station.measured_points
    if len(measured) < 2:
        raise InsufficientData(station.position, len(measured))

    # Stable sort keeps input order for equal heights so the reported duplicate is deterministic.
    ordered = sorted(measured, key=lambda p: p.height)
    heights = np.array([p.height for p in ordered], dtype=np.float64)
    breadths = np.array([p.breadth for p in ordered], dtype=np.float64)

    if not (np.all(np.isfinite(heights)) and np.all(np.isfinite(breadths))):
        raise ValueError(f"Station at {station.position:g} has non-finite offsets")

    gaps = np.diff(heights)
    dup = np.flatnonzero(gaps <= float(epsilon))
    if dup.size:
        raise DuplicateHeight(station.position, float(heights[int(dup[0]) + 1]))

    return StationCurve(
        position=station.position,
        heights=heights,
        breadths=breadths,
        method=method,
        epsilon=float(epsilon),
        name=station.name,
    )
