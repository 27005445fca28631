"""
Hull Surface Model

Continuous hull surface built from per-station curves. Between two stations
the half-breadth is blended linearly along the hull; at a station the
station's own curve is used unchanged, so measured offsets are reproduced.
"""

from __future__ import annotations

from bisect import bisect_right
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from .errors import HeightOutOfRange, PositionOutOfRange
from .offsets import OffsetTable
from .parallel import parallel_map
from .station_curve import EPSILON, StationCurve, build_station_curve


class HullSurface:
    """
    Queryable hull surface: half-breadth at any (position, height).

    Coordinates of `point_at` are (x, y, z) = (position, breadth, height).
    """

    def __init__(self, curves: Sequence[StationCurve], *, unit: str = "ft", epsilon: float = EPSILON):
        curves = tuple(curves)
        if not curves:
            raise ValueError("HullSurface needs at least one station curve")
        for prev, cur in zip(curves, curves[1:]):
            if not cur.position > prev.position:
                raise ValueError(
                    f"Station curves must be ordered by strictly increasing position "
                    f"({prev.position:g} then {cur.position:g})"
                )

        self.unit = unit
        self.epsilon = float(epsilon)
        self._positions: Tuple[float, ...] = tuple(c.position for c in curves)
        # Curve cache, keyed by station position. Lives as long as this surface.
        self._curves: Dict[float, StationCurve] = {c.position: c for c in curves}

    @classmethod
    def build(
        cls,
        table: OffsetTable,
        *,
        method: str = "natural",
        max_workers: Optional[int] = 1,
        epsilon: float = EPSILON,
    ) -> "HullSurface":
        """
        Fit every station of `table` and assemble the surface.

        Station fitting is independent per station and may run on a worker
        pool. Any station failure aborts the build.
        """
        curves = parallel_map(
            lambda station: build_station_curve(station, method=method, epsilon=epsilon),
            table.stations,
            max_workers=max_workers,
        )
        return cls(curves, unit=table.unit, epsilon=epsilon)

    @property
    def station_positions(self) -> Tuple[float, ...]:
        return self._positions

    @property
    def length_range(self) -> Tuple[float, float]:
        return (self._positions[0], self._positions[-1])

    @property
    def curves(self) -> Tuple[StationCurve, ...]:
        return tuple(self._curves[p] for p in self._positions)

    def curve_at(self, position: float) -> StationCurve:
        idx = self._station_index(float(position))
        if idx is None:
            raise KeyError(f"No station at position {float(position):g}")
        return self._curves[self._positions[idx]]

    def _station_index(self, position: float) -> Optional[int]:
        i = bisect_right(self._positions, position)
        for j in (i - 1, i):
            if 0 <= j < len(self._positions) and abs(self._positions[j] - position) <= self.epsilon:
                return j
        return None

    def _locate(self, position: float):
        """
        Returns (curve, None, 0.0) on a station, or (curve0, curve1, t) between two.
        """
        x = float(position)
        lo, hi = self.length_range
        if not np.isfinite(x) or x < lo - self.epsilon or x > hi + self.epsilon:
            raise PositionOutOfRange(x, (lo, hi))

        idx = self._station_index(x)
        if idx is not None:
            return self._curves[self._positions[idx]], None, 0.0

        i = bisect_right(self._positions, x) - 1
        x0, x1 = self._positions[i], self._positions[i + 1]
        t = (x - x0) / (x1 - x0)
        return self._curves[x0], self._curves[x1], t

    def breadth_at(self, position: float, height: float) -> float:
        """
        Half-breadth at (position, height).

        Raises:
            PositionOutOfRange: position is outside the first/last station
            HeightOutOfRange: height is outside a contributing station's range
        """
        c0, c1, t = self._locate(position)
        h = float(height)
        if c1 is None:
            return c0.evaluate(h)
        if not (c0.contains(h) and c1.contains(h)):
            raise HeightOutOfRange(float(position), h, self._overlap(c0, c1))
        b0 = c0.evaluate(h)
        b1 = c1.evaluate(h)
        return (1.0 - t) * b0 + t * b1

    def breadths_at(self, position: float, heights) -> np.ndarray:
        c0, c1, t = self._locate(position)
        hs = np.asarray(heights, dtype=np.float64).reshape(-1)
        if c1 is None:
            return c0.sample(hs)
        valid = self._overlap(c0, c1)
        if valid is None:
            raise HeightOutOfRange(float(position), float(hs[0]) if hs.size else float("nan"), None)
        outside = (hs < valid[0] - self.epsilon) | (hs > valid[1] + self.epsilon)
        if np.any(outside):
            raise HeightOutOfRange(float(position), float(hs[np.argmax(outside)]), valid)
        return (1.0 - t) * c0.sample(hs) + t * c1.sample(hs)

    def height_range_at(self, position: float) -> Tuple[float, float]:
        """
        Heights valid at `position`: the station's own range on a station,
        otherwise the intersection of the two bracketing stations' ranges.
        """
        c0, c1, _ = self._locate(position)
        if c1 is None:
            return c0.height_range
        overlap = self._overlap(c0, c1)
        if overlap is None:
            raise HeightOutOfRange(float(position), float("nan"), None)
        return overlap

    def point_at(self, position: float, height: float) -> np.ndarray:
        return np.array([float(position), self.breadth_at(position, height), float(height)], dtype=np.float64)

    @staticmethod
    def _overlap(c0: StationCurve, c1: StationCurve) -> Optional[Tuple[float, float]]:
        lo = max(c0.min_height, c1.min_height)
        hi = min(c0.max_height, c1.max_height)
        if lo > hi:
            return None
        return (lo, hi)
