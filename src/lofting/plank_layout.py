"""
Plank layout: where each plank lies on the hull.

For every plank and station the layout gives the plank's bottom and top edge
as fractions (0 = bottom, 1 = top) of the station's height range. Adjacent
planks share their common edge exactly; lapstrake overlap is added later by
the flattener as a manufacturing allowance.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Sequence, Tuple

from .errors import InvertedPlankEdges, LayoutError, LayoutIncomplete
from .station_curve import EPSILON

EdgeFractions = Tuple[float, float]


class PlankLayout:
    """
    Immutable plank layout.

    Args:
        fractions: {plank_index: {position: (bottom_fraction, top_fraction)}}
        epsilon: tolerance for matching positions and shared edges
    """

    def __init__(self, fractions: Mapping[int, Mapping[float, EdgeFractions]], *, epsilon: float = EPSILON):
        self.epsilon = float(epsilon)
        table: Dict[int, Tuple[Tuple[float, EdgeFractions], ...]] = {}
        for plank_index in sorted(fractions):
            rows = []
            for position in sorted(fractions[plank_index]):
                bottom, top = fractions[plank_index][position]
                rows.append((float(position), (float(bottom), float(top))))
            table[int(plank_index)] = tuple(rows)
        self._table = table
        self._validate()

    @classmethod
    def from_plank_rows(
        cls,
        positions: Sequence[float],
        rows: Sequence[Sequence[Optional[float]]],
        *,
        epsilon: float = EPSILON,
    ) -> "PlankLayout":
        """
        Build a layout from edge rows given two per plank.

        `rows[2 * i]` is plank i's bottom edge and `rows[2 * i + 1]` its top
        edge; `rows[k][j]` is the fraction at `positions[j]`, or None where the
        edge is absent. Plank i's top must match plank i + 1's bottom.
        """
        n_pos = len(positions)
        if len(rows) % 2:
            raise LayoutError(
                f"Plank rows come in (bottom, top) pairs, got {len(rows)} rows"
            )
        for k, row in enumerate(rows):
            if len(row) != n_pos:
                raise LayoutError(
                    f"Plank row {k} has {len(row)} values for {n_pos} positions"
                )

        fractions: Dict[int, Dict[float, EdgeFractions]] = {}
        for i in range(len(rows) // 2):
            bottoms = rows[2 * i]
            tops = rows[2 * i + 1]
            plank: Dict[float, EdgeFractions] = {}
            for j, position in enumerate(positions):
                if bottoms[j] is None or tops[j] is None:
                    continue
                plank[float(position)] = (float(bottoms[j]), float(tops[j]))
            fractions[i] = plank
        return cls(fractions, epsilon=epsilon)

    def _validate(self) -> None:
        for plank_index, rows in self._table.items():
            for position, (bottom, top) in rows:
                for value in (bottom, top):
                    if not (0.0 <= value <= 1.0):
                        raise LayoutError(
                            f"Plank {plank_index} edge fraction {value:g} at {position:g} "
                            "is outside [0, 1]"
                        )
                if not bottom < top:
                    raise InvertedPlankEdges(plank_index, position, bottom, top)

        for plank_index in self._table:
            upper = plank_index + 1
            if upper not in self._table:
                continue
            for position, (_, top) in self._table[plank_index]:
                shared = self._find(upper, position)
                if shared is None:
                    continue
                if abs(shared[0] - top) > self.epsilon:
                    raise LayoutError(
                        f"Planks {plank_index} and {upper} do not share an edge at {position:g} "
                        f"(top {top:g} vs bottom {shared[0]:g})"
                    )

    def _find(self, plank_index: int, position: float) -> Optional[EdgeFractions]:
        for pos, edges in self._table.get(plank_index, ()):
            if abs(pos - position) <= self.epsilon:
                return edges
        return None

    @property
    def plank_indices(self) -> Tuple[int, ...]:
        return tuple(self._table)

    @property
    def n_planks(self) -> int:
        return len(self._table)

    def positions_for(self, plank_index: int) -> Tuple[float, ...]:
        return tuple(pos for pos, _ in self._table.get(int(plank_index), ()))

    def fractions_at(self, plank_index: int, position: float) -> EdgeFractions:
        """
        Raises:
            LayoutIncomplete: the plank has no fractions at this position
        """
        edges = self._find(int(plank_index), float(position))
        if edges is None:
            raise LayoutIncomplete(plank_index, position)
        return edges

    def __repr__(self) -> str:
        return f"PlankLayout(n_planks={self.n_planks})"
