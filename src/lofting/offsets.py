"""
Offset Model

The measured hull as taken off the plans: stations along the hull, each with
a sequence of (height, breadth) offsets. A missing measurement is an explicit
`Unmeasured` entry, never a zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from .errors import OffsetFormatError


@dataclass(frozen=True)
class Measured:
    """A measured offset: half-breadth at a height above base."""
    height: float
    breadth: float

    def __post_init__(self):
        object.__setattr__(self, "height", float(self.height))
        object.__setattr__(self, "breadth", float(self.breadth))


@dataclass(frozen=True)
class Unmeasured:
    """Placeholder for an offset that was not taken off the plans."""


UNMEASURED = Unmeasured()

OffsetPoint = Union[Measured, Unmeasured]


@dataclass(frozen=True)
class Station:
    """
    Transverse section of the hull at a fixed fore-aft position.

    Attributes:
        position: fore-aft coordinate of the station
        points: offsets in input order (height order is not guaranteed)
        name: label from the offset table (e.g. "A", "3")
    """
    position: float
    points: Tuple[OffsetPoint, ...]
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "position", float(self.position))
        points = tuple(self.points)
        for p in points:
            if not isinstance(p, (Measured, Unmeasured)):
                raise TypeError(f"Station offsets must be Measured or Unmeasured, got {type(p).__name__}")
        object.__setattr__(self, "points", points)

    @property
    def label(self) -> str:
        return self.name or f"{self.position:g}"

    @property
    def measured_points(self) -> Tuple[Measured, ...]:
        return tuple(p for p in self.points if isinstance(p, Measured))

    @property
    def n_measured(self) -> int:
        return len(self.measured_points)


@dataclass(frozen=True)
class OffsetTable:
    """
    All stations of one hull, ordered by strictly increasing position.

    Attributes:
        stations: stations from aft-most (or fore-most) to the other end
        unit: length unit of every coordinate ('ft', 'in', 'mm', 'cm', 'm')
        waterlines: heights the offsets were taken along (grid lines on plans)
        buttocks: half-breadths the offsets were taken along
    """
    stations: Tuple[Station, ...]
    unit: str = "ft"
    waterlines: Tuple[float, ...] = ()
    buttocks: Tuple[float, ...] = ()

    def __post_init__(self):
        stations = tuple(self.stations)
        if not stations:
            raise OffsetFormatError("Offset table has no stations")
        for prev, cur in zip(stations, stations[1:]):
            if not cur.position > prev.position:
                raise OffsetFormatError(
                    f"Station positions must be strictly increasing: "
                    f"{prev.label} at {prev.position:g} is followed by "
                    f"{cur.label} at {cur.position:g}"
                )
        object.__setattr__(self, "stations", stations)
        object.__setattr__(self, "waterlines", tuple(sorted(float(h) for h in self.waterlines)))
        object.__setattr__(self, "buttocks", tuple(sorted(float(b) for b in self.buttocks)))

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Tuple[float, Iterable[Optional[Tuple[float, float]]]]],
        *,
        unit: str = "ft",
    ) -> "OffsetTable":
        """
        Build a table from plain `(position, [(height, breadth) | None, ...])` rows.
        """
        stations = []
        for position, offsets in rows:
            points = [UNMEASURED if hb is None else Measured(hb[0], hb[1]) for hb in offsets]
            stations.append(Station(position=position, points=tuple(points)))
        return cls(stations=tuple(stations), unit=unit)

    @property
    def positions(self) -> Tuple[float, ...]:
        return tuple(s.position for s in self.stations)

    def __len__(self) -> int:
        return len(self.stations)

    def __iter__(self):
        return iter(self.stations)

    def station_named(self, name: str) -> Station:
        key = str(name).strip()
        for station in self.stations:
            if station.name == key:
                return station
        raise KeyError(f"Station {key!r} not found")
