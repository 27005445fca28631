"""
Error taxonomy for the lofting engine.

Every failure is deterministic for a given input, so none of these are meant
to be retried. Each error keeps the offending station position or plank index
as attributes so callers can build their own messages.
"""

from __future__ import annotations

from typing import Optional, Tuple


class LoftingError(RuntimeError):
    pass


class OffsetFormatError(LoftingError):
    """Malformed offset table or input sheet."""


class LayoutError(LoftingError):
    """Malformed plank layout (fraction range or shared-edge mismatch)."""


class InsufficientData(LoftingError):
    def __init__(self, station_position: float, n_measured: int = 0):
        self.station_position = float(station_position)
        self.n_measured = int(n_measured)
        super().__init__(
            f"Station at {self.station_position:g} has {self.n_measured} measured "
            "offset(s); at least 2 are required"
        )


class DuplicateHeight(LoftingError):
    def __init__(self, station_position: float, height: float):
        self.station_position = float(station_position)
        self.height = float(height)
        super().__init__(
            f"Station at {self.station_position:g} has two offsets at height {self.height:g}"
        )


class HeightOutOfRange(LoftingError):
    def __init__(self, position: float, height: float, valid_range: Optional[Tuple[float, float]]):
        self.position = float(position)
        self.height = float(height)
        self.valid_range = valid_range
        if valid_range is None:
            detail = "no valid height range"
        else:
            detail = f"valid range [{valid_range[0]:g}, {valid_range[1]:g}]"
        super().__init__(
            f"Height {self.height:g} is out of range at position {self.position:g} ({detail})"
        )


class PositionOutOfRange(LoftingError):
    def __init__(self, position: float, valid_range: Tuple[float, float]):
        self.position = float(position)
        self.valid_range = valid_range
        super().__init__(
            f"Position {self.position:g} is outside the hull "
            f"[{valid_range[0]:g}, {valid_range[1]:g}]"
        )


class LayoutIncomplete(LoftingError):
    def __init__(self, plank_index: int, station_position: float):
        self.plank_index = int(plank_index)
        self.station_position = float(station_position)
        super().__init__(
            f"Plank {self.plank_index} has no edge fractions at station {self.station_position:g}"
        )


class InvertedPlankEdges(LoftingError):
    def __init__(self, plank_index: int, station_position: float, bottom: float, top: float):
        self.plank_index = int(plank_index)
        self.station_position = float(station_position)
        self.bottom = float(bottom)
        self.top = float(top)
        super().__init__(
            f"Plank {self.plank_index} bottom edge ({self.bottom:g}) is not below its "
            f"top edge ({self.top:g}) at {self.station_position:g}"
        )


class DegenerateBand(LoftingError):
    def __init__(self, plank_index: int, n_stations: int):
        self.plank_index = int(plank_index)
        self.n_stations = int(n_stations)
        super().__init__(
            f"Plank {self.plank_index} spans {self.n_stations} station(s); "
            "at least 2 are needed to flatten it"
        )


class NonPositiveOverlap(LoftingError):
    def __init__(self, overlap_width: float):
        self.overlap_width = float(overlap_width)
        super().__init__(
            f"Lapstrake overlap width must be positive (got {self.overlap_width:g})"
        )


class AlignmentHoleError(LoftingError):
    """Station templates leave no common region for the alignment holes."""

    def __init__(self, message: str, stations: Tuple[str, ...] = ()):
        self.stations = tuple(stations)
        super().__init__(message)
