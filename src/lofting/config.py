"""
Lofting configuration (one row of config.csv, or built in code).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .plank_flattener import FLATTEN_METHODS, ConstructionMode, FlattenOptions, LapEdge
from .runtime_defaults import DEFAULTS
from .station_curve import CURVE_METHODS


@dataclass(frozen=True)
class LoftConfig:
    """
    Attributes:
        template_samples: heights sampled per station template
        construction: carvel or lapstrake plank edges
        overlap_width: lapstrake land width, in hull units
        lap_edge: edge of each plank that carries the land
        flatten_method: 'chord' or 'triangulated'
        curve_method: 'natural' or 'pchip'
        unit: length unit of the offsets
        svg_unit: SVG output unit (None follows the hull unit)
        max_workers: worker pool size for per-station / per-plank work
        excluded_stations: station names left off the templates sheet (e.g. Stem, Post)
    """
    template_samples: int = field(default_factory=lambda: DEFAULTS.template_samples)
    construction: ConstructionMode = ConstructionMode.CARVEL
    overlap_width: float = 0.0
    lap_edge: LapEdge = LapEdge.TOP
    flatten_method: str = "chord"
    curve_method: str = "natural"
    unit: str = "ft"
    svg_unit: Optional[str] = None
    max_workers: int = field(default_factory=lambda: DEFAULTS.max_workers)
    excluded_stations: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "excluded_stations", tuple(str(n).strip() for n in self.excluded_stations))
        if int(self.template_samples) < 2:
            raise ValueError("template_samples must be at least 2")
        if self.flatten_method not in FLATTEN_METHODS:
            raise ValueError(f"Unknown flatten method: {self.flatten_method!r}")
        if self.curve_method not in CURVE_METHODS:
            raise ValueError(f"Unknown curve method: {self.curve_method!r}")

    def flatten_options(self) -> FlattenOptions:
        return FlattenOptions(
            mode=self.construction,
            overlap_width=float(self.overlap_width),
            lap_edge=self.lap_edge,
            method=self.flatten_method,
        )
