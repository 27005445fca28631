"""
Lofter - runs the whole pipeline for one hull.

offsets -> station curves -> hull surface -> plank bands -> flat planks,
plus station templates and a preview mesh. Each stage is computed once and
cached on the instance; the inputs are immutable so the cache never goes stale.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import trimesh

from .config import LoftConfig
from .errors import LayoutError
from .hull_mesh import build_hull_mesh
from .hull_surface import HullSurface
from .offsets import OffsetTable
from .plank_band import PlankBand, PlankBandExtractor
from .plank_flattener import FlatPlankShape, PlankFlattener, arrange_flat_planks
from .plank_layout import PlankLayout
from .station_template import StationTemplate, StationTemplateGenerator

_LOGGER = logging.getLogger(__name__)


class Lofter:
    """
    Args:
        table: measured offsets
        layout: plank layout (None if only station work is needed)
        config: lofting options (defaults when None)
    """

    def __init__(
        self,
        table: OffsetTable,
        layout: Optional[PlankLayout] = None,
        config: Optional[LoftConfig] = None,
    ):
        self.table = table
        self.layout = layout
        self.config = config or LoftConfig(unit=table.unit)
        self._surface: Optional[HullSurface] = None
        self._bands: Optional[List[PlankBand]] = None

    @classmethod
    def from_directory(cls, directory: str | Path) -> "Lofter":
        from .offset_loader import load_project

        project = load_project(directory)
        return cls(project.table, project.layout, project.config)

    @property
    def surface(self) -> HullSurface:
        if self._surface is None:
            _LOGGER.info(
                "Fitting %d station curves (method=%s)", len(self.table), self.config.curve_method
            )
            self._surface = HullSurface.build(
                self.table,
                method=self.config.curve_method,
                max_workers=self.config.max_workers,
            )
        return self._surface

    def _require_layout(self) -> PlankLayout:
        if self.layout is None:
            raise LayoutError("No plank layout loaded")
        return self.layout

    def bands(self) -> List[PlankBand]:
        if self._bands is None:
            layout = self._require_layout()
            extractor = PlankBandExtractor(self.surface)
            self._bands = extractor.extract_all(layout, max_workers=self.config.max_workers)
            _LOGGER.info("Extracted %d plank bands", len(self._bands))
        return list(self._bands)

    def flat_planks(self, *, arrange: bool = True, gap: float = 0.0) -> List[FlatPlankShape]:
        """
        Flat patterns for every plank; with `arrange`, oriented horizontally and
        stacked bottom plank first.
        """
        flattener = PlankFlattener(self.config.flatten_options())
        shapes = flattener.flatten_all(self.bands())
        _LOGGER.info(
            "Flattened %d planks (mode=%s, method=%s)",
            len(shapes), self.config.construction.value, self.config.flatten_method,
        )
        if arrange:
            shapes = arrange_flat_planks(shapes, gap=gap)
        return shapes

    def station_templates(self, positions: Optional[Sequence[float]] = None) -> List[StationTemplate]:
        generator = StationTemplateGenerator(self.surface, samples=self.config.template_samples)
        return generator.generate_all(positions, max_workers=self.config.max_workers)

    def station_template(self, position: float) -> StationTemplate:
        generator = StationTemplateGenerator(self.surface, samples=self.config.template_samples)
        return generator.generate(position)

    def hull_mesh(self, *, mirror: bool = True) -> trimesh.Trimesh:
        return build_hull_mesh(self.surface, mirror=mirror)

    def summary(self) -> Dict[str, object]:
        surface = self.surface
        lo, hi = surface.length_range
        info: Dict[str, object] = {
            "unit": self.table.unit,
            "stations": len(self.table),
            "length": hi - lo,
            "positions": list(surface.station_positions),
            "height_ranges": [c.height_range for c in surface.curves],
            "planks": 0 if self.layout is None else self.layout.n_planks,
        }
        return info
