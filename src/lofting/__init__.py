"""
Hull lofting and plank development for lapstrake and carvel boats
"""

from .errors import (
    LoftingError,
    OffsetFormatError,
    LayoutError,
    InsufficientData,
    DuplicateHeight,
    HeightOutOfRange,
    PositionOutOfRange,
    LayoutIncomplete,
    InvertedPlankEdges,
    DegenerateBand,
    NonPositiveOverlap,
    AlignmentHoleError,
)
from .offsets import Measured, Unmeasured, UNMEASURED, Station, OffsetTable
from .station_curve import StationCurve, build_station_curve
from .hull_surface import HullSurface
from .plank_layout import PlankLayout
from .plank_band import PlankBand, PlankBandExtractor
from .plank_flattener import (
    ConstructionMode,
    LapEdge,
    FlattenOptions,
    FlatPlankShape,
    PlankFlattener,
    arrange_flat_planks,
)
from .station_template import StationTemplate, StationTemplateGenerator
from .config import LoftConfig
from .lofter import Lofter
from .svg_exporter import LoftSVGExporter, PlacedTemplate, SVGExportOptions

__all__ = [
    # Errors
    'LoftingError',
    'OffsetFormatError',
    'LayoutError',
    'InsufficientData',
    'DuplicateHeight',
    'HeightOutOfRange',
    'PositionOutOfRange',
    'LayoutIncomplete',
    'InvertedPlankEdges',
    'DegenerateBand',
    'NonPositiveOverlap',
    'AlignmentHoleError',
    # Offsets
    'Measured',
    'Unmeasured',
    'UNMEASURED',
    'Station',
    'OffsetTable',
    # Curves and surface
    'StationCurve',
    'build_station_curve',
    'HullSurface',
    # Planks
    'PlankLayout',
    'PlankBand',
    'PlankBandExtractor',
    'ConstructionMode',
    'LapEdge',
    'FlattenOptions',
    'FlatPlankShape',
    'PlankFlattener',
    'arrange_flat_planks',
    # Station templates
    'StationTemplate',
    'StationTemplateGenerator',
    # Pipeline
    'LoftConfig',
    'Lofter',
    # SVG export
    'LoftSVGExporter',
    'SVGExportOptions',
    'PlacedTemplate',
]
