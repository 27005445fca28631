"""
Plank / station template -> SVG exporter

Writes full-size (1:1) drawings in physical SVG units. Plank patterns are
drawn as closed outlines with the lap line dashed. Station templates are laid
out on a grid, each mirrored about its centreline, with a mounting tab for the
building jig and two alignment holes shared by every template. The
half-breadth diagram shows every station curve over the offset grid.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .errors import AlignmentHoleError
from .hull_surface import HullSurface
from .plank_flattener import FlatPlankShape
from .runtime_defaults import DEFAULTS
from .station_template import StationTemplate
from .unit_utils import resolve_svg_unit as _resolve_unit
from .unit_utils import unit_scale

_LOGGER = logging.getLogger(__name__)

HOLE_DIAMETER_IN = 1.5
# Tab width as a share of the template width; tab height above the tallest template.
TAB_WIDTH_RATIO = 0.75
TAB_RISE = 0.2


@dataclass(frozen=True)
class SVGExportOptions:
    unit: Optional[str] = None  # 'mm' | 'cm' | 'in' (None follows the hull unit)
    margin: float = 0.0  # in hull units
    spacing: Optional[float] = None  # gap between station templates, in hull units (None: 10% of the largest)
    include_labels: bool = True
    include_lap_lines: bool = True
    include_centerline: bool = True
    excluded_stations: Tuple[str, ...] = ()  # station names left out of the templates sheet
    alignment_holes: bool = True
    hole_diameter: Optional[float] = None  # in hull units (None: 1 1/2 in)
    mounting_tabs: bool = True
    templates_per_column: Optional[int] = None  # None: int(sqrt(n))
    stroke_color: str = "#000000"
    stroke_width: float = 0.05  # in SVG units
    lap_color: str = "#1F5FBF"
    grid_color: str = "#A9A9A9"
    font_size: float = 0.5  # in SVG units


@dataclass(frozen=True, eq=False)
class PlacedTemplate:
    """
    A station template positioned on the templates sheet.

    Attributes:
        template: the station template
        outline: (M, 2) drawing coordinates, closed through the tab when present
        holes: (K, 2) alignment hole centres in drawing coordinates
        offset: (2,) translation from template (breadth, height) coordinates
    """
    template: StationTemplate
    outline: np.ndarray
    holes: np.ndarray
    offset: np.ndarray


def _svg_header(width: float, height: float, svg_unit: str, title: str) -> List[str]:
    return [
        '<?xml version="1.0" encoding="UTF-8" standalone="no"?>',
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{width:.4f}{svg_unit}" height="{height:.4f}{svg_unit}" '
        f'viewBox="0 0 {width:.6f} {height:.6f}">',
        f'<title>{title}</title>',
        '<!-- Produced by lapstrake-lofter -->',
    ]


def _points_attr(pts: np.ndarray) -> str:
    return " ".join([f"{p[0]:.4f},{p[1]:.4f}" for p in pts])


class LoftSVGExporter:
    """Writes flat planks, station templates and the half-breadth diagram to SVG."""

    def __init__(self, hull_unit: Optional[str] = "ft", options: SVGExportOptions | None = None):
        self.hull_unit = hull_unit
        self.options = options or SVGExportOptions()

    def _frame(self, all_points: np.ndarray):
        svg_unit, scale = _resolve_unit(self.hull_unit, self.options.unit)
        margin = float(self.options.margin)
        lo = all_points.min(axis=0) - margin
        hi = all_points.max(axis=0) + margin
        size = (hi - lo) * scale
        width = float(max(size[0], 1e-6))
        height = float(max(size[1], 1e-6))

        # SVG is y-down.
        def to_svg_xy(points: np.ndarray) -> np.ndarray:
            pts = (np.asarray(points, dtype=np.float64) - lo) * scale
            pts[:, 1] = height - pts[:, 1]
            return pts

        return svg_unit, width, height, to_svg_xy

    def export_planks(self, shapes: Sequence[FlatPlankShape], output_path: str | Path) -> str:
        """
        Draw flat plank patterns as they are placed (see `arrange_flat_planks`).
        """
        output_path = Path(output_path)
        opts = self.options
        if not shapes:
            raise ValueError("No planks to export")

        all_points = np.vstack([s.boundary for s in shapes])
        svg_unit, width, height, to_svg_xy = self._frame(all_points)

        parts = _svg_header(width, height, svg_unit, "Plank patterns")
        parts.append(
            f'<g id="planks" stroke="{opts.stroke_color}" fill="none" '
            f'stroke-width="{opts.stroke_width}">'
        )
        for shape in shapes:
            outline = to_svg_xy(shape.boundary)
            parts.append(
                f'<polygon id="plank-{shape.plank_index}" points="{_points_attr(outline)}" fill="none" />'
            )
        parts.append('</g>')

        laps = [s for s in shapes if s.lap_line is not None]
        if opts.include_lap_lines and laps:
            dash = opts.stroke_width * 4.0
            parts.append(
                f'<g id="lap-lines" stroke="{opts.lap_color}" fill="none" '
                f'stroke-width="{opts.stroke_width}" stroke-dasharray="{dash:.4f},{dash:.4f}">'
            )
            for shape in laps:
                parts.append(f'<polyline points="{_points_attr(to_svg_xy(shape.lap_line))}" />')
            parts.append('</g>')

        if opts.include_labels:
            parts.append(f'<g id="labels" font-family="sans-serif" font-size="{opts.font_size}">')
            for shape in shapes:
                cx, cy = to_svg_xy(shape.boundary).mean(axis=0)
                parts.append(
                    f'<text x="{cx:.4f}" y="{cy:.4f}" text-anchor="middle">Plank {shape.plank_index}</text>'
                )
            parts.append('</g>')

        parts.append('</svg>')
        output_path.write_text("\n".join(parts), encoding="utf-8")
        _LOGGER.info("Wrote %d plank pattern(s) to %s", len(shapes), output_path)
        return str(output_path)

    def select_templates(self, templates: Sequence[StationTemplate]) -> List[StationTemplate]:
        """Templates left after dropping `excluded_stations` (matched by station name)."""
        excluded = {name.strip() for name in self.options.excluded_stations}
        return [t for t in templates if not (t.name and t.name in excluded)]

    def hole_diameter(self) -> float:
        """Alignment hole diameter in hull units."""
        if self.options.hole_diameter is not None:
            return float(self.options.hole_diameter)
        return HOLE_DIAMETER_IN * unit_scale("in", self.hull_unit)

    def alignment_holes(self, templates: Sequence[StationTemplate]) -> np.ndarray:
        """
        Centres of the two alignment holes, in template coordinates (breadth,
        height), shared by every template.

        The holes sit on the centreline at 1/3 and 2/3 of the height of the
        region common to all template bounds.

        Raises:
            AlignmentHoleError: no common region, or the holes don't fit in it
        """
        labels = tuple(t.label for t in templates)
        outlines = [t.outline(mirrored=True) for t in templates]
        lo = np.max([o.min(axis=0) for o in outlines], axis=0)
        hi = np.min([o.max(axis=0) for o in outlines], axis=0)
        if np.any(hi <= lo):
            raise AlignmentHoleError(
                "Station templates have no overlap in which to place alignment holes", labels
            )

        radius = 0.5 * self.hole_diameter()
        cx = 0.5 * (lo[0] + hi[0])
        centres = np.array([[cx, lo[1] + f * (hi[1] - lo[1])] for f in (1.0 / 3.0, 2.0 / 3.0)])
        if np.any(centres - radius < lo) or np.any(centres + radius > hi):
            raise AlignmentHoleError(
                f"Alignment holes ({2.0 * radius:g} across) do not fit in the overlap "
                f"between station templates",
                labels,
            )
        return centres

    def layout_templates(self, templates: Sequence[StationTemplate]) -> List[PlacedTemplate]:
        """
        Place mirrored template outlines on a grid in drawing coordinates.

        Excluded stations are dropped first. Templates fill columns bottom to
        top, `templates_per_column` at a time (int(sqrt(n)) by default), and
        columns run left to right. With `mounting_tabs`, each outline is closed
        through a tab at a common height above the tallest template.
        """
        opts = self.options
        templates = self.select_templates(templates)
        if not templates:
            return []

        outlines = [t.outline(mirrored=True) for t in templates]
        top = max(float(o[:, 1].max()) for o in outlines)
        span = max(float(np.ptp(o[:, 1])) for o in outlines)
        tab_y = top + TAB_RISE * max(abs(top), span)

        shapes = []
        for outline in outlines:
            if opts.mounting_tabs:
                x_lo, x_hi = float(outline[:, 0].min()), float(outline[:, 0].max())
                half = 0.5 * TAB_WIDTH_RATIO * (x_hi - x_lo)
                cx = 0.5 * (x_lo + x_hi)
                tab = np.array([[cx + half, tab_y], [cx - half, tab_y]])
                outline = np.vstack([outline, tab, outline[:1]])
            shapes.append(outline)

        holes = self.alignment_holes(templates) if opts.alignment_holes else np.empty((0, 2))

        lows = [s.min(axis=0) for s in shapes]
        sizes = [s.max(axis=0) - s.min(axis=0) for s in shapes]
        if opts.spacing is None:
            gap = 0.1 * float(np.max(sizes))
        else:
            gap = float(opts.spacing)

        n = len(templates)
        per_column = int(opts.templates_per_column or max(1, int(math.sqrt(n))))
        placed: List[PlacedTemplate] = []
        x_cursor = 0.0
        for start in range(0, n, per_column):
            column = range(start, min(start + per_column, n))
            col_width = max(float(sizes[i][0]) for i in column)
            y_cursor = 0.0
            for i in column:
                offset = np.array([
                    x_cursor - lows[i][0] + 0.5 * (col_width - sizes[i][0]),
                    y_cursor - lows[i][1],
                ])
                placed.append(PlacedTemplate(
                    template=templates[i],
                    outline=shapes[i] + offset,
                    holes=holes + offset,
                    offset=offset,
                ))
                y_cursor += float(sizes[i][1]) + gap
            x_cursor += col_width + gap
        return placed

    def export_stations(self, templates: Sequence[StationTemplate], output_path: str | Path) -> str:
        """
        Draw station templates for cutting: outlines (with mounting tabs),
        alignment holes, centrelines and labels.

        Raises:
            ValueError: no templates, or every template is excluded
            AlignmentHoleError: see `alignment_holes`
        """
        output_path = Path(output_path)
        opts = self.options
        if not templates:
            raise ValueError("No station templates to export")
        placed = self.layout_templates(templates)
        if not placed:
            raise ValueError("Every station template is excluded")

        _, svg_scale = _resolve_unit(self.hull_unit, opts.unit)
        all_points = np.vstack([p.outline for p in placed])
        svg_unit, width, height, to_svg_xy = self._frame(all_points)

        parts = _svg_header(width, height, svg_unit, "Station templates")
        parts.append(
            f'<g id="stations" stroke="{opts.stroke_color}" fill="none" '
            f'stroke-width="{opts.stroke_width}">'
        )
        for p in placed:
            parts.append(
                f'<polyline id="station-{p.template.label}" '
                f'points="{_points_attr(to_svg_xy(p.outline))}" />'
            )
        parts.append('</g>')

        if opts.alignment_holes:
            r = 0.5 * self.hole_diameter() * svg_scale
            parts.append(
                f'<g id="alignment-holes" stroke="{opts.stroke_color}" fill="none" '
                f'stroke-width="{opts.stroke_width}">'
            )
            for p in placed:
                for x, y in to_svg_xy(p.holes):
                    parts.append(f'<circle cx="{x:.4f}" cy="{y:.4f}" r="{r:.4f}" />')
            parts.append('</g>')

        if opts.include_centerline:
            parts.append(
                f'<g id="centerlines" stroke="{opts.lap_color}" '
                f'stroke-width="{opts.stroke_width}" stroke-dasharray="{opts.stroke_width * 4.0:.4f}">'
            )
            for p in placed:
                h_lo, h_hi = p.template.height_range
                ends = to_svg_xy(np.array([[0.0, h_lo], [0.0, h_hi]]) + p.offset)
                parts.append(
                    f'<line x1="{ends[0][0]:.4f}" y1="{ends[0][1]:.4f}" '
                    f'x2="{ends[1][0]:.4f}" y2="{ends[1][1]:.4f}" />'
                )
            parts.append('</g>')

        if opts.include_labels:
            parts.append(f'<g id="labels" font-family="sans-serif" font-size="{opts.font_size}">')
            for p in placed:
                top = np.array([[0.0, p.template.height_range[1]]]) + p.offset
                x, y = to_svg_xy(top)[0]
                parts.append(
                    f'<text x="{x:.4f}" y="{y + opts.font_size:.4f}" text-anchor="middle">'
                    f'Station {p.template.label}</text>'
                )
            parts.append('</g>')

        parts.append('</svg>')
        output_path.write_text("\n".join(parts), encoding="utf-8")
        _LOGGER.info("Wrote %d station template(s) to %s", len(placed), output_path)
        return str(output_path)

    def export_half_breadths(
        self,
        surface: HullSurface,
        output_path: str | Path,
        *,
        waterlines: Sequence[float] = (),
        buttocks: Sequence[float] = (),
        samples: Optional[int] = None,
    ) -> str:
        """
        Body-plan style diagram of every station curve, for checking the
        fairing against the plans.

        Stations in the first half of the hull are drawn to starboard, the rest
        to port. Each curve is drawn with its measured offsets as dots, over a
        grid of the waterlines and buttocks the offsets were taken along.
        """
        output_path = Path(output_path)
        opts = self.options
        n_samples = int(samples or DEFAULTS.template_samples)
        curves = surface.curves
        half = len(curves) / 2.0

        drawn = []
        for i, curve in enumerate(curves):
            side = -1.0 if i >= half else 1.0
            heights = np.linspace(curve.min_height, curve.max_height, n_samples)
            line = np.column_stack([side * curve.sample(heights), heights])
            dots = np.column_stack([side * curve.breadths, curve.heights])
            drawn.append((curve, line, dots))

        pts = np.vstack([np.vstack([line, dots]) for _, line, dots in drawn])
        x_max = max([float(np.abs(pts[:, 0]).max())] + [abs(float(b)) for b in buttocks])
        y_lo, y_hi = float(pts[:, 1].min()), float(pts[:, 1].max())
        grid = [np.array([[-x_max, float(h)], [x_max, float(h)]]) for h in waterlines]
        for b in buttocks:
            for side in (-1.0, 1.0):
                grid.append(np.array([[side * float(b), y_lo], [side * float(b), y_hi]]))

        svg_unit, width, height, to_svg_xy = self._frame(np.vstack([pts] + grid))

        parts = _svg_header(width, height, svg_unit, "Half-breadths")
        if grid or opts.include_centerline:
            parts.append(
                f'<g id="grid" stroke="{opts.grid_color}" fill="none" '
                f'stroke-width="{opts.stroke_width}">'
            )
            for seg in grid:
                parts.append(f'<polyline points="{_points_attr(to_svg_xy(seg))}" />')
            if opts.include_centerline:
                center = to_svg_xy(np.array([[0.0, y_lo], [0.0, y_hi]]))
                parts.append(
                    f'<polyline id="centerline" stroke-dasharray="{opts.stroke_width * 4.0:.4f}" '
                    f'points="{_points_attr(center)}" />'
                )
            parts.append('</g>')

        parts.append(
            f'<g id="sections" stroke="{opts.stroke_color}" fill="none" '
            f'stroke-width="{opts.stroke_width}">'
        )
        for curve, line, _ in drawn:
            label = curve.name or f"{curve.position:g}"
            parts.append(f'<polyline id="section-{label}" points="{_points_attr(to_svg_xy(line))}" />')
        parts.append('</g>')

        r = opts.stroke_width * 1.5
        parts.append(f'<g id="offsets" fill="{opts.stroke_color}" stroke="none">')
        for _, _, dots in drawn:
            for x, y in to_svg_xy(dots):
                parts.append(f'<circle cx="{x:.4f}" cy="{y:.4f}" r="{r:.4f}" />')
        parts.append('</g>')

        if opts.include_labels:
            parts.append(f'<g id="labels" font-family="sans-serif" font-size="{opts.font_size}">')
            for curve, line, _ in drawn:
                label = curve.name or f"{curve.position:g}"
                x, y = to_svg_xy(line[-1:])[0]
                parts.append(
                    f'<text x="{x:.4f}" y="{y - opts.font_size * 0.5:.4f}" text-anchor="middle">'
                    f'{label}</text>'
                )
            parts.append('</g>')

        parts.append('</svg>')
        output_path.write_text("\n".join(parts), encoding="utf-8")
        _LOGGER.info("Wrote half-breadth diagram (%d stations) to %s", len(drawn), output_path)
        return str(output_path)
