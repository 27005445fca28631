"""
Offset table / plank layout / config loader (CSV sheets)

A project directory holds three sheets:

- data.csv: the table of offsets. The header row names the stations. The body
  is split into sections, each introduced by a row holding only its name:
    "Fore-Aft Position"  row "Sheer" gives each station's position
    "Height"             rows keyed by a buttock (half-breadth) give the height
                         where the hull crosses it; "Sheer" gives the sheer height
    "Breadth"            rows keyed by a waterline (height) give the half-breadth
                         there; "Sheer" gives the sheer half-breadth
  Cells are feet-inches-eighths ("3-4-5") or decimals; 'x' or blank means
  unmeasured.
- planks.csv: header names stations (or gives fore-aft positions); below it
  each plank has two rows, its bottom edge then its top edge, as fractions of
  the station height range. One plank's top must equal the next one's bottom.
- config.csv: a header and one row of options (see `load_config`).
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .config import LoftConfig
from .errors import OffsetFormatError
from .logging_utils import log_once
from .offsets import UNMEASURED, Measured, OffsetPoint, OffsetTable, Station
from .plank_flattener import ConstructionMode, LapEdge
from .plank_layout import PlankLayout
from .unit_utils import normalize_unit, parse_measurement, parse_optional_measurement

_LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

DATA_FILE = "data.csv"
PLANKS_FILE = "planks.csv"
CONFIG_FILE = "config.csv"

SECTION_POSITIONS = "fore-aft position"
SECTION_HEIGHTS = "height"
SECTION_BREADTHS = "breadth"
_SECTIONS = (SECTION_POSITIONS, SECTION_HEIGHTS, SECTION_BREADTHS)

SHEER = "sheer"
WALE = "wale"


@dataclass(frozen=True)
class LoftProject:
    table: OffsetTable
    layout: Optional[PlankLayout]
    config: LoftConfig
    directory: Path


def _read_rows(path: Path) -> List[Tuple[int, List[str]]]:
    """Non-blank rows of a CSV file with their line numbers."""
    _LOGGER.info("Loading file: %s", path)
    if not path.exists():
        raise FileNotFoundError(str(path))
    rows: List[Tuple[int, List[str]]] = []
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.reader(f)
        try:
            for row in reader:
                cells = [c.strip() for c in row]
                if not any(cells):
                    continue
                rows.append((reader.line_num, cells))
        except csv.Error as e:
            raise OffsetFormatError(f"{path.name}: line {reader.line_num}: {e}") from e
    return rows


def _cell(row: List[str], index: int) -> str:
    return row[index] if index < len(row) else ""


def _parse(path: Path, line: int, text: str) -> Optional[float]:
    try:
        return parse_optional_measurement(text)
    except ValueError as e:
        raise OffsetFormatError(f"{path.name}: line {line}: {e}") from e


def _parse_key(path: Path, line: int, text: str) -> float:
    try:
        return parse_measurement(text)
    except ValueError as e:
        raise OffsetFormatError(
            f"{path.name}: line {line}: row label {text!r} is neither 'Sheer' nor a measurement"
        ) from e


def _is_section_row(cells: List[str]) -> bool:
    return cells[0].lower() in _SECTIONS and not any(cells[1:])


def load_offset_table(path: PathLike, *, unit: str = "ft") -> OffsetTable:
    """
    Load data.csv into an OffsetTable.

    Raises:
        FileNotFoundError: the file does not exist
        OffsetFormatError: the sheet is malformed (message names file and line)
    """
    path = Path(path)
    rows = _read_rows(path)
    if not rows:
        raise OffsetFormatError(f"{path.name}: empty sheet")

    _, header = rows[0]
    names = [n for n in header[1:]]
    while names and not names[-1]:
        names.pop()
    if not names:
        raise OffsetFormatError(f"{path.name}: header row names no stations")
    n_stations = len(names)

    sections: Dict[str, List[Tuple[int, str, List[Optional[float]]]]] = {s: [] for s in _SECTIONS}
    current: Optional[str] = None
    for line, cells in rows[1:]:
        if _is_section_row(cells):
            current = cells[0].lower()
            continue
        if current is None:
            raise OffsetFormatError(
                f"{path.name}: line {line}: expected a section name "
                f"(Fore-Aft Position, Height, Breadth), found {cells[0]!r}"
            )
        extra = [c for c in cells[1 + n_stations:] if c]
        if extra:
            raise OffsetFormatError(
                f"{path.name}: line {line}: {len(cells) - 1} cells for {n_stations} stations"
            )
        values = [_parse(path, line, _cell(cells, 1 + i)) for i in range(n_stations)]
        sections[current].append((line, cells[0].lower(), values))

    positions = _sheer_row(path, sections[SECTION_POSITIONS], SECTION_POSITIONS)
    for line, key, _ in sections[SECTION_POSITIONS]:
        if key != SHEER:
            log_once(
                _LOGGER, f"position-row:{key}", logging.INFO,
                "%s: line %d: ignoring position row %r (only Sheer is used)", path.name, line, key,
            )
    sheer_heights = _sheer_row(path, sections[SECTION_HEIGHTS], SECTION_HEIGHTS)
    sheer_breadths = _sheer_row(path, sections[SECTION_BREADTHS], SECTION_BREADTHS)

    stations = []
    for i, name in enumerate(names):
        position = positions[i]
        if position is None:
            raise OffsetFormatError(f"{path.name}: station {name!r} has no fore-aft position")

        points: List[OffsetPoint] = []
        if sheer_heights[i] is None or sheer_breadths[i] is None:
            points.append(UNMEASURED)
        else:
            points.append(Measured(sheer_heights[i], sheer_breadths[i]))

        for line, key, values in sections[SECTION_HEIGHTS]:
            if key in (SHEER, WALE):
                continue
            breadth = _parse_key(path, line, key)
            points.append(UNMEASURED if values[i] is None else Measured(values[i], breadth))

        for line, key, values in sections[SECTION_BREADTHS]:
            if key == SHEER:
                continue
            height = _parse_key(path, line, key)
            points.append(UNMEASURED if values[i] is None else Measured(height, values[i]))

        stations.append(Station(position=position, points=tuple(_drop_repeats(points)), name=name))

    buttocks = [
        _parse_key(path, line, key)
        for line, key, _ in sections[SECTION_HEIGHTS]
        if key not in (SHEER, WALE)
    ]
    waterlines = [
        _parse_key(path, line, key) for line, key, _ in sections[SECTION_BREADTHS] if key != SHEER
    ]
    table = OffsetTable(
        stations=tuple(stations),
        unit=normalize_unit(unit),
        waterlines=tuple(waterlines),
        buttocks=tuple(buttocks),
    )
    _LOGGER.info("Loaded %d stations from %s", len(table), path)
    return table


def _sheer_row(path: Path, rows, section: str) -> List[Optional[float]]:
    for _, key, values in rows:
        if key == SHEER:
            return values
    raise OffsetFormatError(f"{path.name}: section {section!r} has no 'Sheer' row")


def _drop_repeats(points: List[OffsetPoint]) -> List[OffsetPoint]:
    """The same offset is often entered in both the Height and Breadth sections."""
    seen = set()
    out: List[OffsetPoint] = []
    for p in points:
        if isinstance(p, Measured):
            key = (p.height, p.breadth)
            if key in seen:
                continue
            seen.add(key)
        out.append(p)
    return out


def load_plank_layout(path: PathLike, table: OffsetTable) -> PlankLayout:
    """
    Load planks.csv into a PlankLayout.

    Header cells are matched against station names first, then read as
    fore-aft positions.

    Raises:
        FileNotFoundError: the file does not exist
        OffsetFormatError: the sheet is malformed
        LayoutError / InvertedPlankEdges: the edge lines are inconsistent
    """
    path = Path(path)
    rows = _read_rows(path)
    if not rows:
        raise OffsetFormatError(f"{path.name}: empty sheet")

    header_line, header = rows[0]
    labels = header[1:]
    while labels and not labels[-1]:
        labels.pop()

    positions: List[float] = []
    for label in labels:
        try:
            positions.append(table.station_named(label).position)
            continue
        except KeyError:
            pass
        try:
            positions.append(parse_measurement(label))
        except ValueError as e:
            raise OffsetFormatError(
                f"{path.name}: line {header_line}: {label!r} is neither a station name nor a position"
            ) from e

    edge_rows: List[List[Optional[float]]] = []
    for line, cells in rows[1:]:
        line_values: List[Optional[float]] = []
        for i in range(len(positions)):
            text = _cell(cells, 1 + i)
            if text.lower() in ("x", ""):
                line_values.append(None)
                continue
            try:
                line_values.append(float(text))
            except ValueError as e:
                raise OffsetFormatError(
                    f"{path.name}: line {line}: plank fraction {text!r} is not a number"
                ) from e
        edge_rows.append(line_values)

    if len(edge_rows) % 2:
        last_line = rows[-1][0]
        raise OffsetFormatError(
            f"{path.name}: line {last_line}: plank rows come in (bottom, top) pairs, "
            f"found {len(edge_rows)} rows"
        )
    layout = PlankLayout.from_plank_rows(positions, edge_rows)
    _LOGGER.info("Loaded %d planks from %s", layout.n_planks, path)
    return layout


_CONFIG_ALIASES = {
    "resolution": "template_samples",
    "template_samples": "template_samples",
    "construction": "construction",
    "mode": "construction",
    "overlap": "overlap_width",
    "overlap_width": "overlap_width",
    "lap_edge": "lap_edge",
    "flatten_method": "flatten_method",
    "method": "flatten_method",
    "curve_method": "curve_method",
    "spline": "curve_method",
    "unit": "unit",
    "svg_unit": "svg_unit",
    "max_workers": "max_workers",
    "exclude": "excluded_stations",
    "excluded_stations": "excluded_stations",
}


def load_config(path: PathLike) -> LoftConfig:
    """
    Load config.csv (a header row and one value row) into a LoftConfig.

    Recognized columns: resolution (or template_samples), construction
    (carvel | lapstrake), overlap, lap_edge (top | bottom), flatten_method
    (chord | triangulated), curve_method (natural | pchip), unit, svg_unit,
    max_workers, exclude (station names separated by ';'). Unknown columns are
    ignored with a warning.
    """
    path = Path(path)
    rows = _read_rows(path)
    if len(rows) < 2:
        raise OffsetFormatError(f"{path.name}: found no rows in config sheet")

    (_, header), (line, values) = rows[0], rows[1]
    kwargs: Dict[str, object] = {}
    for i, column in enumerate(header):
        key = column.strip().lower()
        if not key:
            continue
        field_name = _CONFIG_ALIASES.get(key)
        if field_name is None:
            _LOGGER.warning("%s: ignoring unknown column %r", path.name, column)
            continue
        text = _cell(values, i)
        if not text:
            continue
        try:
            kwargs[field_name] = _config_value(field_name, text)
        except ValueError as e:
            raise OffsetFormatError(f"{path.name}: line {line}: column {column!r}: {e}") from e

    try:
        return LoftConfig(**kwargs)
    except ValueError as e:
        raise OffsetFormatError(f"{path.name}: line {line}: {e}") from e


def _config_value(field_name: str, text: str):
    if field_name == "excluded_stations":
        return tuple(name.strip() for name in text.split(";") if name.strip())
    if field_name in ("template_samples", "max_workers"):
        return int(text)
    if field_name == "construction":
        return ConstructionMode(text.lower())
    if field_name == "lap_edge":
        return LapEdge(text.lower())
    if field_name == "overlap_width":
        return parse_measurement(text)
    if field_name in ("unit", "svg_unit"):
        return normalize_unit(text)
    return text.lower()


def load_project(directory: PathLike) -> LoftProject:
    """
    Load data.csv, planks.csv and config.csv from a project directory.

    config.csv and planks.csv are optional: without config.csv defaults are
    used, and without planks.csv only station work is possible.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(str(directory))

    config_path = directory / CONFIG_FILE
    config = load_config(config_path) if config_path.exists() else LoftConfig()

    table = load_offset_table(directory / DATA_FILE, unit=config.unit)

    planks_path = directory / PLANKS_FILE
    layout = load_plank_layout(planks_path, table) if planks_path.exists() else None
    if layout is None:
        _LOGGER.info("No %s in %s; plank output disabled", PLANKS_FILE, directory)

    return LoftProject(table=table, layout=layout, config=config, directory=directory)
