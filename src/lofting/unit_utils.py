"""
Unit helpers (offset table units <-> SVG units, feet-inches-eighths notation)

Offsets are often taken off plans in feet-inches-eighths, written "F-I-E"
(e.g. "3-4-5" is 3 ft 4 5/8 in). Everything inside the engine is a plain
float in the table's unit; these helpers centralize the conversion rules so
the loader and the exporters stay consistent.
"""

from __future__ import annotations

import math
from typing import Optional

_MM_PER_UNIT = {
    "mm": 1.0,
    "cm": 10.0,
    "m": 1000.0,
    "in": 25.4,
    "ft": 304.8,
}

# Units an SVG length may carry.
SVG_UNITS = ("mm", "cm", "in")

UNMEASURED_TOKENS = {"", "x", "-", "na", "n/a"}


def normalize_unit(unit: Optional[str]) -> str:
    u = str(unit or "").strip().lower()
    if u in {"mm", "millimeter", "millimeters", "millimetre", "millimetres"}:
        return "mm"
    if u in {"cm", "centimeter", "centimeters", "centimetre", "centimetres"}:
        return "cm"
    if u in {"m", "meter", "meters", "metre", "metres"}:
        return "m"
    if u in {"in", "inch", "inches", '"'}:
        return "in"
    if u in {"ft", "foot", "feet", "'"}:
        return "ft"
    return "ft"


def unit_scale(from_unit: Optional[str], to_unit: Optional[str]) -> float:
    """Multiplier that converts a length in `from_unit` into `to_unit`."""
    return _MM_PER_UNIT[normalize_unit(from_unit)] / _MM_PER_UNIT[normalize_unit(to_unit)]


def resolve_svg_unit(hull_unit: Optional[str], requested: Optional[str]) -> tuple[str, float]:
    """
    Returns:
        (svg_unit, unit_scale)

    `unit_scale` is a multiplier applied to values in hull units to get SVG units.
    Feet are not an SVG unit, so feet are exported as inches and meters as
    centimeters unless another unit is requested.
    """
    hull_u = normalize_unit(hull_unit)
    if requested is None:
        if hull_u == "ft":
            svg_u = "in"
        elif hull_u == "m":
            svg_u = "cm"
        else:
            svg_u = hull_u
    else:
        svg_u = normalize_unit(requested)
        if svg_u == "ft":
            svg_u = "in"
        elif svg_u == "m":
            svg_u = "cm"
    return svg_u, unit_scale(hull_u, svg_u)


def parse_measurement(text: str) -> float:
    """
    Parse a length in feet-inches-eighths ("3-4-5") or a plain decimal ("3.39").

    A feet-inches-eighths value is returned in feet. Inches must be below 12
    and eighths below 8 (a trailing '+' or '-' sixteenth mark is accepted).

    Raises:
        ValueError: the text is not a length (including nan and inf)
    """
    raw = str(text).strip()
    if not raw:
        raise ValueError("Empty measurement")

    try:
        value = float(raw)
    except ValueError:
        pass
    else:
        if not math.isfinite(value):
            raise ValueError(f"Not a finite measurement: {text!r}")
        return value

    sixteenth = 0.0
    if raw.endswith("+") or (raw.endswith("-") and raw.count("-") > 2):
        sixteenth = 1.0 if raw.endswith("+") else -1.0
        raw = raw[:-1]

    parts = raw.split("-")
    if len(parts) != 3:
        raise ValueError(f"Not a measurement: {text!r}")
    try:
        feet, inches, eighths = (int(p) for p in parts)
    except ValueError:
        raise ValueError(f"Not a measurement: {text!r}") from None
    if feet < 0 or not (0 <= inches < 12) or not (0 <= eighths < 8):
        raise ValueError(f"Not a measurement: {text!r}")
    return feet + inches / 12.0 + (eighths + sixteenth / 2.0) / 96.0


def parse_optional_measurement(text: Optional[str]) -> Optional[float]:
    """Like `parse_measurement`, but blank cells and 'x' mean unmeasured (None)."""
    if text is None:
        return None
    if str(text).strip().lower() in UNMEASURED_TOKENS:
        return None
    return parse_measurement(text)


def format_feet(value: float) -> str:
    """Format a length in feet as feet-inches-eighths, rounded to the nearest eighth."""
    sign = "-" if value < 0 else ""
    total_eighths = int(round(abs(float(value)) * 96.0))
    feet, rest = divmod(total_eighths, 96)
    inches, eighths = divmod(rest, 8)
    return f"{sign}{feet}-{inches}-{eighths}"
