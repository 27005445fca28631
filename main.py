"""
Lapstrake Lofter - hull lofting and plank development from a table of offsets

Main entry point
"""

import sys
import logging
from pathlib import Path

# Ensure repository root is on sys.path so "src" is importable.
ROOT_DIR = Path(__file__).resolve().parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.lofting.errors import LoftingError
from src.lofting.output_paths import (
    half_breadth_svg_path,
    hull_mesh_path,
    planks_svg_path,
    station_svg_path,
    stations_svg_path,
)

_LOGGER = logging.getLogger(__name__)


def run_cli(argv=None) -> int:
    """Run the command line interface; returns the process exit code."""
    args = list(sys.argv[1:] if argv is None else argv)

    from src.lofting.logging_utils import setup_logging

    setup_logging()

    if not args:
        print_help()
        return 0

    cmd = args[0]

    if cmd == '--help' or cmd == '-h':
        print_help()
        return 0

    if cmd == '--info' and len(args) > 1:
        return _guarded(show_project_info, args[1])

    if cmd == '--planks' and len(args) > 1:
        return _guarded(export_planks, args[1], args[2] if len(args) > 2 else None)

    if cmd == '--stations' and len(args) > 1:
        return _guarded(export_stations, args[1], args[2] if len(args) > 2 else None)

    if cmd == '--station-at' and len(args) > 2:
        return _guarded(export_station_at, args[1], args[2], args[3] if len(args) > 3 else None)

    if cmd == '--hull' and len(args) > 1:
        return _guarded(export_hull, args[1], args[2] if len(args) > 2 else None)

    if cmd == '--diagram' and len(args) > 1:
        return _guarded(export_diagram, args[1], args[2] if len(args) > 2 else None)

    # Default: full processing of a project directory
    if Path(cmd).is_dir():
        return _guarded(process_project, cmd)

    print(f"Error: Unknown command or directory not found: {cmd}")
    print("Use --help for usage information")
    return 1


def _guarded(fn, *args) -> int:
    from src.lofting.logging_utils import current_log_path, format_exception_message

    try:
        fn(*args)
    except (LoftingError, FileNotFoundError, ValueError) as e:
        _LOGGER.error("%s failed: %s", fn.__name__, e)
        print(format_exception_message("Error", str(e), log_path=current_log_path()))
        return 1
    return 0


def print_help():
    print("=" * 60)
    print("Lapstrake Lofter - hull lofting and plank development")
    print("=" * 60)
    print()
    print("Usage:")
    print("  python main.py <project_dir>                       # Everything below")
    print("  python main.py --info <project_dir>                # Show hull summary")
    print("  python main.py --planks <project_dir> [output]     # Flat plank patterns (SVG)")
    print("  python main.py --stations <project_dir> [output]   # Station templates (SVG)")
    print("  python main.py --station-at <project_dir> <pos> [output]  # One template anywhere")
    print("  python main.py --hull <project_dir> [output]       # Hull preview mesh (STL/PLY/OBJ)")
    print("  python main.py --diagram <project_dir> [output]    # Half-breadth diagram (SVG)")
    print()
    print("A project directory holds data.csv (offsets), planks.csv (plank layout)")
    print("and config.csv (options). Measurements are feet-inches-eighths (3-4-5)")
    print("or decimals.")
    print()
    print("Examples:")
    print("  python main.py ~/boats/skiff")
    print("  python main.py --station-at ~/boats/skiff 7-6-0")


def _load(project_dir: str):
    from src.lofting.lofter import Lofter

    return Lofter.from_directory(project_dir)


def _exporter(lofter, *, exclude: bool = True):
    from src.lofting.svg_exporter import LoftSVGExporter, SVGExportOptions

    options = SVGExportOptions(
        unit=lofter.config.svg_unit,
        excluded_stations=lofter.config.excluded_stations if exclude else (),
    )
    return LoftSVGExporter(lofter.table.unit, options)


def show_project_info(project_dir: str):
    from src.lofting.unit_utils import format_feet

    lofter = _load(project_dir)
    info = lofter.summary()
    unit = info["unit"]

    def fmt(value: float) -> str:
        return format_feet(value) if unit == "ft" else f"{value:.3f}"

    print(f"\nProject: {project_dir}")
    print("-" * 40)
    print(f"  Unit: {unit}")
    print(f"  Stations: {info['stations']}")
    print(f"  Length: {fmt(info['length'])}")
    for pos, (h_lo, h_hi) in zip(info["positions"], info["height_ranges"]):
        print(f"    at {fmt(pos)}: heights {fmt(h_lo)} .. {fmt(h_hi)}")
    print(f"  Planks: {info['planks']}")


def export_planks(project_dir: str, output_path: str | None = None):
    lofter = _load(project_dir)
    shapes = lofter.flat_planks()
    save_path = planks_svg_path(project_dir, output_path)
    _exporter(lofter).export_planks(shapes, save_path)
    print(f"  Planks: {len(shapes)}")
    print(f"  Saved: {save_path}")


def export_stations(project_dir: str, output_path: str | None = None):
    lofter = _load(project_dir)
    templates = lofter.station_templates()
    save_path = stations_svg_path(project_dir, output_path)
    _exporter(lofter).export_stations(templates, save_path)
    print(f"  Stations: {len(templates)}")
    print(f"  Saved: {save_path}")


def export_station_at(project_dir: str, position: str, output_path: str | None = None):
    from src.lofting.unit_utils import parse_measurement

    lofter = _load(project_dir)
    pos = parse_measurement(position)
    template = lofter.station_template(pos)
    save_path = station_svg_path(project_dir, pos, output_path)
    _exporter(lofter, exclude=False).export_stations([template], save_path)
    print(f"  Saved: {save_path}")


def _write_half_breadths(lofter, save_path):
    return _exporter(lofter).export_half_breadths(
        lofter.surface,
        save_path,
        waterlines=lofter.table.waterlines,
        buttocks=lofter.table.buttocks,
        samples=lofter.config.template_samples,
    )


def export_diagram(project_dir: str, output_path: str | None = None):
    lofter = _load(project_dir)
    save_path = half_breadth_svg_path(project_dir, output_path)
    _write_half_breadths(lofter, save_path)
    print(f"  Stations: {len(lofter.table)}")
    print(f"  Saved: {save_path}")


def export_hull(project_dir: str, output_path: str | None = None):
    from src.lofting.hull_mesh import export_hull_mesh

    lofter = _load(project_dir)
    save_path = hull_mesh_path(project_dir, output_path)
    export_hull_mesh(lofter.surface, save_path)
    print(f"  Saved: {save_path}")


def process_project(project_dir: str):
    """Full processing: hull mesh, half-breadths, station templates and (with a layout) plank patterns."""
    from src.lofting.hull_mesh import export_hull_mesh

    print(f"\n{'='*60}")
    print(f"Processing: {project_dir}")
    print(f"{'='*60}")

    print("\n[1/5] Loading project...")
    lofter = _load(project_dir)
    print(f"      Stations: {len(lofter.table)}")

    print("\n[2/5] Fitting hull surface...")
    lo, hi = lofter.surface.length_range
    print(f"      Length: {hi - lo:.3f} {lofter.table.unit}")
    export_hull_mesh(lofter.surface, hull_mesh_path(project_dir))
    print(f"      Saved: {hull_mesh_path(project_dir)}")

    print("\n[3/5] Half-breadth diagram...")
    _write_half_breadths(lofter, half_breadth_svg_path(project_dir))
    print(f"      Saved: {half_breadth_svg_path(project_dir)}")

    print("\n[4/5] Station templates...")
    templates = lofter.station_templates()
    _exporter(lofter).export_stations(templates, stations_svg_path(project_dir))
    print(f"      Saved: {stations_svg_path(project_dir)}")

    print("\n[5/5] Plank patterns...")
    if lofter.layout is None:
        print("      No planks.csv; skipped")
    else:
        shapes = lofter.flat_planks()
        _exporter(lofter).export_planks(shapes, planks_svg_path(project_dir))
        print(f"      Planks: {len(shapes)}")
        print(f"      Saved: {planks_svg_path(project_dir)}")

    print(f"\n{'='*60}")
    print("Done!")
    print(f"{'='*60}")


if __name__ == '__main__':
    sys.exit(run_cli())
