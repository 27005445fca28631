import tempfile
import unittest
from pathlib import Path

from src.lofting.config import LoftConfig
from src.lofting.errors import LayoutError, OffsetFormatError
from src.lofting.offset_loader import (
    load_config,
    load_offset_table,
    load_plank_layout,
    load_project,
)
from src.lofting.offsets import UNMEASURED, Measured
from src.lofting.plank_flattener import ConstructionMode, LapEdge

DATA_CSV = """Station,A,B,C
Fore-Aft Position,,,
Sheer,0-0-0,5-0-0,10-0-0
Height,,,
Sheer,2-0-0,1-9-0,2-0-0
0-6-0,0-3-0,0-1-0,0-3-0
Wale,1-6-0,1-5-0,1-6-0
Breadth,,,
Sheer,1-0-0,2-0-0,1-0-0
1-0-0,0-9-0,1-8-0,0-9-0
0-6-0,x,1-4-0,x
"""

PLANKS_CSV = """Plank,A,B,C
0,0,0,0
0,0.5,0.4,0.5
1,0.5,0.4,0.5
1,1,1,1
"""

CONFIG_CSV = """resolution,construction,overlap,lap_edge,method
32,lapstrake,0-1-0,top,triangulated
"""


def _write(directory: Path, name: str, text: str) -> Path:
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


class TestOffsetLoader(unittest.TestCase):
    def test_load_offset_table(self):
        with tempfile.TemporaryDirectory() as td:
            table = load_offset_table(_write(Path(td), "data.csv", DATA_CSV))

        self.assertEqual(len(table), 3)
        self.assertEqual(table.positions, (0.0, 5.0, 10.0))
        self.assertEqual(table.unit, "ft")

        a = table.station_named("A")
        self.assertEqual(a.n_measured, 3)
        self.assertIn(Measured(2.0, 1.0), a.points)
        self.assertIn(Measured(0.25, 0.5), a.points)
        self.assertIn(Measured(1.0, 0.75), a.points)
        self.assertIn(UNMEASURED, a.points)

        b = table.station_named("B")
        self.assertEqual(b.n_measured, 4)
        self.assertIn(Measured(1.75, 2.0), b.points)
        self.assertEqual(table.waterlines, (0.5, 1.0))
        self.assertEqual(table.buttocks, (0.5,))

    def test_repeated_offsets_are_dropped(self):
        text = DATA_CSV + "0-3-0,0-6-0,x,x\n"
        with tempfile.TemporaryDirectory() as td:
            table = load_offset_table(_write(Path(td), "data.csv", text))
        a = table.station_named("A")
        self.assertEqual(a.n_measured, 3)
        self.assertEqual(a.measured_points.count(Measured(0.25, 0.5)), 1)

    def test_bad_measurement_names_file_and_line(self):
        text = DATA_CSV.replace("0-9-0,1-8-0", "0-9-0,abc")
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(OffsetFormatError) as ctx:
                load_offset_table(_write(Path(td), "data.csv", text))
        message = str(ctx.exception)
        self.assertIn("data.csv", message)
        self.assertIn("line 10", message)

    def test_missing_section_name(self):
        text = "Station,A,B\nSheer,0-0-0,5-0-0\n"
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(OffsetFormatError):
                load_offset_table(_write(Path(td), "data.csv", text))

    def test_missing_sheer_position(self):
        text = DATA_CSV.replace("Sheer,0-0-0,5-0-0,10-0-0\n", "")
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(OffsetFormatError):
                load_offset_table(_write(Path(td), "data.csv", text))

    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(FileNotFoundError):
                load_offset_table(Path(td) / "data.csv")

    def test_load_plank_layout_by_station_name_and_position(self):
        planks = (
            "Plank,A,7-6-0,C,B\n"
            "0,0,0,0,0\n0,0.5,0.45,0.5,0.4\n"
            "1,0.5,0.45,0.5,0.4\n1,1,1,1,1\n"
        )
        with tempfile.TemporaryDirectory() as td:
            table = load_offset_table(_write(Path(td), "data.csv", DATA_CSV))
            layout = load_plank_layout(_write(Path(td), "planks.csv", planks), table)

        self.assertEqual(layout.n_planks, 2)
        self.assertEqual(layout.positions_for(0), (0.0, 5.0, 7.5, 10.0))
        self.assertEqual(layout.fractions_at(0, 5.0), (0.0, 0.4))
        self.assertEqual(layout.fractions_at(1, 7.5), (0.45, 1.0))

    def test_plank_fraction_must_be_number(self):
        with tempfile.TemporaryDirectory() as td:
            table = load_offset_table(_write(Path(td), "data.csv", DATA_CSV))
            path = _write(Path(td), "planks.csv", "Plank,A,B,C\n0,0,0,zero\n1,1,1,1\n")
            with self.assertRaises(OffsetFormatError):
                load_plank_layout(path, table)

    def test_plank_rows_are_bottom_top_pairs(self):
        # Plank 0 stops short of the last station; plank 1 runs the full length.
        planks = (
            "Plank,A,B,C\n"
            "0 bottom,0,0,x\n"
            "0 top,0.5,0.5,x\n"
            "1 bottom,0.5,0.5,0.5\n"
            "1 top,1,1,1\n"
        )
        with tempfile.TemporaryDirectory() as td:
            table = load_offset_table(_write(Path(td), "data.csv", DATA_CSV))
            layout = load_plank_layout(_write(Path(td), "planks.csv", planks), table)

        self.assertEqual(layout.n_planks, 2)
        self.assertEqual(layout.positions_for(0), (0.0, 5.0))
        self.assertEqual(layout.fractions_at(0, 0.0), (0.0, 0.5))
        self.assertEqual(layout.fractions_at(1, 10.0), (0.5, 1.0))

    def test_odd_number_of_plank_rows(self):
        planks = "Plank,A,B,C\n0,0,0,0\n0,0.5,0.5,0.5\n1,0.5,0.5,0.5\n"
        with tempfile.TemporaryDirectory() as td:
            table = load_offset_table(_write(Path(td), "data.csv", DATA_CSV))
            with self.assertRaises(OffsetFormatError) as ctx:
                load_plank_layout(_write(Path(td), "planks.csv", planks), table)
        self.assertIn("planks.csv", str(ctx.exception))
        self.assertIn("line 4", str(ctx.exception))

    def test_plank_pairs_must_meet(self):
        planks = "Plank,A,B,C\n0,0,0,0\n0,0.5,0.5,0.5\n1,0.6,0.5,0.5\n1,1,1,1\n"
        with tempfile.TemporaryDirectory() as td:
            table = load_offset_table(_write(Path(td), "data.csv", DATA_CSV))
            with self.assertRaises(LayoutError):
                load_plank_layout(_write(Path(td), "planks.csv", planks), table)

    def test_non_finite_offset_names_file_and_line(self):
        for bad in ("nan", "inf"):
            text = DATA_CSV.replace("0-9-0,1-8-0", f"0-9-0,{bad}")
            with tempfile.TemporaryDirectory() as td:
                with self.assertRaises(OffsetFormatError) as ctx:
                    load_offset_table(_write(Path(td), "data.csv", text))
            self.assertIn("data.csv", str(ctx.exception))
            self.assertIn("line 10", str(ctx.exception))

    def test_load_config(self):
        with tempfile.TemporaryDirectory() as td:
            config = load_config(_write(Path(td), "config.csv", CONFIG_CSV))
        self.assertEqual(config.template_samples, 32)
        self.assertIs(config.construction, ConstructionMode.LAPSTRAKE)
        self.assertAlmostEqual(config.overlap_width, 1 / 12)
        self.assertIs(config.lap_edge, LapEdge.TOP)
        self.assertEqual(config.flatten_method, "triangulated")

    def test_config_excluded_stations(self):
        with tempfile.TemporaryDirectory() as td:
            path = _write(Path(td), "config.csv", "resolution,exclude\n16,Stem; Post ;\n")
            config = load_config(path)
        self.assertEqual(config.excluded_stations, ("Stem", "Post"))
        self.assertEqual(LoftConfig().excluded_stations, ())

    def test_config_rejects_unknown_construction(self):
        with tempfile.TemporaryDirectory() as td:
            path = _write(Path(td), "config.csv", "resolution,construction\n16,clinker-ish\n")
            with self.assertRaises(OffsetFormatError):
                load_config(path)

    def test_load_project(self):
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            _write(root, "data.csv", DATA_CSV)
            _write(root, "planks.csv", PLANKS_CSV)
            _write(root, "config.csv", CONFIG_CSV)
            project = load_project(root)

        self.assertEqual(len(project.table), 3)
        self.assertEqual(project.layout.n_planks, 2)
        self.assertEqual(project.config.template_samples, 32)

    def test_load_project_without_optional_sheets(self):
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            _write(root, "data.csv", DATA_CSV)
            project = load_project(root)
        self.assertIsNone(project.layout)
        self.assertIs(project.config.construction, ConstructionMode.CARVEL)


if __name__ == "__main__":
    unittest.main()
