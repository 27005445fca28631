import tempfile
import unittest
from pathlib import Path

import numpy as np

from src.lofting.hull_mesh import build_band_mesh, build_hull_mesh, export_hull_mesh
from src.lofting.hull_surface import HullSurface
from src.lofting.offsets import OffsetTable
from src.lofting.plank_band import PlankBandExtractor
from src.lofting.plank_layout import PlankLayout


def _surface():
    table = OffsetTable.from_rows(
        [
            (0.0, [(0.0, 0.0), (1.0, 2.0), (2.0, 3.0)]),
            (10.0, [(0.0, 0.0), (1.0, 4.0), (2.0, 5.0)]),
        ]
    )
    return HullSurface.build(table)


class TestHullMesh(unittest.TestCase):
    def test_grid_mesh_shape(self):
        mesh = build_hull_mesh(_surface(), sections=5, levels=4)
        self.assertEqual(len(mesh.vertices), 20)
        self.assertEqual(len(mesh.faces), 24)
        np.testing.assert_allclose(sorted(set(mesh.vertices[:, 0].tolist())), [0, 2.5, 5, 7.5, 10])
        self.assertTrue(np.all(mesh.vertices[:, 1] >= -1e-9))

    def test_mesh_vertices_lie_on_surface(self):
        surface = _surface()
        mesh = build_hull_mesh(surface, sections=3, levels=5)
        for x, b, h in mesh.vertices:
            self.assertAlmostEqual(b, surface.breadth_at(x, h), places=9)

    def test_mirror_adds_port_side(self):
        mesh = build_hull_mesh(_surface(), sections=3, levels=3, mirror=True)
        self.assertEqual(len(mesh.vertices), 18)
        self.assertEqual(len(mesh.faces), 16)
        self.assertLess(float(mesh.vertices[:, 1].min()), 0.0)

    def test_band_mesh_and_export(self):
        surface = _surface()
        layout = PlankLayout({0: {0.0: (0.2, 0.6), 10.0: (0.2, 0.6)}})
        band = PlankBandExtractor(surface).extract(layout, 0)
        strip = build_band_mesh(band)
        self.assertEqual(len(strip.vertices), 4)
        self.assertEqual(len(strip.faces), 2)

        with tempfile.TemporaryDirectory() as td:
            out = Path(td) / "hull.stl"
            saved = export_hull_mesh(surface, out, bands=[band])
            self.assertEqual(saved, str(out))
            self.assertTrue(out.exists())
            self.assertGreater(out.stat().st_size, 0)


if __name__ == "__main__":
    unittest.main()
