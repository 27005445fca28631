import unittest

import numpy as np

from src.lofting.errors import DegenerateBand, NonPositiveOverlap
from src.lofting.plank_band import PlankBand
from src.lofting.plank_flattener import (
    ConstructionMode,
    FlattenOptions,
    LapEdge,
    PlankFlattener,
    arrange_flat_planks,
    offset_polyline,
)


def _straight_band(plank_index=0):
    return PlankBand(
        plank_index=plank_index,
        positions=[0.0, 5.0, 10.0],
        bottom_heights=[1.0, 1.0, 1.0],
        top_heights=[1.8, 1.8, 1.8],
        bottom_breadths=[2.0, 2.0, 2.0],
        top_breadths=[2.0, 2.0, 2.0],
    )


def _curved_band(plank_index=0):
    x = np.linspace(0.0, 12.0, 7)
    bulge = np.sin(np.pi * x / 12.0)
    return PlankBand(
        plank_index=plank_index,
        positions=x,
        bottom_heights=0.6 - 0.3 * bulge,
        top_heights=1.4 - 0.2 * bulge,
        bottom_breadths=0.4 + 1.2 * bulge,
        top_breadths=0.7 + 1.6 * bulge,
    )


class TestPlankFlattener(unittest.TestCase):
    def test_carvel_straight_band_is_rectangle(self):
        for method in ("chord", "triangulated"):
            shape = PlankFlattener(FlattenOptions(method=method)).flatten(_straight_band())
            np.testing.assert_allclose(shape.bottom_edge, [[0, 0], [5, 0], [10, 0]], atol=1e-9)
            np.testing.assert_allclose(shape.top_edge, [[0, 0.8], [5, 0.8], [10, 0.8]], atol=1e-9)
            self.assertIs(shape.mode, ConstructionMode.CARVEL)
            self.assertEqual(shape.overlap_width, 0.0)
            self.assertIsNone(shape.lap_line)

    def test_carvel_ignores_overlap_width(self):
        options = FlattenOptions(mode=ConstructionMode.CARVEL, overlap_width=0.1)
        shape = PlankFlattener(options).flatten(_straight_band())
        self.assertEqual(shape.overlap_width, 0.0)
        np.testing.assert_allclose(shape.top_edge[:, 1], 0.8, atol=1e-9)

    def test_lapstrake_offsets_top_edge_only(self):
        w = 0.1
        carvel = PlankFlattener().flatten(_straight_band())
        lap = PlankFlattener(
            FlattenOptions(mode=ConstructionMode.LAPSTRAKE, overlap_width=w)
        ).flatten(_straight_band())

        np.testing.assert_allclose(lap.bottom_edge, carvel.bottom_edge, atol=1e-12)
        np.testing.assert_allclose(lap.top_edge[:, 0], carvel.top_edge[:, 0], atol=1e-9)
        np.testing.assert_allclose(lap.top_edge[:, 1], carvel.top_edge[:, 1] + w, atol=1e-9)
        np.testing.assert_allclose(lap.lap_line, carvel.top_edge, atol=1e-12)
        self.assertIs(lap.lap_edge, LapEdge.TOP)
        self.assertEqual(lap.overlap_width, w)

    def test_lapstrake_bottom_edge_option(self):
        w = 0.05
        lap = PlankFlattener(
            FlattenOptions(mode=ConstructionMode.LAPSTRAKE, overlap_width=w, lap_edge=LapEdge.BOTTOM)
        ).flatten(_straight_band())
        np.testing.assert_allclose(lap.bottom_edge[:, 1], -w, atol=1e-9)
        np.testing.assert_allclose(lap.top_edge[:, 1], 0.8, atol=1e-9)

    def test_lapstrake_offset_is_parallel_on_curved_edge(self):
        w = 0.08
        band = _curved_band()
        carvel = PlankFlattener(FlattenOptions(method="triangulated")).flatten(band)
        lap = PlankFlattener(
            FlattenOptions(mode=ConstructionMode.LAPSTRAKE, overlap_width=w, method="triangulated")
        ).flatten(band)

        np.testing.assert_allclose(lap.bottom_edge, carvel.bottom_edge, atol=1e-12)
        top = carvel.top_edge
        shifted = lap.top_edge
        # Every offset segment lies at distance w from its original segment.
        for i in range(len(top) - 1):
            seg = top[i + 1] - top[i]
            normal = np.array([-seg[1], seg[0]]) / np.linalg.norm(seg)
            self.assertAlmostEqual(float(np.dot(shifted[i] - top[i], normal)), w, places=9)
            self.assertAlmostEqual(float(np.dot(shifted[i + 1] - top[i + 1], normal)), w, places=9)

    def test_non_positive_overlap(self):
        for w in (0.0, -0.2):
            with self.assertRaises(NonPositiveOverlap):
                PlankFlattener(
                    FlattenOptions(mode=ConstructionMode.LAPSTRAKE, overlap_width=w)
                ).flatten(_straight_band())

    def test_degenerate_band(self):
        band = PlankBand(
            plank_index=3,
            positions=[0.0],
            bottom_heights=[0.0],
            top_heights=[1.0],
            bottom_breadths=[1.0],
            top_breadths=[1.0],
        )
        with self.assertRaises(DegenerateBand) as ctx:
            PlankFlattener().flatten(band)
        self.assertEqual(ctx.exception.plank_index, 3)
        self.assertEqual(ctx.exception.n_stations, 1)

    def test_chord_method_keeps_edge_lengths(self):
        band = _curved_band()
        shape = PlankFlattener(FlattenOptions(method="chord")).flatten(band)
        bottom3 = np.sum(np.linalg.norm(np.diff(band.bottom_edge, axis=0), axis=1))
        top3 = np.sum(np.linalg.norm(np.diff(band.top_edge, axis=0), axis=1))
        self.assertAlmostEqual(shape.bottom_length, bottom3, places=9)
        self.assertAlmostEqual(shape.top_length, top3, places=9)
        self.assertAlmostEqual(shape.top_edge[0, 1], band.widths[0], places=12)

    def test_triangulated_method_keeps_widths_and_chords(self):
        band = _curved_band()
        shape = PlankFlattener(FlattenOptions(method="triangulated")).flatten(band)
        widths = np.linalg.norm(shape.top_edge - shape.bottom_edge, axis=1)
        np.testing.assert_allclose(widths, band.widths, atol=1e-9)
        self.assertAlmostEqual(
            shape.bottom_length,
            float(np.sum(np.linalg.norm(np.diff(band.bottom_edge, axis=0), axis=1))),
            places=9,
        )

    def test_flatten_is_repeatable(self):
        flattener = PlankFlattener(
            FlattenOptions(mode=ConstructionMode.LAPSTRAKE, overlap_width=0.1, method="triangulated")
        )
        a = flattener.flatten(_curved_band())
        b = flattener.flatten(_curved_band())
        np.testing.assert_array_equal(a.boundary, b.boundary)

    def test_unknown_method(self):
        with self.assertRaises(ValueError):
            PlankFlattener(FlattenOptions(method="conformal"))


class TestArrangeAndOffset(unittest.TestCase):
    def test_arrange_stacks_without_overlap(self):
        flattener = PlankFlattener(FlattenOptions(method="triangulated"))
        shapes = [flattener.flatten(_curved_band(i)) for i in range(3)]
        arranged = arrange_flat_planks(shapes, gap=0.25)

        self.assertEqual([s.plank_index for s in arranged], [0, 1, 2])
        self.assertAlmostEqual(float(arranged[0].bounds[0][1]), 0.0, places=9)
        for shape in arranged:
            self.assertAlmostEqual(float(shape.bounds[0][0]), 0.0, places=9)
            chord = shape.bottom_edge[-1] - shape.bottom_edge[0]
            self.assertAlmostEqual(float(chord[1]), 0.0, places=9)
        for lower, upper in zip(arranged, arranged[1:]):
            self.assertAlmostEqual(
                float(upper.bounds[0][1] - lower.bounds[1][1]), 0.25, places=9
            )

    def test_offset_polyline_sides(self):
        pts = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 1.0]])
        left = offset_polyline(pts, 0.1, side="left")
        right = offset_polyline(pts, 0.1, side="right")
        np.testing.assert_allclose(left[0], [0.0, 0.1], atol=1e-12)
        np.testing.assert_allclose(right[0], [0.0, -0.1], atol=1e-12)
        with self.assertRaises(ValueError):
            offset_polyline(pts, 0.1, side="up")


if __name__ == "__main__":
    unittest.main()
