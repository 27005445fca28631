import unittest

import numpy as np

from src.lofting.errors import DuplicateHeight, HeightOutOfRange, InsufficientData
from src.lofting.offsets import UNMEASURED, Measured, Station
from src.lofting.station_curve import build_station_curve


def _station(position, pairs):
    points = [UNMEASURED if p is None else Measured(*p) for p in pairs]
    return Station(position=position, points=tuple(points))


class TestStationCurve(unittest.TestCase):
    def test_curve_passes_through_measured_points(self):
        station = _station(0.0, [(0.0, 0.0), (1.0, 2.0), (2.0, 3.0)])
        for method in ("natural", "pchip"):
            curve = build_station_curve(station, method=method)
            self.assertAlmostEqual(curve.evaluate(0.0), 0.0, places=12)
            self.assertAlmostEqual(curve.evaluate(1.0), 2.0, places=12)
            self.assertAlmostEqual(curve.evaluate(2.0), 3.0, places=12)

    def test_points_are_sorted_by_height(self):
        station = _station(4.0, [(2.0, 3.0), None, (0.0, 0.0), (1.0, 2.0)])
        curve = build_station_curve(station)
        self.assertEqual(curve.heights.tolist(), [0.0, 1.0, 2.0])
        self.assertEqual(curve.breadths.tolist(), [0.0, 2.0, 3.0])
        self.assertEqual(curve.height_range, (0.0, 2.0))
        self.assertEqual(curve.position, 4.0)

    def test_insufficient_data(self):
        station = _station(3.0, [(1.0, 1.0), None, None])
        with self.assertRaises(InsufficientData) as ctx:
            build_station_curve(station)
        self.assertEqual(ctx.exception.station_position, 3.0)
        self.assertEqual(ctx.exception.n_measured, 1)

    def test_duplicate_height(self):
        station = _station(2.0, [(0.0, 0.0), (1.0, 2.0), (1.0, 2.5)])
        with self.assertRaises(DuplicateHeight) as ctx:
            build_station_curve(station)
        self.assertEqual(ctx.exception.station_position, 2.0)
        self.assertEqual(ctx.exception.height, 1.0)

    def test_out_of_range_heights_raise(self):
        curve = build_station_curve(_station(0.0, [(0.0, 0.0), (1.0, 2.0), (2.0, 3.0)]))
        for h in (-0.1, 2.5):
            with self.assertRaises(HeightOutOfRange) as ctx:
                curve.evaluate(h)
            self.assertEqual(ctx.exception.valid_range, (0.0, 2.0))
        with self.assertRaises(HeightOutOfRange):
            curve.sample([0.5, 3.0])

    def test_sample_matches_evaluate_and_is_repeatable(self):
        curve = build_station_curve(_station(0.0, [(0.0, 0.5), (0.7, 1.9), (1.5, 2.4), (2.0, 2.5)]))
        hs = np.linspace(0.0, 2.0, 9)
        sampled = curve.sample(hs)
        expected = np.array([curve.evaluate(h) for h in hs])
        np.testing.assert_allclose(sampled, expected, rtol=0, atol=1e-12)
        np.testing.assert_array_equal(curve.sample(hs), sampled)

    def test_curve_keeps_station_name(self):
        station = Station(3.0, (Measured(0.0, 0.0), Measured(1.0, 1.0)), name="Post")
        self.assertEqual(build_station_curve(station).name, "Post")
        self.assertEqual(build_station_curve(_station(1.0, [(0.0, 0.0), (1.0, 1.0)])).name, "")

    def test_unknown_method_rejected(self):
        with self.assertRaises(ValueError):
            build_station_curve(_station(0.0, [(0.0, 0.0), (1.0, 1.0)]), method="linear")


if __name__ == "__main__":
    unittest.main()
