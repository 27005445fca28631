import unittest

from src.lofting.unit_utils import (
    format_feet,
    normalize_unit,
    parse_measurement,
    parse_optional_measurement,
    resolve_svg_unit,
    unit_scale,
)


class TestUnitUtils(unittest.TestCase):
    def test_parse_feet_inches_eighths(self):
        self.assertAlmostEqual(parse_measurement("3-4-5"), 3 + 4 / 12 + 5 / 96, places=12)
        self.assertAlmostEqual(parse_measurement("0-6-0"), 0.5, places=12)
        self.assertAlmostEqual(parse_measurement(" 2-0-4 "), 2 + 4 / 96, places=12)

    def test_parse_decimal(self):
        self.assertEqual(parse_measurement("3.25"), 3.25)
        self.assertEqual(parse_measurement("-1"), -1.0)

    def test_parse_rejects_bad_values(self):
        for text in ("", "abc", "3-12-0", "3-4-8", "3-4", "nan", "inf", "-Infinity"):
            with self.assertRaises(ValueError):
                parse_measurement(text)

    def test_optional_measurement(self):
        self.assertIsNone(parse_optional_measurement("x"))
        self.assertIsNone(parse_optional_measurement(""))
        self.assertIsNone(parse_optional_measurement(None))
        self.assertEqual(parse_optional_measurement("1-0-0"), 1.0)

    def test_format_feet(self):
        self.assertEqual(format_feet(3 + 4 / 12 + 5 / 96), "3-4-5")
        self.assertEqual(format_feet(0.5), "0-6-0")
        self.assertEqual(format_feet(0.0), "0-0-0")

    def test_units_and_svg_resolution(self):
        self.assertEqual(normalize_unit("Feet"), "ft")
        self.assertEqual(normalize_unit("millimetres"), "mm")
        self.assertAlmostEqual(unit_scale("ft", "in"), 12.0)
        svg_unit, scale = resolve_svg_unit("ft", None)
        self.assertEqual(svg_unit, "in")
        self.assertAlmostEqual(scale, 12.0)
        self.assertEqual(resolve_svg_unit("m", None), ("cm", 100.0))
        self.assertEqual(resolve_svg_unit("mm", None), ("mm", 1.0))
        svg_unit, scale = resolve_svg_unit("mm", "cm")
        self.assertEqual(svg_unit, "cm")
        self.assertAlmostEqual(scale, 0.1)
        svg_unit, scale = resolve_svg_unit("ft", "mm")
        self.assertEqual(svg_unit, "mm")
        self.assertAlmostEqual(scale, 304.8)


if __name__ == "__main__":
    unittest.main()
