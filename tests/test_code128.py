import unittest

from code128 import (
    estimate_width_dots,
    exact_module_width,
    module_count,
    narrow_module_override,
    select_module_width,
)
from label_settings import EngineSettings


class ModuleCountTests(unittest.TestCase):
    def test_includes_start_check_and_stop(self) -> None:
        self.assertEqual(module_count(0), 35)
        self.assertEqual(module_count(23), 288)
        self.assertEqual(module_count(35), 420)

    def test_negative_length_rejected(self) -> None:
        with self.assertRaises(ValueError):
            module_count(-1)


class EstimateWidthTests(unittest.TestCase):
    def test_width_scales_with_module_width(self) -> None:
        self.assertEqual(estimate_width_dots(23, 2), 576)
        self.assertEqual(estimate_width_dots(23, 3), 864)

    def test_narrow_modules_use_fixed_width(self) -> None:
        self.assertEqual(estimate_width_dots(5, 1), 719)
        self.assertEqual(estimate_width_dots(35, 1), 719)

    def test_fixed_width_can_be_disabled(self) -> None:
        settings = EngineSettings(narrow_symbol_width_dots=None)
        self.assertIsNone(narrow_module_override(1, settings))
        self.assertEqual(estimate_width_dots(23, 1, settings), 288)

    def test_override_only_applies_to_width_one(self) -> None:
        self.assertIsNone(narrow_module_override(2))

    def test_module_width_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            estimate_width_dots(10, 0)


class SelectModuleWidthTests(unittest.TestCase):
    value = "ROW-FREEZER-60F-SOEJE-W"

    def test_reference_label_prefers_two(self) -> None:
        self.assertAlmostEqual(exact_module_width(self.value, 719), 719 / 288)
        self.assertEqual(select_module_width(self.value, 719), 2)

    def test_wide_band_still_prefers_two(self) -> None:
        self.assertEqual(select_module_width(self.value, 288 * 6), 2)
        self.assertEqual(select_module_width(self.value, 288 * 20), 2)

    def test_narrow_band_uses_one(self) -> None:
        self.assertEqual(select_module_width(self.value, 400), 1)

    def test_too_narrow_falls_back_to_minimum(self) -> None:
        with self.assertLogs("code128", level="WARNING"):
            self.assertEqual(select_module_width(self.value, 100), 1)

    def test_preferred_width_is_configurable(self) -> None:
        settings = EngineSettings(preferred_module_width=4)
        self.assertEqual(select_module_width(self.value, 288 * 5, settings), 4)
        self.assertEqual(select_module_width(self.value, 288 * 3, settings), 3)

    def test_monotonic_until_preferred(self) -> None:
        for value in ("A", "ROW-1", self.value, "X" * 35):
            previous = 0
            for printable in range(50, 3000, 13):
                width = select_module_width(value, printable)
                self.assertGreaterEqual(width, previous, (value, printable))
                self.assertLessEqual(width, 2)
                previous = width


if __name__ == "__main__":
    unittest.main()
