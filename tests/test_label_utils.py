import unittest

from reportlab.pdfbase.pdfmetrics import stringWidth

from label_renderers.utils import (
    ELLIPSIS,
    fit_text,
    truncate_to_width,
    wrap_text_to_width,
)


class LabelUtilsTests(unittest.TestCase):
    def test_wrap_text_to_width_empty(self) -> None:
        self.assertEqual(wrap_text_to_width("", "Helvetica", 12, 100), [])
        self.assertEqual(wrap_text_to_width("Hello", "Helvetica", 12, 0), [])

    def test_wrap_text_to_width_single_line(self) -> None:
        lines = wrap_text_to_width("Hello world", "Helvetica", 12, 1000)
        self.assertEqual(lines, ["Hello world"])

    def test_wrap_text_to_width_enforces_width(self) -> None:
        max_width = 40
        lines = wrap_text_to_width("Hello world", "Helvetica", 12, max_width)
        self.assertGreater(len(lines), 1)
        for line in lines:
            self.assertLessEqual(stringWidth(line, "Helvetica", 12), max_width)

    def test_wrap_text_to_width_hard_wrap_splits_words(self) -> None:
        lines = wrap_text_to_width(
            "Supercalifragilistic", "Helvetica", 12, 30, hard_wrap=True)
        self.assertGreater(len(lines), 1)
        self.assertEqual("".join(lines), "Supercalifragilistic")

    def test_truncate_to_width(self) -> None:
        self.assertEqual(truncate_to_width("Hi", "Helvetica", 12, 100), "Hi")
        text = truncate_to_width("A long line of text", "Helvetica", 12, 50)
        self.assertTrue(text.endswith(ELLIPSIS))
        self.assertLessEqual(stringWidth(text, "Helvetica", 12), 50)


class FitTextTests(unittest.TestCase):
    def test_fits_at_start_size(self) -> None:
        fitted = fit_text("Freezer", 15, 6, 200, 30)
        self.assertEqual(fitted.lines, ["Freezer"])
        self.assertEqual(fitted.font_size, 15)
        self.assertTrue(fitted.fits)

    def test_wraps_before_shrinking(self) -> None:
        fitted = fit_text("Row sixty freezer", 12, 6, 70, 40)
        self.assertTrue(fitted.fits)
        self.assertGreater(len(fitted.lines), 1)
        for line in fitted.lines:
            self.assertLessEqual(
                stringWidth(line, "Helvetica", fitted.font_size), 70)

    def test_shrinks_to_fit(self) -> None:
        fitted = fit_text("Freezer", 20, 6, 40, 100)
        self.assertTrue(fitted.fits)
        self.assertLess(fitted.font_size, 20)
        self.assertGreaterEqual(fitted.font_size, 6)

    def test_truncates_at_minimum_size(self) -> None:
        text = "A description far too long for the label " * 10
        fitted = fit_text(text, 18, 6, 120, 10)
        self.assertFalse(fitted.fits)
        self.assertEqual(fitted.font_size, 6)
        self.assertEqual(len(fitted.lines), 1)
        self.assertTrue(fitted.lines[0].endswith(ELLIPSIS))
        self.assertLessEqual(stringWidth(fitted.lines[0], "Helvetica", 6), 120)

    def test_too_short_box_keeps_narrow_text_whole(self) -> None:
        fitted = fit_text("Hi", 18, 6, 200, 2)
        self.assertFalse(fitted.fits)
        self.assertEqual(fitted.lines, ["Hi"])
        self.assertEqual(fitted.font_size, 6)
        self.assertFalse(fitted.lines[0].endswith(ELLIPSIS))

    def test_empty_text(self) -> None:
        fitted = fit_text("   ", 18, 6, 120, 10)
        self.assertEqual(fitted.lines, [])
        self.assertTrue(fitted.fits)

    def test_never_raises_on_degenerate_boxes(self) -> None:
        for width, height in ((0, 0), (1, 1), (5, 1000), (1000, 2)):
            fitted = fit_text("word " * 200, 72, 6, width, height)
            self.assertEqual(len(fitted.lines), 1)


if __name__ == "__main__":
    unittest.main()
