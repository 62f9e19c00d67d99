import unittest

from errors import ZplConsistencyError
from label_layout import compute_layout
from label_types import (
    Alignment,
    ComputedLayout,
    LabelContent,
    LabelGeometry,
    LabelRequest,
    LabelStyle,
    Point,
)
from zpl_commands import (
    alignment_code,
    batch_zpl,
    escape_zpl_data,
    printer_config_command,
    serialize_label,
    to_command,
    validate_zpl,
)


def _serialize(content: LabelContent, style: LabelStyle | None = None) -> str:
    request = LabelRequest(content=content, style=style or LabelStyle())
    layout = compute_layout(request)
    return serialize_label(
        content, request.geometry, layout, 203, request.style).text


def _field_data(zpl: str) -> list[str]:
    """Return the raw text between each ^FD and its ^FS."""
    parts = []
    for chunk in zpl.split("^FD")[1:]:
        parts.append(chunk.rsplit("^FS", 1)[0])
    return parts


def _has_unescaped_reserved(data: str) -> bool:
    index = 0
    while index < len(data):
        char = data[index]
        if char == "\\":
            index += 2
            continue
        if char in "^~":
            return True
        index += 1
    return False


class EscapeTests(unittest.TestCase):
    def test_reserved_characters(self) -> None:
        self.assertEqual(escape_zpl_data("A^B"), "A\\^B")
        self.assertEqual(escape_zpl_data("A~B"), "A\\~B")
        self.assertEqual(escape_zpl_data("A\\B"), "A\\\\B")

    def test_single_pass(self) -> None:
        self.assertEqual(escape_zpl_data("\\^"), "\\\\\\^")

    def test_plain_and_empty(self) -> None:
        self.assertEqual(escape_zpl_data("ROW-1"), "ROW-1")
        self.assertEqual(escape_zpl_data(""), "")


class ValidateTests(unittest.TestCase):
    def test_valid(self) -> None:
        self.assertEqual(validate_zpl("^XA^FDx^FS^XZ"), (True, None))
        self.assertEqual(validate_zpl("  ^XA\n^XZ\n"), (True, None))

    def test_empty(self) -> None:
        for value in (None, "", "   "):
            ok, error = validate_zpl(value)
            self.assertFalse(ok)
            self.assertIn("empty", error or "")

    def test_missing_markers(self) -> None:
        ok, error = validate_zpl("^FDx^FS^XZ")
        self.assertFalse(ok)
        self.assertIn("^XA", error or "")
        ok, error = validate_zpl("^XA^FDx^FS")
        self.assertFalse(ok)
        self.assertIn("^XZ", error or "")

    def test_to_command_records_result(self) -> None:
        command = to_command("^XA")
        self.assertFalse(command.is_valid)
        self.assertIsNotNone(command.error)
        self.assertEqual(to_command("^XA^XZ").size_bytes, 6)


class SerializeLabelTests(unittest.TestCase):
    def test_reference_output(self) -> None:
        zpl = _serialize(
            LabelContent(
                barcode_value="ROW-FREEZER-60F-SOEJE-W",
                label_text="Freezer",
                description="Row 60F",
            )
        )
        expected = "\n".join(
            [
                "^XA",
                "^PW799",
                "^LL400",
                "^FO111,40",
                "^BY2,3,160",
                "^BCN,160,N,N,N",
                "^FDROW-FREEZER-60F-SOEJE-W^FS",
                "^FO111,224",
                "^A0N,30,30",
                "^FB576,2,0,C,0",
                "^FDFreezer^FS",
                "^FO111,294",
                "^A0N,36,36",
                "^FB576,2,0,C,0",
                "^FDRow 60F^FS",
                "^XZ",
            ]
        ) + "\n"
        self.assertEqual(zpl, expected)

    def test_quantity_only_for_multiple_copies(self) -> None:
        self.assertIn("^PQ3", _serialize(LabelContent(barcode_value="A1", copies=3)))
        self.assertNotIn("^PQ", _serialize(LabelContent(barcode_value="A1", copies=1)))

    def test_text_alignment_codes(self) -> None:
        zpl = _serialize(
            LabelContent(barcode_value="A1", label_text="x", description="y"),
            LabelStyle(
                label_alignment=Alignment.LEFT,
                description_alignment=Alignment.RIGHT,
            ),
        )
        self.assertIn(",2,0,L,0", zpl)
        self.assertIn(",2,0,R,0", zpl)
        self.assertEqual(alignment_code("bogus"), "C")

    def test_reserved_characters_never_unescaped(self) -> None:
        for value in ("A^B", "~X~", "back\\slash", "^XZ", "\\^~"):
            zpl = _serialize(
                LabelContent(
                    barcode_value=value,
                    label_text=value,
                    description=f"{value} and {value}",
                )
            )
            for data in _field_data(zpl):
                self.assertFalse(_has_unescaped_reserved(data), (value, data))
            self.assertTrue(validate_zpl(zpl)[0])

    def test_description_whitespace_collapsed(self) -> None:
        zpl = _serialize(
            LabelContent(barcode_value="A1", description="two\nlines\there"))
        self.assertIn("^FDtwo lines here^FS", zpl)

    def test_every_output_validates(self) -> None:
        for copies in (1, 2, 999):
            for text in ("", "Label"):
                zpl = _serialize(
                    LabelContent(barcode_value="V-1", label_text=text, copies=copies))
                self.assertEqual(validate_zpl(zpl), (True, None))

    def test_invalid_output_raises(self) -> None:
        layout = ComputedLayout(
            barcode_origin=Point(0, 0),
            module_width=2,
            barcode_width_dots=100,
            barcode_height_dots=50,
            label_width_dots=799,
            label_height_dots=400,
        )
        command = serialize_label(
            LabelContent(barcode_value="A1"), LabelGeometry(), layout, 203)
        self.assertTrue(command.is_valid)
        with self.assertRaises(ZplConsistencyError):
            batch_zpl([to_command("not zpl")])


class BatchAndConfigTests(unittest.TestCase):
    def test_batch_concatenates(self) -> None:
        first = to_command("^XA\n^XZ\n")
        second = to_command("^XA\n^PQ2\n^XZ\n")
        batch = batch_zpl([first, second])
        self.assertTrue(batch.is_valid)
        self.assertEqual(batch.text.count("^XA"), 2)
        self.assertEqual(batch.text.count("^XZ"), 2)

    def test_empty_batch_rejected(self) -> None:
        with self.assertRaises(ValueError):
            batch_zpl([])

    def test_printer_config(self) -> None:
        command = printer_config_command(4, 8)
        self.assertEqual(command.text, "^XA\n^PR4\n^MD8\n^XZ\n")

    def test_printer_config_skips_out_of_range(self) -> None:
        command = printer_config_command(0, 40)
        self.assertEqual(command.text, "^XA\n^XZ\n")


if __name__ == "__main__":
    unittest.main()
