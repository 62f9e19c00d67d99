"""ZPL serialization and structural validation."""

from __future__ import annotations

import re
from typing import Iterable

from errors import ZplConsistencyError
from label_types import (
    Alignment,
    ComputedLayout,
    LabelContent,
    LabelGeometry,
    LabelStyle,
    Point,
    ZplCommand,
)
from units import mm_to_dots

START_FORMAT = "^XA"
END_FORMAT = "^XZ"
HOST_STATUS_REQUEST = "~HS"
# ^BY wide-to-narrow ratio; Code 128 ignores it but the directive requires it.
BAR_RATIO = 3

_RESERVED = re.compile(r"([\\^~])")
_ALIGNMENT_CODES = {
    Alignment.LEFT: "L",
    Alignment.CENTER: "C",
    Alignment.RIGHT: "R",
}


def escape_zpl_data(text: str) -> str:
    """Backslash-escape ``^``, ``~`` and ``\\`` so data cannot end a field."""

    if not text:
        return ""
    return _RESERVED.sub(r"\\\1", text)


def alignment_code(alignment: Alignment | str) -> str:
    return _ALIGNMENT_CODES[Alignment.parse(str(alignment))]


def validate_zpl(command: str | None) -> tuple[bool, str | None]:
    """Check start and end markers; not a grammar check."""

    if not command or not command.strip():
        return False, "ZPL command is empty"

    trimmed = command.strip()
    if not trimmed.startswith(START_FORMAT):
        return False, f"ZPL command must start with {START_FORMAT}"
    if trimmed.find(END_FORMAT, len(START_FORMAT)) == -1:
        return False, f"ZPL command must end with {END_FORMAT}"
    return True, None


def to_command(text: str) -> ZplCommand:
    """Wrap ``text`` with the result of :func:`validate_zpl`."""

    is_valid, error = validate_zpl(text)
    return ZplCommand(text=text, is_valid=is_valid, error=error)


def _checked(text: str) -> ZplCommand:
    command = to_command(text)
    if not command.is_valid:
        raise ZplConsistencyError(
            f"Generated ZPL failed validation: {command.error}"
        )
    return command


def _text_field(
    lines: list[str],
    origin: Point,
    font_dots: int,
    block_width: int,
    block_lines: int,
    alignment: Alignment,
    text: str,
) -> None:
    normalized = " ".join(text.split())
    lines.append(f"^FO{origin.x},{origin.y}")
    lines.append(f"^A0N,{font_dots},{font_dots}")
    lines.append(
        f"^FB{block_width},{block_lines},0,{alignment_code(alignment)},0"
    )
    lines.append(f"^FD{escape_zpl_data(normalized)}^FS")


def serialize_label(
    content: LabelContent,
    geometry: LabelGeometry,
    layout: ComputedLayout,
    dpi: int,
    style: LabelStyle | None = None,
    block_lines: int = 2,
) -> ZplCommand:
    """Emit the ZPL format for one label.

    Text blocks use the rendered barcode width so centred text lines up with
    the bars whatever module width was chosen.
    """

    style = style or LabelStyle()
    lines = [
        START_FORMAT,
        f"^PW{mm_to_dots(geometry.label_width_mm, dpi)}",
        f"^LL{mm_to_dots(geometry.label_height_mm, dpi)}",
    ]
    if content.copies > 1:
        lines.append(f"^PQ{content.copies}")

    origin = layout.barcode_origin
    lines.append(f"^FO{origin.x},{origin.y}")
    lines.append(
        f"^BY{layout.module_width},{BAR_RATIO},{layout.barcode_height_dots}"
    )
    lines.append(f"^BCN,{layout.barcode_height_dots},N,N,N")
    lines.append(f"^FD{escape_zpl_data(content.barcode_value)}^FS")

    if layout.label_text_origin is not None and content.label_text.strip():
        _text_field(
            lines,
            layout.label_text_origin,
            layout.label_font_dots,
            layout.barcode_width_dots,
            block_lines,
            style.label_alignment,
            content.label_text,
        )

    if layout.description_origin is not None and content.description.strip():
        _text_field(
            lines,
            layout.description_origin,
            layout.description_font_dots,
            layout.barcode_width_dots,
            block_lines,
            style.description_alignment,
            content.description,
        )

    lines.append(END_FORMAT)
    return _checked("\n".join(lines) + "\n")


def batch_zpl(commands: Iterable[ZplCommand]) -> ZplCommand:
    """Concatenate label formats into one buffer for a single transmission."""

    parts = [command.text for command in commands]
    if not parts:
        raise ValueError("Batch contains no labels")
    return _checked("\n".join(parts))


def printer_config_command(print_speed: int, print_density: int) -> ZplCommand:
    """Return a format that sets print speed (^PR) and darkness (^MD)."""

    lines = [START_FORMAT]
    if print_speed > 0:
        lines.append(f"^PR{print_speed}")
    if 0 <= print_density <= 30:
        lines.append(f"^MD{print_density}")
    lines.append(END_FORMAT)
    return _checked("\n".join(lines) + "\n")
