"""Input validation and dot-level placement of label fields."""

from __future__ import annotations

import logging

from code128 import estimate_width_dots, exact_module_width, select_module_width
from errors import LabelValidationError
from fonts import DEFAULT_FONT_FAMILY, device_font_dots
from label_renderers.utils import wrap_text_to_width
from label_settings import EngineSettings
from label_types import (
    Alignment,
    ComputedLayout,
    LabelContent,
    LabelGeometry,
    LabelRequest,
    LabelStyle,
    Point,
)
from units import mm_to_dots

logger = logging.getLogger(__name__)

MAX_BARCODE_LENGTH = 35
MAX_LABEL_TEXT_LENGTH = 35
MAX_DESCRIPTION_LENGTH = 500
MAX_COPIES = 999
MAX_ASCII = 127
MAX_DPI = 600

LABEL_SIZE_RANGE_MM = (10.0, 300.0)
BARCODE_WIDTH_RANGE_MM = (5.0, 250.0)
BARCODE_HEIGHT_RANGE_MM = (5.0, 100.0)
MARGIN_RANGE_MM = (0.0, 50.0)
FONT_SIZE_RANGE = (6, 72)

_DEFAULT_SETTINGS = EngineSettings()


def validate_content(content: LabelContent) -> None:
    """Reject content that cannot be encoded or printed."""

    value = content.barcode_value
    if not isinstance(value, str) or not value.strip():
        raise LabelValidationError("barcode_value", "Barcode value is required")
    if len(value) > MAX_BARCODE_LENGTH:
        raise LabelValidationError(
            "barcode_value",
            f"Barcode value cannot exceed {MAX_BARCODE_LENGTH} characters "
            f"(got {len(value)})",
        )
    for index, char in enumerate(value):
        if ord(char) > MAX_ASCII:
            raise LabelValidationError(
                "barcode_value",
                f"Barcode value contains {char!r} at position {index}; "
                "only ASCII characters (0-127) can be encoded in Code 128",
            )

    if len(content.label_text or "") > MAX_LABEL_TEXT_LENGTH:
        raise LabelValidationError(
            "label_text",
            f"Label text cannot exceed {MAX_LABEL_TEXT_LENGTH} characters",
        )
    if len(content.description or "") > MAX_DESCRIPTION_LENGTH:
        raise LabelValidationError(
            "description",
            f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters",
        )

    copies = content.copies
    if isinstance(copies, bool) or not isinstance(copies, int):
        raise LabelValidationError("copies", "Copies must be a whole number")
    if not 1 <= copies <= MAX_COPIES:
        raise LabelValidationError(
            "copies", f"Copies must be between 1 and {MAX_COPIES}"
        )


def validate_style(style: LabelStyle) -> None:
    low, high = FONT_SIZE_RANGE
    for name in ("label_font_size", "description_font_size"):
        size = getattr(style, name)
        if not low <= size <= high:
            raise LabelValidationError(
                name, f"Font size must be between {low} and {high}"
            )


def _check_range(name: str, value: float, bounds: tuple[float, float]) -> None:
    low, high = bounds
    if not low <= value <= high:
        raise LabelValidationError(
            name, f"Must be between {low:g}mm and {high:g}mm (got {value:g})"
        )


def validate_geometry(
    geometry: LabelGeometry,
    settings: EngineSettings = _DEFAULT_SETTINGS,
) -> None:
    """Reject geometry whose barcode or minimum text block cannot fit."""

    _check_range("label_width_mm", geometry.label_width_mm, LABEL_SIZE_RANGE_MM)
    _check_range("label_height_mm", geometry.label_height_mm, LABEL_SIZE_RANGE_MM)
    _check_range(
        "barcode_width_mm", geometry.barcode_width_mm, BARCODE_WIDTH_RANGE_MM)
    _check_range(
        "barcode_height_mm", geometry.barcode_height_mm, BARCODE_HEIGHT_RANGE_MM)
    for name in (
        "top_margin_mm",
        "horizontal_margin_mm",
        "text_spacing_mm",
        "bottom_margin_mm",
    ):
        _check_range(name, getattr(geometry, name), MARGIN_RANGE_MM)

    if (
        geometry.barcode_width_mm + 2 * geometry.horizontal_margin_mm
        > geometry.label_width_mm
    ):
        raise LabelValidationError(
            "barcode_width_mm", "Barcode width exceeds label width"
        )

    required_height = (
        geometry.top_margin_mm
        + geometry.barcode_height_mm
        + geometry.text_spacing_mm
        + settings.min_text_allowance_mm
        + geometry.bottom_margin_mm
    )
    if required_height > geometry.label_height_mm:
        raise LabelValidationError(
            "label_height_mm",
            f"Content needs {required_height:g}mm but the label is "
            f"{geometry.label_height_mm:g}mm tall",
        )


def validate_request(
    request: LabelRequest,
    settings: EngineSettings = _DEFAULT_SETTINGS,
) -> None:
    if not 0 < request.device.dpi <= MAX_DPI:
        raise LabelValidationError(
            "dpi", f"DPI must be between 1 and {MAX_DPI} (got {request.device.dpi})"
        )
    validate_content(request.content)
    validate_geometry(request.geometry, settings)
    validate_style(request.style)


def printable_width_dots(geometry: LabelGeometry, dpi: int) -> int:
    """Label width minus the left and right margins, in dots."""

    label_width = mm_to_dots(geometry.label_width_mm, dpi)
    margin = mm_to_dots(geometry.horizontal_margin_mm, dpi)
    return label_width - 2 * margin


def _place_barcode(
    geometry: LabelGeometry,
    content: LabelContent,
    module_width: int,
    dpi: int,
    settings: EngineSettings,
) -> tuple[Point, int, bool]:
    margin = mm_to_dots(geometry.horizontal_margin_mm, dpi)
    printable = printable_width_dots(geometry, dpi)
    actual = estimate_width_dots(
        len(content.barcode_value), module_width, settings)
    y = mm_to_dots(geometry.top_margin_mm, dpi)

    if actual > printable:
        logger.warning(
            "Barcode '%s' is %d dots wide but only %d fit; aligning left",
            content.barcode_value,
            actual,
            printable,
        )
        return Point(margin, y), actual, True

    return Point(margin + (printable - actual) // 2, y), actual, False


def compute_barcode_position(
    geometry: LabelGeometry,
    content: LabelContent,
    module_width: int,
    dpi: int,
    settings: EngineSettings = _DEFAULT_SETTINGS,
) -> Point:
    """Centre the barcode in the printable band; left-align it on overflow."""

    origin, _, _ = _place_barcode(geometry, content, module_width, dpi, settings)
    return origin


def compute_text_field_origin(
    label_width_dots: int,
    alignment: Alignment | str,
    field_width_dots: int,
    inset_dots: int = _DEFAULT_SETTINGS.text_inset_dots,
) -> int:
    """Return the x coordinate of a text field block."""

    alignment = Alignment.parse(str(alignment))
    if alignment is Alignment.LEFT:
        x = inset_dots
    elif alignment is Alignment.RIGHT:
        x = label_width_dots - field_width_dots - inset_dots
    else:
        x = (label_width_dots - field_width_dots) // 2
    return max(x, 0)


def _clipped_text_warning(
    name: str,
    text: str,
    font_dots: int,
    block_width_dots: int,
    block_lines: int,
) -> str | None:
    """Estimate whether ``^FB`` will drop lines of ``text``.

    ``^A0`` is measured with the preview font; the printer's glyphs differ
    slightly, so this is an estimate.
    """

    lines = wrap_text_to_width(
        " ".join(text.split()), DEFAULT_FONT_FAMILY, font_dots, block_width_dots)
    if len(lines) <= block_lines:
        return None
    message = (
        f"{name} needs about {len(lines)} lines at {font_dots} dots; "
        f"the printer keeps {block_lines}"
    )
    logger.warning(message)
    return message


def compute_layout(
    request: LabelRequest,
    settings: EngineSettings = _DEFAULT_SETTINGS,
) -> ComputedLayout:
    """Compute dot positions for the barcode and both text fields.

    The request must already have passed :func:`validate_request`. Content that
    does not fit is still placed; the reasons are listed in ``warnings``.
    """

    geometry = request.geometry
    content = request.content
    style = request.style
    dpi = request.device.dpi

    label_width = mm_to_dots(geometry.label_width_mm, dpi)
    label_height = mm_to_dots(geometry.label_height_mm, dpi)
    barcode_height = mm_to_dots(geometry.barcode_height_mm, dpi)
    printable = printable_width_dots(geometry, dpi)
    warnings: list[str] = []

    module_width = select_module_width(content.barcode_value, printable, settings)
    if exact_module_width(content.barcode_value, printable) < settings.min_module_width:
        warnings.append(
            f"barcode needs more than {printable} dots even at the narrowest "
            "module width"
        )

    origin, actual_width, overflow = _place_barcode(
        geometry, content, module_width, dpi, settings)
    if overflow:
        warnings.append(
            f"barcode is {actual_width} dots wide; printable width is {printable}"
        )

    next_y = origin.y + barcode_height + mm_to_dots(geometry.text_spacing_mm, dpi)
    label_origin: Point | None = None
    description_origin: Point | None = None
    label_font = device_font_dots(style.label_font_size, settings)
    description_font = device_font_dots(style.description_font_size, settings)
    bottom = next_y

    if (content.label_text or "").strip():
        x = compute_text_field_origin(
            label_width,
            style.label_alignment,
            actual_width,
            settings.text_inset_dots,
        )
        label_origin = Point(x, next_y)
        clipped = _clipped_text_warning(
            "label text",
            content.label_text,
            label_font,
            actual_width,
            settings.text_block_lines,
        )
        if clipped:
            warnings.append(clipped)
        bottom = next_y + label_font * settings.text_block_lines
        next_y = bottom + settings.field_gap_dots

    if (content.description or "").strip():
        x = compute_text_field_origin(
            label_width,
            style.description_alignment,
            actual_width,
            settings.text_inset_dots,
        )
        description_origin = Point(x, next_y)
        clipped = _clipped_text_warning(
            "description",
            content.description,
            description_font,
            actual_width,
            settings.text_block_lines,
        )
        if clipped:
            warnings.append(clipped)
        bottom = next_y + description_font * settings.text_block_lines

    if bottom > label_height:
        message = (
            f"text ends at {bottom} dots, past the label edge at "
            f"{label_height}"
        )
        logger.warning("Label '%s': %s", content.barcode_value, message)
        warnings.append(message)

    return ComputedLayout(
        barcode_origin=origin,
        module_width=module_width,
        barcode_width_dots=actual_width,
        barcode_height_dots=barcode_height,
        label_width_dots=label_width,
        label_height_dots=label_height,
        label_text_origin=label_origin,
        description_origin=description_origin,
        label_font_dots=label_font,
        description_font_dots=description_font,
        warnings=tuple(warnings),
    )
