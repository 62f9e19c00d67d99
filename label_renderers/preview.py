"""On-screen previews of a label, drawn with ReportLab."""

from __future__ import annotations

import logging
from enum import StrEnum
from io import BytesIO
from typing import Sequence

import fitz
from reportlab.graphics.barcode import code128
from reportlab.pdfgen import canvas

from fonts import FontSettings, build_font_config
from label_generation import generate_label
from label_settings import EngineSettings
from label_types import Alignment, ComputedLayout, LabelRequest, Point
from units import dots_to_points
from .base import LabelRenderer, RendererOption
from .utils import fit_text

logger = logging.getLogger(__name__)

OUTLINE_GRAY = 0.8
# ^A0 glyphs sit roughly this far below the field origin, as a share of height.
BASELINE_RATIO = 0.8


class Outline(StrEnum):
    OFF = "off"
    ON = "on"


def _draw_barcode(
    canvas_obj: canvas.Canvas,
    request: LabelRequest,
    layout: ComputedLayout,
    label_height_pt: float,
) -> None:
    dpi = request.device.dpi
    value = request.content.barcode_value
    bar_height = dots_to_points(layout.barcode_height_dots, dpi)

    # Scale the bars so the drawn symbol matches the width the printer produces.
    unit_symbol = code128.Code128(value, barWidth=1.0, quiet=False, humanReadable=False)
    modules = unit_symbol.width or 1.0
    bar_width = dots_to_points(layout.barcode_width_dots, dpi) / modules

    barcode = code128.Code128(
        value,
        barWidth=bar_width,
        barHeight=bar_height,
        quiet=False,
        humanReadable=False,
    )
    x = dots_to_points(layout.barcode_origin.x, dpi)
    y = label_height_pt - dots_to_points(layout.barcode_origin.y, dpi) - bar_height
    barcode.drawOn(canvas_obj, x, y)


def _draw_text_field(
    canvas_obj: canvas.Canvas,
    text: str,
    origin: Point,
    font: FontSettings,
    alignment: Alignment,
    request: LabelRequest,
    layout: ComputedLayout,
    settings: EngineSettings,
    label_height_pt: float,
) -> bool:
    """Draw ``text`` inside its field block; return ``False`` if truncated."""

    dpi = request.device.dpi
    block_width = dots_to_points(layout.barcode_width_dots, dpi)
    block_height = font.size * settings.text_block_lines
    fitted = fit_text(
        text,
        font.size,
        settings.min_font_size,
        block_width,
        block_height,
        font_name=font.font_name,
        step=settings.font_size_step,
        line_spacing=1.0,
    )

    left = dots_to_points(origin.x, dpi)
    top = label_height_pt - dots_to_points(origin.y, dpi)
    canvas_obj.setFont(font.font_name, fitted.font_size)
    for index, line in enumerate(fitted.lines):
        baseline = top - index * fitted.font_size - fitted.font_size * BASELINE_RATIO
        if alignment is Alignment.LEFT:
            canvas_obj.drawString(left, baseline, line)
        elif alignment is Alignment.RIGHT:
            canvas_obj.drawRightString(left + block_width, baseline, line)
        else:
            canvas_obj.drawCentredString(left + block_width / 2.0, baseline, line)
    if not fitted.fits:
        logger.warning(
            "Label '%s': text truncated to %d pt in the preview",
            request.content.barcode_value,
            fitted.font_size,
        )
    return fitted.fits


def _draw_outline(canvas_obj: canvas.Canvas, width: float, height: float) -> None:
    canvas_obj.saveState()
    canvas_obj.setStrokeGray(OUTLINE_GRAY)
    canvas_obj.setLineWidth(0.75)
    canvas_obj.rect(0, 0, width, height)
    canvas_obj.restoreState()


class PdfPreviewRenderer(LabelRenderer):
    """Vector preview of labels, one page per label."""

    name = "pdf"
    media_type = "application/pdf"
    file_suffix = ".pdf"

    @property
    def supports_batch(self) -> bool:  # type: ignore[override]
        return True

    def available_options(self) -> list[RendererOption]:
        return [
            RendererOption(
                name="outline",
                possible_values=[o.value for o in Outline],
            ),
        ]

    @property
    def outline(self) -> bool:
        value = (self.options.get("outline") or Outline.ON.value).lower()
        if value in Outline._value2member_map_:
            return Outline(value) is Outline.ON
        return True

    def render_label(self, request: LabelRequest) -> bytes:
        return self._render_pdf([request])

    def render_batch(self, requests: Sequence[LabelRequest]) -> bytes:
        return self._render_pdf(requests)

    def _render_pdf(self, requests: Sequence[LabelRequest]) -> bytes:
        buffer = BytesIO()
        canvas_obj = canvas.Canvas(buffer)
        for request in requests:
            self._draw_page(canvas_obj, request)
            canvas_obj.showPage()
        canvas_obj.save()
        return buffer.getvalue()

    def _draw_page(self, canvas_obj: canvas.Canvas, request: LabelRequest) -> None:
        generated = generate_label(request, self.settings)
        layout = generated.layout
        dpi = request.device.dpi
        width = dots_to_points(layout.label_width_dots, dpi)
        height = dots_to_points(layout.label_height_dots, dpi)
        canvas_obj.setPageSize((width, height))

        _draw_barcode(canvas_obj, request, layout, height)

        fonts = build_font_config(
            label_size=dots_to_points(layout.label_font_dots, dpi),
            description_size=dots_to_points(layout.description_font_dots, dpi),
        )
        content = request.content
        style = request.style
        if layout.label_text_origin is not None:
            _draw_text_field(
                canvas_obj,
                content.label_text,
                layout.label_text_origin,
                fonts.label,
                style.label_alignment,
                request,
                layout,
                self.settings,
                height,
            )
        if layout.description_origin is not None:
            _draw_text_field(
                canvas_obj,
                content.description,
                layout.description_origin,
                fonts.description,
                style.description_alignment,
                request,
                layout,
                self.settings,
                height,
            )

        if self.outline:
            _draw_outline(canvas_obj, width, height)


class PngPreviewRenderer(PdfPreviewRenderer):
    """Raster preview at the printer's resolution."""

    name = "png"
    media_type = "image/png"
    file_suffix = ".png"

    @property
    def supports_batch(self) -> bool:  # type: ignore[override]
        return False

    def render_label(self, request: LabelRequest) -> bytes:
        pdf_bytes = self._render_pdf([request])
        with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
            page = doc.load_page(0)
            pix = page.get_pixmap(dpi=request.device.dpi)
            return pix.tobytes("png")

    def render_batch(self, requests: Sequence[LabelRequest]) -> bytes:
        return LabelRenderer.render_batch(self, requests)


RENDERERS = {"pdf": PdfPreviewRenderer, "png": PngPreviewRenderer}
