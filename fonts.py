"""Font selection for previews and font size conversion for ZPL output."""

from __future__ import annotations

from dataclasses import dataclass

from reportlab.pdfbase import pdfmetrics

from label_settings import EngineSettings

DEFAULT_FONT_FAMILY = "Helvetica"


@dataclass(frozen=True)
class FontSettings:
    """Resolved font name/size pair registered with ReportLab."""

    font_name: str
    size: float


@dataclass(frozen=True)
class FontConfig:
    """Fonts used for the two text fields of a label."""

    label: FontSettings
    description: FontSettings


def _registered_font_name(family: str) -> str:
    try:
        return pdfmetrics.getFont(family).fontName
    except KeyError as exc:
        raise SystemExit(
            f"Unknown font family '{family}'. Use a ReportLab standard font "
            "or register the TTF first."
        ) from exc


def build_font_config(
    label_size: float,
    description_size: float,
    family: str = DEFAULT_FONT_FAMILY,
) -> FontConfig:
    font_name = _registered_font_name(family)
    return FontConfig(
        label=FontSettings(font_name=font_name, size=label_size),
        description=FontSettings(font_name=font_name, size=description_size),
    )


def device_font_dots(font_size_points: int, settings: EngineSettings) -> int:
    """Convert a point size into a ZPL ``^A0`` height in dots.

    This is a flat scale calibrated for 203 dpi printers, never smaller than
    the device's minimum legible height.
    """

    return max(
        settings.min_device_font_dots,
        font_size_points * settings.device_font_scale,
    )


__all__ = [
    "FontConfig",
    "FontSettings",
    "build_font_config",
    "device_font_dots",
]
