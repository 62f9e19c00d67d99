"""Millimetre, printer dot and PDF point conversions."""

from __future__ import annotations

MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0


def _check_dpi(dpi: int) -> None:
    if dpi <= 0:
        raise ValueError(f"DPI must be positive, got {dpi}")


def mm_to_dots(mm: float, dpi: int) -> int:
    """Convert millimetres to whole printer dots."""

    _check_dpi(dpi)
    return int(round(mm * dpi / MM_PER_INCH))


def dots_to_mm(dots: int, dpi: int) -> float:
    _check_dpi(dpi)
    return dots * MM_PER_INCH / dpi


def dots_to_points(dots: float, dpi: int) -> float:
    """Convert printer dots to PDF points (1/72 inch)."""

    _check_dpi(dpi)
    return dots * POINTS_PER_INCH / dpi
