from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


DEFAULT_DPI = 203


class Alignment(StrEnum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"

    @classmethod
    def parse(cls, value: str | None) -> Alignment:
        """Return the alignment for ``value``, falling back to center."""

        key = (value or "").strip().lower()
        if key in cls._value2member_map_:
            return cls(key)
        return cls.CENTER


@dataclass(frozen=True)
class DeviceProfile:
    dpi: int = DEFAULT_DPI


@dataclass(frozen=True)
class LabelGeometry:
    """Physical label and barcode dimensions, all in millimetres."""

    label_width_mm: float = 100.0
    label_height_mm: float = 50.0
    barcode_width_mm: float = 80.0
    barcode_height_mm: float = 20.0
    top_margin_mm: float = 5.0
    horizontal_margin_mm: float = 5.0
    text_spacing_mm: float = 3.0
    bottom_margin_mm: float = 5.0


@dataclass(frozen=True)
class LabelContent:
    """Textual payload to encode and print on a label."""

    barcode_value: str
    label_text: str = ""
    description: str = ""
    copies: int = 1


@dataclass(frozen=True)
class LabelStyle:
    label_font_size: int = 15
    description_font_size: int = 18
    label_alignment: Alignment = Alignment.CENTER
    description_alignment: Alignment = Alignment.CENTER


@dataclass(frozen=True)
class LabelRequest:
    """Everything a renderer needs to produce one label."""

    content: LabelContent
    geometry: LabelGeometry = field(default_factory=LabelGeometry)
    style: LabelStyle = field(default_factory=LabelStyle)
    device: DeviceProfile = field(default_factory=DeviceProfile)


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class ComputedLayout:
    """Dot coordinates for every field of a label."""

    barcode_origin: Point
    module_width: int
    barcode_width_dots: int
    barcode_height_dots: int
    label_width_dots: int
    label_height_dots: int
    label_text_origin: Point | None = None
    description_origin: Point | None = None
    label_font_dots: int = 0
    description_font_dots: int = 0
    warnings: tuple[str, ...] = ()

    @property
    def overflow(self) -> bool:
        return bool(self.warnings)


@dataclass(frozen=True)
class ZplCommand:
    """A ZPL command buffer ready to hand to a printer transport."""

    text: str
    is_valid: bool
    error: str | None = None

    @property
    def data(self) -> bytes:
        return self.text.encode("utf-8")

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class FittedText:
    lines: list[str]
    font_size: float
    fits: bool
