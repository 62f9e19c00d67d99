"""Shared text measurement and fitting helpers for label renderers."""

from __future__ import annotations

from typing import Iterator, List

from reportlab.pdfbase.pdfmetrics import stringWidth

from label_types import FittedText

ELLIPSIS = "…"
LINE_SPACING = 1.2


def wrap_text_to_width(
    text: str,
    font_name: str,
    font_size: float,
    max_width_pt: float,
    *,
    hard_wrap: bool = False,
) -> List[str]:
    """Greedily wrap words into lines no wider than ``max_width_pt``.

    A word wider than the line stays on a line of its own unless
    ``hard_wrap`` is set, in which case it is split between characters.
    """

    if not text or max_width_pt <= 0:
        return []

    words = text.split()
    if not words:
        return []

    lines: List[str] = []
    current: List[str] = []
    for word in words:
        tentative = " ".join(current + [word]) if current else word
        if stringWidth(tentative, font_name, font_size) <= max_width_pt:
            current.append(word)
            continue

        if current:
            lines.append(" ".join(current))
            current = []

        if not hard_wrap or stringWidth(word, font_name, font_size) <= max_width_pt:
            current = [word]
            continue

        # single word exceeds width; perform character-level wrap
        partial = ""
        for ch in word:
            candidate = partial + ch
            if stringWidth(candidate, font_name, font_size) > max_width_pt and partial:
                lines.append(partial)
                partial = ch
            else:
                partial = candidate
        if partial:
            current = [partial]

    if current:
        lines.append(" ".join(current))
    return lines


def truncate_to_width(
    text: str,
    font_name: str,
    font_size: float,
    max_width_pt: float,
) -> str:
    """Drop trailing characters and append an ellipsis until ``text`` fits."""

    if stringWidth(text, font_name, font_size) <= max_width_pt:
        return text

    kept = text
    while kept:
        candidate = kept.rstrip() + ELLIPSIS
        if stringWidth(candidate, font_name, font_size) <= max_width_pt:
            return candidate
        kept = kept[:-1]
    return ELLIPSIS


def _candidate_sizes(start: float, minimum: float, step: float) -> Iterator[float]:
    size = start
    while size > minimum:
        yield size
        size -= step
    yield minimum


def fit_text(
    text: str,
    start_font_size: float,
    min_font_size: float,
    container_width: float,
    container_height: float,
    *,
    font_name: str = "Helvetica",
    step: float = 2,
    line_spacing: float = LINE_SPACING,
) -> FittedText:
    """Find a font size and line breaks that fit ``text`` in a box.

    Each size from ``start_font_size`` down to ``min_font_size`` is tried as a
    single line and then word-wrapped. When nothing fits, the text is
    truncated to one line at the minimum size with ``fits`` set to ``False``.

    An ellipsis marks characters that were cut. Text whose single line is
    already narrow enough is returned whole even when ``fits`` is ``False``;
    that only happens when the box is shorter than one line at the minimum
    size, so callers must check ``fits`` rather than look for the ellipsis.
    """

    normalized = " ".join((text or "").split())
    if not normalized:
        return FittedText(lines=[], font_size=start_font_size, fits=True)

    minimum = min(min_font_size, start_font_size)
    step = max(step, 0.5)

    for size in _candidate_sizes(start_font_size, minimum, step):
        line_height = size * line_spacing
        if line_height > container_height:
            continue

        if stringWidth(normalized, font_name, size) <= container_width:
            return FittedText(lines=[normalized], font_size=size, fits=True)

        wrapped = wrap_text_to_width(normalized, font_name, size, container_width)
        if (
            wrapped
            and len(wrapped) * line_height <= container_height
            and all(
                stringWidth(line, font_name, size) <= container_width
                for line in wrapped
            )
        ):
            return FittedText(lines=wrapped, font_size=size, fits=True)

    truncated = truncate_to_width(normalized, font_name, minimum, container_width)
    return FittedText(lines=[truncated], font_size=minimum, fits=False)
