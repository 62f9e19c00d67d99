"""Label generation pipeline and output helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Sequence

from errors import LabelValidationError
from label_layout import compute_layout, validate_request
from label_renderers.base import LabelRenderer
from label_settings import EngineSettings
from label_types import (
    ComputedLayout,
    DeviceProfile,
    LabelContent,
    LabelGeometry,
    LabelRequest,
    ZplCommand,
)
from zpl_commands import batch_zpl, serialize_label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedLabel:
    request: LabelRequest
    layout: ComputedLayout
    command: ZplCommand

    @property
    def warnings(self) -> tuple[str, ...]:
        return self.layout.warnings


@dataclass(frozen=True)
class BatchItemError:
    index: int
    barcode_value: str
    field: str
    message: str


@dataclass(frozen=True)
class BatchResult:
    labels: list[GeneratedLabel] = field(default_factory=list)
    errors: list[BatchItemError] = field(default_factory=list)

    @property
    def command(self) -> ZplCommand:
        return batch_zpl(label.command for label in self.labels)


def generate_label(
    request: LabelRequest,
    settings: EngineSettings | None = None,
) -> GeneratedLabel:
    """Validate ``request``, lay it out and serialize it to ZPL.

    Raises :class:`LabelValidationError` for bad input. Layout overflow is not
    an error; it is reported through ``GeneratedLabel.warnings``.
    """

    settings = settings or EngineSettings()
    validate_request(request, settings)
    layout = compute_layout(request, settings)
    command = serialize_label(
        request.content,
        request.geometry,
        layout,
        request.device.dpi,
        request.style,
        block_lines=settings.text_block_lines,
    )
    logger.debug(
        "Generated %d-byte ZPL for '%s' (module width %d)",
        command.size_bytes,
        request.content.barcode_value,
        layout.module_width,
    )
    return GeneratedLabel(request=request, layout=layout, command=command)


def generate_batch(
    requests: Sequence[LabelRequest | BatchItemError],
    settings: EngineSettings | None = None,
) -> BatchResult:
    """Generate every label independently; invalid items are collected.

    Items that were already rejected upstream (for example an unreadable CSV
    row) are passed in as :class:`BatchItemError` and kept in order.
    """

    result = BatchResult()
    for index, request in enumerate(requests):
        if isinstance(request, BatchItemError):
            logger.warning("Skipping label %d: %s", index + 1, request.message)
            result.errors.append(replace(request, index=index))
            continue
        try:
            result.labels.append(generate_label(request, settings))
        except LabelValidationError as exc:
            logger.warning("Skipping label %d: %s", index + 1, exc)
            result.errors.append(
                BatchItemError(
                    index=index,
                    barcode_value=request.content.barcode_value,
                    field=exc.field,
                    message=exc.message,
                )
            )
    return result


def build_test_label_request(dpi: int) -> LabelRequest:
    """Return a fixed label for checking printer alignment."""

    return LabelRequest(
        content=LabelContent(
            barcode_value="TEST123",
            label_text="TEST123",
            description="Test Label",
        ),
        geometry=LabelGeometry(),
        device=DeviceProfile(dpi=dpi),
    )


def render(
    output_path: str | None,
    renderer: LabelRenderer,
    requests: Sequence[LabelRequest],
) -> str:
    """Render labels to one file, or to numbered files for per-label formats."""

    if len(requests) == 0:
        return "No labels to render; no output generated."

    if renderer.supports_batch:
        output_path = output_path or f"labels{renderer.file_suffix}"
        payload = renderer.render_batch(requests)
        Path(output_path).write_bytes(payload)
        return f"Wrote {output_path}"

    prefix = output_path or "labels"
    if renderer.file_suffix and prefix.endswith(renderer.file_suffix):
        prefix = prefix[: -len(renderer.file_suffix)]
    for i, request in enumerate(requests):
        name = f"{prefix}_{(i + 1):02d}{renderer.file_suffix}"
        Path(name).write_bytes(renderer.render_label(request))

    return (
        f"Wrote {len(requests)} {renderer.name.upper()} files with prefix "
        f"'{prefix}_'."
    )
