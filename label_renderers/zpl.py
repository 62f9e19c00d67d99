"""Raw ZPL output for Zebra printers."""

from __future__ import annotations

from typing import Sequence

from label_generation import generate_label
from label_types import LabelRequest
from zpl_commands import batch_zpl
from .base import LabelRenderer


class ZplRenderer(LabelRenderer):
    """Serializes labels into ZPL command buffers."""

    name = "zpl"
    media_type = "text/plain; charset=utf-8"
    file_suffix = ".zpl"

    @property
    def supports_batch(self) -> bool:  # type: ignore[override]
        return True

    def render_label(self, request: LabelRequest) -> bytes:
        return generate_label(request, self.settings).command.data

    def render_batch(self, requests: Sequence[LabelRequest]) -> bytes:
        commands = [generate_label(request, self.settings).command for request in requests]
        return batch_zpl(commands).data


RENDERERS = {"zpl": ZplRenderer}
