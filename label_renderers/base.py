"""Abstract base class for label renderers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from label_settings import EngineSettings
from label_types import LabelRequest


@dataclass(frozen=True)
class RendererOption:
    """Represents a configurable option exposed by a label renderer."""

    name: str
    possible_values: list[str]


class LabelRenderer(ABC):
    """Turns label requests into printer or preview bytes."""

    name: str = ""
    media_type: str = "application/octet-stream"
    file_suffix: str = ""

    def __init__(
        self,
        settings: EngineSettings | None = None,
        options: dict[str, str] | None = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.options = {k.lower(): v for k, v in (options or {}).items()}

    @property
    def supports_batch(self) -> bool:
        """Return ``True`` when several labels share one output file."""

        return False

    @abstractmethod
    def render_label(self, request: LabelRequest) -> bytes:
        """Return the output bytes for a single label."""

    def render_batch(self, requests: Sequence[LabelRequest]) -> bytes:
        """Return one output containing every label in ``requests``."""

        raise NotImplementedError(
            f"Renderer '{self.name}' writes one file per label."
        )

    def available_options(self) -> list[RendererOption]:
        """Return user-tunable options supported by the renderer."""

        return []
