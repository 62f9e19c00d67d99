"""Renderer loader for label output formats."""

from __future__ import annotations

from importlib import import_module
from typing import Iterable

from label_settings import EngineSettings
from .base import LabelRenderer

_RENDERER_MODULES = {
    "zpl": "zpl",
    "png": "preview",
    "pdf": "preview",
}


def get_renderer(
    name: str,
    settings: EngineSettings | None = None,
    options: dict[str, str] | None = None,
) -> LabelRenderer:
    """Instantiate the renderer implementation for ``name``."""

    key = name.lower()
    if key not in _RENDERER_MODULES:
        available = ", ".join(sorted(_RENDERER_MODULES))
        raise SystemExit(
            f"Unknown output format '{name}'. Available formats: {available}"
        )

    module = import_module(f"{__name__}.{_RENDERER_MODULES[key]}")
    renderers: dict[str, type[LabelRenderer]] = getattr(module, "RENDERERS", {})
    renderer_cls = renderers.get(key)
    if not renderer_cls or not issubclass(renderer_cls, LabelRenderer):
        raise SystemExit(
            f"Format '{name}' does not export a valid renderer class"
        )

    return renderer_cls(settings=settings, options=options)


def list_renderers() -> Iterable[str]:
    """Return the output format identifiers."""

    return sorted(_RENDERER_MODULES)
