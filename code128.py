"""Code 128 symbol width estimation and module width selection."""

from __future__ import annotations

import logging
import math

from label_settings import EngineSettings

logger = logging.getLogger(__name__)

MODULES_PER_CHARACTER = 11
STOP_PATTERN_MODULES = 13
# Start and check characters added to every payload.
OVERHEAD_CHARACTERS = 2

_DEFAULT_SETTINGS = EngineSettings()


def module_count(payload_length: int) -> int:
    """Return the number of modules in a symbol encoding ``payload_length`` characters."""

    if payload_length < 0:
        raise ValueError("payload length cannot be negative")
    characters = payload_length + OVERHEAD_CHARACTERS
    return characters * MODULES_PER_CHARACTER + STOP_PATTERN_MODULES


def narrow_module_override(
    module_width: int,
    settings: EngineSettings = _DEFAULT_SETTINGS,
) -> int | None:
    """Return the fixed symbol width used for 1-dot modules, if any.

    The reference printers do not render single-dot bars at the width the
    formula predicts; they produce a symbol of a fixed empirical width. Set
    ``narrow_symbol_width_dots`` to ``None`` for devices that follow the
    formula.
    """

    if module_width == 1:
        return settings.narrow_symbol_width_dots
    return None


def estimate_width_dots(
    payload_length: int,
    module_width: int,
    settings: EngineSettings = _DEFAULT_SETTINGS,
) -> int:
    """Return the printed width of a symbol in dots."""

    if module_width <= 0:
        raise ValueError("module width must be positive")
    override = narrow_module_override(module_width, settings)
    if override is not None:
        return override
    return module_count(payload_length) * module_width


def exact_module_width(payload: str, printable_width_dots: int) -> float:
    """Return the real-valued module width that fills ``printable_width_dots``."""

    return printable_width_dots / module_count(len(payload))


def select_module_width(
    payload: str,
    printable_width_dots: int,
    settings: EngineSettings = _DEFAULT_SETTINGS,
) -> int:
    """Pick the module width for ``payload`` inside the printable band.

    The preferred width is used whenever it fits, even if a thicker bar would
    also fit, so barcode density stays consistent from label to label.
    """

    exact = exact_module_width(payload, printable_width_dots)
    width = math.floor(exact)

    if width < settings.min_module_width:
        logger.warning(
            "Barcode '%s' needs %.2f-dot modules to fit %d dots; "
            "content likely won't fit",
            payload,
            exact,
            printable_width_dots,
        )
        return settings.min_module_width

    width = min(width, settings.max_module_width)
    if width >= settings.preferred_module_width:
        return settings.preferred_module_width
    return width
