"""Engine tunables and persisted application defaults."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

from label_types import DEFAULT_DPI, Alignment, LabelGeometry, LabelStyle

logger = logging.getLogger(__name__)

ENV_PREFIX = "ZPL_LABELS_"
SETTINGS_PATH_ENV = f"{ENV_PREFIX}SETTINGS"
DEFAULT_SETTINGS_PATH = Path.home() / ".zpl_labels" / "settings.json"

# Width the reference 203 dpi printer produces for module width 1,
# regardless of payload length.
REFERENCE_NARROW_SYMBOL_WIDTH = 719


@dataclass(frozen=True)
class EngineSettings:
    """Tunable parameters of the layout and ZPL engine."""

    dpi: int = DEFAULT_DPI
    min_module_width: int = 1
    max_module_width: int = 6
    preferred_module_width: int = 2
    narrow_symbol_width_dots: int | None = REFERENCE_NARROW_SYMBOL_WIDTH
    min_font_size: int = 6
    font_size_step: int = 2
    text_inset_dots: int = 10
    field_gap_dots: int = 10
    text_block_lines: int = 2
    device_font_scale: int = 2
    min_device_font_dots: int = 10
    min_text_allowance_mm: float = 12.0

    def __post_init__(self) -> None:
        if self.dpi <= 0:
            raise ValueError("dpi must be positive")
        if not 1 <= self.min_module_width <= self.max_module_width:
            raise ValueError(
                "module width bounds must satisfy 1 <= min <= max"
            )
        if not (
            self.min_module_width
            <= self.preferred_module_width
            <= self.max_module_width
        ):
            raise ValueError("preferred module width must lie within bounds")
        if self.font_size_step <= 0:
            raise ValueError("font size step must be positive")
        if self.text_block_lines <= 0:
            raise ValueError("text block must allow at least one line")


def _env_value(name: str) -> str | None:
    value = os.getenv(f"{ENV_PREFIX}{name}")
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = _env_value(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise SystemExit(
            f"Invalid {ENV_PREFIX}{name} '{raw}': expected an integer."
        ) from exc


def _env_float(name: str, default: float) -> float:
    raw = _env_value(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise SystemExit(
            f"Invalid {ENV_PREFIX}{name} '{raw}': expected a number."
        ) from exc


def load_engine_settings() -> EngineSettings:
    """Build engine settings from ``ZPL_LABELS_*`` environment variables.

    ``ZPL_LABELS_NARROW_SYMBOL_WIDTH`` set to ``0`` or ``off`` disables the
    fixed-width substitution for module width 1.
    """

    defaults = EngineSettings()
    narrow_raw = _env_value("NARROW_SYMBOL_WIDTH")
    if narrow_raw is None:
        narrow: int | None = defaults.narrow_symbol_width_dots
    elif narrow_raw.lower() in {"0", "off", "none", "false"}:
        narrow = None
    else:
        narrow = _env_int("NARROW_SYMBOL_WIDTH", REFERENCE_NARROW_SYMBOL_WIDTH)

    try:
        return EngineSettings(
            dpi=_env_int("DPI", defaults.dpi),
            min_module_width=_env_int(
                "MIN_MODULE_WIDTH", defaults.min_module_width),
            max_module_width=_env_int(
                "MAX_MODULE_WIDTH", defaults.max_module_width),
            preferred_module_width=_env_int(
                "PREFERRED_MODULE_WIDTH", defaults.preferred_module_width),
            narrow_symbol_width_dots=narrow,
            min_font_size=_env_int("MIN_FONT_SIZE", defaults.min_font_size),
            font_size_step=_env_int("FONT_SIZE_STEP", defaults.font_size_step),
            text_inset_dots=_env_int("TEXT_INSET", defaults.text_inset_dots),
            field_gap_dots=_env_int("FIELD_GAP", defaults.field_gap_dots),
            text_block_lines=_env_int(
                "TEXT_BLOCK_LINES", defaults.text_block_lines),
            device_font_scale=_env_int(
                "DEVICE_FONT_SCALE", defaults.device_font_scale),
            min_device_font_dots=_env_int(
                "MIN_DEVICE_FONT", defaults.min_device_font_dots),
            min_text_allowance_mm=_env_float(
                "MIN_TEXT_ALLOWANCE_MM", defaults.min_text_allowance_mm),
        )
    except ValueError as exc:
        raise SystemExit(f"Invalid engine settings: {exc}") from exc


@dataclass(frozen=True)
class PrinterSettings:
    host: str = ""
    # None defers to EngineSettings.dpi.
    dpi: int | None = None
    print_speed: int = 4
    print_density: int = 8


@dataclass(frozen=True)
class AppSettings:
    """Defaults the application restores between runs."""

    geometry: LabelGeometry = field(default_factory=LabelGeometry)
    style: LabelStyle = field(default_factory=LabelStyle)
    printer: PrinterSettings = field(default_factory=PrinterSettings)


def settings_path() -> Path:
    override = os.getenv(SETTINGS_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return DEFAULT_SETTINGS_PATH


def _merge(default: Any, payload: Any) -> Any:
    """Return ``default`` updated with the matching keys of ``payload``."""

    if not isinstance(payload, Mapping):
        return default
    updates: dict[str, Any] = {}
    for spec in fields(default):
        if spec.name not in payload:
            continue
        current = getattr(default, spec.name)
        value = payload[spec.name]
        if isinstance(current, Alignment):
            updates[spec.name] = Alignment.parse(str(value))
        elif value is None:
            continue
        elif current is None and isinstance(value, int) and not isinstance(value, bool):
            updates[spec.name] = value
        elif isinstance(current, float) and isinstance(value, (int, float)):
            updates[spec.name] = float(value)
        elif isinstance(current, int) and isinstance(value, int):
            updates[spec.name] = value
        elif isinstance(current, str) and isinstance(value, str):
            updates[spec.name] = value
        else:
            raise ValueError(
                f"Setting '{spec.name}' has unexpected value {value!r}"
            )
    return replace(default, **updates)


def load_app_settings(path: Path | None = None) -> AppSettings:
    """Load application defaults, falling back to built-ins on any problem."""

    path = path or settings_path()
    if not path.exists():
        return AppSettings()

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        return AppSettings(
            geometry=_merge(LabelGeometry(), payload.get("geometry")),
            style=_merge(LabelStyle(), payload.get("style")),
            printer=_merge(PrinterSettings(), payload.get("printer")),
        )
    except (OSError, ValueError, AttributeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return AppSettings()


def save_app_settings(settings: AppSettings, path: Path | None = None) -> Path:
    path = path or settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = asdict(settings)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    logger.info("Saved settings to %s", path)
    return path
