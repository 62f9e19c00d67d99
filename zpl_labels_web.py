"""Web UI for designing, previewing and printing labels."""

from __future__ import annotations

import argparse
import os
from dataclasses import fields, replace
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from flask import Flask, redirect, render_template, request, url_for
from werkzeug.datastructures import ImmutableMultiDict
from werkzeug.wrappers import Response

from errors import LabelValidationError
from label_generation import GeneratedLabel, generate_label
from label_renderers import get_renderer
from label_settings import (
    AppSettings,
    EngineSettings,
    load_app_settings,
    load_engine_settings,
)
from label_types import (
    DEFAULT_DPI,
    Alignment,
    DeviceProfile,
    LabelContent,
    LabelGeometry,
    LabelRequest,
    LabelStyle,
)
from printer_transport import PrinterTransport


__all__ = ["run_web_app", "create_app", "create_app_from_env"]

_GEOMETRY_FIELDS = [spec.name for spec in fields(LabelGeometry)]


def _form_number(
    form: ImmutableMultiDict[str, str],
    name: str,
    default: Any,
    cast: type,
) -> Any:
    raw = (form.get(name) or "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise LabelValidationError(name, f"'{raw}' is not a number") from exc


def request_from_form(
    form: ImmutableMultiDict[str, str],
    defaults: AppSettings,
    default_dpi: int = DEFAULT_DPI,
) -> LabelRequest:
    """Build a label request from submitted form fields over saved defaults."""

    geometry = replace(
        defaults.geometry,
        **{
            name: _form_number(form, name, getattr(defaults.geometry, name), float)
            for name in _GEOMETRY_FIELDS
        },
    )
    style = LabelStyle(
        label_font_size=_form_number(
            form, "label_font_size", defaults.style.label_font_size, int),
        description_font_size=_form_number(
            form, "description_font_size", defaults.style.description_font_size, int),
        label_alignment=Alignment.parse(
            form.get("label_alignment") or defaults.style.label_alignment),
        description_alignment=Alignment.parse(
            form.get("description_alignment") or defaults.style.description_alignment),
    )
    content = LabelContent(
        barcode_value=(form.get("barcode_value") or "").strip(),
        label_text=(form.get("label_text") or "").strip(),
        description=(form.get("description") or "").strip(),
        copies=_form_number(form, "copies", 1, int),
    )
    dpi = _form_number(form, "dpi", defaults.printer.dpi or default_dpi, int)
    return LabelRequest(
        content=content,
        geometry=geometry,
        style=style,
        device=DeviceProfile(dpi=dpi),
    )


def _download_name(value: str, suffix: str) -> str:
    stem = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in value)
    return f"{stem or 'label'}{suffix}"


def create_app(
    app_settings: AppSettings | None = None,
    engine_settings: EngineSettings | None = None,
    transport: PrinterTransport | None = None,
) -> Flask:
    """Create the Flask app around the given defaults and printer transport."""
    template_dir = Path(__file__).resolve().parent / "templates"
    app = Flask(__name__, template_folder=str(template_dir))
    app.config["SECRET_KEY"] = os.getenv("FLASK_SECRET_KEY", "zpl-labels-ui")

    defaults = app_settings or AppSettings()
    engine = engine_settings or EngineSettings()
    printer_transport = transport or PrinterTransport()
    default_dpi = defaults.printer.dpi or engine.dpi

    def _bad_request(exc: LabelValidationError) -> Response:
        return Response(str(exc), status=400, mimetype="text/plain")

    def _generate() -> GeneratedLabel:
        return generate_label(request_from_form(request.form, defaults, default_dpi), engine)

    @app.route("/", methods=["GET"])
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        error_key = request.args.get("error")
        error_message = None
        if error_key == "no-printer":
            error_message = "Enter a printer address before printing."
        elif error_key == "invalid":
            error_message = (
                request.args.get("message") or "The label could not be generated."
            )
        elif error_key == "print":
            error_message = request.args.get("message") or "Printing failed."

        return render_template(
            "index.html",
            geometry=defaults.geometry,
            style=defaults.style,
            printer=defaults.printer,
            dpi=default_dpi,
            alignments=[a.value for a in Alignment],
            error=error_message,
            message=request.args.get("message") if not error_key else None,
        )

    @app.route("/labels/zpl", methods=["POST"])
    def labels_zpl() -> Response:  # pyright: ignore[reportUnusedFunction]
        try:
            generated = _generate()
        except LabelValidationError as exc:
            return _bad_request(exc)

        response = Response(generated.command.text, mimetype="text/plain")
        filename = _download_name(generated.request.content.barcode_value, ".zpl")
        response.headers["Content-Disposition"] = f"attachment; filename={filename}"
        if generated.warnings:
            response.headers["X-Label-Warnings"] = "; ".join(generated.warnings)
        return response

    @app.route("/labels/preview", methods=["POST"])
    def labels_preview() -> Response:  # pyright: ignore[reportUnusedFunction]
        try:
            label_request = request_from_form(request.form, defaults, default_dpi)
            renderer = get_renderer("png", engine)
            image = renderer.render_label(label_request)
        except LabelValidationError as exc:
            return _bad_request(exc)
        return Response(image, mimetype=renderer.media_type)

    @app.route("/labels/print", methods=["POST"])
    def labels_print() -> Response:  # pyright: ignore[reportUnusedFunction]
        printer = (request.form.get("printer") or defaults.printer.host).strip()
        if not printer:
            return redirect(url_for("index", error="no-printer"))

        try:
            generated = _generate()
        except LabelValidationError as exc:
            return redirect(url_for("index", error="invalid", message=str(exc)))

        ok, error = printer_transport.send(printer, generated.command.text)
        if not ok:
            return redirect(url_for("index", error="print", message=error))

        copies = generated.request.content.copies
        noun = "label" if copies == 1 else "labels"
        return redirect(
            url_for("index", message=f"Sent {copies} {noun} to {printer}.")
        )

    return app


def create_app_from_env() -> Flask:
    """Create the Flask app from the settings file and ZPL_LABELS_* variables."""
    load_dotenv()
    return create_app(load_app_settings(), load_engine_settings())


def run_web_app(
    app_settings: AppSettings,
    engine_settings: EngineSettings,
    transport: PrinterTransport,
    host: str,
    port: int,
) -> None:
    """Launch the Flask development server."""
    app = create_app(app_settings, engine_settings, transport)

    use_reloader_env = os.getenv("USE_RELOADER")
    use_reloader = (
        str(use_reloader_env).lower() in {"1", "true", "yes", "on"}
        if use_reloader_env is not None
        else False
    )
    app.run(host=host, port=port, debug=False, use_reloader=use_reloader)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for the web UI."""
    load_dotenv()
    parser = argparse.ArgumentParser(description="ZPL label generator web UI")
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host/IP for the web UI (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=5000,
        help="Port for the web UI (default: 5000).",
    )

    args = parser.parse_args(argv)

    run_web_app(
        app_settings=load_app_settings(),
        engine_settings=load_engine_settings(),
        transport=PrinterTransport(),
        host=args.host,
        port=args.port,
    )
    return 0


if __name__ == "__main__":
    main()
