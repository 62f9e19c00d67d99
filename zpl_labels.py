#!/usr/bin/env python3
"""Generate Code 128 labels as ZPL, preview them, or send them to a Zebra printer."""

from __future__ import annotations

import argparse
import csv
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from dotenv import load_dotenv

from label_generation import (
    BatchItemError,
    BatchResult,
    build_test_label_request,
    generate_batch,
    render,
)
from label_renderers import get_renderer, list_renderers
from label_settings import (
    AppSettings,
    EngineSettings,
    load_app_settings,
    load_engine_settings,
    save_app_settings,
)
from label_types import (
    Alignment,
    DeviceProfile,
    LabelContent,
    LabelGeometry,
    LabelRequest,
    LabelStyle,
)
from printer_transport import PrinterTransport
from zpl_commands import printer_config_command

_GEOMETRY_ARGS = {
    "label_width": "label_width_mm",
    "label_height": "label_height_mm",
    "barcode_width": "barcode_width_mm",
    "barcode_height": "barcode_height_mm",
    "top_margin": "top_margin_mm",
    "margin": "horizontal_margin_mm",
    "text_spacing": "text_spacing_mm",
    "bottom_margin": "bottom_margin_mm",
}

_STYLE_ARGS = {
    "label_font_size": "label_font_size",
    "description_font_size": "description_font_size",
    "label_align": "label_alignment",
    "description_align": "description_alignment",
}


def _parse_renderer_options(option_pairs: Sequence[str]) -> Dict[str, str]:
    parsed: Dict[str, str] = {}
    for pair in option_pairs:
        if "=" not in pair:
            raise SystemExit(
                f"Invalid --renderer-option '{pair}'. Expected format NAME=VALUE."
            )
        key, value = pair.split("=", 1)
        key = key.strip().lower()
        value = value.strip()
        if not key:
            raise SystemExit("Renderer option name cannot be empty.")
        parsed[key] = value
    return parsed


def _overrides(args: argparse.Namespace, mapping: Dict[str, str]) -> Dict[str, object]:
    updates: Dict[str, object] = {}
    for arg_name, field_name in mapping.items():
        value = getattr(args, arg_name)
        if value is None:
            continue
        if field_name.endswith("alignment"):
            value = Alignment.parse(value)
        updates[field_name] = value
    return updates


def geometry_from_args(args: argparse.Namespace, defaults: LabelGeometry) -> LabelGeometry:
    return replace(defaults, **_overrides(args, _GEOMETRY_ARGS))


def style_from_args(args: argparse.Namespace, defaults: LabelStyle) -> LabelStyle:
    return replace(defaults, **_overrides(args, _STYLE_ARGS))


def read_csv_requests(
    path: Path,
    geometry: LabelGeometry,
    style: LabelStyle,
    device: DeviceProfile,
) -> List[LabelRequest | BatchItemError]:
    """Read one label per CSV row.

    The file needs a ``barcode_value`` column; ``label_text``, ``description``
    and ``copies`` are optional. A row that cannot be read becomes a
    :class:`BatchItemError` in its place so the other rows still print.
    """

    try:
        with path.open(newline="", encoding="utf-8-sig") as handle:
            reader = csv.DictReader(handle)
            columns = [name.strip().lower() for name in reader.fieldnames or []]
            if "barcode_value" not in columns:
                raise SystemExit(
                    f"CSV file '{path}' must have a 'barcode_value' column."
                )
            rows = [
                {(k or "").strip().lower(): (v or "").strip() for k, v in row.items()}
                for row in reader
            ]
    except OSError as exc:
        raise SystemExit(f"Cannot read CSV file '{path}': {exc}") from exc

    requests: List[LabelRequest | BatchItemError] = []
    for index, row in enumerate(rows):
        copies_text = row.get("copies") or "1"
        try:
            copies = int(copies_text)
        except ValueError:
            requests.append(
                BatchItemError(
                    index=index,
                    barcode_value=row.get("barcode_value", ""),
                    field="copies",
                    message=(
                        f"{path}:{index + 2}: copies must be a whole number, "
                        f"got '{copies_text}'"
                    ),
                )
            )
            continue
        requests.append(
            LabelRequest(
                content=LabelContent(
                    barcode_value=row.get("barcode_value", ""),
                    label_text=row.get("label_text", ""),
                    description=row.get("description", ""),
                    copies=copies,
                ),
                geometry=geometry,
                style=style,
                device=device,
            )
        )
    return requests


def _report_batch_errors(result: BatchResult) -> None:
    for error in result.errors:
        print(
            f"Label {error.index + 1} ('{error.barcode_value}') skipped: "
            f"{error.field}: {error.message}",
            file=sys.stderr,
        )


def _require_printer(printer: str) -> str:
    if not printer:
        raise SystemExit(
            "No printer configured. Pass --printer HOST[:PORT] or save one with "
            "--save-settings."
        )
    return printer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Code 128 labels -> ZPL for Zebra printers"
    )
    parser.add_argument(
        "barcode_value",
        nargs="?",
        help="Value to encode (printable ASCII, up to 35 characters).",
    )
    parser.add_argument("-l", "--label-text", default="")
    parser.add_argument("-D", "--description", default="")
    parser.add_argument("-c", "--copies", type=int, default=1)
    parser.add_argument(
        "--csv",
        type=Path,
        help="Generate one label per row of a CSV file.",
    )
    parser.add_argument(
        "--test-label",
        action="store_true",
        help="Generate the alignment test label instead of user content.",
    )

    layout = parser.add_argument_group("layout (millimetres)")
    layout.add_argument("--label-width", type=float)
    layout.add_argument("--label-height", type=float)
    layout.add_argument("--barcode-width", type=float)
    layout.add_argument("--barcode-height", type=float)
    layout.add_argument("--top-margin", type=float)
    layout.add_argument("--margin", type=float, help="Left and right margin.")
    layout.add_argument("--text-spacing", type=float)
    layout.add_argument("--bottom-margin", type=float)

    text = parser.add_argument_group("text")
    alignments = [a.value for a in Alignment]
    text.add_argument("--label-font-size", type=int)
    text.add_argument("--description-font-size", type=int)
    text.add_argument("--label-align", choices=alignments)
    text.add_argument("--description-align", choices=alignments)

    output = parser.add_argument_group("output")
    output.add_argument(
        "-f", "--format",
        default="zpl",
        choices=list(list_renderers()),
        help="Output format (default: zpl).",
    )
    output.add_argument(
        "-o", "--output",
        help="Output file; ZPL goes to stdout when omitted.",
    )
    output.add_argument(
        "--renderer-option",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Renderer customization option (repeatable), e.g. outline=off.",
    )
    output.add_argument("--dpi", type=int, help="Printer resolution.")

    printer = parser.add_argument_group("printer")
    printer.add_argument(
        "-p", "--print",
        action="store_true",
        help="Send the labels to the printer instead of writing output.",
    )
    printer.add_argument("--printer", help="Printer address HOST[:PORT].")
    printer.add_argument(
        "--configure-printer",
        action="store_true",
        help="Send the saved print speed and density to the printer.",
    )
    printer.add_argument("--print-speed", type=int)
    printer.add_argument("--print-density", type=int)
    printer.add_argument(
        "--status",
        action="store_true",
        help="Query the printer's host status.",
    )

    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Remember layout, text and printer options as new defaults.",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument(
        "--web",
        action="store_true",
        help="Start the local web UI.",
    )
    parser.add_argument("--web-host", default="127.0.0.1")
    parser.add_argument("--web-port", type=int, default=5000)
    return parser


def _settings_from_args(args: argparse.Namespace, saved: AppSettings) -> AppSettings:
    printer_updates: Dict[str, object] = {}
    if args.printer:
        printer_updates["host"] = args.printer
    if args.dpi is not None:
        printer_updates["dpi"] = args.dpi
    if args.print_speed is not None:
        printer_updates["print_speed"] = args.print_speed
    if args.print_density is not None:
        printer_updates["print_density"] = args.print_density
    return AppSettings(
        geometry=geometry_from_args(args, saved.geometry),
        style=style_from_args(args, saved.style),
        printer=replace(saved.printer, **printer_updates),
    )


def _collect_requests(
    args: argparse.Namespace,
    settings: AppSettings,
    engine_settings: EngineSettings,
    parser: argparse.ArgumentParser,
) -> List[LabelRequest | BatchItemError]:
    device = DeviceProfile(dpi=settings.printer.dpi or engine_settings.dpi)
    if args.test_label:
        return [build_test_label_request(device.dpi)]
    if args.csv:
        return read_csv_requests(args.csv, settings.geometry, settings.style, device)
    if not args.barcode_value:
        parser.error("a barcode value, --csv or --test-label is required")
    return [
        LabelRequest(
            content=LabelContent(
                barcode_value=args.barcode_value,
                label_text=args.label_text,
                description=args.description,
                copies=args.copies,
            ),
            geometry=settings.geometry,
            style=settings.style,
            device=device,
        )
    ]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for generating and printing labels."""

    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    engine_settings = load_engine_settings()
    settings = _settings_from_args(args, load_app_settings())

    if args.save_settings:
        path = save_app_settings(settings)
        print(f"Saved defaults to {path}")
        if not (args.barcode_value or args.csv or args.test_label):
            return 0

    transport = PrinterTransport()

    if args.web:
        from zpl_labels_web import run_web_app

        run_web_app(
            app_settings=settings,
            engine_settings=engine_settings,
            transport=transport,
            host=args.web_host,
            port=args.web_port,
        )
        return 0

    if args.status:
        ok, message = transport.query_status(_require_printer(settings.printer.host))
        print(message)
        return 0 if ok else 1

    if args.configure_printer:
        command = printer_config_command(
            settings.printer.print_speed, settings.printer.print_density)
        ok, error = transport.send(
            _require_printer(settings.printer.host), command.text)
        if not ok:
            raise SystemExit(error)
        print("Printer configuration sent.")
        return 0

    requests = _collect_requests(args, settings, engine_settings, parser)
    result = generate_batch(requests, engine_settings)
    _report_batch_errors(result)
    if not result.labels:
        raise SystemExit("No valid labels to output.")

    if args.print:
        ok, error = transport.send(
            _require_printer(settings.printer.host), result.command.text)
        if not ok:
            raise SystemExit(error)
        total = sum(label.request.content.copies for label in result.labels)
        print(f"Sent {total} label(s) to {settings.printer.host}.")
    elif args.format == "zpl" and not args.output:
        sys.stdout.write(result.command.text)
    else:
        renderer = get_renderer(
            args.format,
            engine_settings,
            _parse_renderer_options(args.renderer_option),
        )
        print(render(args.output, renderer, [label.request for label in result.labels]))
    return 1 if result.errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
