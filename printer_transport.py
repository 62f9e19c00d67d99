"""Raw TCP delivery of ZPL buffers to network Zebra printers."""

from __future__ import annotations

import logging
import socket
import time
from dataclasses import dataclass

from zpl_commands import HOST_STATUS_REQUEST, validate_zpl

logger = logging.getLogger(__name__)

RAW_PRINT_PORT = 9100


def parse_printer_address(printer: str, default_port: int = RAW_PRINT_PORT) -> tuple[str, int]:
    """Split ``host[:port]`` into its parts."""

    text = (printer or "").strip()
    if not text:
        raise ValueError("Printer address is required")

    host, sep, port_text = text.rpartition(":")
    if not sep or "]" in port_text:
        return text.strip("[]"), default_port
    if not host:
        raise ValueError(f"Printer address '{printer}' has no host")
    try:
        port = int(port_text)
    except ValueError as exc:
        raise ValueError(
            f"Printer address '{printer}' has an invalid port"
        ) from exc
    if not 0 < port < 65536:
        raise ValueError(f"Printer port {port} is out of range")
    return host.strip("[]"), port


@dataclass
class PrinterTransport:
    """Sends ZPL to a printer listening on a raw socket."""

    port: int = RAW_PRINT_PORT
    timeout: float = 5.0
    attempts: int = 3
    retry_delay: float = 1.0

    def _address(self, printer: str) -> tuple[str, int]:
        return parse_printer_address(printer, self.port)

    def is_reachable(self, printer: str) -> bool:
        try:
            address = self._address(printer)
        except ValueError:
            return False
        try:
            with socket.create_connection(address, timeout=self.timeout):
                return True
        except OSError as exc:
            logger.debug("Printer %s:%d unreachable: %s", *address, exc)
            return False

    def send(self, printer: str, buffer: str | bytes) -> tuple[bool, str | None]:
        """Deliver ``buffer`` to ``printer``.

        Failures never raise; they come back as ``(False, message)`` after the
        configured number of attempts.
        """

        if not (printer or "").strip():
            return False, "Printer name is required"
        if not buffer or not buffer.strip():
            return False, "ZPL command is required"

        if isinstance(buffer, str):
            is_valid, error = validate_zpl(buffer)
            if not is_valid:
                return False, f"Invalid ZPL command: {error}"
            data = buffer.encode("utf-8")
        else:
            data = buffer

        try:
            address = self._address(printer)
        except ValueError as exc:
            return False, str(exc)

        if not self.is_reachable(printer):
            message = f"Printer not available: cannot connect to {address[0]}:{address[1]}"
            logger.error(message)
            return False, message

        last_error = ""
        for attempt in range(1, self.attempts + 1):
            try:
                with socket.create_connection(address, timeout=self.timeout) as sock:
                    sock.sendall(data)
            except OSError as exc:
                last_error = str(exc) or exc.__class__.__name__
                logger.warning(
                    "Attempt %d/%d to %s:%d failed: %s",
                    attempt,
                    self.attempts,
                    address[0],
                    address[1],
                    last_error,
                )
                if attempt < self.attempts:
                    time.sleep(self.retry_delay)
                continue
            logger.info(
                "Sent %d bytes to %s:%d", len(data), address[0], address[1])
            return True, None

        return False, f"Print failed after {self.attempts} attempts: {last_error}"

    def query_status(self, printer: str) -> tuple[bool, str]:
        """Send a host status request and return the printer's reply."""

        try:
            address = self._address(printer)
        except ValueError as exc:
            return False, str(exc)

        try:
            with socket.create_connection(address, timeout=self.timeout) as sock:
                sock.sendall(HOST_STATUS_REQUEST.encode("ascii"))
                reply = sock.recv(1024)
        except OSError as exc:
            logger.error("Status request to %s:%d failed: %s", *address, exc)
            return False, f"Status request failed: {exc}"

        text = reply.decode("ascii", errors="replace").strip()
        return True, text or "Printer returned an empty status"
