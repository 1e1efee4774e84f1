from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from .http_client import ApiResult
from .logger import get_logger, log_action

NO_PRINTER_MESSAGE = "No Bluetooth printer connected."
DEFAULT_CHUNK_SIZE = 180

logger = get_logger("parkdesk_client.printing")


class PrinterTransport(Protocol):
    def write(self, peripheral_id: str, data: bytes, chunk_size: int) -> None: ...


@dataclass
class ReceiptPrinter:
    """Forwards pre-built receipt bytes to the connected peripheral."""

    transport: PrinterTransport
    peripheral_id: str | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE

    @property
    def connected(self) -> bool:
        return bool(self.peripheral_id)

    def connect(self, peripheral_id: str) -> None:
        self.peripheral_id = peripheral_id
        log_action(logger, "printing", "connect", None, "success", peripheral=peripheral_id)

    def disconnect(self) -> None:
        self.peripheral_id = None

    def print_receipt(self, data: bytes) -> ApiResult:
        if not self.peripheral_id:
            return ApiResult.fail(NO_PRINTER_MESSAGE)
        try:
            self.transport.write(self.peripheral_id, data, self.chunk_size)
        except OSError as exc:
            log_action(
                logger,
                "printing",
                "print_receipt",
                None,
                "error",
                logging.WARNING,
                peripheral=self.peripheral_id,
                error=str(exc),
            )
            return ApiResult.fail(f"Printing failed: {exc}")
        log_action(logger, "printing", "print_receipt", None, "success", size=len(data))
        return ApiResult.ok(None)
