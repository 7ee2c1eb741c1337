"""
Error taxonomy for Todo Printer.

Connect-time failures (DeviceNotFound, ConnectFailed) are caught at the
transport boundary and recorded; the remaining errors are raised to callers
of the printer session and mapped to HTTP status codes by the web layer.
"""

from __future__ import annotations


class TodoPrinterError(Exception):
    """Base class for all Todo Printer errors."""


class TransportError(TodoPrinterError):
    """A transport could not be brought up."""


class DeviceNotFound(TransportError):
    """No USB device matches the configured vendor/product id."""


class ConnectFailed(TransportError):
    """Interface claim, endpoint discovery, or socket open failed."""


class TransportUnavailable(TodoPrinterError):
    """Neither a USB nor a network target is configured."""


class NotConnected(TodoPrinterError):
    """A print was attempted while the session is not connected."""


class InvalidInput(TodoPrinterError):
    """The ticket is missing a usable title."""


class PrintFailed(TodoPrinterError):
    """The transport failed while a ticket was being written."""


__all__ = [
    "ConnectFailed",
    "DeviceNotFound",
    "InvalidInput",
    "NotConnected",
    "PrintFailed",
    "TodoPrinterError",
    "TransportError",
    "TransportUnavailable",
]
