"""
Core utilities for Todo Printer.

This package groups non-Flask helpers used across the app:
- config: settings resolution, JSON load/save
- logging: Request ID aware logging filters/formatters and root logger config
- errors: the error taxonomy shared by the printing and web layers
"""

from .config import (
    DEFAULTS,
    default_config_path,
    get_config_path,
    load_config,
    resolve_settings,
    save_config,
)
from .errors import (
    ConnectFailed,
    DeviceNotFound,
    InvalidInput,
    NotConnected,
    PrintFailed,
    TodoPrinterError,
    TransportError,
    TransportUnavailable,
)
from .logging import (
    JsonFormatter,
    RequestIdFilter,
    configure_logging,
)

__all__ = [
    # config
    "DEFAULTS",
    "default_config_path",
    "get_config_path",
    "load_config",
    "resolve_settings",
    "save_config",
    # errors
    "ConnectFailed",
    "DeviceNotFound",
    "InvalidInput",
    "NotConnected",
    "PrintFailed",
    "TodoPrinterError",
    "TransportError",
    "TransportUnavailable",
    # logging
    "configure_logging",
    "RequestIdFilter",
    "JsonFormatter",
]
