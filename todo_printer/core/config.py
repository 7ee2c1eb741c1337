"""
Config utilities for Todo Printer.

Responsibilities:
- Resolve the config path with environment and XDG support
- Provide JSON load/save helpers
- Merge defaults, the JSON file and TODOPRINTER_* environment overrides into
  the flat settings mapping consumed by the printer session and the web app
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

ENV_PREFIX = "TODOPRINTER_"

DEFAULTS: dict[str, Any] = {
    "printer_type": "usb",
    "usb_vendor_id": "0x20d1",
    "usb_product_id": "0x7008",
    "usb_interface": 0,
    "usb_out_endpoint": None,
    "usb_timeout_ms": 5000,
    "network_host": "",
    "network_port": 9100,
    "connect_timeout": 5.0,
    "printer_profile": "default",
    "character_set": "cp852",
    "encoder": "escpos",
    "line_width": 48,
    "line_character": "=",
    "print_timeout": 30.0,
}


def default_config_path() -> str:
    """
    Resolve the default config path using:
    1) $XDG_CONFIG_HOME/todoprinter/config.json
    2) ~/.config/todoprinter/config.json
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return str(Path(xdg) / "todoprinter" / "config.json")
    return str(Path.home() / ".config" / "todoprinter" / "config.json")


def get_config_path() -> str:
    """
    Return the config path honoring TODOPRINTER_CONFIG_PATH override.
    """
    return os.environ.get(f"{ENV_PREFIX}CONFIG_PATH", default_config_path())


def load_config(path: Optional[str] = None) -> Optional[dict[str, Any]]:
    """
    Load the JSON config if it exists; return None if missing.

    Raises:
        json.JSONDecodeError if the file exists but contains invalid JSON.
        OSError for I/O errors other than missing file.
    """
    cfg_path = Path(path or get_config_path())
    if not cfg_path.exists():
        return None
    with cfg_path.open("r", encoding="utf-8") as f:
        return json.load(f)


def save_config(data: Mapping[str, Any], path: Optional[str] = None) -> None:
    """
    Save the JSON config, creating parent directories as needed.

    Writes atomically by using a temporary file and os.replace().
    Raises OSError on I/O failures.
    """
    cfg_path = Path(path or get_config_path())
    cfg_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = cfg_path.with_suffix(cfg_path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(dict(data), f, indent=2)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp_path, cfg_path)


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in DEFAULTS:
        val = environ.get(ENV_PREFIX + key.upper())
        if val is not None and val != "":
            out[key] = val
    return out


def resolve_settings(
    overrides: Optional[Mapping[str, Any]] = None,
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> dict[str, Any]:
    """
    Build the effective settings: defaults < JSON file < environment < overrides.

    Values from the environment arrive as strings; consumers coerce with
    setting_int / setting_float.
    """
    settings = dict(DEFAULTS)
    file_cfg = load_config(path)
    if file_cfg:
        settings.update({k: v for k, v in file_cfg.items() if v is not None})
    settings.update(_env_overrides(os.environ if environ is None else environ))
    if overrides:
        settings.update(overrides)
    return settings


def setting_int(settings: Mapping[str, Any], key: str) -> int:
    val = settings.get(key)
    try:
        return int(str(val), 0) if isinstance(val, str) else int(val)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return int(DEFAULTS[key])


def setting_float(settings: Mapping[str, Any], key: str) -> float:
    try:
        return float(settings.get(key))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return float(DEFAULTS[key])


__all__ = [
    "DEFAULTS",
    "ENV_PREFIX",
    "default_config_path",
    "get_config_path",
    "load_config",
    "resolve_settings",
    "save_config",
    "setting_float",
    "setting_int",
]
