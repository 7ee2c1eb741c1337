import json

import pytest

from todo_printer.core.config import (
    DEFAULTS,
    default_config_path,
    load_config,
    resolve_settings,
    save_config,
    setting_float,
    setting_int,
)


def test_defaults_without_file_or_env():
    settings = resolve_settings()
    assert settings == DEFAULTS
    assert settings["usb_vendor_id"] == "0x20d1"
    assert settings["network_port"] == 9100


def test_precedence_file_env_overrides(tmp_path, monkeypatch):
    cfg_path = tmp_path / "cfg.json"
    save_config({"printer_type": "network", "network_host": "10.0.0.9", "network_port": 9101}, path=str(cfg_path))
    monkeypatch.setenv("TODOPRINTER_NETWORK_PORT", "9200")
    settings = resolve_settings({"encoder": "raw"}, path=str(cfg_path))
    assert settings["printer_type"] == "network"
    assert settings["network_host"] == "10.0.0.9"
    assert settings["network_port"] == "9200"
    assert setting_int(settings, "network_port") == 9200
    assert settings["encoder"] == "raw"


def test_config_path_env_override(tmp_path, monkeypatch):
    cfg_path = tmp_path / "other.json"
    cfg_path.write_text(json.dumps({"character_set": "cp437"}), encoding="utf-8")
    monkeypatch.setenv("TODOPRINTER_CONFIG_PATH", str(cfg_path))
    assert resolve_settings()["character_set"] == "cp437"


def test_xdg_default_path(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert default_config_path() == str(tmp_path / "todoprinter" / "config.json")


def test_invalid_json_raises(tmp_path):
    cfg_path = tmp_path / "bad.json"
    cfg_path.write_text("{nope", encoding="utf-8")
    with pytest.raises(json.JSONDecodeError):
        load_config(str(cfg_path))


def test_setting_coercion_falls_back_to_defaults():
    assert setting_int({"line_width": "abc"}, "line_width") == 48
    assert setting_int({"usb_out_endpoint": None, "line_width": "0x20"}, "line_width") == 32
    assert setting_float({"print_timeout": "2.5"}, "print_timeout") == 2.5
    assert setting_float({}, "connect_timeout") == 5.0
