# Ensure the repository root is on sys.path so `todo_printer` can be imported in tests.

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List

import pytest


def _ensure_repo_root_on_syspath() -> None:
    # This file lives at: <repo_root>/tests/conftest.py
    here = Path(__file__).resolve()
    repo_str = str(here.parent.parent)
    if repo_str not in sys.path:
        sys.path.insert(0, repo_str)


_ensure_repo_root_on_syspath()

from todo_printer.printing.encoders import RawEncoder  # noqa: E402
from todo_printer.printing.session import PrinterSession  # noqa: E402
from todo_printer.printing.transport import NetworkTarget, Transport  # noqa: E402

FIXED_NOW = datetime(2024, 6, 4, 15, 10)  # Tuesday


class FakeTransport(Transport):
    """In-memory transport that records writes and can be told to fail."""

    def __init__(self, fail_connect: bool = False, fail_send: bool = False):
        super().__init__(NetworkTarget(host="printer.test", port=9100))
        self.fail_connect = fail_connect
        self.fail_send = fail_send
        self.writes: List[bytes] = []
        self.opened = 0
        self.closed = 0

    def _open(self) -> None:
        from todo_printer.core.errors import ConnectFailed

        if self.fail_connect:
            raise ConnectFailed("printer.test refused")
        self.opened += 1

    def _write(self, data: bytes) -> None:
        if self.fail_send:
            raise OSError("paper jam")
        self.writes.append(data)

    def _close(self) -> None:
        self.closed += 1


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("TODOPRINTER_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("TODOPRINTER_CONFIG_PATH", str(tmp_path / "missing.json"))


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def session(fake_transport) -> PrinterSession:
    return PrinterSession(fake_transport, RawEncoder(), clock=lambda: FIXED_NOW)
