import json
import logging

from flask import Flask, g

from todo_printer.core.logging import JsonFormatter, RequestIdFilter, configure_logging


def _record(msg="hello"):
    return logging.LogRecord("todo_printer.test", logging.INFO, __file__, 1, msg, None, None)


def test_request_id_filter_outside_request():
    rec = _record()
    assert RequestIdFilter().filter(rec) is True
    assert rec.request_id == "-"
    assert rec.path == "-"


def test_request_id_filter_inside_request():
    app = Flask(__name__)
    with app.test_request_context("/print-todo"):
        g.request_id = "abc123"
        rec = _record()
        RequestIdFilter().filter(rec)
    assert rec.request_id == "abc123"
    assert rec.path == "/print-todo"


def test_json_formatter():
    rec = _record("printed %d bytes" % 12)
    RequestIdFilter().filter(rec)
    data = json.loads(JsonFormatter().format(rec))
    assert data["msg"] == "printed 12 bytes"
    assert data["level"] == "INFO"
    assert data["logger"] == "todo_printer.test"
    assert data["request_id"] == "-"


def test_configure_logging_selects_json(monkeypatch):
    monkeypatch.setenv("TODOPRINTER_JSON_LOGS", "true")
    root = configure_logging()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)


def test_json_formatter_includes_job_id_from_worker_records():
    rec = _record("Print job abc failed")
    rec.job_id = "abc"
    RequestIdFilter().filter(rec)
    data = json.loads(JsonFormatter().format(rec))
    assert data["job_id"] == "abc"
    assert data["path"] == "-"


def test_configure_logging_is_idempotent(monkeypatch):
    monkeypatch.delenv("TODOPRINTER_JSON_LOGS", raising=False)
    configure_logging()
    root = configure_logging()
    assert len(root.handlers) == 1
    assert not isinstance(root.handlers[0].formatter, JsonFormatter)
