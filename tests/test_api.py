import json

import pytest

from todo_printer import create_app
from todo_printer.printing.encoders import RawEncoder
from todo_printer.printing.session import PrinterSession

from conftest import FIXED_NOW, FakeTransport


def _app(transport=None, connect=True):
    transport = transport or FakeTransport()
    session = PrinterSession(transport, RawEncoder(), clock=lambda: FIXED_NOW)
    app = create_app(session=session, connect_printer=connect, register_worker=False)
    app.config.update(TESTING=True)
    return app, transport


def _post(client, payload):
    return client.post("/print-todo", data=json.dumps(payload), headers={"Content-Type": "application/json"})


def test_print_todo_success():
    app, transport = _app()
    client = app.test_client()

    r = _post(client, {"title": "  Fix login bug ", "assignee": "John Doe", "description": "  "})
    assert r.status_code == 200, r.get_data(as_text=True)
    body = r.get_json()
    assert body["success"] is True
    assert body["ticket"]["title"] == "Fix login bug"
    assert body["ticket"]["assignee"] == "John Doe"
    assert body["ticket"]["description"] is None
    assert body["ticket"]["timestamp"]
    assert len(transport.writes) == 1

    job = client.get(f"/jobs/{body['job_id']}")
    assert job.status_code == 200
    assert job.get_json()["status"] == "success"


def test_print_todo_accepts_form_body():
    app, transport = _app()
    r = app.test_client().post("/print-todo", data={"title": "Form ticket"})
    assert r.status_code == 200
    assert b"Form ticket" in transport.writes[0]


@pytest.mark.parametrize("payload", [{}, {"title": ""}, {"title": "   "}, {"title": 42}, {"assignee": "x"}])
def test_print_todo_requires_title(payload):
    app, transport = _app()
    r = _post(app.test_client(), payload)
    assert r.status_code == 400
    assert r.get_json()["error"] == "Title is required and must be a non-empty string"
    assert transport.writes == []


def test_print_todo_rejects_oversized_assignee():
    app, _ = _app()
    r = _post(app.test_client(), {"title": "T", "assignee": "x" * 500})
    assert r.status_code == 400
    assert "Assignee too long" in r.get_json()["error"]


def test_print_todo_when_disconnected_returns_503():
    app, transport = _app(connect=False)
    r = _post(app.test_client(), {"title": "Task"})
    assert r.status_code == 503
    assert r.get_json()["error"] == "Printer is not connected"
    assert transport.writes == []


def test_print_todo_transport_failure_returns_500():
    app, _ = _app(FakeTransport(fail_send=True))
    r = _post(app.test_client(), {"title": "Task"})
    assert r.status_code == 500
    body = r.get_json()
    assert body["error"] == "Failed to print ticket"
    assert "paper jam" in body["details"]
    assert body["job_id"]


def test_health_reports_printer_state():
    app, _ = _app()
    body = app.test_client().get("/health").get_json()
    assert body["status"] == "ok"
    assert body["printer"] == "connected"
    assert body["timestamp"]

    app, _ = _app(connect=False)
    assert app.test_client().get("/health").get_json()["printer"] == "disconnected"


def test_printer_status_and_reconnect():
    transport = FakeTransport(fail_connect=True)
    app, _ = _app(transport)
    client = app.test_client()

    status = client.get("/printer-status").get_json()
    assert status["connected"] is False
    assert status["state"] == "failed"
    assert status["interface"] == "tcp://printer.test:9100"
    assert "refused" in status["last_error"]

    r = client.post("/printer/connect")
    assert r.status_code == 503

    transport.fail_connect = False
    r = client.post("/printer/connect")
    assert r.status_code == 200
    assert r.get_json()["state"] == "connected"


def test_app_without_printer_target():
    app = create_app(settings={"printer_type": "carrier-pigeon"}, register_worker=False)
    client = app.test_client()

    status = client.get("/printer-status").get_json()
    assert status["connected"] is False
    assert status["last_error"].startswith("TransportUnavailable")

    assert _post(client, {"title": "Task"}).status_code == 503
    assert client.post("/printer/connect").status_code == 503
    assert client.get("/health").get_json()["printer"] == "disconnected"


def test_index_describes_usage():
    app, _ = _app()
    body = app.test_client().get("/").get_json()
    assert body["name"] == "Todo Ticket Printer Server"
    assert "POST /print-todo" in body["endpoints"]
    assert body["example"]["title"]


def test_unknown_job_and_route_return_json_404():
    app, _ = _app()
    client = app.test_client()
    assert client.get("/jobs/nope").status_code == 404
    r = client.get("/no-such-route")
    assert r.status_code == 404
    assert r.get_json() == {"error": "not_found"}


def test_print_todo_rejects_escape_sequences_in_assignee():
    app, transport = _app()
    r = _post(app.test_client(), {"title": "T", "assignee": "A\x1bi"})
    assert r.status_code == 400
    assert r.get_json()["error"] == "Assignee contains control characters"
    assert transport.writes == []


def test_create_app_twice_registers_one_exit_hook(monkeypatch):
    from todo_printer.printing import session as session_mod

    registered = []
    monkeypatch.setattr(session_mod.atexit, "register", registered.append)
    session = PrinterSession(FakeTransport(), RawEncoder(), clock=lambda: FIXED_NOW)
    create_app(session=session, register_worker=False)
    create_app(session=session, register_worker=False)
    assert len(registered) == 1
