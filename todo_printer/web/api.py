from __future__ import annotations

"""
Ticket printing endpoints.

- POST /print-todo       : Print a todo ticket (waits for the print worker)
- GET  /printer-status   : Connection state and printer target
- POST /printer/connect  : Re-attempt the printer connection
"""

from concurrent.futures import TimeoutError as FutureTimeout
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from todo_printer.core.config import setting_float
from todo_printer.core.errors import InvalidInput, NotConnected
from todo_printer.printing.session import PrinterSession
from todo_printer.printing.worker import enqueue_ticket, ensure_worker

from . import schemas

api_bp = Blueprint("api", __name__)

SESSION_KEY = "todo_printer.session"
SESSION_ERROR_KEY = "todo_printer.session_error"


def current_session() -> Optional[PrinterSession]:
    return current_app.extensions.get(SESSION_KEY)


def _json_error(msg: str, code: int, details: Optional[str] = None, job_id: Optional[str] = None):
    body = schemas.ErrorResponse(error=msg, details=details, job_id=job_id)
    return jsonify(body.model_dump(exclude_none=True)), code


def _validation_message(e: ValidationError) -> str:
    err = e.errors()[0]
    if tuple(err.get("loc") or ()) == ("title",):
        return schemas.TITLE_REQUIRED
    msg = str(err.get("msg") or e)
    return msg.removeprefix("Value error, ")


def _request_payload() -> Dict[str, Any]:
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form.to_dict()


@api_bp.post("/print-todo")
def print_todo():
    """
    Validate the ticket, hand it to the print worker and wait for the outcome.
    """
    try:
        req = schemas.TicketRequest.model_validate(_request_payload())
    except ValidationError as e:
        return _json_error(_validation_message(e), 400)

    session = current_session()
    if session is None or not session.connected:
        return _json_error("Printer is not connected", 503)

    timeout = setting_float(current_app.config.get("TODOPRINTER", {}), "print_timeout")
    ensure_worker()
    job_id, future = enqueue_ticket(
        session, req.title, req.assignee, req.description, origin="http"
    )
    try:
        ticket = future.result(timeout=timeout)
    except FutureTimeout:
        current_app.logger.error("Print job %s still running after %.1fs", job_id, timeout)
        return _json_error("Failed to print ticket", 500, details="print timed out", job_id=job_id)
    except NotConnected:
        return _json_error("Printer is not connected", 503, job_id=job_id)
    except InvalidInput as e:
        return _json_error(str(e), 400, job_id=job_id)
    except Exception as e:
        current_app.logger.error("Print error: %s", e)
        return _json_error("Failed to print ticket", 500, details=str(e), job_id=job_id)

    resp = schemas.TicketPrintedResponse(
        job_id=job_id,
        ticket=schemas.TicketOut(
            title=ticket.title,
            assignee=ticket.assignee,
            description=ticket.description,
            timestamp=datetime.now(timezone.utc).isoformat(),
        ),
    )
    return jsonify(resp.model_dump())


def _status_payload() -> Dict[str, Any]:
    settings = current_app.config.get("TODOPRINTER", {})
    session = current_session()
    if session is None:
        status: Dict[str, Any] = {
            "connected": False,
            "state": "failed",
            "last_error": current_app.extensions.get(SESSION_ERROR_KEY),
        }
    else:
        status = session.status()
    status["profile"] = settings.get("printer_profile")
    status["encoder"] = settings.get("encoder")
    return status


@api_bp.get("/printer-status")
def printer_status():
    return jsonify(_status_payload())


@api_bp.post("/printer/connect")
def printer_connect():
    """
    Re-invoke connect(); the only way out of a disconnected/failed state.
    """
    session = current_session()
    if session is None:
        return _json_error(
            "No printer configured", 503, details=current_app.extensions.get(SESSION_ERROR_KEY)
        )
    ok = session.connect()
    current_app.logger.info("Printer reconnect requested: %s", "connected" if ok else session.state.value)
    return jsonify(_status_payload()), (200 if ok else 503)
