from __future__ import annotations

"""
Health endpoint for Todo Printer.

`/health` reports the service status, whether the printer session is
connected, and the background worker/queue state. It never touches the
printer itself.
"""

from datetime import datetime, timezone

from flask import Blueprint

from todo_printer.printing.worker import worker_status

from .api import current_session

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    session = current_session()
    connected = bool(session and session.connected)
    return {
        "status": "ok",
        "printer": "connected" if connected else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "worker": worker_status(),
    }
