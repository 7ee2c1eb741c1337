"""
Log setup for the ticket printer service.

Every record is tagged with the HTTP request it came from (``request_id``,
``path``) or ``-`` when it was emitted by the print worker or at startup.
Worker records may also carry the ``job_id`` of the ticket being printed.
Set TODOPRINTER_JSON_LOGS=true to get one JSON object per line.
"""

from __future__ import annotations

import logging
import os


class RequestIdFilter(logging.Filter):
    """Tag records with the current request id and path, or ``-`` off-request."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        try:
            from flask import g, has_request_context, request  # lazy import

            record.request_id = g.request_id if has_request_context() and hasattr(g, "request_id") else "-"
            record.path = request.path if has_request_context() else "-"
        except Exception:
            record.request_id = "-"
            record.path = "-"
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record; ``job_id`` and ``exc`` only when present."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        from json import dumps

        base = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }
        path = getattr(record, "path", None)
        if path is not None:
            base["path"] = path
        job_id = getattr(record, "job_id", None)
        if job_id is not None:
            base["job_id"] = job_id
        if record.exc_info:
            base["exc"] = self.formatException(record.exc_info)
        return dumps(base, ensure_ascii=False)


def _json_logs_enabled() -> bool:
    return os.environ.get("TODOPRINTER_JSON_LOGS", "false").lower() in ("1", "true", "yes")


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Install a single handler on the root logger and return it.

    Output goes to journald when python-systemd is importable (the service
    normally runs under a systemd unit next to the printer), otherwise to
    stderr. Calling it again replaces the handler, so app reloads and repeated
    ``create_app`` calls in tests do not duplicate lines. Flask's own logger is
    cleared and left to propagate so request logs share the same format.
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = []

    formatter: logging.Formatter
    if _json_logs_enabled():
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter("[%(asctime)s] %(levelname)s %(request_id)s %(name)s: %(message)s")

    try:
        from systemd.journal import JournalHandler  # type: ignore

        handler: logging.Handler = JournalHandler()
    except ImportError:
        handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    handler.addFilter(RequestIdFilter())
    root.addHandler(handler)

    flask_logger = logging.getLogger("flask.app")
    flask_logger.handlers = []
    flask_logger.propagate = True

    return root


__all__ = ["JsonFormatter", "RequestIdFilter", "configure_logging"]
