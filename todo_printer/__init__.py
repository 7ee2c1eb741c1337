"""
Todo Printer package

This module provides an application factory with minimal wiring:
- Configures logging via todo_printer.core.logging
- Resolves printer settings (defaults < config file < TODOPRINTER_* env < overrides)
- Builds the printer session and connects once at startup; a failed connect
  leaves the service up with the printer reported as disconnected
- Registers the JSON blueprints and starts the background print worker
"""

from __future__ import annotations

import importlib
import uuid
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from flask import Flask, g

from todo_printer.core.config import resolve_settings
from todo_printer.core.errors import TransportUnavailable
from todo_printer.core.logging import configure_logging
from todo_printer.printing.session import PrinterSession

__version__ = "1.0.0"

DEFAULT_BLUEPRINTS: Sequence[tuple[str, str]] = (
    ("todo_printer.web.routes", "web_bp"),  # usage description
    ("todo_printer.web.health", "health_bp"),  # health endpoint
    ("todo_printer.web.api", "api_bp"),  # print + printer status
    ("todo_printer.web.jobs", "jobs_bp"),  # job status
)


def _register_blueprint(app: Flask, import_path: str, attr: str) -> None:
    mod = importlib.import_module(import_path)
    app.register_blueprint(getattr(mod, attr))
    app.logger.debug(f"Registered blueprint: {import_path}.{attr}")


def _set_request_id() -> None:
    """
    Assign a request ID for logging if not set elsewhere.
    """
    g.request_id = getattr(g, "request_id", uuid.uuid4().hex)


def _build_session(app: Flask, settings: Mapping[str, Any]) -> Optional[PrinterSession]:
    try:
        return PrinterSession.from_settings(settings)
    except TransportUnavailable as e:
        app.logger.warning("No usable printer target: %s", e)
        app.extensions["todo_printer.session_error"] = f"TransportUnavailable: {e}"
        return None


def create_app(
    settings: Optional[Mapping[str, Any]] = None,
    config_overrides: Optional[dict] = None,
    session: Optional[PrinterSession] = None,
    connect_printer: bool = True,
    register_worker: bool = True,
    blueprints: Optional[Sequence[tuple[str, str]]] = None,
) -> Flask:
    """
    Application factory.

    Parameters:
    - settings: printer setting overrides applied on top of file/env config
    - config_overrides: values to inject into app.config after defaults
    - session: use this printer session instead of building one from settings
    - connect_printer: if True, connect the session once at startup
    - register_worker: if True, start the background print worker
    - blueprints: optional list of (import_path, attribute) tuples to register

    Returns:
    - Flask app instance
    """
    configure_logging()

    app = Flask("todo_printer")
    app.url_map.strict_slashes = False

    resolved = resolve_settings(settings)
    app.config["TODOPRINTER"] = resolved

    if session is None:
        session = _build_session(app, resolved)
    app.extensions["todo_printer.session"] = session

    if session is not None and connect_printer:
        app.logger.info("Connecting to printer...")
        if session.connect():
            app.logger.info("Printer status: connected")
        else:
            app.logger.warning(
                "Printer status: not connected (%s); make sure it is powered on and reachable",
                session.transport.last_error or session.state.value,
            )
        session.disconnect_at_exit()

    @app.before_request
    def _before_request():
        _set_request_id()

    @app.errorhandler(404)
    def _not_found(_e):
        return {"error": "not_found"}, 404

    @app.errorhandler(405)
    def _method_not_allowed(_e):
        return {"error": "method_not_allowed"}, 405

    for import_path, attr in blueprints or DEFAULT_BLUEPRINTS:
        _register_blueprint(app, import_path, attr)

    if register_worker:
        from todo_printer.printing.worker import ensure_worker

        ensure_worker()
        app.logger.info("Background worker ensured")

    if config_overrides:
        app.config.update(config_overrides)

    app.logger.info("Todo Printer app created")
    return app


__all__ = ["__version__", "create_app"]
