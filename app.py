#!/usr/bin/env python3
"""
Todo Printer - HTTP server that prints todo tickets on an ESC/POS thermal printer.

Usage:
    python app.py [serve] [--host HOST] [--port PORT]
    python app.py print TITLE [--assignee NAME] [--description TEXT]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from todo_printer import create_app
from todo_printer.core.config import resolve_settings
from todo_printer.core.errors import TodoPrinterError
from todo_printer.core.logging import configure_logging
from todo_printer.printing.session import PrinterSession

logger = logging.getLogger("todo_printer.cli")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Todo ticket printer")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP server (default)")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=3000)
    serve.add_argument("--debug", action="store_true")

    prt = sub.add_parser("print", help="Print a single ticket and exit")
    prt.add_argument("title")
    prt.add_argument("--assignee", default=None)
    prt.add_argument("--description", default=None)
    return parser


def serve(host: str, port: int, debug: bool = False) -> int:
    app = create_app()
    logger.info("Todo Ticket Printer Server running on http://%s:%d", host, port)
    app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)
    return 0


def print_once(title: str, assignee: Optional[str], description: Optional[str]) -> int:
    configure_logging()
    try:
        session = PrinterSession.from_settings(resolve_settings())
    except TodoPrinterError as e:
        logger.error("%s", e)
        return 2
    if not session.connect():
        logger.error("Could not connect to printer: %s", session.transport.last_error)
        return 1
    try:
        session.print_ticket(title, assignee, description)
    except TodoPrinterError as e:
        logger.error("Print failed: %s", e)
        return 1
    finally:
        session.disconnect()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser().parse_args(argv)
    if args.command == "print":
        return print_once(args.title, args.assignee, args.description)
    return serve(getattr(args, "host", "0.0.0.0"), getattr(args, "port", 3000), getattr(args, "debug", False))


if __name__ == "__main__":
    sys.exit(main())
