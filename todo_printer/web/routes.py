from __future__ import annotations

"""
Usage description served at `/`.
"""

from flask import Blueprint

web_bp = Blueprint("web", __name__)


@web_bp.get("/")
def index():
    from todo_printer import __version__

    return {
        "name": "Todo Ticket Printer Server",
        "version": __version__,
        "endpoints": {
            "GET /": "This help message",
            "GET /health": "Health check",
            "GET /printer-status": "Printer connection status",
            "POST /printer/connect": "Retry the printer connection",
            "POST /print-todo": "Print a todo ticket",
            "GET /jobs": "Recent print jobs",
            "GET /jobs/<job_id>": "Status of one print job",
        },
        "usage": {
            "POST /print-todo": {
                "body": {
                    "title": "string (required) - The main task title",
                    "assignee": "string (optional) - Person assigned to the task",
                    "description": "string (optional) - Additional task details",
                },
            },
        },
        "example": {
            "title": "Fix the login bug",
            "assignee": "John Doe",
            "description": "Users are unable to login with special characters in their passwords",
        },
    }
