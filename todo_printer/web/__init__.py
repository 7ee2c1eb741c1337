"""
Web module for Todo Printer.

Exposes blueprints for:
- Usage description: web_bp
- Ticket printing and printer status: api_bp
- Jobs endpoints: jobs_bp
- Health endpoint: health_bp
"""

from .api import api_bp
from .health import health_bp
from .jobs import jobs_bp
from .routes import web_bp

__all__ = ["api_bp", "health_bp", "jobs_bp", "web_bp"]
