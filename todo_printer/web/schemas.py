from __future__ import annotations

"""
Pydantic schemas for the Todo Printer HTTP API.

Incoming ticket requests are trimmed and validated here; blank optional fields
become None. Length limits are env-driven.
"""

import os
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except Exception:
        return default


MAX_TITLE_LEN = _env_int("TODOPRINTER_MAX_TITLE_LEN", 200)
MAX_ASSIGNEE_LEN = _env_int("TODOPRINTER_MAX_ASSIGNEE_LEN", 60)
MAX_DESCRIPTION_LEN = _env_int("TODOPRINTER_MAX_DESCRIPTION_LEN", 1000)

TITLE_REQUIRED = "Title is required and must be a non-empty string"


def _has_control_chars(s: str) -> bool:
    return any((ord(c) < 32 and c not in "\n\r\t") or ord(c) == 127 for c in s)


class TicketRequest(BaseModel):
    """Body of POST /print-todo."""

    title: str = Field(
        description="The main task title",
        examples=["Fix the login bug"],
    )
    assignee: Optional[str] = Field(
        default=None,
        description="Person assigned to the task",
        examples=["John Doe"],
    )
    description: Optional[str] = Field(
        default=None,
        description="Additional task details",
        examples=["Users are unable to login with special characters in their passwords"],
    )

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError(TITLE_REQUIRED)
        v = v.strip()
        if len(v) > MAX_TITLE_LEN:
            raise ValueError(f"Title too long (max {MAX_TITLE_LEN} characters)")
        if _has_control_chars(v):
            raise ValueError("Title contains control characters")
        return v

    @field_validator("assignee", "description", mode="before")
    @classmethod
    def _optional_text(cls, v: Any, info: ValidationInfo) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        if _has_control_chars(v):
            raise ValueError(f"{info.field_name.capitalize()} contains control characters")
        return v or None

    @field_validator("assignee")
    @classmethod
    def _assignee_len(cls, v: Optional[str]) -> Optional[str]:
        if v and len(v) > MAX_ASSIGNEE_LEN:
            raise ValueError(f"Assignee too long (max {MAX_ASSIGNEE_LEN} characters)")
        return v

    @field_validator("description")
    @classmethod
    def _description_len(cls, v: Optional[str]) -> Optional[str]:
        if v and len(v) > MAX_DESCRIPTION_LEN:
            raise ValueError(f"Description too long (max {MAX_DESCRIPTION_LEN} characters)")
        return v


class TicketOut(BaseModel):
    title: str
    assignee: Optional[str] = None
    description: Optional[str] = None
    timestamp: str


class TicketPrintedResponse(BaseModel):
    success: bool = True
    message: str = "Todo ticket printed successfully"
    job_id: str
    ticket: TicketOut


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
    job_id: Optional[str] = None


__all__ = [
    "ErrorResponse",
    "TITLE_REQUIRED",
    "TicketOut",
    "TicketPrintedResponse",
    "TicketRequest",
]
