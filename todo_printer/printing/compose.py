"""
Ticket composition.

Turns a Ticket into the fixed receipt layout as a list of render directives:

    TODO banner (centered, 2x2, bold + inverted)
    separator
    title (24 chars per line, 1x2, bold)
    OWNER: <assignee>   (optional, assignee underlined)
    NOTES: / > description lines   (optional, 22 chars + "> ")
    timestamp (centered, rounded to the nearest hour)
    cut
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from .directives import (
    Align,
    Cut,
    DrawSeparator,
    Emphasis,
    NewLine,
    RenderDirective,
    SetAlign,
    SetEmphasis,
    SetTextScale,
    Text,
)
from .layout import wrap

TITLE_WIDTH = 24
NOTES_WIDTH = 22
NOTES_PREFIX = "> "
BANNER = " TODO "
OWNER_LABEL = "OWNER: "
NOTES_LABEL = "NOTES:"

# English names regardless of process locale
_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _strip_control(value: str) -> str:
    """Drop C0 control characters other than newline and tab, and DEL."""
    return "".join(c for c in value if c in "\n\t" or (32 <= ord(c) != 127))


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = _strip_control(str(value)).strip()
    return value or None


@dataclass(frozen=True)
class Ticket:
    title: str
    assignee: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def create(cls, title: str, assignee: Optional[str] = None, description: Optional[str] = None) -> "Ticket":
        """Build a ticket with trimmed fields; blank optional fields become None."""
        return cls(title=_strip_control(title or "").strip(), assignee=_clean(assignee), description=_clean(description))


def round_to_hour(now: datetime) -> datetime:
    """Round to the nearest hour; minute 30 and later rounds up (rolling the date if needed)."""
    base = now.replace(minute=0, second=0, microsecond=0)
    if now.minute >= 30:
        base += timedelta(hours=1)
    return base


def format_timestamp(now: datetime) -> str:
    """
    Format e.g. ``3p Tue - Jun 4`` from the time rounded to the nearest hour.

    Hour 0 displays as 12; noon and later use the ``p`` suffix.
    """
    rounded = round_to_hour(now)
    hour12 = rounded.hour % 12 or 12
    suffix = "p" if rounded.hour >= 12 else "a"
    weekday = _WEEKDAYS[rounded.weekday()]
    month = _MONTHS[rounded.month - 1]
    return f"{hour12}{suffix} {weekday} - {month} {rounded.day}"


def _banner() -> List[RenderDirective]:
    return [
        SetAlign(Align.CENTER),
        SetTextScale(2, 2),
        SetEmphasis(Emphasis.BOLD, True),
        SetEmphasis(Emphasis.INVERT, True),
        Text(BANNER),
        NewLine(),
        SetEmphasis(Emphasis.INVERT, False),
        SetEmphasis(Emphasis.BOLD, False),
        SetTextScale(1, 1),
    ]


def _title(title: str) -> List[RenderDirective]:
    out: List[RenderDirective] = [SetTextScale(1, 2), SetEmphasis(Emphasis.BOLD, True)]
    for line in wrap(title, TITLE_WIDTH):
        out += [Text(line), NewLine()]
    out += [SetEmphasis(Emphasis.BOLD, False), SetTextScale(1, 1), NewLine()]
    return out


def _owner(assignee: str) -> List[RenderDirective]:
    return [
        SetEmphasis(Emphasis.BOLD, True),
        Text(OWNER_LABEL),
        SetEmphasis(Emphasis.BOLD, False),
        SetEmphasis(Emphasis.UNDERLINE, True),
        Text(assignee),
        NewLine(),
        SetEmphasis(Emphasis.UNDERLINE, False),
        NewLine(),
    ]


def _notes(description: str) -> List[RenderDirective]:
    out: List[RenderDirective] = [
        SetEmphasis(Emphasis.BOLD, True),
        Text(NOTES_LABEL),
        NewLine(),
        SetEmphasis(Emphasis.BOLD, False),
    ]
    for line in wrap(description, NOTES_WIDTH):
        out += [Text(f"{NOTES_PREFIX}{line}"), NewLine()]
    out.append(NewLine())
    return out


def compose(ticket: Ticket, now: Optional[datetime] = None) -> List[RenderDirective]:
    """
    Build the directive sequence for `ticket`.

    `now` defaults to the local current time; pass it explicitly for
    reproducible output.
    """
    directives: List[RenderDirective] = _banner()
    directives += [SetAlign(Align.LEFT), DrawSeparator()]
    directives += _title(_strip_control(ticket.title))

    assignee = _clean(ticket.assignee)
    if assignee:
        directives += _owner(assignee)

    description = _clean(ticket.description)
    if description:
        directives += _notes(description)

    stamp = format_timestamp(now or datetime.now())
    directives += [SetAlign(Align.CENTER), Text(stamp), NewLine(), SetAlign(Align.LEFT), Cut()]
    return directives


__all__ = [
    "NOTES_PREFIX",
    "NOTES_WIDTH",
    "TITLE_WIDTH",
    "Ticket",
    "compose",
    "format_timestamp",
    "round_to_hour",
]
