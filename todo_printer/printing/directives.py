"""
Render directives: the printer-independent plan for one ticket.

The composer emits an ordered list of these; an encoder turns the list into
printer bytes. Directives are immutable values.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Align(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class Emphasis(str, Enum):
    BOLD = "bold"
    UNDERLINE = "underline"
    INVERT = "invert"


@dataclass(frozen=True)
class SetAlign:
    align: Align


@dataclass(frozen=True)
class SetEmphasis:
    style: Emphasis
    enabled: bool


@dataclass(frozen=True)
class SetTextScale:
    """Character magnification, 1..8 in each direction."""

    width: int = 1
    height: int = 1

    def __post_init__(self) -> None:
        if not (1 <= self.width <= 8 and 1 <= self.height <= 8):
            raise ValueError(f"text scale out of range: {self.width}x{self.height}")


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class NewLine:
    pass


@dataclass(frozen=True)
class DrawSeparator:
    pass


@dataclass(frozen=True)
class Cut:
    pass


RenderDirective = Union[SetAlign, SetEmphasis, SetTextScale, Text, NewLine, DrawSeparator, Cut]


__all__ = [
    "Align",
    "Cut",
    "DrawSeparator",
    "Emphasis",
    "NewLine",
    "RenderDirective",
    "SetAlign",
    "SetEmphasis",
    "SetTextScale",
    "Text",
]
