"""
Directive encoders.

An encoder turns a directive sequence into the byte stream for one ticket:

- EscposEncoder drives python-escpos' Dummy printer, so the selected capability
  profile decides the exact command bytes and text codepage handling
- RawEncoder is a fixed ESC/POS byte table for printers or environments where
  the profile machinery is not wanted
"""

from __future__ import annotations

import codecs
import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any, Dict, Optional

from todo_printer.core.config import setting_int

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

logger = logging.getLogger(__name__)

ESC = b"\x1b"
GS = b"\x1d"
LF = b"\n"

INIT = ESC + b"@"
ALIGN = {
    Align.LEFT: ESC + b"a\x00",
    Align.CENTER: ESC + b"a\x01",
    Align.RIGHT: ESC + b"a\x02",
}
BOLD = {True: ESC + b"E\x01", False: ESC + b"E\x00"}
UNDERLINE = {True: ESC + b"-\x01", False: ESC + b"-\x00"}
INVERT = {True: GS + b"B\x01", False: GS + b"B\x00"}
PRINT_MODE = ESC + b"!"
CUT = ESC + b"i"
CUT_FEED_LINES = 3

# ESC ! mode bits
MODE_EMPHASIZED = 0x08
# Bit 4 of the ESC ! bitmask. A literal "ESC ! 1" selects Font B on Epson
# firmware, not double height.
MODE_DOUBLE_HEIGHT = 0x10
MODE_DOUBLE_WIDTH = 0x20
MODE_UNDERLINE = 0x80

# ESC t <n> codepage numbers (Epson numbering)
CODEPAGES: Dict[str, int] = {
    "cp437": 0,
    "cp850": 2,
    "cp860": 3,
    "cp863": 4,
    "cp865": 5,
    "cp1252": 16,
    "cp866": 17,
    "cp852": 18,
    "cp858": 19,
}


def _normalize_charset(name: Optional[str]) -> str:
    """Map names like "PC852_LATIN2" or "CP-852" onto Python codec names ("cp852")."""
    value = str(name or "").strip().lower()
    m = re.match(r"^(?:pc|cp)[-_]?(\d+)", value)
    if m:
        return "cp" + m.group(1)
    return value


class RawEncoder:
    """ESC/POS byte-table encoder."""

    def __init__(self, character_set: str = "cp852", line_width: int = 48, line_character: str = "=") -> None:
        charset = _normalize_charset(character_set)
        if charset in ("", "auto"):
            charset = "cp437"
        self.codec = codecs.lookup(charset).name
        self.codepage = CODEPAGES.get(charset)
        self.separator = (line_character or "-")[:1] * line_width

    def _mode_byte(self, bold: bool, underline: bool, scale: tuple[int, int]) -> bytes:
        mode = 0
        if bold:
            mode |= MODE_EMPHASIZED
        if underline:
            mode |= MODE_UNDERLINE
        if scale[0] > 1:
            mode |= MODE_DOUBLE_WIDTH
        if scale[1] > 1:
            mode |= MODE_DOUBLE_HEIGHT
        return PRINT_MODE + bytes((mode,))

    def encode(self, directives: Sequence[RenderDirective]) -> bytes:
        out = bytearray(INIT)
        if self.codepage is not None:
            out += ESC + b"t" + bytes((self.codepage,))
        bold = underline = False
        scale = (1, 1)
        for d in directives:
            if isinstance(d, SetAlign):
                out += ALIGN[d.align]
            elif isinstance(d, SetEmphasis):
                if d.style is Emphasis.BOLD:
                    bold = d.enabled
                    out += BOLD[d.enabled]
                elif d.style is Emphasis.UNDERLINE:
                    underline = d.enabled
                    out += UNDERLINE[d.enabled]
                else:
                    out += INVERT[d.enabled]
            elif isinstance(d, SetTextScale):
                # ESC ! resets emphasis bits too, so carry the current ones
                scale = (d.width, d.height)
                out += self._mode_byte(bold, underline, scale)
            elif isinstance(d, Text):
                out += d.value.encode(self.codec, errors="replace")
            elif isinstance(d, NewLine):
                out += LF
            elif isinstance(d, DrawSeparator):
                out += self.separator.encode(self.codec, errors="replace") + LF
            elif isinstance(d, Cut):
                out += LF * CUT_FEED_LINES + CUT
            else:
                raise TypeError(f"unknown directive: {d!r}")
        logger.debug("Raw-encoded %d directives into %d bytes", len(directives), len(out))
        return bytes(out)


class EscposEncoder:
    """Encoder backed by python-escpos' Dummy printer and a capability profile."""

    def __init__(
        self,
        profile: Optional[str] = "default",
        character_set: str = "cp852",
        line_width: int = 48,
        line_character: str = "=",
    ) -> None:
        self.profile = profile or None
        charset = _normalize_charset(character_set)
        self.charcode = None if charset in ("", "auto") else charset.upper()
        self.separator = (line_character or "-")[:1] * line_width

    def _new_printer(self):
        from escpos.printer import Dummy

        if self.profile:
            return Dummy(profile=self.profile)
        return Dummy()

    def encode(self, directives: Sequence[RenderDirective]) -> bytes:
        p = self._new_printer()
        p.hw("INIT")
        if self.charcode:
            p.charcode(self.charcode)
        style: Dict[str, Any] = {"align": "left", "bold": False, "underline": 0, "invert": False}
        size = (1, 1)

        def apply() -> None:
            p.set(custom_size=True, width=size[0], height=size[1], **style)

        for d in directives:
            if isinstance(d, SetAlign):
                style["align"] = d.align.value
                apply()
            elif isinstance(d, SetEmphasis):
                if d.style is Emphasis.UNDERLINE:
                    style["underline"] = 1 if d.enabled else 0
                else:
                    style[d.style.value] = d.enabled
                apply()
            elif isinstance(d, SetTextScale):
                size = (d.width, d.height)
                apply()
            elif isinstance(d, Text):
                p.text(d.value)
            elif isinstance(d, NewLine):
                p.text("\n")
            elif isinstance(d, DrawSeparator):
                p.text(self.separator + "\n")
            elif isinstance(d, Cut):
                p.cut()
            else:
                raise TypeError(f"unknown directive: {d!r}")
        data = p.output
        logger.debug("Encoded %d directives with profile %s into %d bytes", len(directives), self.profile, len(data))
        return data


def make_encoder(settings: Mapping[str, Any]):
    """Select the encoder named by settings["encoder"] ("escpos" or "raw")."""
    kind = str(settings.get("encoder") or "escpos").strip().lower()
    charset = str(settings.get("character_set") or "")
    width = setting_int(settings, "line_width")
    char = str(settings.get("line_character") or "=")
    if kind == "raw":
        return RawEncoder(character_set=charset, line_width=width, line_character=char)
    if kind == "escpos":
        return EscposEncoder(
            profile=settings.get("printer_profile") or None,
            character_set=charset,
            line_width=width,
            line_character=char,
        )
    raise ValueError(f"Unsupported encoder: {kind}")


__all__ = ["CODEPAGES", "EscposEncoder", "RawEncoder", "make_encoder"]
