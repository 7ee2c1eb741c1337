"""
Fixed-width word wrapping for receipt text.

Lines are measured in characters (the printer's monospace cells), not pixels.
Words are never split or hyphenated: a word longer than the width sits alone
on its own, over-width line.
"""

from __future__ import annotations

from typing import List


def wrap(text: str, width: int) -> List[str]:
    """
    Greedily wrap `text` into lines of at most `width` characters.

    Args:
        text: Input text; any run of whitespace separates words.
        width: Maximum line length in characters, must be > 0.

    Returns:
        The wrapped lines, empty when `text` has no words.
    """
    if width <= 0:
        raise ValueError(f"width must be positive, got {width}")

    lines: List[str] = []
    current = ""
    for word in (text or "").split():
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= width:
            current = f"{current} {word}"
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


__all__ = ["wrap"]
