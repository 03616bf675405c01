"""Text helpers that count length the way Wikibase does (UTF-16 code units)."""

from __future__ import annotations


def clean_text(value: object) -> str | None:
    """Return the stripped string, or None when the value is missing or blank."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def utf16_length(text: str) -> int:
    return sum(2 if ord(char) > 0xFFFF else 1 for char in text)


def truncate_utf16(text: str, limit: int) -> str:
    """Slice ``text`` to at most ``limit`` UTF-16 code units.

    A character outside the BMP occupies two units; if only its first unit would fit,
    the whole character is dropped rather than leaving a lone surrogate.
    """
    units = 0
    for index, char in enumerate(text):
        width = 2 if ord(char) > 0xFFFF else 1
        if units + width > limit:
            return text[:index]
        units += width
    return text
