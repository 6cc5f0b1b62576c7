"""XML escaping for character data and attribute values."""

from typing import Dict


REPLACEMENT_CHARACTER = '\ufffd'

# Numeric references for quotes are shorter than &quot; / &apos;.
_ESCAPES: Dict[str, str] = {
    '"': '&#34;',
    "'": '&#39;',
    '&': '&amp;',
    '<': '&lt;',
    '>': '&gt;',
    '\t': '&#x9;',
    '\n': '&#xA;',
    '\r': '&#xD;',
}


def is_in_character_range(codepoint: int) -> bool:
    """Check a code point against the XML 1.0 Char production"""
    return (
        codepoint == 0x09
        or codepoint == 0x0A
        or codepoint == 0x0D
        or 0x20 <= codepoint <= 0xD7FF
        or 0xE000 <= codepoint <= 0xFFFD
        or 0x10000 <= codepoint <= 0x10FFFF
    )


def escape_text(value: str) -> str:
    """Return an XML-safe rendering of value.

    Markup characters and tab/newline/carriage return become references,
    characters outside the XML character range become U+FFFD. Bytes that
    failed to decode are already U+FFFD by the time they get here.
    """
    parts = []
    for char in value:
        escaped = _ESCAPES.get(char)
        if escaped is not None:
            parts.append(escaped)
        elif is_in_character_range(ord(char)):
            parts.append(char)
        else:
            parts.append(REPLACEMENT_CHARACTER)
    return ''.join(parts)
