"""Legacy double-byte text handling.

Both the translation files and the disassembled scripts come out of
Shift-JIS tooling.  Anything that still needs two bytes in that encoding
cannot be written back, so "wide" is the test for untranslated text.
"""

import re
from typing import Optional

LEGACY_ENCODING = "cp932"

# CR, LF or CRLF only; other Unicode line breaks stay inside the line
_LINE_BREAK = re.compile(r"\r\n|\r|\n")

# Box-drawing dash used as ASCII-style punctuation in the source text
_NARROW_EXCEPTIONS = frozenset("─")  # ─

# Characters allowed in a punctuation-only line
_PUNCTUATION = frozenset(".?!─'\"")


def decode(data: bytes, encoding: str = LEGACY_ENCODING) -> str:
    """Decode raw legacy bytes.  Raises UnicodeDecodeError on malformed input."""
    return data.decode(encoding)


def is_wide(ch: str) -> bool:
    """True if *ch* takes two bytes in the legacy encoding."""
    if ch in _NARROW_EXCEPTIONS:
        return False
    # Unmappable characters become '?' (one byte), same as the engine tools
    return len(ch.encode(LEGACY_ENCODING, errors="replace")) == 2


def contains_wide(text: str) -> bool:
    return any(is_wide(c) for c in text)


def is_punctuation(text: str) -> bool:
    """True if *text* is made only of sentence punctuation (JP or EN)."""
    return all(c in _PUNCTUATION for c in text)


def _strip_pair(text: str, opening: str, closing: str) -> str:
    if text.startswith(opening):
        text = text[1:]
    if text.endswith(closing):
        text = text[:-1]
    return text.strip()


def clean_quotes(text: str) -> str:
    """Strip one pair of 『』 speech quotes."""
    return _strip_pair(text, "『", "』")


def clean_nametag(text: str) -> str:
    """Strip one pair of 【】 name brackets."""
    return _strip_pair(text, "【", "】")


def quote_literals(text: str) -> str:
    """Escape double quotes for a ``["..."]`` operand."""
    return text.replace('"', '\\"')


def read_legacy_lines(path: str, encoding: str = LEGACY_ENCODING) -> list:
    """Read a legacy-encoded file and split it on LF (CRs are left in place)."""
    with open(path, "rb") as f:
        return decode(f.read(), encoding).split("\n")


def detect_translation_encoding(data: bytes) -> str:
    """Pick the encoding of a translation file.

    Files saved by the Shift-JIS editors use CRLF; anything whose first
    line does not end in CR is treated as UTF-8.
    """
    newline = data.find(b"\n")
    first_line = data if newline < 0 else data[:newline]
    if first_line.endswith(b"\r"):
        return LEGACY_ENCODING
    return "utf-8-sig"


def read_translation_lines(path: str, encoding: Optional[str] = None) -> list:
    """Read a translation file as a list of physical lines."""
    with open(path, "rb") as f:
        data = f.read()
    encoding = encoding or detect_translation_encoding(data)
    text = decode(data, encoding)
    if encoding != LEGACY_ENCODING:
        lines = _LINE_BREAK.split(text)
        if lines[-1] == "":
            lines.pop()
        return lines
    return text.split("\n")
