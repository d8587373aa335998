"""Mojibake detection and repair for text of uncertain encoding.

Rosters arrive as CSV files exported by spreadsheets that may have saved
them as UTF-8, Windows-1252 or ISO-8859-1, and form fields sometimes carry
UTF-8 text that was decoded one step too early as Latin-1 (``JosÃ©``).

Three pure functions are exposed:

* :func:`has_artifacts` tells whether a string looks mis-decoded.
* :func:`repair_text` tries to recover the intended text of one string.
* :func:`repair_buffer` decodes raw file bytes of unknown encoding.

None of them raise: when no candidate decoding is safe the input is handed
back untouched, since guessing wrong would corrupt correct data silently.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Union

__all__ = [
    "CANDIDATE_ENCODINGS",
    "REPLACEMENT_CHAR",
    "has_artifacts",
    "repair_text",
    "repair_buffer",
    "strip_bom",
]

# Ordered by likelihood for Spanish text; latin-1 maps every byte and never fails.
CANDIDATE_ENCODINGS: tuple[str, ...] = ("utf-8", "windows-1252", "iso-8859-1", "latin-1")

REPLACEMENT_CHAR = "\ufffd"
BOM = "\ufeff"

# UTF-8 lead bytes C3/C2 rendered under a single-byte code page, followed by
# the continuation byte. Line terminators never count as that byte.
_DOUBLE_DECODE_RE = re.compile(r"Ã[^\n\r\u2028\u2029]|Â[^\n\r\u2028\u2029]")

BytesLike = Union[bytes, bytearray, memoryview, Iterable[int]]


def has_artifacts(text) -> bool:
    """Return True when *text* shows a mis-decoding fingerprint.

    A replacement character means an earlier decode was lossy; ``Ã``/``Â``
    followed by another character is UTF-8 read as Latin-1. Anything that is
    not a non-empty string is reported as clean.
    """
    if not text or not isinstance(text, str):
        return False
    return REPLACEMENT_CHAR in text or _DOUBLE_DECODE_RE.search(text) is not None


def _decode(data: bytes, encoding: str) -> Optional[str]:
    try:
        return data.decode(encoding, errors="replace")
    except (LookupError, UnicodeError, TypeError, ValueError):
        return None


def _first_clean_decoding(data: bytes) -> Optional[str]:
    for encoding in CANDIDATE_ENCODINGS:
        decoded = _decode(data, encoding)
        if decoded is not None and not has_artifacts(decoded):
            return decoded
    return None


def repair_text(text):
    """Recover the intended text of a string mis-decoded as Latin-1.

    Each code point is taken back to the byte it came from and the bytes are
    decoded again under the candidate encodings, UTF-8 first. The first
    decoding without artifacts wins. Text that is clean, already holds a
    replacement character, has code points above 0xFF or cannot be fixed is
    returned unchanged. Non-string values pass through as they are.
    """
    if not text or not isinstance(text, str):
        return text

    # U+FFFD means the original bytes are gone; rebuilding them would invent data.
    if REPLACEMENT_CHAR in text:
        return text

    if not has_artifacts(text):
        return text

    try:
        raw = text.encode("latin-1")
    except UnicodeEncodeError:
        # Not the product of a single-byte misdecode.
        return text

    repaired = _first_clean_decoding(raw)
    return repaired if repaired is not None else text


def _as_bytes(data: BytesLike) -> Optional[bytes]:
    if isinstance(data, bytes):
        return data
    # bytes(n) would build n NUL bytes.
    if isinstance(data, int):
        return None
    try:
        return bytes(data)
    except (TypeError, ValueError):
        return None


def repair_buffer(data: Optional[BytesLike]) -> str:
    """Decode raw file contents of unknown encoding into text.

    The buffer is decoded under each candidate encoding in turn and the first
    result without artifacts is returned. Mixed or damaged files fall back to
    a lenient UTF-8 decode, and to ``""`` if even that is impossible.
    """
    if data is None:
        return ""

    raw = _as_bytes(data)
    if not raw:
        return ""

    decoded = _first_clean_decoding(raw)
    if decoded is not None:
        return decoded

    fallback = _decode(raw, "utf-8")
    return fallback or ""


def strip_bom(text: str) -> str:
    """Drop a leading byte-order mark left over from a spreadsheet export."""
    if isinstance(text, str) and text.startswith(BOM):
        return text[len(BOM):]
    return text
