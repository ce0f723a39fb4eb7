"""URL slugs for directory records.

A slug is the slugified title followed by the record id, e.g.
``"sweeps-luck-1201"``. Only the trailing digit run is read back, so titles
that themselves end in numbers still resolve to the right record.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Any, Dict, Optional

from slugify import slugify

TRAILING_ID_RE = re.compile(r"([0-9]+)\Z")

# Scraped titles sometimes arrive as UTF-8 bytes decoded with a Windows/Latin
# codepage ("CafÃ©" for "Café").
_MOJIBAKE_CODECS = ("cp1252", "latin-1")

COMBINING_MARKS_RE = re.compile(r"[\u0300-\u036f]")
# Letters without an ASCII base form are separators, never transliterated.
NON_ASCII_RE = re.compile(r"[^\x00-\x7f]+")
# slugify joins "1,000" into "1000"; keep the comma a separator.
DIGIT_COMMA_REPLACEMENTS = [(",", "-")]


def _repair_mojibake(text: str) -> str:
    if text.isascii():
        return text
    for codec in _MOJIBAKE_CODECS:
        try:
            return text.encode(codec).decode("utf-8")
        except UnicodeError:
            continue
    return text


def _strip_diacritics(text: str) -> str:
    return COMBINING_MARKS_RE.sub("", unicodedata.normalize("NFKD", text))


def generate_slug(title: str, place_id: int) -> str:
    text = _strip_diacritics(_repair_mojibake(title or "").lower())
    text = NON_ASCII_RE.sub("-", text)
    slug = slugify(text, entities=False, decimal=False, hexadecimal=False, replacements=DIGIT_COMMA_REPLACEMENTS)
    return f"{slug}-{place_id}"


def extract_id_from_slug(slug: Optional[str]) -> Optional[int]:
    if not slug:
        return None
    match = TRAILING_ID_RE.search(slug)
    if not match:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        return None


def place_slug(record: Dict[str, Any]) -> Optional[str]:
    """Stored slug if the record has one, otherwise one derived from title + id."""
    if record.get("slug"):
        return record["slug"]
    if record.get("id") is None:
        return None
    return generate_slug(record.get("title") or "", record["id"])
