"""Normalization of free-text contact attributes into comparable keys (no PII)."""

from __future__ import annotations

import re
import unicodedata
from typing import Any

from models import Contact

INSTITUTION_ATTRIBUTE = "ATENEO"
COURSE_ATTRIBUTE = "CORSO_ACQUISTATO"
BIRTH_DATE_ATTRIBUTE = "DATA_DI_NASCITA"

# The only attributes that survive parsing; everything else (names, email,
# phone, custom fields) is dropped before a Contact is built.
AGGREGATE_ATTRIBUTES: frozenset[str] = frozenset({
    INSTITUTION_ATTRIBUTE,
    COURSE_ATTRIBUTE,
    BIRTH_DATE_ATTRIBUTE,
})

MIN_BIRTH_YEAR = 1950
MAX_BIRTH_YEAR = 2012

_QUOTES_RE = re.compile(r"[\"“”]")
_WHITESPACE_RE = re.compile(r"\s+")
# e.g. "Modena e Reggio Emilia, sede di Modena" -> "Modena e Reggio Emilia"
_BRANCH_SUFFIX_RE = re.compile(r",\s*(?:sede di|campus)\b.*$", re.IGNORECASE)
_YEAR_RE = re.compile(r"(19[5-9]\d|20[0-4]\d)")


def normalize_institution_name(raw: Any) -> str | None:
    """Return a canonical institution name, or None when nothing usable is left."""
    if raw is None:
        return None
    value = unicodedata.normalize("NFKC", str(raw))
    value = _QUOTES_RE.sub("", value)
    value = _WHITESPACE_RE.sub(" ", value).strip()
    value = _BRANCH_SUFFIX_RE.sub("", value).strip()
    return value or None


def normalize_course_name(raw: Any) -> str | None:
    if raw is None:
        return None
    value = str(raw).strip()
    return value or None


def extract_birth_year(raw: Any) -> int | None:
    """Pull a plausible birth year out of a date-like value.

    Matches on the digit pattern alone, so "1998-05-01", "01/05/1998" and
    "1998" all yield 1998. Years outside MIN_BIRTH_YEAR..MAX_BIRTH_YEAR are
    rejected even when the pattern matches.
    """
    if raw is None:
        return None
    match = _YEAR_RE.search(str(raw).strip())
    if not match:
        return None
    year = int(match.group(1))
    if year < MIN_BIRTH_YEAR or year > MAX_BIRTH_YEAR:
        return None
    return year


def list_membership_labels(contact: Contact) -> list[str]:
    """List ids as labels, in record order; null ids are skipped."""
    return [str(list_id) for list_id in contact.list_ids if list_id is not None]
