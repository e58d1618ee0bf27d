"""
Field sanitizers: total coercion of raw cell strings into constrained values.

**Conceptual**: Spreadsheet cells are untyped, hand-edited strings. Every
field of every record passes through one of the functions below, which turn
whatever is in the cell into a value of the target type.

**Contract**: every sanitizer is *total*. It never raises and always returns a
value of its target type, substituting a documented default for missing or
malformed input. Bad cell data is therefore never an error in this system; a
typo in a status column degrades to the default status instead of aborting the
load.

Sanitizer summary:
  - sanitize_text: trimmed string capped at MAX_TEXT_LENGTH.
  - sanitize_id: lowercase slug over [a-z0-9_-], capped at MAX_ID_LENGTH.
  - sanitize_color_class: palette value, or a stable hash-based pick.
  - sanitize_number: float, or the caller's default.
  - sanitize_date: "YYYY-MM-DD", or "".
  - sanitize_url: http(s)/anchor URL, or "".
  - sanitize_boolean: True only for "true" (any case).
  - sanitize_enum: canonical enum value via alias table, or the default.
"""

import math
import re
import warnings
from typing import Any, Mapping

import pandas as pd

from sprint_tracker.data.schemas import (
    COLOR_CLASSES,
    DEFAULT_MILESTONE_STATUS,
    DEFAULT_PRIORITY,
    DEFAULT_TASK_STATUS,
    MAX_ID_LENGTH,
    MAX_TEXT_LENGTH,
    MILESTONE_STATUSES,
    PRIORITY_LEVELS,
    TASK_STATUSES,
)


_ID_DISALLOWED = re.compile(r"[^a-z0-9_-]")
_WHITESPACE_RUN = re.compile(r"\s+")
_DIGIT = re.compile(r"\d")

_URL_PREFIXES = ("http://", "https://", "#")


def _to_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def sanitize_text(value: Any) -> str:
    """Stringify, trim and truncate to MAX_TEXT_LENGTH characters."""
    return _to_str(value).strip()[:MAX_TEXT_LENGTH]


def sanitize_id(value: Any) -> str:
    """
    Turn a cell into a slug identifier.

    Lowercases, trims, removes every character outside [a-z0-9_-] and
    truncates to MAX_ID_LENGTH.

    Example:
        >>> sanitize_id("  My ID!! ")
        'myid'
    """
    cleaned = _to_str(value).lower().strip()
    return _ID_DISALLOWED.sub("", cleaned)[:MAX_ID_LENGTH]


def default_color_class(identifier: Any) -> str:
    """
    Deterministic palette pick for an identifier.

    Sum of character code points modulo the palette size, so the same member
    id always gets the same color across reloads.
    """
    code_sum = sum(ord(char) for char in _to_str(identifier))
    return COLOR_CLASSES[code_sum % len(COLOR_CLASSES)]


def sanitize_color_class(value: Any, identifier: Any = "") -> str:
    """
    Return a valid color class for a member.

    Args:
        value: Raw color cell.
        identifier: Member id used for the hash fallback.

    Returns:
        The cleaned value if it is in COLOR_CLASSES, else default_color_class(identifier).
    """
    cleaned = _to_str(value).strip().lower()
    if cleaned in COLOR_CLASSES:
        return cleaned
    return default_color_class(identifier)


def sanitize_number(value: Any, default: float) -> float:
    """
    Parse a cell as a floating point number.

    Empty or missing cells, unparseable text, NaN and infinities all return
    `default`.

    Example:
        >>> sanitize_number("12.5", 8)
        12.5
        >>> sanitize_number("abc", 8)
        8
    """
    text = _to_str(value).strip()
    if not text:
        return default
    try:
        number = float(text)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def sanitize_date(value: Any) -> str:
    """
    Parse a cell as a calendar date and normalize to "YYYY-MM-DD".

    Accepts anything pandas.to_datetime understands (ISO dates, "03/10/2025",
    "March 10, 2025", timestamps). Invalid or empty input returns "".
    Text without a digit is rejected, so relative words like "now" or "today"
    never resolve to the wall-clock date.
    """
    text = _to_str(value).strip()
    if not text or not _DIGIT.search(text):
        return ""
    try:
        with warnings.catch_warnings():
            # Format-inference chatter on ambiguous day/month strings
            warnings.simplefilter("ignore")
            parsed = pd.to_datetime(text, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return ""
    if pd.isna(parsed):
        return ""
    return parsed.strftime("%Y-%m-%d")


def sanitize_url(value: Any) -> str:
    """Keep only http://, https:// and '#' anchor URLs; everything else is ""."""
    cleaned = sanitize_text(value)
    if cleaned.startswith(_URL_PREFIXES):
        return cleaned
    return ""


def sanitize_boolean(value: Any) -> bool:
    """True only when the trimmed cell equals "true", ignoring case."""
    return _to_str(value).strip().lower() == "true"


def normalize_enum_key(value: Any) -> str:
    """Lowercase, trim and collapse internal whitespace runs to '-'."""
    return _WHITESPACE_RUN.sub("-", _to_str(value).strip().lower())


def sanitize_enum(
    value: Any,
    valid: tuple[str, ...],
    aliases: Mapping[str, str],
    default: str,
) -> str:
    """
    Canonicalize a cell into one value of an enumeration.

    **Functionally**:
      - Normalizes the cell with normalize_enum_key ("  IN   PROGRESS " -> "in-progress").
      - Maps it through `aliases` (alias keys are normalized the same way).
      - Returns the result if it is in `valid`, else `default`.

    Args:
        value: Raw cell.
        valid: Allowed canonical values.
        aliases: Alternative spellings -> canonical value.
        default: Returned for anything unrecognised.
    """
    key = normalize_enum_key(value)
    normalized_aliases = {normalize_enum_key(alias): target for alias, target in aliases.items()}
    key = normalized_aliases.get(key, key)
    if key in valid:
        return key
    return default


TASK_STATUS_ALIASES = {
    "not-started": "todo",
    "notstarted": "todo",
    "in progress": "in-progress",
    "inprogress": "in-progress",
    "done": "completed",
    "complete": "completed",
    "in-review": "review",
    "reviewing": "review",
}

MILESTONE_STATUS_ALIASES = {
    "not-started": "pending",
    "notstarted": "pending",
    "upcoming": "pending",
    "in progress": "in-progress",
    "inprogress": "in-progress",
    "done": "completed",
    "complete": "completed",
}

PRIORITY_ALIASES = {
    "high": "urgent",
    "critical": "urgent",
    "medium": "normal",
    "pending": "low",
}


def sanitize_task_status(value: Any) -> str:
    """
    Canonical task status; unknown values become "todo".

    Example:
        >>> sanitize_task_status("Done")
        'completed'
    """
    return sanitize_enum(value, TASK_STATUSES, TASK_STATUS_ALIASES, DEFAULT_TASK_STATUS)


def sanitize_milestone_status(value: Any) -> str:
    """Canonical milestone status; unknown values become "pending"."""
    return sanitize_enum(value, MILESTONE_STATUSES, MILESTONE_STATUS_ALIASES, DEFAULT_MILESTONE_STATUS)


def sanitize_priority(value: Any) -> str:
    """Canonical priority; unknown values become "normal"."""
    return sanitize_enum(value, PRIORITY_LEVELS, PRIORITY_ALIASES, DEFAULT_PRIORITY)
