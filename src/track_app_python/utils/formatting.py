"""
Wire formatting helpers.

Dates travel as ``DD-MMM-YYYY,HH:mm:ss`` (e.g. ``18-Sep-2025,17:30:00``):
two-digit day, English three-letter month regardless of response language
or process locale, 24-hour time, no timezone.
"""

from __future__ import annotations

import re
from datetime import datetime

DATE_PATTERN = "DD-MMM-YYYY,HH:mm:ss"

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_DATE_RE = re.compile(
    r"(?P<day>[0-9]{2})-(?P<month>[A-Z][a-z]{2})-(?P<year>[0-9]{4}),"
    r"(?P<hour>[0-9]{2}):(?P<minute>[0-9]{2}):(?P<second>[0-9]{2})"
)

_DECISION_TEXT: dict[str, tuple[str, str]] = {
    "0": ("Approved", "मंजूर"),
    "1": ("Rejected", "नाकारले"),
    "2": ("Pending", "प्रलंबित"),
}
_UNDECIDED_TEXT = ("Pending", "प्रलंबित")
_UNKNOWN_TEXT = ("Unknown", "अज्ञात")


def format_date(value: datetime | None) -> str:
    """Format a datetime for the wire, ``""`` for None.

    Month names come from a fixed table so the output never depends on
    the process locale.
    """
    if value is None:
        return ""
    month = MONTH_ABBREVIATIONS[value.month - 1]
    return (
        f"{value.day:02d}-{month}-{value.year:04d},"
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )


def parse_date(text: str | None) -> datetime | None:
    """Strictly parse a wire date.

    Returns None for blank input or anything that does not match the
    pattern exactly (including impossible dates such as 31-Feb).
    """
    if text is None or not text.strip():
        return None
    match = _DATE_RE.fullmatch(text)
    if match is None:
        return None
    try:
        month = MONTH_ABBREVIATIONS.index(match["month"]) + 1
    except ValueError:
        return None
    try:
        return datetime(
            int(match["year"]),
            month,
            int(match["day"]),
            int(match["hour"]),
            int(match["minute"]),
            int(match["second"]),
        )
    except ValueError:
        return None


def is_valid_date(text: str) -> bool:
    """Check that a non-empty string is a valid wire date."""
    return parse_date(text) is not None


def empty_if_null(value: str | None) -> str:
    return "" if value is None else value


def decision_from_bool(approved: bool | None) -> str:
    """Map an approval flag to a FinalDecision code (None -> undecided)."""
    if approved is None:
        return ""
    return "0" if approved else "1"


def final_decision_text(code: str | None, language: str = "EN") -> str:
    """Human-readable FinalDecision label in English or Marathi."""
    index = 1 if str(language).upper() == "MR" else 0
    if not code:
        return _UNDECIDED_TEXT[index]
    return _DECISION_TEXT.get(code, _UNKNOWN_TEXT)[index]


def error_timestamp(now: datetime | None = None) -> str:
    """Timestamp carried by unencrypted error bodies (``YYYY-MM-DDTHH:MM:SS``)."""
    return (now or datetime.now()).strftime("%Y-%m-%dT%H:%M:%S")
