"""
Utility functions and helpers.

This module contains:
- Wire date formatting and strict parsing
- FinalDecision helpers and labels
"""

from track_app_python.utils.formatting import (
    DATE_PATTERN,
    MONTH_ABBREVIATIONS,
    decision_from_bool,
    empty_if_null,
    error_timestamp,
    final_decision_text,
    format_date,
    is_valid_date,
    parse_date,
)

__all__ = [
    "DATE_PATTERN",
    "MONTH_ABBREVIATIONS",
    "decision_from_bool",
    "empty_if_null",
    "error_timestamp",
    "final_decision_text",
    "format_date",
    "is_valid_date",
    "parse_date",
]
