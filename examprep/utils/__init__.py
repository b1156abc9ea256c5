"""Utility modules."""
from examprep.utils.time_utils import (
    format_clock,
    format_time_taken,
    parse_iso_timestamp,
    utc_now,
)
from examprep.utils.validation import validate_id, validate_period

__all__ = [
    "format_clock",
    "format_time_taken",
    "parse_iso_timestamp",
    "utc_now",
    "validate_id",
    "validate_period",
]
