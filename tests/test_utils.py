import logging

import pytest
from fastapi import HTTPException

from examprep.logging_setup import resolve_level
from examprep.utils import time_utils, validation


def test_time_utils_parsing() -> None:
    timestamp = time_utils.utc_now()
    parsed = time_utils.parse_iso_timestamp(timestamp)
    assert parsed is not None

    zulu = "2024-01-01T12:00:00Z"
    parsed_zulu = time_utils.parse_iso_timestamp(zulu)
    assert parsed_zulu is not None
    assert parsed_zulu.tzinfo is not None

    assert time_utils.parse_iso_timestamp("") is None
    assert time_utils.parse_iso_timestamp(123) is None


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "0h 0m"), (89, "0h 1m"), (3600, "1h 0m"), (5400, "1h 30m"), (-5, "0h 0m")],
)
def test_format_time_taken(seconds: int, expected: str) -> None:
    assert time_utils.format_time_taken(seconds) == expected


def test_format_clock() -> None:
    assert time_utils.format_clock(3600) == "01:00:00"
    assert time_utils.format_clock(61) == "00:01:01"
    assert time_utils.format_clock(-1) == "00:00:00"


def test_validate_id() -> None:
    assert validation.validate_id("test", " abc ") == "abc"
    with pytest.raises(HTTPException):
        validation.validate_id("test", "")
    with pytest.raises(HTTPException):
        validation.validate_id("test", "../bad")


def test_validate_period() -> None:
    assert validation.validate_period("Week") == "week"
    assert validation.validate_period("") == "all"
    with pytest.raises(HTTPException):
        validation.validate_period("decade")


def test_resolve_level() -> None:
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(logging.ERROR) == logging.ERROR
    assert resolve_level("nonsense") == logging.INFO
