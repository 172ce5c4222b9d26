from __future__ import annotations

from datetime import timedelta

import pytest

from src.talent_tracker.talent_tracker.common.datetime_utils import parse_iso_datetime
from src.talent_tracker.talent_tracker.core.exceptions import ValidationError


def test_offsets_are_converted_before_dropping_the_zone():
    check_in = parse_iso_datetime("2024-01-15T08:00:00Z", "check_in_time")
    check_out = parse_iso_datetime("2024-01-15T10:00:00-05:00", "check_out_time")

    assert check_in.tzinfo is None and check_out.tzinfo is None
    assert check_out - check_in == timedelta(hours=7)


def test_naive_timestamps_are_kept_as_given():
    parsed = parse_iso_datetime(" 2024-01-15T08:30:00 ", "check_in_time")

    assert parsed.isoformat() == "2024-01-15T08:30:00"


def test_empty_values_are_none():
    assert parse_iso_datetime(None, "check_in_time") is None
    assert parse_iso_datetime("  ", "check_in_time") is None


@pytest.mark.parametrize("value", [123, 1.5, ["2024-01-15T08:00:00"], {"t": 1}])
def test_non_string_timestamp_is_a_validation_error(value):
    with pytest.raises(ValidationError) as exc:
        parse_iso_datetime(value, "check_in_time")

    assert exc.value.code == "invalid-request"


def test_garbage_timestamp_is_a_validation_error():
    with pytest.raises(ValidationError):
        parse_iso_datetime("yesterday at eight", "check_in_time")
