from datetime import datetime, timedelta, timezone

import pytest

from userstore.core.clock import (
    MAX_DATETIME,
    format_datetime,
    normalize_datetime,
    now_string,
    parse_datetime,
)


def test_now_string_format():
    value = now_string()

    assert len(value) == 19
    assert datetime.strptime(value, "%Y-%m-%d %H:%M:%S")


def test_format_converts_aware_datetimes_to_utc():
    value = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone(timedelta(hours=2)))

    assert format_datetime(value) == "2024-05-01 10:00:00"


def test_parse_storage_and_iso_formats():
    expected = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)

    assert parse_datetime("2024-05-01 10:00:00") == expected
    assert parse_datetime("2024-05-01T12:00:00+02:00") == expected
    assert parse_datetime("") is None


def test_parse_rejects_garbage():
    with pytest.raises(ValueError):
        parse_datetime("not a date")


def test_sentinel_sorts_after_now():
    assert MAX_DATETIME > now_string()


def test_normalize():
    assert normalize_datetime("2024-05-01T10:00:00") == "2024-05-01 10:00:00"
    assert normalize_datetime("") == ""
