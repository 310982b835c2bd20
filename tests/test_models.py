import pytest

from conftest import instant
from models import (
    create_reservation,
    find_conflict,
    instant_to_display,
    intervals_overlap,
    parse_int_id,
    parse_to_instant,
    truncate_to_minute,
)


def test_parse_utc_z_suffix():
    assert parse_to_instant("2030-01-01T10:00:00Z") == instant(2030, 1, 1, 10, 0)


def test_parse_converts_offset_to_utc():
    assert parse_to_instant("2030-01-01T12:00:00+02:00") == instant(2030, 1, 1, 10, 0)


def test_parse_keeps_milliseconds():
    assert parse_to_instant("2030-01-01T10:00:00.123456Z") == instant(2030, 1, 1, 10, 0) + 123


def test_parse_accepts_lowercase_separators_and_long_fractions():
    assert parse_to_instant("2030-01-01t10:00:00.123456789z") == instant(2030, 1, 1, 10, 0) + 123
    assert parse_to_instant("  2030-01-01T10:00:00.5-01:30  ") == instant(2030, 1, 1, 11, 30) + 500


def test_parse_latest_representable_instant():
    assert instant_to_display(parse_to_instant("9999-12-31T23:59:59.999Z")) == "9999-12-31T23:59:59.999Z"


@pytest.mark.parametrize(
    "value",
    [
        None,
        123,
        "",
        "   ",
        "not-a-date",
        "2030-01-01T10:00:00",  # Missing timezone
        "2030-02-30T10:00:00Z",
        "2030-01-01",
        "2030-01-01 10:00Z",  # Space separator
        "20300101T1000Z",  # Basic format
        "2030-W01-2T10:00Z",  # Week date
        "2030-01-01T10Z",  # Hour only
        "2030-01-01T10:00Z",  # No seconds
        "2030-01-01T10:00:00+0200",
        "9999-12-31T20:00:00-05:00",  # Past year 9999 in UTC
        "0001-01-01T00:30:00+01:00",  # Before year 1 in UTC
    ],
)
def test_parse_failure_returns_none(value):
    assert parse_to_instant(value) is None


def test_truncate_to_minute():
    base = instant(2030, 1, 1, 10, 0)
    assert truncate_to_minute(base) == base
    assert truncate_to_minute(base + 59_999) == base
    assert truncate_to_minute(base + 60_000) == base + 60_000


def test_instant_to_display_is_utc_with_milliseconds():
    assert instant_to_display(instant(2030, 1, 1, 10, 0)) == "2030-01-01T10:00:00.000Z"
    assert instant_to_display(instant(2030, 1, 1, 10, 0) + 7) == "2030-01-01T10:00:00.007Z"


def test_intervals_overlap_half_open():
    ten, eleven, twelve = (instant(2030, 1, 1, h, 0) for h in (10, 11, 12))
    half_past = instant(2030, 1, 1, 10, 30)

    assert intervals_overlap(ten, eleven, half_past, twelve)
    assert intervals_overlap(ten, twelve, half_past, eleven)
    assert not intervals_overlap(ten, eleven, eleven, twelve)
    assert not intervals_overlap(eleven, twelve, ten, eleven)


def test_find_conflict_returns_first_in_stored_order():
    later = create_reservation(1, instant(2030, 1, 1, 12, 0), instant(2030, 1, 1, 13, 0))
    earlier = create_reservation(2, instant(2030, 1, 1, 10, 0), instant(2030, 1, 1, 11, 0))

    conflict = find_conflict(
        instant(2030, 1, 1, 9, 30),
        instant(2030, 1, 1, 13, 30),
        [later, earlier],
    )
    assert conflict is later


def test_find_conflict_none_for_adjacent():
    existing = [create_reservation(1, instant(2030, 1, 1, 10, 0), instant(2030, 1, 1, 11, 0))]
    assert find_conflict(instant(2030, 1, 1, 11, 0), instant(2030, 1, 1, 12, 0), existing) is None
    assert find_conflict(instant(2030, 1, 1, 9, 0), instant(2030, 1, 1, 10, 0), existing) is None
    assert find_conflict(instant(2030, 1, 1, 9, 0), instant(2030, 1, 1, 10, 0), []) is None


def test_create_reservation_derives_display_fields():
    start = instant(2030, 1, 1, 10, 0)
    end = instant(2030, 1, 1, 11, 0)
    created = instant(2029, 12, 31, 8, 15, 42) + 250

    reservation = create_reservation(7, start, end, now=created)

    assert reservation.id == 7
    assert reservation.start_instant == start
    assert reservation.end_instant == end
    assert reservation.start_display == "2030-01-01T10:00:00.000Z"
    assert reservation.end_display == "2030-01-01T11:00:00.000Z"
    assert reservation.created_at == "2029-12-31T08:15:42.250Z"


@pytest.mark.parametrize(
    "value, expected",
    [(3, 3), ("3", 3), (" 12 ", 12), ("-1", -1), ("abc", None), ("1.5", None), (1.0, None), (True, None), (None, None)],
)
def test_parse_int_id(value, expected):
    assert parse_int_id(value) == expected
