from datetime import datetime, timezone

import pytest

from helpdesk.services.availability import format_clock, is_available_now, to_minutes


def _at(hour, minute):
    return datetime(2026, 3, 2, hour, minute, tzinfo=timezone.utc)


def test_to_minutes():
    assert to_minutes("00:00") == 0
    assert to_minutes("09:30") == 570
    assert to_minutes("23:59") == 1439


@pytest.mark.parametrize("value", ["9:00", "24:00", "12:60", "noon", ""])
def test_to_minutes_rejects_malformed(value):
    with pytest.raises(ValueError):
        to_minutes(value)


def test_exact_slot_is_available():
    assert is_available_now(["09:00"], _at(9, 0))


def test_tolerance_is_inclusive():
    assert is_available_now(["09:00"], _at(9, 30))
    assert is_available_now(["09:00"], _at(8, 30))
    assert not is_available_now(["09:00"], _at(9, 31))
    assert not is_available_now(["09:00"], _at(8, 29))


def test_any_slot_matches():
    slots = ["08:00", "14:00", "17:00"]
    assert is_available_now(slots, _at(13, 45))
    assert not is_available_now(slots, _at(11, 0))


def test_empty_slots_never_available():
    assert not is_available_now([], _at(9, 0))


def test_no_wraparound_at_midnight():
    assert not is_available_now(["23:50"], _at(0, 5))
    assert not is_available_now(["00:10"], _at(23, 55))


def test_custom_tolerance():
    assert is_available_now(["10:00"], _at(10, 10), tolerance_minutes=10)
    assert not is_available_now(["10:00"], _at(10, 11), tolerance_minutes=10)


def test_format_clock():
    assert format_clock(_at(7, 5)) == "07:05"
