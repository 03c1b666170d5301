"""Time-of-day parsing, windows and labels."""

import pytest

from dispatch.shared.time_window import (
    InvalidTimeFormat,
    TimeWindow,
    contains,
    format_minutes,
    generate_time_label,
    has_ended,
    to_minutes,
)


@pytest.mark.parametrize(
    "value, minutes",
    [("00:00", 0), ("08:30", 510), ("8:30", 510), ("23:59", 1439), ("12:00", 720)],
)
def test_to_minutes(value, minutes):
    assert to_minutes(value) == minutes


@pytest.mark.parametrize("value", ["25:00", "24:00", "12:60", "noon", "", "8", "08:5", None])
def test_to_minutes_rejects_invalid(value):
    with pytest.raises(InvalidTimeFormat):
        to_minutes(value)


def test_invalid_time_format_is_a_value_error():
    with pytest.raises(ValueError) as excinfo:
        to_minutes("25:00")
    assert excinfo.value.value == "25:00"


def test_format_minutes_pads():
    assert format_minutes(510) == "08:30"
    assert format_minutes(0) == "00:00"


def test_generate_time_label():
    assert generate_time_label(480, 600) == "8:00 AM - 10:00 AM"
    assert generate_time_label(660, 780) == "11:00 AM - 1:00 PM"
    assert generate_time_label(0, 30) == "12:00 AM - 12:30 AM"


def test_window_requires_start_before_end():
    with pytest.raises(ValueError):
        TimeWindow(600, 600)
    with pytest.raises(ValueError):
        TimeWindow.parse("10:00", "08:00")


def test_containment_is_inclusive_at_both_bounds():
    working = TimeWindow.parse("08:00", "10:00")
    assert contains(working, TimeWindow.parse("08:00", "10:00"))
    assert working.contains(TimeWindow.parse("08:30", "09:30"))


def test_containment_fails_when_slot_starts_before_working_hours():
    working = TimeWindow.parse("09:00", "17:00")
    assert not working.contains(TimeWindow.parse("08:00", "10:00"))
    assert not working.contains(TimeWindow.parse("16:00", "18:00"))


def test_window_has_ended_only_strictly_after_end():
    window = TimeWindow.parse("08:00", "10:00")
    assert not has_ended(window, to_minutes("10:00"))
    assert window.has_ended(to_minutes("10:01"))


def test_window_str():
    assert str(TimeWindow.parse("8:00", "10:00")) == "08:00-10:00"
