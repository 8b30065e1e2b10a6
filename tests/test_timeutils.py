"""Tests for the HH:MM time helpers."""

import pytest

from scheduleboard.services.timeutils import (
    duration_minutes,
    format_time_display,
    intervals_overlap,
    minutes_to_time,
    time_to_minutes,
)


def test_time_to_minutes():
    assert time_to_minutes("00:00") == 0
    assert time_to_minutes("09:30") == 570
    assert time_to_minutes("23:59") == 1439


def test_time_to_minutes_accepts_single_digit_hour():
    assert time_to_minutes("9:05") == 545


@pytest.mark.parametrize("raw", ["24:00", "12:60", "noon", "", "1230", "12:3", "-1:00"])
def test_time_to_minutes_rejects_malformed(raw):
    with pytest.raises(ValueError):
        time_to_minutes(raw)


def test_minutes_to_time_pads():
    assert minutes_to_time(0) == "00:00"
    assert minutes_to_time(545) == "09:05"
    assert minutes_to_time(1439) == "23:59"


def test_minutes_to_time_rejects_out_of_range():
    with pytest.raises(ValueError):
        minutes_to_time(1440)


def test_intervals_overlap_is_half_open():
    """Touching intervals do not overlap; one minute of overlap does."""
    assert not intervals_overlap(540, 600, 600, 660)
    assert not intervals_overlap(600, 660, 540, 600)
    assert intervals_overlap(540, 601, 600, 660)


def test_intervals_overlap_containment():
    assert intervals_overlap(540, 720, 600, 660)
    assert intervals_overlap(600, 660, 540, 720)


def test_duration_minutes():
    assert duration_minutes("09:15", "10:45") == 90


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("00:15", "12:15 AM"),
        ("09:05", "9:05 AM"),
        ("12:00", "12:00 PM"),
        ("13:05", "1:05 PM"),
        ("23:59", "11:59 PM"),
    ],
)
def test_format_time_display(raw, expected):
    assert format_time_display(raw) == expected
