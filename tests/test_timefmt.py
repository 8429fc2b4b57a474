import pytest
from estimator.timefmt import (
    calculate_progress,
    format_time,
    format_time_with_label,
    get_timer_color_theme,
    validate_timer_duration,
)


@pytest.mark.parametrize("seconds,expected", [
    (0, "00:00"),
    (59, "00:59"),
    (90, "01:30"),
    (3599, "59:59"),
    (3661, "1:01:01"),
    (-5, "00:00"),
    (float("nan"), "00:00"),
])
def test_format_time(seconds, expected):
    assert format_time(seconds) == expected

def test_format_time_options():
    assert format_time(90, show_hours=True) == "0:01:30"
    assert format_time(90.25, show_milliseconds=True) == "01:30.250"
    assert format_time(float("inf"), show_hours=True) == "0:00:00"

@pytest.mark.parametrize("seconds,expected", [
    (0, "0 seconds remaining"),
    (1, "1 second remaining"),
    (90, "1 minute 30 seconds remaining"),
    (120, "2 minutes remaining"),
    (3725, "1 hour 2 minutes remaining"),
    (-1, "0 seconds remaining"),
])
def test_format_time_with_label(seconds, expected):
    assert format_time_with_label(seconds) == expected

def test_label_context():
    assert format_time_with_label(45, "elapsed") == "45 seconds elapsed"

def test_calculate_progress():
    assert calculate_progress(30, 120) == 25
    assert calculate_progress(500, 120) == 100
    assert calculate_progress(-10, 120) == 0
    assert calculate_progress(10, 0) == 0
    assert calculate_progress(float("nan"), 100) == 0

def test_color_theme():
    assert get_timer_color_theme(100, 100) == "success"
    assert get_timer_color_theme(50, 100) == "warning"
    assert get_timer_color_theme(25, 100) == "danger"
    assert get_timer_color_theme(10, 0) == "default"
    assert get_timer_color_theme(40, 100, danger=0.4) == "danger"

@pytest.mark.parametrize("duration,context,valid,result", [
    (10, "quiz", False, 30),
    (600, "quiz", True, 600),
    (7200, "quiz", False, 3600),
    (30, "ai", False, 60),
    (400, "ai", False, 300),
    (900.7, "learning", True, 900),
    (5000, "learning", False, 1800),
    (0, "general", False, 1),
    (7200, "general", True, 7200),
])
def test_validate_timer_duration(duration, context, valid, result):
    v = validate_timer_duration(duration, context)
    assert v.is_valid is valid
    assert v.duration == result
    assert (v.error is None) is valid

def test_validate_rejects_non_numbers():
    v = validate_timer_duration(float("nan"), "quiz")
    assert not v.is_valid
    assert v.duration == 30
    assert "valid number" in v.error
