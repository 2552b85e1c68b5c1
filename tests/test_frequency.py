from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from agegate.gate.frequency import day_marker, pass_marker, should_prompt, week_marker

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_daily_marker_from_today_suppresses_prompt():
    assert should_prompt("daily", day_marker(NOW), NOW) is False


def test_daily_marker_from_yesterday_prompts():
    yesterday = day_marker(NOW - timedelta(days=1))
    assert should_prompt("daily", yesterday, NOW) is True


def test_daily_without_marker_prompts():
    assert should_prompt("daily", None, NOW) is True


def test_weekly_same_iso_week():
    # 2024-06-01 is a Saturday in ISO week 22; Monday 2024-05-27 starts it
    monday = datetime(2024, 5, 27, 0, 5, tzinfo=timezone.utc)
    assert week_marker(NOW) == "2024-W22"
    assert should_prompt("weekly", week_marker(monday), NOW) is False


def test_weekly_next_week_prompts():
    next_monday = datetime(2024, 6, 3, 0, 0, tzinfo=timezone.utc)
    assert should_prompt("weekly", week_marker(NOW), next_monday) is True


def test_week_marker_uses_iso_year():
    # 2024-12-30 belongs to ISO week 1 of 2025
    assert week_marker(datetime(2024, 12, 30, tzinfo=timezone.utc)) == "2025-W01"


def test_never_and_always():
    assert should_prompt("never", None, NOW) is False
    assert should_prompt("always", day_marker(NOW), NOW, session_passed=True) is True


def test_session_depends_only_on_flag():
    assert should_prompt("session", None, NOW) is True
    assert should_prompt("session", None, NOW, session_passed=True) is False


@pytest.mark.parametrize("freq", ["monthly", "", None, "DAILYISH"])
def test_unknown_frequency_prompts(freq):
    assert should_prompt(freq, day_marker(NOW), NOW, session_passed=True) is True


def test_frequency_is_case_insensitive():
    assert should_prompt("Daily", day_marker(NOW), NOW) is False


def test_markers_are_utc():
    # 23:30 at UTC-5 is already the next day in UTC
    local = datetime(2024, 6, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
    assert day_marker(local) == "2024-06-02"


def test_pass_marker_only_for_daily_and_weekly():
    assert pass_marker("daily", NOW) == "2024-06-01"
    assert pass_marker("weekly", NOW) == "2024-W22"
    for freq in ("session", "never", "always", "bogus"):
        assert pass_marker(freq, NOW) is None
