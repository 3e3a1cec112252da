from datetime import date
from unittest.mock import patch
from services.date_utils import (
    current_month,
    day_name,
    day_of_week,
    days_in_month,
    format_month,
    is_valid_date,
    is_valid_year_month,
    is_weekend,
    month_dates,
    next_month,
    previous_month,
    today_str,
    week_number,
)


def test_today_and_current_month():
    """今日・今月の文字列が正しい形式であること"""
    with patch("services.date_utils._today", return_value=date(2026, 2, 22)):
        assert today_str() == "2026-02-22"
        assert current_month() == "2026-02"


def test_month_dates_leap_year():
    """うるう年の2月は29日あること"""
    dates = month_dates("2024-02")
    assert len(dates) == 29
    assert dates[0] == "2024-02-01"
    assert dates[-1] == "2024-02-29"
    assert days_in_month("2025-02") == 28


def test_day_of_week_monday_first():
    """0=月曜, 6=日曜であること"""
    assert day_of_week("2025-06-02") == 0
    assert day_of_week("2025-06-08") == 6
    assert day_name("2025-06-04") == "We"


def test_is_weekend():
    assert is_weekend("2025-06-07") is True
    assert is_weekend("2025-06-06") is False


def test_week_number_iso():
    """ISO週番号（年跨ぎ）"""
    assert week_number("2025-06-02") == 23
    assert week_number("2024-12-30") == 1
    assert week_number("2021-01-03") == 53


def test_month_navigation():
    assert previous_month("2026-01") == "2025-12"
    assert next_month("2025-12") == "2026-01"
    assert next_month("2025-09") == "2025-10"
    assert format_month("2026-01") == "January 2026"


def test_is_valid_year_month():
    assert is_valid_year_month("2026-01") is True
    assert is_valid_year_month("2026-13") is False
    assert is_valid_year_month("1999-05") is False
    assert is_valid_year_month("2026-1") is False
    assert is_valid_year_month("abcd-ef") is False


def test_is_valid_date():
    assert is_valid_date("2024-02-29") is True
    assert is_valid_date("2025-02-29") is False
    assert is_valid_date("2025-13-40") is False
    assert is_valid_date("garbage") is False
    assert is_valid_date("20250604") is False
    assert is_valid_date("1999-12-31") is False
