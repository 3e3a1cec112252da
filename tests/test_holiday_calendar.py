# tests/test_holiday_calendar.py
from datetime import date
import pytest
from services.holiday_calendar import HolidayCalendar, easter_sunday


def test_easter_monday_2025():
    """2025年のイースターマンデーは4月21日であること"""
    service = HolidayCalendar("CZ")
    assert service.is_holiday("2025-04-21") is True
    assert service.holiday_info("2025-04-21").name == "Easter Monday"
    assert service.is_holiday("2025-04-20") is False


def test_easter_sunday_known_years():
    """既知の年の復活祭日付と一致すること"""
    assert easter_sunday(2024) == date(2024, 3, 31)
    assert easter_sunday(2026) == date(2026, 4, 5)
    assert easter_sunday(2038) == date(2038, 4, 25)
    assert easter_sunday(2285) == date(2285, 3, 22)


def test_easter_out_of_range():
    with pytest.raises(ValueError):
        easter_sunday(1582)


def test_fixed_holiday():
    """固定祝日の判定"""
    service = HolidayCalendar()
    info = service.holiday_info(date(2026, 1, 1))
    assert info is not None
    assert info.name == "New Year's Day"
    assert "státu" in info.local_name


def test_workday_is_not_holiday():
    service = HolidayCalendar()
    assert service.holiday_info("2026-02-24") is None
    assert service.is_holiday("2026-02-24") is False


def test_weekend_is_not_public_holiday():
    """土日は祝日ではないこと（週末判定は別）"""
    service = HolidayCalendar()
    assert service.is_holiday("2026-02-21") is False


def test_holidays_in_year_sorted():
    service = HolidayCalendar()
    holidays = service.holidays_in_year(2025)
    assert len(holidays) == 12
    dates = [h.date for h in holidays]
    assert dates == sorted(dates)
    assert "2025-04-21" in dates


def test_holidays_in_month():
    service = HolidayCalendar()
    july = service.holidays_in_month("2025-07")
    assert [h.date for h in july] == ["2025-07-05", "2025-07-06"]
    assert service.holidays_in_month("2025-02") == []


def test_cache_works():
    """同一年の結果がキャッシュされること"""
    service = HolidayCalendar()
    result1 = service.holidays_in_year(2026)
    result2 = service.holidays_in_year(2026)
    assert result1 == result2
    assert 2026 in service._cache


def test_unknown_country():
    with pytest.raises(ValueError):
        HolidayCalendar("XX")
