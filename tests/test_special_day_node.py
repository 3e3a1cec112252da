# tests/test_special_day_node.py
from datetime import datetime
from graph.nodes.special_day_node import special_day_node
from services.holiday_calendar import HolidayCalendar
from services.models import PUBLIC_HOLIDAY, DayKind, DayRecord, Portion, SpecialDay, TimeEntry


def _make_state(date_str, special_day, data=None):
    return {
        "today": "2025-06-05",
        "now": datetime(2025, 6, 5, 12, 0),
        "data": data or {},
        "is_tracking": False,
        "current_entry_id": None,
        "action": {"type": "set_special_day", "date": date_str, "special_day": special_day},
        "changed": False,
        "touched_date": None,
        "rejected_reason": None,
    }


def _worked(date_str):
    start = datetime.fromisoformat(f"{date_str}T09:00")
    end = datetime.fromisoformat(f"{date_str}T12:00")
    return {date_str: DayRecord(date_str, (TimeEntry("a", start, end),))}


def test_full_day_clears_entries():
    """全日の病欠はエントリーをクリアすること"""
    state = _make_state("2025-06-03", SpecialDay(DayKind.SICK), _worked("2025-06-03"))
    result = special_day_node(state, calendar_service=HolidayCalendar())
    record = result["data"]["2025-06-03"]
    assert result["changed"] is True
    assert record.entries == ()
    assert record.special_day == SpecialDay(DayKind.SICK)


def test_half_day_keeps_entries():
    """半日はエントリーを残すこと"""
    special = SpecialDay(DayKind.VACATION, Portion.FIRST_HALF)
    state = _make_state("2025-06-03", special, _worked("2025-06-03"))
    result = special_day_node(state, calendar_service=HolidayCalendar())
    record = result["data"]["2025-06-03"]
    assert len(record.entries) == 1
    assert record.special_day == special


def test_clear_special_day():
    data = {"2025-06-03": DayRecord("2025-06-03", (), SpecialDay(DayKind.SICK))}
    result = special_day_node(_make_state("2025-06-03", None, data), calendar_service=HolidayCalendar())
    assert result["data"]["2025-06-03"].special_day is None


def test_creates_record_lazily():
    result = special_day_node(
        _make_state("2025-06-10", SpecialDay(DayKind.VACATION)),
        calendar_service=HolidayCalendar(),
    )
    assert result["data"]["2025-06-10"].date == "2025-06-10"
    assert result["touched_date"] == "2025-06-10"


def test_public_holiday_is_locked():
    """祝日は変更できないこと"""
    state = _make_state("2025-05-01", SpecialDay(DayKind.SICK))
    result = special_day_node(state, calendar_service=HolidayCalendar())
    assert result["changed"] is False
    assert result["rejected_reason"] == "public_holiday"
    assert "data" not in result


def test_public_holiday_value_not_user_settable():
    state = _make_state("2025-06-03", PUBLIC_HOLIDAY)
    result = special_day_node(state, calendar_service=HolidayCalendar())
    assert result["changed"] is False
