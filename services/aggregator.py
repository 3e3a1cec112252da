# services/aggregator.py
from datetime import datetime
from typing import Optional

from services.date_utils import day_of_week, is_weekend, month_dates, week_number
from services.holiday_calendar import HolidayCalendar
from services.models import (
    PUBLIC_HOLIDAY,
    AttendanceData,
    DayRecord,
    DayStats,
    MonthSummary,
    WeekStatus,
    WeekSummary,
)
from services.time_calc import day_total, entries_total

OVERTIME_RATIO = 1.15
UNDER_RATIO = 0.917


def _now() -> datetime:
    """テスト時にモック可能な現在時刻取得"""
    return datetime.now()


def day_stats(
    date_str: str,
    record: Optional[DayRecord],
    daily_full_minutes: int,
    calendar: HolidayCalendar,
    now: Optional[datetime] = None,
) -> DayStats:
    """1日分の統計を計算する（祝日 > 特別日 > 通常エントリー）"""
    if now is None:
        now = _now()
    holiday = calendar.holiday_info(date_str)
    entries = record.entries if record else ()

    if holiday is not None:
        special_day = PUBLIC_HOLIDAY
        # 祝日は記録済みの作業を上乗せする（クリアしない）
        total = daily_full_minutes + entries_total(entries, now)
    else:
        special_day = record.special_day if record else None
        total = day_total(record, daily_full_minutes, now)

    return DayStats(
        date=date_str,
        total_minutes=total,
        is_weekend=is_weekend(date_str),
        day_of_week=day_of_week(date_str),
        has_open_entry=any(e.is_open for e in entries),
        special_day=special_day,
        is_public_holiday=holiday is not None,
        holiday_name=holiday.name if holiday else None,
    )


def week_status(total_minutes: int, target_minutes: int) -> WeekStatus:
    """目標に対する週の達成状況"""
    if target_minutes == 0:
        return WeekStatus.MET
    if total_minutes >= OVERTIME_RATIO * target_minutes:
        return WeekStatus.OVERTIME
    if total_minutes >= target_minutes:
        return WeekStatus.MET
    if total_minutes >= UNDER_RATIO * target_minutes:
        return WeekStatus.UNDER
    return WeekStatus.WAY_UNDER


def _summarize_week(number: int, days: list[DayStats], daily_full_minutes: int) -> WeekSummary:
    total = sum(d.total_minutes for d in days)
    target = sum(1 for d in days if not d.is_weekend) * daily_full_minutes
    return WeekSummary(
        week_number=number,
        days=tuple(days),
        total_minutes=total,
        target_minutes=target,
        status=week_status(total, target),
    )


def week_summaries(stats: list[DayStats], daily_full_minutes: int) -> list[WeekSummary]:
    """日別統計を週番号が変わるごとにまとめる"""
    weeks: list[WeekSummary] = []
    current: list[DayStats] = []
    current_number = None

    for day in stats:
        number = week_number(day.date)
        if current and number != current_number:
            weeks.append(_summarize_week(current_number, current, daily_full_minutes))
            current = []
        current_number = number
        current.append(day)

    if current:
        weeks.append(_summarize_week(current_number, current, daily_full_minutes))
    return weeks


def count_workdays(dates: list[str]) -> int:
    """月〜金の日数（祝日も含む）"""
    return sum(1 for d in dates if not is_weekend(d))


def month_summary(
    year_month: str,
    data: AttendanceData,
    daily_full_minutes: int,
    calendar: HolidayCalendar,
    now: Optional[datetime] = None,
) -> MonthSummary:
    """月次の集計（日別・週別・合計・期待値）"""
    if now is None:
        now = _now()
    dates = month_dates(year_month)
    days = [day_stats(d, data.get(d), daily_full_minutes, calendar, now) for d in dates]
    workdays = count_workdays(dates)

    return MonthSummary(
        month=year_month,
        daily_minutes=daily_full_minutes,
        days=tuple(days),
        weeks=tuple(week_summaries(days, daily_full_minutes)),
        total_minutes=sum(d.total_minutes for d in days),
        expected_minutes=workdays * daily_full_minutes,
        workdays=workdays,
        holidays=tuple(calendar.holidays_in_month(year_month)),
    )
