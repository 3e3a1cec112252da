# services/time_calc.py
import random
import string
from datetime import datetime, timedelta
from typing import Iterable, Optional

from services.models import DayKind, DayRecord, SpecialDay, TimeEntry

TOTAL_DISPLAY_MINUTES = 24 * 60
# 昼休憩の前後に最低30分ずつ残す
MIN_WORK_AROUND_LUNCH = 60


def _now() -> datetime:
    """テスト時にモック可能な現在時刻取得"""
    return datetime.now()


def _minutes_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


def duration(entry: TimeEntry, now: Optional[datetime] = None) -> int:
    """エントリーの分数（実行中なら現在時刻まで）"""
    end = entry.end
    if end is None:
        end = now or _now()
    return _minutes_between(entry.start, end)


def entries_total(entries: Iterable[TimeEntry], now: Optional[datetime] = None) -> int:
    if now is None:
        now = _now()
    return sum(duration(e, now) for e in entries)


def special_day_minutes(special_day: Optional[SpecialDay], daily_full_minutes: int) -> int:
    """特別日に加算する固定分数（半日は半分）"""
    if special_day is None:
        return 0
    if special_day.is_half_day:
        return daily_full_minutes // 2
    return daily_full_minutes


def day_total(
    record: Optional[DayRecord],
    daily_full_minutes: int,
    now: Optional[datetime] = None,
) -> int:
    """1日の合計分数を計算する"""
    if record is None:
        return 0

    special = record.special_day
    if special is None:
        return entries_total(record.entries, now)
    if special.kind is DayKind.PUBLIC_HOLIDAY:
        return daily_full_minutes + entries_total(record.entries, now)
    if special.is_full_day:
        return special_day_minutes(special, daily_full_minutes)
    return special_day_minutes(special, daily_full_minutes) + entries_total(
        record.entries, now
    )


def can_split_for_lunch(entry: Optional[TimeEntry], lunch_minutes: int) -> bool:
    """昼休憩を挿入できる長さのエントリーか"""
    if entry is None or entry.end is None:
        return False
    span = (entry.end - entry.start).total_seconds() / 60
    return span >= lunch_minutes + MIN_WORK_AROUND_LUNCH


def split_for_lunch(
    entry: TimeEntry, lunch_minutes: int
) -> Optional[tuple[TimeEntry, TimeEntry]]:
    """エントリーの中央に昼休憩を挟んで2つに分割する（分割不可ならNone）"""
    if not can_split_for_lunch(entry, lunch_minutes):
        return None

    # 前半を分単位に揃えると、2つの合計が常に total - lunch になる
    work_minutes = duration(entry) - lunch_minutes
    lunch_start = entry.start + timedelta(minutes=work_minutes // 2)
    lunch_end = lunch_start + timedelta(minutes=lunch_minutes)

    first = TimeEntry(id=entry.id, start=entry.start, end=lunch_start)
    second = TimeEntry(id=f"{entry.id}-after-lunch", start=lunch_end, end=entry.end)
    return first, second


def time_position(timestamp: datetime) -> float:
    """1日(24h)のうちの位置を0〜100%で返す"""
    minutes = timestamp.hour * 60 + timestamp.minute
    return minutes / TOTAL_DISPLAY_MINUTES * 100


def span_width(
    start: datetime, end: Optional[datetime], now: Optional[datetime] = None
) -> float:
    end_pos = time_position(end if end is not None else (now or _now()))
    return max(0.0, end_pos - time_position(start))


def format_minutes(minutes: int) -> str:
    """例: 125 -> 2h 05m"""
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins:02d}m"


def format_minutes_decimal(minutes: int) -> str:
    return f"{minutes / 60:.1f}h"


def generate_entry_id(now: Optional[datetime] = None) -> str:
    """entry-<epoch ms>-<ランダム9文字>"""
    now = now or _now()
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"entry-{int(now.timestamp() * 1000)}-{suffix}"
