# services/models.py
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from services.holiday_calendar import HolidayDate


class DayKind(Enum):
    SICK = "sick"
    VACATION = "vacation"
    PUBLIC_HOLIDAY = "public_holiday"


class Portion(Enum):
    FULL = "full"
    FIRST_HALF = "first_half"
    SECOND_HALF = "second_half"


@dataclass(frozen=True)
class SpecialDay:
    """病欠・休暇・祝日の区分（Noneは通常日）"""

    kind: DayKind
    portion: Portion = Portion.FULL

    @property
    def is_half_day(self) -> bool:
        return self.portion is not Portion.FULL

    @property
    def is_full_day(self) -> bool:
        return self.portion is Portion.FULL

    def to_code(self) -> str:
        """保存形式のコード（例: sick_first_half）"""
        if self.portion is Portion.FULL:
            return self.kind.value
        return f"{self.kind.value}_{self.portion.value}"

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional["SpecialDay"]:
        if code is None:
            return None
        for kind in DayKind:
            if code == kind.value:
                return cls(kind)
            if kind is DayKind.PUBLIC_HOLIDAY:
                continue
            for portion in (Portion.FIRST_HALF, Portion.SECOND_HALF):
                if code == f"{kind.value}_{portion.value}":
                    return cls(kind, portion)
        raise ValueError(f"unknown special day: {code!r}")


PUBLIC_HOLIDAY = SpecialDay(DayKind.PUBLIC_HOLIDAY)


@dataclass(frozen=True)
class TimeEntry:
    id: str
    start: datetime
    end: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.end is None

    def close(self, end: datetime) -> "TimeEntry":
        return replace(self, end=end)


@dataclass(frozen=True)
class DayRecord:
    date: str  # YYYY-MM-DD
    entries: tuple[TimeEntry, ...] = ()
    special_day: Optional[SpecialDay] = None

    @classmethod
    def empty(cls, date_str: str) -> "DayRecord":
        return cls(date=date_str)

    def with_entries(self, entries) -> "DayRecord":
        return replace(self, entries=tuple(entries))

    def find_entry(self, entry_id: str) -> Optional[TimeEntry]:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None


# 日付(YYYY-MM-DD) -> DayRecord
AttendanceData = dict[str, DayRecord]


@dataclass(frozen=True)
class OpenEntry:
    date: str
    entry: TimeEntry


def find_open_entry(data: AttendanceData) -> Optional[OpenEntry]:
    """全日付から実行中（end=None）のエントリーを探す"""
    for date_str in sorted(data):
        for entry in data[date_str].entries:
            if entry.is_open:
                return OpenEntry(date_str, entry)
    return None


class ErrorType(Enum):
    UNCLOSED_ENTRY = "unclosed_entry"
    OVERLAPPING_ENTRIES = "overlapping_entries"
    INVALID_ORDER = "invalid_order"


@dataclass(frozen=True)
class ValidationError:
    date: str
    type: ErrorType
    message: str


class WeekStatus(Enum):
    OVERTIME = "overtime"
    MET = "met"
    UNDER = "under"
    WAY_UNDER = "way-under"


@dataclass(frozen=True)
class DayStats:
    date: str
    total_minutes: int
    is_weekend: bool
    day_of_week: int  # 0=月曜, 6=日曜
    has_open_entry: bool
    special_day: Optional[SpecialDay]
    is_public_holiday: bool
    holiday_name: Optional[str] = None


@dataclass(frozen=True)
class WeekSummary:
    week_number: int
    days: tuple[DayStats, ...]
    total_minutes: int
    target_minutes: int
    status: WeekStatus


@dataclass(frozen=True)
class MonthSummary:
    month: str  # YYYY-MM
    daily_minutes: int
    days: tuple[DayStats, ...]
    weeks: tuple[WeekSummary, ...]
    total_minutes: int
    expected_minutes: int
    workdays: int
    holidays: tuple["HolidayDate", ...] = field(default=())


class InvalidInputError(ValueError):
    """ユーザー入力（JSON・設定値など）が不正"""
