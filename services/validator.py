# services/validator.py
from datetime import date
from typing import Iterable, Optional

from services.date_utils import today_str
from services.models import (
    AttendanceData,
    DayRecord,
    ErrorType,
    InvalidInputError,
    TimeEntry,
    ValidationError,
    find_open_entry,
)

MESSAGES = {
    ErrorType.UNCLOSED_ENTRY: "Unclosed time entry",
    ErrorType.INVALID_ORDER: "Entry ends before it starts",
    ErrorType.OVERLAPPING_ENTRIES: "Overlapping time entries",
}


def _error(date_str: str, error_type: ErrorType) -> ValidationError:
    return ValidationError(date=date_str, type=error_type, message=MESSAGES[error_type])


def validate_day_record(
    date_str: str, record: DayRecord, is_today: bool
) -> list[ValidationError]:
    """1日分のエントリーの整合性をチェックする"""
    errors: list[ValidationError] = []

    # 今日の実行中エントリーは計測中なのでエラーではない
    if not is_today and any(e.is_open for e in record.entries):
        errors.append(_error(date_str, ErrorType.UNCLOSED_ENTRY))

    closed = [e for e in record.entries if e.end is not None]
    if any(e.end < e.start for e in closed):
        errors.append(_error(date_str, ErrorType.INVALID_ORDER))

    # 最初に見つかった重なりのみ報告
    closed.sort(key=lambda e: e.start)
    for current, following in zip(closed, closed[1:]):
        if current.end > following.start:
            errors.append(_error(date_str, ErrorType.OVERLAPPING_ENTRIES))
            break

    return errors


def validate_data(
    data: AttendanceData, today: Optional[str] = None
) -> list[ValidationError]:
    """全データを検証し、新しい日付順にエラーを返す"""
    if today is None:
        today = today_str()

    errors: list[ValidationError] = []
    for date_str, record in data.items():
        errors.extend(validate_day_record(date_str, record, date_str == today))

    errors.sort(key=lambda e: e.date, reverse=True)
    return errors


def has_blocking_errors(errors: Iterable[ValidationError]) -> bool:
    """未終了エントリーがあれば新規計測を開始できない"""
    return any(e.type is ErrorType.UNCLOSED_ENTRY for e in errors)


def unclosed_entry_dates(data: AttendanceData, today: Optional[str] = None) -> list[str]:
    if today is None:
        today = today_str()
    dates = [
        date_str
        for date_str, record in data.items()
        if date_str != today and any(e.is_open for e in record.entries)
    ]
    return sorted(dates, reverse=True)


def validate_entries_order(entries: Iterable[TimeEntry]) -> None:
    """編集内容の保存前チェック（終了が開始より前なら拒否）"""
    for entry in entries:
        if entry.end is not None and entry.end < entry.start:
            raise InvalidInputError(
                f"entry {entry.id} ends before it starts "
                f"({entry.start.isoformat()} > {entry.end.isoformat()})"
            )


def validate_open_entries(
    date_str: str, entries: Iterable[TimeEntry], data: AttendanceData, today: str
) -> None:
    """実行中エントリーは今日の1件のみ（他の日に実行中があれば拒否）"""
    open_ids = [e.id for e in entries if e.is_open]
    if not open_ids:
        return
    if date_str != today:
        raise InvalidInputError(f"only today's record may hold a running entry: {date_str}")
    if len(open_ids) > 1:
        raise InvalidInputError(f"more than one running entry: {', '.join(open_ids)}")
    ongoing = find_open_entry({d: r for d, r in data.items() if d != date_str})
    if ongoing is not None:
        raise InvalidInputError(
            f"entry {ongoing.entry.id} on {ongoing.date} is still running"
        )


def format_validation_error(error: ValidationError) -> str:
    """例: Mon, Jun 2: Unclosed time entry"""
    d = date.fromisoformat(error.date)
    return f"{d.strftime('%a, %b')} {d.day}: {error.message}"
