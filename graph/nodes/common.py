# graph/nodes/common.py
from typing import Optional

from services.models import AttendanceData, DayRecord, find_open_entry


def unchanged(reason: str) -> dict:
    """データを変更しない遷移結果"""
    return {"changed": False, "touched_date": None, "rejected_reason": reason}


def changed(data: AttendanceData, touched_date: Optional[str]) -> dict:
    """新しいデータと、そこから導出した計測状態を返す"""
    ongoing = find_open_entry(data)
    return {
        "data": data,
        "is_tracking": ongoing is not None,
        "current_entry_id": ongoing.entry.id if ongoing else None,
        "changed": True,
        "touched_date": touched_date,
        "rejected_reason": None,
    }


def replace_record(data: AttendanceData, record: DayRecord) -> AttendanceData:
    """コピーオンライトで1日分を差し替える"""
    return {**data, record.date: record}
