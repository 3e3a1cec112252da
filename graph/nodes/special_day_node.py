# graph/nodes/special_day_node.py
from graph.state import TrackerState
from graph.nodes.common import changed, replace_record, unchanged
from services.holiday_calendar import HolidayCalendar
from services.models import DayKind, DayRecord


def special_day_node(state: TrackerState, calendar_service: HolidayCalendar = None) -> dict:
    """病欠・休暇を設定するノード（祝日は変更不可）"""
    action = state["action"]
    date_str = action["date"]
    special = action.get("special_day")

    if calendar_service.is_holiday(date_str):
        return unchanged("public_holiday")
    if special is not None and special.kind is DayKind.PUBLIC_HOLIDAY:
        return unchanged("public_holiday")

    data = state["data"]
    existing = data.get(date_str) or DayRecord.empty(date_str)

    # 全日はエントリーをクリア、半日は残す
    entries = () if special is not None and special.is_full_day else existing.entries
    record = DayRecord(date=date_str, entries=entries, special_day=special)
    return changed(replace_record(data, record), date_str)
