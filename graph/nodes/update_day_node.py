# graph/nodes/update_day_node.py
from graph.state import TrackerState
from graph.nodes.common import changed, replace_record, unchanged
from services.holiday_calendar import HolidayCalendar
from services.models import DayKind


def update_day_node(state: TrackerState, calendar_service: HolidayCalendar = None) -> dict:
    """編集画面からの1日分のレコードを差し替えるノード（祝日の種別は変更不可）"""
    record = state["action"]["record"]
    special = record.special_day

    if special is not None and special.kind is DayKind.PUBLIC_HOLIDAY:
        return unchanged("public_holiday")
    if special is not None and calendar_service and calendar_service.is_holiday(record.date):
        return unchanged("public_holiday")

    return changed(replace_record(state["data"], record), record.date)
