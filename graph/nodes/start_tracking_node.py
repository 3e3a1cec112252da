# graph/nodes/start_tracking_node.py
from graph.state import TrackerState
from graph.nodes.common import changed, replace_record, unchanged
from services.models import DayKind, DayRecord, TimeEntry, find_open_entry
from services.time_calc import generate_entry_id
from services.validator import has_blocking_errors, validate_data

MAX_ENTRIES_PER_DAY = 10


def start_tracking_node(
    state: TrackerState, max_entries: int = MAX_ENTRIES_PER_DAY
) -> dict:
    """今日のレコードに実行中エントリーを追加するノード"""

    data = state["data"]
    today = state["today"]

    if find_open_entry(data) is not None:
        return unchanged("already_tracking")

    # 前日以前の未終了エントリーを先に解消させる
    if has_blocking_errors(validate_data(data, today)):
        return unchanged("blocking_errors")

    record = data.get(today) or DayRecord.empty(today)
    if len(record.entries) >= max_entries:
        return unchanged("max_entries")

    special = record.special_day
    if (
        special is not None
        and special.kind in (DayKind.SICK, DayKind.VACATION)
        and special.is_full_day
    ):
        return unchanged("full_special_day")

    now = state["now"]
    entry = TimeEntry(id=generate_entry_id(now), start=now, end=None)
    new_record = record.with_entries(record.entries + (entry,))
    return changed(replace_record(data, new_record), today)
