# graph/nodes/stop_tracking_node.py
from graph.state import TrackerState
from graph.nodes.common import changed, replace_record, unchanged
from services.models import find_open_entry


def stop_tracking_node(state: TrackerState) -> dict:
    """実行中エントリーを現在時刻で終了するノード"""
    data = state["data"]
    ongoing = find_open_entry(data)

    if ongoing is None:
        result = unchanged("not_tracking")
        result.update({"is_tracking": False, "current_entry_id": None})
        return result

    record = data[ongoing.date]
    entries = [
        e.close(state["now"]) if e.id == ongoing.entry.id and e.is_open else e
        for e in record.entries
    ]
    return changed(replace_record(data, record.with_entries(entries)), ongoing.date)
