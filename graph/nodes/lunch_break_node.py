# graph/nodes/lunch_break_node.py
from graph.state import TrackerState
from graph.nodes.common import changed, replace_record, unchanged
from services.time_calc import split_for_lunch


def lunch_break_node(state: TrackerState) -> dict:
    """指定エントリーの中央に昼休憩を挿入するノード"""
    action = state["action"]
    date_str = action["date"]
    record = state["data"].get(date_str)
    if record is None:
        return unchanged("no_record")

    index = next(
        (i for i, e in enumerate(record.entries) if e.id == action["entry_id"]), None
    )
    if index is None:
        return unchanged("no_entry")

    halves = split_for_lunch(record.entries[index], action["minutes"])
    if halves is None:
        return unchanged("cannot_split")

    entries = record.entries[:index] + halves + record.entries[index + 1:]
    return changed(replace_record(state["data"], record.with_entries(entries)), date_str)
