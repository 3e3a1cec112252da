# graph/graph.py
from langgraph.graph import StateGraph, START, END
from graph.state import TrackerState

ACTION_NODES = {
    "start_tracking": "start_tracking",
    "stop_tracking": "stop_tracking",
    "set_special_day": "special_day",
    "update_day": "update_day",
    "add_lunch_break": "lunch_break",
    "load_data": "load_data",
}


def route_action(state: TrackerState) -> str:
    """アクション種別に応じて遷移ノードを選ぶ（未知の種別はend）"""
    action = state.get("action") or {}
    return ACTION_NODES.get(action.get("type"), "end")


def build_graph(calendar_service=None, config=None):
    """勤怠データの状態遷移グラフを構築して返す

    各ノード関数はサービス依存を持つため、functools.partialでラップして
    LangGraphが期待する (state) -> dict シグネチャに合わせる。
    """
    from functools import partial
    from graph.nodes.start_tracking_node import start_tracking_node
    from graph.nodes.stop_tracking_node import stop_tracking_node
    from graph.nodes.special_day_node import special_day_node
    from graph.nodes.update_day_node import update_day_node
    from graph.nodes.lunch_break_node import lunch_break_node
    from graph.nodes.load_data_node import load_data_node

    if calendar_service is None:
        from services.holiday_calendar import HolidayCalendar
        calendar_service = HolidayCalendar()

    max_entries = (config or {}).get("tracking", {}).get("max_entries_per_day", 10)
    start_tracking_wrapped = partial(start_tracking_node, max_entries=max_entries)
    special_day_wrapped = partial(special_day_node, calendar_service=calendar_service)
    update_day_wrapped = partial(update_day_node, calendar_service=calendar_service)

    workflow = StateGraph(TrackerState)

    workflow.add_node("start_tracking", start_tracking_wrapped)
    workflow.add_node("stop_tracking", stop_tracking_node)
    workflow.add_node("special_day", special_day_wrapped)
    workflow.add_node("update_day", update_day_wrapped)
    workflow.add_node("lunch_break", lunch_break_node)
    workflow.add_node("load_data", load_data_node)

    path_map = {node: node for node in ACTION_NODES.values()}
    path_map["end"] = END
    workflow.add_conditional_edges(START, route_action, path_map)

    for node in ACTION_NODES.values():
        workflow.add_edge(node, END)

    return workflow.compile()
