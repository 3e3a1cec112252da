# graph/nodes/load_data_node.py
from graph.state import TrackerState
from graph.nodes.common import changed


def load_data_node(state: TrackerState) -> dict:
    """保存データ・インポートデータで全体を置き換えるノード"""
    return changed(dict(state["action"]["data"]), None)
