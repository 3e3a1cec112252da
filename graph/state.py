from typing import TypedDict, Optional
from datetime import datetime

from services.models import AttendanceData


class TrackerState(TypedDict):
    today: str                          # YYYY-MM-DD
    now: datetime                       # 遷移時点の現在時刻
    data: AttendanceData                # 日付 -> DayRecord
    is_tracking: bool                   # 計測中フラグ
    current_entry_id: Optional[str]     # 実行中エントリーID
    action: dict                        # {"type": "start_tracking", ...}
    changed: bool                       # データが更新されたか
    touched_date: Optional[str]         # 更新された日付
    rejected_reason: Optional[str]      # no-op になった理由
