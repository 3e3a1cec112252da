# services/attendance_store.py
import logging
import threading
from datetime import datetime
from typing import Optional

from graph.graph import build_graph
from services.aggregator import day_stats, month_summary
from services.config_loader import DEFAULT_CONFIG
from services.date_utils import month_of
from services.holiday_calendar import HolidayCalendar
from services.models import (
    AttendanceData,
    DayKind,
    DayRecord,
    DayStats,
    MonthSummary,
    OpenEntry,
    SpecialDay,
    ValidationError,
    find_open_entry,
)
from services.settings_store import SettingsStore
from services.storage import export_data, import_data, load_data, save_data
from services.time_calc import can_split_for_lunch, duration
from services.validator import (
    has_blocking_errors,
    unclosed_entry_dates,
    validate_data,
    validate_entries_order,
    validate_open_entries,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    """テスト時にモック可能な現在時刻取得"""
    return datetime.now()


class AttendanceStore:
    """勤怠データの所有者。遷移はすべてグラフ経由で行い、変更のたびに保存する"""

    def __init__(
        self,
        storage,
        settings: SettingsStore,
        calendar_service: HolidayCalendar,
        config: dict = None,
    ):
        self._storage = storage
        self._settings = settings
        self._calendar = calendar_service
        self._config = config or DEFAULT_CONFIG
        self._max_entries = self._config["tracking"]["max_entries_per_day"]
        self._graph = build_graph(calendar_service=calendar_service, config=self._config)
        self._lock = threading.Lock()

        self._data: AttendanceData = load_data(storage)
        ongoing = find_open_entry(self._data)
        self._is_tracking = ongoing is not None
        self._current_entry_id = ongoing.entry.id if ongoing else None
        if ongoing:
            logger.info("Resuming open entry %s from %s", ongoing.entry.id, ongoing.date)

    # ---- 読み取り ----

    @property
    def data(self) -> AttendanceData:
        return dict(self._data)

    @property
    def is_tracking(self) -> bool:
        return self._is_tracking

    @property
    def current_entry_id(self) -> Optional[str]:
        return self._current_entry_id

    @property
    def settings(self) -> SettingsStore:
        return self._settings

    @property
    def calendar(self) -> HolidayCalendar:
        return self._calendar

    @property
    def lunch_durations(self) -> list[int]:
        return list(self._config["tracking"]["lunch_durations"])

    def record(self, date_str: str) -> DayRecord:
        return self._data.get(date_str) or DayRecord.empty(date_str)

    def current_entry(self) -> Optional[OpenEntry]:
        return find_open_entry(self._data)

    def elapsed_minutes(self, now: Optional[datetime] = None) -> int:
        """実行中エントリーの経過分数（計測中でなければ0）"""
        ongoing = find_open_entry(self._data)
        if ongoing is None:
            return 0
        return duration(ongoing.entry, now or _now())

    def validation_errors(self, now: Optional[datetime] = None) -> list[ValidationError]:
        today = (now or _now()).date().isoformat()
        return validate_data(self._data, today)

    def has_blocking_errors(self, now: Optional[datetime] = None) -> bool:
        return has_blocking_errors(self.validation_errors(now))

    def unclosed_dates(self, now: Optional[datetime] = None) -> list[str]:
        """今日以外で未終了エントリーが残っている日付（新しい順）"""
        return unclosed_entry_dates(self._data, (now or _now()).date().isoformat())

    def check_edit(self, record: DayRecord, now: Optional[datetime] = None) -> None:
        """編集内容を保存前に検証する（不正ならInvalidInputError）"""
        validate_entries_order(record.entries)
        today = (now or _now()).date().isoformat()
        validate_open_entries(record.date, record.entries, self._data, today)

    def can_start_tracking(self, now: Optional[datetime] = None) -> bool:
        """start_trackingがno-opにならないか（ボタン表示用）"""
        now = now or _now()
        if find_open_entry(self._data) is not None or self.has_blocking_errors(now):
            return False
        record = self.record(now.date().isoformat())
        if len(record.entries) >= self._max_entries:
            return False
        special = record.special_day
        return not (
            special is not None
            and special.kind in (DayKind.SICK, DayKind.VACATION)
            and special.is_full_day
        )

    def can_add_lunch_break(self, date_str: str, entry_id: str, minutes: int) -> bool:
        return can_split_for_lunch(self.record(date_str).find_entry(entry_id), minutes)

    def day_stats(self, date_str: str, now: Optional[datetime] = None) -> DayStats:
        daily = self._settings.daily_minutes_for_month(month_of(date_str))
        return day_stats(date_str, self._data.get(date_str), daily, self._calendar, now)

    def month_summary(self, year_month: str, now: Optional[datetime] = None) -> MonthSummary:
        daily = self._settings.daily_minutes_for_month(year_month)
        return month_summary(year_month, self._data, daily, self._calendar, now)

    # ---- 遷移 ----

    def dispatch(self, action: dict) -> bool:
        """アクションを適用し、データが変わったら保存してTrueを返す"""
        now = _now()
        with self._lock:
            state = {
                "today": now.date().isoformat(),
                "now": now,
                "data": self._data,
                "is_tracking": self._is_tracking,
                "current_entry_id": self._current_entry_id,
                "action": action,
                "changed": False,
                "touched_date": None,
                "rejected_reason": None,
            }
            result = self._graph.invoke(state)
            self._is_tracking = result["is_tracking"]
            self._current_entry_id = result["current_entry_id"]

            if not result["changed"]:
                logger.debug(
                    "Ignored %s: %s", action.get("type"), result["rejected_reason"]
                )
                return False

            self._data = result["data"]
            touched = result["touched_date"]

        if touched is not None:
            self._settings.ensure_baked(month_of(touched))
        save_data(self._storage, self._data)
        return True

    def start_tracking(self) -> bool:
        return self.dispatch({"type": "start_tracking"})

    def stop_tracking(self) -> bool:
        return self.dispatch({"type": "stop_tracking"})

    def set_special_day(self, date_str: str, special_day: Optional[SpecialDay]) -> bool:
        return self.dispatch(
            {"type": "set_special_day", "date": date_str, "special_day": special_day}
        )

    def update_day(self, record: DayRecord) -> bool:
        return self.dispatch({"type": "update_day", "record": record})

    def add_lunch_break(self, date_str: str, entry_id: str, minutes: int) -> bool:
        return self.dispatch(
            {
                "type": "add_lunch_break",
                "date": date_str,
                "entry_id": entry_id,
                "minutes": minutes,
            }
        )

    def load_data(self, data: AttendanceData) -> bool:
        return self.dispatch({"type": "load_data", "data": data})

    # ---- エクスポート / インポート ----

    def export_json(self) -> str:
        return export_data(self._data)

    def import_json(self, json_string: str) -> bool:
        """不正なJSONならInvalidInputErrorを送出し、既存データは変更しない"""
        return self.load_data(import_data(json_string))

    def reload(self) -> bool:
        """保存先から読み直す（生データ編集後など）"""
        return self.load_data(load_data(self._storage))
