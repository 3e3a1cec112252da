# services/storage.py
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from services.models import (
    AttendanceData,
    DayRecord,
    InvalidInputError,
    SpecialDay,
    TimeEntry,
)

logger = logging.getLogger(__name__)

STORAGE_KEY = "attendance-tracker-data"
SETTINGS_STORAGE_KEY = "attendance-tracker-settings"
STORAGE_VERSION = 1
SETTINGS_VERSION = 1


class JsonFileStorage:
    """キーごとに1つのJSONファイルを持つ簡易キーバリューストア"""

    def __init__(self, directory):
        self._dir = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)


class MemoryStorage:
    """メモリ上のキーバリューストア（テスト・一時利用）"""

    def __init__(self, initial: Optional[dict] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value


def _parse_timestamp(value: str) -> datetime:
    """ISO 8601をローカルのnaive datetimeに変換"""
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is not None:
        ts = ts.astimezone().replace(tzinfo=None)
    return ts


def entry_to_dict(entry: TimeEntry) -> dict:
    return {
        "id": entry.id,
        "start": entry.start.isoformat(),
        "end": entry.end.isoformat() if entry.end else None,
    }


def entry_from_dict(raw: dict) -> TimeEntry:
    end = raw.get("end")
    return TimeEntry(
        id=str(raw["id"]),
        start=_parse_timestamp(raw["start"]),
        end=_parse_timestamp(end) if end else None,
    )


def record_to_dict(record: DayRecord) -> dict:
    return {
        "date": record.date,
        "entries": [entry_to_dict(e) for e in record.entries],
        "specialDay": record.special_day.to_code() if record.special_day else None,
    }


def record_from_dict(date_str: str, raw: dict) -> DayRecord:
    return DayRecord(
        date=raw.get("date", date_str),
        entries=tuple(entry_from_dict(e) for e in raw.get("entries", [])),
        special_day=SpecialDay.from_code(raw.get("specialDay")),
    )


def data_to_dict(data: AttendanceData) -> dict:
    return {date_str: record_to_dict(data[date_str]) for date_str in sorted(data)}


def data_from_dict(raw: dict) -> AttendanceData:
    return {date_str: record_from_dict(date_str, rec) for date_str, rec in raw.items()}


def _envelope(data: AttendanceData) -> dict:
    return {
        "version": STORAGE_VERSION,
        "data": data_to_dict(data),
        "lastUpdated": datetime.now().astimezone().isoformat(),
    }


def load_data(storage) -> AttendanceData:
    """勤怠データを読み込む（失敗時は空データ）"""
    try:
        raw = storage.get(STORAGE_KEY)
        if not raw:
            return {}
        stored = json.loads(raw)
        if stored.get("version") != STORAGE_VERSION:
            logger.warning(
                "Storage version mismatch: expected %s, got %s",
                STORAGE_VERSION,
                stored.get("version"),
            )
        return data_from_dict(stored.get("data") or {})
    except Exception as exc:
        logger.error("Failed to load attendance data: %s", exc)
        return {}


def save_data(storage, data: AttendanceData) -> None:
    try:
        storage.set(STORAGE_KEY, json.dumps(_envelope(data), ensure_ascii=False))
    except Exception as exc:
        logger.error("Failed to save attendance data: %s", exc)


def export_data(data: AttendanceData) -> str:
    """バックアップ用JSON文字列"""
    return json.dumps(_envelope(data), ensure_ascii=False, indent=2)


def import_data(json_string: str) -> AttendanceData:
    """JSONからデータを復元する（不正ならInvalidInputError）"""
    try:
        stored = json.loads(json_string)
    except json.JSONDecodeError as exc:
        raise InvalidInputError(f"Invalid JSON: {exc}") from exc

    if not isinstance(stored, dict) or not isinstance(stored.get("data"), dict):
        raise InvalidInputError("Invalid data structure in import")

    try:
        return data_from_dict(stored["data"])
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise InvalidInputError(f"Invalid day record in import: {exc}") from exc


def read_raw(storage, key: str) -> str:
    """保存済みの生JSONを整形して返す"""
    raw = storage.get(key)
    if not raw:
        return "{}"
    try:
        return json.dumps(json.loads(raw), ensure_ascii=False, indent=2)
    except json.JSONDecodeError:
        return raw


def write_raw(storage, key: str, json_string: str) -> None:
    """生JSONを保存する（パースできなければ保存しない）"""
    try:
        parsed = json.loads(json_string)
    except json.JSONDecodeError as exc:
        raise InvalidInputError(f"Cannot save: {exc}") from exc
    storage.set(key, json.dumps(parsed, ensure_ascii=False))
