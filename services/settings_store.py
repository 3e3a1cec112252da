# services/settings_store.py
import json
import logging

from services.date_utils import is_valid_year_month
from services.models import InvalidInputError
from services.storage import (
    SETTINGS_STORAGE_KEY,
    SETTINGS_VERSION,
    STORAGE_KEY,
)

logger = logging.getLogger(__name__)

DEFAULT_DAILY_WORK_HOURS = 8
# 設定機能の導入前に使っていた1日の固定時間
LEGACY_DAILY_WORK_HOURS = 6
MIN_WORK_HOURS = 1
MAX_WORK_HOURS = 12


def _check_hours(hours) -> float:
    if isinstance(hours, bool) or not isinstance(hours, (int, float)):
        raise InvalidInputError(f"work hours must be a number: {hours!r}")
    if not MIN_WORK_HOURS <= hours <= MAX_WORK_HOURS:
        raise InvalidInputError(
            f"work hours must be between {MIN_WORK_HOURS} and {MAX_WORK_HOURS}: {hours}"
        )
    return hours


class SettingsStore:
    """1日の目標時間（全体デフォルト＋月ごとの固定値）を管理する"""

    def __init__(
        self,
        storage,
        default_hours: float = DEFAULT_DAILY_WORK_HOURS,
        legacy_hours: float = LEGACY_DAILY_WORK_HOURS,
    ):
        self._storage = storage
        self._fallback_hours = default_hours
        self._legacy_hours = legacy_hours
        self._default_hours, self._monthly = self._load()

    @property
    def default_hours(self) -> float:
        return self._default_hours

    @property
    def monthly_settings(self) -> dict[str, float]:
        return dict(self._monthly)

    def _load(self) -> tuple[float, dict[str, float]]:
        try:
            raw = self._storage.get(SETTINGS_STORAGE_KEY)
            if raw:
                stored = json.loads(raw)
                settings = stored.get("settings") or {}
                monthly = {
                    month: value["dailyWorkHours"]
                    for month, value in (stored.get("monthlySettings") or {}).items()
                }
                return settings.get("dailyWorkHours", self._fallback_hours), monthly
            return self._migrate()
        except Exception as exc:
            logger.error("Failed to load settings: %s", exc)
            logger.warning(
                "Using %sh default; stored month settings will be overwritten on next save",
                self._fallback_hours,
            )
            return self._fallback_hours, {}

    def _migrate(self) -> tuple[float, dict[str, float]]:
        """初回読み込み: 既存の勤怠データの月に旧デフォルトを固定する"""
        monthly: dict[str, float] = {}
        raw = self._storage.get(STORAGE_KEY)
        if raw:
            data = json.loads(raw).get("data") or {}
            months = sorted({date_str[:7] for date_str in data})
            for month in months:
                monthly[month] = self._legacy_hours
            logger.info(
                "Migrated settings for %d existing months with %sh default",
                len(months),
                self._legacy_hours,
            )

        self._default_hours, self._monthly = self._fallback_hours, monthly
        self._save()
        return self._fallback_hours, monthly

    def _save(self) -> None:
        stored = {
            "version": SETTINGS_VERSION,
            "settings": {"dailyWorkHours": self._default_hours},
            "monthlySettings": {
                month: {"dailyWorkHours": hours}
                for month, hours in sorted(self._monthly.items())
            },
        }
        try:
            self._storage.set(SETTINGS_STORAGE_KEY, json.dumps(stored))
        except Exception as exc:
            logger.error("Failed to save settings: %s", exc)

    def work_hours_for_month(self, month: str) -> float:
        """月の固定値があればそれを、なければ現在のデフォルトを返す"""
        return self._monthly.get(month, self._default_hours)

    def daily_minutes_for_month(self, month: str) -> int:
        return round(self.work_hours_for_month(month) * 60)

    def ensure_baked(self, month: str) -> bool:
        """月の設定が未確定なら現在のデフォルトで固定する"""
        if month in self._monthly:
            return False
        self._monthly = {**self._monthly, month: self._default_hours}
        self._save()
        logger.debug("Baked %sh into %s", self._default_hours, month)
        return True

    def set_default_work_hours(self, hours) -> None:
        self._default_hours = _check_hours(hours)
        self._save()

    def set_work_hours_for_month(self, month: str, hours) -> None:
        if not is_valid_year_month(month):
            raise InvalidInputError(f"invalid month: {month!r}")
        self._monthly = {**self._monthly, month: _check_hours(hours)}
        self._save()
