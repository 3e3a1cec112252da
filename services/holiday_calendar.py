# services/holiday_calendar.py
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from services.date_utils import parse_year_month, to_date


@dataclass(frozen=True)
class Holiday:
    name: str
    local_name: str


@dataclass(frozen=True)
class HolidayDate:
    date: str  # YYYY-MM-DD
    holiday: Holiday


# 固定祝日（MM-DD）
FIXED_HOLIDAYS: dict[str, dict[str, Holiday]] = {
    "CZ": {
        "01-01": Holiday("New Year's Day", "Den obnovy samostatného českého státu"),
        "05-01": Holiday("Labour Day", "Svátek práce"),
        "05-08": Holiday("Victory in Europe Day", "Den vítězství"),
        "07-05": Holiday(
            "Saints Cyril and Methodius Day",
            "Den slovanských věrozvěstů Cyrila a Metoděje",
        ),
        "07-06": Holiday("Jan Hus Day", "Den upálení mistra Jana Husa"),
        "09-28": Holiday("Czech Statehood Day", "Den české státnosti"),
        "10-28": Holiday(
            "Independence Day", "Den vzniku samostatného československého státu"
        ),
        "11-17": Holiday(
            "Freedom and Democracy Day", "Den boje za svobodu a demokracii"
        ),
        "12-24": Holiday("Christmas Eve", "Štědrý den"),
        "12-25": Holiday("Christmas Day", "1. svátek vánoční"),
        "12-26": Holiday("St. Stephen's Day", "2. svátek vánoční"),
    },
}

EASTER_MONDAY: dict[str, Holiday] = {
    "CZ": Holiday("Easter Monday", "Velikonoční pondělí"),
}

MIN_YEAR = 1583
MAX_YEAR = 9999


def easter_sunday(year: int) -> date:
    """グレゴリオ暦の復活祭（Meeus/Jones/Butcher法）"""
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValueError(f"year out of range {MIN_YEAR}-{MAX_YEAR}: {year}")
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


class HolidayCalendar:
    """国別の祝日判定サービス（固定祝日＋イースターマンデー）"""

    def __init__(self, country: str = "CZ"):
        country = country.upper()
        if country not in FIXED_HOLIDAYS:
            raise ValueError(f"unsupported holiday country: {country}")
        self._country = country
        self._cache: dict[int, list[HolidayDate]] = {}

    @property
    def country(self) -> str:
        return self._country

    def holidays_in_year(self, year: int) -> list[HolidayDate]:
        """指定年の祝日を日付順で返す（年単位でキャッシュ）"""
        if year in self._cache:
            return list(self._cache[year])

        holidays = [
            HolidayDate(f"{year:04d}-{month_day}", holiday)
            for month_day, holiday in FIXED_HOLIDAYS[self._country].items()
        ]
        movable = EASTER_MONDAY.get(self._country)
        if movable:
            monday = easter_sunday(year) + timedelta(days=1)
            holidays.append(HolidayDate(monday.isoformat(), movable))

        holidays.sort(key=lambda h: h.date)
        self._cache[year] = holidays
        return list(holidays)

    def holidays_in_month(self, year_month: str) -> list[HolidayDate]:
        year, _ = parse_year_month(year_month)
        return [h for h in self.holidays_in_year(year) if h.date.startswith(year_month)]

    def holiday_info(self, target_date) -> Optional[Holiday]:
        """祝日ならHolidayを、そうでなければNoneを返す"""
        key = to_date(target_date).isoformat()
        for h in self.holidays_in_year(int(key[:4])):
            if h.date == key:
                return h.holiday
        return None

    def is_holiday(self, target_date) -> bool:
        return self.holiday_info(target_date) is not None
