# services/date_utils.py
import calendar
from datetime import date, datetime

DAY_NAMES = ["Mo", "Tu", "We", "Th", "Fr", "Sa", "Su"]
MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def _today() -> date:
    """テスト時にモック可能"""
    return date.today()


def today_str() -> str:
    """今日の日付をYYYY-MM-DD形式で返す"""
    return _today().isoformat()


def current_month() -> str:
    """今月をYYYY-MM形式で返す"""
    return _today().strftime("%Y-%m")


def to_date(value) -> date:
    """date / datetime / YYYY-MM-DD文字列をdateに変換"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def month_of(date_str: str) -> str:
    return date_str[:7]


def parse_year_month(year_month: str) -> tuple[int, int]:
    """YYYY-MM文字列を(year, month)に分解"""
    year_str, month_str = year_month.split("-")
    return int(year_str), int(month_str)


def is_valid_year_month(year_month: str) -> bool:
    """YYYY-MM形式かつ2000〜2100年の範囲内か"""
    if len(year_month) != 7 or year_month[4] != "-":
        return False
    year_str, month_str = year_month[:4], year_month[5:]
    if not (year_str.isdigit() and month_str.isdigit()):
        return False
    year, month = int(year_str), int(month_str)
    return 2000 <= year <= 2100 and 1 <= month <= 12


def is_valid_date(value: str) -> bool:
    """YYYY-MM-DD形式の実在する日付で、月が有効範囲内か"""
    if len(value) != 10 or value[4] != "-" or value[7] != "-":
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return is_valid_year_month(value[:7])


def days_in_month(year_month: str) -> int:
    year, month = parse_year_month(year_month)
    return calendar.monthrange(year, month)[1]


def month_dates(year_month: str) -> list[str]:
    """月内の全日付をYYYY-MM-DD形式で返す"""
    year, month = parse_year_month(year_month)
    return [
        date(year, month, day).isoformat()
        for day in range(1, days_in_month(year_month) + 1)
    ]


def day_of_week(value) -> int:
    """曜日を返す（0=月曜, 6=日曜）"""
    return to_date(value).weekday()


def is_weekend(value) -> bool:
    return day_of_week(value) >= 5


def day_name(value) -> str:
    return DAY_NAMES[day_of_week(value)]


def week_number(value) -> int:
    """ISO週番号（月曜始まり）"""
    return to_date(value).isocalendar()[1]


def previous_month(year_month: str) -> str:
    year, month = parse_year_month(year_month)
    if month == 1:
        return f"{year - 1}-12"
    return f"{year}-{month - 1:02d}"


def next_month(year_month: str) -> str:
    year, month = parse_year_month(year_month)
    if month == 12:
        return f"{year + 1}-01"
    return f"{year}-{month + 1:02d}"


def format_month(year_month: str) -> str:
    """例: 2026-01 -> January 2026"""
    year, month = parse_year_month(year_month)
    return f"{MONTH_NAMES[month - 1]} {year}"
