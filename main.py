"""勤怠トラッカー - エントリーポイント"""
import argparse
import json
import logging
import os
import signal
import sys
import time
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from services.attendance_store import AttendanceStore
from services.config_loader import load_config
from services.date_utils import (
    current_month,
    day_name,
    format_month,
    is_valid_date,
    is_valid_year_month,
    next_month,
    previous_month,
)
from services.holiday_calendar import HolidayCalendar
from services.models import DayKind, DayRecord, InvalidInputError, SpecialDay
from services.notifier import ConsoleNotifier
from services.settings_store import SettingsStore
from services.storage import (
    SETTINGS_STORAGE_KEY,
    STORAGE_KEY,
    JsonFileStorage,
    entry_from_dict,
    read_raw,
    write_raw,
)
from services.time_calc import format_minutes, format_minutes_decimal
from services.validator import format_validation_error
from schedulers.scheduler import ElapsedTicker

RAW_KEYS = {"attendance": STORAGE_KEY, "settings": SETTINGS_STORAGE_KEY}


def create_services(config: dict):
    """設定に基づいてサービスインスタンスを生成"""
    storage = JsonFileStorage(config["storage"]["data_dir"])
    calendar_service = HolidayCalendar(config["holidays"]["country"])
    settings = SettingsStore(
        storage,
        default_hours=config["settings"]["default_daily_work_hours"],
        legacy_hours=config["settings"]["legacy_daily_work_hours"],
    )
    store = AttendanceStore(storage, settings, calendar_service, config=config)
    return storage, store


def cmd_status(store: AttendanceStore, notifier: ConsoleNotifier, args) -> int:
    ongoing = store.current_entry()
    if ongoing:
        started = ongoing.entry.start.strftime("%H:%M")
        notifier.send(
            f"計測中: {ongoing.date} {started}〜 ({format_minutes(store.elapsed_minutes())})"
        )
    else:
        notifier.send("計測していません")
    for error in store.validation_errors():
        notifier.send_error(format_validation_error(error))
    return 0


def _invalid_date(notifier, value: str) -> bool:
    """日付引数が不正ならエラーを出してTrueを返す"""
    if is_valid_date(value):
        return False
    notifier.send_error(f"不正な日付です（YYYY-MM-DD）: {value}")
    return True


def cmd_start(store, notifier, args) -> int:
    if store.has_blocking_errors():
        dates = ", ".join(store.unclosed_dates())
        notifier.send_error(f"未終了のエントリーがあります（{dates}）。先に修正してください")
        return 1
    if not store.start_tracking():
        notifier.send_error("計測を開始できません")
        return 1
    notifier.send(f"計測を開始しました（{datetime.now():%H:%M}）")
    return 0


def cmd_stop(store, notifier, args) -> int:
    if not store.stop_tracking():
        notifier.send_error("計測していません")
        return 1
    notifier.send(f"計測を終了しました（{datetime.now():%H:%M}）")
    return 0


def cmd_month(store, notifier, args) -> int:
    month = args.month or current_month()
    if not is_valid_year_month(month):
        notifier.send_error(f"不正な月指定のため今月を表示します: {month}")
        month = current_month()

    summary = store.month_summary(month)
    print(f"{format_month(month)}  (1日 {format_minutes_decimal(summary.daily_minutes)})")
    for week in summary.weeks:
        print(
            f"-- W{week.week_number:02d}  {format_minutes(week.total_minutes)}"
            f" / {format_minutes(week.target_minutes)}  [{week.status.value}]"
        )
        for day in week.days:
            label = ""
            if day.is_public_holiday:
                label = day.holiday_name
            elif day.special_day is not None:
                label = day.special_day.to_code()
            marker = "*" if day.has_open_entry else " "
            print(
                f"   {day_name(day.date)} {day.date[8:]}{marker} "
                f"{format_minutes(day.total_minutes):>8}  {label}"
            )
    print(
        f"合計 {format_minutes(summary.total_minutes)}"
        f" / 期待 {format_minutes(summary.expected_minutes)}"
        f"（稼働日 {summary.workdays}日）"
    )
    print(f"前月: {previous_month(month)}  翌月: {next_month(month)}")
    return 0


def cmd_special(store, notifier, args) -> int:
    if _invalid_date(notifier, args.date):
        return 1
    special = None if args.type == "none" else SpecialDay.from_code(args.type)
    if store.calendar.is_holiday(args.date):
        notifier.send_error(f"{args.date} は祝日のため変更できません")
        return 1
    store.set_special_day(args.date, special)
    notifier.send(f"{args.date} を {args.type} に設定しました")
    return 0


def cmd_lunch(store, notifier, args) -> int:
    if _invalid_date(notifier, args.date):
        return 1
    if args.minutes not in store.lunch_durations:
        choices = ", ".join(str(m) for m in store.lunch_durations)
        notifier.send_error(f"昼休憩は {choices} 分から選んでください")
        return 1
    if not store.can_add_lunch_break(args.date, args.entry_id, args.minutes):
        notifier.send_error("このエントリーには昼休憩を挿入できません")
        return 1
    store.add_lunch_break(args.date, args.entry_id, args.minutes)
    notifier.send(f"{args.minutes}分の昼休憩を挿入しました")
    return 0


def cmd_edit(store, notifier, args) -> int:
    """JSON形式のエントリー一覧で1日分を置き換える"""
    if _invalid_date(notifier, args.date):
        return 1
    try:
        raw = json.loads(args.entries)
        entries = tuple(entry_from_dict(e) for e in raw)
        special = SpecialDay.from_code(args.special)
        record = DayRecord(date=args.date, entries=entries, special_day=special)
        store.check_edit(record)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        notifier.send_error(f"入力が不正です: {e}")
        return 1

    if special is not None and special.kind is DayKind.PUBLIC_HOLIDAY:
        notifier.send_error("public_holiday は祝日カレンダーから自動で設定されます")
        return 1
    if special is not None and store.calendar.is_holiday(args.date):
        notifier.send_error(f"{args.date} は祝日のため種別を変更できません")
        return 1
    store.update_day(record)
    notifier.send(f"{args.date} を更新しました")
    return 0


def cmd_errors(store, notifier, args) -> int:
    errors = store.validation_errors()
    for error in errors:
        print(f"{error.type.value:20} {format_validation_error(error)}")
    return 1 if errors else 0


def cmd_holidays(store, notifier, args) -> int:
    for h in store.calendar.holidays_in_year(args.year):
        print(f"{h.date}  {h.holiday.name} ({h.holiday.local_name})")
    return 0


def cmd_settings(store, notifier, args) -> int:
    settings = store.settings
    try:
        if args.default is not None:
            settings.set_default_work_hours(args.default)
        if args.month and args.hours is not None:
            settings.set_work_hours_for_month(args.month, args.hours)
    except InvalidInputError as e:
        notifier.send_error(str(e))
        return 1
    print(f"default: {settings.default_hours}h")
    for month, hours in sorted(settings.monthly_settings.items()):
        print(f"{month}: {hours}h")
    return 0


def cmd_export(store, notifier, args) -> int:
    text = store.export_json()
    if args.file:
        Path(args.file).write_text(text, encoding="utf-8")
        notifier.send(f"{args.file} に書き出しました")
    else:
        print(text)
    return 0


def cmd_import(store, notifier, args) -> int:
    try:
        store.import_json(Path(args.file).read_text(encoding="utf-8"))
    except (OSError, InvalidInputError) as e:
        notifier.send_error(f"インポートに失敗しました: {e}")
        return 1
    notifier.send(f"{args.file} を読み込みました")
    return 0


def cmd_raw(store, notifier, args, storage=None) -> int:
    key = RAW_KEYS[args.key]
    if args.op == "show":
        print(read_raw(storage, key))
        return 0
    text = Path(args.file).read_text(encoding="utf-8") if args.file else sys.stdin.read()
    try:
        write_raw(storage, key, text)
    except InvalidInputError as e:
        notifier.send_error(str(e))
        return 1
    if key == STORAGE_KEY:
        store.reload()
    notifier.send(f"{args.key} を保存しました")
    return 0


def cmd_watch(store, notifier, args, interval: int = 1) -> int:
    """計測中の経過時間を1秒ごとに表示する（状態は変更しない）"""
    if not store.is_tracking:
        notifier.send("計測していません")
        return 0

    def tick():
        print(f"\r経過 {format_minutes(store.elapsed_minutes())}", end="", flush=True)

    ticker = ElapsedTicker(interval_seconds=interval, job_func=tick)
    tick()
    ticker.start()

    def shutdown(signum, frame):
        ticker.stop()
        print()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)
    try:
        while store.is_tracking:
            time.sleep(1)
    except KeyboardInterrupt:
        shutdown(None, None)
    ticker.stop()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="attendance-tracker")
    parser.add_argument("--config", default=None, help="config.yaml のパス")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status")
    sub.add_parser("start")
    sub.add_parser("stop")

    p = sub.add_parser("month")
    p.add_argument("month", nargs="?")

    p = sub.add_parser("special")
    p.add_argument("date")
    p.add_argument(
        "type",
        choices=[
            "none", "sick", "sick_first_half", "sick_second_half",
            "vacation", "vacation_first_half", "vacation_second_half",
        ],
    )

    p = sub.add_parser("lunch")
    p.add_argument("date")
    p.add_argument("entry_id")
    p.add_argument("minutes", type=int, nargs="?", default=60)

    p = sub.add_parser("edit")
    p.add_argument("date")
    p.add_argument("entries", help='例: [{"id": "a", "start": "...", "end": "..."}]')
    p.add_argument("--special", default=None)

    sub.add_parser("errors")

    p = sub.add_parser("holidays")
    p.add_argument("year", type=int)

    p = sub.add_parser("settings")
    p.add_argument("--default", type=float)
    p.add_argument("--month")
    p.add_argument("--hours", type=float)

    p = sub.add_parser("export")
    p.add_argument("file", nargs="?")

    p = sub.add_parser("import")
    p.add_argument("file")

    p = sub.add_parser("raw")
    p.add_argument("op", choices=["show", "save"])
    p.add_argument("key", choices=sorted(RAW_KEYS))
    p.add_argument("file", nargs="?")

    sub.add_parser("watch")
    return parser


COMMANDS = {
    "status": cmd_status,
    "start": cmd_start,
    "stop": cmd_stop,
    "month": cmd_month,
    "special": cmd_special,
    "lunch": cmd_lunch,
    "edit": cmd_edit,
    "errors": cmd_errors,
    "holidays": cmd_holidays,
    "settings": cmd_settings,
    "export": cmd_export,
    "import": cmd_import,
}


def main(argv=None) -> int:
    """メイン起動処理"""
    load_dotenv()
    args = build_parser().parse_args(argv)
    config = load_config(args.config or os.getenv("TRACKER_CONFIG", "config.yaml"))
    logging.basicConfig(
        level=config["logging"]["level"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    storage, store = create_services(config)
    notifier = ConsoleNotifier()

    if args.command == "raw":
        return cmd_raw(store, notifier, args, storage=storage)
    if args.command == "watch":
        return cmd_watch(store, notifier, args, interval=config["scheduler"]["tick_seconds"])
    return COMMANDS[args.command](store, notifier, args)


if __name__ == "__main__":
    sys.exit(main())
