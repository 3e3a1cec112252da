# tests/test_main.py
import json
from datetime import datetime
from unittest.mock import patch

import pytest

from main import build_parser, main


@pytest.fixture
def run(tmp_path, monkeypatch):
    """一時ディレクトリをデータ保存先にしてCLIを実行する"""
    monkeypatch.setenv("TRACKER_DATA_DIR", str(tmp_path / "data"))
    missing_config = str(tmp_path / "missing.yaml")

    def _run(*argv):
        return main(["--config", missing_config, *argv])

    return _run


def test_parser_lunch_defaults():
    args = build_parser().parse_args(["lunch", "2025-06-02", "entry-1"])
    assert args.command == "lunch"
    assert args.minutes == 60


def test_parser_rejects_unknown_special_type():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["special", "2025-06-02", "holiday"])


def test_start_stop_status(run, capsys):
    with patch("services.attendance_store._now", return_value=datetime(2025, 6, 5, 9)):
        assert run("start") == 0
    assert run("status") == 0
    assert "計測中: 2025-06-05 09:00" in capsys.readouterr().out

    with patch("services.attendance_store._now", return_value=datetime(2025, 6, 5, 10)):
        assert run("stop") == 0
        assert run("stop") == 1


def test_month_invalid_falls_back(run, capsys):
    """不正な月指定は今月にフォールバックすること"""
    assert run("month", "2025-13") == 0
    captured = capsys.readouterr()
    assert "不正な月指定" in captured.err
    assert "合計" in captured.out


def test_settings_out_of_range(run, capsys):
    assert run("settings", "--default", "20") == 1
    assert "between 1 and 12" in capsys.readouterr().err


def test_settings_month(run, capsys):
    assert run("settings", "--month", "2025-06", "--hours", "7.5") == 0
    assert "2025-06: 7.5h" in capsys.readouterr().out


def test_holidays(run, capsys):
    assert run("holidays", "2025") == 0
    out = capsys.readouterr().out
    assert "2025-04-21" in out
    assert "2025-12-26" in out


def test_special_on_holiday_refused(run, capsys):
    assert run("special", "2025-05-01", "sick") == 1
    assert "祝日" in capsys.readouterr().err


def test_edit_rejects_bad_order(run, capsys):
    entries = (
        '[{"id": "a", "start": "2025-06-02T12:00:00", "end": "2025-06-02T10:00:00"}]'
    )
    assert run("edit", "2025-06-02", entries) == 1
    assert "入力が不正です" in capsys.readouterr().err


def test_import_invalid_file(run, tmp_path, capsys):
    bad = tmp_path / "bad.json"
    bad.write_text("{broken", encoding="utf-8")
    assert run("import", str(bad)) == 1
    assert "インポートに失敗しました" in capsys.readouterr().err


def test_export_import_file(run, tmp_path):
    with patch("services.attendance_store._now", return_value=datetime(2025, 6, 5, 9)):
        run("special", "2025-06-03", "vacation_first_half")
    backup = tmp_path / "backup.json"
    assert run("export", str(backup)) == 0
    assert '"vacation_first_half"' in backup.read_text(encoding="utf-8")
    assert run("import", str(backup)) == 0


def test_lunch_duration_must_be_configured(run, capsys):
    assert run("lunch", "2025-06-02", "entry-1", "45") == 1
    assert "30, 60" in capsys.readouterr().err


def _stored_dates(tmp_path):
    path = tmp_path / "data" / "attendance-tracker-data.json"
    if not path.exists():
        return []
    return sorted(json.loads(path.read_text(encoding="utf-8"))["data"])


def test_edit_rejects_public_holiday_type(run, tmp_path, capsys):
    """public_holidayは手動で設定できないこと"""
    assert run("edit", "2025-06-04", "[]", "--special", "public_holiday") == 1
    assert "public_holiday" in capsys.readouterr().err
    assert _stored_dates(tmp_path) == []


def test_edit_rejects_special_day_on_holiday(run, tmp_path, capsys):
    assert run("edit", "2025-12-25", "[]", "--special", "sick") == 1
    assert "祝日" in capsys.readouterr().err
    assert _stored_dates(tmp_path) == []


def test_edit_entries_on_holiday_allowed(run, tmp_path):
    """祝日でも種別なしのエントリー編集はできること"""
    entries = '[{"id": "a", "start": "2025-12-25T09:00:00", "end": "2025-12-25T11:00:00"}]'
    with patch("services.attendance_store._now", return_value=datetime(2025, 12, 26, 9)):
        assert run("edit", "2025-12-25", entries) == 0
    assert _stored_dates(tmp_path) == ["2025-12-25"]


def test_edit_rejects_invalid_date(run, tmp_path, capsys):
    """不正な日付は保存前に拒否し、設定にも残らないこと"""
    assert run("edit", "garbage", "[]") == 1
    assert "不正な日付" in capsys.readouterr().err
    assert _stored_dates(tmp_path) == []
    settings = (tmp_path / "data" / "attendance-tracker-settings.json").read_text(encoding="utf-8")
    assert "garbage" not in settings


def test_special_rejects_invalid_date(run, capsys):
    assert run("special", "2025-13-40", "sick") == 1
    assert "不正な日付" in capsys.readouterr().err


def test_lunch_rejects_invalid_date(run, capsys):
    assert run("lunch", "2025-02-30", "entry-1", "30") == 1
    assert "不正な日付" in capsys.readouterr().err


def test_edit_rejects_second_running_entry(run, tmp_path, capsys):
    """計測中に別の日へ実行中エントリーを追加できないこと"""
    now = datetime(2025, 6, 5, 9)
    with patch("services.attendance_store._now", return_value=now):
        assert run("start") == 0
        entries = '[{"id": "x", "start": "2025-06-04T08:00:00", "end": null}]'
        assert run("edit", "2025-06-04", entries) == 1
    assert "入力が不正です" in capsys.readouterr().err
    assert _stored_dates(tmp_path) == ["2025-06-05"]


def test_start_lists_unclosed_dates(run, capsys):
    entries = '[{"id": "x", "start": "2025-06-04T08:00:00", "end": null}]'
    with patch("services.attendance_store._now", return_value=datetime(2025, 6, 4, 9)):
        assert run("edit", "2025-06-04", entries) == 0
    with patch("services.attendance_store._now", return_value=datetime(2025, 6, 5, 9)):
        assert run("start") == 1
    assert "2025-06-04" in capsys.readouterr().err


def test_month_shows_navigation(run, capsys):
    assert run("month", "2025-01") == 0
    assert "前月: 2024-12  翌月: 2025-02" in capsys.readouterr().out
