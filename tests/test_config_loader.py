import os
import tempfile
from unittest.mock import patch
from services.config_loader import load_config


def test_load_config_defaults():
    """デフォルト設定が正しくロードされること"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write("scheduler:\n  tick_seconds: 5\n")
        f.flush()
        config = load_config(f.name)
    os.unlink(f.name)
    assert config["scheduler"]["tick_seconds"] == 5
    assert config["tracking"]["max_entries_per_day"] == 10


def test_load_config_nested():
    """ネストされた設定が正しく取得できること"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write(
            "settings:\n"
            "  default_daily_work_hours: 7\n"
        )
        f.flush()
        config = load_config(f.name)
    os.unlink(f.name)
    assert config["settings"]["default_daily_work_hours"] == 7
    assert config["settings"]["legacy_daily_work_hours"] == 6


def test_load_config_file_not_found():
    """存在しないファイルの場合デフォルト設定を返すこと"""
    with patch.dict(os.environ, {}, clear=True):
        config = load_config("nonexistent.yaml")
    assert config["holidays"]["country"] == "CZ"
    assert config["storage"]["data_dir"] == "~/.attendance-tracker"


def test_env_overrides_data_dir():
    """TRACKER_DATA_DIRでデータ保存先を上書きできること"""
    with patch.dict(os.environ, {"TRACKER_DATA_DIR": "/tmp/tracker"}):
        config = load_config("nonexistent.yaml")
    assert config["storage"]["data_dir"] == "/tmp/tracker"


def test_deep_merge_keeps_defaults_untouched(tmp_path):
    """上書きしてもDEFAULT_CONFIG自体は変わらないこと"""
    from services.config_loader import DEFAULT_CONFIG

    path = tmp_path / "config.yaml"
    path.write_text("tracking:\n  lunch_durations: [45]\n", encoding="utf-8")
    config = load_config(str(path))
    assert config["tracking"]["lunch_durations"] == [45]
    assert config["tracking"]["max_entries_per_day"] == 10
    assert DEFAULT_CONFIG["tracking"]["lunch_durations"] == [30, 60]


def test_empty_config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path))["logging"]["level"] == "INFO"
