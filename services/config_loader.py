import os
import yaml
from pathlib import Path

DEFAULT_CONFIG = {
    "storage": {
        "data_dir": "~/.attendance-tracker",
    },
    "tracking": {
        "max_entries_per_day": 10,
        "lunch_durations": [30, 60],
    },
    "settings": {
        "default_daily_work_hours": 8,
        "legacy_daily_work_hours": 6,
    },
    "holidays": {
        "country": "CZ",
    },
    "scheduler": {
        "tick_seconds": 1,
    },
    "logging": {
        "level": "INFO",
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """ベース設定にオーバーライドをマージする"""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str = "config.yaml") -> dict:
    """YAML設定ファイルをロードし、デフォルト設定とマージして返す"""
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
        config = _deep_merge(DEFAULT_CONFIG, user_config)
    else:
        config = _deep_merge(DEFAULT_CONFIG, {})

    # 環境変数による上書き
    data_dir = os.getenv("TRACKER_DATA_DIR")
    if data_dir:
        config["storage"] = {**config["storage"], "data_dir": data_dir}
    return config
