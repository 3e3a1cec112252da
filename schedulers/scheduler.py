# schedulers/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from typing import Callable


class ElapsedTicker:
    """APSchedulerによる経過時間表示の定期実行（状態は読むだけ）"""

    def __init__(self, interval_seconds: int, job_func: Callable):
        self._interval = interval_seconds
        self._job_func = job_func
        self._scheduler = BackgroundScheduler()
        self._scheduler.add_job(
            self._job_func,
            trigger=IntervalTrigger(seconds=self._interval),
            id="elapsed_tick",
            replace_existing=True,
        )

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self):
        """ティック開始"""
        self._scheduler.start()

    def stop(self):
        """ティック停止"""
        self._scheduler.shutdown(wait=False)
