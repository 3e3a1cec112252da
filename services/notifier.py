import sys


class ConsoleNotifier:
    """コンソール出力による通知"""

    def __init__(self, prefix: str = "勤怠"):
        self._prefix = prefix

    def send(self, message: str) -> bool:
        print(f"[{self._prefix}] {message}", file=sys.stdout)
        return True

    def send_error(self, error: str) -> bool:
        print(f"[{self._prefix}エラー] {error}", file=sys.stderr)
        return True
