import time
from typing import Callable, List, Tuple


class ManualScheduler:
    """Collects delayed callbacks until the caller drains them.

    Used when TESTING so that test code decides when a timer "fires".
    """

    def __init__(self):
        self.pending: List[Tuple[int, Callable[[], None]]] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.pending.append((int(delay_ms), callback))

    def run_pending(self) -> int:
        """Fire everything queued so far; returns how many callbacks ran.

        Callbacks scheduled while draining wait for the next call.
        """
        due, self.pending = self.pending, []
        for _delay, callback in due:
            callback()
        return len(due)


class SocketIOScheduler:
    """Runs delayed callbacks on Socket.IO background tasks."""

    def __init__(self, socketio, app=None, heartbeat_sec: int = 0):
        self.socketio = socketio
        self.app = app
        self.heartbeat_sec = heartbeat_sec

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.socketio.start_background_task(self._worker, max(0, int(delay_ms)) / 1000.0, callback)

    def _worker(self, delay: float, callback: Callable[[], None]) -> None:
        hb = self.heartbeat_sec
        if hb and hb > 0:
            slept = 0.0
            while slept < delay:
                step = min(hb, delay - slept)
                self.socketio.sleep(step)
                slept += step
                self._log(f"[timer-heartbeat] remaining={max(0.0, delay - slept):.2f}s")
        else:
            self.socketio.sleep(delay)
        started = time.time()
        try:
            if self.app is not None:
                with self.app.app_context():
                    callback()
            else:
                callback()
        except Exception as exc:
            self._log(f"[timer-error] {exc!r}", level='exception')
        else:
            self._log(f"[timer-fire] ran in {(time.time() - started) * 1000:.1f}ms")

    def _log(self, message: str, level: str = 'debug') -> None:
        if self.app is None:
            return
        try:
            getattr(self.app.logger, level)(message)
        except Exception:
            pass
