import logging
import threading
import time
from typing import Callable, Optional


class TimerHandle:
    """Cancellable handle for one scheduled round expiry.

    ``cancel`` is idempotent. The expiry callback must still check
    ``cancelled`` under the session lock, since a worker may already have
    woken up when the round is resolved.
    """

    def __init__(self, delay: float, label: str = ''):
        self.delay = delay
        self.label = label
        self.deadline = time.time() + delay
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def __repr__(self):
        state = 'cancelled' if self.cancelled else 'armed'
        return f"<TimerHandle {self.label} {self.delay}s {state}>"


class BackgroundScheduler:
    """Run single-shot delayed callbacks as Socket.IO background tasks.

    Uses ``socketio.sleep`` so it cooperates with whichever async mode the
    server picked (threading, eventlet or gevent).
    """

    def __init__(self, socketio, heartbeat_sec: int = 0, logger: Optional[logging.Logger] = None,
                 poll_sec: float = 1.0):
        self.socketio = socketio
        self.heartbeat_sec = heartbeat_sec
        # Longest single sleep; a cancelled timer's task ends within this
        self.poll_sec = poll_sec
        self.logger = logger or logging.getLogger(__name__)

    def schedule(self, delay: float, callback: Callable[[TimerHandle], None], label: str = '') -> TimerHandle:
        handle = TimerHandle(delay, label)
        self.logger.info(f"[timer-set] {label} duration={delay}s deadline={handle.deadline}")
        self.socketio.start_background_task(self._worker, handle, callback)
        return handle

    def _worker(self, handle: TimerHandle, callback: Callable[[TimerHandle], None]) -> None:
        hb = self.heartbeat_sec or 0
        slept = 0.0
        next_beat = hb
        while slept < handle.delay and not handle.cancelled:
            step = min(self.poll_sec, handle.delay - slept)
            if hb > 0:
                step = min(step, next_beat - slept)
            self.socketio.sleep(step)
            slept += step
            if hb > 0 and (slept >= next_beat or slept >= handle.delay):
                self.logger.info(f"[timer-heartbeat] {handle.label} remaining={max(0.0, handle.delay - slept)}s")
                next_beat += hb
        if handle.cancelled:
            self.logger.info(f"[timer-abort] {handle.label} cancelled before firing")
            return
        self.logger.info(f"[timer-fire] {handle.label}")
        try:
            callback(handle)
        except Exception:
            # Background tasks have no caller to report to
            self.logger.exception(f"[timer-error] {handle.label}")
