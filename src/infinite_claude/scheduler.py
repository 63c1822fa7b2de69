"""
Cancellable periodic tasks.

A PeriodicTask calls tick() once per interval until tick() asks to stop or
someone calls stop(). The only blocking point is the wait between ticks,
which wakes immediately on cancellation. Time comes from an injectable
Clock so tests can run hours of polling in virtual time.
"""

import threading
import time
from typing import Optional

from .protocols import Clock


class SystemClock:
    """Wall-clock implementation of the Clock protocol."""

    def now(self) -> float:
        return time.monotonic()

    def wait(self, seconds: float, stop_event: threading.Event) -> bool:
        if seconds <= 0:
            return stop_event.is_set()
        return stop_event.wait(seconds)

    def pause(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


class PeriodicTask:
    """Base class for a loop that polls on a fixed interval.

    Subclasses implement tick(), returning False to end the loop.
    run() blocks; start() runs the loop on a daemon thread.
    """

    name = "PeriodicTask"

    def __init__(self, interval: float, clock: Optional[Clock] = None):
        self.interval = interval
        self.clock = clock or SystemClock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()  # protect start/stop

    def tick(self) -> bool:
        raise NotImplementedError

    def on_start(self) -> None:
        pass

    def on_stop(self) -> None:
        pass

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def wait(self, seconds: float) -> bool:
        """Sleep inside a tick; returns True if the task was cancelled."""
        return self.clock.wait(seconds, self._stop_event)

    def run(self) -> None:
        """Tick until tick() returns False or stop() is called."""
        self.on_start()
        try:
            while not self._stop_event.is_set():
                if not self.tick():
                    break
                if self.wait(self.interval):
                    break
        finally:
            self.on_stop()

    def start(self) -> None:
        """Start the loop on a background thread (idempotent)."""
        with self._lock:
            if self.is_running:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(target=self.run, name=self.name, daemon=True)
            self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Request the loop to stop and optionally wait for it."""
        self._stop_event.set()
        with self._lock:
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def join(self, timeout: Optional[float] = None) -> None:
        thread = self._thread
        if thread is not None:
            thread.join(timeout=timeout)
