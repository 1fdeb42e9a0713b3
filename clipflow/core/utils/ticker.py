# clipflow/core/utils/ticker.py
from __future__ import annotations
import threading
from typing import Callable, Optional
import structlog

log = structlog.get_logger()

class Ticker:
    """
    Runs a callback on a fixed interval in a daemon thread.
    The callback's own exceptions are logged and the loop keeps going.
    Components own a Ticker instead of sleeping inline, so tests can call
    the tick function directly and skip wall-clock waits.
    """
    def __init__(self, name: str, interval_s: float, fn: Callable[[], object]):
        self.name = name
        self.interval_s = interval_s
        self.fn = fn
        self._thr: Optional[threading.Thread] = None
        self._stop = threading.Event()

    @property
    def running(self) -> bool:
        return bool(self._thr and self._thr.is_alive())

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thr = threading.Thread(target=self._loop, name=f"ticker-{self.name}", daemon=True)
        self._thr.start()
        log.info("ticker.start", ticker=self.name, interval_s=self.interval_s)

    def stop(self, timeout: float = 1.0) -> None:
        self._stop.set()
        if self._thr:
            self._thr.join(timeout=timeout)
            self._thr = None
        log.info("ticker.stop", ticker=self.name)

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.fn()
            except Exception as e:
                log.warning("ticker.tick.error", ticker=self.name, err=str(e))
            # Event.wait doubles as an interruptible sleep
            self._stop.wait(self.interval_s)
