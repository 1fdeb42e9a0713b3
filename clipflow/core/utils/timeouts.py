# clipflow/core/utils/timeouts.py
from __future__ import annotations
import threading
from typing import Callable, TypeVar
import structlog

log = structlog.get_logger()

T = TypeVar("T")

def bounded_call(fn: Callable[[], T], timeout_s: float, default: T, name: str = "call") -> T:
    """
    Run fn in a throwaway daemon thread and wait at most timeout_s.
    Errors and timeouts resolve to `default`; a hung call is abandoned
    (its thread is a daemon) so the caller's next tick is never blocked.
    """
    box: dict = {}

    def _runner():
        try:
            box["value"] = fn()
        except Exception as e:
            box["error"] = e

    thr = threading.Thread(target=_runner, name=f"bounded-{name}", daemon=True)
    thr.start()
    thr.join(timeout=timeout_s)

    if thr.is_alive():
        log.debug("bounded_call.timeout", name=name, timeout_s=timeout_s)
        return default
    if "error" in box:
        log.debug("bounded_call.error", name=name, err=str(box["error"]))
        return default
    return box.get("value", default)
