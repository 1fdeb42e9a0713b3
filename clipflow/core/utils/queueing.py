# clipflow/core/utils/queueing.py
from __future__ import annotations
from queue import Queue, Full, Empty
from typing import Any, List, Optional
import structlog

log = structlog.get_logger()

def safe_put(q: Optional[Queue], item) -> bool:
    """
    Hand an event to the consumer without blocking the poller thread.
    On a full queue the oldest pending event is discarded. Returns True if
    something was discarded. A None queue means no consumer is attached.
    """
    if q is None:
        return False
    try:
        q.put_nowait(item)
        return False
    except Full:
        try:
            q.get_nowait()
        except Empty:
            pass
        q.put_nowait(item)
        log.debug("queue.overflow", dropped=1, maxsize=q.maxsize)
        return True

def drain(q: Queue) -> List[Any]:
    out: List[Any] = []
    while True:
        try:
            out.append(q.get_nowait())
        except Empty:
            return out
