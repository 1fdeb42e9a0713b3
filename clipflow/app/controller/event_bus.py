# clipflow/app/controller/event_bus.py
from __future__ import annotations
from queue import Queue

EVENT_QUEUE_SIZE = 5000

def make_event_queue(maxsize: int = EVENT_QUEUE_SIZE) -> Queue:
    # One queue per runtime, shared by the poller and the focus tracker.
    return Queue(maxsize=maxsize)
