# tests/test_utils.py
# How to run: from repo root, pytest -q
#
# What this covers:
#   - safe_put drops the oldest item instead of blocking
#   - bounded_call returns the default on errors and timeouts
#   - Ticker keeps ticking after a failing callback
#   - Log processor truncates clipboard payloads

import queue
import threading
import time

from clipflow.app.logging_config import clip_content
from clipflow.core.utils.queueing import safe_put, drain
from clipflow.core.utils.ticker import Ticker
from clipflow.core.utils.timeouts import bounded_call


def test_safe_put_drops_oldest_when_full():
    q = queue.Queue(maxsize=2)
    for i in range(3):
        safe_put(q, i)
    assert drain(q) == [1, 2]
    safe_put(None, "ignored")


def test_bounded_call():
    assert bounded_call(lambda: "ok", 1.0, "default") == "ok"

    def _boom():
        raise RuntimeError("x")

    assert bounded_call(_boom, 1.0, "default") == "default"

    gate = threading.Event()
    try:
        assert bounded_call(lambda: gate.wait(5.0), 0.05, "default") == "default"
    finally:
        gate.set()


def test_ticker_survives_failing_callback():
    calls = []

    def _tick():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("first tick fails")

    t = Ticker("test", 0.01, _tick)
    t.start()
    deadline = time.monotonic() + 2.0
    while len(calls) < 3 and time.monotonic() < deadline:
        time.sleep(0.01)
    t.stop()
    assert len(calls) >= 3
    assert not t.running


def test_safe_put_reports_overflow():
    q = queue.Queue(maxsize=1)
    assert safe_put(q, "a") is False
    assert safe_put(q, "b") is True
    assert drain(q) == ["b"]
    assert safe_put(None, "c") is False


def test_log_processor_clips_clipboard_payloads():
    long_text = "x" * 500
    out = clip_content(None, "info", {"event": "clipboard.capture", "content": long_text, "preview": "short", "length": 500})
    assert out["content"] == "x" * 50 + "..."
    assert out["preview"] == "short"
    assert out["length"] == 500
