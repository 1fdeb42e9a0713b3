# clipflow/core/clipboard/clipboard_poller.py
from __future__ import annotations
import threading
import time
from enum import Enum
from queue import Queue
from typing import Callable, Optional, Tuple
import structlog

from clipflow.app.analysis.detector import EnhancedDetector
from clipflow.app.config import CaptureConfig
from clipflow.app.policy.app_labels import DEFAULT_LABEL
from clipflow.core.clipboard.backends import read_clipboard_text, read_clipboard_image
from clipflow.core.events import CaptureEvent, utc_ts_ms
from clipflow.core.utils.queueing import safe_put
from clipflow.core.utils.ticker import Ticker
from clipflow.core.utils.timeouts import bounded_call

log = structlog.get_logger()

Reader = Callable[[], Optional[str]]

class PollerState(Enum):
    IDLE = "idle"          # nothing seen yet
    WATCHING = "watching"

def fingerprint(content: str, edge: int = 50) -> str:
    """Length + prefix + suffix. Cheap, not collision-free for long near-duplicates."""
    return f"{len(content)}{content[:edge]}{content[-edge:]}"

def preview(content: str, n: int = 50) -> str:
    return content[:n] + ("..." if len(content) > n else "")

class ClipboardPoller:
    """
    Polls the clipboard and emits a CaptureEvent per genuine change.
    - exact repeats are dropped on the fast path
    - near-simultaneous duplicate reads are debounced
    - the manager's own writes are confirmed, not captured
    Readers, clocks and the app tracker are injectable for tests.
    """
    def __init__(
        self,
        out_q: Optional[Queue],
        detector: Optional[EnhancedDetector] = None,
        tracker=None,
        config: Optional[CaptureConfig] = None,
        read_text: Optional[Reader] = None,
        read_image: Optional[Reader] = None,
        clock: Callable[[], float] = time.perf_counter,
        wall_ms: Callable[[], int] = utc_ts_ms,
    ):
        self.out_q = out_q
        self.detector = detector or EnhancedDetector()
        self.tracker = tracker
        self.cfg = config or CaptureConfig()
        self.read_text = read_text or read_clipboard_text
        self.read_image = read_image or read_clipboard_image
        self.clock = clock
        self.wall_ms = wall_ms

        self.state = PollerState.IDLE
        self._last_content = ""
        self._last_fp = ""
        self._last_processed: Optional[float] = None

        # self-write suppression, armed from the UI/CLI thread
        self._suppress_lock = threading.Lock()
        self._suppress_content: Optional[str] = None
        self._suppress_until = 0.0

        self._ticker = Ticker("clipboard", self.cfg.clipboard_poll_s, self.tick)

    def start(self) -> None:
        self._ticker.start()
        log.info("clipboard.start")

    def stop(self) -> None:
        self._ticker.stop()
        log.info("clipboard.stop")

    # --- self-write suppression ---

    def arm_self_write(self, content: str) -> None:
        """Expect `content` to show up on the clipboard shortly; re-arming extends the window."""
        with self._suppress_lock:
            self._suppress_content = content
            self._suppress_until = self.clock() + self.cfg.self_write_window_s
        log.debug("clipboard.self_write.armed", window_s=self.cfg.self_write_window_s)

    def suppression_active(self) -> bool:
        with self._suppress_lock:
            return self._suppress_content is not None and self.clock() < self._suppress_until

    def _consume_self_write(self, content: str) -> bool:
        with self._suppress_lock:
            armed = self._suppress_content
            if armed is None:
                return False
            if self.clock() >= self._suppress_until:
                self._suppress_content = None
                return False
            if armed.strip() != content.strip():
                return False
            self._suppress_content = None
            return True

    # --- polling ---

    def _read(self) -> Tuple[Optional[str], bool]:
        """Returns (content, came_from_image_reader)."""
        timeout = self.cfg.query_timeout_s
        text = bounded_call(self.read_text, timeout, None, name="clipboard-text")
        if text:
            return text, False
        return bounded_call(self.read_image, timeout, None, name="clipboard-image") or None, True

    def tick(self) -> Optional[CaptureEvent]:
        content, is_image = self._read()
        if not content:
            return None

        # fast path: nothing changed since the last tick
        if content == self._last_content:
            return None

        now = self.clock()
        fp = fingerprint(content, self.cfg.fingerprint_edge)
        event: Optional[CaptureEvent] = None

        if (
            fp == self._last_fp
            and content.strip() == self._last_content.strip()
            and self._last_processed is not None
            and now - self._last_processed < self.cfg.debounce_s
        ):
            log.debug("clipboard.debounced", preview=preview(content))
        elif self._consume_self_write(content):
            log.debug("clipboard.self_write.confirmed", preview=preview(content))
        else:
            event = self._capture(content, is_image)

        self.state = PollerState.WATCHING
        self._last_content = content
        self._last_fp = fp
        self._last_processed = now
        return event

    def _capture(self, content: str, is_image: bool = False) -> CaptureEvent:
        app = DEFAULT_LABEL
        if self.tracker is not None:
            app = self.tracker.get_last_active_app() or DEFAULT_LABEL

        result = self.detector.detect(content, app)
        content_type, reasoning = result.content_type, result.reasoning
        if is_image:
            # image reads are typed by where they came from, not by the text rules
            content_type = "image"
            reasoning = reasoning + ("Read from clipboard image",)
        ev = CaptureEvent(
            content=content,
            timestamp=self.wall_ms(),
            content_type=content_type,
            source=result.source_app,
            confidence=result.confidence,
            reasoning=reasoning,
        )
        log.info(
            "clipboard.capture",
            type=content_type,
            source=result.source_app,
            confidence=result.confidence,
            length=len(content),
        )
        log.debug("clipboard.capture.reasoning", reasoning="; ".join(reasoning))
        safe_put(self.out_q, ev)
        return ev
