from __future__ import annotations
import subprocess
import sys
import threading
import time
from collections import deque
from queue import Queue
from typing import Callable, Deque, List, Optional, Tuple
import structlog

from clipflow.app.config import CaptureConfig
from clipflow.app.policy.app_labels import AppLabelPolicy, DEFAULT_LABEL, normalize_label
from clipflow.core.events import FocusEvent, utc_ts_ms
from clipflow.core.utils.queueing import safe_put
from clipflow.core.utils.ticker import Ticker
from clipflow.core.utils.timeouts import bounded_call

log = structlog.get_logger()

# Provider signature: returns the foreground app label, or DEFAULT_LABEL
FocusProvider = Callable[[], str]

QUERY_TIMEOUT_S = 2.0

# --- platform-specific providers ---

def _provider_macos() -> str:
    script = 'tell application "System Events" to get name of first application process whose frontmost is true'
    try:
        out = subprocess.run(
            ["osascript", "-e", script],
            capture_output=True, text=True, timeout=QUERY_TIMEOUT_S, check=True,
        )
    except (OSError, subprocess.SubprocessError):
        return DEFAULT_LABEL
    return normalize_label(out.stdout)

def _provider_windows() -> str:
    try:
        import win32gui, win32process
        import psutil
        hwnd = win32gui.GetForegroundWindow()
        if not hwnd:
            return DEFAULT_LABEL
        _tid, pid = win32process.GetWindowThreadProcessId(hwnd)
        name = psutil.Process(pid).name() if pid else ""
    except Exception:
        return DEFAULT_LABEL
    if name.lower().endswith(".exe"):
        name = name[:-4]
    return normalize_label(name)

def _provider_linux() -> str:
    # Needs xdotool on X11; Wayland compositors generally refuse, which lands on the default.
    try:
        out = subprocess.run(
            ["xdotool", "getactivewindow", "getwindowname"],
            capture_output=True, text=True, timeout=QUERY_TIMEOUT_S, check=True,
        )
    except (OSError, subprocess.SubprocessError):
        return DEFAULT_LABEL
    title = out.stdout.strip()
    return normalize_label(title.split(" ")[0] if title else "")

def default_provider() -> FocusProvider:
    if sys.platform.startswith("win"):
        return _provider_windows
    if sys.platform == "darwin":
        return _provider_macos
    return _provider_linux

class ActiveAppTracker:
    """
    Samples the foreground app on a fixed tick and remembers the last app
    that was not the clipboard manager itself. The poller reads
    get_last_active_app() as its attribution fallback.
    """
    def __init__(
        self,
        provider: Optional[FocusProvider] = None,
        config: Optional[CaptureConfig] = None,
        labels: Optional[AppLabelPolicy] = None,
        out_q: Optional[Queue] = None,
        clock: Callable[[], float] = time.perf_counter,
        wall_ms: Callable[[], int] = utc_ts_ms,
    ):
        self.provider = provider or default_provider()
        self.cfg = config or CaptureConfig()
        self.labels = labels or AppLabelPolicy()
        self.out_q = out_q
        self.clock = clock
        self.wall_ms = wall_ms

        self._lock = threading.RLock()
        self._last_active_app = DEFAULT_LABEL
        self._history: Deque[Tuple[str, int]] = deque(maxlen=self.cfg.app_history_size)
        self._last_switch_mono = clock()
        self._ticker = Ticker("focus", self.cfg.focus_poll_s, self.sample)

    def start(self) -> None:
        self._ticker.start()
        log.info("focus.start")

    def stop(self) -> None:
        self._ticker.stop()
        log.info("focus.stop")

    def get_last_active_app(self) -> str:
        with self._lock:
            return self._last_active_app

    def history(self) -> List[Tuple[str, int]]:
        with self._lock:
            return list(self._history)

    def sample(self) -> str:
        """One tick: query the OS, fold the label into state, return it."""
        label = bounded_call(self.provider, self.cfg.query_timeout_s, DEFAULT_LABEL, name="focus")
        label = label or DEFAULT_LABEL
        if self.labels.is_own(label):
            return label

        now = self.clock()
        with self._lock:
            self._history.append((label, self.wall_ms()))
            previous = self._last_active_app
            if label == previous:
                return label
            self._last_active_app = label
            dwell = now - self._last_switch_mono
            self._last_switch_mono = now

        log.info("focus.change", app=label, previous=previous)
        safe_put(self.out_q, FocusEvent(app_name=label, previous=previous, dwell_prev_s=dwell))
        return label
