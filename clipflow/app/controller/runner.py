from __future__ import annotations
import threading
from queue import Empty, Queue
from typing import Callable, Optional
import structlog

from clipflow.app.analysis.content_classifier import ContentClassifier
from clipflow.app.analysis.detector import EnhancedDetector
from clipflow.app.config import CaptureConfig, Settings
from clipflow.app.controller.event_bus import make_event_queue
from clipflow.app.policy.app_labels import AppLabelPolicy, default_policy
from clipflow.app.policy.retention import IngestOutcome, IngestionError, RetentionManager, item_from_capture
from clipflow.core.clipboard.backends import write_clipboard_text
from clipflow.core.clipboard.clipboard_poller import ClipboardPoller
from clipflow.core.events import BaseEvent, CaptureEvent, FocusEvent
from clipflow.core.focus.focus_tracker import ActiveAppTracker

log = structlog.get_logger()

class CaptureRuntime:
    """Starts/stops the tracker and poller; drains captures into the retention manager."""
    def __init__(
        self,
        store,
        settings: Optional[Settings] = None,
        config: Optional[CaptureConfig] = None,
        labels: Optional[AppLabelPolicy] = None,
        tracker: Optional[ActiveAppTracker] = None,
        poller: Optional[ClipboardPoller] = None,
        write_text: Callable[[str], None] = write_clipboard_text,
        on_capture: Optional[Callable[[IngestOutcome], None]] = None,
        event_queue: Optional[Queue] = None,
    ):
        self.settings = settings or Settings()
        self.cfg = config or CaptureConfig()
        self.labels = labels or default_policy()
        self.queue = event_queue if event_queue is not None else make_event_queue()

        self.classifier = ContentClassifier(user_rules=self.settings.active_rules())
        self.detector = EnhancedDetector(self.classifier, self.labels)
        self.tracker = tracker or ActiveAppTracker(config=self.cfg, labels=self.labels, out_q=self.queue)
        self.poller = poller or ClipboardPoller(self.queue, detector=self.detector, tracker=self.tracker, config=self.cfg)
        self.retention = RetentionManager(store, config=self.settings.retention())

        self._write_text = write_text
        self._on_capture = on_capture
        self._consumer_thr: Optional[threading.Thread] = None
        self._stop_evt = threading.Event()
        self.captured = 0

    def start(self) -> None:
        self._stop_evt.clear()
        self.tracker.start()
        self.poller.start()
        self._consumer_thr = threading.Thread(target=self._consume_loop, name="capture-consumer", daemon=True)
        self._consumer_thr.start()
        log.info("runtime.start")

    def stop(self) -> None:
        self.poller.stop()
        self.tracker.stop()
        self._stop_evt.set()
        if self._consumer_thr:
            self._consumer_thr.join(timeout=1.0)
            self._consumer_thr = None
        log.info("runtime.stop")

    def apply_settings(self, settings: Settings) -> None:
        self.settings = settings
        self.classifier.set_user_rules(settings.active_rules())
        self.retention.config = settings.retention()
        log.info("runtime.settings", max_items=settings.max_items, auto_delete_days=settings.auto_delete_days)

    def copy_to_clipboard(self, text: str) -> None:
        """Write from inside the app without the write coming back as a new capture."""
        self.poller.arm_self_write(text)
        self._write_text(text)

    def handle(self, ev: BaseEvent) -> Optional[IngestOutcome]:
        if isinstance(ev, FocusEvent):
            log.debug("runtime.focus", app=ev.app_name, previous=ev.previous)
            return None
        if not isinstance(ev, CaptureEvent):
            return None

        # A failed ingest is dropped; the poller has already moved past this content.
        try:
            outcome = self.retention.ingest(item_from_capture(ev))
        except IngestionError as e:
            log.warning("capture.ingest.error", err=str(e))
            return None

        self.captured += 1
        if self._on_capture:
            try:
                self._on_capture(outcome)
            except Exception as e:
                log.warning("runtime.on_capture.error", err=str(e))
        return outcome

    def _consume_loop(self):
        while not self._stop_evt.is_set():
            try:
                ev: BaseEvent = self.queue.get(timeout=0.5)
            except Empty:
                continue
            try:
                self.handle(ev)
            except Exception as e:
                log.warning("runtime.consume.error", err=str(e))
