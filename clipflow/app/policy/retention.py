# clipflow/app/policy/retention.py
from __future__ import annotations
import os
import sqlite3
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Set, Tuple
import structlog

from clipflow.app.config import RetentionConfig
from clipflow.core.events import CaptureEvent, utc_ts_ms
from clipflow.core.storage.models import ClipboardItem

log = structlog.get_logger()

class IngestionError(RuntimeError):
    """The store failed mid-ingest; the item is not considered captured."""

@dataclass(frozen=True)
class IngestOutcome:
    action: str                       # "inserted" | "updated"
    item: ClipboardItem
    evicted: Tuple[str, ...] = ()

def new_item_id(ts_ms: int) -> str:
    return f"clipboard-{ts_ms}-{os.urandom(5).hex()}"

def item_from_capture(ev: CaptureEvent) -> ClipboardItem:
    return ClipboardItem(
        id=new_item_id(ev.timestamp),
        content=ev.content,
        type=ev.content_type,
        timestamp=ev.timestamp,
        source=ev.source or "System",
    )

class RetentionManager:
    """
    Dedupe-on-content plus bounded history over an item store.
    The store needs find_by_content, insert, update, delete and list_all.
    Pinned or categorized items are never evicted automatically.
    """
    def __init__(self, store, config: Optional[RetentionConfig] = None, clock: Callable[[], int] = utc_ts_ms):
        self.store = store
        self.config = config or RetentionConfig()
        self.clock = clock

    def ingest(self, item: ClipboardItem) -> IngestOutcome:
        try:
            existing = self.store.find_by_content(item.content)
            if existing is not None:
                merged = replace(
                    existing,
                    timestamp=item.timestamp,
                    source=item.source or existing.source,
                    type=item.type or existing.type,
                )
                self.store.update(merged)
                log.info("retention.bump", id=merged.id, type=merged.type, source=merged.source)
                return IngestOutcome("updated", merged)

            self.store.insert(item)
            log.info("retention.insert", id=item.id, type=item.type, source=item.source)
            evicted = self.evict()
            return IngestOutcome("inserted", item, tuple(evicted))
        # ValueError covers UnicodeEncodeError from content sqlite cannot encode (lone surrogates)
        except (sqlite3.Error, OSError, ValueError) as e:
            raise IngestionError(f"ingest failed: {e}") from e

    def evict(self) -> List[str]:
        """Count pass then age pass, both over evictable items only. Returns deleted ids."""
        items = self.store.list_all()
        evictable = sorted((i for i in items if not i.is_protected), key=lambda i: i.timestamp)
        doomed: List[str] = []
        seen: Set[str] = set()

        excess = len(items) - self.config.max_items
        if excess > 0:
            for item in evictable[:excess]:
                doomed.append(item.id)
                seen.add(item.id)

        cutoff = self.clock() - self.config.max_age_ms
        for item in evictable:
            if item.timestamp < cutoff and item.id not in seen:
                doomed.append(item.id)
                seen.add(item.id)

        for item_id in doomed:
            self.store.delete(item_id)
        if doomed:
            log.info("retention.evict", count=len(doomed), total_before=len(items))
        return doomed
