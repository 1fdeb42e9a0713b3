from __future__ import annotations
import json
import sqlite3
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Union

from blake3 import blake3

from clipflow.app.config import DB_PATH
from clipflow.core.storage.models import ClipboardItem

SCHEMA = """
CREATE TABLE IF NOT EXISTS clipboard_items (
    id             TEXT PRIMARY KEY,
    content        TEXT NOT NULL,
    content_digest TEXT NOT NULL,
    type           TEXT NOT NULL,
    timestamp      INTEGER NOT NULL,
    source         TEXT NOT NULL DEFAULT 'System',
    is_pinned      INTEGER NOT NULL DEFAULT 0,
    categories     TEXT NOT NULL DEFAULT '[]'
);

CREATE INDEX IF NOT EXISTS idx_items_timestamp ON clipboard_items(timestamp DESC);
CREATE INDEX IF NOT EXISTS idx_items_digest ON clipboard_items(content_digest);
CREATE INDEX IF NOT EXISTS idx_items_type ON clipboard_items(type);
"""

def content_digest(content: str) -> str:
    return blake3(content.encode("utf-8", errors="surrogatepass")).hexdigest()

class ItemStore:
    """
    SQLite-backed clipboard history.
    One connection shared by the capture thread and callers, serialized by a lock.
    Content lookups go through a blake3 digest index and are confirmed by
    comparing the full content.
    """
    def __init__(self, db_path: Union[str, Path, None] = None):
        self._db_path = str(db_path) if db_path else str(DB_PATH)
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        if self._db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(SCHEMA)
        self._conn.commit()

    # --- storage contract used by the retention manager ---

    def find_by_content(self, content: str) -> Optional[ClipboardItem]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT * FROM clipboard_items WHERE content_digest = ?",
                (content_digest(content),),
            ).fetchall()
        for row in rows:
            if row["content"] == content:
                return self._row_to_item(row)
        return None

    def insert(self, item: ClipboardItem) -> None:
        with self._lock:
            self._conn.execute(
                """INSERT INTO clipboard_items
                   (id, content, content_digest, type, timestamp, source, is_pinned, categories)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    item.id,
                    item.content,
                    content_digest(item.content),
                    item.type,
                    item.timestamp,
                    item.source,
                    int(item.is_pinned),
                    self._dump_categories(item.categories),
                ),
            )
            self._conn.commit()

    def update(self, item: ClipboardItem) -> None:
        with self._lock:
            self._conn.execute(
                """UPDATE clipboard_items
                   SET content = ?, content_digest = ?, type = ?, timestamp = ?,
                       source = ?, is_pinned = ?, categories = ?
                   WHERE id = ?""",
                (
                    item.content,
                    content_digest(item.content),
                    item.type,
                    item.timestamp,
                    item.source,
                    int(item.is_pinned),
                    self._dump_categories(item.categories),
                    item.id,
                ),
            )
            self._conn.commit()

    def delete(self, item_id: str) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM clipboard_items WHERE id = ?", (item_id,))
            self._conn.commit()

    def list_all(self, limit: Optional[int] = None) -> List[ClipboardItem]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT * FROM clipboard_items ORDER BY timestamp DESC LIMIT ?",
                (-1 if limit is None else limit,),
            ).fetchall()
        return [self._row_to_item(r) for r in rows]

    # --- history browsing ---

    def get(self, item_id: str) -> Optional[ClipboardItem]:
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM clipboard_items WHERE id = ?", (item_id,)
            ).fetchone()
        return self._row_to_item(row) if row else None

    def search(self, query: str, limit: int = 500) -> List[ClipboardItem]:
        """Case-insensitive substring match over content, type, source and categories."""
        q = query.strip().lower()
        if not q:
            return self.list_all(limit)
        like = "%" + q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"
        with self._lock:
            rows = self._conn.execute(
                r"""SELECT * FROM clipboard_items
                   WHERE lower(content) LIKE ? ESCAPE '\'
                      OR lower(type) LIKE ? ESCAPE '\'
                      OR lower(source) LIKE ? ESCAPE '\'
                      OR lower(categories) LIKE ? ESCAPE '\'
                   ORDER BY timestamp DESC
                   LIMIT ?""",
                (like, like, like, like, limit),
            ).fetchall()
        return [self._row_to_item(r) for r in rows]

    def list_by_type(self, item_type: str, limit: Optional[int] = None) -> List[ClipboardItem]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT * FROM clipboard_items WHERE type = ? ORDER BY timestamp DESC LIMIT ?",
                (item_type, -1 if limit is None else limit),
            ).fetchall()
        return [self._row_to_item(r) for r in rows]

    def unique_types(self) -> List[str]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT DISTINCT type FROM clipboard_items ORDER BY type"
            ).fetchall()
        return [r["type"] for r in rows]

    def toggle_pin(self, item_id: str) -> bool:
        with self._lock:
            item = self.get(item_id)
            if not item:
                return False
            item.is_pinned = not item.is_pinned
            self.update(item)
            return item.is_pinned

    def set_categories(self, item_id: str, categories: Iterable[str]) -> bool:
        with self._lock:
            item = self.get(item_id)
            if not item:
                return False
            item.categories = {c for c in categories if c}
            self.update(item)
            return True

    def add_category(self, item_id: str, label: str) -> bool:
        with self._lock:
            item = self.get(item_id)
            if not item:
                return False
            return self.set_categories(item_id, item.categories | {label})

    def remove_category(self, item_id: str, label: str) -> bool:
        with self._lock:
            item = self.get(item_id)
            if not item:
                return False
            return self.set_categories(item_id, item.categories - {label})

    def clear_all(self) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM clipboard_items")
            self._conn.commit()

    def count(self) -> int:
        with self._lock:
            row = self._conn.execute("SELECT COUNT(*) AS cnt FROM clipboard_items").fetchone()
        return row["cnt"]

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @staticmethod
    def _dump_categories(categories: Iterable[str]) -> str:
        return json.dumps(sorted(categories), ensure_ascii=False)

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> ClipboardItem:
        return ClipboardItem(
            id=row["id"],
            content=row["content"],
            type=row["type"],
            timestamp=row["timestamp"],
            source=row["source"],
            is_pinned=bool(row["is_pinned"]),
            categories=set(json.loads(row["categories"] or "[]")),
        )
