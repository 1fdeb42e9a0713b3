from __future__ import annotations
from dataclasses import dataclass, field
from typing import Set


@dataclass
class ClipboardItem:
    id: str
    content: str
    type: str
    timestamp: int  # epoch ms, capture or last recopy
    source: str = "System"
    is_pinned: bool = False
    categories: Set[str] = field(default_factory=set)

    @property
    def is_protected(self) -> bool:
        """Pinned or categorized items are never auto-evicted."""
        return self.is_pinned or bool(self.categories)
