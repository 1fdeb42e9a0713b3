import pytest

from clipflow.core.storage.item_store import ItemStore
from clipflow.core.storage.models import ClipboardItem


@pytest.fixture
def store():
    s = ItemStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def make_item():
    """Factory for ClipboardItem with unique ids per call."""
    counter = {"n": 0}

    def _make_item(content="hello world", type="text", timestamp=1_000, source="System",
                   is_pinned=False, categories=None, id=None):
        counter["n"] += 1
        return ClipboardItem(
            id=id or f"clipboard-{timestamp}-{counter['n']:04d}",
            content=content,
            type=type,
            timestamp=timestamp,
            source=source,
            is_pinned=is_pinned,
            categories=set(categories or ()),
        )

    return _make_item


class FakeClock:
    """Manually advanced monotonic clock."""
    def __init__(self, t: float = 100.0):
        self.t = t

    def __call__(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


@pytest.fixture
def clock():
    return FakeClock()
