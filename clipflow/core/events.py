from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Tuple, Dict, Any
import time

# --- timing helpers ---
def utc_ts_ms() -> int:
    return int(time.time() * 1000)

def mono_ts() -> float:
    # Monotonic high-res timestamp (immune to system clock changes)
    return time.perf_counter()

class EventType(Enum):
    """Top-level tag for routing on the capture queue."""
    CAPTURE = auto()
    FOCUS = auto()

@dataclass(frozen=True)
class BaseEvent:
    """Common shape for all events."""
    etype: EventType = field(init=False)         # auto-set by subclasses
    t_mono: float = field(default_factory=mono_ts)

    def to_record(self) -> Dict[str, Any]:
        return {"etype": self.etype.name}

@dataclass(frozen=True)
class CaptureEvent(BaseEvent):
    """
    A genuine clipboard change, classified and attributed.
    to_record() is the contract handed to history consumers.
    """
    content: str = ""
    timestamp: int = field(default_factory=utc_ts_ms)   # epoch ms
    content_type: str = "text"
    source: str = "System"
    confidence: int = 0
    reasoning: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "etype", EventType.CAPTURE)

    def to_record(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "timestamp": self.timestamp,
            "type": self.content_type,
            "source": self.source,
            "confidence": self.confidence,
            "reasoning": list(self.reasoning),
        }

@dataclass(frozen=True)
class FocusEvent(BaseEvent):
    """Foreground app transition. Emitted only when the tracked app changes."""
    app_name: str = "System"
    previous: Optional[str] = None
    dwell_prev_s: Optional[float] = None  # how long the previous app had focus

    def __post_init__(self):
        object.__setattr__(self, "etype", EventType.FOCUS)

    def to_record(self) -> Dict[str, Any]:
        base = super().to_record()
        base.update({
            "app_name": self.app_name,
            "previous": self.previous,
            "dwell_prev_s": self.dwell_prev_s,
        })
        return base
