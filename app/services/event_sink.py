"""
EventSink: bounded in-memory log of recently received events.
Diagnostic only; the pipelines never read from it.
"""

from collections import deque
from typing import Any, List, Optional


class EventSink:
    """Keeps the last `capacity` published events, newest last."""

    def __init__(self, capacity: int = 1):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._events = deque(maxlen=capacity)

    def publish(self, event: Any) -> None:
        self._events.append(event)

    def latest(self) -> Optional[Any]:
        return self._events[-1] if self._events else None

    def recent(self) -> List[Any]:
        return list(self._events)

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)
