"""
In-memory alert history - bounded, newest first.

No persistence: history is lost on process restart.
"""
from collections import deque
from typing import Iterable

from rain_monitor.domain.models import Alert


class AlertHistory:
    def __init__(self, limit: int = 100):
        if limit < 1:
            raise ValueError("alert history limit must be at least 1")
        self.limit = limit
        self._alerts: deque[Alert] = deque(maxlen=limit)

    def add(self, alert: Alert) -> None:
        """Prepend an alert, evicting the oldest once the bound is exceeded."""
        self._alerts.appendleft(alert)

    def extend(self, alerts: Iterable[Alert]) -> None:
        for alert in alerts:
            self.add(alert)

    def recent(self, n: int) -> list[Alert]:
        if n <= 0:
            return []
        return list(self._alerts)[:n]

    def all(self) -> list[Alert]:
        return list(self._alerts)

    def clear(self) -> None:
        self._alerts.clear()

    def __len__(self) -> int:
        return len(self._alerts)
