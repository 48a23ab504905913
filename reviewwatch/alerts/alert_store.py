"""
Alert Store
===========

Storage seam for the alert collection. AlertManager owns locking; stores
only keep insertion order and answer simple lookups. A deployment that
needs durability injects its own AlertStore subclass.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from .alert_models import Alert


class AlertStore(ABC):
    """Abstract alert collection."""

    @abstractmethod
    def add(self, alert: Alert) -> None:
        """Append an alert."""

    @abstractmethod
    def all(self) -> List[Alert]:
        """All alerts in creation order (a new list)."""

    @abstractmethod
    def get(self, alert_id: str) -> Optional[Alert]:
        """Alert by id, or None."""

    @abstractmethod
    def remove_where(self, predicate: Callable[[Alert], bool]) -> int:
        """Delete alerts matching predicate, returning how many were removed."""

    def update(self, alert: Alert) -> None:
        """Persist in-place changes to an alert. No-op for in-memory stores."""


class InMemoryAlertStore(AlertStore):
    """List-backed store living for the process lifetime."""

    def __init__(self):
        self._alerts: List[Alert] = []

    def add(self, alert: Alert) -> None:
        self._alerts.append(alert)

    def all(self) -> List[Alert]:
        return list(self._alerts)

    def get(self, alert_id: str) -> Optional[Alert]:
        for alert in self._alerts:
            if alert.id == alert_id:
                return alert
        return None

    def remove_where(self, predicate: Callable[[Alert], bool]) -> int:
        before = len(self._alerts)
        self._alerts = [a for a in self._alerts if not predicate(a)]
        return before - len(self._alerts)

    def __len__(self) -> int:
        return len(self._alerts)
