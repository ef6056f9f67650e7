from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class Interval:
    description: str
    days: int

    @property
    def code(self) -> str:
        return self.description[0]

    def is_due(self, triggered: Optional[date], today: Optional[date] = None) -> bool:
        if triggered is None:
            return True
        today = today or date.today()
        return (today - triggered).days >= self.days


ONCE = Interval("Once", 0)
WEEKLY = Interval("Weekly", 7)
MONTHLY = Interval("Monthly", 30)
BIMONTHLY = Interval("Bi-Monthly", 61)
QUARTERLY = Interval("Quarterly", 91)
HALF_YEARLY = Interval("Halfyearly", 182)
YEARLY = Interval("Yearly", 365)

INTERVALS: Mapping[str, Interval] = MappingProxyType(
    {i.code: i for i in (ONCE, WEEKLY, MONTHLY, BIMONTHLY, QUARTERLY, HALF_YEARLY, YEARLY)}
)
CODES = tuple(INTERVALS.keys())


@dataclass
class Notification:
    task: str
    interval: str
    triggered: Optional[date] = None

    def __str__(self) -> str:
        i = INTERVALS.get(self.interval)
        if i is None:
            return f"Notification {self.task}, invalid interval='{self.interval}', triggered={self.triggered}"
        time_desc = "after date" if i == ONCE else "last time triggered"
        return f"Task '{self.task}' to be executed {i.description}; {time_desc} {self.triggered}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task": self.task,
            "interval": self.interval,
            "triggered": self.triggered.isoformat() if self.triggered else None,
        }

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "Notification":
        triggered = d.get("triggered")
        if isinstance(triggered, str) and triggered.strip():
            triggered = date.fromisoformat(triggered.strip()[:10])
        elif isinstance(triggered, datetime):
            triggered = triggered.date()
        elif not isinstance(triggered, date):
            triggered = None
        return Notification(task=str(d.get("task", "")), interval=str(d.get("interval", "")), triggered=triggered)
