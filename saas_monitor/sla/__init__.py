from .notification import (
    BIMONTHLY,
    CODES,
    HALF_YEARLY,
    INTERVALS,
    MONTHLY,
    ONCE,
    QUARTERLY,
    WEEKLY,
    YEARLY,
    Interval,
    Notification,
)
from .scheduler import PeriodicalNotification, SLAScheduler

__all__ = [
    "BIMONTHLY",
    "CODES",
    "HALF_YEARLY",
    "INTERVALS",
    "MONTHLY",
    "ONCE",
    "QUARTERLY",
    "WEEKLY",
    "YEARLY",
    "Interval",
    "Notification",
    "PeriodicalNotification",
    "SLAScheduler",
]
