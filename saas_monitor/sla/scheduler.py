from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Mapping, Optional, Protocol, Sequence

from saas_monitor.sla.notification import INTERVALS, ONCE, Interval, Notification
from saas_monitor.timeutils import parse_date

logger = logging.getLogger(__name__)


class NotificationConfig(Protocol):
    """What the scheduler needs from the configuration store."""

    @property
    def entries(self) -> Sequence[Any]:
        ...

    def by_description(self, description: str) -> Any:
        ...

    def save_config(self) -> None:
        ...


@dataclass
class PeriodicalNotification:
    config: Any
    notification: Notification
    interval: Interval
    description: str
    # triggered date before this firing
    previous: Optional[date] = None


class SLAScheduler:
    def __init__(self, config: NotificationConfig, intervals: Mapping[str, Interval] = INTERVALS):
        self.config = config
        self.intervals = intervals

    def add_notification(
        self,
        customer: str,
        task: str,
        interval: str,
        date_string: Optional[str] = None,
    ) -> Optional[Notification]:
        """
        Adds a notification to the customer's config entry and saves the configuration.
        Unknown customer, interval code or date are logged and leave the config untouched.
        """
        cfg = self.config.by_description(customer)
        if cfg is None:
            logger.error("customer '%s' not found in configuration", customer)
            return None
        if interval not in self.intervals:
            logger.error("'%s' is not a valid interval, please use %s", interval, ", ".join(self.intervals))
            return None

        triggered = None
        if date_string:
            try:
                triggered = parse_date(date_string)
            except ValueError:
                logger.error("'%s' is not a valid date", date_string)
                return None

        n = Notification(task=task, interval=interval, triggered=triggered)
        cfg.notifications.append(n)
        cfg.create_ticket = True
        logger.info("Notification added: %s", n)
        self.config.save_config()
        return n

    def due_notifications(self, today: Optional[date] = None) -> List[PeriodicalNotification]:
        """
        Fires every due notification: recurring ones get triggered=today, one-shot
        ones are removed from their entry afterwards.
        """
        today = today or date.today()
        result: List[PeriodicalNotification] = []

        for cfg in self.config.entries:
            if cfg.notifications is None:
                cfg.notifications = []
            fired_once: List[Notification] = []

            for n in cfg.notifications:
                interval = self.intervals.get(n.interval)
                if interval is None:
                    logger.warning("%s: skipped %s", cfg.description, n)
                    continue
                if not interval.is_due(n.triggered, today):
                    continue

                result.append(PeriodicalNotification(cfg, n, interval, str(n), n.triggered))
                n.triggered = today
                if interval.code == ONCE.code:
                    fired_once.append(n)

            if fired_once:
                cfg.notifications = [n for n in cfg.notifications if not any(n is f for f in fired_once)]
        return result

    def restore(self, pn: PeriodicalNotification) -> None:
        """Undoes one firing of due_notifications(): the notification is due again."""
        pn.notification.triggered = pn.previous
        notifications = pn.config.notifications
        if not any(n is pn.notification for n in notifications):
            notifications.append(pn.notification)
        logger.info("%s: notification restored %s", pn.config.description, pn.notification)

    def report_lines(self) -> List[str]:
        lines: List[str] = []
        for cfg in self.config.entries:
            if not cfg.notifications:
                continue
            lines.append(cfg.description)
            lines.extend(f"- {n}" for n in cfg.notifications)
        return lines


