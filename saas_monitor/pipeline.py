from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence

import httpx

from saas_monitor.config.store import MonitoringConfig
from saas_monitor.dedup import filter_unreported
from saas_monitor.feeds.feed import FeedMonitor
from saas_monitor.models import CustomerAlerts
from saas_monitor.monitor import Monitor
from saas_monitor.sla.scheduler import SLAScheduler
from saas_monitor.ticketing import PRIO_HIGH, PRIO_NORMAL, Ticketer
from saas_monitor.vendors.base import VendorError

logger = logging.getLogger(__name__)

TITLE_PREFIX = "Monitoring: "


@dataclass
class RunResult:
    customers: int = 0
    already_reported: int = 0
    incident_tickets: int = 0
    notification_tickets: int = 0
    vulnerability_tickets: int = 0
    errors: List[str] = field(default_factory=list)


class MonitoringRun:
    """
    One batch: vendor monitors, then SLA notifications, then advisory feeds, each
    turned into tickets. The configuration is saved at the end.
    """

    def __init__(
        self,
        config: MonitoringConfig,
        ticketer: Ticketer,
        *,
        monitors: Sequence[Monitor] = (),
        scheduler: Optional[SLAScheduler] = None,
        feeds: Sequence[FeedMonitor] = (),
        compact: bool = False,
    ):
        self.config = config
        self.ticketer = ticketer
        self.monitors = list(monitors)
        self.scheduler = scheduler
        self.feeds = list(feeds)
        self.compact = compact
        self.result = RunResult()

    def _ticket(self, title: str, text: str, priority: str = PRIO_NORMAL, tag: Optional[str] = None) -> bool:
        try:
            self.ticketer.create_ticket(title, text, priority, tag)
        except httpx.HTTPError as e:
            logger.error("Ticket '%s' failed: %s", title, e)
            self.result.errors.append(f"ticket '{title}': {e}")
            return False
        return True

    def run_monitors(self) -> Dict[str, CustomerAlerts]:
        customer_alerts: Dict[str, CustomerAlerts] = {}
        for m in self.monitors:
            try:
                m.run(customer_alerts)
            except (VendorError, httpx.HTTPError) as e:
                logger.error("Error running %s monitor: %s", m.source, e)
                self.result.errors.append(f"{m.source}: {e}")
        return customer_alerts

    def report_incidents(self, customer_alerts: Dict[str, CustomerAlerts]) -> int:
        tickets = 0
        ordered = sorted(customer_alerts.values(), key=lambda ca: ca.name.upper())
        for ca in ordered:
            cfg = self.config.by_description(ca.name)
            if cfg is None or not cfg.create_ticket:
                continue
            self.result.customers += 1
            previous = list(cfg.reported_alerts or [])
            cfg.reported_alerts, count = filter_unreported(previous, ca)
            self.result.already_reported += count

            report = ca.report()
            if not report:
                continue
            if self._ticket(f"{TITLE_PREFIX}{ca.name}", report, PRIO_NORMAL, ca.source):
                tickets += 1
            else:
                cfg.reported_alerts = previous
        self.result.incident_tickets += tickets
        return tickets

    def report_notifications(self, today: Optional[date] = None) -> int:
        if self.scheduler is None:
            return 0
        tickets = 0
        for pn in self.scheduler.due_notifications(today):
            if not pn.config.create_ticket:
                continue
            if self._ticket(f"{TITLE_PREFIX}{pn.config.description}", pn.description, PRIO_NORMAL, "SLA"):
                tickets += 1
            else:
                self.scheduler.restore(pn)
        self.result.notification_tickets += tickets
        return tickets

    def report_vulnerabilities(self) -> int:
        tickets = 0
        for feed in self.feeds:
            try:
                vulnerabilities = feed.get_vulnerabilities()
            except (httpx.HTTPError, ET.ParseError) as e:
                logger.error("Error reading %s feed: %s", feed.source, e)
                self.result.errors.append(f"{feed.source}: {e}")
                continue
            for v in vulnerabilities:
                prio = PRIO_HIGH if v.high_priority else PRIO_NORMAL
                if self._ticket(f"{TITLE_PREFIX}{v.title}", v.description, prio, feed.source):
                    tickets += 1
        self.result.vulnerability_tickets += tickets
        return tickets

    def run(self, today: Optional[date] = None) -> RunResult:
        self.report_incidents(self.run_monitors())
        self.report_notifications(today)
        self.report_vulnerabilities()

        if self.compact:
            self.config.compact()
        self.config.save_config()
        logger.info(
            "Run done: %d incident, %d notification, %d vulnerability ticket(s), %d error(s)",
            self.result.incident_tickets,
            self.result.notification_tickets,
            self.result.vulnerability_tickets,
            len(self.result.errors),
        )
        return self.result
