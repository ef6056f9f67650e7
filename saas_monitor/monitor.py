from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional

import httpx

from saas_monitor.config.store import MonitoringConfig
from saas_monitor.correlator import IncidentCorrelator
from saas_monitor.dedup import forget_resolved
from saas_monitor.models import AlertRecord, CustomerAlerts, Tenant
from saas_monitor.registry import attach_alerts, clear_all
from saas_monitor.vendors.base import VendorClient, VendorError, VendorProfile

logger = logging.getLogger(__name__)

Pace = Callable[[], None]


def sleep_pace(delay: float) -> Pace:
    def pace() -> None:
        time.sleep(delay)

    return pace


def no_pace() -> None:
    return None


class Monitor:
    """
    One vendor portal: tenant reconciliation, alert collection and incident correlation.

    Tenants are processed one at a time; pace() runs between two alert requests.
    A failing tenant is logged and left out of this cycle.
    """

    def __init__(
        self,
        client: VendorClient,
        profile: VendorProfile,
        config: MonitoringConfig,
        *,
        pace: Pace = no_pace,
    ):
        self.client = client
        self.profile = profile
        self.config = config
        self.pace = pace
        self.tenants: List[Tenant] = []
        self.failed: List[Tenant] = []

    @property
    def source(self) -> str:
        return self.profile.source

    def collect(self) -> List[Tenant]:
        """Tenants whose alerts were fetched and attached to their endpoints."""
        self.tenants = list(self.client.list_tenants())
        self.config.load_config(self.source, self.tenants)
        self.failed = []

        active: List[Tenant] = []
        first = True
        for tenant in self.tenants:
            cfg = self.config.by_description(tenant.description)
            if cfg is None or not self.profile.monitors(cfg):
                continue

            if not first:
                self.pace()
            first = False

            clear_all(tenant)
            try:
                alerts = list(self.client.list_alerts(tenant))
            except (VendorError, httpx.HTTPError) as e:
                self.failed.append(tenant)
                if tenant.trial:
                    logger.info("%s: trial customer skipped %s", self.source, tenant.description)
                else:
                    logger.error("%s: error with %s: %s", self.source, tenant.description, e)
                continue

            tenant.alerts = alerts
            attached = attach_alerts(tenant, alerts, keep=self.profile.collect)
            logger.debug("%s: %s %d/%d alerts attached", self.source, tenant.description, attached, len(alerts))
            active.append(tenant)
        return active

    def correlate(self, tenant: Tenant) -> Optional[CustomerAlerts]:
        cfg = self.config.by_description(tenant.description)
        if cfg is None or not self.profile.reports(cfg):
            return None
        if self.profile.count_endpoints and tenant.endpoints:
            cfg.endpoints = len(tenant.endpoints)

        on_skipped = None
        if self.profile.forget_resolved:
            def on_skipped(alert: AlertRecord) -> None:
                if forget_resolved(cfg.reported_alerts, self.source, alert.id):
                    logger.info("%s: remove resolved alert %s-%s", tenant.description, self.source, alert.id)

        correlator = IncidentCorrelator(self.profile.correlator_config(), on_skipped=on_skipped)
        return correlator.correlate(tenant)

    def run(self, customer_alerts: Optional[Dict[str, CustomerAlerts]] = None) -> Dict[str, CustomerAlerts]:
        """Adds this vendor's CustomerAlerts, keyed "<source>:<tenant id>"."""
        result = customer_alerts if customer_alerts is not None else {}
        for tenant in self.collect():
            ca = self.correlate(tenant)
            if ca is None:
                continue
            result[f"{self.source}:{tenant.id}"] = ca
            if ca.devices:
                logger.info("%s: %s %d incident(s)", self.source, tenant.description, len(ca.incidents()))
        return result
