from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from saas_monitor.models import (
    AlertRecord,
    CustomerAlerts,
    Incident,
    IncidentFormatter,
    Tenant,
    default_detail,
    default_label,
)

AlertPredicate = Callable[[AlertRecord], bool]
TypeKey = Callable[[AlertRecord], str]


def always(_alert: AlertRecord) -> bool:
    return True


def type_property_key(alert: AlertRecord) -> str:
    return alert.property("type")


@dataclass(frozen=True)
class CorrelatorConfig:
    source: str
    # which alerts open/extend incidents (vendor severity policy)
    qualifies: AlertPredicate = always
    # grouping key within one endpoint
    type_key: TypeKey = type_property_key
    label: IncidentFormatter = default_label
    detail: IncidentFormatter = default_detail


class IncidentCorrelator:
    """
    Groups alerts per (endpoint, type key) into one Incident per collection cycle.

    The end time of an incident is taken from the last alert processed for its key,
    whatever its timestamp. Callers that want "most recent occurrence" semantics must
    feed alerts sorted by creation time.
    """

    def __init__(
        self,
        config: CorrelatorConfig,
        on_skipped: Optional[Callable[[AlertRecord], None]] = None,
    ):
        self.config = config
        self.on_skipped = on_skipped

    def add_incident(self, customer_alerts: CustomerAlerts, device: Any, alert: AlertRecord) -> Incident:
        alert_type = self.config.type_key(alert)
        device_alerts = customer_alerts.devices[alert.endpoint_id]

        incident = device_alerts.get(alert_type)
        if incident is not None:
            incident.end_time = alert.created
            return incident

        incident = Incident(
            source=self.config.source,
            device=device,
            start_time=alert.created,
            end_time=alert.created,
            alert=alert,
            label=self.config.label,
            detail=self.config.detail,
        )
        device_alerts[alert_type] = incident
        customer_alerts.source = incident.source
        return incident

    def correlate(self, tenant: Tenant, customer_alerts: Optional[CustomerAlerts] = None) -> CustomerAlerts:
        if customer_alerts is None:
            customer_alerts = CustomerAlerts(name=tenant.description, alerts=list(tenant.alerts), customer=tenant)

        for endpoint in tenant.endpoints.values():
            for alert in endpoint.alerts:
                if self.config.qualifies(alert):
                    self.add_incident(customer_alerts, endpoint, alert)
                    endpoint.incident_alerts.append(alert)
                elif self.on_skipped is not None:
                    self.on_skipped(alert)
        return customer_alerts
