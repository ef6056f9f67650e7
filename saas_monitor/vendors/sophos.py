from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from saas_monitor.fields import get_path
from saas_monitor.models import AlertRecord, Incident
from saas_monitor.timeutils import parse_timestamp
from saas_monitor.vendors.base import VendorProfile

SOURCE = "Sophos"
CONNECTIVITY = "connectivity"


def alert_from_raw(item: Mapping[str, Any], tenant_id: Optional[str] = None) -> AlertRecord:
    """One item of /common/v1/alerts."""
    agent = item.get("managedAgent") or {}
    return AlertRecord(
        id=str(item["id"]),
        created=parse_timestamp(item.get("raisedAt")),
        description=item.get("description") or "",
        severity=str(item.get("severity")),
        category=item.get("category"),
        product=item.get("product"),
        endpoint_id=str(agent.get("id")),
        endpoint_type=agent.get("type"),
        tenant_id=tenant_id or get_path(item, "tenant.id") or None,
        raw_data=dict(item),
    )


def alerts_from_raw(items: Iterable[Mapping[str, Any]], tenant_id: Optional[str] = None) -> List[AlertRecord]:
    return [alert_from_raw(i, tenant_id) for i in items]


def not_connectivity(alert: AlertRecord) -> bool:
    return alert.category != CONNECTIVITY


def label(incident: Incident) -> str:
    a = incident.alert
    return f"{a.property('managedAgent.type')} {a.property('managedAgent.name')}"


def detail(incident: Incident) -> str:
    a = incident.alert
    text = (
        f"  {incident.time_to_s()}: {incident.source} {a.severity} alert\n"
        f"   Description: {a.description}\n"
        f"   Endpoint:    {a.endpoint_type}\n"
    )
    person = a.property("person.name")
    if person:
        text += f"   User:        {person}\n"
    return text + f"   Resolution:  {a.property('allowedActions')}"


PROFILE = VendorProfile(
    source=SOURCE,
    monitor_flag="monitoring",
    report_flag="monitor_endpoints",
    qualifies=not_connectivity,
    label=label,
    detail=detail,
    count_endpoints=True,
)
