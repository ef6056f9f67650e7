from __future__ import annotations

from typing import Any, Iterable, List, Mapping

from saas_monitor.models import AlertRecord, Incident
from saas_monitor.timeutils import parse_timestamp
from saas_monitor.vendors.base import VendorProfile, severity_is_not

SOURCE = "Veeam"
RESOLVED = "Resolved"


def alert_from_raw(item: Mapping[str, Any]) -> AlertRecord:
    """One active alarm of /api/v3/alarms/active."""
    activation = item.get("lastActivation") or {}
    obj = item.get("object") or {}
    return AlertRecord(
        id=str(item["instanceUid"]),
        created=parse_timestamp(activation.get("time")),
        description=(activation.get("message") or "").strip(),
        severity=str(activation.get("status")),
        category=obj.get("type"),
        product="veeam",
        endpoint_id=str(obj.get("objectUid")),
        endpoint_type=obj.get("type"),
        tenant_id=obj.get("organizationUid"),
        raw_data=dict(item),
    )


def alerts_for_tenant(alerts: Iterable[AlertRecord], tenant_id: str) -> List[AlertRecord]:
    """Alarms are listed for all organizations at once."""
    return [a for a in alerts if a.property("object.organizationUid") == tenant_id]


def label(incident: Incident) -> str:
    a = incident.alert
    return f"{a.property('object.type')} {a.property('object.computerName')} {a.property('object.objectName')}"


PROFILE = VendorProfile(
    source=SOURCE,
    monitor_flag="monitor_backup",
    qualifies=severity_is_not(RESOLVED),
    label=label,
    forget_resolved=True,
)
