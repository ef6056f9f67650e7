from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from saas_monitor.models import AlertRecord, Incident
from saas_monitor.timeutils import parse_timestamp
from saas_monitor.vendors.base import VendorProfile, severity_is_not

SOURCE = "Skykick"


def alert_from_raw(item: Mapping[str, Any], tenant_id: Optional[str] = None) -> Optional[AlertRecord]:
    """One row of /Alerts/<customer id>; only Active alerts count."""
    if item.get("Status") != "Active":
        return None
    return AlertRecord(
        id=str(item["Id"]),
        created=parse_timestamp(item.get("PublishDate")),
        description=item.get("Description") or "",
        severity=str(item.get("AlertType")),
        category=item.get("Subject"),
        product=SOURCE,
        endpoint_id=str(item.get("BackupMailboxId")),
        endpoint_type="Mailbox",
        tenant_id=tenant_id,
        raw_data=dict(item),
    )


def alerts_from_raw(items: Iterable[Mapping[str, Any]], tenant_id: Optional[str] = None) -> List[AlertRecord]:
    return [a for a in (alert_from_raw(i, tenant_id) for i in items) if a is not None]


def label(incident: Incident) -> str:
    return str(incident.alert.endpoint_type or "")


PROFILE = VendorProfile(
    source=SOURCE,
    monitor_flag="monitor_backup",
    collect=severity_is_not("Information"),
    qualifies=severity_is_not("Resolved"),
    label=label,
)
