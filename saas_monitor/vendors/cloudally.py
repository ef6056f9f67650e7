from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from saas_monitor.fields import get_path
from saas_monitor.models import AlertRecord, Incident
from saas_monitor.timeutils import parse_timestamp
from saas_monitor.vendors.base import VendorProfile, severity_is, severity_is_not

SOURCE = "CloudAlly"

# backup task states that are not a problem
UNWANTED = ("ACTIVE", "ARCHIVED")


def alert_from_raw(item: Mapping[str, Any]) -> Optional[AlertRecord]:
    """
    One /v1/partners/status row. Returns None when every backup status is fine.
    The tenant is the partner user (userId).
    """
    statuses = item.get("backupStatus") or []
    not_active = [s for s in statuses if s.get("status") not in UNWANTED]
    if not not_active:
        return None

    failed = " ".join(str(s.get("subSource")) for s in statuses if s.get("status") == "FAILED")
    attempt = item.get("lastBackupAttemptDate")
    return AlertRecord(
        id=f"{item.get('taskId')}:{attempt}",
        created=parse_timestamp(attempt),
        description=f"{get_path(item, 'entityName')}: {failed}",
        severity=str(not_active[0].get("status")),
        category=item.get("source"),
        product=item.get("source"),
        endpoint_id=str(item.get("taskId")),
        endpoint_type=item.get("entityName"),
        tenant_id=item.get("userId"),
        raw_data=dict(item),
    )


def alerts_from_raw(items: Iterable[Mapping[str, Any]]) -> List[AlertRecord]:
    return [a for a in (alert_from_raw(i) for i in items) if a is not None]


def label(incident: Incident) -> str:
    return str(incident.alert.endpoint_type or "")


PROFILE = VendorProfile(
    source=SOURCE,
    monitor_flag="monitor_backup",
    collect=severity_is("FAILED"),
    qualifies=severity_is_not("Resolved"),
    label=label,
)
