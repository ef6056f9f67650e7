from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from saas_monitor.models import AlertRecord, Endpoint, Incident
from saas_monitor.timeutils import parse_timestamp
from saas_monitor.vendors.base import VendorProfile, severity_is_not

SOURCE = "Integra365"
ENDPOINT_TYPE = "BackupJob"
SESSION_HINT = (
    "\n please check session under backup jobs for a detailed description "
    "(https://office365.integra-bcs.nl/backup/index)."
)


def create_endpoint(alert: AlertRecord) -> Endpoint:
    return Endpoint(
        id=alert.endpoint_id,
        type=ENDPOINT_TYPE,
        hostname=alert.property("jobName"),
        tenant_id=alert.tenant_id,
    )


def alert_from_raw(item: Mapping[str, Any]) -> AlertRecord:
    """One row of /Api/V1/BackupJobReporting; a job run is both alert and endpoint."""
    alert_id = f"{item['organization']}:{item['lastRun']}"
    return AlertRecord(
        id=alert_id,
        created=parse_timestamp(item.get("lastRun")),
        description=f"{item.get('jobName', '')}{SESSION_HINT}",
        severity=str(item.get("lastStatus")),
        category="Job",
        product=SOURCE,
        endpoint_id=alert_id,
        endpoint_type=ENDPOINT_TYPE,
        tenant_id=item.get("organization"),
        raw_data=dict(item),
        endpoint_factory=create_endpoint,
    )


def alerts_for_tenant(alerts: Iterable[AlertRecord], tenant_id: Optional[str]) -> List[AlertRecord]:
    return [a for a in alerts if tenant_id is None or a.tenant_id == tenant_id]


def label(incident: Incident) -> str:
    return incident.alert.property("jobName")


PROFILE = VendorProfile(
    source=SOURCE,
    monitor_flag="monitor_backup",
    collect=severity_is_not("Success", "Running"),
    qualifies=severity_is_not("Resolved"),
    label=label,
)
