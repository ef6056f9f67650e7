from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional

from saas_monitor.models import AlertRecord, Endpoint, Incident
from saas_monitor.timeutils import parse_timestamp
from saas_monitor.vendors.base import VendorProfile

SOURCE = "Zabbix"

SEVERITY_TEXT: Mapping[int, str] = MappingProxyType(
    {0: "not classified", 1: "information", 2: "warning", 3: "average", 4: "high", 5: "disaster"}
)
# "average" and worse
MINIMUM_SEVERITY = 3


def severity_text(code: Any) -> str:
    try:
        return SEVERITY_TEXT.get(int(code), str(code))
    except (TypeError, ValueError):
        return str(code)


def severity_code(alert: AlertRecord) -> int:
    try:
        return int(alert.property("severity"))
    except ValueError:
        return -1


def create_endpoint(alert: AlertRecord) -> Endpoint:
    # host details come from a separate host.get call
    return Endpoint(id=alert.endpoint_id, type="?", hostname="?", tenant_id=alert.tenant_id)


def alert_from_raw(item: Mapping[str, Any], host_id: Optional[str] = None, tenant_id: Optional[str] = None) -> AlertRecord:
    """
    One problem.get result. The host comes from event.get(selectHosts); callers may
    pass it or merge the "hosts" list into the item.
    """
    if host_id is None:
        hosts = item.get("hosts") or []
        host_id = str(hosts[0]["hostid"]) if hosts else ""
    return AlertRecord(
        id=str(item["eventid"]),
        created=parse_timestamp(item.get("clock")),
        description=(item.get("name") or "").strip(),
        severity=severity_text(item.get("severity")),
        category=item.get("object"),
        product="zabbix",
        endpoint_id=host_id,
        endpoint_type=None,
        tenant_id=tenant_id,
        raw_data=dict(item),
        endpoint_factory=create_endpoint,
    )


def alerts_from_raw(items: Iterable[Mapping[str, Any]], tenant_id: Optional[str] = None) -> List[AlertRecord]:
    return [alert_from_raw(i, tenant_id=tenant_id) for i in items]


def is_average_or_worse(alert: AlertRecord) -> bool:
    return severity_code(alert) >= MINIMUM_SEVERITY


def label(incident: Incident) -> str:
    return str(incident.device)


PROFILE = VendorProfile(
    source=SOURCE,
    monitor_flag="monitor_connectivity",
    qualifies=is_average_or_worse,
    label=label,
    count_endpoints=True,
)
