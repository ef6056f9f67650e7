from __future__ import annotations

from typing import Callable, Iterable, Optional

from saas_monitor.models import AlertRecord, Endpoint, Tenant


def resolve_endpoint(tenant: Tenant, alert: AlertRecord) -> Endpoint:
    """
    Endpoint for alert.endpoint_id, synthesized from the alert when the vendor
    endpoint directory did not list it.
    """
    endpoint = tenant.endpoints.get(alert.endpoint_id)
    if endpoint is None:
        endpoint = alert.create_endpoint()
        tenant.endpoints[alert.endpoint_id] = endpoint
    return endpoint


def clear_all(tenant: Tenant) -> None:
    for endpoint in tenant.endpoints.values():
        endpoint.clear_alerts()


def attach_alerts(
    tenant: Tenant,
    alerts: Iterable[AlertRecord],
    keep: Optional[Callable[[AlertRecord], bool]] = None,
) -> int:
    """Append each kept alert to its (possibly new) endpoint. Returns number attached."""
    attached = 0
    for alert in alerts:
        if keep is not None and not keep(alert):
            continue
        resolve_endpoint(tenant, alert).alerts.append(alert)
        attached += 1
    return attached
