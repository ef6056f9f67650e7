from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

from saas_monitor.models import CustomerAlerts

logger = logging.getLogger(__name__)


def _unique(ids: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for i in ids:
        if i in seen:
            continue
        seen.add(i)
        out.append(i)
    return out


def filter_unreported(reported_ids: Iterable[str], customer_alerts: CustomerAlerts) -> Tuple[List[str], int]:
    """
    Removes incidents that were reported in an earlier run from customer_alerts.

    Every live incident id is added to the returned list, whether or not it ends up in
    this run's report, so the caller's record marks it seen before the ticket exists.
    An incident counts as reported when its "{source}-{alert id}" or, for lists written
    by older versions, its bare alert id is in reported_ids.

    Returns (new reported list, number of incidents removed). customer_alerts is pruned
    in place and is what remains to be reported.
    """
    original = set(str(i) for i in reported_ids)
    kept: List[str] = list(str(i) for i in reported_ids)
    count = 0

    for device_id in list(customer_alerts.devices.keys()):
        incidents = customer_alerts.devices[device_id]
        kept.extend(i.incident_id for i in incidents.values())

        for alert_type in list(incidents.keys()):
            incident = incidents[alert_type]
            if incident.incident_id in original or str(incident.alert.id) in original:
                count += 1
                del incidents[alert_type]

        if not incidents:
            del customer_alerts.devices[device_id]

    if count > 0:
        logger.info("%s: %d incident(s) already reported", customer_alerts.name, count)
    return _unique(kept), count


def forget_resolved(reported_ids: List[str], source: str, alert_id: str) -> bool:
    """
    Drops "{source}-{alert_id}" from reported_ids in place once the vendor reports the
    alert as resolved. Returns True if it was present.
    """
    key = f"{source}-{alert_id}"
    if key not in reported_ids:
        return False
    while key in reported_ids:
        reported_ids.remove(key)
    return True
