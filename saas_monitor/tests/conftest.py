from datetime import datetime, timezone

import pytest

from saas_monitor.models import AlertRecord


def _make_alert(
    alert_id,
    created="2026-02-08T09:00:00",
    *,
    endpoint="ep-1",
    alert_type="disk",
    severity="FAILED",
    tenant_id="t-1",
    raw=None,
):
    if isinstance(created, str):
        created = datetime.fromisoformat(created).replace(tzinfo=timezone.utc)
    raw_data = {"type": alert_type} if raw is None else raw
    return AlertRecord(
        id=alert_id,
        created=created,
        description=f"alert {alert_id}",
        severity=severity,
        category="backup",
        product="test",
        endpoint_id=endpoint,
        endpoint_type="Mailbox",
        tenant_id=tenant_id,
        raw_data=raw_data,
    )


@pytest.fixture
def make_alert():
    return _make_alert
