from saas_monitor.correlator import CorrelatorConfig, IncidentCorrelator
from saas_monitor.models import Tenant
from saas_monitor.registry import attach_alerts


def _tenant_with(alerts):
    tenant = Tenant(id="t-1", description="Acme")
    attach_alerts(tenant, alerts)
    return tenant


def test_same_endpoint_and_type_merge_into_one_incident(make_alert):
    a1 = make_alert("1", "2026-02-08T09:00:00")
    a2 = make_alert("2", "2026-02-08T09:30:00")
    a3 = make_alert("3", "2026-02-08T09:45:00", alert_type="cpu")

    ca = IncidentCorrelator(CorrelatorConfig(source="SRC")).correlate(_tenant_with([a1, a2, a3]))

    incidents = ca.devices["ep-1"]
    assert set(incidents) == {"disk", "cpu"}
    disk = incidents["disk"]
    assert disk.start_time == a1.created
    assert disk.end_time == a2.created
    assert disk.alert is a1
    assert disk.incident_id == "SRC-1"
    assert incidents["cpu"].start_time == incidents["cpu"].end_time == a3.created
    assert ca.source == "SRC"


def test_last_processed_alert_sets_end_time(make_alert):
    later = make_alert("1", "2026-02-08T09:30:00")
    earlier = make_alert("2", "2026-02-08T09:00:00")

    ca = IncidentCorrelator(CorrelatorConfig(source="SRC")).correlate(_tenant_with([later, earlier]))

    incident = ca.devices["ep-1"]["disk"]
    assert incident.start_time == later.created
    assert incident.end_time == earlier.created


def test_non_qualifying_alerts_go_to_skip_hook(make_alert):
    ok = make_alert("1")
    resolved = make_alert("2", severity="Resolved", endpoint="ep-2")
    skipped = []
    config = CorrelatorConfig(source="SRC", qualifies=lambda a: a.severity != "Resolved")
    tenant = _tenant_with([ok, resolved])

    ca = IncidentCorrelator(config, on_skipped=skipped.append).correlate(tenant)

    assert list(ca.devices) == ["ep-1"]
    assert skipped == [resolved]
    assert tenant.endpoints["ep-1"].incident_alerts == [ok]
    assert tenant.endpoints["ep-2"].incident_alerts == []


def test_custom_type_key_groups_per_endpoint(make_alert):
    alerts = [make_alert("1", alert_type="a"), make_alert("2", "2026-02-08T10:00:00", alert_type="b")]
    config = CorrelatorConfig(source="SRC", type_key=lambda a: "")

    ca = IncidentCorrelator(config).correlate(_tenant_with(alerts))

    assert len(ca.incidents()) == 1
    assert ca.incidents()[0].end_time == alerts[1].created


def test_report_renders_label_and_detail(make_alert):
    a1 = make_alert("1", "2026-02-08T09:00:00")
    a2 = make_alert("2", "2026-02-08T09:30:00")
    config = CorrelatorConfig(source="SRC", label=lambda i: f"job {i.alert.endpoint_id}")

    ca = IncidentCorrelator(config).correlate(_tenant_with([a1, a2]))
    report = ca.report()

    assert report.startswith("Klant: Acme\n- job ep-1 (ep-1)\n")
    assert "2026-02-08 09:00:00+00:00 - 2026-02-08 09:30:00+00:00: SRC FAILED alert" in report
    assert "Description: alert 1" in report
