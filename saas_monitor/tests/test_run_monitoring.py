from datetime import date, datetime, timezone

from saas_monitor.config.settings import MonitorSettings
from saas_monitor.config.store import MonitoringConfig
from saas_monitor.models import Tenant
from saas_monitor.run_monitoring import build_monitors, main
from saas_monitor.ticketing import BackupTicket, InMemoryTicketer

CONFIG_YAML = """
- id: 1
  description: Acme
  source: [Veeam]
  monitor_backup: true
  create_ticket: true
"""


def _settings(tmp_path):
    path = tmp_path / "monitoring.yml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return MonitorSettings(
        config_path=str(path),
        report_path=str(tmp_path / "configuration.md"),
        cache_dir=str(tmp_path),
        tenant_delay=0.0,
        debug=True,
    )


class EmptyClient:
    def list_tenants(self):
        return [Tenant(id="1", description="Acme")]

    def list_alerts(self, tenant):
        return []


def test_add_notification(tmp_path):
    settings = _settings(tmp_path)

    assert main(["-n", "acme, backup check, M, 2026-01-01"], settings=settings) == 0

    cfg = MonitoringConfig(settings.config_path).by_description("Acme")
    assert cfg.notifications[0].task == "backup check"
    assert cfg.notifications[0].triggered == date(2026, 1, 1)


def test_bad_notification_arguments(tmp_path):
    settings = _settings(tmp_path)

    assert main(["-n", "acme,task"], settings=settings) == 2
    assert main(["-n", "nobody,task,M"], settings=settings) == 1
    assert main(["-n", "acme,task,Z"], settings=settings) == 1


def test_sla_report(tmp_path):
    settings = _settings(tmp_path)

    assert main(["--sla"], settings=settings) == 0
    with open(settings.report_path, "r", encoding="utf-8") as f:
        assert f.read().splitlines()[2] == "|Acme||on||on||||||x|||"


def test_run_without_feeds(tmp_path):
    settings = _settings(tmp_path)
    ticketer = InMemoryTicketer()

    rc = main(["--no-feeds"], settings=settings, clients={"Veeam": EmptyClient()}, ticketer=ticketer)

    assert rc == 0
    assert ticketer.tickets == []
    assert MonitoringConfig(settings.config_path).by_id(1).source == ["Veeam"]


def test_unknown_vendor_client_is_ignored(tmp_path):
    settings = _settings(tmp_path)
    config = MonitoringConfig(settings.config_path)

    monitors = build_monitors(config, settings, {"Veeam": EmptyClient(), "Nope": EmptyClient()})

    assert [m.source for m in monitors] == ["Veeam"]


class OneTicketDesk:
    def __init__(self):
        self.closed = []

    def new_tickets(self):
        created = datetime(2026, 2, 8, 2, 0, tzinfo=timezone.utc)
        return [BackupTicket(7, "7", "[NAS] Network backup - voltooid", "nas@acme.nl", created)]

    def move_to_inbox(self, ticket, note):
        raise AssertionError(note)

    def close_ticket(self, ticket, note):
        self.closed.append(ticket.number)


def test_ticket_scan_updates_last_backup(tmp_path):
    settings = _settings(tmp_path)
    path = tmp_path / "monitoring.yml"
    path.write_text(CONFIG_YAML + "  backup_domain: acme.nl\n", encoding="utf-8")
    desk = OneTicketDesk()

    assert main(["--ticket-scan"], settings=settings, desk=desk) == 0

    assert desk.closed == ["7"]
    cfg = MonitoringConfig(settings.config_path).by_id(1)
    assert cfg.last_backup == datetime(2026, 2, 8, 2, 0, tzinfo=timezone.utc)


def test_match_companies(tmp_path, capsys):
    settings = _settings(tmp_path)
    companies = tmp_path / "companies.yml"
    companies.write_text("- ACME\n- Acme Noord\n- Gamma\n", encoding="utf-8")

    assert main(["--match-companies", str(companies)], settings=settings) == 0

    out = capsys.readouterr().out.splitlines()
    assert out == ["ACME: Acme", "Acme Noord: Acme", "* no match: Gamma"]
