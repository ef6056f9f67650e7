from datetime import datetime, timedelta, timezone

from saas_monitor.config.entry import ConfigEntry
from saas_monitor.config.store import MonitoringConfig
from saas_monitor.matcher import match_companies
from saas_monitor.ticketing import BackupTicket
from saas_monitor.watchdog import config_by_mail, scan_backup_tickets, stale_backups


def _config(tmp_path, *entries):
    config = MonitoringConfig(str(tmp_path / "monitoring.yml"))
    for e in entries:
        config.add_entry(e)
    return config


def test_exact_then_partial_match(tmp_path):
    config = _config(
        tmp_path,
        ConfigEntry(id="1", description="Acme B.V."),
        ConfigEntry(id="2", description="Beta Holding"),
    )

    result = match_companies(["ACME B.V.", "Beta", "Gamma"], config)

    assert result.matches["ACME B.V."].id == "1"
    assert result.matches["Beta"].id == "2"
    assert result.nonmatches == ["Gamma"]
    assert all(e.touched for e in config.entries)


def test_test_company_never_partially_matched(tmp_path):
    config = _config(tmp_path, ConfigEntry(id="1", description="Test Company"))

    result = match_companies(["test"], config)

    assert result.matches == {}
    assert result.nonmatches == ["test"]


def test_duplicate_partial_match_still_matches(tmp_path):
    config = _config(tmp_path, ConfigEntry(id="1", description="Acme"))

    result = match_companies(["Acme Noord", "Acme Zuid"], config)

    assert result.matches["Acme Noord"] is result.matches["Acme Zuid"]


def test_stale_backups(tmp_path):
    now = datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)
    fresh = ConfigEntry(id="1", description="Fresh", monitor_backup=True, last_backup=now - timedelta(hours=47))
    stale = ConfigEntry(id="2", description="Stale", monitor_backup=True, last_backup=now - timedelta(hours=49))
    never = ConfigEntry(id="3", description="Never", monitor_backup=True)
    ignored = ConfigEntry(id="4", description="Off", last_backup=now - timedelta(days=30))
    config = _config(tmp_path, fresh, stale, never, ignored)

    assert stale_backups(config, now) == [stale]
    assert never.last_backup == now


class FakeDesk:
    def __init__(self, tickets):
        self.tickets = tickets
        self.inbox = []
        self.closed = []

    def new_tickets(self):
        return self.tickets

    def move_to_inbox(self, ticket, note):
        self.inbox.append(ticket.number)

    def close_ticket(self, ticket, note):
        self.closed.append(ticket.number)


def _ticket(number, title, sender, created):
    return BackupTicket(id=number, number=number, title=title, created_by=sender, created_at=created)


def test_backup_tickets_update_last_backup(tmp_path):
    t0 = datetime(2026, 2, 10, 2, 0, tzinfo=timezone.utc)
    acme = ConfigEntry(id="1", description="Acme", monitor_backup=True, backup_domain="Acme.nl",
                       last_backup=t0 - timedelta(days=5))
    beta = ConfigEntry(id="2", description="Beta", monitor_backup=True, backup_domain="beta.nl")
    quiet = ConfigEntry(id="3", description="Quiet", backup_domain="quiet.nl")
    config = _config(tmp_path, acme, beta, quiet)
    desk = FakeDesk([
        _ticket("101", "[NAS01] Network backup - taak voltooid", "nas@ACME.nl", t0),
        _ticket("102", "[NAS01] Network backup - taak voltooid", "nas@acme.nl", t0 - timedelta(days=1)),
        _ticket("103", "[NAS02] Network backup - taak mislukt", "nas@beta.nl", t0),
        _ticket("104", "[NAS03] Network backup - gestart", "nas@beta.nl", t0),
        _ticket("105", "Invoice", "billing@acme.nl", t0),
        _ticket("106", "[NAS04] Network backup - taak voltooid", "nas@quiet.nl", t0),
    ])

    result = scan_backup_tickets(desk, config)

    assert result.succeeded == ["101", "102"]
    assert result.failed == ["103"]
    assert result.unknown == ["104"]
    assert result.unmatched == ["105"]
    assert result.ignored == ["106"]
    assert desk.closed == ["101", "102"]
    assert desk.inbox == ["103", "104", "105"]
    assert acme.last_backup == t0
    assert beta.last_backup == t0
    assert quiet.last_backup is None
    assert stale_backups(config, t0 + timedelta(hours=1)) == []


def test_config_by_mail_needs_an_address(tmp_path):
    config = _config(tmp_path, ConfigEntry(id="1", description="Acme", backup_domain="acme.nl"))

    assert config_by_mail(config, "ops@acme.nl").id == "1"
    assert config_by_mail(config, "acme.nl") is None
    assert config_by_mail(config, None) is None
