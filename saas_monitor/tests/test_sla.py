from datetime import date, timedelta

from saas_monitor.config.entry import ConfigEntry
from saas_monitor.sla import INTERVALS, ONCE, QUARTERLY, WEEKLY, Notification, SLAScheduler


class FakeConfig:
    def __init__(self, entries):
        self._entries = entries
        self.saved = 0

    @property
    def entries(self):
        return self._entries

    def by_description(self, description):
        return next((e for e in self._entries if e.description.upper() == description.upper()), None)

    def save_config(self):
        self.saved += 1


TODAY = date(2026, 3, 2)


def test_interval_table():
    assert {code: i.days for code, i in INTERVALS.items()} == {
        "O": 0, "W": 7, "M": 30, "B": 61, "Q": 91, "H": 182, "Y": 365,
    }


def test_weekly_and_quarterly_due():
    assert WEEKLY.is_due(TODAY, TODAY) is False
    assert WEEKLY.is_due(TODAY - timedelta(days=6), TODAY) is False
    assert WEEKLY.is_due(TODAY - timedelta(days=7), TODAY) is True
    assert QUARTERLY.is_due(TODAY - timedelta(days=90), TODAY) is False
    assert QUARTERLY.is_due(TODAY - timedelta(days=91), TODAY) is True
    assert WEEKLY.is_due(None, TODAY) is True


def test_once_fires_exactly_once():
    entry = ConfigEntry(id="1", description="Acme", notifications=[Notification("renew license", "O")])
    scheduler = SLAScheduler(FakeConfig([entry]))

    first = scheduler.due_notifications(TODAY)
    second = scheduler.due_notifications(TODAY)

    assert len(first) == 1
    assert first[0].interval == ONCE
    assert first[0].description == "Task 'renew license' to be executed Once; after date None"
    assert entry.notifications == []
    assert second == []


def test_recurring_notification_is_rescheduled():
    n = Notification("check backups", "W", TODAY - timedelta(days=8))
    entry = ConfigEntry(id="1", description="Acme", notifications=[n])
    scheduler = SLAScheduler(FakeConfig([entry]))

    fired = scheduler.due_notifications(TODAY)

    assert [p.notification for p in fired] == [n]
    # rendered with the previous trigger date
    assert fired[0].description.endswith(str(TODAY - timedelta(days=8)))
    assert n.triggered == TODAY
    assert entry.notifications == [n]
    assert scheduler.due_notifications(TODAY + timedelta(days=6)) == []
    assert len(scheduler.due_notifications(TODAY + timedelta(days=7))) == 1


def test_unknown_interval_is_skipped_and_kept():
    n = Notification("odd", "X", None)
    entry = ConfigEntry(id="1", description="Acme", notifications=[n])

    assert SLAScheduler(FakeConfig([entry])).due_notifications(TODAY) == []
    assert entry.notifications == [n]
    assert str(n) == "Notification odd, invalid interval='X', triggered=None"


def test_add_notification_success_sets_ticket_flag_and_saves():
    entry = ConfigEntry(id="1", description="Acme B.V.")
    config = FakeConfig([entry])

    n = SLAScheduler(config).add_notification("acme b.v.", "patch servers", "M", "2026-01-15")

    assert n == Notification("patch servers", "M", date(2026, 1, 15))
    assert entry.notifications == [n]
    assert entry.create_ticket is True
    assert config.saved == 1


def test_add_notification_failures_change_nothing():
    entry = ConfigEntry(id="1", description="Acme")
    config = FakeConfig([entry])
    scheduler = SLAScheduler(config)

    assert scheduler.add_notification("Unknown", "t", "W") is None
    assert scheduler.add_notification("Acme", "t", "Z") is None
    assert scheduler.add_notification("Acme", "t", "W", "31-02-2026") is None
    assert entry.notifications == []
    assert entry.create_ticket is False
    assert config.saved == 0


def test_notification_dict_round_trip_accepts_date_strings():
    n = Notification.from_dict({"task": "t", "interval": "Y", "triggered": "2025-12-31"})
    assert n.triggered == date(2025, 12, 31)
    assert n.to_dict() == {"task": "t", "interval": "Y", "triggered": "2025-12-31"}
    assert Notification.from_dict({"task": "t", "interval": "Y"}).triggered is None


def test_report_lines_lists_entries_with_notifications():
    entries = [
        ConfigEntry(id="1", description="Acme", notifications=[Notification("a", "W", TODAY)]),
        ConfigEntry(id="2", description="Empty"),
    ]

    lines = SLAScheduler(FakeConfig(entries)).report_lines()

    assert lines == ["Acme", f"- Task 'a' to be executed Weekly; last time triggered {TODAY}"]


def test_restore_makes_notifications_due_again():
    once = Notification("renew license", "O")
    weekly = Notification("check backups", "W", TODAY - timedelta(days=8))
    entry = ConfigEntry(id="1", description="Acme", notifications=[once, weekly])
    scheduler = SLAScheduler(FakeConfig([entry]))

    for pn in scheduler.due_notifications(TODAY):
        scheduler.restore(pn)

    assert entry.notifications == [weekly, once]
    assert weekly.triggered == TODAY - timedelta(days=8)
    assert len(scheduler.due_notifications(TODAY)) == 2
