from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Protocol, Sequence

from saas_monitor.config.store import MonitoringConfig
from saas_monitor.config.entry import ConfigEntry
from saas_monitor.ticketing import BackupTicket
from saas_monitor.timeutils import utc_now

logger = logging.getLogger(__name__)

BACKUP_SILENCE = timedelta(hours=48)

FAILED = "failed"
SUCCEEDED = "succeeded"
UNKNOWN = "unknown"


@dataclass(frozen=True)
class TicketCheck:
    """Recognizes backup report tickets by title and reads their outcome."""
    pattern: str
    description: str
    failed: str
    succeeded: str

    def matches(self, ticket: BackupTicket) -> bool:
        return re.search(self.pattern, ticket.title) is not None

    def test(self, ticket: BackupTicket) -> str:
        if self.failed in ticket.title:
            return FAILED
        if self.succeeded in ticket.title:
            return SUCCEEDED
        return UNKNOWN


# "[NAS01] Network backup - taak mislukt"
SYNOLOGY_CHECK = TicketCheck(r"\[.*\] Network backup - .*", "Synology(NL)", "mislukt", "voltooid")

DEFAULT_CHECKS = (SYNOLOGY_CHECK,)


class BackupTicketDesk(Protocol):
    def new_tickets(self) -> List[BackupTicket]:
        ...

    def move_to_inbox(self, ticket: BackupTicket, note: str) -> None:
        ...

    def close_ticket(self, ticket: BackupTicket, note: str) -> None:
        ...


@dataclass
class BackupScanResult:
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    unknown: List[str] = field(default_factory=list)
    unmatched: List[str] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)


def config_by_mail(config: MonitoringConfig, mail_address: Optional[str]) -> Optional[ConfigEntry]:
    """Entry whose backup_domain equals the domain of mail_address."""
    if not mail_address or "@" not in mail_address:
        return None
    domain = mail_address.lower().rsplit("@", 1)[1]
    return next((e for e in config.entries if (e.backup_domain or "").lower() == domain), None)


def scan_backup_tickets(
    desk: BackupTicketDesk,
    config: MonitoringConfig,
    checks: Sequence[TicketCheck] = DEFAULT_CHECKS,
) -> BackupScanResult:
    """
    Handles new backup report tickets: the sender's entry gets last_backup set to the
    ticket time, succeeded reports are closed, failed and unrecognized ones go to the
    inbox. Tickets from senders without a monitor_backup entry are left alone.
    """
    result = BackupScanResult()
    for ticket in desk.new_tickets():
        check = next((c for c in checks if c.matches(ticket)), None)
        if check is None:
            desk.move_to_inbox(ticket, "* TicketMonitor no match found for subject, moved to inbox")
            result.unmatched.append(ticket.number)
            continue

        outcome = check.test(ticket)
        if outcome == UNKNOWN:
            desk.move_to_inbox(ticket, f"Unknown if {check.description} backup failed or succeeded")
            result.unknown.append(ticket.number)
            continue

        cfg = config_by_mail(config, ticket.created_by)
        if cfg is None or not cfg.monitor_backup:
            logger.warning("Domain not found for '%s' or no monitor_backup SLA; ticket %s ignored",
                           ticket.created_by, ticket.number)
            result.ignored.append(ticket.number)
            continue

        # tickets arrive in any order
        if ticket.created_at and (cfg.last_backup is None or ticket.created_at > cfg.last_backup):
            cfg.last_backup = ticket.created_at
        logger.info("%s: %s backup %s, last backup %s", cfg.description, check.description, outcome, cfg.last_backup)

        if outcome == FAILED:
            desk.move_to_inbox(ticket, "Backup failed, move ticket to inbox")
            result.failed.append(ticket.number)
        else:
            desk.close_ticket(ticket, "Backup succeeded, moving ticket to archive/closed")
            result.succeeded.append(ticket.number)
    return result


def stale_backups(
    config: MonitoringConfig,
    now: Optional[datetime] = None,
    max_silence: timedelta = BACKUP_SILENCE,
) -> List[ConfigEntry]:
    """
    Backup monitored entries without a backup notification for more than max_silence.
    Entries that never had one start counting from now.
    """
    now = now or utc_now()
    stale: List[ConfigEntry] = []
    for cfg in config.entries:
        if not cfg.monitor_backup:
            continue
        if cfg.last_backup is None:
            cfg.last_backup = now
        if now - cfg.last_backup > max_silence:
            logger.warning("Didn't get any notifications for %s since %s", cfg.description, cfg.last_backup)
            stale.append(cfg)
    return stale
