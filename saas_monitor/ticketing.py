from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Protocol

import httpx

from saas_monitor.config.settings import MonitorSettings
from saas_monitor.timeutils import parse_timestamp

logger = logging.getLogger(__name__)

PRIO_LOW = "1 low"
PRIO_NORMAL = "2 normal"
PRIO_HIGH = "3 high"

TAG_PREFIX = "monitor-script"

DEFAULT_GROUP = "Monitoring"
DEFAULT_INBOX_GROUP = "Test"
STATE_CLOSED = "closed"
NOTE_SUBJECT = "Ticket Monitoring Script"


class Ticketer(Protocol):
    def create_ticket(
        self, title: str, text: str, priority: str = PRIO_NORMAL, tag: Optional[str] = None
    ) -> Optional[Any]:
        ...


@dataclass
class TicketRecord:
    title: str
    text: str
    priority: str
    tag: Optional[str] = None


@dataclass
class InMemoryTicketer:
    tickets: List[TicketRecord] = field(default_factory=list)

    def create_ticket(
        self, title: str, text: str, priority: str = PRIO_NORMAL, tag: Optional[str] = None
    ) -> TicketRecord:
        ticket = TicketRecord(title, text, priority, tag)
        self.tickets.append(ticket)
        return ticket


def ticket_payload(
    title: str, text: str, priority: str, tag: Optional[str], group: Optional[str], customer: Optional[str]
) -> Dict[str, Any]:
    return {
        "title": title,
        "state": "new",
        "group": group,
        "priority": priority,
        "customer": customer,
        "article": {
            "content_type": "text/plain",
            "body": text,
        },
        "tags": f"{TAG_PREFIX},{tag or ''}",
    }


@dataclass
class BackupTicket:
    """A ticket created from an incoming mail, e.g. a NAS backup report."""
    id: Any
    number: str
    title: str
    created_by: Optional[str]
    created_at: Optional[datetime]


def backup_ticket_from_raw(raw: Mapping[str, Any]) -> BackupTicket:
    return BackupTicket(
        id=raw.get("id"),
        number=str(raw.get("number", "")),
        title=raw.get("title") or "",
        created_by=raw.get("created_by"),
        created_at=parse_timestamp(raw.get("created_at")),
    )


class ZammadTicketer:
    """
    Creates tickets with the Zammad REST API and handles backup notification tickets in
    the monitoring group. In debug mode tickets are only logged.
    """

    def __init__(
        self,
        host: Optional[str],
        token: Optional[str],
        group: Optional[str],
        customer: Optional[str],
        *,
        debug: bool = False,
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
        inbox_group: str = DEFAULT_INBOX_GROUP,
    ):
        if (group or DEFAULT_GROUP) == inbox_group:
            raise ValueError(f"Monitoring and inbox group cannot be the same: '{inbox_group}'")
        self.group = group
        self.inbox_group = inbox_group
        self.customer = customer
        self.debug = debug
        self.client = client
        if self.client is None and not debug:
            if not host:
                raise ValueError("ZAMMAD_HOST is not set")
            self.client = httpx.Client(
                base_url=host,
                timeout=timeout,
                headers={"Authorization": f"Bearer {token}"},
            )

    @staticmethod
    def from_settings(settings: MonitorSettings, client: Optional[httpx.Client] = None) -> "ZammadTicketer":
        return ZammadTicketer(
            settings.zammad_host,
            settings.zammad_token,
            settings.zammad_group,
            settings.zammad_customer,
            debug=settings.debug,
            client=client,
            timeout=settings.http_timeout,
            inbox_group=settings.zammad_inbox_group,
        )

    def create_ticket(
        self, title: str, text: str, priority: str = PRIO_NORMAL, tag: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        ticket = None
        if not self.debug:
            resp = self.client.post(
                "/api/v1/tickets",
                json=ticket_payload(title, text, priority, tag, self.group, self.customer),
            )
            resp.raise_for_status()
            try:
                ticket = resp.json()
            except ValueError:
                logger.warning("Ticket '%s' created, response is not JSON", title)
        logger.info("Ticket created: %s/%s\n%s", title, priority, text)
        return ticket

    def new_tickets(self, limit: int = 100) -> List[BackupTicket]:
        """New tickets in the monitoring group, as backup notification candidates."""
        if self.client is None:
            logger.info("Ticket search skipped in debug mode")
            return []
        resp = self.client.get(
            "/api/v1/tickets/search",
            params={
                "query": f"state.name:new AND group.name:{self.group or DEFAULT_GROUP}",
                "limit": limit,
                "expand": "true",
            },
        )
        resp.raise_for_status()
        data = resp.json()
        if isinstance(data, dict):
            data = list((data.get("assets") or {}).get("Ticket", {}).values())
        return [backup_ticket_from_raw(t) for t in data]

    def _update(self, ticket: BackupTicket, changes: Dict[str, Any], note: str) -> None:
        logger.info("Ticket %s: %s", ticket.number, note)
        if self.debug:
            return
        body = dict(changes)
        body["article"] = {"subject": NOTE_SUBJECT, "body": note, "type": "note", "internal": True}
        resp = self.client.put(f"/api/v1/tickets/{ticket.id}", json=body)
        resp.raise_for_status()

    def move_to_inbox(self, ticket: BackupTicket, note: str) -> None:
        self._update(ticket, {"group": self.inbox_group}, note)

    def close_ticket(self, ticket: BackupTicket, note: str) -> None:
        self._update(ticket, {"state": STATE_CLOSED}, note)
