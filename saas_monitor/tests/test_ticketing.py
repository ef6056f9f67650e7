import json

import httpx
import pytest

from saas_monitor.config.settings import MonitorSettings
from saas_monitor.ticketing import PRIO_HIGH, BackupTicket, InMemoryTicketer, ZammadTicketer, ticket_payload


def test_payload_shape():
    payload = ticket_payload("Monitoring: Acme", "text", PRIO_HIGH, "Sophos", "Support", "ops@example.com")

    assert payload["state"] == "new"
    assert payload["priority"] == "3 high"
    assert payload["article"] == {"content_type": "text/plain", "body": "text"}
    assert payload["tags"] == "monitor-script,Sophos"
    assert ticket_payload("t", "x", PRIO_HIGH, None, None, None)["tags"] == "monitor-script,"


def test_zammad_posts_ticket():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(201, json={"id": 12})

    client = httpx.Client(base_url="https://desk.example.com", transport=httpx.MockTransport(handler))
    ticketer = ZammadTicketer("https://desk.example.com", "tok", "Support", "ops@example.com", client=client)

    ticket = ticketer.create_ticket("Monitoring: Acme", "body", PRIO_HIGH, "SLA")

    assert ticket == {"id": 12}
    assert requests[0].method == "POST"
    assert requests[0].url.path == "/api/v1/tickets"
    sent = json.loads(requests[0].content)
    assert sent["group"] == "Support"
    assert sent["tags"] == "monitor-script,SLA"


def test_zammad_http_error_propagates():
    client = httpx.Client(
        base_url="https://desk.example.com",
        transport=httpx.MockTransport(lambda request: httpx.Response(422, json={"error": "bad"})),
    )
    ticketer = ZammadTicketer("https://desk.example.com", "tok", "Support", None, client=client)

    with pytest.raises(httpx.HTTPStatusError):
        ticketer.create_ticket("t", "x")


def test_debug_mode_makes_no_request():
    ticketer = ZammadTicketer.from_settings(MonitorSettings(debug=True))

    assert ticketer.client is None
    assert ticketer.create_ticket("t", "x") is None


def test_missing_host_without_debug():
    with pytest.raises(ValueError):
        ZammadTicketer(None, None, None, None)


def test_in_memory_ticketer():
    ticketer = InMemoryTicketer()
    ticketer.create_ticket("a", "b", tag="Veeam")

    assert [(t.title, t.priority, t.tag) for t in ticketer.tickets] == [("a", "2 normal", "Veeam")]


def _zammad(handler, **kwargs):
    client = httpx.Client(base_url="https://desk.example.com", transport=httpx.MockTransport(handler))
    return ZammadTicketer("https://desk.example.com", "tok", "Monitoring", None, client=client, **kwargs)


def test_ticket_created_with_non_json_response():
    ticketer = _zammad(lambda request: httpx.Response(201, text="created"))

    assert ticketer.create_ticket("t", "x") is None


def test_new_tickets_search():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(
            200,
            json=[
                {
                    "id": 5,
                    "number": 31005,
                    "title": "[NAS01] Network backup - taak voltooid",
                    "created_by": "nas@acme.nl",
                    "created_at": "2026-02-08T02:10:00.000Z",
                }
            ],
        )

    tickets = _zammad(handler).new_tickets()

    assert requests[0].url.path == "/api/v1/tickets/search"
    assert requests[0].url.params["query"] == "state.name:new AND group.name:Monitoring"
    assert tickets[0].number == "31005"
    assert tickets[0].created_by == "nas@acme.nl"
    assert tickets[0].created_at.hour == 2


def test_move_and_close_update_ticket():
    sent = []

    def handler(request):
        sent.append((request.method, request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={})

    ticketer = _zammad(handler, inbox_group="Inbox")
    ticket = BackupTicket(id=5, number="31005", title="t", created_by=None, created_at=None)

    ticketer.move_to_inbox(ticket, "Backup failed")
    ticketer.close_ticket(ticket, "Backup succeeded")

    assert [(m, p) for m, p, _ in sent] == [("PUT", "/api/v1/tickets/5"), ("PUT", "/api/v1/tickets/5")]
    assert sent[0][2]["group"] == "Inbox"
    assert sent[0][2]["article"]["body"] == "Backup failed"
    assert sent[1][2]["state"] == "closed"


def test_inbox_group_must_differ_from_monitoring_group():
    with pytest.raises(ValueError):
        ZammadTicketer(None, None, "Test", None, debug=True, inbox_group="Test")
