import asyncio
import json

import httpx
import pytest

from ticketbuddy import mcp_server
from ticketbuddy.mcp_server import TicketBuddyAPI, parse_repo


class FakeAPI:
    """Canned TicketBuddy API answers keyed by (method, path)."""

    def __init__(self, answers):
        self.answers = answers
        self.requests = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body, dict(request.url.params)))
        status, payload = self.answers.get((request.method, request.url.path), (404, {"error": "not found"}))
        return httpx.Response(status, json=payload)


@pytest.fixture
def fake_api(monkeypatch):
    def install(answers):
        fake = FakeAPI(answers)
        api = TicketBuddyAPI(base_url="http://ticketbuddy.test/", transport=httpx.MockTransport(fake.handle))
        monkeypatch.setattr(mcp_server, "api", api)
        return fake

    return install


def test_parse_repo():
    assert parse_repo("o/n") == ("o", "n")
    for bad in ("o", "o/n/x", "/n", ""):
        with pytest.raises(ValueError):
            parse_repo(bad)


def test_create_ticket_formats_created_tickets(fake_api):
    tickets = [{"id": "TICKET-1", "name": "Authentication: Users cannot log in"}]
    fake = fake_api({("POST", "/tickets"): (200, {"success": True, "tickets": tickets, "count": 1})})

    text = asyncio.run(mcp_server.create_ticket("Users cannot log in"))

    assert text.startswith("Created 1 ticket(s):")
    assert "TICKET-1" in text
    assert fake.requests[0][2] == {"description": "Users cannot log in"}


def test_ticket_updates_send_partial_patches(fake_api):
    answer = (200, {"success": True, "ticket": {"id": "TICKET-1"}})
    fake = fake_api({("PATCH", "/tickets/TICKET-1"): answer})

    assert asyncio.run(mcp_server.update_ticket_status("TICKET-1", "qa")) == "Updated ticket TICKET-1 status to qa"
    asyncio.run(mcp_server.update_ticket_priority("TICKET-1", 3))
    asyncio.run(mcp_server.assign_ticket("TICKET-1", "Dana"))

    assert [r[2] for r in fake.requests] == [{"status": "qa"}, {"importance": 3}, {"assignee": "Dana"}]


def test_api_errors_are_returned_as_text(fake_api):
    fake_api({})

    text = asyncio.run(mcp_server.list_tickets())

    assert text.startswith("Error: API request failed: 404 Not Found")


def test_bad_repo_argument_is_returned_as_text(fake_api):
    fake = fake_api({})

    text = asyncio.run(mcp_server.github_list_issues("not-a-repo"))

    assert text == "Error: Invalid repo format: not-a-repo. Expected format: owner/name"
    assert fake.requests == []


def test_github_tools_call_repo_routes(fake_api):
    fake = fake_api({
        ("GET", "/github/o/n/prs"): (200, {"prs": [{"id": 7}]}),
        ("POST", "/github/o/n/pr/7/merge"): (200, {"success": True, "merged": True}),
        ("PATCH", "/github/o/n/issues/3"): (200, {"success": True, "issue": {"number": 3, "state": "closed"}}),
        ("POST", "/github/link"): (200, {"success": True, "repo": {"id": "o/n"}}),
    })

    assert asyncio.run(mcp_server.github_list_prs("o/n", "all")).startswith("Found 1 pull requests:")
    assert asyncio.run(mcp_server.github_merge_pr("o/n", 7, "squash")).startswith("Merged PR #7:")
    assert asyncio.run(mcp_server.github_close_issue("o/n", 3)).startswith("Closed issue #3:")
    assert asyncio.run(mcp_server.github_link_repo("https://github.com/o/n")).startswith("Linked repository: o/n")

    assert fake.requests[0][3] == {"state": "all"}
    assert fake.requests[1][2] == {"merge_method": "squash"}
    assert fake.requests[2][2] == {"state": "closed"}
    assert fake.requests[3][2] == {"repo_url": "https://github.com/o/n"}


def test_checkout_diagnostic_tool(fake_api):
    fake = fake_api({("POST", "/mcp/call-tool"): (200, {
        "incidentFiled": True,
        "ticketId": "INC-123456-abcdef",
        "severity": "high",
        "summary": "Checkout failing",
        "recommendedFix": "Rollback",
        "uiObservation": "UI check: Pay button disabled",
        "created_at": "2026-10-19T10:00:00Z",
    })})

    text = asyncio.run(mcp_server.run_checkout_diagnostic())

    assert text == (
        "Incident INC-123456-abcdef filed (high): Checkout failing\n"
        "Recommended fix: Rollback\n"
        "UI check: Pay button disabled"
    )
    assert fake.requests[0][2] == {"tool": "summarize_checkout_health", "args": {"service": "checkout"}}


def test_list_incidents_passes_filters(fake_api):
    fake = fake_api({("GET", "/incidents"): (200, {"incidents": []})})

    assert asyncio.run(mcp_server.list_incidents("checkout", 5)) == "Found 0 incidents:\n[]"
    assert fake.requests[0][3] == {"service": "checkout", "limit": "5"}
