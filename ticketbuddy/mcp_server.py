"""
TicketBuddy MCP Server
======================

stdio MCP adapter exposing the TicketBuddy HTTP API as named tools.

Each tool makes exactly one HTTP call to ``TICKETBUDDY_API``
(default ``http://localhost:8787``) and returns text. Upstream failures are
returned as ``Error: ...`` text instead of being raised.

Usage:
    ticketbuddy-mcp
"""

import functools
import json
import sys
from typing import Any, Awaitable, Callable, Dict, Literal, Optional

import httpx
from mcp.server.fastmcp import FastMCP

from ticketbuddy.config import settings
from ticketbuddy.shared.infrastructure.logging import get_logger, setup_logging

logger = get_logger(__name__)

mcp = FastMCP("ticketbuddy")


class APICallError(Exception):
    """Non-2xx answer from the TicketBuddy API."""


class TicketBuddyAPI:
    """Async HTTP client for the TicketBuddy API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._transport = transport
        self._timeout = timeout

    async def request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        url = f"{self.base_url}{path}"
        logger.info("API call", extra={"method": method, "url": url})

        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            response = await client.request(method, url, json=json_body, params=params)

        if not response.is_success:
            logger.warning("API error", extra={"status_code": response.status_code, "url": url})
            raise APICallError(
                f"API request failed: {response.status_code} {response.reason_phrase} - {response.text}"
            )
        return response.json()


api = TicketBuddyAPI()


def parse_repo(repo: str) -> tuple[str, str]:
    """Split ``owner/name``."""
    parts = (repo or "").split("/")
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Invalid repo format: {repo}. Expected format: owner/name")
    return parts[0], parts[1]


def _fmt(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)


def reports_errors(func: Callable[..., Awaitable[str]]) -> Callable[..., Awaitable[str]]:
    """Turn API, transport and argument errors into ``Error: ...`` text."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> str:
        try:
            return await func(*args, **kwargs)
        except (APICallError, httpx.HTTPError, ValueError) as e:
            logger.warning("Tool failed", extra={"tool": func.__name__, "error": str(e)})
            return f"Error: {e}"

    return wrapper


# ========== Ticket tools ==========

@mcp.tool()
@reports_errors
async def list_tickets() -> str:
    """List all tickets in the system."""
    data = await api.request("GET", "/tickets")
    return _fmt(data["tickets"])


@mcp.tool()
@reports_errors
async def create_ticket(description: str) -> str:
    """Create tickets from a free-text description with AI-powered analysis.

    Args:
        description: Description of the functionality or issue
    """
    data = await api.request("POST", "/tickets", {"description": description})
    return f"Created {data['count']} ticket(s):\n{_fmt(data['tickets'])}"


@mcp.tool()
@reports_errors
async def update_ticket_status(ticket_id: str, status: Literal["open", "in-progress", "qa", "resolved"]) -> str:
    """Update the status of a ticket.

    Args:
        ticket_id: Ticket ID
        status: New status
    """
    await api.request("PATCH", f"/tickets/{ticket_id}", {"status": status})
    return f"Updated ticket {ticket_id} status to {status}"


@mcp.tool()
@reports_errors
async def update_ticket_priority(ticket_id: str, priority: Literal[1, 2, 3]) -> str:
    """Update the priority/importance of a ticket.

    Args:
        ticket_id: Ticket ID
        priority: Priority level (1=Low, 2=Medium, 3=High)
    """
    await api.request("PATCH", f"/tickets/{ticket_id}", {"importance": priority})
    return f"Updated ticket {ticket_id} priority to {priority}"


@mcp.tool()
@reports_errors
async def assign_ticket(ticket_id: str, assignee: str) -> str:
    """Assign a ticket to a team member.

    Args:
        ticket_id: Ticket ID
        assignee: Team member name
    """
    await api.request("PATCH", f"/tickets/{ticket_id}", {"assignee": assignee})
    return f"Assigned ticket {ticket_id} to {assignee}"


# ========== GitHub tools ==========

@mcp.tool()
@reports_errors
async def github_link_repo(repo_url: str) -> str:
    """Link a GitHub repository.

    Args:
        repo_url: GitHub repository URL or full_name (owner/name)
    """
    data = await api.request("POST", "/github/link", {"repo_url": repo_url})
    return f"Linked repository: {data['repo']['id']}\n{_fmt(data['repo'])}"


@mcp.tool()
@reports_errors
async def github_summary() -> str:
    """Get GitHub integration summary."""
    return _fmt(await api.request("GET", "/github/summary"))


@mcp.tool()
@reports_errors
async def github_list_issues(repo: str, state: Literal["open", "closed", "all"] = "open") -> str:
    """List issues from a GitHub repository.

    Args:
        repo: Repository full_name (owner/name)
        state: Issue state filter
    """
    owner, name = parse_repo(repo)
    data = await api.request("GET", f"/github/{owner}/{name}/issues", params={"state": state})
    return f"Found {len(data['issues'])} issues:\n{_fmt(data['issues'])}"


@mcp.tool()
@reports_errors
async def github_list_prs(repo: str, state: Literal["open", "closed", "all"] = "open") -> str:
    """List pull requests from a GitHub repository.

    Args:
        repo: Repository full_name (owner/name)
        state: PR state filter
    """
    owner, name = parse_repo(repo)
    data = await api.request("GET", f"/github/{owner}/{name}/prs", params={"state": state})
    return f"Found {len(data['prs'])} pull requests:\n{_fmt(data['prs'])}"


@mcp.tool()
@reports_errors
async def github_create_issue(repo: str, title: str, body: str = "") -> str:
    """Create a new GitHub issue.

    Args:
        repo: Repository full_name (owner/name)
        title: Issue title
        body: Issue description
    """
    owner, name = parse_repo(repo)
    data = await api.request("POST", f"/github/{owner}/{name}/issues", {"title": title, "body": body})
    return f"Created issue #{data['issue']['number']}:\n{_fmt(data['issue'])}"


@mcp.tool()
@reports_errors
async def github_close_issue(repo: str, issue_number: int) -> str:
    """Close a GitHub issue.

    Args:
        repo: Repository full_name (owner/name)
        issue_number: Issue number
    """
    owner, name = parse_repo(repo)
    data = await api.request("PATCH", f"/github/{owner}/{name}/issues/{issue_number}", {"state": "closed"})
    return f"Closed issue #{issue_number}:\n{_fmt(data['issue'])}"


@mcp.tool()
@reports_errors
async def github_merge_pr(
    repo: str,
    pr_number: int,
    merge_method: Literal["merge", "squash", "rebase"] = "merge"
) -> str:
    """Merge a pull request.

    Args:
        repo: Repository full_name (owner/name)
        pr_number: PR number
        merge_method: Merge method
    """
    owner, name = parse_repo(repo)
    data = await api.request(
        "POST",
        f"/github/{owner}/{name}/pr/{pr_number}/merge",
        {"merge_method": merge_method}
    )
    return f"Merged PR #{pr_number}:\n{_fmt(data)}"


# ========== Incident tools ==========

@mcp.tool()
@reports_errors
async def list_incidents(service: Optional[str] = None, limit: Optional[int] = None) -> str:
    """List filed incidents, newest first.

    Args:
        service: Only incidents of this service
        limit: Maximum number of incidents (default 50, max 200)
    """
    params: Dict[str, Any] = {}
    if service:
        params["service"] = service
    if limit is not None:
        params["limit"] = limit
    data = await api.request("GET", "/incidents", params=params)
    return f"Found {len(data['incidents'])} incidents:\n{_fmt(data['incidents'])}"


@mcp.tool()
@reports_errors
async def run_checkout_diagnostic(service: str = "checkout") -> str:
    """Analyze checkout logs and file an incident.

    Args:
        service: Service whose logs are analyzed
    """
    data = await api.request(
        "POST",
        "/mcp/call-tool",
        {"tool": "summarize_checkout_health", "args": {"service": service}}
    )
    return (
        f"Incident {data['ticketId']} filed ({data['severity']}): {data['summary']}\n"
        f"Recommended fix: {data['recommendedFix']}\n"
        f"{data['uiObservation']}"
    )


def main() -> None:
    """Run the MCP server on stdio; logs go to stderr."""
    setup_logging(settings.log_level, settings.environment, stream=sys.stderr)
    logger.info("TicketBuddy MCP server running on stdio", extra={"api_base": api.base_url})
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
