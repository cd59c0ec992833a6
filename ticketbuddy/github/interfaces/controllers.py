"""
GitHub Controllers (API Routes)
===============================

FastAPI routes for the GitHub bridge and webhook ingestion.

Controllers are thin - they delegate to GitHubService.
"""

from typing import Any, AsyncGenerator, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ticketbuddy.github.application import (
    AutoTicketService,
    CommentRequest,
    CommentResponse,
    ConnectionTestResponse,
    EventInfo,
    EventListResponse,
    GitHubService,
    IssueCreateRequest,
    IssueInfo,
    IssueListResponse,
    IssueResponse,
    IssueUpdateRequest,
    LinkRequest,
    LinkResponse,
    ListStateStr,
    MergeRequest,
    MergeResponse,
    PullRequestInfo,
    PullRequestListResponse,
    RepoInfo,
    SummaryResponse,
    UnlinkResponse,
    WebhookResponse,
    require_repo_ref,
)
from ticketbuddy.github.infrastructure import GitHubClient, SQLAlchemyGitHubRepository
from ticketbuddy.infrastructure.database import get_session, get_session_context
from ticketbuddy.shared.infrastructure.logging import get_logger
from ticketbuddy.tickets.infrastructure import SQLAlchemyTicketRepository

logger = get_logger(__name__)
router = APIRouter(prefix="/github", tags=["GitHub"])


# ========== Dependencies ==========

async def get_github_client() -> AsyncGenerator[GitHubClient, None]:
    """GitHub REST client for one request."""
    async with GitHubClient() as client:
        yield client


async def get_github_service(
    session: AsyncSession = Depends(get_session),
    client: GitHubClient = Depends(get_github_client)
) -> GitHubService:
    """Get GitHub service instance."""
    return GitHubService(
        SQLAlchemyGitHubRepository(session),
        SQLAlchemyTicketRepository(session),
        client
    )


# ========== Background Jobs ==========

async def create_issue_tickets(repo_url: str, issues: List[Dict[str, Any]]) -> None:
    """
    Open a ticket for each listed issue that is not tracked yet.

    Runs after the response in its own session. Failures are logged only.
    """
    try:
        async with get_session_context() as session:
            created = await AutoTicketService(SQLAlchemyTicketRepository(session)).create_missing(repo_url, issues)
    except Exception:
        logger.error(
            "Auto-ticket creation failed",
            extra={"repo_url": repo_url, "issue_count": len(issues)},
            exc_info=True
        )
        return

    if created:
        logger.info(
            "Tickets created from issues",
            extra={"repo_url": repo_url, "ticket_ids": [t.id for t in created]}
        )


# ========== Link & status ==========

@router.post("/link", response_model=LinkResponse, summary="Link a repository")
async def link_repository(payload: LinkRequest, service: GitHubService = Depends(get_github_service)):
    link = await service.link(payload.reference)
    return LinkResponse(repo=RepoInfo.model_validate(link))


@router.delete("/link", response_model=UnlinkResponse, summary="Unlink the repository")
async def unlink_repository(service: GitHubService = Depends(get_github_service)):
    await service.unlink()
    return UnlinkResponse()


@router.get(
    "/summary",
    response_model=SummaryResponse,
    summary="Integration summary",
    description="Connection status, live open PR/issue counts (mirror counts when GitHub is unreachable) and the 10 most recent events."
)
async def get_summary(service: GitHubService = Depends(get_github_service)):
    return await service.summary()


@router.get("/test", response_model=ConnectionTestResponse, summary="Verify the GitHub token")
async def test_connection(service: GitHubService = Depends(get_github_service)):
    login = await service.test_connection()
    return ConnectionTestResponse(login=login)


# ========== Webhooks ==========

@router.post(
    "/webhook",
    response_model=WebhookResponse,
    summary="GitHub webhook receiver",
    description="""
    Requires `X-GitHub-Delivery` and `X-GitHub-Event`. A present
    `X-Hub-Signature-256` must match the HMAC-SHA256 of the raw body.
    Redeliveries refresh the mirrors but are logged once.
    """
)
async def receive_webhook(
    request: Request,
    x_github_event: Optional[str] = Header(None),
    x_github_delivery: Optional[str] = Header(None),
    x_hub_signature_256: Optional[str] = Header(None),
    service: GitHubService = Depends(get_github_service)
):
    body = await request.body()
    duplicate = await service.ingest_webhook(x_github_event, x_github_delivery, x_hub_signature_256, body)
    return WebhookResponse(event=x_github_event, delivery=x_github_delivery, duplicate=duplicate)


# ========== Pull requests ==========

@router.get("/{owner}/{name}/prs", response_model=PullRequestListResponse, summary="List pull requests")
async def list_pull_requests(
    owner: str,
    name: str,
    state: ListStateStr = Query("open"),
    service: GitHubService = Depends(get_github_service)
):
    ref = require_repo_ref(f"{owner}/{name}")
    rows = await service.list_pull_requests(ref, state=state)
    return PullRequestListResponse(prs=[PullRequestInfo.model_validate(r) for r in rows])


@router.post(
    "/{owner}/{name}/pr/{number}/merge",
    response_model=MergeResponse,
    summary="Merge a pull request",
    description="""
    Body: `method` or `merge_method` (`merge`, `squash`, `rebase`; default `merge`),
    optional `sha` and `ticket_id`. The ticket is resolved after a confirmed merge.
    """
)
async def merge_pull_request(
    owner: str,
    name: str,
    number: int,
    payload: Optional[MergeRequest] = None,
    service: GitHubService = Depends(get_github_service)
):
    ref = require_repo_ref(f"{owner}/{name}")
    return await service.merge(ref, number, payload or MergeRequest())


# ========== Issues ==========

@router.get(
    "/{owner}/{name}/issues",
    response_model=IssueListResponse,
    summary="List issues",
    description="Pull requests are filtered out. Listing open issues opens tickets for untracked ones in the background."
)
async def list_issues(
    owner: str,
    name: str,
    background_tasks: BackgroundTasks,
    state: ListStateStr = Query("open"),
    labels: Optional[str] = Query(None, description="Comma-separated label names"),
    service: GitHubService = Depends(get_github_service)
):
    ref = require_repo_ref(f"{owner}/{name}")
    rows = await service.list_issues(ref, state=state, labels=labels)

    if state == "open" and rows:
        snapshot = [{"number": r.number, "title": r.title, "body": r.body} for r in rows]
        background_tasks.add_task(create_issue_tickets, ref.html_url, snapshot)

    return IssueListResponse(issues=[IssueInfo.model_validate(r) for r in rows])


@router.post("/{owner}/{name}/issues", response_model=IssueResponse, summary="Create an issue")
async def create_issue(
    owner: str,
    name: str,
    payload: IssueCreateRequest,
    service: GitHubService = Depends(get_github_service)
):
    ref = require_repo_ref(f"{owner}/{name}")
    row = await service.create_issue(ref, payload)
    return IssueResponse(issue=IssueInfo.model_validate(row))


@router.patch("/{owner}/{name}/issues/{number}", response_model=IssueResponse, summary="Update or close an issue")
async def update_issue(
    owner: str,
    name: str,
    number: int,
    payload: IssueUpdateRequest,
    service: GitHubService = Depends(get_github_service)
):
    ref = require_repo_ref(f"{owner}/{name}")
    row = await service.update_issue(ref, number, payload.model_dump(exclude_unset=True))
    return IssueResponse(issue=IssueInfo.model_validate(row))


@router.post("/{owner}/{name}/issues/{number}/comment", response_model=CommentResponse, summary="Comment on an issue")
async def comment_on_issue(
    owner: str,
    name: str,
    number: int,
    payload: CommentRequest,
    service: GitHubService = Depends(get_github_service)
):
    ref = require_repo_ref(f"{owner}/{name}")
    comment = await service.comment(ref, number, payload.body)
    return CommentResponse(comment=comment)


# ========== Event log ==========

@router.get("/{owner}/{name}/events", response_model=EventListResponse, summary="Webhook events for a repository")
async def list_events(
    owner: str,
    name: str,
    limit: int = Query(20, ge=1, le=100),
    service: GitHubService = Depends(get_github_service)
):
    ref = require_repo_ref(f"{owner}/{name}")
    events = await service.list_events(ref, limit)
    return EventListResponse(events=[EventInfo.model_validate(e) for e in events])


# Export router for inclusion in main app
github_router = router
