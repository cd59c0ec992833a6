"""
GitHub Application Services
===========================

Orchestrates the GitHub REST client, the mirror/event repository and the
ticket repository.

Multi-step operations commit step by step. There is no transaction spanning
GitHub and the store, so a merge can succeed while the ticket write that
follows it fails; that outcome is logged and reported, not compensated.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from ticketbuddy.config import Importance, TicketStatus, settings
from ticketbuddy.core import (
    ConfigurationException,
    GitHubAPIException,
    MergeRejectedException,
    ValidationException,
    WebhookSignatureException,
)
from ticketbuddy.core.identifiers import generate_identifier
from ticketbuddy.github.application.dto import (
    CommentInfo,
    CountsInfo,
    EventInfo,
    IssueCreateRequest,
    MergeRequest,
    MergeResponse,
    RepoInfo,
    SummaryResponse,
)
from ticketbuddy.github.domain import (
    RepoRef,
    is_pull_request,
    issue_fields,
    parse_github_time,
    parse_repo_ref,
    pull_request_fields,
    summarize_event,
    translate_merge_failure,
    verify_signature,
)
from ticketbuddy.shared.infrastructure.logging import get_logger
from ticketbuddy.tickets.application.services import ITicketRepository

logger = get_logger(__name__)

RECENT_EVENT_COUNT = 10


# ========== Repository Interfaces ==========

class IGitHubRepository(ABC):
    """Interface for the link, event log and mirror tables."""

    @abstractmethod
    async def get_link(self) -> Optional[Any]:
        """The linked repository row, if any."""

    @abstractmethod
    async def replace_link(self, repo_id: str, url: str, default_branch: Optional[str]) -> Any:
        """Overwrite the single link row."""

    @abstractmethod
    async def delete_link(self) -> None:
        """Remove the link row (no-op when unlinked)."""

    @abstractmethod
    async def upsert_pull_request(self, repo_id: str, fields: Dict[str, Any]) -> Any:
        """Insert or refresh a pull request mirror row."""

    @abstractmethod
    async def upsert_issue(self, repo_id: str, fields: Dict[str, Any]) -> Any:
        """Insert or refresh an issue mirror row."""

    @abstractmethod
    async def mark_merged(self, repo_id: str, number: int) -> bool:
        """Close a mirrored pull request as merged."""

    @abstractmethod
    async def count_open(self, repo_id: str) -> Tuple[int, int]:
        """Open pull requests and issues according to the mirrors."""

    @abstractmethod
    async def event_exists(self, delivery_id: str) -> bool:
        """Check whether a delivery was already logged."""

    @abstractmethod
    async def add_event(
        self,
        delivery_id: str,
        repo_id: Optional[str],
        event_type: str,
        action: Optional[str],
        summary: str,
        payload: str
    ) -> Any:
        """Append an event row."""

    @abstractmethod
    async def list_events(self, repo_id: Optional[str], limit: int) -> List[Any]:
        """Most recent events first."""

    @abstractmethod
    async def commit(self) -> None:
        """Commit the pending writes."""

    @abstractmethod
    async def rollback(self) -> None:
        """Discard the pending writes."""


def require_repo_ref(value: str) -> RepoRef:
    """parse_repo_ref, reported as a client error."""
    try:
        return parse_repo_ref(value)
    except ValueError as e:
        raise ValidationException(str(e))


# ========== Application Services ==========

class GitHubService:
    """
    Service for the GitHub bridge.

    Coordinates:
    1. Live GitHub REST calls
    2. Mirror refreshes from every live answer
    3. The webhook event log
    4. Ticket resolution after merges
    """

    def __init__(
        self,
        repository: IGitHubRepository,
        ticket_repository: ITicketRepository,
        client: Any,
        webhook_secret: Optional[str] = None
    ):
        self._repository = repository
        self._tickets = ticket_repository
        self._client = client
        self._webhook_secret = webhook_secret if webhook_secret is not None else settings.github_webhook_secret

    # ========== Link ==========

    async def link(self, reference: str) -> Any:
        """Verify the repository upstream and make it the linked one."""
        ref = require_repo_ref(reference)
        data = await self._client.get_repo(ref.owner, ref.name)

        link = await self._repository.replace_link(
            repo_id=data.get("full_name") or ref.full_name,
            url=data.get("html_url") or ref.html_url,
            default_branch=data.get("default_branch")
        )
        await self._repository.commit()

        logger.info("Repository linked", extra={"repo_id": link.repo_id})
        return link

    async def unlink(self) -> None:
        await self._repository.delete_link()
        await self._repository.commit()
        logger.info("Repository unlinked")

    async def summary(self) -> SummaryResponse:
        link = await self._repository.get_link()
        if link is None:
            return SummaryResponse(connected=False)

        ref = parse_repo_ref(link.repo_id)
        try:
            open_prs, open_issues = await self._live_counts(ref)
        except GitHubAPIException as e:
            logger.warning(
                "Live counts unavailable, using mirrors",
                extra={"repo_id": link.repo_id, "error": e.message}
            )
            open_prs, open_issues = await self._repository.count_open(link.repo_id)

        events = await self._repository.list_events(link.repo_id, RECENT_EVENT_COUNT)

        return SummaryResponse(
            connected=True,
            repo=RepoInfo.model_validate(link),
            counts=CountsInfo(openPRs=open_prs, openIssues=open_issues),
            recentEvents=[EventInfo.model_validate(e) for e in events]
        )

    async def _live_counts(self, ref: RepoRef) -> Tuple[int, int]:
        pulls = await self._client.list_pulls(ref.owner, ref.name, state="open")
        issues = await self._client.list_issues(ref.owner, ref.name, state="open")
        return len(pulls), len([i for i in issues if not is_pull_request(i)])

    async def test_connection(self) -> str:
        """Login of the token's user."""
        if not self._client.has_token:
            raise ConfigurationException("GITHUB_TOKEN is not configured")
        user = await self._client.get_user()
        return user.get("login")

    # ========== Listings ==========

    async def list_pull_requests(self, ref: RepoRef, state: str = "open") -> List[Any]:
        pulls = await self._client.list_pulls(ref.owner, ref.name, state=state)

        rows = [await self._repository.upsert_pull_request(ref.full_name, pull_request_fields(pr)) for pr in pulls]
        await self._repository.commit()
        return rows

    async def list_issues(self, ref: RepoRef, state: str = "open", labels: Optional[str] = None) -> List[Any]:
        """Issues only; pull requests returned by the issues API are dropped."""
        issues = await self._client.list_issues(ref.owner, ref.name, state=state, labels=labels)

        rows = [
            await self._repository.upsert_issue(ref.full_name, issue_fields(issue))
            for issue in issues
            if not is_pull_request(issue)
        ]
        await self._repository.commit()
        return rows

    async def list_events(self, ref: RepoRef, limit: int) -> List[Any]:
        return await self._repository.list_events(ref.full_name, limit)

    # ========== Pull request merge ==========

    async def merge(self, ref: RepoRef, number: int, request: MergeRequest) -> MergeResponse:
        """
        Merge a pull request, then resolve the named ticket.

        The mirror update and the ticket update are committed separately.
        """
        method = request.resolved_method
        try:
            result = await self._client.merge_pull(ref.owner, ref.name, number, merge_method=method, sha=request.sha)
        except GitHubAPIException as e:
            rejection = translate_merge_failure(e.upstream_status, e.message)
            if rejection is not None:
                logger.warning(
                    "Merge rejected",
                    extra={"repo_id": ref.full_name, "pr_number": number, "reason": rejection.reason}
                )
                raise rejection
            raise

        result = result or {}
        if not result.get("merged"):
            raise MergeRejectedException(409, result.get("message") or "Pull request was not merged")

        await self._repository.mark_merged(ref.full_name, number)
        await self._repository.commit()

        logger.info(
            "Pull request merged",
            extra={"repo_id": ref.full_name, "pr_number": number, "merge_method": method}
        )

        response = MergeResponse(sha=result.get("sha"), message=result.get("message"), ticket_id=request.ticket_id)
        if request.ticket_id:
            response.ticketResolved = await self._resolve_ticket(request.ticket_id, ref, number)
        return response

    async def _resolve_ticket(self, ticket_id: str, ref: RepoRef, number: int) -> bool:
        try:
            ticket = await self._tickets.update(
                ticket_id,
                status=TicketStatus.RESOLVED,
                github_pr_number=number,
                github_repo_url=ref.html_url
            )
            if ticket is None:
                logger.warning(
                    "Merged PR names an unknown ticket",
                    extra={"ticket_id": ticket_id, "pr_number": number}
                )
                return False
            await self._repository.commit()
        except Exception:
            await self._repository.rollback()
            logger.error(
                "Ticket update after merge failed",
                extra={"ticket_id": ticket_id, "repo_id": ref.full_name, "pr_number": number},
                exc_info=True
            )
            return False

        logger.info("Ticket resolved by merge", extra={"ticket_id": ticket_id, "pr_number": number})
        return True

    # ========== Issue writes ==========

    async def create_issue(self, ref: RepoRef, request: IssueCreateRequest) -> Any:
        data = await self._client.create_issue(
            ref.owner, ref.name, title=request.title, body=request.body, labels=request.labels
        )
        row = await self._repository.upsert_issue(ref.full_name, issue_fields(data))
        await self._repository.commit()

        logger.info("Issue created", extra={"repo_id": ref.full_name, "issue_number": row.number})
        return row

    async def update_issue(self, ref: RepoRef, number: int, fields: Dict[str, Any]) -> Any:
        data = await self._client.update_issue(ref.owner, ref.name, number, **fields)
        row = await self._repository.upsert_issue(ref.full_name, issue_fields(data))
        await self._repository.commit()

        logger.info(
            "Issue updated",
            extra={"repo_id": ref.full_name, "issue_number": number, "fields": sorted(fields)}
        )
        return row

    async def comment(self, ref: RepoRef, number: int, body: str) -> CommentInfo:
        data = await self._client.create_comment(ref.owner, ref.name, number, body)
        return CommentInfo(
            id=data["id"],
            body=data.get("body") or body,
            author=((data.get("user") or {}).get("login")),
            html_url=data.get("html_url"),
            created_at=parse_github_time(data.get("created_at"))
        )

    # ========== Webhooks ==========

    async def ingest_webhook(
        self,
        event_type: Optional[str],
        delivery_id: Optional[str],
        signature: Optional[str],
        body: bytes
    ) -> bool:
        """
        Apply one webhook delivery.

        Mirrors are upserted on every delivery, redeliveries included; the event
        log gets at most one row per delivery id.

        Returns:
            True when the delivery id had already been logged.
        """
        if not delivery_id or not event_type:
            raise ValidationException("X-GitHub-Delivery and X-GitHub-Event headers are required")

        self._check_signature(signature, body)

        try:
            payload = json.loads(body)
        except ValueError:
            raise ValidationException("webhook payload is not valid JSON")
        if not isinstance(payload, dict):
            raise ValidationException("webhook payload must be a JSON object")

        repo_id = (payload.get("repository") or {}).get("full_name")

        try:
            await self._apply_to_mirrors(event_type, repo_id, payload)
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationException(f"malformed {event_type} payload: {e}")
        await self._repository.commit()

        if await self._repository.event_exists(delivery_id):
            logger.info("Duplicate delivery", extra={"delivery_id": delivery_id, "event_type": event_type})
            return True

        action, summary = summarize_event(event_type, payload)
        try:
            await self._repository.add_event(
                delivery_id=delivery_id,
                repo_id=repo_id,
                event_type=event_type,
                action=action,
                summary=summary,
                payload=body.decode("utf-8", errors="replace")
            )
            await self._repository.commit()
        except IntegrityError:
            await self._repository.rollback()
            logger.info("Concurrent duplicate delivery", extra={"delivery_id": delivery_id})
            return True

        logger.info(
            "Webhook processed",
            extra={"delivery_id": delivery_id, "event_type": event_type, "repo_id": repo_id}
        )
        return False

    def _check_signature(self, signature: Optional[str], body: bytes) -> None:
        if signature is not None:
            if not verify_signature(self._webhook_secret, body, signature):
                logger.warning("Webhook signature mismatch")
                raise WebhookSignatureException("invalid webhook signature")

    async def _apply_to_mirrors(self, event_type: str, repo_id: Optional[str], payload: Dict[str, Any]) -> None:
        if not repo_id:
            return

        if event_type == "pull_request" and payload.get("pull_request"):
            await self._repository.upsert_pull_request(repo_id, pull_request_fields(payload["pull_request"]))
        elif event_type == "issues" and payload.get("issue") and not is_pull_request(payload["issue"]):
            await self._repository.upsert_issue(repo_id, issue_fields(payload["issue"]))

    # ========== Scheduled resync ==========

    async def resync(self) -> Optional[Dict[str, int]]:
        """Re-poll every pull request and issue of the linked repository."""
        link = await self._repository.get_link()
        if link is None:
            return None

        ref = parse_repo_ref(link.repo_id)
        pulls = await self.list_pull_requests(ref, state="all")
        issues = await self.list_issues(ref, state="all")

        counts = {"pull_requests": len(pulls), "issues": len(issues)}
        logger.info("Mirrors resynced", extra={"repo_id": link.repo_id, **counts})
        return counts


class AutoTicketService:
    """Opens a ticket for every open issue that is not tracked yet."""

    def __init__(self, ticket_repository: ITicketRepository):
        self._tickets = ticket_repository

    async def create_missing(self, repo_url: str, issues: List[Dict[str, Any]]) -> List[Any]:
        created = []
        for issue in issues:
            if await self._tickets.exists_for_issue(issue["number"], repo_url):
                continue
            created.append(await self._tickets.create(
                id=generate_identifier("TICKET"),
                name=issue["title"],
                description=issue.get("body") or issue["title"],
                importance=Importance.MEDIUM,
                status=TicketStatus.OPEN,
                assignee=None,
                github_issue_number=issue["number"],
                github_repo_url=repo_url,
            ))
        return created
