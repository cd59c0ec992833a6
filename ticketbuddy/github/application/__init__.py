"""
GitHub Application Layer
========================

Contains:
- DTOs: Request/response models
- Services: GitHub bridge orchestration and issue auto-tickets
"""

from ticketbuddy.github.application.dto import (
    LinkRequest,
    MergeRequest,
    IssueCreateRequest,
    IssueUpdateRequest,
    CommentRequest,
    ListStateStr,
    RepoInfo,
    LinkResponse,
    UnlinkResponse,
    EventInfo,
    CountsInfo,
    SummaryResponse,
    ConnectionTestResponse,
    PullRequestInfo,
    IssueInfo,
    PullRequestListResponse,
    IssueListResponse,
    EventListResponse,
    IssueResponse,
    CommentInfo,
    CommentResponse,
    MergeResponse,
    WebhookResponse,
)
from ticketbuddy.github.application.services import (
    IGitHubRepository,
    GitHubService,
    AutoTicketService,
    require_repo_ref,
)

__all__ = [
    # DTOs
    "LinkRequest",
    "MergeRequest",
    "IssueCreateRequest",
    "IssueUpdateRequest",
    "CommentRequest",
    "ListStateStr",
    "RepoInfo",
    "LinkResponse",
    "UnlinkResponse",
    "EventInfo",
    "CountsInfo",
    "SummaryResponse",
    "ConnectionTestResponse",
    "PullRequestInfo",
    "IssueInfo",
    "PullRequestListResponse",
    "IssueListResponse",
    "EventListResponse",
    "IssueResponse",
    "CommentInfo",
    "CommentResponse",
    "MergeResponse",
    "WebhookResponse",
    # Services
    "IGitHubRepository",
    "GitHubService",
    "AutoTicketService",
    "require_repo_ref",
]
