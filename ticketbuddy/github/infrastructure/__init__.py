"""
GitHub Infrastructure Layer
===========================

Contains:
- Client: async GitHub REST client (httpx)
- Models: link, event log and mirror tables
- Repositories: Data access implementations
- Scheduler: periodic mirror resync (APScheduler)
"""

from ticketbuddy.github.infrastructure.client import GitHubClient
from ticketbuddy.github.infrastructure.models import (
    GitHubEventModel,
    IssueModel,
    PullRequestModel,
    RepoLinkModel,
)
from ticketbuddy.github.infrastructure.repositories import SQLAlchemyGitHubRepository
from ticketbuddy.github.infrastructure.scheduler import ResyncRun, ResyncScheduler

__all__ = [
    "GitHubClient",
    "GitHubEventModel",
    "IssueModel",
    "PullRequestModel",
    "RepoLinkModel",
    "SQLAlchemyGitHubRepository",
    "ResyncRun",
    "ResyncScheduler",
]
