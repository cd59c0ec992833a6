"""
GitHub Infrastructure Repositories
==================================

SQLAlchemy implementation of the GitHub bridge repository.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ticketbuddy.github.application.services import IGitHubRepository
from ticketbuddy.github.infrastructure.models import (
    REPO_LINK_ID,
    GitHubEventModel,
    IssueModel,
    PullRequestModel,
    RepoLinkModel,
    utcnow,
)


class SQLAlchemyGitHubRepository(IGitHubRepository):
    """SQLAlchemy implementation for the link, event log and mirrors."""

    def __init__(self, session: AsyncSession):
        self._session = session

    # ========== Link ==========

    async def get_link(self) -> Optional[RepoLinkModel]:
        return await self._session.get(RepoLinkModel, REPO_LINK_ID)

    async def replace_link(self, repo_id: str, url: str, default_branch: Optional[str]) -> RepoLinkModel:
        """Overwrite the single link row."""
        link = await self.get_link()
        if link is None:
            link = RepoLinkModel(id=REPO_LINK_ID)
            self._session.add(link)

        link.repo_id = repo_id
        link.url = url
        link.default_branch = default_branch
        link.connected_at = utcnow()

        await self._session.flush()
        return link

    async def delete_link(self) -> None:
        await self._session.execute(delete(RepoLinkModel))

    # ========== Mirrors ==========

    async def upsert_pull_request(self, repo_id: str, fields: Dict[str, Any]) -> PullRequestModel:
        number = fields["number"]
        model = await self._session.get(PullRequestModel, (repo_id, number))
        if model is None:
            model = PullRequestModel(repo_id=repo_id, number=number)
            self._session.add(model)

        for key, value in fields.items():
            if key != "number":
                setattr(model, key, value)
        model.synced_at = utcnow()

        await self._session.flush()
        return model

    async def upsert_issue(self, repo_id: str, fields: Dict[str, Any]) -> IssueModel:
        number = fields["number"]
        model = await self._session.get(IssueModel, (repo_id, number))
        if model is None:
            model = IssueModel(repo_id=repo_id, number=number)
            self._session.add(model)

        for key, value in fields.items():
            if key != "number":
                setattr(model, key, value)
        model.synced_at = utcnow()

        await self._session.flush()
        return model

    async def mark_merged(self, repo_id: str, number: int) -> bool:
        """Close a mirrored pull request as merged; False when it is not mirrored."""
        model = await self._session.get(PullRequestModel, (repo_id, number))
        if model is None:
            return False

        model.state = "closed"
        model.merged = True
        model.synced_at = utcnow()

        await self._session.flush()
        return True

    async def count_open(self, repo_id: str) -> Tuple[int, int]:
        """Open pull requests and open issues in the mirrors."""
        prs = await self._session.scalar(
            select(func.count()).select_from(PullRequestModel).where(
                PullRequestModel.repo_id == repo_id,
                PullRequestModel.state == "open"
            )
        )
        issues = await self._session.scalar(
            select(func.count()).select_from(IssueModel).where(
                IssueModel.repo_id == repo_id,
                IssueModel.state == "open"
            )
        )
        return prs or 0, issues or 0

    # ========== Event log ==========

    async def event_exists(self, delivery_id: str) -> bool:
        return await self._session.get(GitHubEventModel, delivery_id) is not None

    async def add_event(
        self,
        delivery_id: str,
        repo_id: Optional[str],
        event_type: str,
        action: Optional[str],
        summary: str,
        payload: str
    ) -> GitHubEventModel:
        model = GitHubEventModel(
            delivery_id=delivery_id,
            repo_id=repo_id,
            event_type=event_type,
            action=action,
            summary=summary,
            payload=payload,
            created_at=utcnow()
        )
        self._session.add(model)
        await self._session.flush()
        return model

    async def list_events(self, repo_id: Optional[str], limit: int) -> List[GitHubEventModel]:
        """Most recent events first; all repositories when repo_id is None."""
        stmt = select(GitHubEventModel)
        if repo_id is not None:
            stmt = stmt.where(GitHubEventModel.repo_id == repo_id)
        stmt = stmt.order_by(GitHubEventModel.created_at.desc()).limit(limit)

        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    # ========== Unit of work ==========

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
