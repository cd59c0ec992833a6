"""
Tickets Infrastructure Repositories
===================================

SQLAlchemy implementation of the ticket repository.
"""

from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ticketbuddy.tickets.application.services import ITicketRepository
from ticketbuddy.tickets.infrastructure.models import TicketModel, utcnow


class SQLAlchemyTicketRepository(ITicketRepository):
    """SQLAlchemy implementation for tickets."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, ticket_id: str) -> Optional[TicketModel]:
        """Get ticket by id."""
        return await self._session.get(TicketModel, ticket_id)

    async def list(self) -> List[TicketModel]:
        """All tickets, newest first."""
        stmt = select(TicketModel).order_by(TicketModel.created_at.desc(), TicketModel.id.desc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, **fields: Any) -> TicketModel:
        """Insert a ticket; createdAt and updatedAt start out equal."""
        now = utcnow()
        model = TicketModel(created_at=now, updated_at=now, **fields)

        self._session.add(model)
        await self._session.flush()

        return model

    async def update(self, ticket_id: str, **fields: Any) -> Optional[TicketModel]:
        """Apply a partial update and bump updatedAt."""
        model = await self.get_by_id(ticket_id)
        if model is None:
            return None

        for key, value in fields.items():
            setattr(model, key, value)
        model.updated_at = utcnow()

        await self._session.flush()

        return model

    async def exists_for_issue(self, issue_number: int, repo_url: str) -> bool:
        """Check whether a ticket already tracks a GitHub issue."""
        stmt = select(TicketModel.id).where(
            TicketModel.github_issue_number == issue_number,
            TicketModel.github_repo_url == repo_url
        ).limit(1)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None
