"""
Incidents Infrastructure Repositories
=====================================

SQLAlchemy implementation of the incident repository.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ticketbuddy.incidents.application.services import IIncidentRepository
from ticketbuddy.incidents.infrastructure.models import IncidentModel


class SQLAlchemyIncidentRepository(IIncidentRepository):
    """SQLAlchemy implementation for incidents."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(
        self,
        incident_id: str,
        service: str,
        severity: str,
        summary: str,
        recommended_fix: str
    ) -> IncidentModel:
        model = IncidentModel(
            id=incident_id,
            service=service,
            severity=severity,
            summary=summary,
            recommended_fix=recommended_fix,
            created_at=datetime.now(timezone.utc)
        )

        self._session.add(model)
        await self._session.flush()

        return model

    async def list(
        self,
        service: Optional[str] = None,
        since: Optional[datetime] = None,
        limit: int = 50
    ) -> List[IncidentModel]:
        """Incidents matching the filters, newest first."""
        stmt = select(IncidentModel)

        if service:
            stmt = stmt.where(IncidentModel.service == service)
        if since is not None:
            stmt = stmt.where(IncidentModel.created_at >= since)

        stmt = stmt.order_by(IncidentModel.created_at.desc(), IncidentModel.id.desc()).limit(limit)

        result = await self._session.execute(stmt)
        return list(result.scalars().all())
