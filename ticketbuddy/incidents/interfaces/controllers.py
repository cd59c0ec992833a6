"""
Incident Controllers (API Routes)
=================================

FastAPI routes for the incident log and the diagnostic tool endpoint.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ticketbuddy.infrastructure.database import get_session
from ticketbuddy.infrastructure.llm import ILLMClient
from ticketbuddy.incidents.application import (
    DiagnosticResponse,
    DiagnosticService,
    IncidentInfo,
    IncidentListResponse,
    IncidentService,
    ToolCallRequest,
    build_incident_query,
)
from ticketbuddy.incidents.infrastructure import SQLAlchemyIncidentRepository
from ticketbuddy.shared.infrastructure.logging import get_logger
from ticketbuddy.tickets.interfaces import get_llm_client

logger = get_logger(__name__)
router = APIRouter(tags=["Incidents"])


# ========== Dependencies ==========

async def get_incident_service(session: AsyncSession = Depends(get_session)) -> IncidentService:
    return IncidentService(SQLAlchemyIncidentRepository(session))


async def get_diagnostic_service(
    session: AsyncSession = Depends(get_session),
    llm_client: Optional[ILLMClient] = Depends(get_llm_client)
) -> DiagnosticService:
    return DiagnosticService(SQLAlchemyIncidentRepository(session), llm_client)


# ========== Route Handlers ==========

@router.get(
    "/incidents",
    response_model=IncidentListResponse,
    summary="List incidents",
    description="""
    Newest first. `limit` defaults to 50 and is clamped to 200; a non-numeric
    or non-positive limit and an unparseable `since` are ignored.
    """
)
async def list_incidents(
    service: Optional[str] = Query(None, description="Only incidents of this service"),
    limit: Optional[str] = Query(None, description="Maximum rows (default 50, max 200)"),
    since: Optional[str] = Query(None, description="ISO-8601 lower bound on created_at"),
    incident_service: IncidentService = Depends(get_incident_service)
):
    query = build_incident_query(service, limit, since)
    incidents = await incident_service.list_incidents(query)
    return IncidentListResponse(incidents=[IncidentInfo.model_validate(i) for i in incidents])


@router.post(
    "/mcp/call-tool",
    response_model=DiagnosticResponse,
    summary="Invoke a diagnostic tool",
    description="Only `summarize_checkout_health` is available; other names answer 400."
)
async def call_tool(
    payload: ToolCallRequest,
    diagnostics: DiagnosticService = Depends(get_diagnostic_service)
):
    logger.info("Tool call received", extra={"tool": payload.tool})
    return await diagnostics.call_tool(payload.tool, payload.args)


# Export router for inclusion in main app
incidents_router = router
