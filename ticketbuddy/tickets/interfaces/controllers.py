"""
Ticket Controllers (API Routes)
===============================

FastAPI routes for ticket endpoints.

Controllers are thin - they delegate to application services.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ticketbuddy.infrastructure.database import get_session
from ticketbuddy.infrastructure.llm import ILLMClient
from ticketbuddy.shared.infrastructure.logging import get_logger
from ticketbuddy.tickets.application import (
    ClassificationService,
    TicketService,
    TicketCreateRequest,
    TicketUpdateRequest,
    TicketInfo,
    TicketListResponse,
    TicketCreateResponse,
    TicketUpdateResponse,
)
from ticketbuddy.tickets.infrastructure import SQLAlchemyTicketRepository

logger = get_logger(__name__)
router = APIRouter(prefix="/tickets", tags=["Tickets"])


# ========== Example payloads for Swagger ==========

CREATE_RESPONSE_EXAMPLE = {
    "success": True,
    "tickets": [
        {
            "id": "TICKET-482913-9f2c1a",
            "name": "Authentication: Users cannot log in this is",
            "description": "Users cannot log in, this is urgent",
            "importance": 3,
            "status": "open",
            "assignee": "Alex",
            "github_issue_number": None,
            "github_pr_number": None,
            "github_repo_url": None,
            "createdAt": "2026-10-19T10:00:00+00:00",
            "updatedAt": "2026-10-19T10:00:00+00:00"
        }
    ],
    "count": 1,
    "source": "heuristic"
}


# ========== Dependencies ==========

def get_llm_client(request: Request) -> Optional[ILLMClient]:
    """LLM client built at startup; None when no model is configured."""
    return getattr(request.app.state, "llm_client", None)


async def get_ticket_service(
    session: AsyncSession = Depends(get_session),
    llm_client: Optional[ILLMClient] = Depends(get_llm_client)
) -> TicketService:
    """Get ticket service instance."""
    return TicketService(
        SQLAlchemyTicketRepository(session),
        ClassificationService(llm_client)
    )


# ========== Route Handlers ==========

@router.get("", response_model=TicketListResponse, summary="List tickets (newest first)")
async def list_tickets(service: TicketService = Depends(get_ticket_service)):
    tickets = await service.list_tickets()
    return TicketListResponse(tickets=[TicketInfo.model_validate(t) for t in tickets])


@router.post(
    "",
    response_model=TicketCreateResponse,
    summary="Submit a request",
    description="""
    Submit a free-text request.

    - Only `description`: the request is split into tickets by the language model,
      falling back to keyword heuristics. Always creates at least one ticket.
    - With `name`: exactly one ticket is created from the given fields.
    """,
    responses={
        200: {
            "description": "Tickets created",
            "content": {"application/json": {"example": CREATE_RESPONSE_EXAMPLE}}
        }
    }
)
async def create_tickets(
    request: Request,
    payload: TicketCreateRequest,
    service: TicketService = Depends(get_ticket_service)
):
    tickets, source = await service.submit(payload)

    logger.info(
        "Tickets created",
        extra={
            "correlation_id": getattr(request.state, "correlation_id", "unknown"),
            "count": len(tickets),
            "source": source,
            "ticket_ids": [t.id for t in tickets]
        }
    )

    return TicketCreateResponse(
        tickets=[TicketInfo.model_validate(t) for t in tickets],
        count=len(tickets),
        source=source
    )


@router.get("/{ticket_id}", response_model=TicketInfo, summary="Get one ticket")
async def get_ticket(ticket_id: str, service: TicketService = Depends(get_ticket_service)):
    ticket = await service.get_ticket(ticket_id)
    return TicketInfo.model_validate(ticket)


@router.patch(
    "/{ticket_id}",
    response_model=TicketUpdateResponse,
    summary="Update ticket fields",
    description="""
    Partial update. Any of `name`, `description`, `importance` (1-3),
    `status` (`open`, `in-progress`, `qa`, `resolved`) and `assignee`.
    Status values are accepted in any order.
    """
)
async def update_ticket(
    ticket_id: str,
    payload: TicketUpdateRequest,
    service: TicketService = Depends(get_ticket_service)
):
    fields = payload.model_dump(exclude_unset=True)
    ticket = await service.update_ticket(ticket_id, fields)

    logger.info(
        "Ticket updated",
        extra={"ticket_id": ticket_id, "fields": sorted(fields)}
    )

    return TicketUpdateResponse(ticket=TicketInfo.model_validate(ticket))


# Export router for inclusion in main app
tickets_router = router
