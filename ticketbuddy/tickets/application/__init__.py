"""
Tickets Application Layer
=========================

Contains:
- Services: submission, classification and update orchestration
- DTOs: Data transfer objects for API serialization
"""

from ticketbuddy.tickets.application.dto import (
    TicketCreateRequest,
    TicketUpdateRequest,
    ModelDraft,
    TicketInfo,
    TicketListResponse,
    TicketCreateResponse,
    TicketUpdateResponse,
)
from ticketbuddy.tickets.application.services import (
    ClassificationService,
    TicketService,
    ITicketRepository,
    extract_json_array,
    parse_model_drafts,
)

__all__ = [
    # DTOs
    "TicketCreateRequest",
    "TicketUpdateRequest",
    "ModelDraft",
    "TicketInfo",
    "TicketListResponse",
    "TicketCreateResponse",
    "TicketUpdateResponse",
    # Services
    "ClassificationService",
    "TicketService",
    "extract_json_array",
    "parse_model_drafts",
    # Repository Interfaces
    "ITicketRepository",
]
