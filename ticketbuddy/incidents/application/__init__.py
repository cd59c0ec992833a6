"""
Incidents Application Layer
===========================

Contains:
- DTOs: Request/response models
- Services: Diagnostic tool invocation and incident listing
"""

from ticketbuddy.incidents.application.dto import (
    ToolCallRequest,
    IncidentInfo,
    IncidentListResponse,
    DiagnosticResponse,
    IncidentQuery,
)
from ticketbuddy.incidents.application.services import (
    IIncidentRepository,
    IncidentService,
    DiagnosticService,
    build_incident_query,
    parse_limit,
    parse_since,
)

__all__ = [
    # DTOs
    "ToolCallRequest",
    "IncidentInfo",
    "IncidentListResponse",
    "DiagnosticResponse",
    "IncidentQuery",
    # Services
    "IIncidentRepository",
    "IncidentService",
    "DiagnosticService",
    "build_incident_query",
    "parse_limit",
    "parse_since",
]
