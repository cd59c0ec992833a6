"""
Incidents Application DTOs
==========================

Pydantic models for the incident list and the tool-call endpoint.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


SeverityStr = Literal["high", "medium", "low"]


# ========== Request DTOs ==========

class ToolCallRequest(BaseModel):
    """Request body of POST /mcp/call-tool."""
    tool: str = Field(..., min_length=1, description="Tool name")
    args: Dict[str, Any] = Field(default_factory=dict, description="Tool arguments")

    @field_validator("args", mode="before")
    @classmethod
    def default_args(cls, v: Any) -> Any:
        return {} if v is None else v


# ========== Response DTOs ==========

class IncidentInfo(BaseModel):
    """One incident as listed by GET /incidents."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    ticketId: str = Field(..., validation_alias="id")
    service: str
    severity: SeverityStr
    summary: str
    recommendedFix: str = Field(..., validation_alias="recommended_fix")
    created_at: datetime


class IncidentListResponse(BaseModel):
    """Response model for GET /incidents."""
    incidents: List[IncidentInfo]


class DiagnosticResponse(BaseModel):
    """Response of the summarize_checkout_health tool."""
    incidentFiled: bool = True
    ticketId: str
    severity: SeverityStr
    summary: str
    recommendedFix: str
    uiObservation: str
    created_at: datetime


class IncidentQuery(BaseModel):
    """Parsed /incidents query; unusable values have already been dropped."""
    service: Optional[str] = None
    since: Optional[datetime] = None
    limit: int = 50
