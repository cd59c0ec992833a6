"""
Tickets Application DTOs
========================

Pydantic models for request/response validation, plus the strict schema the
classification model's reply must satisfy.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, field_validator, model_validator


# ========== Type Aliases for Literals ==========
TicketStatusStr = Literal["open", "in-progress", "qa", "resolved"]
ImportanceInt = Literal[1, 2, 3]
ClassificationSourceStr = Literal["model", "heuristic", "manual"]


# ========== Request DTOs ==========

class TicketCreateRequest(BaseModel):
    """
    Request model for ticket submission.

    With only a description the request is classified into one or more tickets.
    Supplying a name creates exactly that ticket.
    """
    description: str = Field(..., min_length=1, max_length=10000, description="Free-text request")
    name: Optional[str] = Field(None, max_length=500, description="Ticket title (manual mode)")
    importance: Optional[ImportanceInt] = Field(None, description="1=low, 2=medium, 3=high")
    assignee: Optional[str] = Field(None, max_length=255, description="Team member name")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("description must not be blank")
        return v.strip()


class TicketUpdateRequest(BaseModel):
    """Partial update; only the fields present in the body are written."""
    name: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, min_length=1, max_length=10000)
    importance: Optional[ImportanceInt] = None
    status: Optional[TicketStatusStr] = None
    assignee: Optional[str] = Field(None, max_length=255)

    @field_validator("description", "status", mode="before")
    @classmethod
    def validate_not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v

    @model_validator(mode="after")
    def validate_not_empty(self) -> "TicketUpdateRequest":
        if not self.model_fields_set:
            raise ValueError("no fields to update")
        return self


# ========== Model Output Schema ==========

class ModelDraft(BaseModel):
    """One element of the JSON array the classification model must return."""
    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(default="")
    priority: StrictInt = Field(..., ge=1, le=3)
    assignee: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be blank")
        return v.strip()


# ========== Response DTOs ==========

class TicketInfo(BaseModel):
    """Ticket as returned by the API."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    name: Optional[str] = None
    description: str
    importance: Optional[int] = None
    status: str
    assignee: Optional[str] = None
    github_issue_number: Optional[int] = None
    github_pr_number: Optional[int] = None
    github_repo_url: Optional[str] = None
    created_at: datetime = Field(
        ..., validation_alias=AliasChoices("created_at", "createdAt"), serialization_alias="createdAt"
    )
    updated_at: datetime = Field(
        ..., validation_alias=AliasChoices("updated_at", "updatedAt"), serialization_alias="updatedAt"
    )


class TicketListResponse(BaseModel):
    tickets: List[TicketInfo]


class TicketCreateResponse(BaseModel):
    success: bool = True
    tickets: List[TicketInfo]
    count: int
    source: ClassificationSourceStr


class TicketUpdateResponse(BaseModel):
    success: bool = True
    ticket: TicketInfo
