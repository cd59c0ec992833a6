"""
GitHub Application DTOs
=======================

Pydantic models for the GitHub bridge endpoints.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


# ========== Type Aliases for Literals ==========
MergeMethodStr = Literal["merge", "squash", "rebase"]
ListStateStr = Literal["open", "closed", "all"]
IssueStateStr = Literal["open", "closed"]


# ========== Request DTOs ==========

class LinkRequest(BaseModel):
    """Repository to link: ``owner/name`` or a github.com URL under any of three keys."""
    repo: Optional[str] = None
    url: Optional[str] = None
    repo_url: Optional[str] = None

    @model_validator(mode="after")
    def validate_reference(self) -> "LinkRequest":
        if not self.reference:
            raise ValueError("repo, url or repo_url is required")
        return self

    @property
    def reference(self) -> Optional[str]:
        for value in (self.repo, self.url, self.repo_url):
            if value and value.strip():
                return value.strip()
        return None


class MergeRequest(BaseModel):
    """
    Merge options. ``method`` and ``merge_method`` are synonyms; ``merge``
    is used when neither is given.
    """
    method: Optional[MergeMethodStr] = None
    merge_method: Optional[MergeMethodStr] = None
    sha: Optional[str] = Field(None, description="Head SHA the merge must match")
    ticket_id: Optional[str] = Field(None, description="Ticket to resolve after the merge")

    @property
    def resolved_method(self) -> str:
        return self.merge_method or self.method or "merge"


class IssueCreateRequest(BaseModel):
    """Request model for issue creation."""
    title: str = Field(..., min_length=1, max_length=1000)
    body: Optional[str] = None
    labels: Optional[List[str]] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be blank")
        return v.strip()


class IssueUpdateRequest(BaseModel):
    """Partial issue update; closing is ``{"state": "closed"}``."""
    state: Optional[IssueStateStr] = None
    title: Optional[str] = Field(None, min_length=1, max_length=1000)
    body: Optional[str] = None

    @field_validator("state", "title", mode="before")
    @classmethod
    def validate_not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v

    @model_validator(mode="after")
    def validate_not_empty(self) -> "IssueUpdateRequest":
        if not self.model_fields_set:
            raise ValueError("no fields to update")
        return self


class CommentRequest(BaseModel):
    body: str = Field(..., min_length=1, max_length=65536)

    @field_validator("body")
    @classmethod
    def validate_body(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("body must not be blank")
        return v


# ========== Response DTOs ==========

class RepoInfo(BaseModel):
    """The linked repository."""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., validation_alias=AliasChoices("repo_id", "id"))
    url: str
    default_branch: Optional[str] = None
    connected_at: datetime


class LinkResponse(BaseModel):
    success: bool = True
    repo: RepoInfo


class UnlinkResponse(BaseModel):
    success: bool = True


class EventInfo(BaseModel):
    """One entry of the local webhook event log."""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., validation_alias=AliasChoices("delivery_id", "id"))
    repo_id: Optional[str] = None
    type: str = Field(..., validation_alias=AliasChoices("event_type", "type"))
    action: Optional[str] = None
    summary: str
    created_at: datetime


class CountsInfo(BaseModel):
    openPRs: int = 0
    openIssues: int = 0


class SummaryResponse(BaseModel):
    """Connection status, live counts and the 10 most recent events."""
    connected: bool
    repo: Optional[RepoInfo] = None
    counts: CountsInfo = Field(default_factory=CountsInfo)
    recentEvents: List[EventInfo] = Field(default_factory=list)


class ConnectionTestResponse(BaseModel):
    ok: bool = True
    login: Optional[str] = None


class PullRequestInfo(BaseModel):
    """A pull request mirror row; ``id`` is the PR number."""
    model_config = ConfigDict(from_attributes=True)

    number: int
    repo_id: str
    title: str
    author: Optional[str] = None
    state: str
    merged: bool = False
    head_sha: Optional[str] = None
    html_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def id(self) -> int:
        return self.number


class IssueInfo(BaseModel):
    """An issue mirror row; ``id`` is the issue number."""
    model_config = ConfigDict(from_attributes=True)

    number: int
    repo_id: str
    title: str
    body: Optional[str] = None
    author: Optional[str] = None
    state: str
    html_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def id(self) -> int:
        return self.number


class PullRequestListResponse(BaseModel):
    prs: List[PullRequestInfo]


class IssueListResponse(BaseModel):
    issues: List[IssueInfo]


class EventListResponse(BaseModel):
    events: List[EventInfo]


class IssueResponse(BaseModel):
    success: bool = True
    issue: IssueInfo


class CommentInfo(BaseModel):
    id: int
    body: str
    author: Optional[str] = None
    html_url: Optional[str] = None
    created_at: Optional[datetime] = None


class CommentResponse(BaseModel):
    success: bool = True
    comment: CommentInfo


class MergeResponse(BaseModel):
    """
    Result of a confirmed merge.

    ``ticketResolved`` is None when no ticket was named, False when the
    ticket write failed after the merge.
    """
    success: bool = True
    merged: bool = True
    sha: Optional[str] = None
    message: Optional[str] = None
    ticket_id: Optional[str] = None
    ticketResolved: Optional[bool] = None


class WebhookResponse(BaseModel):
    ok: bool = True
    event: str
    delivery: str
    duplicate: bool = False
