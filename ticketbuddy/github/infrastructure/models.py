"""
GitHub Infrastructure Models
============================

SQLAlchemy ORM models for the GitHub bridge: the repository link, the
webhook event log and the pull request / issue mirrors.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ticketbuddy.infrastructure.database import Base

# The link table holds at most this one row
REPO_LINK_ID = 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RepoLinkModel(Base):
    """
    The linked repository.

    Maps to the 'github_repo_link' table. Linking replaces the row,
    unlinking deletes it.
    """
    __tablename__ = "github_repo_link"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=REPO_LINK_ID)

    repo_id: Mapped[str] = mapped_column(String(255), nullable=False)  # owner/name
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    default_branch: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    connected_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class GitHubEventModel(Base):
    """
    One webhook delivery.

    Maps to the 'github_events' table. The delivery id is the primary key, so a
    redelivery cannot add a second row.
    """
    __tablename__ = "github_events"

    delivery_id: Mapped[str] = mapped_column(String(255), primary_key=True)

    repo_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    action: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)  # raw JSON text

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True, default=utcnow)


class PullRequestModel(Base):
    """
    Local mirror of a pull request.

    Maps to the 'github_pull_requests' table, keyed by (repo_id, number).
    """
    __tablename__ = "github_pull_requests"

    repo_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    number: Mapped[int] = mapped_column(Integer, primary_key=True)

    title: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    author: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    state: Mapped[str] = mapped_column(String(16), nullable=False, default="open")
    merged: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    head_sha: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    html_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    synced_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class IssueModel(Base):
    """
    Local mirror of an issue.

    Maps to the 'github_issues' table, keyed by (repo_id, number).
    """
    __tablename__ = "github_issues"

    repo_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    number: Mapped[int] = mapped_column(Integer, primary_key=True)

    title: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    author: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    state: Mapped[str] = mapped_column(String(16), nullable=False, default="open")
    html_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    synced_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
