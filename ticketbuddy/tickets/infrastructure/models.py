"""
Tickets Infrastructure Models
=============================

SQLAlchemy ORM models for the tickets module.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from ticketbuddy.infrastructure.database import Base
from ticketbuddy.config import TicketStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TicketModel(Base):
    """
    Database model for tickets.

    Maps to the 'tickets' table. Rows are never deleted.
    """
    __tablename__ = "tickets"

    # Server generated, e.g. TICKET-482913-9f2c1a
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    name: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    importance: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=TicketStatus.OPEN)
    assignee: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # GitHub back-references
    github_issue_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    github_pr_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    github_repo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
