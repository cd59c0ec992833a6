"""
Incidents Infrastructure Models
===============================

SQLAlchemy ORM models for the incidents module.
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from ticketbuddy.infrastructure.database import Base


class IncidentModel(Base):
    """
    Database model for incidents.

    Maps to the 'incidents' table. Append-only; rows are never updated.
    """
    __tablename__ = "incidents"

    # Server generated, e.g. INC-482913-9f2c1a
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    service: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    severity: Mapped[str] = mapped_column(String(16), nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    recommended_fix: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        default=lambda: datetime.now(timezone.utc)
    )
