"""
Incidents Infrastructure Layer
==============================

Contains:
- Models: SQLAlchemy ORM models
- Repositories: Data access implementations
"""

from ticketbuddy.incidents.infrastructure.models import IncidentModel
from ticketbuddy.incidents.infrastructure.repositories import SQLAlchemyIncidentRepository

__all__ = [
    "IncidentModel",
    "SQLAlchemyIncidentRepository",
]
