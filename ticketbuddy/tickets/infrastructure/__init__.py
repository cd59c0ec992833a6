"""
Tickets Infrastructure Layer
============================

Contains:
- Models: SQLAlchemy ORM models
- Repositories: Data access implementations
"""

from ticketbuddy.tickets.infrastructure.models import TicketModel
from ticketbuddy.tickets.infrastructure.repositories import SQLAlchemyTicketRepository

__all__ = [
    "TicketModel",
    "SQLAlchemyTicketRepository",
]
