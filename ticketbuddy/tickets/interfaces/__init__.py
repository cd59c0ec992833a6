"""
Tickets Interfaces Layer
========================

Contains:
- Controllers: FastAPI route handlers
"""

from ticketbuddy.tickets.interfaces.controllers import tickets_router, get_llm_client

__all__ = ["tickets_router", "get_llm_client"]
