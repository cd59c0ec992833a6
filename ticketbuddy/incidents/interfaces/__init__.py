"""
Incidents Interfaces Layer
==========================

Contains:
- Controllers: FastAPI route handlers
"""

from ticketbuddy.incidents.interfaces.controllers import incidents_router

__all__ = ["incidents_router"]
