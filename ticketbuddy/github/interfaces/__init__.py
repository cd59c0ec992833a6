"""
GitHub Interfaces Layer
=======================

Contains:
- Controllers: FastAPI route handlers
"""

from ticketbuddy.github.interfaces.controllers import (
    github_router,
    get_github_client,
    create_issue_tickets,
)

__all__ = ["github_router", "get_github_client", "create_issue_tickets"]
