"""
TicketBuddy
===========

Ticket tracking API with AI-assisted triage and GitHub integration.
"""

__version__ = "1.0.0"
