"""
Copilot Interfaces Layer
========================
"""

from ticketbuddy.copilot.interfaces.controllers import copilot_router

__all__ = ["copilot_router"]
