"""
Copilot Application Layer
=========================
"""

from ticketbuddy.copilot.application.dto import (
    ChatMessage,
    CopilotContext,
    CopilotRequest,
    CopilotResponse,
)
from ticketbuddy.copilot.application.services import CopilotService

__all__ = [
    "ChatMessage",
    "CopilotContext",
    "CopilotRequest",
    "CopilotResponse",
    "CopilotService",
]
