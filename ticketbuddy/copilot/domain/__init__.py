"""
Copilot Domain Layer
====================
"""

from ticketbuddy.copilot.domain.entities import CopilotPromptBuilder

__all__ = ["CopilotPromptBuilder"]
