"""
Copilot Domain
==============

Prompt construction for the dashboard chat assistant.
"""

from typing import Dict, List, Optional


class CopilotPromptBuilder:
    """Builds the system prompt prepended to every copilot conversation."""

    SYSTEM_PROMPT = """You are TicketBuddy Copilot, the assistant built into the TicketBuddy dashboard.

TicketBuddy tracks work as tickets. Each ticket has a name, a description,
an importance from 1 (low) to 3 (high), an assignee and a status that is one of
open, in-progress, qa or resolved. Free-text requests are split into tickets
automatically. A GitHub repository can be linked to list and merge pull
requests, open and close issues, and resolve tickets when their PR is merged.
A checkout diagnostic files incidents with a severity and a recommended fix.

Answer briefly and concretely. When the user asks for an action the dashboard
performs, explain where to do it instead of claiming you did it."""

    @classmethod
    def build_context_note(
        cls,
        page: Optional[str] = None,
        tickets_count: Optional[int] = None,
        github_connected: Optional[bool] = None
    ) -> Optional[str]:
        parts = []
        if page:
            parts.append(f"The user is on the {page} page.")
        if tickets_count is not None:
            parts.append(f"There are {tickets_count} tickets.")
        if github_connected is not None:
            parts.append("A GitHub repository is linked." if github_connected else "No GitHub repository is linked.")
        return " ".join(parts) or None

    @classmethod
    def build_messages(cls, transcript: List[Dict[str, str]], context_note: Optional[str]) -> List[Dict[str, str]]:
        system = cls.SYSTEM_PROMPT
        if context_note:
            system = f"{system}\n\nCurrent context: {context_note}"
        return [{"role": "system", "content": system}, *transcript]
