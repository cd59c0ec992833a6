"""
Tickets Domain Layer
====================

Contains:
- Entities: TicketDraft and the tagged classification outcome
- Heuristics: keyword rules used when the model path fails
- Prompt builder for the classification model call

This layer is framework-agnostic and contains pure business logic.
"""

from ticketbuddy.tickets.domain.entities import (
    TicketDraft,
    ParsedDrafts,
    FallbackDrafts,
    ClassificationOutcome,
    DomainRule,
    TicketPromptBuilder,
)
from ticketbuddy.tickets.domain.heuristics import (
    DOMAIN_RULES,
    detect_priority,
    summarize_title,
    heuristic_drafts,
)

__all__ = [
    "TicketDraft",
    "ParsedDrafts",
    "FallbackDrafts",
    "ClassificationOutcome",
    "DomainRule",
    "TicketPromptBuilder",
    "DOMAIN_RULES",
    "detect_priority",
    "summarize_title",
    "heuristic_drafts",
]
