"""
Ticket Domain Entities
======================

Pure Python business objects for tickets and ticket classification.
"""

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Union


@dataclass
class TicketDraft:
    """
    A classified unit of work that has not been persisted yet.

    priority uses the ticket importance scale: 1 (low) to 3 (high).
    """
    title: str
    description: str
    priority: int
    assignee: Optional[str] = None

    def __post_init__(self):
        if self.priority not in (1, 2, 3):
            raise ValueError("Priority must be 1, 2 or 3")
        if not self.title.strip():
            raise ValueError("Draft title must not be empty")


@dataclass
class ParsedDrafts:
    """Drafts taken from a model reply that passed schema validation."""
    drafts: List[TicketDraft]
    model_used: str
    source: Literal["model"] = "model"


@dataclass
class FallbackDrafts:
    """Drafts produced by the keyword heuristics, with the reason the model path was skipped."""
    drafts: List[TicketDraft]
    reason: str
    source: Literal["heuristic"] = "heuristic"


ClassificationOutcome = Union[ParsedDrafts, FallbackDrafts]


@dataclass
class DomainRule:
    """One keyword group of the heuristic classifier."""
    key: str
    label: str
    pattern: str
    owner: str
    base_priority: int
    keywords_hint: List[str] = field(default_factory=list)


class TicketPromptBuilder:
    """
    Builds prompts for ticket classification.

    All prompt text lives here so the heuristics the model is asked to follow
    stay next to the ones the fallback implements.
    """

    SYSTEM_PROMPT = """You are the triage assistant of TicketBuddy, a ticket tracker for a software team.

Split the user's request into one or more actionable tickets. Create one ticket per
distinct area of work; do not invent work that was not asked for.

PRIORITY (integer):
- 3: security, payments, data loss, outages, or words like urgent, critical, emergency, asap
- 2: words like important, soon, core, blocking, or broken functionality with a workaround
- 1: cosmetic or polish work, or no urgency signal at all

ASSIGNEE (by area):
{owners}
- anything else: null

Respond ONLY with a JSON array, no prose:
[
    {{
        "title": "short imperative title",
        "description": "what needs to be done",
        "priority": 1,
        "assignee": "name or null"
    }}
]"""

    @classmethod
    def get_system_prompt(cls, rules: List[DomainRule]) -> str:
        """Get the system prompt, listing the owner of each domain."""
        owners = "\n".join(
            f"- {rule.label.lower()} ({', '.join(rule.keywords_hint)}): {rule.owner}"
            for rule in rules
        )
        return cls.SYSTEM_PROMPT.format(owners=owners)

    @classmethod
    def build_prompt(cls, description: str) -> str:
        """Build classification prompt from the free-text request."""
        return f"""Split this request into tickets (respond with a JSON array only).

Request:
{description}"""
