"""
Tickets Application Services
============================

Application services for ticket submission, classification and updates.

Orchestrates business logic between domain entities and repositories.
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from pydantic import TypeAdapter, ValidationError

from ticketbuddy.config import TicketStatus
from ticketbuddy.core import ResourceNotFoundException
from ticketbuddy.core.identifiers import generate_identifier
from ticketbuddy.infrastructure.llm import ILLMClient
from ticketbuddy.shared.infrastructure.logging import get_logger
from ticketbuddy.tickets.application.dto import ModelDraft, TicketCreateRequest
from ticketbuddy.tickets.domain import (
    DOMAIN_RULES,
    ClassificationOutcome,
    FallbackDrafts,
    ParsedDrafts,
    TicketDraft,
    TicketPromptBuilder,
    heuristic_drafts,
)

logger = get_logger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
_DRAFT_LIST = TypeAdapter(List[ModelDraft])


# ========== Repository Interfaces ==========

class ITicketRepository(ABC):
    """Interface for ticket data access."""

    @abstractmethod
    async def get_by_id(self, ticket_id: str) -> Optional[Any]:
        """Get ticket by id."""

    @abstractmethod
    async def list(self) -> List[Any]:
        """All tickets, newest first."""

    @abstractmethod
    async def create(self, **fields: Any) -> Any:
        """Insert a new ticket row."""

    @abstractmethod
    async def update(self, ticket_id: str, **fields: Any) -> Optional[Any]:
        """Apply a partial update; returns None when the ticket does not exist."""

    @abstractmethod
    async def exists_for_issue(self, issue_number: int, repo_url: str) -> bool:
        """Check whether a ticket already tracks a GitHub issue."""


# ========== Model Output Parsing ==========

def extract_json_array(text: str) -> Optional[str]:
    """
    Pull the first JSON array out of a model reply.

    Code fences are dropped and anything before the first ``[`` or after the
    last ``]`` is ignored.
    """
    cleaned = _CODE_FENCE.sub("", text).strip()
    start = cleaned.find("[")
    end = cleaned.rfind("]")
    if start == -1 or end <= start:
        return None
    return cleaned[start:end + 1]


def parse_model_drafts(text: str, description: str) -> List[TicketDraft]:
    """
    Validate a model reply against the draft schema.

    Raises:
        ValueError: reply is not a non-empty JSON array of valid drafts
    """
    fragment = extract_json_array(text)
    if fragment is None:
        raise ValueError("no JSON array in model reply")

    try:
        payload = json.loads(fragment)
    except json.JSONDecodeError as e:
        raise ValueError(f"model reply is not valid JSON: {e}")

    if not isinstance(payload, list) or not payload:
        raise ValueError("model reply is not a non-empty array")

    try:
        items = _DRAFT_LIST.validate_python(payload)
    except ValidationError as e:
        raise ValueError(f"model reply failed schema validation: {e.error_count()} error(s)")

    return [
        TicketDraft(
            title=item.title,
            description=item.description.strip() or description,
            priority=item.priority,
            assignee=(item.assignee or "").strip() or None,
        )
        for item in items
    ]


# ========== Application Services ==========

class ClassificationService:
    """
    Service for splitting a free-text request into ticket drafts.

    Tries the language model once and falls back to the keyword heuristics.
    ``classify`` never raises.
    """

    def __init__(self, llm_client: Optional[ILLMClient]):
        self._llm = llm_client

    async def classify(self, description: str) -> ClassificationOutcome:
        if self._llm is None:
            return FallbackDrafts(heuristic_drafts(description), reason="model not configured")

        messages = [
            {"role": "system", "content": TicketPromptBuilder.get_system_prompt(DOMAIN_RULES)},
            {"role": "user", "content": TicketPromptBuilder.build_prompt(description)}
        ]

        try:
            response = await self._llm.chat_completion(
                messages=messages,
                temperature=0.2,
                max_tokens=800,
                operation="classification"
            )
        except Exception as e:
            logger.warning(
                "Classification model call failed, using heuristics",
                extra={"error": str(e)}
            )
            return FallbackDrafts(heuristic_drafts(description), reason=f"model call failed: {e}")

        try:
            drafts = parse_model_drafts(response.content, description)
        except ValueError as e:
            logger.warning(
                "Classification reply rejected, using heuristics",
                extra={"error": str(e), "reply_preview": response.content[:200]}
            )
            return FallbackDrafts(heuristic_drafts(description), reason=str(e))

        return ParsedDrafts(drafts, model_used=response.model)


class TicketService:
    """Ticket submission and updates."""

    def __init__(self, repository: ITicketRepository, classifier: ClassificationService):
        self._repository = repository
        self._classifier = classifier

    async def list_tickets(self) -> List[Any]:
        return await self._repository.list()

    async def get_ticket(self, ticket_id: str) -> Any:
        ticket = await self._repository.get_by_id(ticket_id)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        return ticket

    async def submit(self, request: TicketCreateRequest) -> tuple[List[Any], str]:
        """
        Create tickets for a submission.

        Returns:
            The created rows and the source of their fields
            (``manual``, ``model`` or ``heuristic``).
        """
        if request.name:
            ticket = await self._repository.create(
                id=generate_identifier("TICKET"),
                name=request.name.strip(),
                description=request.description,
                importance=request.importance,
                status=TicketStatus.OPEN,
                assignee=request.assignee,
            )
            return [ticket], "manual"

        outcome = await self._classifier.classify(request.description)
        if isinstance(outcome, FallbackDrafts):
            logger.info(
                "Tickets classified by heuristics",
                extra={"reason": outcome.reason, "draft_count": len(outcome.drafts)}
            )

        created = []
        for draft in outcome.drafts:
            created.append(await self._repository.create(
                id=generate_identifier("TICKET"),
                name=draft.title,
                description=draft.description,
                importance=draft.priority,
                status=TicketStatus.OPEN,
                assignee=draft.assignee,
            ))
        return created, outcome.source

    async def update_ticket(self, ticket_id: str, fields: dict) -> Any:
        ticket = await self._repository.update(ticket_id, **fields)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        return ticket
