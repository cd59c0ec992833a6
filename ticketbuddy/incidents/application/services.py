"""
Incidents Application Services
==============================

Diagnostic tool invocation and incident queries.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ticketbuddy.config import settings
from ticketbuddy.core import ValidationException
from ticketbuddy.core.identifiers import generate_identifier
from ticketbuddy.incidents.application.dto import DiagnosticResponse, IncidentQuery
from ticketbuddy.incidents.domain import (
    CHECKOUT_REPORT,
    CHECKOUT_TOOL,
    UI_OBSERVATION,
    DiagnosticPromptBuilder,
    load_log_sample,
)
from ticketbuddy.infrastructure.llm import ILLMClient
from ticketbuddy.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

DEFAULT_INCIDENT_LIMIT = 50
MAX_INCIDENT_LIMIT = 200


# ========== Repository Interfaces ==========

class IIncidentRepository(ABC):
    """Interface for incident data access."""

    @abstractmethod
    async def create(
        self,
        incident_id: str,
        service: str,
        severity: str,
        summary: str,
        recommended_fix: str
    ) -> Any:
        """Append an incident."""

    @abstractmethod
    async def list(
        self,
        service: Optional[str] = None,
        since: Optional[datetime] = None,
        limit: int = DEFAULT_INCIDENT_LIMIT
    ) -> List[Any]:
        """Incidents matching the filters, newest first."""


# ========== Query Parsing ==========

def parse_limit(raw: Optional[str]) -> int:
    """Positive integers are clamped to 200; anything else means the default."""
    if raw is None:
        return DEFAULT_INCIDENT_LIMIT
    try:
        value = int(raw.strip())
    except ValueError:
        return DEFAULT_INCIDENT_LIMIT
    if value <= 0:
        return DEFAULT_INCIDENT_LIMIT
    return min(value, MAX_INCIDENT_LIMIT)


def parse_since(raw: Optional[str]) -> Optional[datetime]:
    """ISO-8601 timestamp in UTC, or None when absent or unparseable."""
    if not raw:
        return None
    try:
        value = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def build_incident_query(
    service: Optional[str],
    limit: Optional[str],
    since: Optional[str]
) -> IncidentQuery:
    return IncidentQuery(
        service=service or None,
        since=parse_since(since),
        limit=parse_limit(limit)
    )


# ========== Application Services ==========

class IncidentService:
    """Read side of the incident log."""

    def __init__(self, repository: IIncidentRepository):
        self._repository = repository

    async def list_incidents(self, query: IncidentQuery) -> List[Any]:
        return await self._repository.list(
            service=query.service,
            since=query.since,
            limit=query.limit
        )


class DiagnosticService:
    """
    Runs named diagnostic tools.

    ``summarize_checkout_health`` is the only tool. It always files an
    incident with the fixed checkout report; the model is consulted but its
    answer is only logged.
    """

    def __init__(self, repository: IIncidentRepository, llm_client: Optional[ILLMClient]):
        self._repository = repository
        self._llm = llm_client

    async def call_tool(self, tool: str, args: Dict[str, Any]) -> DiagnosticResponse:
        if tool != CHECKOUT_TOOL:
            raise ValidationException("Unknown tool", {"tool": tool})
        return await self.summarize_checkout_health(args.get("service") or "checkout")

    async def summarize_checkout_health(self, service: str) -> DiagnosticResponse:
        logs = load_log_sample(settings.checkout_logs_path)
        await self._consult_model(logs, service)

        report = CHECKOUT_REPORT
        incident = await self._repository.create(
            incident_id=generate_identifier("INC"),
            service=service,
            severity=report.severity,
            summary=report.summary,
            recommended_fix=report.recommended_fix
        )

        logger.info(
            "Incident filed",
            extra={"incident_id": incident.id, "service": service, "severity": report.severity}
        )

        return DiagnosticResponse(
            ticketId=incident.id,
            severity=report.severity,
            summary=report.summary,
            recommendedFix=report.recommended_fix,
            uiObservation=UI_OBSERVATION,
            created_at=incident.created_at
        )

    async def _consult_model(self, logs: Any, service: str) -> None:
        if self._llm is None:
            return

        messages = [{"role": "user", "content": DiagnosticPromptBuilder.build_prompt(logs)}]
        try:
            response = await self._llm.chat_completion(
                messages=messages,
                temperature=0.2,
                max_tokens=400,
                operation="diagnostic"
            )
        except Exception as e:
            logger.warning(
                "Diagnostic model call failed",
                extra={"service": service, "error": str(e)}
            )
            return

        logger.info(
            "Diagnostic model reply",
            extra={"service": service, "model": response.model, "reply_preview": response.content[:500]}
        )
