"""
Copilot Application Services
============================

Proxies a chat transcript to the hosted model.
"""

from typing import Optional

from ticketbuddy.config import settings
from ticketbuddy.copilot.application.dto import CopilotRequest
from ticketbuddy.copilot.domain import CopilotPromptBuilder
from ticketbuddy.core import ConfigurationException
from ticketbuddy.infrastructure.llm import ILLMClient
from ticketbuddy.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class CopilotService:
    """
    Chat assistant for the dashboard.

    Raises ConfigurationException when no model is configured; model failures
    surface as LLMException.
    """

    def __init__(self, llm_client: Optional[ILLMClient]):
        self._llm = llm_client

    async def reply(self, request: CopilotRequest) -> str:
        if self._llm is None:
            raise ConfigurationException("Copilot is unavailable: no language model configured")

        context = request.context
        note = CopilotPromptBuilder.build_context_note(
            page=context.page if context else None,
            tickets_count=context.ticketsCount if context else None,
            github_connected=context.githubConnected if context else None
        )
        messages = CopilotPromptBuilder.build_messages(
            [m.model_dump() for m in request.messages],
            note
        )

        response = await self._llm.chat_completion(
            messages=messages,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            operation="copilot"
        )

        logger.info(
            "Copilot reply generated",
            extra={"message_count": len(request.messages), "tokens_used": response.total_tokens}
        )
        return response.content
