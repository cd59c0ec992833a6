"""
Copilot Controllers (API Routes)
================================
"""

from typing import Optional

from fastapi import APIRouter, Depends

from ticketbuddy.copilot.application import CopilotRequest, CopilotResponse, CopilotService
from ticketbuddy.infrastructure.llm import ILLMClient
from ticketbuddy.tickets.interfaces import get_llm_client

router = APIRouter(tags=["Copilot"])


def get_copilot_service(llm_client: Optional[ILLMClient] = Depends(get_llm_client)) -> CopilotService:
    return CopilotService(llm_client)


@router.post(
    "/copilot",
    response_model=CopilotResponse,
    summary="Chat with the dashboard assistant",
    description="503 when no language model is configured, 502 when the model call fails."
)
async def copilot(payload: CopilotRequest, service: CopilotService = Depends(get_copilot_service)):
    return CopilotResponse(response=await service.reply(payload))


# Export router for inclusion in main app
copilot_router = router
