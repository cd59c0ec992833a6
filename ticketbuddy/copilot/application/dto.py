"""
Copilot Application DTOs
========================
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., max_length=10000)


class CopilotContext(BaseModel):
    """What the dashboard was showing when the user asked."""
    page: Optional[str] = None
    ticketsCount: Optional[int] = Field(None, ge=0)
    githubConnected: Optional[bool] = None


class CopilotRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1, max_length=50)
    context: Optional[CopilotContext] = None


class CopilotResponse(BaseModel):
    response: str
