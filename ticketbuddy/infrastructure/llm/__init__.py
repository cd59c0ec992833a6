"""
LLM Client Infrastructure
==========================

Wrapper for the hosted language model providing a clean interface for LLM operations.

Any OpenAI-compatible chat-completions endpoint works (OpenAI itself, or a
gateway configured through ``LLM_BASE_URL``). Callers depend on ``ILLMClient``,
never on the SDK.
"""

import json
import time
from typing import List, Optional
from abc import ABC, abstractmethod

from openai import AsyncOpenAI

from ticketbuddy.config import settings
from ticketbuddy.core import LLMException, ConfigurationException
from ticketbuddy.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class ChatCompletionResult:
    """Result of a chat completion."""

    def __init__(
        self,
        content: str,
        model: str,
        prompt_tokens: int,
        completion_tokens: int,
        latency_ms: int
    ):
        self.content = content
        self.model = model
        self.prompt_tokens = prompt_tokens
        self.completion_tokens = completion_tokens
        self.total_tokens = prompt_tokens + completion_tokens
        self.latency_ms = latency_ms


class ILLMClient(ABC):
    """
    Interface for LLM client operations.

    Only the chat completion is needed by the application.
    """

    @abstractmethod
    async def chat_completion(
        self,
        messages: List[dict],
        temperature: float = 0.3,
        max_tokens: int = 1000,
        operation: str = "chat_completion"
    ) -> ChatCompletionResult:
        """Generate chat completion."""


class OpenAILLMClient(ILLMClient):
    """
    OpenAI-compatible client implementation.

    Provides async wrapper around OpenAI SDK operations.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None
    ):
        self._api_key = api_key or settings.llm_api_key
        if not self._api_key:
            raise ConfigurationException("LLM API key not configured")

        self._client = AsyncOpenAI(
            api_key=self._api_key,
            base_url=base_url or settings.llm_base_url
        )
        self._model = model or settings.llm_model

    async def chat_completion(
        self,
        messages: List[dict],
        temperature: float = 0.3,
        max_tokens: int = 1000,
        operation: str = "chat_completion"
    ) -> ChatCompletionResult:
        """
        Generate chat completion.

        Args:
            messages: List of message dicts with 'role' and 'content'
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum tokens to generate
            operation: Operation type for logging (classification, diagnostic, copilot)

        Returns:
            ChatCompletionResult with generated text

        Raises:
            LLMException: If completion fails
        """
        start_time = time.perf_counter()

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens
            )
        except Exception as e:
            raise LLMException(f"Chat completion failed: {str(e)}")

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        content = response.choices[0].message.content or ""
        usage = response.usage
        prompt_tokens = usage.prompt_tokens if usage else 0
        completion_tokens = usage.completion_tokens if usage else 0

        logger.info(
            "LLM call completed",
            extra={
                "operation": operation,
                "model": self._model,
                "latency_ms": latency_ms,
                "prompt_tokens_used": prompt_tokens,
                "completion_tokens_used": completion_tokens,
            }
        )

        return ChatCompletionResult(
            content=content,
            model=self._model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            latency_ms=latency_ms
        )


class MockLLMClient(ILLMClient):
    """
    Mock LLM client for local development.

    Returns predictable responses without calling external APIs.
    """

    async def chat_completion(
        self,
        messages: List[dict],
        temperature: float = 0.3,
        max_tokens: int = 1000,
        operation: str = "chat_completion"
    ) -> ChatCompletionResult:
        """Return mock response based on operation type."""
        user_content = str(messages[-1].get("content", "")) if messages else ""

        if operation == "classification":
            description = user_content.rsplit("Request:", 1)[-1].strip()
            mock_response = [{
                "title": " ".join(description.split()[:6]) or "New request",
                "description": description,
                "priority": 1,
                "assignee": None
            }]
            content = f"```json\n{json.dumps(mock_response, indent=2)}\n```"
        elif operation == "diagnostic":
            content = json.dumps({
                "summary": "Mock: checkout errors detected.",
                "severity": "medium",
                "recommendedFix": "Mock: inspect the latest deploy."
            })
        else:
            content = "This is a mock LLM response for testing purposes."

        return ChatCompletionResult(
            content=content,
            model="mock-model",
            prompt_tokens=100,
            completion_tokens=len(content.split()),
            latency_ms=1
        )


def build_llm_client() -> Optional[ILLMClient]:
    """
    Build the configured LLM client, or None when no model is configured.

    ``MOCK_LLM=true`` takes precedence over a real key.
    """
    if settings.mock_llm:
        return MockLLMClient()
    if settings.llm_api_key:
        return OpenAILLMClient()
    return None
