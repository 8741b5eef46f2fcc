"""
LLM Client Infrastructure
==========================

Chat completion clients for issue extraction and resolution drafting.

``create_llm_client`` picks the implementation from settings:
``MOCK_LLM=true`` -> MockLLMClient, an API key -> OpenAILLMClient
(any OpenAI-compatible endpoint via ``OPENAI_BASE_URL``), otherwise None
and detection runs on keyword rules alone.
"""

import json
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from openai import AsyncOpenAI

from feedback_triage.config import settings
from feedback_triage.core import LLMException, ConfigurationException


@dataclass
class ChatCompletionResult:
    """Text of the first choice plus usage figures."""
    content: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    latency_ms: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class ILLMClient(ABC):
    """
    Interface for LLM client operations.

    Only chat completions are needed: issue extraction and resolution
    drafting are both single-prompt calls.
    """

    @abstractmethod
    async def chat_completion(
        self,
        messages: List[dict],
        temperature: float = 0.3,
        max_tokens: int = 600,
        operation: str = "chat_completion"
    ) -> ChatCompletionResult:
        """Generate chat completion."""

    async def close(self) -> None:
        """Release network resources held by the client."""


class OpenAILLMClient(ILLMClient):
    """
    Chat completions through the ``openai`` SDK.

    SDK retries are off; repeated failures trip the circuit breaker in
    ``LLMClientAdapter`` instead.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None
    ):
        self._api_key = api_key or settings.openai_api_key
        if not self._api_key:
            raise ConfigurationException("OpenAI API key not configured")

        self._client = AsyncOpenAI(
            api_key=self._api_key,
            base_url=base_url or settings.openai_base_url,
            timeout=settings.llm_timeout_seconds,
            max_retries=0,
        )
        self._model = model or settings.llm_model

    @property
    def model(self) -> str:
        return self._model

    async def chat_completion(
        self,
        messages: List[dict],
        temperature: float = 0.3,
        max_tokens: int = 600,
        operation: str = "chat_completion"
    ) -> ChatCompletionResult:
        """
        Run one chat completion.

        Raises:
            LLMException: On any SDK error or an empty choice list
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
            raise LLMException(
                f"Chat completion failed: {str(e)}",
                details={"operation": operation, "model": self._model}
            )

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        if not response.choices:
            raise LLMException("Chat completion returned no choices", details={"operation": operation})

        usage = response.usage
        return ChatCompletionResult(
            content=(response.choices[0].message.content or "").strip(),
            model=self._model,
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
            latency_ms=latency_ms
        )

    async def close(self) -> None:
        await self._client.close()


class MockLLMClient(ILLMClient):
    """
    Mock LLM client for local runs and demos.

    Returns predictable responses without calling external APIs.
    """

    _SERVICE_PATTERN = re.compile(r"Service Type:\s*(\w+)")

    async def chat_completion(
        self,
        messages: List[dict],
        temperature: float = 0.3,
        max_tokens: int = 600,
        operation: str = "chat_completion"
    ) -> ChatCompletionResult:
        """Return mock response based on operation type."""
        user_content = str(messages[-1].get("content", "")) if messages else ""

        if operation == "issue_detection":
            match = self._SERVICE_PATTERN.search(user_content)
            service = match.group(1) if match else "CoreBanking"
            mock_response = {
                "title": f"{service} service disruption",
                "description": "Mock: customer reports the service did not work as expected.",
                "category": service,
                "confidence_score": 0.8
            }
            content = json.dumps(mock_response)
        elif operation == "resolution":
            mock_response = {
                "resolution_text": (
                    "1. Acknowledge the customer concern\n"
                    "2. Investigate the reported problem with the service owner\n"
                    "3. Follow up with the customer once resolved"
                ),
                "confidence_score": 0.8
            }
            content = json.dumps(mock_response)
        else:
            content = "This is a mock LLM response for testing purposes."

        return ChatCompletionResult(
            content=content,
            model="mock-model",
            prompt_tokens=len(user_content.split()),
            completion_tokens=len(content.split()),
            latency_ms=0
        )


def create_llm_client() -> Optional[ILLMClient]:
    """
    Build the configured LLM client.

    Returns None when no provider is configured; detection then relies on
    keyword heuristics only.
    """
    if settings.mock_llm:
        return MockLLMClient()
    if settings.openai_api_key:
        return OpenAILLMClient()
    return None
