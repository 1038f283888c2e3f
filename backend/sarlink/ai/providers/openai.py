from __future__ import annotations

import logging
from typing import Any

from sarlink.ai.providers.base import AIMessage, AIResponse, PlanningProvider, ProviderNotConfigured

logger = logging.getLogger(__name__)


class OpenAIProvider(PlanningProvider):
    """OpenAI Chat Completions provider."""

    name = "openai"

    def __init__(self, api_key: str, model: str = "gpt-4o") -> None:
        self._api_key = api_key
        self._model = model

    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def complete(
        self,
        messages: list[AIMessage],
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
    ) -> AIResponse:
        return await self._chat(messages, temperature=temperature, max_tokens=max_tokens)

    async def complete_structured(
        self,
        messages: list[AIMessage],
        schema: dict[str, Any],
        *,
        temperature: float = 0.1,
        max_tokens: int = 4096,
    ) -> AIResponse:
        # Non-strict: optional fields such as targetCoordinates stay optional
        return await self._chat(
            messages,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format={
                "type": "json_schema",
                "json_schema": {"name": "mission_plan", "schema": schema},
            },
        )

    async def _chat(
        self,
        messages: list[AIMessage],
        *,
        temperature: float,
        max_tokens: int,
        **extra: Any,
    ) -> AIResponse:
        if not self.is_configured():
            raise ProviderNotConfigured("OpenAI API key not configured")

        import openai

        client = openai.AsyncOpenAI(api_key=self._api_key)
        response = await client.chat.completions.create(
            model=self._model,
            messages=[{"role": m.role, "content": m.content} for m in messages],
            temperature=temperature,
            max_tokens=max_tokens,
            **extra,
        )
        choice = response.choices[0]
        return AIResponse(
            content=choice.message.content or "",
            model=response.model or self._model,
            usage={
                "input_tokens": response.usage.prompt_tokens if response.usage else 0,
                "output_tokens": response.usage.completion_tokens if response.usage else 0,
            },
        )
