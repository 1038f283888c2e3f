from __future__ import annotations

import logging
from typing import Any

from sarlink.ai.providers.base import (
    AIMessage,
    AIResponse,
    PlanningProvider,
    ProviderNotConfigured,
    split_system,
)

logger = logging.getLogger(__name__)


class GeminiProvider(PlanningProvider):
    """Google Gemini provider via the google-genai SDK."""

    name = "gemini"

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash") -> None:
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
        return await self._generate(messages, temperature=temperature, max_tokens=max_tokens)

    async def complete_structured(
        self,
        messages: list[AIMessage],
        schema: dict[str, Any],
        *,
        temperature: float = 0.1,
        max_tokens: int = 4096,
    ) -> AIResponse:
        return await self._generate(
            messages,
            temperature=temperature,
            max_tokens=max_tokens,
            response_json_schema=schema,
            response_mime_type="application/json",
        )

    async def _generate(
        self,
        messages: list[AIMessage],
        *,
        temperature: float,
        max_tokens: int,
        **config_kwargs: Any,
    ) -> AIResponse:
        if not self.is_configured():
            raise ProviderNotConfigured("Gemini API key not configured")

        from google import genai
        from google.genai import types

        client = genai.Client(api_key=self._api_key)
        system_prompt, rest = split_system(messages)
        contents = [
            types.Content(
                role="model" if m.role == "assistant" else "user",
                parts=[types.Part(text=m.content)],
            )
            for m in rest
        ]

        config = types.GenerateContentConfig(
            system_instruction=system_prompt or None,
            temperature=temperature,
            max_output_tokens=max_tokens,
            **config_kwargs,
        )
        response = await client.aio.models.generate_content(
            model=self._model,
            contents=contents,
            config=config,
        )
        if not response.text:
            raise ValueError("Empty response from Gemini")

        usage = response.usage_metadata
        return AIResponse(
            content=response.text,
            model=self._model,
            usage={
                "input_tokens": (usage.prompt_token_count or 0) if usage else 0,
                "output_tokens": (usage.candidates_token_count or 0) if usage else 0,
            },
        )
