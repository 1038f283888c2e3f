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


class ClaudeProvider(PlanningProvider):
    """Anthropic Claude Messages API provider."""

    name = "anthropic"

    def __init__(self, api_key: str, model: str = "claude-sonnet-4-5-20250929") -> None:
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
        if not self.is_configured():
            raise ProviderNotConfigured("Anthropic API key not configured")

        import anthropic

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        system_prompt, rest = split_system(messages)

        kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": m.role, "content": m.content} for m in rest],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        response = await client.messages.create(**kwargs)
        content = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        return AIResponse(
            content=content,
            model=response.model,
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )
