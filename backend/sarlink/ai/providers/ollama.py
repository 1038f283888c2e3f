from __future__ import annotations

import logging
from typing import Any

import httpx

from sarlink.ai.providers.base import AIMessage, AIResponse, PlanningProvider

logger = logging.getLogger(__name__)


class OllamaProvider(PlanningProvider):
    """Ollama local model provider via HTTP API."""

    name = "ollama"

    def __init__(self, base_url: str = "http://localhost:11434", model: str = "llama3") -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model

    def is_configured(self) -> bool:
        # Local server, no credential; an endpoint is all it needs
        return bool(self._base_url)

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
        return await self._chat(
            messages, temperature=temperature, max_tokens=max_tokens, response_format=schema
        )

    async def _chat(
        self,
        messages: list[AIMessage],
        *,
        temperature: float,
        max_tokens: int,
        response_format: dict[str, Any] | None = None,
    ) -> AIResponse:
        body: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            },
        }
        if response_format is not None:
            body["format"] = response_format

        async with httpx.AsyncClient(timeout=120.0) as client:
            resp = await client.post(f"{self._base_url}/api/chat", json=body)
            resp.raise_for_status()
            data = resp.json()

        content = data.get("message", {}).get("content", "")
        return AIResponse(
            content=content,
            model=self._model,
            usage={
                "input_tokens": data.get("prompt_eval_count", 0),
                "output_tokens": data.get("eval_count", 0),
            },
        )
