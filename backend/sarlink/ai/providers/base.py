from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


class ProviderNotConfigured(RuntimeError):
    """Raised when a provider is asked to plan without its credential."""


@dataclass
class AIMessage:
    role: str  # system | user | assistant
    content: str


@dataclass
class AIResponse:
    content: str
    model: str = ""
    usage: dict[str, int] = field(default_factory=dict)


def schema_instruction(schema: dict[str, Any]) -> str:
    return (
        "\n\nYou MUST respond with valid JSON conforming to this schema:\n"
        f"```json\n{json.dumps(schema, indent=2)}\n```\n"
        "Respond ONLY with the JSON object, no other text."
    )


def split_system(messages: list[AIMessage]) -> tuple[str, list[AIMessage]]:
    """Pull system messages out into a single prompt string."""
    system_parts = [m.content for m in messages if m.role == "system"]
    rest = [m for m in messages if m.role != "system"]
    return "\n".join(system_parts).strip(), rest


class PlanningProvider(ABC):
    """Abstract base class for the language-model backends used for planning."""

    name = "base"

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the provider has what it needs (credential, endpoint) to be called."""

    @abstractmethod
    async def complete(
        self,
        messages: list[AIMessage],
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
    ) -> AIResponse:
        """Send a chat completion request and return the response."""

    async def complete_structured(
        self,
        messages: list[AIMessage],
        schema: dict[str, Any],
        *,
        temperature: float = 0.1,
        max_tokens: int = 4096,
    ) -> AIResponse:
        """Request structured JSON output conforming to a schema.

        Default implementation appends schema instructions to the last user message.
        Providers with native structured output override this.
        """
        augmented = list(messages)
        if augmented and augmented[-1].role == "user":
            augmented[-1] = AIMessage(
                role="user",
                content=augmented[-1].content + schema_instruction(schema),
            )
        else:
            augmented.append(AIMessage(role="user", content=schema_instruction(schema)))

        return await self.complete(
            augmented, temperature=temperature, max_tokens=max_tokens
        )
