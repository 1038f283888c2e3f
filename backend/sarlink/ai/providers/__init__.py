from __future__ import annotations

from sarlink.ai.providers.base import PlanningProvider
from sarlink.config import settings


def get_planning_provider() -> PlanningProvider:
    """Factory: return the configured planning provider instance."""
    provider = settings.planner_provider.lower()

    if provider == "gemini":
        from sarlink.ai.providers.gemini import GeminiProvider

        return GeminiProvider(
            api_key=settings.gemini_api_key,
            model=settings.planner_model,
        )
    elif provider == "anthropic":
        from sarlink.ai.providers.claude import ClaudeProvider

        return ClaudeProvider(
            api_key=settings.anthropic_api_key,
            model=settings.planner_model,
        )
    elif provider == "openai":
        from sarlink.ai.providers.openai import OpenAIProvider

        return OpenAIProvider(
            api_key=settings.openai_api_key,
            model=settings.planner_model,
        )
    elif provider == "ollama":
        from sarlink.ai.providers.ollama import OllamaProvider

        return OllamaProvider(
            base_url=settings.ollama_base_url,
            model=settings.planner_model,
        )
    else:
        raise ValueError(f"Unknown planning provider: {provider}")
