from __future__ import annotations

import json
import logging
from typing import Callable, Sequence

from pydantic import ValidationError

from sarlink.ai.plan import Plan
from sarlink.ai.prompts.mission_planning import (
    MISSION_PLAN_SCHEMA,
    MISSION_PLANNING_SYSTEM,
    build_fleet_context,
)
from sarlink.ai.providers import get_planning_provider
from sarlink.ai.providers.base import AIMessage, PlanningProvider
from sarlink.services.fleet_store import RobotState

logger = logging.getLogger(__name__)

REQUEST_STATES = ("idle", "pending")

StateListener = Callable[[str], None]


class PlanRequestBusy(RuntimeError):
    """A planning request is already in flight."""


class PlanRequester:
    """Turns an operator instruction into a Plan via the planning provider.

    Only one request may be in flight at a time. Every failure past argument
    checking is folded into ``Plan.failure`` so callers never see a raw
    provider or transport error.

    Each request is stamped with the next ``generation``. ``invalidate()``
    bumps it, and a response that comes back for an older generation is
    dropped (``request`` returns None).
    """

    def __init__(
        self,
        provider_factory: Callable[[], PlanningProvider] = get_planning_provider,
    ) -> None:
        self._provider_factory = provider_factory
        self.state = "idle"
        self.generation = 0
        self._listeners: list[StateListener] = []

    @property
    def pending(self) -> bool:
        return self.state == "pending"

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def invalidate(self) -> None:
        """Mark any in-flight request as stale."""
        self.generation += 1

    def is_available(self) -> bool:
        try:
            return self._provider_factory().is_configured()
        except ValueError:
            return False

    async def request(self, instruction: str, robots: Sequence[RobotState]) -> Plan | None:
        instruction = instruction.strip()
        if not instruction:
            return None
        if self.pending:
            raise PlanRequestBusy("A planning request is already in progress")

        self.generation += 1
        generation = self.generation
        self._set_state("pending")
        try:
            plan = await self._generate(instruction, robots)
        finally:
            self._set_state("idle")

        if generation != self.generation:
            logger.debug("Dropping plan for stale request %d (current %d)", generation, self.generation)
            return None
        return plan

    async def _generate(self, instruction: str, robots: Sequence[RobotState]) -> Plan:
        try:
            provider = self._provider_factory()
        except ValueError as e:
            logger.error("Planning provider unavailable: %s", e)
            return Plan.failure(f"Planning unavailable: {e}")

        if not provider.is_configured():
            logger.error("Planning provider %s has no credential configured", provider.name)
            return Plan.failure("Planning unavailable: API key missing.")

        messages = [
            AIMessage(role="system", content=MISSION_PLANNING_SYSTEM),
            AIMessage(
                role="user",
                content=build_fleet_context(instruction, [r.summary() for r in robots]),
            ),
        ]

        try:
            response = await provider.complete_structured(
                messages, MISSION_PLAN_SCHEMA, temperature=0.2, max_tokens=2048
            )
            return self._parse_plan(response.content)
        except (json.JSONDecodeError, ValidationError):
            logger.exception("Planner returned a malformed plan")
            return Plan.failure("Failed to generate plan: planner returned a malformed response.")
        except Exception:
            logger.exception("Mission planning failed")
            return Plan.failure("Failed to generate plan due to AI error.")

    def _parse_plan(self, content: str) -> Plan:
        text = content.strip()
        if text.startswith("```"):
            text = text.split("\n", 1)[1] if "\n" in text else text[3:]
            if text.endswith("```"):
                text = text[:-3]
            text = text.strip()

        return Plan.model_validate(json.loads(text))

    def _set_state(self, state: str) -> None:
        if state not in REQUEST_STATES:
            raise ValueError(f"Unknown request state: {state}")
        self.state = state
        for listener in self._listeners:
            try:
                listener(state)
            except Exception:
                logger.exception("Error in planner state listener")


plan_requester = PlanRequester()
