from __future__ import annotations

import json
import random
from typing import Any

import pytest

from sarlink.ai.providers.base import AIMessage, AIResponse, PlanningProvider
from sarlink.services.fleet_store import FleetStore
from sarlink.services.log_store import LogStore
from sarlink.simulator.config import FleetConfig, RobotConfig
from sarlink.simulator.kinematics import KinematicSimulator


class FixedRandom(random.Random):
    """Random source that always returns the same value from random()."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class FakeProvider(PlanningProvider):
    name = "fake"

    def __init__(self, content: str = "", *, configured: bool = True, error: Exception | None = None) -> None:
        self.content = content
        self.configured = configured
        self.error = error
        self.calls: list[list[AIMessage]] = []

    def is_configured(self) -> bool:
        return self.configured

    async def complete(
        self,
        messages: list[AIMessage],
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
    ) -> AIResponse:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return AIResponse(content=self.content, model="fake")


def plan_json(**overrides: Any) -> str:
    body: dict[str, Any] = {
        "reasoning": "Send the dog to search the collapse zone.",
        "safetyChecks": ["Go2 max speed 0.5 m/s"],
        "tasks": [
            {
                "description": "Search for survivor near the collapse",
                "assignedTo": "Go2-Alpha",
                "type": "SEARCH",
                "priority": "HIGH",
            }
        ],
    }
    body.update(overrides)
    return json.dumps(body)


@pytest.fixture
def fleet() -> FleetStore:
    return FleetStore(FleetConfig.default())


@pytest.fixture
def logs() -> LogStore:
    return LogStore(capacity=50)


@pytest.fixture
def single_ground_fleet() -> FleetStore:
    return FleetStore(
        FleetConfig(robots=[RobotConfig(id="g1", name="Ground-1", robot_type="ground")])
    )


@pytest.fixture
def make_simulator(logs):
    def _make(fleet: FleetStore, rng: random.Random | None = None) -> KinematicSimulator:
        return KinematicSimulator(fleet, logs, rng or random.Random(1234))

    return _make
