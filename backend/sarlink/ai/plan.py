from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMERGENCY_STOP_NOTE = "Emergency Stop triggered due to planner failure."

TaskType = Literal["SEARCH", "INSPECT", "WAIT", "RETURN"]
Priority = Literal["HIGH", "MEDIUM", "LOW"]


class TargetCoordinates(BaseModel):
    x: float
    y: float
    z: float = 0.0


class Task(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    description: str
    assigned_to: str | None = Field(default=None, alias="assignedTo")
    type: TaskType
    priority: Priority = "MEDIUM"
    target_coordinates: TargetCoordinates | None = Field(default=None, alias="targetCoordinates")

    @field_validator("type", mode="before")
    @classmethod
    def _upper_type(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("priority", mode="before")
    @classmethod
    def _normalise_priority(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().upper()
            # Planners sometimes answer with the short form
            if value == "MED":
                return "MEDIUM"
        return value


class Plan(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reasoning: str = ""
    tasks: list[Task] = Field(default_factory=list)
    safety_checks: list[str] = Field(default_factory=list, alias="safetyChecks")

    @classmethod
    def failure(cls, reason: str) -> Plan:
        return cls(reasoning=reason, tasks=[], safety_checks=[EMERGENCY_STOP_NOTE])

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
