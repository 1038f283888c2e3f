from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from sarlink.simulator.config import FleetConfig, RobotConfig, SensorSuite


class RobotStatus(str, Enum):
    IDLE = "IDLE"
    PLANNING = "PLANNING"
    MOVING = "MOVING"
    SEARCHING = "SEARCHING"
    ERROR = "ERROR"
    RETURNING = "RETURNING"


# Statuses a robot may hold while it still has a navigation goal
GOAL_STATUSES = (RobotStatus.PLANNING, RobotStatus.MOVING)


@dataclass
class Pose:
    x: float
    y: float
    z: float = 0.0
    yaw: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z, "yaw": self.yaw}


@dataclass
class RobotState:
    id: str
    name: str
    robot_type: str = "ground"  # ground | aerial
    status: RobotStatus = RobotStatus.IDLE
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    yaw: float = 0.0
    battery: float = 100.0
    current_task: str | None = None
    nav_goal: Pose | None = None
    detection_confidence: float = 0.0
    sensors: SensorSuite = field(default_factory=SensorSuite)
    home: Pose = field(default_factory=lambda: Pose(0.0, 0.0))

    @property
    def pose(self) -> Pose:
        return Pose(self.x, self.y, self.z, self.yaw)

    def summary(self) -> str:
        """One-line description used as planner context."""
        return (
            f"{self.name} ({self.robot_type}): status={self.status.value}, "
            f"battery={self.battery:.0f}%, "
            f"position=({self.x:.1f}, {self.y:.1f}, {self.z:.1f})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "robotType": self.robot_type,
            "status": self.status.value,
            "position": self.pose.to_dict(),
            "battery": self.battery,
            "currentTask": self.current_task,
            "navGoal": self.nav_goal.to_dict() if self.nav_goal else None,
            "detectionConfidence": self.detection_confidence,
            "sensors": {
                "camera": self.sensors.camera,
                "lidar": self.sensors.lidar,
                "imu": self.sensors.imu,
            },
        }


class FleetStore:
    """Single source of truth for the simulated robots."""

    def __init__(self, config: FleetConfig | None = None) -> None:
        self.robots: dict[str, RobotState] = {}
        self._config = copy.deepcopy(config) if config is not None else FleetConfig()
        self.reset()

    def reset(self) -> None:
        """Discard all robots and re-create the configured initial fleet."""
        self.robots = {}
        for robot_config in self._config.robots:
            self.register_robot(robot_config)

    def register_robot(self, config: RobotConfig) -> RobotState:
        if config.id in self.robots:
            raise ValueError(f"Robot {config.id} already registered")
        robot = RobotState(
            id=config.id,
            name=config.name,
            robot_type=config.robot_type,
            x=config.start_x,
            y=config.start_y,
            z=config.start_z,
            yaw=config.start_yaw,
            battery=max(0.0, min(100.0, config.battery)),
            sensors=config.sensors,
            home=Pose(config.start_x, config.start_y, config.start_z, config.start_yaw),
        )
        self.robots[robot.id] = robot
        return robot

    def get(self, robot_id: str) -> RobotState | None:
        return self.robots.get(robot_id)

    def find_by_name(self, name: str) -> RobotState | None:
        for robot in self.robots.values():
            if robot.name == name:
                return robot
        return None

    def apply_tick(self, step: Callable[[RobotState], None]) -> None:
        """Run one simulation step over every robot."""
        for robot in self.robots.values():
            step(robot)

    def assign_task(self, robot: RobotState, description: str) -> None:
        robot.current_task = description

    def set_nav_goal(self, robot: RobotState, goal: Pose) -> None:
        robot.nav_goal = goal
        robot.status = RobotStatus.PLANNING

    def set_status(self, robot: RobotState, status: RobotStatus) -> None:
        if status not in GOAL_STATUSES:
            robot.nav_goal = None
        robot.status = status

    def snapshot(self) -> list[RobotState]:
        """Detached copies of every robot, safe to hand to slow consumers."""
        return [copy.deepcopy(r) for r in self.robots.values()]

    def to_dict(self) -> dict[str, Any]:
        return {rid: r.to_dict() for rid, r in self.robots.items()}


fleet_store = FleetStore(FleetConfig.default())
