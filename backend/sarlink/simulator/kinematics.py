"""Fixed-timestep kinematics for the simulated fleet.

Each tick advances every robot from its own previous state only: battery
drain, straight-line motion toward a navigation goal, and the search loop
that raises or decays detection confidence until a detection fires.
"""

from __future__ import annotations

import logging
import math
import random

from sarlink.services.fleet_store import FleetStore, RobotState, RobotStatus
from sarlink.services.log_store import LogStore
from sarlink.simulator.config import (
    ARRIVAL_THRESHOLD_M,
    BATTERY_DRAIN_PER_TICK,
    CONFIDENCE_STEP_BIAS,
    CONFIDENCE_STEP_SCALE,
    DETECTION_THRESHOLD,
    PLATFORMS,
    SEARCH_YAW_JITTER_DEG,
    PlatformProfile,
)

logger = logging.getLogger(__name__)


def planar_distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x2 - x1, y2 - y1)


def bearing_between(x1: float, y1: float, x2: float, y2: float) -> float:
    """Bearing from point 1 to point 2 in degrees (0 = +x axis, counter-clockwise)."""
    return math.degrees(math.atan2(y2 - y1, x2 - x1))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def confidence_step(rng: random.Random) -> float:
    """One random detection-confidence increment; negative on average."""
    return (rng.random() - CONFIDENCE_STEP_BIAS) * CONFIDENCE_STEP_SCALE


class KinematicSimulator:
    """Advances the fleet one tick at a time."""

    def __init__(
        self,
        fleet: FleetStore,
        logs: LogStore,
        rng: random.Random | None = None,
    ) -> None:
        self.fleet = fleet
        self.logs = logs
        self.rng = rng or random.Random()
        self.tick_count = 0

    def tick(self) -> None:
        self.fleet.apply_tick(self.advance)
        self.tick_count += 1

    def run(self, ticks: int) -> None:
        for _ in range(ticks):
            self.tick()

    def advance(self, robot: RobotState) -> None:
        if robot.status != RobotStatus.IDLE:
            robot.battery = max(0.0, robot.battery - BATTERY_DRAIN_PER_TICK)

        if robot.nav_goal is not None:
            self._navigate(robot)
        elif robot.status == RobotStatus.SEARCHING:
            self._search(robot)

    def _profile(self, robot: RobotState) -> PlatformProfile:
        return PLATFORMS.get(robot.robot_type, PLATFORMS["ground"])

    def _navigate(self, robot: RobotState) -> None:
        goal = robot.nav_goal
        dist = planar_distance(robot.x, robot.y, goal.x, goal.y)

        if dist < ARRIVAL_THRESHOLD_M:
            robot.nav_goal = None
            robot.status = RobotStatus.SEARCHING
            self.logs.append(
                f"{robot.name} reached waypoint. Starting local search.",
                "INFO",
                robot.id,
            )
            return

        profile = self._profile(robot)
        brng = bearing_between(robot.x, robot.y, goal.x, goal.y)
        step = min(profile.speed, dist)
        robot.x += step * math.cos(math.radians(brng))
        robot.y += step * math.sin(math.radians(brng))
        robot.yaw = brng
        robot.status = RobotStatus.MOVING

        # Takeoff: climb toward cruise altitude regardless of horizontal progress
        if robot.z < profile.cruise_altitude:
            robot.z = min(profile.cruise_altitude, robot.z + profile.climb_rate)

    def _search(self, robot: RobotState) -> None:
        robot.yaw += (self.rng.random() - 0.5) * SEARCH_YAW_JITTER_DEG
        robot.detection_confidence = clamp(
            robot.detection_confidence + confidence_step(self.rng), 0.0, 1.0
        )

        if robot.detection_confidence > DETECTION_THRESHOLD:
            self.logs.append(
                f"{robot.name} detected search target "
                f"(confidence {robot.detection_confidence:.0%})",
                "WARN",
                robot.id,
            )
            robot.status = RobotStatus.IDLE
            robot.detection_confidence = 0.0
