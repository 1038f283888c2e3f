from __future__ import annotations

import logging

from sarlink.ai.plan import Plan, Task
from sarlink.services.fleet_store import FleetStore, Pose, RobotState, RobotStatus
from sarlink.services.log_store import LogStore

logger = logging.getLogger(__name__)

LOG_SOURCE = "EXECUTOR"


class PlanExecutor:
    """Applies an accepted plan to the fleet, task by task.

    Tasks whose robot cannot be resolved are logged and skipped; tasks already
    applied are never rolled back.
    """

    def __init__(self, fleet: FleetStore, logs: LogStore) -> None:
        self.fleet = fleet
        self.logs = logs

    def execute(self, plan: Plan) -> list[RobotState]:
        assigned: list[RobotState] = []
        for task in plan.tasks:
            robot = self.fleet.find_by_name(task.assigned_to) if task.assigned_to else None
            if robot is None:
                self.logs.append(
                    f"Could not assign task to unknown robot: {task.assigned_to}",
                    "ERROR",
                    LOG_SOURCE,
                )
                continue

            self._apply(robot, task)
            assigned.append(robot)
            self.logs.append(
                f"Assigned task to {robot.name}: {task.description}",
                "INFO",
                LOG_SOURCE,
            )
        return assigned

    def _apply(self, robot: RobotState, task: Task) -> None:
        self.fleet.assign_task(robot, task.description)

        target = task.target_coordinates
        if target is not None:
            self.fleet.set_nav_goal(robot, Pose(target.x, target.y, target.z, 0.0))
        elif task.type in ("SEARCH", "INSPECT"):
            self.fleet.set_status(robot, RobotStatus.SEARCHING)
        elif task.type == "WAIT":
            self.fleet.set_status(robot, RobotStatus.IDLE)
        elif task.type == "RETURN":
            home = robot.home
            self.fleet.set_nav_goal(robot, Pose(home.x, home.y, home.z, 0.0))
