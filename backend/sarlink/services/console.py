from __future__ import annotations

import logging
from typing import Any, Callable

from sarlink.ai.mission_planner import PlanRequestBusy, PlanRequester, plan_requester
from sarlink.ai.plan import Plan
from sarlink.services.fleet_store import FleetStore, RobotState, fleet_store
from sarlink.services.log_store import LogStore, log_store
from sarlink.services.plan_executor import PlanExecutor

logger = logging.getLogger(__name__)

PlanListener = Callable[[Plan | None], None]


class MissionConsole:
    """Operator session: command input, the proposed plan and its execution."""

    def __init__(self, fleet: FleetStore, logs: LogStore, requester: PlanRequester) -> None:
        self.fleet = fleet
        self.logs = logs
        self.requester = requester
        self.executor = PlanExecutor(fleet, logs)
        self.command_text = ""
        self.current_plan: Plan | None = None
        self._plan_listeners: list[PlanListener] = []

    def on_plan_changed(self, listener: PlanListener) -> None:
        self._plan_listeners.append(listener)

    async def submit_command(self, text: str) -> Plan | None:
        self.command_text = text
        instruction = text.strip()
        if not instruction:
            return None
        if self.requester.pending:
            raise PlanRequestBusy("A planning request is already in progress")

        self.logs.append(f'Planning mission: "{instruction}"', "INFO", "PLANNER")
        plan = await self.requester.request(instruction, self.fleet.snapshot())
        if plan is None:
            # The requester dropped a response that belongs to a reset session
            self.logs.append("Discarded plan for a reset session", "DEBUG", "PLANNER")
            return None

        self._set_plan(plan)
        if plan.tasks:
            self.logs.append(f"Plan generated: {plan.reasoning}", "INFO", "PLANNER")
        else:
            self.logs.append(f"Plan failed: {plan.reasoning}", "ERROR", "PLANNER")
        return plan

    def execute_plan(self) -> list[RobotState] | None:
        plan = self.current_plan
        if plan is None:
            return None

        self.logs.append("Executing multi-agent plan...", "WARN", "COORDINATOR")
        try:
            assigned = self.executor.execute(plan)
        finally:
            self.command_text = ""
            self._set_plan(None)
        logger.info("Plan executed: %d/%d tasks assigned", len(assigned), len(plan.tasks))
        return assigned

    def discard_plan(self) -> bool:
        if self.current_plan is None:
            return False
        self._set_plan(None)
        self.logs.append("Proposed plan discarded", "INFO", "COORDINATOR")
        return True

    def reset(self) -> None:
        self.requester.invalidate()
        self.fleet.reset()
        self.logs.clear()
        self.command_text = ""
        self._set_plan(None)
        logger.info("Session reset (request generation %d)", self.requester.generation)

    def to_dict(self) -> dict[str, Any]:
        return {
            "robots": self.fleet.to_dict(),
            "logs": [e.to_dict() for e in self.logs.entries()],
            "plan": self.current_plan.to_dict() if self.current_plan else None,
            "commandText": self.command_text,
            "planner": {
                "state": self.requester.state,
                "available": self.requester.is_available(),
            },
        }

    def _set_plan(self, plan: Plan | None) -> None:
        self.current_plan = plan
        for listener in self._plan_listeners:
            try:
                listener(plan)
            except Exception:
                logger.exception("Error in plan listener")


mission_console = MissionConsole(fleet_store, log_store, plan_requester)
