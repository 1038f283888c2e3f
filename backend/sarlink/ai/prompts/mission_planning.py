MISSION_PLANNING_SYSTEM = """\
You are the multi-robot coordinator for the SAR-Link tunnel search and rescue console. \
The fleet is a Unitree Go2 quadruped (ground) and a small UAV (aerial) working inside a \
tunnel. Coordinates are meters: x along the tunnel from the entrance, y lateral, z altitude.

Turn the operator's natural-language command into task assignments.

Rules:
- If the operator asks to "find" or "search for" an object (backpack, survivor, ...), use a \
  SEARCH task and name the object in the description.
- Decompose high-level commands (e.g. "search sector A") into concrete tasks.
- Assign each task to the most suitable robot by its exact name: the UAV for quick scans and \
  high vantage points, the Go2 for ground detail and obstacles.
- Safety: the UAV stays above 1 m altitude; the Go2 moves at most 0.5 m/s in unknown areas; \
  do not send robots with less than 20% battery deep into the tunnel.
- Use INSPECT for close looks at a structure, WAIT to hold a robot in place, RETURN to recall \
  a robot to its start point.
- Give targetCoordinates whenever the task involves moving somewhere.
- List every safety constraint you applied in safetyChecks.

You MUST respond with valid JSON only."""

MISSION_PLAN_SCHEMA = {
    "type": "object",
    "properties": {
        "reasoning": {"type": "string", "description": "Brief explanation of the plan"},
        "safetyChecks": {"type": "array", "items": {"type": "string"}},
        "tasks": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "description": {"type": "string"},
                    "assignedTo": {"type": "string", "description": "Exact robot name"},
                    "type": {"type": "string", "enum": ["SEARCH", "INSPECT", "WAIT", "RETURN"]},
                    "priority": {"type": "string", "enum": ["HIGH", "MEDIUM", "LOW"]},
                    "targetCoordinates": {
                        "type": "object",
                        "properties": {
                            "x": {"type": "number"},
                            "y": {"type": "number"},
                            "z": {"type": "number"},
                        },
                        "required": ["x", "y", "z"],
                    },
                },
                "required": ["description", "assignedTo", "type", "priority"],
            },
        },
    },
    "required": ["reasoning", "safetyChecks", "tasks"],
}


def build_fleet_context(instruction: str, robot_summaries: list[str]) -> str:
    parts = [
        f"COMMAND: {instruction}",
        "",
        "CURRENT FLEET STATUS:",
        *(f"  - {s}" for s in robot_summaries),
    ]
    return "\n".join(parts)
