import asyncio

import httpx
import pytest

from conftest import FakeProvider, plan_json
from sarlink.ai.mission_planner import PlanRequestBusy, PlanRequester
from sarlink.ai.plan import EMERGENCY_STOP_NOTE, Plan


def requester_for(provider):
    return PlanRequester(provider_factory=lambda: provider)


def test_blank_instruction_is_a_noop(fleet):
    provider = FakeProvider(plan_json())
    requester = requester_for(provider)

    assert asyncio.run(requester.request("   ", fleet.snapshot())) is None
    assert provider.calls == []
    assert requester.state == "idle"


def test_successful_plan_is_returned_as_received(fleet):
    provider = FakeProvider(plan_json())
    plan = asyncio.run(requester_for(provider).request("find the survivor", fleet.snapshot()))

    assert plan.reasoning == "Send the dog to search the collapse zone."
    assert plan.safety_checks == ["Go2 max speed 0.5 m/s"]
    assert plan.tasks[0].assigned_to == "Go2-Alpha"
    assert plan.tasks[0].type == "SEARCH"
    assert plan.tasks[0].target_coordinates is None


def test_context_includes_instruction_and_every_robot(fleet):
    provider = FakeProvider(plan_json())
    asyncio.run(requester_for(provider).request("inspect the north wall", fleet.snapshot()))

    system, user = provider.calls[0]
    assert system.role == "system"
    assert "inspect the north wall" in user.content
    assert "Go2-Alpha (ground): status=IDLE, battery=88%" in user.content
    assert "Sky-Eye-1 (aerial)" in user.content
    assert "position=(2.0, -1.0, 0.0)" in user.content


def test_code_fenced_response_is_parsed(fleet):
    provider = FakeProvider("```json\n" + plan_json() + "\n```")
    plan = asyncio.run(requester_for(provider).request("go", fleet.snapshot()))
    assert len(plan.tasks) == 1


def test_short_priority_is_normalised(fleet):
    content = plan_json(
        tasks=[{"description": "d", "assignedTo": "Sky-Eye-1", "type": "inspect", "priority": "MED"}]
    )
    plan = asyncio.run(requester_for(FakeProvider(content)).request("go", fleet.snapshot()))
    assert plan.tasks[0].priority == "MEDIUM"
    assert plan.tasks[0].type == "INSPECT"


def _assert_failure_plan(plan: Plan) -> None:
    assert plan.tasks == []
    assert plan.reasoning
    assert plan.safety_checks == [EMERGENCY_STOP_NOTE]


def test_missing_credential_yields_failure_plan(fleet):
    provider = FakeProvider(plan_json(), configured=False)
    plan = asyncio.run(requester_for(provider).request("go", fleet.snapshot()))

    _assert_failure_plan(plan)
    assert provider.calls == []
    assert "API key" in plan.reasoning


def test_unknown_provider_yields_failure_plan(fleet):
    def factory():
        raise ValueError("Unknown planning provider: nope")

    requester = PlanRequester(provider_factory=factory)
    plan = asyncio.run(requester.request("go", fleet.snapshot()))

    _assert_failure_plan(plan)
    assert requester.is_available() is False


def test_transport_error_yields_failure_plan(fleet):
    provider = FakeProvider(error=httpx.ConnectError("connection refused"))
    requester = requester_for(provider)
    plan = asyncio.run(requester.request("go", fleet.snapshot()))

    _assert_failure_plan(plan)
    assert requester.state == "idle"


@pytest.mark.parametrize(
    "content",
    [
        "not json at all",
        "[]",
        '{"reasoning": "x", "tasks": [{"description": "d", "assignedTo": "Go2-Alpha", "type": "DANCE"}]}',
    ],
)
def test_malformed_response_yields_failure_plan(fleet, content):
    plan = asyncio.run(requester_for(FakeProvider(content)).request("go", fleet.snapshot()))
    _assert_failure_plan(plan)


def test_second_request_while_pending_is_rejected(fleet):
    states = []

    class SlowProvider(FakeProvider):
        async def complete(self, messages, *, temperature=0.3, max_tokens=4096):
            await asyncio.sleep(0.05)
            return await super().complete(messages, temperature=temperature, max_tokens=max_tokens)

    requester = requester_for(SlowProvider(plan_json()))
    requester.add_listener(states.append)

    async def scenario():
        first = asyncio.create_task(requester.request("first", fleet.snapshot()))
        await asyncio.sleep(0)
        assert requester.pending
        with pytest.raises(PlanRequestBusy):
            await requester.request("second", fleet.snapshot())
        return await first

    plan = asyncio.run(scenario())

    assert len(plan.tasks) == 1
    assert states == ["pending", "idle"]
    assert requester.state == "idle"


def test_each_request_takes_the_next_generation(fleet):
    requester = requester_for(FakeProvider(plan_json()))

    asyncio.run(requester.request("first", fleet.snapshot()))
    assert requester.generation == 1
    asyncio.run(requester.request("second", fleet.snapshot()))
    assert requester.generation == 2

    asyncio.run(requester.request("   ", fleet.snapshot()))
    assert requester.generation == 2


def test_response_for_invalidated_request_is_dropped(fleet):
    class SlowProvider(FakeProvider):
        async def complete(self, messages, *, temperature=0.3, max_tokens=4096):
            await asyncio.sleep(0.05)
            return await super().complete(messages, temperature=temperature, max_tokens=max_tokens)

    provider = SlowProvider(plan_json())
    requester = requester_for(provider)

    async def scenario():
        first = asyncio.create_task(requester.request("first", fleet.snapshot()))
        await asyncio.sleep(0)
        requester.invalidate()
        return await first

    assert asyncio.run(scenario()) is None
    assert len(provider.calls) == 1
    assert requester.state == "idle"

    # The next request is current again
    plan = asyncio.run(requester.request("again", fleet.snapshot()))
    assert len(plan.tasks) == 1


def test_unknown_request_state_is_rejected():
    requester = requester_for(FakeProvider(plan_json()))
    with pytest.raises(ValueError):
        requester._set_state("running")
    assert requester.state == "idle"
