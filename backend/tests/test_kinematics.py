import random

import pytest

from conftest import FixedRandom
from sarlink.services.fleet_store import GOAL_STATUSES, FleetStore, Pose, RobotStatus
from sarlink.simulator.config import FleetConfig, RobotConfig
from sarlink.simulator.kinematics import bearing_between, confidence_step, planar_distance


def test_geometry_helpers():
    assert planar_distance(0, 0, 3, 4) == pytest.approx(5.0)
    assert bearing_between(0, 0, 1, 0) == pytest.approx(0.0)
    assert bearing_between(0, 0, 0, 1) == pytest.approx(90.0)
    assert bearing_between(0, 0, -1, 0) == pytest.approx(180.0)


def test_ground_robot_reaches_goal_ten_meters_out(single_ground_fleet, make_simulator, logs):
    robot = single_ground_fleet.get("g1")
    single_ground_fleet.set_nav_goal(robot, Pose(10.0, 0.0))
    sim = make_simulator(single_ground_fleet)

    sim.run(50)

    assert robot.nav_goal is None
    assert robot.status == RobotStatus.SEARCHING
    assert robot.x == pytest.approx(10.0, abs=0.5)
    assert robot.y == pytest.approx(0.0)
    assert robot.battery == pytest.approx(100.0 - 50 * 0.05)
    assert [e.level for e in logs.entries()] == ["INFO"]


def test_moving_robot_heads_along_bearing(single_ground_fleet, make_simulator):
    robot = single_ground_fleet.get("g1")
    single_ground_fleet.set_nav_goal(robot, Pose(0.0, 10.0))
    sim = make_simulator(single_ground_fleet)

    sim.tick()

    assert robot.status == RobotStatus.MOVING
    assert robot.yaw == pytest.approx(90.0)
    assert robot.y == pytest.approx(0.2)
    assert robot.x == pytest.approx(0.0, abs=1e-9)


def test_arrival_within_threshold_on_next_tick(single_ground_fleet, make_simulator, logs):
    robot = single_ground_fleet.get("g1")
    single_ground_fleet.set_nav_goal(robot, Pose(0.3, 0.2))
    sim = make_simulator(single_ground_fleet)

    sim.tick()

    assert robot.nav_goal is None
    assert robot.status == RobotStatus.SEARCHING
    assert (robot.x, robot.y) == (0.0, 0.0)
    entries = logs.entries()
    assert len(entries) == 1
    assert entries[0].level == "INFO"
    assert "reached waypoint" in entries[0].message


def test_aerial_climbs_to_cruise_altitude_while_moving(make_simulator):
    fleet = FleetStore(FleetConfig(robots=[RobotConfig(id="u", name="UAV", robot_type="aerial")]))
    robot = fleet.get("u")
    fleet.set_nav_goal(robot, Pose(100.0, 0.0))
    sim = make_simulator(fleet)

    sim.tick()
    assert robot.x == pytest.approx(0.5)
    assert robot.z == pytest.approx(0.1)

    sim.run(30)
    assert robot.z == pytest.approx(1.5)
    assert robot.status == RobotStatus.MOVING


def test_ground_robot_keeps_its_altitude(fleet, make_simulator):
    go2 = fleet.find_by_name("Go2-Alpha")
    fleet.set_nav_goal(go2, Pose(20.0, 2.0))
    make_simulator(fleet).run(10)
    assert go2.z == pytest.approx(0.2)


def test_detection_fires_above_threshold(single_ground_fleet, make_simulator, logs):
    robot = single_ground_fleet.get("g1")
    robot.status = RobotStatus.SEARCHING
    robot.detection_confidence = 0.95
    sim = make_simulator(single_ground_fleet, FixedRandom(0.5))

    sim.tick()

    assert robot.status == RobotStatus.IDLE
    assert robot.detection_confidence == 0.0
    entries = logs.entries()
    assert len(entries) == 1
    assert entries[0].level == "WARN"


def test_search_confidence_decays_and_clamps_at_zero(single_ground_fleet, make_simulator):
    robot = single_ground_fleet.get("g1")
    robot.status = RobotStatus.SEARCHING
    robot.detection_confidence = 0.01
    sim = make_simulator(single_ground_fleet, FixedRandom(0.0))

    sim.tick()

    assert robot.detection_confidence == 0.0
    assert robot.status == RobotStatus.SEARCHING
    assert robot.yaw == pytest.approx(-5.0)


def test_confidence_drift_is_negative_on_average():
    rng = random.Random(42)
    steps = [confidence_step(rng) for _ in range(20000)]

    assert sum(steps) / len(steps) < 0
    assert max(steps) > 0  # still able to climb toward a detection


def test_search_trends_toward_zero_confidence(single_ground_fleet, make_simulator):
    robot = single_ground_fleet.get("g1")
    robot.status = RobotStatus.SEARCHING
    robot.detection_confidence = 0.5
    sim = make_simulator(single_ground_fleet, random.Random(3))

    samples = []
    for _ in range(2000):
        sim.tick()
        if robot.status != RobotStatus.SEARCHING:
            robot.status = RobotStatus.SEARCHING
        samples.append(robot.detection_confidence)

    assert sum(samples) / len(samples) < 0.3


def test_idle_robot_is_untouched(fleet, make_simulator, logs):
    before = {r.id: (r.x, r.y, r.z, r.yaw, r.battery) for r in fleet.robots.values()}
    make_simulator(fleet).run(100)
    after = {r.id: (r.x, r.y, r.z, r.yaw, r.battery) for r in fleet.robots.values()}
    assert before == after
    assert len(logs) == 0


def test_battery_floors_at_zero(single_ground_fleet, make_simulator):
    robot = single_ground_fleet.get("g1")
    robot.battery = 0.02
    robot.status = RobotStatus.ERROR

    make_simulator(single_ground_fleet).run(3)

    assert robot.battery == 0.0


def test_fleet_invariants_hold_over_long_run(fleet, make_simulator):
    go2 = fleet.find_by_name("Go2-Alpha")
    uav = fleet.find_by_name("Sky-Eye-1")
    fleet.set_nav_goal(go2, Pose(40.0, -1.0))
    fleet.set_nav_goal(uav, Pose(60.0, 1.5))
    sim = make_simulator(fleet, random.Random(7))

    for i in range(3000):
        if i % 500 == 0 and i:
            # keep robots busy so drain keeps happening
            fleet.set_nav_goal(go2, Pose(go2.x + 5.0, 0.0))
            fleet.set_status(uav, RobotStatus.SEARCHING)
        before = {r.id: (r.status, r.battery) for r in fleet.robots.values()}
        sim.tick()
        for robot in fleet.robots.values():
            prev_status, prev_battery = before[robot.id]
            assert 0.0 <= robot.battery <= 100.0
            assert 0.0 <= robot.detection_confidence <= 1.0
            if prev_status != RobotStatus.IDLE:
                assert robot.battery <= prev_battery
            else:
                assert robot.battery == prev_battery
            if robot.nav_goal is not None:
                assert robot.status in GOAL_STATUSES
