from __future__ import annotations

from dataclasses import dataclass, field

ARRIVAL_THRESHOLD_M = 0.5
BATTERY_DRAIN_PER_TICK = 0.05
DETECTION_THRESHOLD = 0.9
SEARCH_YAW_JITTER_DEG = 10.0
# Confidence step is (u - bias) * scale with u ~ U[0, 1): mean (0.5 - bias) * scale = -0.01,
# spread of +-0.1 per tick, so a search usually decays but can still spike to a detection.
CONFIDENCE_STEP_SCALE = 0.2
CONFIDENCE_STEP_BIAS = 0.55


@dataclass(frozen=True)
class PlatformProfile:
    speed: float  # meters per tick
    cruise_altitude: float = 0.0
    climb_rate: float = 0.0  # meters per tick


PLATFORMS: dict[str, PlatformProfile] = {
    "ground": PlatformProfile(speed=0.2),
    "aerial": PlatformProfile(speed=0.5, cruise_altitude=1.5, climb_rate=0.1),
}


@dataclass(frozen=True)
class SensorSuite:
    camera: bool = True
    lidar: bool = False
    imu: bool = True


@dataclass
class RobotConfig:
    id: str
    name: str
    robot_type: str  # ground | aerial
    start_x: float = 0.0
    start_y: float = 0.0
    start_z: float = 0.0
    start_yaw: float = 0.0
    battery: float = 100.0
    sensors: SensorSuite = field(default_factory=SensorSuite)


@dataclass
class FleetConfig:
    robots: list[RobotConfig] = field(default_factory=list)

    @classmethod
    def default(cls) -> FleetConfig:
        # Coordinates are meters from the tunnel entrance
        return cls(
            robots=[
                RobotConfig(
                    id="go2_01",
                    name="Go2-Alpha",
                    robot_type="ground",
                    start_x=5.0,
                    start_y=2.0,
                    start_z=0.2,
                    battery=88.0,
                    sensors=SensorSuite(camera=True, lidar=True, imu=True),
                ),
                RobotConfig(
                    id="uav_01",
                    name="Sky-Eye-1",
                    robot_type="aerial",
                    start_x=2.0,
                    start_y=-1.0,
                    start_z=0.0,  # landed
                    battery=95.0,
                    sensors=SensorSuite(camera=True, lidar=False, imu=True),
                ),
            ]
        )
