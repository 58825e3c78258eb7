"""
Vehicle parameters, controller gains and plugin configuration.

Default values mirror a ~90 g Tello-class quadrotor flown by the
velocity controller with pure proportional gains.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from numpy.typing import NDArray


@dataclass
class ChannelGains:
    """PID gains for one velocity channel."""

    kp: float = 2.0
    ki: float = 0.0
    kd: float = 0.0


@dataclass
class ControllerParams:
    """
    Velocity controller configuration.

    Gains:
        x, y, z: Surge, sway and heave channel gains (linear velocity)
        yaw: Yaw-rate channel gains (angular velocity about body z)

    Command Scaling (normalized command -> setpoint):
        max_xy_vel: Horizontal velocity at full stick [m/s]
        max_z_vel: Vertical velocity at full stick [m/s]
        max_yaw_rate: Yaw rate at full stick [rad/s]

    Acceleration Bounds (symmetric saturation of the demand):
        max_xy_accel: Horizontal bound [m/s²]
        max_z_accel: Vertical bound [m/s²]
        max_yaw_accel: Yaw bound [rad/s²]

    Options:
        integral_limit: Anti-windup bound on each channel's integral
            accumulator (None = unbounded)
        yaw_wraps: Wrap the yaw channel error into (-pi, pi]
        debug_every: Ticks between debug dumps when DEBUG logging is on
    """

    x: ChannelGains = field(default_factory=ChannelGains)
    y: ChannelGains = field(default_factory=ChannelGains)
    z: ChannelGains = field(default_factory=ChannelGains)
    yaw: ChannelGains = field(default_factory=ChannelGains)

    max_xy_vel: float = 8.0
    max_z_vel: float = 4.0
    max_yaw_rate: float = np.pi

    max_xy_accel: float = 8.0
    max_z_accel: float = 4.0
    max_yaw_accel: float = np.pi

    integral_limit: Optional[float] = None
    yaw_wraps: bool = False
    debug_every: int = 100

    def __post_init__(self) -> None:
        """Validate bounds and convert nested dicts (from JSON)."""
        for name in ("x", "y", "z", "yaw"):
            gains = getattr(self, name)
            if isinstance(gains, dict):
                setattr(self, name, ChannelGains(**gains))

        bounds = {
            "max_xy_vel": self.max_xy_vel,
            "max_z_vel": self.max_z_vel,
            "max_yaw_rate": self.max_yaw_rate,
            "max_xy_accel": self.max_xy_accel,
            "max_z_accel": self.max_z_accel,
            "max_yaw_accel": self.max_yaw_accel,
        }
        for name, value in bounds.items():
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.integral_limit is not None and self.integral_limit < 0:
            raise ValueError(f"integral_limit must be >= 0, got {self.integral_limit}")
        if self.debug_every < 1:
            raise ValueError(f"debug_every must be >= 1, got {self.debug_every}")


@dataclass
class PluginConfig:
    """
    Model-level configuration read once at load time.

    Attributes:
        ns: Namespace prefix for topic names ("" = none)
        link_name: Name of the body link the controller drives
        center_of_mass: Force application point in the link frame [m], shape (3,)
    """

    ns: str = ""
    link_name: str = "base_link"
    center_of_mass: NDArray[np.float64] = field(
        default_factory=lambda: np.zeros(3)
    )

    def __post_init__(self) -> None:
        self.center_of_mass = np.array(self.center_of_mass, dtype=np.float64)
        if self.center_of_mass.shape != (3,):
            raise ValueError(
                f"center_of_mass must have 3 components, got {self.center_of_mass.shape}"
            )


@dataclass
class VehicleParams:
    """
    Physical parameters of the simulated body.

    Attributes:
        mass: Mass [kg]
        moi: Principal moments of inertia [kg·m²], shape (3,)
        gravity: Gravitational acceleration along world -z [m/s²]
    """

    mass: float = 0.088
    moi: NDArray[np.float64] = field(
        default_factory=lambda: np.array([9.0e-5, 9.1e-5, 1.4e-4])
    )
    # Heave authority (max_z_accel) is below 1 g, so the default vehicle
    # flies with gravity disabled.
    gravity: float = 0.0

    def __post_init__(self) -> None:
        self.moi = np.array(self.moi, dtype=np.float64)
        if self.mass <= 0:
            raise ValueError(f"mass must be positive, got {self.mass}")
        if self.moi.shape != (3,) or np.any(self.moi <= 0):
            raise ValueError(f"moi must be 3 positive components, got {self.moi}")


@dataclass
class Params:
    """
    Complete parameter set for a simulation run.

    Timing:
        dt: Physics step [s] (1 kHz by default)
        command_period: Interval between command deliveries [s]
        telemetry_period: Interval between flight data messages [s]
    """

    controller: ControllerParams = field(default_factory=ControllerParams)
    plugin: PluginConfig = field(default_factory=PluginConfig)
    vehicle: VehicleParams = field(default_factory=VehicleParams)

    dt: float = 0.001
    command_period: float = 0.05
    telemetry_period: float = 0.1

    def __post_init__(self) -> None:
        if isinstance(self.controller, dict):
            self.controller = ControllerParams(**self.controller)
        if isinstance(self.plugin, dict):
            self.plugin = PluginConfig(**self.plugin)
        if isinstance(self.vehicle, dict):
            self.vehicle = VehicleParams(**self.vehicle)
        for name in ("dt", "command_period", "telemetry_period"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")


def default_params() -> Params:
    """
    Create default parameters.

    Proportional-only gains (kp=2) on all four channels, Tello-class
    mass and inertia, 1 kHz physics.
    """
    return Params()
