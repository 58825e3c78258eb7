"""
Velocity-tracking flight controller.

Once per simulation tick the controller:
    1. Computes dt from the sim clock (dt = 0 on the first tick)
    2. Reads body-frame linear and angular velocity from the link
    3. Runs the x, y, z and yaw-rate channels to get acceleration demands
    4. Clamps each demand to its per-axis bound
    5. Scales by mass (force) and principal inertia (torque)
    6. Overwrites roll and pitch with zero, keeping yaw
    7. Applies the force at the center-of-mass offset and the torque about
       the center of mass

Velocity commands are normalized (joystick style) and may arrive from any
thread; they only ever overwrite channel setpoints.
"""

import logging
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from velquad.body import Link, Model
from velquad.params import ControllerParams, PluginConfig
from velquad.pid import ChannelController
from velquad.math3d import zero_roll_pitch
from velquad.types import TickResult, UpdateInfo, VelocityCommand

logger = logging.getLogger(__name__)


class LinkNotFoundError(LookupError):
    """Raised at load time when the configured link does not exist."""


def clamp(v: float, max_abs: float) -> float:
    """Symmetric hard saturation of v to [-max_abs, max_abs]."""
    return max_abs if v > max_abs else (-max_abs if v < -max_abs else v)


def scale_command(cmd: VelocityCommand, params: ControllerParams) -> NDArray[np.float64]:
    """
    Convert a normalized command into channel setpoints.

    Returns:
        Setpoints [vx, vy, vz, yaw_rate], shape (4,)
    """
    return np.array([
        cmd.x * params.max_xy_vel,
        cmd.y * params.max_xy_vel,
        cmd.z * params.max_z_vel,
        cmd.yaw * params.max_yaw_rate,
    ])


class FlightController:
    """
    Four-channel velocity controller bound to one link.

    Use FlightController.load() to resolve the link from a model; the
    constructor takes the link directly.
    """

    def __init__(
        self,
        link: Link,
        params: Optional[ControllerParams] = None,
        config: Optional[PluginConfig] = None,
    ):
        if link is None:
            raise LinkNotFoundError("Missing link")
        _check_inertial(link)

        self.link = link
        self.params = params if params is not None else ControllerParams()
        self.config = config if config is not None else PluginConfig()

        p = self.params
        self.x_controller = _make_channel(p.x, angular=False, limit=p.integral_limit)
        self.y_controller = _make_channel(p.y, angular=False, limit=p.integral_limit)
        self.z_controller = _make_channel(p.z, angular=False, limit=p.integral_limit)
        self.yaw_controller = _make_channel(p.yaw, angular=p.yaw_wraps, limit=p.integral_limit)

        # Sim time of the last processed tick
        self._sim_time: Optional[float] = None
        self._tick_count = 0

    @classmethod
    def load(
        cls,
        model: Model,
        config: Optional[PluginConfig] = None,
        params: Optional[ControllerParams] = None,
    ) -> "FlightController":
        """
        Resolve the configured link in model and build a controller for it.

        Raises:
            ValueError: model is None
            LinkNotFoundError: the model has no link named config.link_name
        """
        if model is None:
            raise ValueError("Model is null")
        config = config if config is not None else PluginConfig()

        logger.info("velocity controller loading")
        logger.info("  ns: %s", config.ns)
        logger.info("  link_name: %s", config.link_name)
        logger.info("  center_of_mass: %s", np.array2string(config.center_of_mass, precision=2))

        link = model.get_link(config.link_name)
        if link is None:
            raise LinkNotFoundError(
                f"Missing link '{config.link_name}' in model '{model.name}'"
            )
        return cls(link, params=params, config=config)

    @property
    def channels(self) -> tuple[ChannelController, ...]:
        return (self.x_controller, self.y_controller, self.z_controller, self.yaw_controller)

    @property
    def setpoint(self) -> NDArray[np.float64]:
        """Current setpoints [vx, vy, vz, yaw_rate], shape (4,)."""
        return np.array([c.target for c in self.channels])

    # ------------------------------------------------------------------
    # Command path (any thread)
    # ------------------------------------------------------------------
    def on_command(self, cmd: VelocityCommand) -> None:
        """Store a normalized velocity command as the new setpoints."""
        vx, vy, vz, yaw_rate = scale_command(cmd, self.params)
        self.x_controller.set_target(vx)
        self.y_controller.set_target(vy)
        self.z_controller.set_target(vz)
        self.yaw_controller.set_target(yaw_rate)

    # ------------------------------------------------------------------
    # Tick path (simulation thread)
    # ------------------------------------------------------------------
    def on_update(self, info: UpdateInfo) -> TickResult:
        """Run one tick of the controller and apply the resulting wrench."""
        self._tick_count += 1
        debug = (self._tick_count % self.params.debug_every == 0
                 and logger.isEnabledFor(logging.DEBUG))

        if self._sim_time is None:
            dt = 0.0
        else:
            dt = max(info.sim_time - self._sim_time, 0.0)
        self._sim_time = info.sim_time

        linear_velocity = self.link.relative_linear_vel()
        angular_velocity = self.link.relative_angular_vel()

        # Targets are read once per channel per tick, inside update()
        lin_ubar = np.array([
            self.x_controller.update(linear_velocity[0], dt),
            self.y_controller.update(linear_velocity[1], dt),
            self.z_controller.update(linear_velocity[2], dt),
        ])
        ang_ubar = np.array([
            0.0,
            0.0,
            self.yaw_controller.update(angular_velocity[2], dt),
        ])

        p = self.params
        lin_accel = np.array([
            clamp(lin_ubar[0], p.max_xy_accel),
            clamp(lin_ubar[1], p.max_xy_accel),
            clamp(lin_ubar[2], p.max_z_accel),
        ])
        ang_accel = np.array([0.0, 0.0, clamp(ang_ubar[2], p.max_yaw_accel)])

        force = lin_accel * self.link.mass
        torque = ang_accel * self.link.moi

        # Roll and pitch are pinned to zero every tick
        pos, rot = self.link.world_pose()
        self.link.set_world_pose(pos, zero_roll_pitch(rot))

        self.link.add_link_force(force, self.config.center_of_mass)
        self.link.add_relative_torque(torque)

        if debug:
            logger.debug("t=%.3f linear v: %s angular v: %s", info.sim_time,
                         linear_velocity, angular_velocity)
            logger.debug("lin_ubar: %s ang_ubar: %s", lin_ubar, ang_ubar)
            logger.debug("lin_ubar clamped: %s ang_ubar clamped: %s", lin_accel, ang_accel)
            logger.debug("force: %s torque: %s", force, torque)

        return TickResult(
            dt=dt,
            v_body=linear_velocity,
            w_body=angular_velocity,
            setpoint=np.array([c.last_target for c in self.channels]),
            lin_ubar=lin_ubar,
            ang_ubar=ang_ubar,
            lin_accel=lin_accel,
            ang_accel=ang_accel,
            force=force,
            torque=torque,
        )

    def reset(self) -> None:
        """Forget the previous tick time and all channel history."""
        self._sim_time = None
        self._tick_count = 0
        for channel in self.channels:
            channel.reset()


def _make_channel(gains, angular: bool, limit: Optional[float]) -> ChannelController:
    return ChannelController(angular, gains.kp, gains.ki, gains.kd, integral_limit=limit)


def _check_inertial(link: Link) -> None:
    moi = np.asarray(link.moi)
    if link.mass <= 0:
        raise ValueError(f"Link '{link.name}' has non-positive mass {link.mass}")
    if moi.shape != (3,) or np.any(moi <= 0):
        raise ValueError(f"Link '{link.name}' has invalid moment of inertia {moi}")
