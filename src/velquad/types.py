"""
Core data types for the velocity controller and its simulation.

All vectors use numpy with explicit shapes noted in comments.
Quaternion convention: [w, x, y, z] (scalar-first).
"""

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray


@dataclass
class BodyState:
    """
    Rigid-body state of a simulated link.

    Attributes:
        p: Position in world frame [m], shape (3,)
        v: Velocity in world frame [m/s], shape (3,)
        q: Attitude quaternion [w, x, y, z], shape (4,)
        w_body: Angular velocity in body frame [rad/s], shape (3,)
    """

    p: NDArray[np.float64]  # (3,)
    v: NDArray[np.float64]  # (3,)
    q: NDArray[np.float64]  # (4,) [w, x, y, z]
    w_body: NDArray[np.float64]  # (3,)

    def copy(self) -> "BodyState":
        """Create a deep copy of this state."""
        return BodyState(
            p=self.p.copy(),
            v=self.v.copy(),
            q=self.q.copy(),
            w_body=self.w_body.copy(),
        )

    @staticmethod
    def zeros() -> "BodyState":
        """Create a zero state with identity quaternion."""
        return BodyState(
            p=np.zeros(3),
            v=np.zeros(3),
            q=np.array([1.0, 0.0, 0.0, 0.0]),  # Identity quaternion
            w_body=np.zeros(3),
        )


@dataclass
class Wrench:
    """
    Force and torque accumulated on a link for one step, in the body frame.

    Attributes:
        force: Net force [N], shape (3,)
        torque: Net torque about the center of mass [N·m], shape (3,)
    """

    force: NDArray[np.float64]  # (3,)
    torque: NDArray[np.float64]  # (3,)

    @staticmethod
    def zeros() -> "Wrench":
        return Wrench(force=np.zeros(3), torque=np.zeros(3))


@dataclass(frozen=True)
class VelocityCommand:
    """
    Normalized body-frame velocity command (joystick style).

    Each component is nominally in [-1, 1] and is scaled by the
    controller's maximum velocities before becoming a setpoint.

    Attributes:
        x: Forward velocity command
        y: Leftward velocity command
        z: Upward velocity command
        yaw: Yaw-rate command (counter-clockwise positive)
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    yaw: float = 0.0

    @staticmethod
    def zero() -> "VelocityCommand":
        """Command that holds the vehicle still."""
        return VelocityCommand()


@dataclass(frozen=True)
class UpdateInfo:
    """Timing information passed to world-update callbacks."""

    sim_time: float
    step: int = 0


@dataclass
class TickResult:
    """
    Everything the flight dynamics step computed during one tick.

    Attributes:
        dt: Elapsed sim time since the previous tick [s]
        v_body: Measured body-frame linear velocity [m/s], shape (3,)
        w_body: Measured body-frame angular velocity [rad/s], shape (3,)
        setpoint: Channel setpoints [vx, vy, vz, yaw_rate], shape (4,)
        lin_ubar: Raw linear acceleration demand [m/s²], shape (3,)
        ang_ubar: Raw angular acceleration demand [rad/s²], shape (3,)
        lin_accel: Clamped linear acceleration [m/s²], shape (3,)
        ang_accel: Clamped angular acceleration [rad/s²], shape (3,)
        force: Force applied at the center-of-mass offset [N], shape (3,)
        torque: Torque applied about the center of mass [N·m], shape (3,)
    """

    dt: float
    v_body: NDArray[np.float64]
    w_body: NDArray[np.float64]
    setpoint: NDArray[np.float64]
    lin_ubar: NDArray[np.float64]
    ang_ubar: NDArray[np.float64]
    lin_accel: NDArray[np.float64]
    ang_accel: NDArray[np.float64]
    force: NDArray[np.float64]
    torque: NDArray[np.float64]


@dataclass
class SimLog:
    """
    Simulation log storing time histories of the control loop.

    All arrays have shape (N,), (N, 3) or (N, 4) where N is number of timesteps.
    """

    # Time
    t: NDArray[np.float64]  # (N,)

    # Measured state
    v_body: NDArray[np.float64]  # (N, 3)
    w_body: NDArray[np.float64]  # (N, 3)
    euler: NDArray[np.float64]  # (N, 3) roll, pitch, yaw
    p: NDArray[np.float64]  # (N, 3) world position

    # Setpoints [vx, vy, vz, yaw_rate]
    setpoint: NDArray[np.float64]  # (N, 4)

    # Demand before and after clamping [ax, ay, az, yaw_accel]
    ubar: NDArray[np.float64]  # (N, 4)
    accel: NDArray[np.float64]  # (N, 4)

    # Applied wrench
    force: NDArray[np.float64]  # (N, 3)
    torque: NDArray[np.float64]  # (N, 3)

    # Current write index
    _idx: int = field(default=0, repr=False)

    @staticmethod
    def allocate(n_steps: int) -> "SimLog":
        """Pre-allocate arrays for n_steps timesteps."""
        return SimLog(
            t=np.zeros(n_steps),
            v_body=np.zeros((n_steps, 3)),
            w_body=np.zeros((n_steps, 3)),
            euler=np.zeros((n_steps, 3)),
            p=np.zeros((n_steps, 3)),
            setpoint=np.zeros((n_steps, 4)),
            ubar=np.zeros((n_steps, 4)),
            accel=np.zeros((n_steps, 4)),
            force=np.zeros((n_steps, 3)),
            torque=np.zeros((n_steps, 3)),
            _idx=0,
        )

    def record(
        self,
        t: float,
        tick: TickResult,
        euler: NDArray[np.float64],
        p: NDArray[np.float64],
    ) -> None:
        """Record one timestep of data."""
        i = self._idx
        self.t[i] = t
        self.v_body[i] = tick.v_body
        self.w_body[i] = tick.w_body
        self.euler[i] = euler
        self.p[i] = p
        self.setpoint[i] = tick.setpoint
        self.ubar[i, :3] = tick.lin_ubar
        self.ubar[i, 3] = tick.ang_ubar[2]
        self.accel[i, :3] = tick.lin_accel
        self.accel[i, 3] = tick.ang_accel[2]
        self.force[i] = tick.force
        self.torque[i] = tick.torque
        self._idx += 1

    def trim(self) -> "SimLog":
        """Trim arrays to actual recorded length."""
        n = self._idx
        return SimLog(
            t=self.t[:n],
            v_body=self.v_body[:n],
            w_body=self.w_body[:n],
            euler=self.euler[:n],
            p=self.p[:n],
            setpoint=self.setpoint[:n],
            ubar=self.ubar[:n],
            accel=self.accel[:n],
            force=self.force[:n],
            torque=self.torque[:n],
            _idx=n,
        )

    @property
    def measured(self) -> NDArray[np.float64]:
        """Measured channel values [vx, vy, vz, yaw_rate], shape (N, 4)."""
        return np.column_stack([self.v_body, self.w_body[:, 2]])
