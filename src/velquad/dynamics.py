"""
Rigid body dynamics for a simulated link.

Implements continuous-time dynamics and RK4 integration.
Uses quaternion attitude representation throughout. The applied wrench is
expressed in the body frame and held constant over a step.
"""

import numpy as np
from numpy.typing import NDArray

from velquad.types import BodyState, Wrench
from velquad.params import VehicleParams
from velquad.math3d import quat_normalize, quat_to_R


def omega_matrix(w: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Construct the quaternion derivative matrix Omega(w).

    For quaternion kinematics: q_dot = 0.5 * Omega(w) @ q

    Args:
        w: Angular velocity in body frame [rad/s], shape (3,)

    Returns:
        Omega matrix, shape (4, 4)
    """
    wx, wy, wz = w
    return np.array([
        [0.0, -wx, -wy, -wz],
        [wx,  0.0,  wz, -wy],
        [wy, -wz,  0.0,  wx],
        [wz,  wy, -wx,  0.0],
    ])


def state_derivative(
    state: BodyState,
    wrench: Wrench,
    vehicle: VehicleParams,
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """
    Compute time derivatives of all state components.

    Dynamics:
        p_dot = v
        v_dot = [0, 0, -g] + (1/m) * R(q) @ f_body
        q_dot = 0.5 * Omega(w_body) @ q
        w_dot = J^{-1} * (tau - w × (J @ w)),  J = diag(moi)

    Args:
        state: Current state
        wrench: Body-frame force and torque
        vehicle: Mass, principal inertia and gravity

    Returns:
        Tuple of (p_dot, v_dot, q_dot, w_dot)
    """
    q = state.q
    w = state.w_body

    R = quat_to_R(q)
    force_world = R @ wrench.force

    p_dot = state.v

    gravity = np.array([0.0, 0.0, -vehicle.gravity])
    v_dot = gravity + force_world / vehicle.mass

    q_dot = 0.5 * omega_matrix(w) @ q

    # Euler's equation with a diagonal inertia tensor
    Jw = vehicle.moi * w
    gyroscopic = np.cross(w, Jw)
    w_dot = (wrench.torque - gyroscopic) / vehicle.moi

    return p_dot, v_dot, q_dot, w_dot


def step_rk4(
    state: BodyState,
    wrench: Wrench,
    vehicle: VehicleParams,
    dt: float,
) -> BodyState:
    """
    4th-order Runge-Kutta integration step.

    The wrench is assumed constant over the timestep.

    Args:
        state: Current state
        wrench: Body-frame force and torque
        vehicle: Vehicle parameters
        dt: Time step [s]

    Returns:
        Next state after dt
    """
    def pack(s: BodyState) -> NDArray[np.float64]:
        return np.concatenate([s.p, s.v, s.q, s.w_body])

    def unpack(x: NDArray[np.float64]) -> BodyState:
        return BodyState(
            p=x[0:3],
            v=x[3:6],
            q=x[6:10],
            w_body=x[10:13],
        )

    def f(x: NDArray[np.float64]) -> NDArray[np.float64]:
        p_dot, v_dot, q_dot, w_dot = state_derivative(unpack(x), wrench, vehicle)
        return np.concatenate([p_dot, v_dot, q_dot, w_dot])

    x = pack(state)
    k1 = f(x)
    k2 = f(x + 0.5 * dt * k1)
    k3 = f(x + 0.5 * dt * k2)
    k4 = f(x + dt * k3)

    x_next = x + (dt / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)

    new_state = unpack(x_next)
    new_state.q = quat_normalize(new_state.q)

    return new_state
