"""
3D math utilities for quaternions, rotations and angles.

Quaternion convention: [w, x, y, z] (scalar-first, Hamilton convention).
Rotation convention: R rotates vectors from body to world frame.
Euler convention: ZYX (yaw-pitch-roll), returned as [roll, pitch, yaw].
"""

import math

import numpy as np
from numpy.typing import NDArray


def quat_normalize(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Normalize a quaternion to unit length.

    Args:
        q: Quaternion [w, x, y, z], shape (4,)

    Returns:
        Normalized quaternion, shape (4,)
    """
    norm = np.linalg.norm(q)
    if norm < 1e-10:
        # Return identity quaternion if input is near-zero
        return np.array([1.0, 0.0, 0.0, 0.0])
    return q / norm


def quat_to_R(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Convert quaternion to rotation matrix.

    The rotation matrix R rotates vectors from body to world frame:
        v_world = R @ v_body

    Args:
        q: Unit quaternion [w, x, y, z], shape (4,)

    Returns:
        Rotation matrix, shape (3, 3)
    """
    q = quat_normalize(q)
    w, x, y, z = q

    R = np.array([
        [1 - 2*(y*y + z*z),     2*(x*y - w*z),     2*(x*z + w*y)],
        [    2*(x*y + w*z), 1 - 2*(x*x + z*z),     2*(y*z - w*x)],
        [    2*(x*z - w*y),     2*(y*z + w*x), 1 - 2*(x*x + y*y)],
    ])
    return R


def world_to_body(q: NDArray[np.float64], v_world: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Express a world-frame vector in the body frame.

    Args:
        q: Unit quaternion [w, x, y, z], shape (4,)
        v_world: Vector in world frame, shape (3,)

    Returns:
        Vector in body frame, shape (3,)
    """
    return quat_to_R(q).T @ v_world


def wrap_angle_pi(angle: float) -> float:
    """
    Wrap angle to (-pi, pi].

    The upper bound is inclusive so that a half-turn error keeps its
    positive sign: wrap_angle_pi(pi) == pi and wrap_angle_pi(-pi) == pi.

    Args:
        angle: Angle in radians

    Returns:
        Wrapped angle in (-pi, pi]
    """
    w = math.remainder(angle, 2 * math.pi)
    return math.pi if w <= -math.pi else w


def quat_to_euler(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Convert quaternion to Euler angles (roll, pitch, yaw).

    Args:
        q: Unit quaternion [w, x, y, z], shape (4,)

    Returns:
        Euler angles [roll, pitch, yaw] in radians, shape (3,)
    """
    w, x, y, z = quat_normalize(q)

    # Roll (x-axis rotation)
    sinr_cosp = 2 * (w * x + y * z)
    cosr_cosp = 1 - 2 * (x * x + y * y)
    roll = np.arctan2(sinr_cosp, cosr_cosp)

    # Pitch (y-axis rotation)
    sinp = 2 * (w * y - z * x)
    # Handle gimbal lock
    if np.abs(sinp) >= 1:
        pitch = np.copysign(np.pi / 2, sinp)
    else:
        pitch = np.arcsin(sinp)

    # Yaw (z-axis rotation)
    siny_cosp = 2 * (w * z + x * y)
    cosy_cosp = 1 - 2 * (y * y + z * z)
    yaw = np.arctan2(siny_cosp, cosy_cosp)

    return np.array([roll, pitch, yaw])


def euler_to_quat(roll: float, pitch: float, yaw: float) -> NDArray[np.float64]:
    """
    Convert ZYX Euler angles to a unit quaternion.

    Inverse of quat_to_euler away from gimbal lock.

    Args:
        roll: Rotation about x [rad]
        pitch: Rotation about y [rad]
        yaw: Rotation about z [rad]

    Returns:
        Unit quaternion [w, x, y, z], shape (4,)
    """
    cr, sr = np.cos(roll / 2), np.sin(roll / 2)
    cp, sp = np.cos(pitch / 2), np.sin(pitch / 2)
    cy, sy = np.cos(yaw / 2), np.sin(yaw / 2)

    return np.array([
        cr * cp * cy + sr * sp * sy,
        sr * cp * cy - cr * sp * sy,
        cr * sp * cy + sr * cp * sy,
        cr * cp * sy - sr * sp * cy,
    ])


def zero_roll_pitch(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Return the orientation with roll and pitch removed and yaw kept.

    Args:
        q: Unit quaternion [w, x, y, z], shape (4,)

    Returns:
        Yaw-only unit quaternion [cos(yaw/2), 0, 0, sin(yaw/2)], shape (4,)
    """
    yaw = quat_to_euler(q)[2]
    return np.array([np.cos(yaw / 2), 0.0, 0.0, np.sin(yaw / 2)])
