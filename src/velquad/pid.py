"""
Single-channel discrete PID regulator.

One ChannelController drives one scalar degree of freedom (surge, sway,
heave or yaw rate). Its output is an acceleration demand; clamping and the
conversion to force/torque belong to the caller.

Threading model:
    The setpoint is the only field written from outside the tick loop. It
    is guarded by a lock so that a command thread can call set_target()
    while the simulation thread runs update(). The integral accumulator and
    the previous error are touched only by update().
"""

import threading
from typing import Optional

from velquad.math3d import wrap_angle_pi


class ChannelController:
    """
    PID regulator for one scalar channel.

    Args:
        angular: If True, the error is wrapped into (-pi, pi]
        kp, ki, kd: Gains, fixed for the lifetime of the controller
        integral_limit: Optional anti-windup bound on the accumulator
    """

    def __init__(
        self,
        angular: bool,
        kp: float,
        ki: float,
        kd: float,
        integral_limit: Optional[float] = None,
    ):
        self._angular = angular
        self._kp = kp
        self._ki = ki
        self._kd = kd
        self._integral_limit = integral_limit

        self._target_lock = threading.Lock()
        self._target = 0.0

        self._integral = 0.0
        self._prev_error = 0.0
        self._has_prev = False
        self._last_target = 0.0

    @property
    def angular(self) -> bool:
        return self._angular

    @property
    def gains(self) -> tuple[float, float, float]:
        return self._kp, self._ki, self._kd

    @property
    def target(self) -> float:
        with self._target_lock:
            return self._target

    @property
    def last_target(self) -> float:
        """Setpoint used by the most recent update()."""
        return self._last_target

    @property
    def integral(self) -> float:
        return self._integral

    def set_target(self, target: float) -> None:
        """Replace the setpoint; takes effect on the next update()."""
        with self._target_lock:
            self._target = float(target)

    def update(self, state: float, dt: float) -> float:
        """
        Advance the regulator by one step.

        Args:
            state: Measured value of the controlled quantity
            dt: Time since the previous update [s], >= 0

        Returns:
            Acceleration demand kp*e + ki*integral + kd*de/dt (unclamped)
        """
        with self._target_lock:
            target = self._target
        self._last_target = target

        error = target - state
        if self._angular:
            error = wrap_angle_pi(error)

        self._integral += error * dt
        if self._integral_limit is not None:
            self._integral = min(max(self._integral, -self._integral_limit),
                                 self._integral_limit)

        # No derivative kick on the first update or when dt == 0
        if self._has_prev and dt > 0.0:
            derivative = (error - self._prev_error) / dt
        else:
            derivative = 0.0
        self._prev_error = error
        self._has_prev = True

        return self._kp * error + self._ki * self._integral + self._kd * derivative

    def reset(self) -> None:
        """Clear the integral and derivative history (setpoint is kept)."""
        self._integral = 0.0
        self._prev_error = 0.0
        self._has_prev = False
