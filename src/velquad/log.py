"""
Simulation recording utilities.

Provides pre-allocated logging for efficient data collection
during simulation, plus summary statistics.
"""

import numpy as np
from numpy.typing import NDArray

from velquad.types import SimLog, TickResult

CHANNELS = ("vx", "vy", "vz", "yaw_rate")


def allocate_log(n_steps: int) -> SimLog:
    """
    Allocate a SimLog with pre-allocated arrays.

    This is a convenience wrapper around SimLog.allocate().

    Args:
        n_steps: Number of timesteps to allocate

    Returns:
        Pre-allocated SimLog
    """
    return SimLog.allocate(n_steps)


def record_step(
    log: SimLog,
    t: float,
    tick: TickResult,
    euler: NDArray[np.float64],
    p: NDArray[np.float64],
) -> None:
    """
    Record one controller tick.

    Args:
        log: SimLog instance to record into
        t: Current sim time [s]
        tick: Result of FlightController.on_update
        euler: Attitude [roll, pitch, yaw] at the start of the tick
        p: World position at the start of the tick
    """
    log.record(t, tick, euler, p)


def compute_statistics(log: SimLog, settle_time: float = 0.0) -> dict:
    """
    Compute summary statistics from simulation log.

    Args:
        log: Completed simulation log
        settle_time: Samples before this time are ignored for RMSE [s]

    Returns:
        Dictionary with statistics:
        - rmse_<channel>: RMS tracking error per channel
        - final_error: Max absolute channel error at the last sample
        - saturation: Fraction of samples with any clamped channel
        - max_force: Peak force magnitude [N]
        - max_torque: Peak torque magnitude [N·m]
        - max_tilt: Peak |roll| or |pitch| seen at tick start [rad]
    """
    err = log.setpoint - log.measured
    mask = log.t >= settle_time
    if not np.any(mask):
        mask = np.ones_like(log.t, dtype=bool)

    stats = {}
    for i, name in enumerate(CHANNELS):
        stats[f"rmse_{name}"] = float(np.sqrt(np.mean(err[mask, i] ** 2)))

    clamped = np.any(~np.isclose(log.ubar, log.accel), axis=1)
    stats["final_error"] = float(np.max(np.abs(err[-1]))) if len(err) else 0.0
    stats["saturation"] = float(np.mean(clamped)) if len(clamped) else 0.0
    stats["max_force"] = float(np.max(np.linalg.norm(log.force, axis=1))) if len(log.t) else 0.0
    stats["max_torque"] = float(np.max(np.linalg.norm(log.torque, axis=1))) if len(log.t) else 0.0
    stats["max_tilt"] = float(np.max(np.abs(log.euler[:, :2]))) if len(log.t) else 0.0
    stats["simulation_time"] = float(log.t[-1]) if len(log.t) > 0 else 0.0

    return stats


def print_statistics(log: SimLog, name: str = "Simulation") -> None:
    """
    Print summary statistics to console.

    Args:
        log: Completed simulation log
        name: Name of simulation for display
    """
    stats = compute_statistics(log)

    print(f"\n{name} Statistics:")
    print(f"  Duration:        {stats['simulation_time']:.2f} s")
    print(f"  RMSE vx/vy/vz:   {stats['rmse_vx']:.3f} / {stats['rmse_vy']:.3f} / "
          f"{stats['rmse_vz']:.3f} m/s")
    print(f"  RMSE yaw rate:   {stats['rmse_yaw_rate']:.3f} rad/s")
    print(f"  Final error:     {stats['final_error']:.4f}")
    print(f"  Saturated:       {stats['saturation']*100:.1f} % of ticks")
    print(f"  Max force:       {stats['max_force']:.3f} N")
    print(f"  Max torque:      {stats['max_torque']*1000:.3f} mN·m")
