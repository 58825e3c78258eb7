"""
Visualization functions for simulation results.

Provides plots for analyzing velocity tracking, clamping and the applied
wrench.
"""

from typing import List

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from velquad.types import SimLog


def plot_velocity_tracking(
    log: SimLog,
    title: str = "Velocity Tracking",
    show: bool = False,
) -> Figure:
    """
    Plot measured vs setpoint for all four channels.

    Args:
        log: Simulation log
        title: Plot title
        show: If True, call plt.show()

    Returns:
        matplotlib Figure
    """
    fig, axes = plt.subplots(4, 1, figsize=(10, 9), sharex=True)

    labels = ['v_x [m/s]', 'v_y [m/s]', 'v_z [m/s]', 'ω_z [rad/s]']
    measured = log.measured

    for i, (ax, label) in enumerate(zip(axes, labels)):
        ax.plot(log.t, log.setpoint[:, i], 'b--', label='Setpoint',
                linewidth=2, alpha=0.7)
        ax.plot(log.t, measured[:, i], 'r-', label='Measured', linewidth=1.5)
        ax.set_ylabel(label)
        ax.grid(True, alpha=0.3)

    axes[0].set_title(title)
    axes[0].legend(loc='upper right')
    axes[-1].set_xlabel('Time [s]')

    fig.tight_layout()

    if show:
        plt.show()

    return fig


def plot_accel_demand(
    log: SimLog,
    title: str = "Acceleration Demand",
    show: bool = False,
) -> Figure:
    """
    Plot raw vs clamped acceleration demand per channel.

    Args:
        log: Simulation log
        title: Plot title
        show: If True, call plt.show()

    Returns:
        matplotlib Figure
    """
    fig, axes = plt.subplots(4, 1, figsize=(10, 9), sharex=True)

    labels = ['a_x [m/s²]', 'a_y [m/s²]', 'a_z [m/s²]', 'α_z [rad/s²]']
    for i, (ax, label) in enumerate(zip(axes, labels)):
        ax.plot(log.t, log.ubar[:, i], 'k:', label='Raw', linewidth=1.5)
        ax.plot(log.t, log.accel[:, i], 'm-', label='Clamped', linewidth=1.5)
        ax.set_ylabel(label)
        ax.grid(True, alpha=0.3)

    axes[0].set_title(title)
    axes[0].legend(loc='upper right')
    axes[-1].set_xlabel('Time [s]')

    fig.tight_layout()

    if show:
        plt.show()

    return fig


def plot_wrench(
    log: SimLog,
    title: str = "Applied Force and Torque",
    show: bool = False,
) -> Figure:
    """
    Plot the applied body-frame force and torque over time.

    Args:
        log: Simulation log
        title: Plot title
        show: If True, call plt.show()

    Returns:
        matplotlib Figure
    """
    fig, axes = plt.subplots(2, 1, figsize=(10, 6), sharex=True)

    colors = ['r', 'g', 'b']
    for i, (label, color) in enumerate(zip(['F_x', 'F_y', 'F_z'], colors)):
        axes[0].plot(log.t, log.force[:, i], color=color, label=label, linewidth=1.5)
    axes[0].set_ylabel('Force [N]')
    axes[0].set_title(title)
    axes[0].legend(loc='upper right')
    axes[0].grid(True, alpha=0.3)

    labels = ['τ_x (roll)', 'τ_y (pitch)', 'τ_z (yaw)']
    for i, (label, color) in enumerate(zip(labels, colors)):
        axes[1].plot(log.t, log.torque[:, i] * 1000, color=color,
                     label=label, linewidth=1.5)  # Convert to mN·m
    axes[1].set_ylabel('Torque [mN·m]')
    axes[1].set_xlabel('Time [s]')
    axes[1].legend(loc='upper right')
    axes[1].grid(True, alpha=0.3)

    fig.tight_layout()

    if show:
        plt.show()

    return fig


def plot_path(
    log: SimLog,
    title: str = "Path",
    show: bool = False,
) -> Figure:
    """
    Plot the world XY path and yaw angle.

    Args:
        log: Simulation log
        title: Plot title
        show: If True, call plt.show()

    Returns:
        matplotlib Figure
    """
    fig, (ax_xy, ax_yaw) = plt.subplots(1, 2, figsize=(12, 5))

    ax_xy.plot(log.p[:, 0], log.p[:, 1], 'r-', linewidth=1.5)
    ax_xy.plot(log.p[0, 0], log.p[0, 1], 'go', markersize=10, label='Start')
    ax_xy.plot(log.p[-1, 0], log.p[-1, 1], 'rx', markersize=10, label='End')
    ax_xy.set_xlabel('X [m]')
    ax_xy.set_ylabel('Y [m]')
    ax_xy.set_title(title)
    ax_xy.legend()
    ax_xy.grid(True, alpha=0.3)
    ax_xy.axis('equal')

    ax_yaw.plot(log.t, log.euler[:, 2], 'b-', linewidth=1.5)
    ax_yaw.set_xlabel('Time [s]')
    ax_yaw.set_ylabel('Yaw [rad]')
    ax_yaw.grid(True, alpha=0.3)

    fig.tight_layout()

    if show:
        plt.show()

    return fig


def plot_all(log: SimLog, name: str = "Simulation") -> List[Figure]:
    """Create every figure for one run."""
    return [
        plot_velocity_tracking(log, f"{name}: Velocity Tracking"),
        plot_accel_demand(log, f"{name}: Acceleration Demand"),
        plot_wrench(log, f"{name}: Applied Wrench"),
        plot_path(log, f"{name}: Path"),
    ]
