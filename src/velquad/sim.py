"""
Main simulation loop.

Orchestrates the interaction between the command profile, the velocity
controller, telemetry and the rigid-body physics for a complete run.

The simulation pipeline per timestep is:
    1. Command delivery (every command_period)  →  channel setpoints
    2. World update-begin callbacks  →  controller tick (force + torque)
    3. Telemetry (every telemetry_period)  →  FlightData
    4. RK4 physics step of every link  →  next state
"""

from typing import Callable, List, Optional

import numpy as np

from velquad.body import Model, make_quadrotor
from velquad.commands import CommandFn, hold, step_command
from velquad.flight import FlightController
from velquad.log import allocate_log, record_step
from velquad.math3d import quat_to_euler
from velquad.params import Params, default_params
from velquad.telemetry import FlightData, TelemetryPublisher, topic_name
from velquad.types import BodyState, SimLog, UpdateInfo, VelocityCommand


class World:
    """
    Fixed-step world clock.

    Callbacks registered with connect_update_begin() run at the start of
    every step, before the links are integrated.
    """

    def __init__(self, model: Model, dt: float):
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")
        self.model = model
        self.dt = dt
        self.step_count = 0
        self._update_begin: List[Callable[[UpdateInfo], object]] = []

    @property
    def sim_time(self) -> float:
        return self.step_count * self.dt

    def connect_update_begin(self, fn: Callable[[UpdateInfo], object]) -> None:
        self._update_begin.append(fn)

    def step(self) -> None:
        info = UpdateInfo(sim_time=self.sim_time, step=self.step_count)
        for fn in self._update_begin:
            fn(info)
        for link in self.model.links:
            link.step(self.dt)
        self.step_count += 1


def run_sim(
    params: Params,
    command_fn: CommandFn,
    t_final: float,
    x0: Optional[BodyState] = None,
    on_flight_data: Optional[Callable[[FlightData], None]] = None,
    verbose: bool = False,
) -> SimLog:
    """
    Run a complete velocity-tracking simulation.

    Args:
        params: Controller, plugin, vehicle and timing parameters
        command_fn: Command profile t -> VelocityCommand
        t_final: Simulation end time [s]
        x0: Initial state (default: origin, at rest, level)
        on_flight_data: Optional telemetry subscriber
        verbose: Print progress updates

    Returns:
        SimLog containing complete simulation history
    """
    dt = params.dt
    n_steps = int(np.ceil(t_final / dt)) + 1

    model = make_quadrotor(params.vehicle, params.plugin.link_name, x0)
    controller = FlightController.load(model, params.plugin, params.controller)
    link = controller.link
    world = World(model, dt)

    telemetry = TelemetryPublisher(
        topic_name(params.plugin.ns, "flight_data"), params.telemetry_period,
    )
    if on_flight_data is not None:
        telemetry.subscribe(on_flight_data)

    log = allocate_log(n_steps)
    command_every = max(int(round(params.command_period / dt)), 1)

    def tick(info: UpdateInfo) -> None:
        if info.step % command_every == 0:
            controller.on_command(command_fn(info.sim_time))
        euler = quat_to_euler(link.state.q)
        p = link.state.p.copy()
        result = controller.on_update(info)
        record_step(log, info.sim_time, result, euler, p)
        telemetry.maybe_publish(link, info.sim_time)

    world.connect_update_begin(tick)

    if verbose:
        print(f"Starting simulation: t_final={t_final}s, dt={dt*1000:.1f}ms, steps={n_steps}")
        print(f"  Commands every {command_every} steps, telemetry on '{telemetry.topic}'")

    while world.step_count < n_steps:
        world.step()

        if verbose and world.step_count % 1000 == 0:
            v = link.relative_linear_vel()
            print(f"  t={world.sim_time:.2f}s, v_body=[{v[0]:.2f}, {v[1]:.2f}, {v[2]:.2f}]")

    log = log.trim()

    if verbose:
        print(f"Simulation complete: {world.step_count} steps, "
              f"{telemetry.published} flight data messages")

    return log


def run_hover_test(
    params: Optional[Params] = None,
    t_final: float = 2.0,
) -> SimLog:
    """
    Run a zero-command test; the vehicle should stay at rest.

    Args:
        params: Parameters (default: default_params())
        t_final: Simulation time [s]

    Returns:
        SimLog
    """
    if params is None:
        params = default_params()
    return run_sim(params, hold(), t_final)


def run_step_test(
    params: Optional[Params] = None,
    cmd: Optional[VelocityCommand] = None,
    t_final: float = 4.0,
) -> SimLog:
    """
    Run a velocity step response test.

    Args:
        params: Parameters (default: default_params())
        cmd: Command stepped in at t=0.5s (default: half forward stick)
        t_final: Simulation time [s]

    Returns:
        SimLog
    """
    if params is None:
        params = default_params()
    if cmd is None:
        cmd = VelocityCommand(x=0.5)
    return run_sim(params, step_command(cmd, t_step=0.5), t_final)
