"""
Velocity command profiles and asynchronous command delivery.

A command profile is a function t -> VelocityCommand, in the same spirit as
trajectory functions: the simulation samples it at the command rate and
hands the result to the controller. CommandFeeder does the same from a
background thread on a wall-clock period, independent of the tick loop.
"""

import logging
import threading
import time
from typing import Callable, Optional, Sequence, Tuple

from velquad.types import VelocityCommand

logger = logging.getLogger(__name__)

# Type alias for command profiles
CommandFn = Callable[[float], VelocityCommand]


def hold(cmd: Optional[VelocityCommand] = None) -> CommandFn:
    """
    Create a constant command profile.

    Args:
        cmd: Command to hold (default: zero velocity)

    Returns:
        Command function t -> VelocityCommand
    """
    held = cmd if cmd is not None else VelocityCommand.zero()

    def command_fn(t: float) -> VelocityCommand:
        return held

    return command_fn


def step_command(
    cmd: VelocityCommand,
    t_step: float = 1.0,
    t_release: Optional[float] = None,
) -> CommandFn:
    """
    Create a step profile: zero, then cmd from t_step, then zero again.

    Args:
        cmd: Command applied during the step
        t_step: Time the step starts [s]
        t_release: Time the command returns to zero [s] (None = never)

    Returns:
        Command function t -> VelocityCommand
    """
    zero = VelocityCommand.zero()

    def command_fn(t: float) -> VelocityCommand:
        if t < t_step:
            return zero
        if t_release is not None and t >= t_release:
            return zero
        return cmd

    return command_fn


def sequence(segments: Sequence[Tuple[float, VelocityCommand]]) -> CommandFn:
    """
    Create a piecewise-constant profile from (duration, command) segments.

    The last command is held once all segments have elapsed.

    Args:
        segments: (duration [s], command) pairs, played in order

    Returns:
        Command function t -> VelocityCommand
    """
    if not segments:
        raise ValueError("sequence requires at least one segment")
    for duration, _ in segments:
        if duration <= 0:
            raise ValueError(f"segment durations must be positive, got {duration}")

    def command_fn(t: float) -> VelocityCommand:
        elapsed = 0.0
        for duration, cmd in segments:
            elapsed += duration
            if t < elapsed:
                return cmd
        return segments[-1][1]

    return command_fn


class CommandFeeder:
    """
    Background thread that pushes commands into a sink at a fixed period.

    The sink is typically FlightController.on_command. Commands are sampled
    from command_fn using wall-clock time since start().

    Args:
        sink: Callable receiving each VelocityCommand
        command_fn: Command profile sampled on every delivery
        period: Delivery period [s]
    """

    def __init__(
        self,
        sink: Callable[[VelocityCommand], None],
        command_fn: CommandFn,
        period: float = 0.05,
    ):
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self._sink = sink
        self._command_fn = command_fn
        self._period = period
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.sent = 0
        self.error: Optional[BaseException] = None

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("CommandFeeder already started")
        self._thread = threading.Thread(target=self._run, name="command-feeder", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
        if self.error is not None:
            raise self.error

    def _run(self) -> None:
        t0 = time.monotonic()
        while not self._stop.is_set():
            try:
                self._sink(self._command_fn(time.monotonic() - t0))
            except Exception as exc:
                logger.exception("command delivery failed")
                self.error = exc
                break
            self.sent += 1
            self._stop.wait(self._period)
        logger.debug("command feeder stopped after %d commands", self.sent)

    def __enter__(self) -> "CommandFeeder":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()
