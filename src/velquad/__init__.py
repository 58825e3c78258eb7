"""
velquad: Quadrotor Velocity Controller

A four-channel PID velocity controller for a simulated quadrotor, with a
small rigid-body simulation to fly it in.
"""

from velquad.types import VelocityCommand, TickResult, SimLog
from velquad.params import Params, ControllerParams, default_params
from velquad.pid import ChannelController
from velquad.flight import FlightController, LinkNotFoundError, clamp
from velquad.sim import run_sim

__version__ = "0.1.0"

__all__ = [
    "VelocityCommand",
    "TickResult",
    "SimLog",
    "Params",
    "ControllerParams",
    "default_params",
    "ChannelController",
    "FlightController",
    "LinkNotFoundError",
    "clamp",
    "run_sim",
]
