"""
Named command scenarios.

Provides a registry of scenarios (command profile + duration) used by the
CLI and the tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from velquad.commands import CommandFn, hold, sequence, step_command
from velquad.types import VelocityCommand


@dataclass(frozen=True)
class ScenarioSpec:
    """Specification for a simulation scenario."""

    name: str
    t_final: float
    command_fn: Callable[[], CommandFn]  # factory, call to get the profile
    description: str = ""


# ---------------------------------------------------------------------------
# Scenario registry
# ---------------------------------------------------------------------------

_SCENARIOS: dict[str, ScenarioSpec] = {}


def _register(spec: ScenarioSpec) -> None:
    _SCENARIOS[spec.name] = spec


_register(ScenarioSpec(
    name="hover",
    t_final=3.0,
    command_fn=lambda: hold(),
    description="Zero command; vehicle stays at rest",
))

_register(ScenarioSpec(
    name="forward",
    t_final=5.0,
    command_fn=lambda: step_command(VelocityCommand(x=0.5), t_step=0.5, t_release=3.0),
    description="Half forward stick from 0.5s to 3.0s",
))

_register(ScenarioSpec(
    name="climb",
    t_final=4.0,
    command_fn=lambda: step_command(VelocityCommand(z=0.5), t_step=0.5, t_release=2.5),
    description="Half climb stick from 0.5s to 2.5s",
))

_register(ScenarioSpec(
    name="spin",
    t_final=4.0,
    command_fn=lambda: step_command(VelocityCommand(yaw=0.5), t_step=0.5, t_release=3.0),
    description="Half yaw stick from 0.5s to 3.0s",
))

_register(ScenarioSpec(
    name="box",
    t_final=9.0,
    command_fn=lambda: sequence([
        (0.5, VelocityCommand.zero()),
        (2.0, VelocityCommand(x=0.25)),
        (2.0, VelocityCommand(y=0.25)),
        (2.0, VelocityCommand(x=-0.25)),
        (2.0, VelocityCommand(y=-0.25)),
        (0.5, VelocityCommand.zero()),
    ]),
    description="Square path flown with body-frame velocity legs",
))


def get_scenario(name: str) -> ScenarioSpec:
    """Return a scenario by name. Raises ``KeyError`` if unknown."""
    return _SCENARIOS[name]


def list_scenarios() -> list[str]:
    """Return sorted list of registered scenario names."""
    return sorted(_SCENARIOS)
