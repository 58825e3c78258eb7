"""
Reproducible configuration for simulation runs.

Parameters live in the dataclasses of ``velquad.params``; this module
saves/loads them as JSON and layers ``argparse`` overrides on top so that
every run can be reconstructed from a single file.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, List

import numpy as np

from velquad.params import ChannelGains, ControllerParams, Params, PluginConfig, VehicleParams


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def params_to_dict(params: Params) -> Dict[str, Any]:
    return _to_builtin(asdict(params))


def params_from_dict(data: Dict[str, Any]) -> Params:
    """
    Build Params from a (possibly partial) nested dict.

    Missing keys keep their defaults; unknown keys raise ``ValueError``.
    """
    _check_keys(data, Params, "params")
    kwargs = dict(data)
    sections = {
        "controller": ControllerParams,
        "plugin": PluginConfig,
        "vehicle": VehicleParams,
    }
    for name, cls in sections.items():
        if name in kwargs:
            _check_keys(kwargs[name], cls, name)
            section = dict(kwargs[name])
            if cls is ControllerParams:
                for ch in ("x", "y", "z", "yaw"):
                    if ch in section:
                        _check_keys(section[ch], ChannelGains, f"{name}.{ch}")
                        section[ch] = ChannelGains(**section[ch])
            kwargs[name] = cls(**section)
    return Params(**kwargs)


def save_params(params: Params, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(params_to_dict(params), f, indent=2)


def load_params(path: str | Path) -> Params:
    with open(path) as f:
        return params_from_dict(json.load(f))


def _check_keys(data: Any, cls: type, where: str) -> None:
    if not isinstance(data, dict):
        raise ValueError(f"'{where}' must be an object, got {type(data).__name__}")
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown keys in '{where}': {sorted(unknown)}")


def _to_builtin(obj: Any) -> Any:
    """Convert numpy containers/scalars to JSON-friendly builtins."""
    if isinstance(obj, dict):
        return {k: _to_builtin(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_builtin(v) for v in obj]
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    return obj


# ---------------------------------------------------------------------------
# Argparse loader
# ---------------------------------------------------------------------------

def add_param_args(parser: argparse.ArgumentParser) -> None:
    """Add override flags for the most commonly tuned parameters."""
    g = parser.add_argument_group("Controller")
    g.add_argument("--kp", type=float, default=None, help="Proportional gain, all channels")
    g.add_argument("--ki", type=float, default=None, help="Integral gain, all channels")
    g.add_argument("--kd", type=float, default=None, help="Derivative gain, all channels")
    g.add_argument("--integral-limit", type=float, default=None)
    g.add_argument("--max-xy-vel", type=float, default=None)
    g.add_argument("--max-z-vel", type=float, default=None)
    g.add_argument("--max-yaw-rate", type=float, default=None)
    g.add_argument("--max-xy-accel", type=float, default=None)
    g.add_argument("--max-z-accel", type=float, default=None)
    g.add_argument("--max-yaw-accel", type=float, default=None)
    g.add_argument("--yaw-wraps", action="store_true", default=None)

    g = parser.add_argument_group("Plugin")
    g.add_argument("--ns", type=str, default=None)
    g.add_argument("--link-name", type=str, default=None)
    g.add_argument("--center-of-mass", type=float, nargs=3, default=None,
                   metavar=("X", "Y", "Z"))

    g = parser.add_argument_group("Vehicle")
    g.add_argument("--mass", type=float, default=None)
    g.add_argument("--gravity", type=float, default=None)

    g = parser.add_argument_group("Timing")
    g.add_argument("--dt", type=float, default=None)
    g.add_argument("--command-period", type=float, default=None)
    g.add_argument("--telemetry-period", type=float, default=None)


def _apply_overrides(section: Dict[str, Any], ns: argparse.Namespace, keys: List[str]) -> None:
    """Apply non-None argparse values to one section of the params dict."""
    for key in keys:
        val = getattr(ns, key, None)
        if val is not None:
            section[key] = val


def apply_overrides(params: Params, args: argparse.Namespace) -> Params:
    """
    Return a copy of params with the non-None CLI values applied.

    The copy goes through params_from_dict so every override is validated.
    """
    data = params_to_dict(params)
    ctrl = data["controller"]
    for gain in ("kp", "ki", "kd"):
        val = getattr(args, gain, None)
        if val is not None:
            for ch in ("x", "y", "z", "yaw"):
                ctrl[ch][gain] = val

    _apply_overrides(ctrl, args, [
        "integral_limit", "max_xy_vel", "max_z_vel", "max_yaw_rate",
        "max_xy_accel", "max_z_accel", "max_yaw_accel", "yaw_wraps",
    ])
    _apply_overrides(data["plugin"], args, [
        "ns", "link_name", "center_of_mass",
    ])
    _apply_overrides(data["vehicle"], args, ["mass", "gravity"])
    _apply_overrides(data, args, ["dt", "command_period", "telemetry_period"])

    return params_from_dict(data)
