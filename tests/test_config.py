"""Tests for parameter validation, JSON persistence and CLI overrides."""

import argparse
import json

import numpy as np
import pytest

from velquad.config import (
    add_param_args,
    apply_overrides,
    load_params,
    params_from_dict,
    params_to_dict,
    save_params,
)
from velquad.params import ChannelGains, ControllerParams, Params, PluginConfig, default_params


def test_reference_defaults():
    p = default_params()
    for ch in (p.controller.x, p.controller.y, p.controller.z, p.controller.yaw):
        assert (ch.kp, ch.ki, ch.kd) == (2.0, 0.0, 0.0)
    assert p.controller.max_xy_vel == 8.0
    assert p.controller.max_z_vel == 4.0
    assert p.controller.max_yaw_rate == np.pi
    assert p.controller.max_xy_accel == 8.0
    assert p.controller.max_z_accel == 4.0
    assert p.controller.max_yaw_accel == np.pi
    assert p.controller.integral_limit is None
    assert p.plugin.link_name == "base_link"
    assert np.array_equal(p.plugin.center_of_mass, np.zeros(3))


def test_json_round_trip(tmp_path):
    params = Params(
        controller=ControllerParams(yaw=ChannelGains(kp=1.0, ki=0.2, kd=0.01),
                                    integral_limit=0.5),
        plugin=PluginConfig(ns="drone1", center_of_mass=[0.0, 0.0, -0.01]),
        dt=0.002,
    )
    path = tmp_path / "cfg" / "run.json"
    save_params(params, path)
    loaded = load_params(path)

    assert loaded.controller.yaw == ChannelGains(kp=1.0, ki=0.2, kd=0.01)
    assert loaded.controller.integral_limit == 0.5
    assert loaded.plugin.ns == "drone1"
    assert np.allclose(loaded.plugin.center_of_mass, [0.0, 0.0, -0.01])
    assert loaded.dt == 0.002
    assert params_to_dict(loaded) == params_to_dict(params)


def test_partial_dict_keeps_defaults():
    params = params_from_dict({"controller": {"x": {"kp": 3.0}}, "vehicle": {"mass": 0.2}})
    assert params.controller.x == ChannelGains(kp=3.0)
    assert params.controller.y == ChannelGains()
    assert params.vehicle.mass == 0.2
    assert params.dt == 0.001


@pytest.mark.parametrize("data", [
    {"controler": {}},
    {"controller": {"x": {"kq": 1.0}}},
    {"plugin": {"link": "base_link"}},
    {"vehicle": []},
])
def test_unknown_keys_rejected(data):
    with pytest.raises(ValueError):
        params_from_dict(data)


def test_saved_file_is_plain_json(tmp_path):
    path = tmp_path / "p.json"
    save_params(default_params(), path)
    data = json.loads(path.read_text())
    assert data["controller"]["max_xy_vel"] == 8.0
    assert data["vehicle"]["moi"] == pytest.approx([9.0e-5, 9.1e-5, 1.4e-4])


@pytest.mark.parametrize("kwargs", [
    {"max_xy_accel": 0.0},
    {"max_z_vel": -1.0},
    {"integral_limit": -0.1},
    {"debug_every": 0},
])
def test_invalid_controller_params(kwargs):
    with pytest.raises(ValueError):
        ControllerParams(**kwargs)


def test_invalid_timing_and_plugin():
    with pytest.raises(ValueError):
        Params(dt=0.0)
    with pytest.raises(ValueError):
        PluginConfig(center_of_mass=[0.0, 0.0])


def _parse(argv):
    parser = argparse.ArgumentParser()
    add_param_args(parser)
    return parser.parse_args(argv)


def test_cli_overrides_applied():
    args = _parse(["--kp", "3.5", "--ki", "0.1", "--max-z-accel", "2.0",
                   "--link-name", "body", "--center-of-mass", "0", "0", "0.02",
                   "--mass", "0.1", "--dt", "0.0005", "--yaw-wraps"])
    params = apply_overrides(default_params(), args)
    assert params.controller.x == ChannelGains(kp=3.5, ki=0.1, kd=0.0)
    assert params.controller.yaw.kp == 3.5
    assert params.controller.max_z_accel == 2.0
    assert params.controller.yaw_wraps is True
    assert params.plugin.link_name == "body"
    assert np.allclose(params.plugin.center_of_mass, [0.0, 0.0, 0.02])
    assert params.vehicle.mass == 0.1
    assert params.dt == 0.0005


def test_cli_without_flags_changes_nothing():
    params = apply_overrides(default_params(), _parse([]))
    assert params_to_dict(params) == params_to_dict(default_params())


def test_cli_overrides_validated():
    with pytest.raises(ValueError):
        apply_overrides(default_params(), _parse(["--mass", "-1"]))
