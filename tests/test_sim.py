"""Closed-loop simulation tests."""

import numpy as np
import pytest

from velquad.body import make_quadrotor
from velquad.commands import hold, step_command
from velquad.log import compute_statistics
from velquad.math3d import euler_to_quat
from velquad.params import Params, PluginConfig
from velquad.scenarios import get_scenario, list_scenarios
from velquad.sim import World, run_hover_test, run_sim, run_step_test
from velquad.types import BodyState, UpdateInfo, VelocityCommand


def _fast_params(**kwargs):
    return Params(dt=0.002, **kwargs)


def test_hover_stays_at_rest():
    log = run_hover_test(_fast_params(), t_final=1.0)
    assert np.allclose(log.v_body, 0.0)
    assert np.allclose(log.force, 0.0)
    assert np.allclose(log.p, 0.0)


def test_forward_step_converges_to_setpoint():
    log = run_sim(_fast_params(), step_command(VelocityCommand(x=0.5), t_step=0.2), 3.0)
    assert log.setpoint[-1, 0] == pytest.approx(4.0)
    assert log.v_body[-1, 0] == pytest.approx(4.0, abs=0.05)
    assert np.allclose(log.v_body[:, 1:], 0.0, atol=1e-9)
    assert log.p[-1, 0] > 0.0


def test_climb_saturates_heave_channel():
    log = run_sim(_fast_params(), step_command(VelocityCommand(z=1.0), t_step=0.0), 1.0)
    # 2 * 4 m/s error = 8 m/s² demand, clamped to 4
    assert np.max(log.ubar[:, 2]) == pytest.approx(8.0)
    assert np.max(log.accel[:, 2]) == 4.0
    stats = compute_statistics(log)
    assert stats["saturation"] > 0.0


def test_yaw_rate_step_converges():
    log = run_sim(_fast_params(), step_command(VelocityCommand(yaw=0.5), t_step=0.0), 3.0)
    assert log.w_body[-1, 2] == pytest.approx(np.pi / 2, abs=0.05)
    assert np.allclose(log.v_body, 0.0, atol=1e-9)
    # yaw keeps increasing while roll and pitch stay level
    assert np.allclose(log.euler[:, :2], 0.0, atol=1e-9)


def test_tilted_start_is_levelled_on_first_tick():
    x0 = BodyState.zeros()
    x0.q = euler_to_quat(0.3, -0.2, 1.0)
    log = run_sim(_fast_params(), hold(), 0.1, x0=x0)
    assert np.allclose(log.euler[0], [0.3, -0.2, 1.0])
    assert np.allclose(log.euler[1:, :2], 0.0, atol=1e-9)
    assert np.allclose(log.euler[1:, 2], 1.0)


def test_step_test_helper_records_whole_run():
    log = run_step_test(_fast_params(), t_final=1.0)
    assert log.t[0] == 0.0
    assert log.t[-1] == pytest.approx(1.0, abs=0.003)
    assert len(log.t) == len(log.force)


def test_telemetry_published_at_period():
    received = []
    params = _fast_params(telemetry_period=0.1, plugin=PluginConfig(ns="drone1"))
    run_sim(params, hold(VelocityCommand(z=0.25)), 1.0, on_flight_data=received.append)
    assert 10 <= len(received) <= 11
    assert received[0].stamp == 0.0
    assert all(b.stamp - a.stamp == pytest.approx(0.1, abs=0.003)
               for a, b in zip(received, received[1:]))
    assert received[-1].vgz > 0.0
    assert received[-1].sdk == "1.3"


def test_commands_delivered_at_command_period():
    seen = []

    def command_fn(t):
        seen.append(t)
        return VelocityCommand.zero()

    run_sim(_fast_params(command_period=0.05), command_fn, 0.5)
    assert len(seen) == 11
    assert np.allclose(np.diff(seen), 0.05)


def test_world_fires_callbacks_before_integrating():
    model = make_quadrotor()
    world = World(model, 0.01)
    infos = []
    world.connect_update_begin(infos.append)
    for _ in range(3):
        world.step()
    assert [i.step for i in infos] == [0, 1, 2]
    assert infos[2].sim_time == pytest.approx(0.02)
    assert world.sim_time == pytest.approx(0.03)


def test_world_rejects_bad_dt():
    with pytest.raises(ValueError):
        World(make_quadrotor(), 0.0)


@pytest.mark.parametrize("name", list_scenarios())
def test_scenarios_run(name):
    spec = get_scenario(name)
    log = run_sim(_fast_params(), spec.command_fn(), min(spec.t_final, 1.0))
    stats = compute_statistics(log)
    assert np.isfinite(stats["rmse_vx"])
    assert stats["max_tilt"] == pytest.approx(0.0, abs=1e-9)


def test_unknown_scenario():
    with pytest.raises(KeyError):
        get_scenario("loop")
