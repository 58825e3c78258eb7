"""Tests for command profiles and the asynchronous command feeder."""

import time

import pytest

from velquad.body import make_quadrotor
from velquad.commands import CommandFeeder, hold, sequence, step_command
from velquad.flight import FlightController
from velquad.types import UpdateInfo, VelocityCommand


def test_hold_defaults_to_zero():
    assert hold()(12.0) == VelocityCommand.zero()


def test_step_command_window():
    cmd = VelocityCommand(x=1.0)
    fn = step_command(cmd, t_step=1.0, t_release=2.0)
    assert fn(0.5) == VelocityCommand.zero()
    assert fn(1.0) == cmd
    assert fn(1.99) == cmd
    assert fn(2.0) == VelocityCommand.zero()


def test_sequence_plays_segments_then_holds_last():
    a, b = VelocityCommand(x=0.5), VelocityCommand(y=-0.5)
    fn = sequence([(1.0, a), (0.5, b)])
    assert fn(0.0) == a
    assert fn(1.2) == b
    assert fn(10.0) == b


@pytest.mark.parametrize("segments", [[], [(0.0, VelocityCommand())]])
def test_sequence_rejects_bad_segments(segments):
    with pytest.raises(ValueError):
        sequence(segments)


def test_feeder_delivers_from_background_thread():
    received = []
    feeder = CommandFeeder(received.append, hold(VelocityCommand(z=0.5)), period=0.005)
    with feeder:
        deadline = time.monotonic() + 2.0
        while len(received) < 3 and time.monotonic() < deadline:
            time.sleep(0.005)
    assert len(received) >= 3
    assert all(c == VelocityCommand(z=0.5) for c in received)
    assert feeder.sent == len(received)


def test_feeder_drives_controller_while_ticking():
    fc = FlightController.load(make_quadrotor())
    with CommandFeeder(fc.on_command, hold(VelocityCommand(x=0.25)), period=0.001):
        deadline = time.monotonic() + 2.0
        while fc.x_controller.target == 0.0 and time.monotonic() < deadline:
            fc.on_update(UpdateInfo(sim_time=0.0))
            time.sleep(0.001)
    result = fc.on_update(UpdateInfo(sim_time=0.0))
    assert result.setpoint[0] == 2.0


def test_feeder_cannot_start_twice():
    feeder = CommandFeeder(lambda c: None, hold(), period=0.01)
    feeder.start()
    try:
        with pytest.raises(RuntimeError):
            feeder.start()
    finally:
        feeder.stop()


def test_feeder_rejects_bad_period():
    with pytest.raises(ValueError):
        CommandFeeder(lambda c: None, hold(), period=0.0)


def test_feeder_surfaces_sink_failure(caplog):
    def broken_sink(cmd):
        raise RuntimeError("transport down")

    feeder = CommandFeeder(broken_sink, hold(), period=0.001)
    with caplog.at_level("ERROR", logger="velquad.commands"):
        feeder.start()
        deadline = time.monotonic() + 2.0
        while feeder.error is None and time.monotonic() < deadline:
            time.sleep(0.001)
        with pytest.raises(RuntimeError, match="transport down"):
            feeder.stop()
    assert feeder.sent == 0
    assert "command delivery failed" in caplog.text
