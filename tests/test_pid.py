"""Tests for the single-channel PID regulator."""

import threading

import numpy as np
import pytest

from velquad.pid import ChannelController


# ---- Proportional path -------------------------------------------------------

def test_zero_dt_returns_proportional_term_only():
    pid = ChannelController(False, kp=2.0, ki=5.0, kd=3.0)
    pid.set_target(1.5)
    assert pid.update(0.5, 0.0) == 2.0 * 1.0
    assert pid.integral == 0.0


def test_reference_scenario_demand():
    pid = ChannelController(False, kp=2.0, ki=0.0, kd=0.0)
    pid.set_target(8.0)
    assert pid.update(0.0, 0.1) == pytest.approx(16.0)


def test_default_setpoint_is_zero():
    pid = ChannelController(False, kp=2.0, ki=0.0, kd=0.0)
    assert pid.update(-1.0, 0.01) == pytest.approx(2.0)


# ---- Integral and derivative -------------------------------------------------

def test_integral_accumulates_error_times_dt():
    pid = ChannelController(False, kp=0.0, ki=1.0, kd=0.0)
    pid.set_target(1.0)
    for _ in range(10):
        out = pid.update(0.0, 0.1)
    assert pid.integral == pytest.approx(1.0)
    assert out == pytest.approx(1.0)


def test_integral_limit_bounds_accumulator():
    pid = ChannelController(False, kp=0.0, ki=1.0, kd=0.0, integral_limit=0.25)
    pid.set_target(10.0)
    for _ in range(100):
        out = pid.update(0.0, 0.1)
    assert pid.integral == pytest.approx(0.25)
    assert out == pytest.approx(0.25)

    pid.set_target(-10.0)
    for _ in range(100):
        pid.update(0.0, 0.1)
    assert pid.integral == pytest.approx(-0.25)


def test_integral_unbounded_by_default():
    pid = ChannelController(False, kp=0.0, ki=1.0, kd=0.0)
    pid.set_target(10.0)
    for _ in range(100):
        pid.update(0.0, 0.1)
    assert pid.integral == pytest.approx(100.0)


def test_derivative_uses_change_in_error():
    pid = ChannelController(False, kp=0.0, ki=0.0, kd=1.0)
    pid.set_target(0.0)
    assert pid.update(0.0, 0.0) == 0.0          # first step: no kick
    assert pid.update(-0.5, 0.1) == pytest.approx(5.0)  # error 0 -> 0.5
    assert pid.update(-0.5, 0.1) == pytest.approx(0.0)


def test_first_update_has_no_derivative_kick():
    pid = ChannelController(False, kp=0.0, ki=0.0, kd=1.0)
    pid.set_target(1.0)
    assert pid.update(0.0, 0.1) == 0.0
    assert pid.update(0.0, 0.1) == pytest.approx(0.0)


def test_reset_rearms_first_update_guard():
    pid = ChannelController(False, kp=0.0, ki=0.0, kd=1.0)
    pid.update(0.0, 0.1)
    pid.reset()
    pid.set_target(2.0)
    assert pid.update(0.0, 0.1) == 0.0


def test_derivative_zero_when_dt_zero():
    pid = ChannelController(False, kp=0.0, ki=0.0, kd=10.0)
    pid.update(0.0, 0.1)
    pid.set_target(100.0)
    assert pid.update(0.0, 0.0) == 0.0


def test_reset_clears_history_keeps_target():
    pid = ChannelController(False, kp=1.0, ki=1.0, kd=0.0)
    pid.set_target(2.0)
    pid.update(0.0, 1.0)
    pid.reset()
    assert pid.integral == 0.0
    assert pid.target == 2.0


# ---- Angle wrapping ----------------------------------------------------------

def test_angular_error_wraps_short_way():
    pid = ChannelController(True, kp=1.0, ki=0.0, kd=0.0)
    pid.set_target(0.0)
    out = pid.update(2 * np.pi - 0.01, 0.0)
    assert abs(out) <= 0.01 + 1e-12
    assert out == pytest.approx(0.01)


def test_angular_359_to_1_degree_is_two_degrees():
    pid = ChannelController(True, kp=1.0, ki=0.0, kd=0.0)
    pid.set_target(np.radians(1.0))
    out = pid.update(np.radians(359.0), 0.0)
    assert out == pytest.approx(np.radians(2.0))


def test_linear_error_does_not_wrap():
    pid = ChannelController(False, kp=1.0, ki=0.0, kd=0.0)
    pid.set_target(0.0)
    assert pid.update(2 * np.pi - 0.01, 0.0) == pytest.approx(-(2 * np.pi - 0.01))


# ---- Setpoint handling -------------------------------------------------------

def test_last_target_records_value_used():
    pid = ChannelController(False, kp=1.0, ki=0.0, kd=0.0)
    pid.set_target(3.0)
    pid.set_target(4.0)
    pid.update(0.0, 0.0)
    assert pid.last_target == 4.0


def test_concurrent_set_target_keeps_a_written_value():
    pid = ChannelController(False, kp=1.0, ki=0.0, kd=0.0)
    values = [float(v) for v in range(50)]

    def writer(v):
        for _ in range(200):
            pid.set_target(v)

    threads = [threading.Thread(target=writer, args=(v,)) for v in values]
    for th in threads:
        th.start()
    for _ in range(1000):
        out = pid.update(0.0, 0.001)
        assert out in values
    for th in threads:
        th.join()
    assert pid.target in values
