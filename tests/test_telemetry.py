"""Tests for flight data sampling and publishing."""

import numpy as np
import pytest

from velquad.body import Link
from velquad.math3d import euler_to_quat
from velquad.telemetry import TelemetryPublisher, sample_flight_data, topic_name
from velquad.types import BodyState


def test_topic_name_namespace():
    assert topic_name("", "flight_data") == "flight_data"
    assert topic_name("drone1", "flight_data") == "drone1/flight_data"


def test_sample_reports_attitude_in_degrees_and_body_velocity():
    state = BodyState.zeros()
    state.q = euler_to_quat(0.0, 0.0, np.pi / 2)
    state.v = np.array([0.0, 1.5, 0.0])
    state.p = np.array([0.0, 0.0, 2.0])
    msg = sample_flight_data(Link("base_link", state=state), stamp=3.0)
    assert msg.stamp == 3.0
    assert msg.yaw == pytest.approx(90.0)
    assert msg.vgx == pytest.approx(1.5)
    assert msg.h == 2.0


def test_publisher_respects_period():
    link = Link("base_link")
    pub = TelemetryPublisher(period=0.1)
    got = []
    pub.subscribe(got.append)
    for step in range(101):
        pub.maybe_publish(link, step * 0.01)
    assert len(got) == 11
    assert pub.published == 11


def test_publisher_rejects_bad_period():
    with pytest.raises(ValueError):
        TelemetryPublisher(period=0.0)
