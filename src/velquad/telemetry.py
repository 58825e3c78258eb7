"""
Low-rate flight data publishing.

Telemetry is independent of the control loop: it samples the link state
(attitude, body velocity, height) on its own period and carries no
controller internals.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from velquad.body import Link
from velquad.math3d import quat_to_euler

logger = logging.getLogger(__name__)

SDK_1_3 = "1.3"


@dataclass(frozen=True)
class FlightData:
    """
    Minimal flight status message.

    Attributes:
        stamp: Sim time of the sample [s]
        sdk: SDK version string
        roll, pitch, yaw: Attitude [deg]
        vgx, vgy, vgz: Body-frame velocity [m/s]
        h: Height above the world origin [m]
    """

    stamp: float
    sdk: str = SDK_1_3
    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0
    vgx: float = 0.0
    vgy: float = 0.0
    vgz: float = 0.0
    h: float = 0.0


def topic_name(ns: str, name: str) -> str:
    """Prefix a topic with a namespace, if one is set."""
    return f"{ns}/{name}" if ns else name


def sample_flight_data(link: Link, stamp: float) -> FlightData:
    """Build a FlightData message from the current link state."""
    roll, pitch, yaw = np.degrees(quat_to_euler(link.state.q))
    v = link.relative_linear_vel()
    return FlightData(
        stamp=stamp,
        roll=float(roll),
        pitch=float(pitch),
        yaw=float(yaw),
        vgx=float(v[0]),
        vgy=float(v[1]),
        vgz=float(v[2]),
        h=float(link.state.p[2]),
    )


class TelemetryPublisher:
    """
    Publishes FlightData to subscribers every `period` seconds of sim time.

    Args:
        topic: Topic name, used for logging only
        period: Publishing period [s] (0.1 = 10 Hz)
    """

    def __init__(self, topic: str = "flight_data", period: float = 0.1):
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self.topic = topic
        self.period = period
        self._subscribers: List[Callable[[FlightData], None]] = []
        self._next_publish: Optional[float] = None
        self.published = 0

    def subscribe(self, fn: Callable[[FlightData], None]) -> None:
        self._subscribers.append(fn)

    def publish(self, msg: FlightData) -> None:
        for fn in self._subscribers:
            fn(msg)
        self.published += 1

    def maybe_publish(self, link: Link, sim_time: float) -> Optional[FlightData]:
        """Publish a sample if the period has elapsed; return it or None."""
        if self._next_publish is not None and sim_time < self._next_publish - 1e-9:
            return None
        self._next_publish = sim_time + self.period
        msg = sample_flight_data(link, sim_time)
        self.publish(msg)
        return msg
