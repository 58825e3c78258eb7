"""
Simulated links and models.

A Link is the physics collaborator of the flight controller: it reports
body-frame velocities, mass and inertia, exposes its world pose, and
accumulates forces and torques that are applied on the next physics step.
A Model is a named collection of links.
"""

from typing import Dict, Iterable, Optional

import numpy as np
from numpy.typing import NDArray

from velquad.types import BodyState, Wrench
from velquad.params import VehicleParams
from velquad.math3d import quat_normalize, world_to_body
from velquad.dynamics import step_rk4


class Link:
    """
    Rigid body with a diagonal inertia tensor.

    Forces and torques added during a step accumulate in the body frame and
    are cleared once step() has integrated them.
    """

    def __init__(
        self,
        name: str,
        vehicle: Optional[VehicleParams] = None,
        state: Optional[BodyState] = None,
    ):
        self.name = name
        self.vehicle = vehicle if vehicle is not None else VehicleParams()
        self.state = state.copy() if state is not None else BodyState.zeros()
        self._wrench = Wrench.zeros()

    # ------------------------------------------------------------------
    # Inertial properties
    # ------------------------------------------------------------------
    @property
    def mass(self) -> float:
        return self.vehicle.mass

    @property
    def moi(self) -> NDArray[np.float64]:
        """Principal moments of inertia [kg·m²], shape (3,)."""
        return self.vehicle.moi

    # ------------------------------------------------------------------
    # Kinematics
    # ------------------------------------------------------------------
    def relative_linear_vel(self) -> NDArray[np.float64]:
        """Linear velocity expressed in the body frame [m/s]."""
        return world_to_body(self.state.q, self.state.v)

    def relative_angular_vel(self) -> NDArray[np.float64]:
        """Angular velocity expressed in the body frame [rad/s]."""
        return self.state.w_body.copy()

    def world_pose(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Return (position, quaternion) in the world frame."""
        return self.state.p.copy(), self.state.q.copy()

    def set_world_pose(self, p: NDArray[np.float64], q: NDArray[np.float64]) -> None:
        """Teleport the link; velocities are left unchanged."""
        self.state.p = np.array(p, dtype=np.float64)
        self.state.q = quat_normalize(np.array(q, dtype=np.float64))

    # ------------------------------------------------------------------
    # Wrench accumulation
    # ------------------------------------------------------------------
    def add_link_force(
        self,
        force: NDArray[np.float64],
        offset: Optional[NDArray[np.float64]] = None,
    ) -> None:
        """
        Apply a body-frame force at a body-frame point.

        A non-zero offset from the center of mass also produces the moment
        offset × force.
        """
        force = np.asarray(force, dtype=np.float64)
        self._wrench.force = self._wrench.force + force
        if offset is not None:
            self._wrench.torque = self._wrench.torque + np.cross(offset, force)

    def add_relative_torque(self, torque: NDArray[np.float64]) -> None:
        """Apply a body-frame torque about the center of mass."""
        self._wrench.torque = self._wrench.torque + np.asarray(torque, dtype=np.float64)

    @property
    def wrench(self) -> Wrench:
        """Wrench accumulated since the last step."""
        return Wrench(force=self._wrench.force.copy(), torque=self._wrench.torque.copy())

    def step(self, dt: float) -> None:
        """Integrate the accumulated wrench over dt and clear it."""
        self.state = step_rk4(self.state, self._wrench, self.vehicle, dt)
        self._wrench = Wrench.zeros()


class Model:
    """Named collection of links."""

    def __init__(self, name: str, links: Iterable[Link] = ()):
        self.name = name
        self._links: Dict[str, Link] = {}
        for link in links:
            self.add_link(link)

    def add_link(self, link: Link) -> None:
        if link.name in self._links:
            raise ValueError(f"Model '{self.name}' already has a link named '{link.name}'")
        self._links[link.name] = link

    def get_link(self, name: str) -> Optional[Link]:
        """Return the link called name, or None."""
        return self._links.get(name)

    @property
    def links(self) -> list[Link]:
        return list(self._links.values())


def make_quadrotor(
    vehicle: Optional[VehicleParams] = None,
    link_name: str = "base_link",
    state: Optional[BodyState] = None,
    name: str = "tello",
) -> Model:
    """Build a single-link quadrotor model."""
    return Model(name, [Link(link_name, vehicle, state)])
