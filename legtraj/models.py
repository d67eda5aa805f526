"""Kinematic and dynamic parameters of the example robots."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np


class BipedId(IntEnum):
    """End-effector indices of a two-legged robot."""

    L = 0
    R = 1


class QuadrupedId(IntEnum):
    """End-effector indices of a four-legged robot."""

    LF = 0
    RF = 1
    LH = 2
    RH = 3


class Robot(IntEnum):
    """Robots for which kinematic and dynamic models exist."""

    MONOPED = 0
    BIPED = 1
    HYQ = 2
    ANYMAL = 3


_ROBOT_NAMES = {
    Robot.MONOPED: "Monoped",
    Robot.BIPED: "Biped",
    Robot.HYQ: "Hyq",
    Robot.ANYMAL: "Anymal",
}


class KinematicModel:
    """Nominal foot positions and how far each foot may deviate from them.

    A plain instance has zero range of motion and all feet at the base origin.
    """

    def __init__(self, n_ee: int) -> None:
        if n_ee < 0:
            raise ValueError("number of end-effectors must be non-negative")
        self._nominal_stance = [np.zeros(3) for _ in range(n_ee)]
        self._max_dev_from_nominal = np.zeros(3)

    def nominal_stance_in_base(self) -> list[np.ndarray]:
        """Vector from base to each foot in default stance, in base frame [m]."""
        return [p.copy() for p in self._nominal_stance]

    def max_deviation_from_nominal(self) -> np.ndarray:
        """Allowed deviation [m] of each foot from nominal, in base frame."""
        return self._max_dev_from_nominal.copy()

    def number_of_endeffectors(self) -> int:
        """Number of end-effectors of the robot."""
        return len(self._nominal_stance)

    def _set_quadruped_stance(self, x: float, y: float, z: float) -> None:
        self._nominal_stance[QuadrupedId.LF] = np.array([x, y, z])
        self._nominal_stance[QuadrupedId.RF] = np.array([x, -y, z])
        self._nominal_stance[QuadrupedId.LH] = np.array([-x, y, z])
        self._nominal_stance[QuadrupedId.RH] = np.array([-x, -y, z])


class MonopedKinematicModel(KinematicModel):
    """One-legged hopper with a HyQ leg."""

    def __init__(self) -> None:
        super().__init__(1)
        self._nominal_stance[0] = np.array([0.0, 0.0, -0.58])
        self._max_dev_from_nominal = np.array([0.25, 0.15, 0.2])


class BipedKinematicModel(KinematicModel):
    """Two-legged robot built from HyQ legs."""

    def __init__(self) -> None:
        super().__init__(2)
        z_nominal_b = -0.65
        y_nominal_b = 0.20
        self._nominal_stance[BipedId.L] = np.array([0.0, y_nominal_b, z_nominal_b])
        self._nominal_stance[BipedId.R] = np.array([0.0, -y_nominal_b, z_nominal_b])
        self._max_dev_from_nominal = np.array([0.25, 0.15, 0.15])


class HyqKinematicModel(KinematicModel):
    """The quadruped HyQ."""

    def __init__(self) -> None:
        super().__init__(4)
        self._set_quadruped_stance(0.31, 0.29, -0.58)
        self._max_dev_from_nominal = np.array([0.25, 0.20, 0.10])


class AnymalKinematicModel(KinematicModel):
    """The quadruped ANYmal."""

    def __init__(self) -> None:
        super().__init__(4)
        self._set_quadruped_stance(0.34, 0.19, -0.42)
        self._max_dev_from_nominal = np.array([0.15, 0.1, 0.10])


@dataclass(frozen=True)
class RigidBodyParameters:
    """Mass and inertia of a single-rigid-body model of the robot."""

    mass: float
    ixx: float
    iyy: float
    izz: float
    ixy: float
    ixz: float
    iyz: float
    ee_count: int

    def inertia_matrix(self) -> np.ndarray:
        """The symmetric 3x3 inertia matrix around the CoM in base frame."""
        return np.array(
            [
                [self.ixx, self.ixy, self.ixz],
                [self.ixy, self.iyy, self.iyz],
                [self.ixz, self.iyz, self.izz],
            ]
        )


_RIGID_BODY = {
    Robot.MONOPED: RigidBodyParameters(20, 1.2, 5.5, 6.0, 0.0, -0.2, -0.01, 1),
    Robot.BIPED: RigidBodyParameters(20, 1.209, 5.583, 6.056, 0.005, -0.190, -0.012, 2),
    Robot.HYQ: RigidBodyParameters(83, 4.26, 8.97, 9.88, -0.0063, 0.193, 0.0126, 4),
    Robot.ANYMAL: RigidBodyParameters(
        29.5, 0.946438, 1.94478, 2.01835, 0.000938112, -0.00595386, -0.00146328, 4
    ),
}

_KINEMATICS = {
    Robot.MONOPED: MonopedKinematicModel,
    Robot.BIPED: BipedKinematicModel,
    Robot.HYQ: HyqKinematicModel,
    Robot.ANYMAL: AnymalKinematicModel,
}


def make_kinematic_model(robot: int) -> KinematicModel:
    """Build the kinematic model of the given robot."""
    return _KINEMATICS[Robot(robot)]()


def rigid_body_parameters(robot: int) -> RigidBodyParameters:
    """Single-rigid-body dynamics parameters of the given robot."""
    return _RIGID_BODY[Robot(robot)]


def robot_name(robot: int) -> str:
    """Display name of the given robot."""
    return _ROBOT_NAMES[Robot(robot)]