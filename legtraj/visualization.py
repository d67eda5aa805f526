"""Goal pose and terrain patches for display in a 3D viewer."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from legtraj.commands import TowrCommand
from legtraj.node_constraints import HeightMap
from legtraj.state import Dim

#: Frame in which all visualized quantities are expressed.
WORLD_FRAME = "world"

#: Thickness of each terrain patch [m].
MARKER_THICKNESS = 0.003

#: How much a patch is enlarged along a tilted direction.
TILT_GAIN = 1.5

#: Wheat-coloured, partly transparent terrain (r, g, b, a).
TERRAIN_COLOR = (245.0 / 355, 222.0 / 355, 179.0 / 355, 0.65)

_PARALLEL_TOLERANCE = 1.0e-12


@dataclass(frozen=True)
class Quaternion:
    """A rotation as unit quaternion w + xi + yj + zk."""

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass
class Pose:
    """Position and orientation in a named frame."""

    position: np.ndarray
    orientation: Quaternion
    frame_id: str = WORLD_FRAME


@dataclass
class Marker:
    """A flat cube drawn at one point of the terrain."""

    id: int
    position: np.ndarray
    orientation: Quaternion
    scale: tuple[float, float, float]
    color: tuple[float, float, float, float] = TERRAIN_COLOR
    ns: str = "terrain"
    frame_id: str = WORLD_FRAME
    type: str = field(default="CUBE")


def quaternion_from_euler_zyx(yaw: float, pitch: float, roll: float) -> Quaternion:
    """Rotation by yaw about z, then pitch about y', then roll about x''."""
    cy, sy = math.cos(yaw / 2), math.sin(yaw / 2)
    cp, sp = math.cos(pitch / 2), math.sin(pitch / 2)
    cr, sr = math.cos(roll / 2), math.sin(roll / 2)
    return Quaternion(
        w=cr * cp * cy + sr * sp * sy,
        x=sr * cp * cy - cr * sp * sy,
        y=cr * sp * cy + sr * cp * sy,
        z=cr * cp * sy - sr * sp * cy,
    )


def quaternion_from_two_vectors(a: Sequence[float], b: Sequence[float]) -> Quaternion:
    """The shortest rotation that turns the direction of ``a`` into that of ``b``."""
    v0 = np.asarray(a, dtype=float).reshape(3)
    v1 = np.asarray(b, dtype=float).reshape(3)
    n0, n1 = np.linalg.norm(v0), np.linalg.norm(v1)
    if n0 == 0.0 or n1 == 0.0:
        raise ValueError("cannot rotate from or to a zero vector")
    v0, v1 = v0 / n0, v1 / n1
    c = float(np.dot(v0, v1))

    if c < -1.0 + _PARALLEL_TOLERANCE:
        # Opposite directions: rotate by half a turn about any orthogonal axis.
        c = max(c, -1.0)
        _, _, vt = np.linalg.svd(np.vstack([v0, v1]))
        axis = vt[2]
        w2 = (1.0 + c) * 0.5
        vec = axis * math.sqrt(1.0 - w2)
        return Quaternion(math.sqrt(w2), *vec.tolist())

    axis = np.cross(v0, v1)
    s = math.sqrt((1.0 + c) * 2.0)
    vec = axis / s
    return Quaternion(s * 0.5, *vec.tolist())


def _terrain_normal(terrain: HeightMap, x: float, y: float) -> np.ndarray:
    normal = np.array(
        [
            -terrain.get_derivative_of_height_wrt(int(Dim.X), x, y),
            -terrain.get_derivative_of_height_wrt(int(Dim.Y), x, y),
            1.0,
        ]
    )
    return normal / np.linalg.norm(normal)


def goal_pose(terrain: HeightMap, command: TowrCommand) -> Pose:
    """The commanded goal placed on the terrain with the commanded orientation."""
    x, y = command.goal_lin.p()[:2]
    roll, pitch, yaw = command.goal_ang.p()[:3]
    position = np.array([x, y, terrain.get_height(x, y)], dtype=float)
    return Pose(position, quaternion_from_euler_zyx(yaw, pitch, roll))


def terrain_markers(
    terrain: HeightMap,
    dxy: float = 0.06,
    x_min: float = -1.0,
    x_max: float = 4.0,
    y_min: float = -1.0,
    y_max: float = 1.0,
) -> list[Marker]:
    """Patches covering the x-y area, each lying on and tilted with the terrain."""
    if dxy <= 0.0:
        raise ValueError("patch spacing must be positive")
    up = np.array([0.0, 0.0, 1.0])
    markers: list[Marker] = []
    x = x_min
    while x < x_max:
        y = y_min
        while y < y_max:
            normal = _terrain_normal(terrain, x, y)
            scale = (
                (1 + TILT_GAIN * abs(normal[0])) * dxy,
                (1 + TILT_GAIN * abs(normal[1])) * dxy,
                MARKER_THICKNESS,
            )
            markers.append(
                Marker(
                    id=len(markers),
                    position=np.array([x, y, terrain.get_height(x, y)], dtype=float),
                    orientation=quaternion_from_two_vectors(up, normal),
                    scale=scale,
                )
            )
            y += dxy
        x += dxy
    return markers