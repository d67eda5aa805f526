"""Constraints placed directly on the nodes of end-effector motion variables."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import numpy as np

from legtraj.constraints import BOUND_ZERO, SPECIFY_LATER, Bounds, ConstraintSet
from legtraj.state import Dim, Dx, State

#: Number of node derivatives (position and velocity) that shape a spline.
NODE_DERIVATIVES = 2

#: Largest height above the terrain a foot node may have [m].
MAX_DISTANCE_ABOVE_TERRAIN = 1.0e20


@dataclass(frozen=True)
class NodeValueInfo:
    """Identifies one scalar of a node: which node, which derivative, which dimension."""

    id: int
    deriv: int
    dim: int


class NodeVariables(Protocol):
    """What the node constraints need from a set of phase-based node variables."""

    name: str

    def get_nodes(self) -> Sequence[State]: ...

    def get_indices_of_non_constant_nodes(self) -> Sequence[int]: ...

    def is_constant_node(self, node_id: int) -> bool: ...

    def get_opt_index(self, info: NodeValueInfo) -> int: ...


class HeightMap(Protocol):
    """Terrain height and its slope at each (x, y)."""

    def get_height(self, x: float, y: float) -> float: ...

    def get_derivative_of_height_wrt(self, dim: int, x: float, y: float) -> float: ...


def _node_variables(variables: Mapping[str, Any], name: str) -> NodeVariables:
    try:
        return variables[name]
    except KeyError:
        raise KeyError(f"no variable set named '{name}'") from None


class _NodeConstraint(ConstraintSet):
    def __init__(self, name: str, ee_motion_id: str) -> None:
        super().__init__(SPECIFY_LATER, name)
        self.ee_motion_id = ee_motion_id
        self._ee_motion: NodeVariables | None = None

    def _motion(self) -> NodeVariables:
        if self._ee_motion is None:
            raise RuntimeError(f"'{self.name}' not linked to its node variables")
        return self._ee_motion


class SwingConstraint(_NodeConstraint):
    """Keeps each swing node halfway between its neighbours in x-y.

    The position of a pure swing node must lie at the x-y midpoint of the
    previous and next node, and its velocity must equal the distance between
    them divided by an average swing duration. Assumes two polynomials per
    swing phase, starting and ending in stance.
    """

    t_swing_avg = 0.3

    def __init__(self, ee_motion_id: str) -> None:
        super().__init__(f"swing-{ee_motion_id}", ee_motion_id)
        self.pure_swing_node_ids: list[int] = []

    def init_variable_depended_quantities(self, variables: Mapping[str, Any]) -> None:
        motion = _node_variables(variables, self.ee_motion_id)
        self._ee_motion = motion
        self.pure_swing_node_ids = [int(i) for i in motion.get_indices_of_non_constant_nodes()]
        self.rows = len(self.pure_swing_node_ids) * NODE_DERIVATIVES * 2

    def get_values(self) -> np.ndarray:
        g = np.zeros(self.rows)
        nodes = self._motion().get_nodes()
        row = 0
        for node_id in self.pure_swing_node_ids:
            curr = nodes[node_id]
            prev = nodes[node_id - 1].p()[:2]
            nxt = nodes[node_id + 1].p()[:2]
            distance_xy = nxt - prev
            xy_center = prev + 0.5 * distance_xy
            des_vel_center = distance_xy / self.t_swing_avg
            p, v = curr.p(), curr.v()
            for dim in (Dim.X, Dim.Y):
                g[row] = p[dim] - xy_center[dim]
                g[row + 1] = v[dim] - des_vel_center[dim]
                row += 2
        return g

    def get_bounds(self) -> list[Bounds]:
        return [BOUND_ZERO] * self.rows

    def fill_jacobian_block(self, var_set: str, jac: np.ndarray) -> None:
        motion = self._motion()
        if var_set != motion.name:
            return

        def col(node_id: int, deriv: Dx, dim: Dim) -> int:
            return motion.get_opt_index(NodeValueInfo(node_id, deriv, dim))

        inv_t = 1.0 / self.t_swing_avg
        row = 0
        for node_id in self.pure_swing_node_ids:
            for dim in (Dim.X, Dim.Y):
                jac[row, col(node_id, Dx.POS, dim)] = 1.0
                jac[row, col(node_id + 1, Dx.POS, dim)] = -0.5
                jac[row, col(node_id - 1, Dx.POS, dim)] = -0.5
                row += 1

                jac[row, col(node_id, Dx.VEL, dim)] = 1.0
                jac[row, col(node_id + 1, Dx.POS, dim)] = -inv_t
                jac[row, col(node_id - 1, Dx.POS, dim)] = inv_t
                row += 1


class TerrainConstraint(_NodeConstraint):
    """Keeps every foot node on or above the terrain.

    Nodes that are constant (stance) lie exactly on the terrain. The first
    node is skipped, since the initial stance already fixes it.
    """

    def __init__(self, terrain: HeightMap, ee_motion_id: str) -> None:
        super().__init__(f"terrain-{ee_motion_id}", ee_motion_id)
        self.terrain = terrain
        self.node_ids: list[int] = []

    def init_variable_depended_quantities(self, variables: Mapping[str, Any]) -> None:
        motion = _node_variables(variables, self.ee_motion_id)
        self._ee_motion = motion
        self.node_ids = list(range(1, len(motion.get_nodes())))
        self.rows = len(self.node_ids)

    def get_values(self) -> np.ndarray:
        nodes = self._motion().get_nodes()
        g = np.zeros(self.rows)
        for row, node_id in enumerate(self.node_ids):
            x, y, z = nodes[node_id].p()[:3]
            g[row] = z - self.terrain.get_height(x, y)
        return g

    def get_bounds(self) -> list[Bounds]:
        motion = self._motion()
        return [
            BOUND_ZERO
            if motion.is_constant_node(node_id)
            else Bounds(0.0, MAX_DISTANCE_ABOVE_TERRAIN)
            for node_id in self.node_ids
        ]

    def fill_jacobian_block(self, var_set: str, jac: np.ndarray) -> None:
        motion = self._motion()
        if var_set != motion.name:
            return
        nodes = motion.get_nodes()
        for row, node_id in enumerate(self.node_ids):
            jac[row, motion.get_opt_index(NodeValueInfo(node_id, Dx.POS, Dim.Z))] = 1.0
            x, y = nodes[node_id].p()[:2]
            for dim in (Dim.X, Dim.Y):
                idx = motion.get_opt_index(NodeValueInfo(node_id, Dx.POS, dim))
                jac[row, idx] = -self.terrain.get_derivative_of_height_wrt(int(dim), x, y)