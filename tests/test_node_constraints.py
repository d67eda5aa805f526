import numpy as np
import pytest

from legtraj.constraints import BOUND_ZERO, Bounds
from legtraj.node_constraints import (
    MAX_DISTANCE_ABOVE_TERRAIN,
    NodeValueInfo,
    SwingConstraint,
    TerrainConstraint,
)
from legtraj.state import Dim, Dx, State


class FakeNodes:
    """Node variables stored in one flat vector: 6 scalars (pos, vel) per node."""

    def __init__(self, name, n_nodes, non_constant):
        self.name = name
        self.n_nodes = n_nodes
        self.non_constant = list(non_constant)
        self.x = np.zeros(n_nodes * 6)

    def get_opt_index(self, info):
        return info.id * 6 + int(info.deriv) * 3 + int(info.dim)

    def set_node(self, node_id, pos, vel=(0.0, 0.0, 0.0)):
        for dim in range(3):
            self.x[self.get_opt_index(NodeValueInfo(node_id, Dx.POS, dim))] = pos[dim]
            self.x[self.get_opt_index(NodeValueInfo(node_id, Dx.VEL, dim))] = vel[dim]

    def get_nodes(self):
        nodes = []
        for i in range(self.n_nodes):
            s = State(3, 2)
            s.set(Dx.POS, self.x[i * 6:i * 6 + 3])
            s.set(Dx.VEL, self.x[i * 6 + 3:i * 6 + 6])
            nodes.append(s)
        return nodes

    def get_indices_of_non_constant_nodes(self):
        return self.non_constant

    def is_constant_node(self, node_id):
        return node_id not in self.non_constant


class SlopeTerrain:
    def __init__(self, sx, sy):
        self.sx, self.sy = sx, sy

    def get_height(self, x, y):
        return self.sx * x + self.sy * y

    def get_derivative_of_height_wrt(self, dim, x, y):
        return self.sx if dim == 0 else self.sy


def _random_nodes(seed=0):
    nodes = FakeNodes("ee-motion_0", 6, [1, 4])
    nodes.x = np.random.default_rng(seed).normal(size=nodes.x.size)
    return nodes


def _numeric_jacobian(constraint, nodes, eps=1e-6):
    base = constraint.get_values()
    jac = np.zeros((base.size, nodes.x.size))
    for col in range(nodes.x.size):
        nodes.x[col] += eps
        jac[:, col] = (constraint.get_values() - base) / eps
        nodes.x[col] -= eps
    return jac


def test_swing_name_and_rows():
    nodes = _random_nodes()
    c = SwingConstraint("ee-motion_0")
    assert c.name == "swing-ee-motion_0"
    c.init_variable_depended_quantities({"ee-motion_0": nodes})
    assert c.rows == 2 * 2 * 2
    assert c.get_values().shape == (8,)


def test_swing_rows_unknown_before_init():
    c = SwingConstraint("ee")
    assert c.name == "swing-ee"
    with pytest.raises(RuntimeError):
        c.get_bounds()
    with pytest.raises(RuntimeError):
        c.get_values()


def test_swing_missing_variable_set():
    c = SwingConstraint("ee")
    with pytest.raises(KeyError):
        c.init_variable_depended_quantities({})


def test_swing_satisfied_at_midpoint():
    nodes = FakeNodes("ee", 3, [1])
    prev = np.array([0.0, 0.0, 0.0])
    nxt = np.array([0.6, 0.3, 0.0])
    vel = (nxt - prev) / SwingConstraint.t_swing_avg
    nodes.set_node(0, prev)
    nodes.set_node(2, nxt)
    nodes.set_node(1, (prev + nxt) / 2 + np.array([0, 0, 0.2]), vel)
    c = SwingConstraint("ee")
    c.init_variable_depended_quantities({"ee": nodes})
    np.testing.assert_allclose(c.get_values(), np.zeros(4), atol=1e-12)


def test_swing_row_order_position_then_velocity():
    nodes = FakeNodes("ee", 3, [1])
    nodes.set_node(1, (1.0, 2.0, 0.0), (3.0, 4.0, 0.0))
    c = SwingConstraint("ee")
    c.init_variable_depended_quantities({"ee": nodes})
    np.testing.assert_allclose(c.get_values(), [1.0, 3.0, 2.0, 4.0])


def test_swing_bounds_are_zero():
    nodes = _random_nodes()
    c = SwingConstraint("ee-motion_0")
    c.init_variable_depended_quantities({"ee-motion_0": nodes})
    assert c.get_bounds() == [BOUND_ZERO] * c.rows


def test_swing_jacobian_matches_finite_differences():
    nodes = _random_nodes(1)
    c = SwingConstraint("ee-motion_0")
    c.init_variable_depended_quantities({"ee-motion_0": nodes})
    jac = np.zeros((c.rows, nodes.x.size))
    c.fill_jacobian_block("ee-motion_0", jac)
    np.testing.assert_allclose(jac, _numeric_jacobian(c, nodes), atol=1e-5)


def test_swing_jacobian_ignores_other_sets():
    nodes = _random_nodes()
    c = SwingConstraint("ee-motion_0")
    c.init_variable_depended_quantities({"ee-motion_0": nodes})
    jac = np.zeros((c.rows, nodes.x.size))
    c.fill_jacobian_block("base-lin", jac)
    assert not jac.any()


def test_terrain_name_and_rows_skip_first_node():
    nodes = _random_nodes()
    c = TerrainConstraint(SlopeTerrain(0.1, 0.0), "ee-motion_0")
    assert c.name == "terrain-ee-motion_0"
    c.init_variable_depended_quantities({"ee-motion_0": nodes})
    assert c.node_ids == [1, 2, 3, 4, 5]
    assert c.rows == nodes.n_nodes - 1


def test_terrain_reinit_does_not_accumulate():
    nodes = _random_nodes()
    c = TerrainConstraint(SlopeTerrain(0.0, 0.0), "ee-motion_0")
    c.init_variable_depended_quantities({"ee-motion_0": nodes})
    c.init_variable_depended_quantities({"ee-motion_0": nodes})
    assert c.rows == nodes.n_nodes - 1


def test_terrain_values_on_flat_ground_equal_heights():
    nodes = _random_nodes(2)
    c = TerrainConstraint(SlopeTerrain(0.0, 0.0), "ee-motion_0")
    c.init_variable_depended_quantities({"ee-motion_0": nodes})
    heights = [n.p()[2] for n in nodes.get_nodes()[1:]]
    np.testing.assert_allclose(c.get_values(), heights)


def test_terrain_zero_on_surface():
    nodes = FakeNodes("ee", 3, [1])
    terrain = SlopeTerrain(0.5, -0.25)
    for i, (x, y) in enumerate([(0.0, 0.0), (1.0, 2.0), (-1.0, 0.5)]):
        nodes.set_node(i, (x, y, terrain.get_height(x, y)))
    c = TerrainConstraint(terrain, "ee")
    c.init_variable_depended_quantities({"ee": nodes})
    np.testing.assert_allclose(c.get_values(), np.zeros(2), atol=1e-12)


def test_terrain_bounds_by_node_type():
    nodes = _random_nodes()
    c = TerrainConstraint(SlopeTerrain(0.0, 0.0), "ee-motion_0")
    c.init_variable_depended_quantities({"ee-motion_0": nodes})
    swing = Bounds(0.0, MAX_DISTANCE_ABOVE_TERRAIN)
    expected = [swing if i in (1, 4) else BOUND_ZERO for i in range(1, 6)]
    assert c.get_bounds() == expected


def test_terrain_jacobian_matches_finite_differences():
    nodes = _random_nodes(3)
    c = TerrainConstraint(SlopeTerrain(0.3, -0.7), "ee-motion_0")
    c.init_variable_depended_quantities({"ee-motion_0": nodes})
    jac = np.zeros((c.rows, nodes.x.size))
    c.fill_jacobian_block("ee-motion_0", jac)
    np.testing.assert_allclose(jac, _numeric_jacobian(c, nodes), atol=1e-5)


def test_terrain_jacobian_ignores_other_sets():
    nodes = _random_nodes()
    c = TerrainConstraint(SlopeTerrain(0.3, 0.1), "ee-motion_0")
    c.init_variable_depended_quantities({"ee-motion_0": nodes})
    jac = np.zeros((c.rows, nodes.x.size))
    c.fill_jacobian_block("other", jac)
    assert not jac.any()


def test_terrain_values_need_linked_variables():
    c = TerrainConstraint(SlopeTerrain(0.0, 0.0), "ee")
    with pytest.raises(RuntimeError):
        c.get_values()


def test_node_value_info_is_hashable_value():
    a = NodeValueInfo(2, Dx.POS, Dim.Z)
    assert a == NodeValueInfo(2, 0, 2)
    assert len({a, NodeValueInfo(2, 0, 2)}) == 1