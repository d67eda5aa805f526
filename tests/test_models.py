import numpy as np
import pytest

from legtraj.models import (
    AnymalKinematicModel,
    BipedId,
    BipedKinematicModel,
    HyqKinematicModel,
    KinematicModel,
    MonopedKinematicModel,
    QuadrupedId,
    Robot,
    make_kinematic_model,
    rigid_body_parameters,
    robot_name,
)


def test_plain_model_has_zero_range():
    model = KinematicModel(3)
    assert model.number_of_endeffectors() == 3
    assert np.array_equal(model.max_deviation_from_nominal(), np.zeros(3))
    assert all(np.array_equal(p, np.zeros(3)) for p in model.nominal_stance_in_base())


def test_negative_endeffector_count_raises():
    with pytest.raises(ValueError):
        KinematicModel(-1)


def test_monoped_stance():
    model = MonopedKinematicModel()
    assert model.number_of_endeffectors() == 1
    assert np.allclose(model.nominal_stance_in_base()[0], [0.0, 0.0, -0.58])
    assert np.allclose(model.max_deviation_from_nominal(), [0.25, 0.15, 0.2])


def test_biped_is_mirror_symmetric():
    stance = BipedKinematicModel().nominal_stance_in_base()
    left, right = stance[BipedId.L], stance[BipedId.R]
    assert np.allclose(left, [0.0, 0.20, -0.65])
    assert left[1] == -right[1]
    assert left[2] == right[2]


@pytest.mark.parametrize("cls", [HyqKinematicModel, AnymalKinematicModel])
def test_quadruped_stance_symmetry(cls):
    stance = cls().nominal_stance_in_base()
    lf = stance[QuadrupedId.LF]
    assert np.allclose(stance[QuadrupedId.RF], lf * [1, -1, 1])
    assert np.allclose(stance[QuadrupedId.LH], lf * [-1, 1, 1])
    assert np.allclose(stance[QuadrupedId.RH], lf * [-1, -1, 1])
    assert lf[0] > 0 and lf[1] > 0 and lf[2] < 0


def test_anymal_values():
    model = AnymalKinematicModel()
    assert np.allclose(model.nominal_stance_in_base()[QuadrupedId.LF], [0.34, 0.19, -0.42])
    assert np.allclose(model.max_deviation_from_nominal(), [0.15, 0.1, 0.10])


def test_nominal_stance_returns_copies():
    model = HyqKinematicModel()
    stance = model.nominal_stance_in_base()
    stance[0][0] = 100.0
    assert model.nominal_stance_in_base()[0][0] == 0.31


@pytest.mark.parametrize(
    "robot, count",
    [(Robot.MONOPED, 1), (Robot.BIPED, 2), (Robot.HYQ, 4), (Robot.ANYMAL, 4)],
)
def test_kinematics_and_dynamics_agree_on_endeffectors(robot, count):
    assert make_kinematic_model(robot).number_of_endeffectors() == count
    assert rigid_body_parameters(robot).ee_count == count


def test_rigid_body_inertia_is_symmetric():
    for robot in Robot:
        inertia = rigid_body_parameters(robot).inertia_matrix()
        assert inertia.shape == (3, 3)
        assert np.array_equal(inertia, inertia.T)


def test_hyq_parameters():
    params = rigid_body_parameters(Robot.HYQ)
    assert params.mass == 83
    inertia = params.inertia_matrix()
    assert inertia[0, 0] == 4.26
    assert inertia[0, 2] == 0.193


def test_robot_names():
    assert [robot_name(r) for r in Robot] == ["Monoped", "Biped", "Hyq", "Anymal"]
    assert robot_name(3) == "Anymal"


def test_unknown_robot_raises():
    with pytest.raises(ValueError):
        robot_name(len(Robot))
    with pytest.raises(ValueError):
        make_kinematic_model(len(Robot))