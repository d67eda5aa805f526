"""User commands and the helpers that turn them into a planning problem."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from legtraj.models import BipedId, QuadrupedId
from legtraj.state import State

#: Topic carrying the user's goal and settings.
USER_COMMAND = "/towr/user_command"

#: Topic holding the number of iterations the solver took.
NLP_ITERATIONS_COUNT = "/towr/nlp_iterations_count"

#: Base name of the topics holding each solver iteration.
NLP_ITERATIONS_NAME = "/towr/nlp_iterations_name"

#: Number of intermediate iterations shown when combining a recording.
DEFAULT_VISUALIZATIONS = 5

# The visualization side numbers the feet in the same order as here.
_BIPED_TO_XPP = {BipedId.L: 0, BipedId.R: 1}
_QUAD_TO_XPP = {
    QuadrupedId.LF: 0,
    QuadrupedId.RF: 1,
    QuadrupedId.LH: 2,
    QuadrupedId.RH: 3,
}

_BIPED_NAMES = {BipedId.L: "Left", BipedId.R: "Right"}
_QUAD_NAMES = {
    QuadrupedId.LF: "Left-Front",
    QuadrupedId.RF: "Right-Front",
    QuadrupedId.LH: "Left-Hind",
    QuadrupedId.RH: "Right-Hind",
}


def _linear_state() -> State:
    return State(3, 3)


@dataclass
class TowrCommand:
    """Goal state and settings sent from the user interface to the planner."""

    goal_lin: State = field(default_factory=_linear_state)
    goal_ang: State = field(default_factory=_linear_state)
    total_duration: float = 2.4
    replay_trajectory: bool = False
    play_initialization: bool = False
    replay_speed: float = 1.0
    optimize: bool = False
    terrain: int = 0
    gait: int = 0
    robot: int = 0
    optimize_phase_durations: bool = False
    plot_trajectory: bool = False


def to_xpp_endeffector(number_of_ee: int, towr_ee_id: int) -> tuple[int, str]:
    """Visualization index and display name of an end-effector.

    Only robots with one, two or four end-effectors have a mapping.
    """
    if number_of_ee == 1:
        return int(towr_ee_id), "E0"
    if number_of_ee == 2:
        enum, ids, names = BipedId, _BIPED_TO_XPP, _BIPED_NAMES
    elif number_of_ee == 4:
        enum, ids, names = QuadrupedId, _QUAD_TO_XPP, _QUAD_NAMES
    else:
        raise ValueError(f"no end-effector mapping for {number_of_ee} end-effectors")
    try:
        key = enum(towr_ee_id)
    except ValueError:
        raise ValueError(
            f"end-effector {towr_ee_id} does not exist on a robot with "
            f"{number_of_ee} end-effectors"
        ) from None
    return ids[key], names[key]


def select_iteration_topics(
    n_iterations: int, n_visualizations: int = DEFAULT_VISUALIZATIONS
) -> list[str]:
    """Topics of evenly spaced solver iterations, always ending with the last one."""
    if n_visualizations <= 0:
        raise ValueError("number of visualizations must be positive")
    frequency = math.floor(n_iterations / n_visualizations)
    topics = [f"{NLP_ITERATIONS_NAME}{frequency * i}" for i in range(n_visualizations)]
    topics.append(f"{NLP_ITERATIONS_NAME}{n_iterations - 1}")
    return topics


def iteration_time_offsets(topics: Sequence[str], duration: float) -> dict[str, float]:
    """Start time of each topic so iterations play back one after another.

    A topic listed more than once keeps the offset of its last occurrence.
    The result is ordered by topic name.
    """
    offsets: dict[str, float] = {}
    for i, topic in enumerate(topics):
        offsets[topic] = i * duration
    return dict(sorted(offsets.items()))


def solver_options(command: TowrCommand) -> dict[str, Any]:
    """Options for the nonlinear solver given the user's command."""
    return {
        "linear_solver": "mumps",
        "jacobian_approximation": "exact",
        "max_cpu_time": 40.0,
        "print_level": 5,
        "max_iter": 0 if command.play_initialization else 3000,
    }


def initial_stance(
    nominal_stance_b: Sequence[Sequence[float]], z_ground: float = 0.0
) -> tuple[list[np.ndarray], float]:
    """Feet at their nominal x-y on flat ground, and the base height above them.

    Returns the world positions of the feet and the base z position.
    """
    stance = [np.asarray(p, dtype=float).reshape(3).copy() for p in nominal_stance_b]
    if not stance:
        raise ValueError("nominal stance holds no end-effectors")
    base_z = -stance[0][2] + z_ground
    for foot in stance:
        foot[2] = z_ground
    return stance, float(base_z)