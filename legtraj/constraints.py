"""Constraint sets evaluated over discretized time and on phase durations."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import numpy as np

#: Magnitude treated as infinite by the solver.
INFINITY = 1.0e20

#: Row count placeholder for sets whose size depends on the variables.
SPECIFY_LATER = -1


@dataclass(frozen=True)
class Bounds:
    """Lower and upper bound of a single constraint row."""

    lower: float = 0.0
    upper: float = 0.0

    def contains(self, value: float) -> bool:
        """True if ``value`` lies within the bounds (inclusive)."""
        return self.lower <= value <= self.upper


BOUND_ZERO = Bounds(0.0, 0.0)
NO_BOUND = Bounds(-INFINITY, INFINITY)


class _Component(Protocol):
    name: str

    def get_values(self) -> np.ndarray: ...


class ConstraintSet(ABC):
    """A named block of constraint rows g(x) with bounds and a Jacobian."""

    def __init__(self, rows: int, name: str) -> None:
        if rows < 0 and rows != SPECIFY_LATER:
            raise ValueError(f"invalid number of rows: {rows}")
        self._rows = rows
        self.name = name

    @property
    def rows(self) -> int:
        """Number of constraint rows in this set."""
        if self._rows == SPECIFY_LATER:
            raise RuntimeError(f"number of rows of '{self.name}' not yet specified")
        return self._rows

    @rows.setter
    def rows(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"invalid number of rows: {value}")
        self._rows = value

    def init_variable_depended_quantities(self, variables: Mapping[str, Any]) -> None:
        """Link this set to the optimization variables it depends on."""

    @abstractmethod
    def get_values(self) -> np.ndarray:
        """Current constraint values g(x)."""

    @abstractmethod
    def get_bounds(self) -> list[Bounds]:
        """Bounds for each row."""

    @abstractmethod
    def fill_jacobian_block(self, var_set: str, jac: np.ndarray) -> None:
        """Write the derivatives with respect to ``var_set`` into ``jac``."""


def _component(variables: Mapping[str, Any], name: str) -> Any:
    try:
        return variables[name]
    except KeyError:
        raise KeyError(f"no variable set named '{name}'") from None


class TimeDiscretizationConstraint(ConstraintSet):
    """Constraints evaluated at a list of times along a trajectory.

    Subclasses fill the rows belonging to each time instance; this class
    assembles the complete values, bounds and Jacobian from them.
    """

    def __init__(self, times: Sequence[float], name: str) -> None:
        super().__init__(SPECIFY_LATER, name)
        self.times: list[float] = [float(t) for t in times]

    @classmethod
    def from_horizon(
        cls, total_time: float, dt: float, name: str
    ) -> "TimeDiscretizationConstraint":
        """Evaluate every ``dt`` from zero and once more at ``total_time``."""
        if dt <= 0.0:
            raise ValueError("discretization interval must be positive")
        times = [0.0]
        t = 0.0
        for _ in range(math.floor(total_time / dt)):
            t += dt
            times.append(t)
        times.append(float(total_time))
        return cls(times, name)

    def number_of_nodes(self) -> int:
        """Number of time instances at which the constraint is evaluated."""
        return len(self.times)

    def get_values(self) -> np.ndarray:
        g = np.zeros(self.rows)
        for k, t in enumerate(self.times):
            self.update_constraint_at_instance(t, k, g)
        return g

    def get_bounds(self) -> list[Bounds]:
        bounds = [Bounds() for _ in range(self.rows)]
        for k, t in enumerate(self.times):
            self.update_bounds_at_instance(t, k, bounds)
        return bounds

    def fill_jacobian_block(self, var_set: str, jac: np.ndarray) -> None:
        for k, t in enumerate(self.times):
            self.update_jacobian_at_instance(t, k, var_set, jac)

    @abstractmethod
    def update_constraint_at_instance(self, t: float, k: int, g: np.ndarray) -> None:
        """Fill the rows of ``g`` that belong to time ``t`` (instance ``k``)."""

    @abstractmethod
    def update_bounds_at_instance(self, t: float, k: int, bounds: list[Bounds]) -> None:
        """Set the bounds of the rows that belong to time ``t``."""

    @abstractmethod
    def update_jacobian_at_instance(
        self, t: float, k: int, var_set: str, jac: np.ndarray
    ) -> None:
        """Fill the Jacobian rows that belong to time ``t``."""


class TotalDurationConstraint(ConstraintSet):
    """Keeps the sum of the optimized phase durations of a foot in range.

    The last phase is not an optimization variable, so the sum is bounded
    by the total time minus a fixed minimum duration for that last phase.
    """

    MIN_DURATION_LAST_PHASE = 0.2
    MIN_TOTAL = 0.1

    def __init__(self, total_time: float, ee: int, schedule_id: str) -> None:
        super().__init__(1, f"totalduration-{ee}")
        self.total_time = float(total_time)
        self.ee = ee
        self.schedule_id = schedule_id
        self._phase_durations: _Component | None = None

    def init_variable_depended_quantities(self, variables: Mapping[str, Any]) -> None:
        self._phase_durations = _component(variables, self.schedule_id)

    def _durations(self) -> _Component:
        if self._phase_durations is None:
            raise RuntimeError("constraint not linked to its phase-duration variables")
        return self._phase_durations

    def get_values(self) -> np.ndarray:
        g = np.zeros(self.rows)
        g[0] = float(np.sum(self._durations().get_values()))
        return g

    def get_bounds(self) -> list[Bounds]:
        bound = Bounds(self.MIN_TOTAL, self.total_time - self.MIN_DURATION_LAST_PHASE)
        return [bound] * self.rows

    def fill_jacobian_block(self, var_set: str, jac: np.ndarray) -> None:
        durations = self._durations()
        if var_set == durations.name:
            n_cols = len(np.asarray(durations.get_values()))
            jac[0, :n_cols] = 1.0