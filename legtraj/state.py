"""Derivative-stacked state vectors used for nodes and spline samples."""

from __future__ import annotations

from enum import IntEnum

import numpy as np


class Dx(IntEnum):
    """Which derivative of a quantity is meant."""

    POS = 0
    VEL = 1
    ACC = 2


class Dim(IntEnum):
    """Cartesian dimensions."""

    X = 0
    Y = 1
    Z = 2


class State:
    """Position, velocity, acceleration (and so on) of a vector quantity.

    Every derivative is a vector of the same dimension, initialised to zero.
    """

    def __init__(self, dim: int, n_derivatives: int) -> None:
        if dim < 0 or n_derivatives < 0:
            raise ValueError("dimension and number of derivatives must be non-negative")
        self._dim = dim
        self._values = [np.zeros(dim) for _ in range(n_derivatives)]

    @property
    def dim(self) -> int:
        """Dimension of each derivative vector."""
        return self._dim

    @property
    def n_derivatives(self) -> int:
        """Number of stored derivatives."""
        return len(self._values)

    def _index(self, deriv: int) -> int:
        index = int(deriv)
        if not 0 <= index < len(self._values):
            raise IndexError(f"derivative {index} not stored in this state")
        return index

    def at(self, deriv: int) -> np.ndarray:
        """Return a copy of the vector for the given derivative."""
        return self._values[self._index(deriv)].copy()

    def set(self, deriv: int, value) -> None:
        """Replace the vector for the given derivative."""
        index = self._index(deriv)
        vector = np.asarray(value, dtype=float).reshape(-1)
        if vector.shape != (self._dim,):
            raise ValueError(
                f"expected a vector of length {self._dim}, got {vector.shape[0]}"
            )
        self._values[index] = vector.copy()

    def p(self) -> np.ndarray:
        """Position."""
        return self.at(Dx.POS)

    def v(self) -> np.ndarray:
        """Velocity."""
        return self.at(Dx.VEL)

    def a(self) -> np.ndarray:
        """Acceleration."""
        return self.at(Dx.ACC)

    def __repr__(self) -> str:
        return f"State(dim={self._dim}, values={[v.tolist() for v in self._values]})"