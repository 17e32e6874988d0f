"""Boundary conditions for the cavity.

Two variants:

1. Cavity walls: no-slip on the left, right and bottom walls, moving lid on
   top, pressure extrapolated linearly from the interior.
2. Manufactured solution: velocities (and the pressure seed) from the exact
   solution, pressure then extrapolated to second order.

Both modify the boundary rows and columns of the primitive field in place.
"""

from abc import ABC, abstractmethod

import numpy as np

from .datastructures import Parameters
from .grid import GridArray
from .mms import ManufacturedSolution


# =============================================================================
# Abstract Base Class
# =============================================================================


class BoundaryCondition(ABC):
    """Abstract base class for boundary-condition applicators."""

    manufactured = None  # ManufacturedSolution for verification runs

    def __init__(self, params: Parameters):
        self.params = params

    @abstractmethod
    def apply(self, field: GridArray):
        """Impose boundary values on ``field`` in place."""
        pass

    def reference_pressure(self, x: float, y: float) -> float:
        """Pressure the gauge fixer anchors at node (x, y)."""
        return self.params.p_inf

    @staticmethod
    def _extrapolate_pressure(u: np.ndarray):
        """Linear (second-order) pressure extrapolation onto all four edges."""
        u[0, 1:-1, 0] = 2.0 * u[1, 1:-1, 0] - u[2, 1:-1, 0]
        u[-1, 1:-1, 0] = 2.0 * u[-2, 1:-1, 0] - u[-3, 1:-1, 0]
        u[:, 0, 0] = 2.0 * u[:, 1, 0] - u[:, 2, 0]
        u[:, -1, 0] = 2.0 * u[:, -2, 0] - u[:, -3, 0]


# =============================================================================
# Standard cavity
# =============================================================================


class CavityBoundary(BoundaryCondition):
    """No-slip walls with a lid moving at ``lid_velocity`` along +x."""

    def apply(self, field: GridArray):
        u = field.data

        # Side walls (corners are set with the top and bottom rows)
        u[0, 1:-1, 1:] = 0.0
        u[-1, 1:-1, 1:] = 0.0

        # Bottom wall and lid
        u[:, 0, 1:] = 0.0
        u[:, -1, 1] = self.params.lid_velocity
        u[:, -1, 2] = 0.0

        self._extrapolate_pressure(u)


# =============================================================================
# Manufactured solution
# =============================================================================


class ManufacturedBoundary(BoundaryCondition):
    """Dirichlet values from the manufactured solution.

    Exact edge values are evaluated once at construction; ``apply`` copies
    them in and then replaces the edge pressure with the extrapolated value.
    """

    def __init__(self, params: Parameters, x: np.ndarray, y: np.ndarray):
        super().__init__(params)
        self.manufactured = ManufacturedSolution(
            rlength=params.rlength, rho=params.rho, mu=params.mu
        )
        exact = self.manufactured.exact_field(x, y)
        self._edge_mask = np.zeros(x.shape, dtype=bool)
        self._edge_mask[0, :] = self._edge_mask[-1, :] = True
        self._edge_mask[:, 0] = self._edge_mask[:, -1] = True
        self._edge_values = exact[self._edge_mask]

    def apply(self, field: GridArray):
        u = field.data
        u[self._edge_mask] = self._edge_values
        self._extrapolate_pressure(u)

    def reference_pressure(self, x: float, y: float) -> float:
        p, _, _ = self.manufactured.exact(x, y)
        return float(p)


def create_boundary_condition(params: Parameters, x: np.ndarray, y: np.ndarray) -> BoundaryCondition:
    """Resolve the configured boundary variant.

    Parameters
    ----------
    params : Parameters
        ``params.boundary`` selects "cavity" or "mms".
    x, y : np.ndarray
        Node coordinates, shape (nx, ny) with indexing="ij".
    """
    if params.boundary == "cavity":
        return CavityBoundary(params)
    elif params.boundary == "mms":
        return ManufacturedBoundary(params, x, y)
    else:
        raise ValueError(f"Unknown boundary: {params.boundary}. Use 'cavity' or 'mms'")
