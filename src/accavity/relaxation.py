"""Relaxation schemes for one pseudo-time iteration.

Two schemes, selected once at configuration time:

1. Point Jacobi: swap buffers so the previous field becomes the frozen
   input, compute artificial viscosity from it, write every interior node of
   the new field independently, then apply boundary conditions.
2. Symmetric Gauss-Seidel: copy the current field into the previous one,
   then a forward and a backward in-place sweep, each preceded by a fresh
   artificial viscosity evaluation and followed by boundary conditions.
   Alternating the sweep direction removes the directional bias of a
   single-direction sweep.
"""

import logging
from abc import ABC, abstractmethod

from .boundary import BoundaryCondition
from .datastructures import Parameters, SolverFields
from .dissipation import compute_artificial_viscosity
from .kernels import point_jacobi, sgs_forward_sweep, sgs_backward_sweep

log = logging.getLogger(__name__)


# =============================================================================
# Abstract Base Class
# =============================================================================


class RelaxationScheme(ABC):
    """Abstract base class for relaxation schemes."""

    name = None

    def __init__(self, params: Parameters):
        self.params = params

    @abstractmethod
    def iterate(self, arrays: SolverFields, boundary: BoundaryCondition):
        """Advance ``arrays.u`` by one iteration; leave the previous state in ``arrays.uold``."""
        pass

    def _artificial_viscosity(self, field, arrays: SolverFields):
        compute_artificial_viscosity(
            field.data, arrays.viscx.data, arrays.viscy.data, self.params
        )


# =============================================================================
# Point Jacobi
# =============================================================================


class PointJacobi(RelaxationScheme):
    """Point-Jacobi iteration (reads only the frozen previous field)."""

    name = "jacobi"

    def relax(self, arrays: SolverFields):
        """Jacobi update of ``arrays.u`` from ``arrays.uold`` without touching boundaries."""
        a = arrays
        point_jacobi(
            a.u.data, a.uold.data, a.viscx.data, a.viscy.data, a.dt.data, a.s.data, self.params
        )

    def iterate(self, arrays: SolverFields, boundary: BoundaryCondition):
        arrays.uold.swap(arrays.u)
        self._artificial_viscosity(arrays.uold, arrays)
        self.relax(arrays)
        boundary.apply(arrays.u)


# =============================================================================
# Symmetric Gauss-Seidel
# =============================================================================


class SymmetricGaussSeidel(RelaxationScheme):
    """Forward then backward in-place Gauss-Seidel sweeps."""

    name = "sgs"

    def _sweep(self, kernel, arrays: SolverFields):
        p = self.params
        a = arrays
        kernel(
            a.u.data, a.viscx.data, a.viscy.data, a.dt.data, a.s.data,
            p.dx, p.dy, p.rho, p.mu, p.rkappa, p.vel2ref,
        )

    def forward_sweep(self, arrays: SolverFields, boundary: BoundaryCondition):
        """Artificial viscosity, forward sweep, boundary conditions."""
        self._artificial_viscosity(arrays.u, arrays)
        self._sweep(sgs_forward_sweep, arrays)
        boundary.apply(arrays.u)

    def backward_sweep(self, arrays: SolverFields, boundary: BoundaryCondition):
        """Artificial viscosity, backward sweep, boundary conditions."""
        self._artificial_viscosity(arrays.u, arrays)
        self._sweep(sgs_backward_sweep, arrays)
        boundary.apply(arrays.u)

    def iterate(self, arrays: SolverFields, boundary: BoundaryCondition):
        arrays.uold.copy_from(arrays.u)
        self.forward_sweep(arrays, boundary)
        self.backward_sweep(arrays, boundary)


def create_relaxation_scheme(params: Parameters) -> RelaxationScheme:
    """Resolve the configured relaxation scheme ("jacobi" or "sgs")."""
    if params.scheme == "jacobi":
        scheme = PointJacobi(params)
    elif params.scheme == "sgs":
        scheme = SymmetricGaussSeidel(params)
    else:
        raise ValueError(f"Unknown scheme: {params.scheme}. Use 'jacobi' or 'sgs'")
    log.info(f"Using relaxation scheme: {scheme.name}")
    return scheme
