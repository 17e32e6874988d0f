"""Artificial-compressibility lid-driven cavity solver.

Steady incompressible Navier-Stokes on a uniform finite-difference grid,
marched to steady state in pseudo-time.

Solver Hierarchy:
-----------------
LidDrivenCavitySolver (abstract base - pseudo-time loop, metrics, logging)
└── PseudoCompressibilitySolver (time step, relaxation, gauge fixing)

Pluggable pieces:
-----------------
RelaxationScheme
├── PointJacobi
└── SymmetricGaussSeidel
BoundaryCondition
├── CavityBoundary (moving lid, no-slip walls)
└── ManufacturedBoundary (exact-solution Dirichlet data)
"""

from .base import LidDrivenCavitySolver
from .boundary import (
    BoundaryCondition,
    CavityBoundary,
    ManufacturedBoundary,
    create_boundary_condition,
)
from .datastructures import (
    Parameters,
    Metrics,
    Fields,
    TimeSeries,
    SolverFields,
    LoopOutcome,
)
from .exceptions import AccavityError, ConfigurationError, RestartFileError
from .grid import GridArray
from .mms import ManufacturedSolution
from .relaxation import (
    RelaxationScheme,
    PointJacobi,
    SymmetricGaussSeidel,
    create_relaxation_scheme,
)
from .solver import PseudoCompressibilitySolver

__all__ = [
    # Solvers
    "LidDrivenCavitySolver",
    "PseudoCompressibilitySolver",
    # Configuration and results
    "Parameters",
    "Metrics",
    "Fields",
    "TimeSeries",
    "SolverFields",
    "LoopOutcome",
    "GridArray",
    # Components
    "BoundaryCondition",
    "CavityBoundary",
    "ManufacturedBoundary",
    "create_boundary_condition",
    "RelaxationScheme",
    "PointJacobi",
    "SymmetricGaussSeidel",
    "create_relaxation_scheme",
    "ManufacturedSolution",
    # Errors
    "AccavityError",
    "ConfigurationError",
    "RestartFileError",
]
