"""Data structures for solver configuration and results.

Structure:
- Parameters: Input configuration (immutable, logged to MLflow at start)
- Metrics: Output results (logged to MLflow at end)
- Fields: Spatial solution data on the node grid
- TimeSeries: Residual history
- SolverFields: Internal work buffers owned by the solver
- LoopOutcome: Terminal state of the pseudo-time loop
"""

from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Optional, List

import numpy as np
import pandas as pd

from .exceptions import ConfigurationError
from .grid import GridArray

NEQ = 3  # mass, x-momentum, y-momentum

SCHEMES = ("jacobi", "sgs")
BOUNDARIES = ("cavity", "mms")


# ========================================================
# Parameters (Input Configuration)
# ========================================================


@dataclass(frozen=True)
class Parameters:
    """Solver parameters, fixed for the whole run.

    Defaults reproduce the classic 5 cm cavity at Re = 100 on a 65 x 65 grid.
    ``nx`` and ``ny`` count grid nodes including the boundary nodes.
    """

    Re: float = 100.0
    lid_velocity: float = 1.0
    rho: float = 1.0
    Lx: float = 0.05
    Ly: float = 0.05
    nx: int = 65
    ny: int = 65
    max_iterations: int = 500000
    tolerance: float = 1e-10
    cfl: float = 0.9
    Cx: float = 0.01  # 4th-order artificial viscosity in x
    Cy: float = 0.01  # 4th-order artificial viscosity in y
    rkappa: float = 0.1  # time-derivative preconditioning constant
    p_inf: float = 0.801333844662  # reference pressure at the cavity center
    scheme: str = "jacobi"
    boundary: str = "cavity"
    restart: bool = False
    restart_file: str = "restart.in"
    output_interval: int = 5000
    residual_interval: int = 10
    output_dir: Optional[str] = None

    def __post_init__(self):
        if self.scheme not in SCHEMES:
            raise ConfigurationError(
                f"Unknown scheme: {self.scheme!r}. Use one of {SCHEMES}"
            )
        if self.boundary not in BOUNDARIES:
            raise ConfigurationError(
                f"Unknown boundary: {self.boundary!r}. Use one of {BOUNDARIES}"
            )
        if self.nx < 5 or self.ny < 5:
            raise ConfigurationError(
                f"Grid must have at least 5 x 5 nodes, got {self.nx} x {self.ny}"
            )
        for name in ("Re", "lid_velocity", "rho", "Lx", "Ly", "cfl", "tolerance", "rkappa"):
            if not getattr(self, name) > 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")
        if self.max_iterations < 1:
            raise ConfigurationError("max_iterations must be at least 1")
        if self.output_interval < 1 or self.residual_interval < 1:
            raise ConfigurationError("output_interval and residual_interval must be at least 1")

    # Derived quantities
    @property
    def rlength(self) -> float:
        """Characteristic length (cavity width)."""
        return self.Lx

    @property
    def mu(self) -> float:
        """Dynamic viscosity from Re = rho U L / mu."""
        return self.rho * self.lid_velocity * self.rlength / self.Re

    @property
    def nu(self) -> float:
        return self.mu / self.rho

    @property
    def vel2ref(self) -> float:
        return self.lid_velocity**2

    @property
    def dx(self) -> float:
        return self.Lx / (self.nx - 1)

    @property
    def dy(self) -> float:
        return self.Ly / (self.ny - 1)

    @property
    def center(self) -> tuple:
        """Index of the pressure reference node."""
        return (self.nx - 1) // 2, (self.ny - 1) // 2

    def to_dataframe(self):
        return pd.DataFrame([asdict(self)])

    def to_mlflow(self) -> dict:
        return {k: ("" if v is None else v) for k, v in asdict(self).items()}


# ========================================================
# Metrics (Output Results)
# ========================================================


class LoopOutcome(Enum):
    """Terminal state of the pseudo-time loop."""

    CONVERGED = "converged"
    EXHAUSTED = "exhausted"
    DIVERGED = "diverged"


@dataclass
class Metrics:
    """Solver metrics - output results computed during/after solving."""

    iterations: int = 0
    converged: bool = False
    outcome: str = ""
    final_residual: float = float("inf")
    wall_time_seconds: float = 0.0
    pseudo_time: float = 0.0
    continuity_residual: float = 0.0
    x_momentum_residual: float = 0.0
    y_momentum_residual: float = 0.0
    # Discretization error norms (manufactured solution runs only)
    de_l1_p: Optional[float] = None
    de_l1_u: Optional[float] = None
    de_l1_v: Optional[float] = None
    de_l2_p: Optional[float] = None
    de_l2_u: Optional[float] = None
    de_l2_v: Optional[float] = None
    de_linf_p: Optional[float] = None
    de_linf_u: Optional[float] = None
    de_linf_v: Optional[float] = None

    def to_dataframe(self):
        return pd.DataFrame([asdict(self)])

    def to_mlflow(self) -> dict:
        """Numeric metrics only (MLflow rejects strings and None)."""
        out = {}
        for k, v in asdict(self).items():
            if v is None or isinstance(v, str):
                continue
            out[k] = float(v)
        return out


# ========================================================
# Fields (Spatial Solution Data)
# ========================================================


@dataclass
class Fields:
    """Spatial solution fields (p, u, v) at grid nodes (x, y), flattened."""

    p: np.ndarray
    u: np.ndarray
    v: np.ndarray
    x: np.ndarray
    y: np.ndarray

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to DataFrame with one row per grid node."""
        return pd.DataFrame(asdict(self))


# ========================================================
# Time Series (Convergence History)
# ========================================================


@dataclass
class TimeSeries:
    """Residual history (one entry per monitored iteration)."""

    iteration: List[int] = field(default_factory=list)
    time: List[float] = field(default_factory=list)
    continuity: List[float] = field(default_factory=list)
    x_momentum: List[float] = field(default_factory=list)
    y_momentum: List[float] = field(default_factory=list)

    def append(self, n: int, rtime: float, res: np.ndarray):
        self.iteration.append(int(n))
        self.time.append(float(rtime))
        self.continuity.append(float(res[0]))
        self.x_momentum.append(float(res[1]))
        self.y_momentum.append(float(res[2]))

    def __len__(self):
        return len(self.iteration)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to DataFrame with one row per monitored iteration."""
        return pd.DataFrame(asdict(self))

    def to_mlflow_batch(self) -> list:
        """Build MLflow Metric entities for batch logging."""
        from mlflow.entities import Metric

        batch = []
        for k, n in enumerate(self.iteration):
            for name in ("continuity", "x_momentum", "y_momentum"):
                value = getattr(self, name)[k]
                if np.isfinite(value):
                    batch.append(Metric(key=f"{name}_residual", value=value, timestamp=0, step=n))
        return batch


# =============================================================
# Internal work buffers
# ============================================================


@dataclass
class SolverFields:
    """Internal solver buffers - current state, previous iteration and work grids."""

    u: GridArray  # current [p, u, v]
    uold: GridArray  # previous iteration (Jacobi: frozen input)
    s: GridArray  # source terms
    viscx: GridArray  # artificial viscosity, x
    viscy: GridArray  # artificial viscosity, y
    dt: GridArray  # local pseudo-time step

    @classmethod
    def allocate(cls, nx: int, ny: int, checked: bool = None):
        """Allocate all grids with proper sizes."""
        return cls(
            u=GridArray(nx, ny, NEQ, checked=checked),
            uold=GridArray(nx, ny, NEQ, checked=checked),
            s=GridArray(nx, ny, NEQ, checked=checked),
            viscx=GridArray(nx, ny, checked=checked),
            viscy=GridArray(nx, ny, checked=checked),
            dt=GridArray(nx, ny, checked=checked),
        )
