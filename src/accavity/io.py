"""Solution, residual history and restart files.

Files written to the output directory:

- ``cavity.dat``: Tecplot point-format field data, one zone per emission
- ``history.dat``: iterative residual history
- ``restart.out``: checkpoint (iteration, time, baseline residuals, field)
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from .datastructures import NEQ
from .exceptions import RestartFileError

log = logging.getLogger(__name__)

FIELD_VARIABLES = '"x(m)""y(m)""p(N/m^2)""u(m/s)""v(m/s)"'
MMS_VARIABLES = '"p-exact""u-exact""v-exact""DE-p""DE-u""DE-v"'


@dataclass
class RestartState:
    """State needed to resume the pseudo-time loop."""

    iteration: int
    time: float
    resinit: np.ndarray
    u: np.ndarray  # (nx, ny, 3)


# =============================================================================
# Restart files
# =============================================================================


def write_restart(path, n: int, rtime: float, resinit, x: np.ndarray, y: np.ndarray, u: np.ndarray):
    """Write a checkpoint: header lines then one ``x y p u v`` row per node."""
    path = Path(path)
    rows = np.column_stack([x.ravel(), y.ravel(), u.reshape(-1, NEQ)])
    with open(path, "w") as f:
        f.write(f"{n:d} {rtime:.16e}\n")
        f.write(" ".join(f"{r:.16e}" for r in resinit) + "\n")
        np.savetxt(f, rows, fmt="%.16e")


def read_restart(path, nx: int, ny: int) -> RestartState:
    """Read a checkpoint written by :func:`write_restart`.

    Raises
    ------
    RestartFileError
        If the file is missing, malformed or does not match the grid.
    """
    path = Path(path)
    if not path.is_file():
        raise RestartFileError(f"Restart file not found: {path}")

    try:
        with open(path) as f:
            header = f.readline().split()
            n, rtime = int(header[0]), float(header[1])
            resinit = np.array([float(r) for r in f.readline().split()])
            rows = np.loadtxt(f, ndmin=2)
    except (ValueError, IndexError) as e:
        raise RestartFileError(f"Malformed restart file {path}: {e}") from e

    if resinit.shape != (NEQ,) or not np.all((resinit > 0) | np.isnan(resinit)):
        raise RestartFileError(f"Restart file {path} has invalid initial residuals: {resinit}")
    if rows.shape != (nx * ny, 2 + NEQ):
        raise RestartFileError(
            f"Restart file {path} holds {rows.shape[0]} rows of {rows.shape[1]} columns, "
            f"expected {nx * ny} rows of {2 + NEQ} for a {nx} x {ny} grid"
        )

    u = rows[:, 2:].reshape(nx, ny, NEQ)
    return RestartState(iteration=n, time=rtime, resinit=resinit, u=u)


# =============================================================================
# Field and history output
# =============================================================================


class SolutionWriter:
    """Writes field zones, residual history and restart checkpoints.

    Parameters
    ----------
    output_dir : str or Path
        Directory for ``cavity.dat``, ``history.dat`` and ``restart.out``.
    manufactured : ManufacturedSolution, optional
        If given, field zones also carry the exact solution and pointwise error.
    """

    def __init__(self, output_dir, manufactured=None):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.manufactured = manufactured

        self.field_path = self.output_dir / "cavity.dat"
        self.history_path = self.output_dir / "history.dat"
        self.restart_path = self.output_dir / "restart.out"
        self._write_headers()

    def _write_headers(self):
        with open(self.history_path, "w") as f:
            f.write('TITLE = "Cavity Iterative Residual History"\n')
            f.write('variables="Iteration""Time(s)""Res1""Res2""Res3"\n')

        with open(self.field_path, "w") as f:
            f.write('TITLE = "Cavity Field Data"\n')
            variables = FIELD_VARIABLES
            if self.manufactured is not None:
                variables += MMS_VARIABLES
            f.write(f"variables={variables}\n")

    def write_history(self, n: int, rtime: float, res):
        with open(self.history_path, "a") as f:
            f.write(f"{n:d} {rtime:e} {res[0]:e} {res[1]:e} {res[2]:e}\n")

    def write_field(self, n: int, x: np.ndarray, y: np.ndarray, u: np.ndarray):
        """Append one Tecplot zone with the current field."""
        nx, ny = x.shape
        columns = [x.ravel(), y.ravel(), u.reshape(-1, NEQ)]
        if self.manufactured is not None:
            exact = self.manufactured.exact_field(x, y).reshape(-1, NEQ)
            columns += [exact, u.reshape(-1, NEQ) - exact]
        rows = np.column_stack(columns)

        with open(self.field_path, "a") as f:
            f.write(f'zone T="n={n:d}"\n')
            f.write(f"I= {nx:d} J= {ny:d}\n")
            f.write("DATAPACKING=POINT\n")
            np.savetxt(f, rows, fmt="%e")

    def write_output(self, n: int, x, y, u, resinit, rtime: float):
        """Field zone plus a fresh restart checkpoint."""
        self.write_field(n, x, y, u)
        write_restart(self.restart_path, n, rtime, resinit, x, y, u)
        log.debug(f"Wrote field and restart output at iteration {n}")
