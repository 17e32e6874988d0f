"""Fourth-order artificial dissipation for the pressure field.

Central differencing of the pressure-velocity coupling admits a decoupled
odd-even (checkerboard) pressure mode. A fourth-difference damping term is
added to the continuity equation only:

    viscx = -|lambda_x| * Cx * dx^3 * d4p/dx4 / beta2

and likewise in y. Nodes next to a wall cannot use the symmetric five-point
stencil, so they use the nearest five in-bounds points instead (the same
fourth-difference formula shifted by one node). Wave speeds and beta^2 are
evaluated at every node, including wall-adjacent and corner nodes.
"""

import numpy as np

from .datastructures import Parameters
from .timestep import preconditioning_beta2, wave_speeds


def fourth_difference(p: np.ndarray, axis: int, h: float) -> np.ndarray:
    """Fourth derivative of ``p`` along ``axis`` at every node except the two end planes.

    Nodes 2..n-3 use the centered stencil; nodes 1 and n-2 use the one-sided
    stencils [0..4] and [n-5..n-1]. End planes (0 and n-1) are left at zero.
    """
    p = np.moveaxis(p, axis, 0)
    n = p.shape[0]
    if n < 5:
        raise ValueError(f"Need at least 5 nodes along axis {axis}, got {n}")

    d4 = np.zeros_like(p)
    d4[2:-2] = p[:-4] - 4.0 * p[1:-3] + 6.0 * p[2:-2] - 4.0 * p[3:-1] + p[4:]
    d4[1] = p[0] - 4.0 * p[1] + 6.0 * p[2] - 4.0 * p[3] + p[4]
    d4[-2] = p[-5] - 4.0 * p[-4] + 6.0 * p[-3] - 4.0 * p[-2] + p[-1]
    d4 /= h**4
    return np.moveaxis(d4, 0, axis)


def compute_artificial_viscosity(
    u: np.ndarray, viscx: np.ndarray, viscy: np.ndarray, params: Parameters
):
    """Fill ``viscx`` and ``viscy`` from the current pressure field.

    Parameters
    ----------
    u : np.ndarray
        Primitive field, shape (nx, ny, 3). Only read.
    viscx, viscy : np.ndarray
        Output grids, shape (nx, ny). Boundary nodes are set to zero.
    params : Parameters
        Supplies dx, dy, Cx, Cy, rkappa and the reference velocity.
    """
    dx, dy = params.dx, params.dy
    p = u[:, :, 0]

    d4pdx4 = fourth_difference(p, axis=0, h=dx)[1:-1, 1:-1]
    d4pdy4 = fourth_difference(p, axis=1, h=dy)[1:-1, 1:-1]

    uvel = u[1:-1, 1:-1, 1]
    vvel = u[1:-1, 1:-1, 2]
    beta2 = preconditioning_beta2(uvel, vvel, params.rkappa, params.vel2ref)
    lambda_x, lambda_y = wave_speeds(uvel, vvel, beta2)

    viscx.fill(0.0)
    viscy.fill(0.0)
    viscx[1:-1, 1:-1] = -np.abs(lambda_x) * params.Cx * dx**3 * d4pdx4 / beta2
    viscy[1:-1, 1:-1] = -np.abs(lambda_y) * params.Cy * dy**3 * d4pdy4 / beta2
