"""Local pseudo-time step estimation.

Pseudo-compressibility iterations are only conditionally stable, so each
interior node advances with its own step, limited by the convective
(preconditioned wave speed) and viscous stability bounds. Boundary nodes
take the global interior minimum.
"""

import numpy as np

from .datastructures import Parameters


def preconditioning_beta2(uvel: np.ndarray, vvel: np.ndarray, rkappa: float, vel2ref: float) -> np.ndarray:
    """beta^2 = max(|V|^2, rkappa * Uref^2)."""
    return np.maximum(uvel * uvel + vvel * vvel, rkappa * vel2ref)


def wave_speeds(uvel: np.ndarray, vvel: np.ndarray, beta2: np.ndarray):
    """Largest eigenvalue magnitudes of the preconditioned system in x and y."""
    lambda_x = 0.5 * (np.abs(uvel) + np.sqrt(uvel * uvel + 4.0 * beta2))
    lambda_y = 0.5 * (np.abs(vvel) + np.sqrt(vvel * vvel + 4.0 * beta2))
    return lambda_x, lambda_y


def compute_time_step(u: np.ndarray, dt: np.ndarray, params: Parameters) -> float:
    """Fill ``dt`` with local pseudo-time steps and return the interior minimum.

    Parameters
    ----------
    u : np.ndarray
        Primitive field, shape (nx, ny, 3).
    dt : np.ndarray
        Output time-step grid, shape (nx, ny), modified in place.
    params : Parameters
        Solver parameters.

    Returns
    -------
    float
        Global minimum over interior nodes; also written to all four edges.
    """
    dx, dy = params.dx, params.dy
    uvel = u[1:-1, 1:-1, 1]
    vvel = u[1:-1, 1:-1, 2]

    beta2 = preconditioning_beta2(uvel, vvel, params.rkappa, params.vel2ref)
    lambda_x, lambda_y = wave_speeds(uvel, vvel, beta2)

    dtvisc = dx * dy / (4.0 * params.nu)
    dtconv = min(dx, dy) / np.abs(np.maximum(lambda_x, lambda_y))

    dt[1:-1, 1:-1] = params.cfl * np.minimum(dtvisc, dtconv)
    dtmin = float(np.min(dt[1:-1, 1:-1]))

    dt[:, 0] = dtmin
    dt[:, -1] = dtmin
    dt[0, :] = dtmin
    dt[-1, :] = dtmin
    return dtmin
