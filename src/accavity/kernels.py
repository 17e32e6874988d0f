"""Node-update kernels for the artificial-compressibility equations.

Each interior node is advanced in pseudo-time with central differences:

    p <- p - beta2*dt*( rho*dudx + rho*dvdy - viscx - viscy - s_mass )
    u <- u - dt/rho*( rho*u*dudx + rho*v*dudy + dpdx - mu*(uxx + uyy) - s_xmtm )
    v <- v - dt/rho*( rho*u*dvdx + rho*v*dvdy + dpdy - mu*(vxx + vyy) - s_ymtm )

The point-Jacobi update is vectorized over the interior with numpy (every
node reads only the frozen previous field). The Gauss-Seidel sweeps are
sequential by construction and are compiled with numba.
"""

import numpy as np
from numba import njit

from .datastructures import Parameters


# =============================================================================
# Point Jacobi (vectorized)
# =============================================================================


def point_jacobi(
    u: np.ndarray,
    uold: np.ndarray,
    viscx: np.ndarray,
    viscy: np.ndarray,
    dt: np.ndarray,
    s: np.ndarray,
    params: Parameters,
):
    """Write the Jacobi update of ``uold`` into the interior of ``u``.

    ``u`` and ``uold`` must be distinct buffers; boundary nodes of ``u`` are
    not touched.
    """
    dx, dy = params.dx, params.dy
    rho, rmu = params.rho, params.mu
    rhoinv = 1.0 / rho

    c = uold[1:-1, 1:-1]
    east = uold[2:, 1:-1]
    west = uold[:-2, 1:-1]
    north = uold[1:-1, 2:]
    south = uold[1:-1, :-2]

    dpdx = (east[..., 0] - west[..., 0]) / (2.0 * dx)
    dudx = (east[..., 1] - west[..., 1]) / (2.0 * dx)
    dvdx = (east[..., 2] - west[..., 2]) / (2.0 * dx)
    dpdy = (north[..., 0] - south[..., 0]) / (2.0 * dy)
    dudy = (north[..., 1] - south[..., 1]) / (2.0 * dy)
    dvdy = (north[..., 2] - south[..., 2]) / (2.0 * dy)
    d2udx2 = (east[..., 1] - 2.0 * c[..., 1] + west[..., 1]) / (dx * dx)
    d2vdx2 = (east[..., 2] - 2.0 * c[..., 2] + west[..., 2]) / (dx * dx)
    d2udy2 = (north[..., 1] - 2.0 * c[..., 1] + south[..., 1]) / (dy * dy)
    d2vdy2 = (north[..., 2] - 2.0 * c[..., 2] + south[..., 2]) / (dy * dy)

    uvel = c[..., 1]
    vvel = c[..., 2]
    beta2 = np.maximum(uvel * uvel + vvel * vvel, params.rkappa * params.vel2ref)
    dtc = dt[1:-1, 1:-1]
    src = s[1:-1, 1:-1]

    u[1:-1, 1:-1, 0] = c[..., 0] - beta2 * dtc * (
        rho * dudx + rho * dvdy - viscx[1:-1, 1:-1] - viscy[1:-1, 1:-1] - src[..., 0]
    )
    u[1:-1, 1:-1, 1] = c[..., 1] - dtc * rhoinv * (
        rho * uvel * dudx + rho * vvel * dudy + dpdx - rmu * (d2udx2 + d2udy2) - src[..., 1]
    )
    u[1:-1, 1:-1, 2] = c[..., 2] - dtc * rhoinv * (
        rho * uvel * dvdx + rho * vvel * dvdy + dpdy - rmu * (d2vdx2 + d2vdy2) - src[..., 2]
    )


# =============================================================================
# Symmetric Gauss-Seidel (compiled sweeps)
# =============================================================================


@njit(inline="always", cache=True, nogil=True)
def _update_node(u, i, j, viscx, viscy, dt, s, dx, dy, rho, rmu, rkappa, vel2ref):
    """In-place update of node (i, j) using the current contents of ``u``."""
    dpdx = (u[i + 1, j, 0] - u[i - 1, j, 0]) / (2.0 * dx)
    dudx = (u[i + 1, j, 1] - u[i - 1, j, 1]) / (2.0 * dx)
    dvdx = (u[i + 1, j, 2] - u[i - 1, j, 2]) / (2.0 * dx)
    dpdy = (u[i, j + 1, 0] - u[i, j - 1, 0]) / (2.0 * dy)
    dudy = (u[i, j + 1, 1] - u[i, j - 1, 1]) / (2.0 * dy)
    dvdy = (u[i, j + 1, 2] - u[i, j - 1, 2]) / (2.0 * dy)
    d2udx2 = (u[i + 1, j, 1] - 2.0 * u[i, j, 1] + u[i - 1, j, 1]) / (dx * dx)
    d2vdx2 = (u[i + 1, j, 2] - 2.0 * u[i, j, 2] + u[i - 1, j, 2]) / (dx * dx)
    d2udy2 = (u[i, j + 1, 1] - 2.0 * u[i, j, 1] + u[i, j - 1, 1]) / (dy * dy)
    d2vdy2 = (u[i, j + 1, 2] - 2.0 * u[i, j, 2] + u[i, j - 1, 2]) / (dy * dy)

    pc = u[i, j, 0]
    uvel = u[i, j, 1]
    vvel = u[i, j, 2]
    beta2 = max(uvel * uvel + vvel * vvel, rkappa * vel2ref)
    dtij = dt[i, j]

    u[i, j, 0] = pc - beta2 * dtij * (
        rho * dudx + rho * dvdy - viscx[i, j] - viscy[i, j] - s[i, j, 0]
    )
    u[i, j, 1] = uvel - dtij / rho * (
        rho * uvel * dudx + rho * vvel * dudy + dpdx - rmu * (d2udx2 + d2udy2) - s[i, j, 1]
    )
    u[i, j, 2] = vvel - dtij / rho * (
        rho * uvel * dvdx + rho * vvel * dvdy + dpdy - rmu * (d2vdx2 + d2vdy2) - s[i, j, 2]
    )


@njit(cache=True, nogil=True)
def sgs_forward_sweep(u, viscx, viscy, dt, s, dx, dy, rho, rmu, rkappa, vel2ref):
    """Gauss-Seidel sweep with increasing i, then increasing j."""
    nx, ny = u.shape[0], u.shape[1]
    for i in range(1, nx - 1):
        for j in range(1, ny - 1):
            _update_node(u, i, j, viscx, viscy, dt, s, dx, dy, rho, rmu, rkappa, vel2ref)


@njit(cache=True, nogil=True)
def sgs_backward_sweep(u, viscx, viscy, dt, s, dx, dy, rho, rmu, rkappa, vel2ref):
    """Gauss-Seidel sweep with decreasing i, then decreasing j."""
    nx, ny = u.shape[0], u.shape[1]
    for i in range(nx - 2, 0, -1):
        for j in range(ny - 2, 0, -1):
            _update_node(u, i, j, viscx, viscy, dt, s, dx, dy, rho, rmu, rkappa, vel2ref)
