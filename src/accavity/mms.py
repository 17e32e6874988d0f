"""Manufactured solution for verifying the discretization order.

Each primitive variable k in [p, u, v] is

    phi_k(x, y) = phi0 + phix*T(apx*pi*x/L) + phiy*T(apy*pi*y/L) + phixy*T(apxy*pi*x*y/L^2)

where each T is either sin or cos. Substituting the exact fields into the
steady equations gives the source terms that force the discrete solution
toward the manufactured one.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

# Rows: p, u, v
PHI0 = np.array([0.25, 0.3, 0.2])
PHIX = np.array([0.5, 0.15, 1.0 / 6.0])
PHIY = np.array([0.4, 0.2, 0.25])
PHIXY = np.array([1.0 / 3.0, 0.25, 0.1])
APX = np.array([0.5, 1.0 / 3.0, 7.0 / 17.0])
APY = np.array([0.2, 0.25, 1.0 / 6.0])
APXY = np.array([2.0 / 7.0, 0.4, 1.0 / 3.0])
# 1 selects sine, 0 selects cosine
FSINX = np.array([0.0, 1.0, 0.0])
FSINY = np.array([1.0, 0.0, 0.0])
FSINXY = np.array([1.0, 1.0, 0.0])


def _trig(arg, fsin):
    """Return T(arg), T'(arg) for T = sin (fsin=1) or cos (fsin=0)."""
    sin, cos = np.sin(arg), np.cos(arg)
    value = fsin * sin + (1.0 - fsin) * cos
    slope = fsin * cos - (1.0 - fsin) * sin
    return value, slope


@dataclass(frozen=True)
class ManufacturedSolution:
    """Closed-form exact solution and its source terms.

    Parameters
    ----------
    rlength : float
        Length scale L used in the trigonometric arguments.
    rho, mu : float
        Density and dynamic viscosity entering the momentum sources.
    """

    rlength: float
    rho: float = 1.0
    mu: float = 0.0005

    def _component(self, x, y, k):
        """Value, first and second derivatives of component k."""
        L = self.rlength
        ax = APX[k] * np.pi / L
        ay = APY[k] * np.pi / L
        axy = APXY[k] * np.pi / (L * L)

        tx, tx1 = _trig(ax * x, FSINX[k])
        ty, ty1 = _trig(ay * y, FSINY[k])
        txy, txy1 = _trig(axy * x * y, FSINXY[k])

        value = PHI0[k] + PHIX[k] * tx + PHIY[k] * ty + PHIXY[k] * txy
        ddx = PHIX[k] * ax * tx1 + PHIXY[k] * axy * y * txy1
        ddy = PHIY[k] * ay * ty1 + PHIXY[k] * axy * x * txy1
        # T'' = -T for both sin and cos
        d2dx2 = -PHIX[k] * ax**2 * tx - PHIXY[k] * (axy * y) ** 2 * txy
        d2dy2 = -PHIY[k] * ay**2 * ty - PHIXY[k] * (axy * x) ** 2 * txy
        return value, ddx, ddy, d2dx2, d2dy2

    def exact(self, x, y) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Exact (p, u, v) at the given coordinates."""
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        return tuple(self._component(x, y, k)[0] for k in range(3))

    def exact_field(self, x, y) -> np.ndarray:
        """Exact solution stacked as [..., 3] in (p, u, v) order."""
        return np.stack(self.exact(x, y), axis=-1)

    def source_terms(self, x, y) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Mass, x-momentum and y-momentum source terms."""
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        rho, mu = self.rho, self.mu

        _, dpdx, dpdy, _, _ = self._component(x, y, 0)
        uvel, dudx, dudy, d2udx2, d2udy2 = self._component(x, y, 1)
        vvel, dvdx, dvdy, d2vdx2, d2vdy2 = self._component(x, y, 2)

        mass = rho * dudx + rho * dvdy
        xmtm = rho * uvel * dudx + rho * vvel * dudy + dpdx - mu * (d2udx2 + d2udy2)
        ymtm = rho * uvel * dvdx + rho * vvel * dvdy + dpdy - mu * (d2vdx2 + d2vdy2)
        return mass, xmtm, ymtm
