"""Iterative convergence monitoring."""

import numpy as np

from .datastructures import NEQ


class ConvergenceMonitor:
    """Normalized iterative residuals of the three equations.

    For equation k the residual is the RMS over interior nodes of
    ``(u - uold) / dt``, divided by a fixed baseline ``resinit[k]``. The
    baseline is either supplied (restart) or captured from the first
    measured iteration on which that equation changes at all. Starting from
    rest, continuity and y-momentum do not move on the very first Jacobi
    iteration, so their baselines are captured one iteration later. Until
    then the entry of ``resinit`` is NaN and the normalized residual is 0.

    Parameters
    ----------
    tolerance : float
        Convergence threshold on ``max(res)``.
    resinit : array_like, optional
        Baseline from a previous run. NaN entries are still to be captured.
    """

    def __init__(self, tolerance: float, resinit=None):
        self.tolerance = tolerance
        if resinit is None:
            self.resinit = np.full(NEQ, np.nan)
        else:
            self.resinit = np.asarray(resinit, dtype=float).copy()
            if self.resinit.shape != (NEQ,) or not np.all((self.resinit > 0) | np.isnan(self.resinit)):
                raise ValueError(f"resinit must be positive or NaN, got {self.resinit}")
        self.res = np.zeros(NEQ)
        self.conv = float("inf")

    @staticmethod
    def raw_residuals(u: np.ndarray, uold: np.ndarray, dt: np.ndarray) -> np.ndarray:
        """Un-normalized interior RMS of (u - uold) / dt for each equation."""
        diff = (u[1:-1, 1:-1, :] - uold[1:-1, 1:-1, :]) / dt[1:-1, 1:-1, None]
        n_interior = diff.shape[0] * diff.shape[1]
        return np.sqrt(np.sum(diff * diff, axis=(0, 1)) / n_interior)

    @property
    def captured(self) -> np.ndarray:
        """Equations whose baseline is fixed."""
        return ~np.isnan(self.resinit)

    def update(self, u: np.ndarray, uold: np.ndarray, dt: np.ndarray) -> float:
        """Compute normalized residuals and return the convergence measure max(res)."""
        raw = self.raw_residuals(u, uold, dt)
        capture = ~self.captured & (raw > 0) & np.isfinite(raw)
        self.resinit[capture] = raw[capture]

        # Uncaptured entries pass through unscaled: 0 stays 0, NaN/inf stay non-finite
        self.res = np.where(self.captured, raw / np.where(self.captured, self.resinit, 1.0), raw)
        self.conv = float(np.max(self.res))
        return self.conv

    @property
    def diverged(self) -> bool:
        """True when any residual is infinite or NaN."""
        return not np.all(np.isfinite(self.res))

    @property
    def converged(self) -> bool:
        return not self.diverged and self.conv < self.tolerance
