"""Error norms for verification against the manufactured solution."""

from __future__ import annotations

import numpy as np

VARIABLES = ("p", "u", "v")


# -----------------------------------------------------------------------------
# Norms / errors
# -----------------------------------------------------------------------------


def discrete_l1_error(f_exact: np.ndarray, f_num: np.ndarray) -> float:
    """Mean absolute error over all points."""
    return float(np.mean(np.abs(f_num - f_exact)))


def discrete_l2_error(f_exact: np.ndarray, f_num: np.ndarray) -> float:
    """RMS error over all points: sqrt(sum(e^2) / N)."""
    diff = f_num - f_exact
    return float(np.sqrt(np.sum(diff * diff) / diff.size))


def discrete_linf_error(f_exact: np.ndarray, f_num: np.ndarray) -> float:
    """Compute discrete L-infinity (maximum) error."""
    return float(np.max(np.abs(f_num - f_exact)))


def discretization_error_norms(u: np.ndarray, exact: np.ndarray) -> dict[str, float]:
    """L1, L2 and L-infinity discretization error for p, u and v.

    Parameters
    ----------
    u : np.ndarray
        Computed field, shape (nx, ny, 3).
    exact : np.ndarray
        Exact field on the same nodes.

    Returns
    -------
    dict
        Keys ``de_l1_p``, ``de_l2_p``, ``de_linf_p`` and so on.
    """
    norms = {}
    for k, name in enumerate(VARIABLES):
        norms[f"de_l1_{name}"] = discrete_l1_error(exact[..., k], u[..., k])
        norms[f"de_l2_{name}"] = discrete_l2_error(exact[..., k], u[..., k])
        norms[f"de_linf_{name}"] = discrete_linf_error(exact[..., k], u[..., k])
    return norms


def observed_order(error_coarse: float, error_fine: float, refinement: float = 2.0) -> float:
    """Observed order of accuracy from errors on two grids."""
    return float(np.log(error_coarse / error_fine) / np.log(refinement))
