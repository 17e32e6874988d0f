"""Pressure gauge fixing.

The velocity field determines pressure only up to an additive constant.
After each iteration the whole pressure field is shifted so that one
reference node holds the reference pressure; gradients are unchanged.
"""

import numpy as np


def rescale_pressure(u: np.ndarray, iref: int, jref: int, p_ref: float) -> float:
    """Shift pressure so that ``u[iref, jref, 0] == p_ref``.

    Returns
    -------
    float
        The offset ``deltap`` that was subtracted from every node.
    """
    deltap = u[iref, jref, 0] - p_ref
    u[:, :, 0] -= deltap
    # a - (a - b) can differ from b in the last bit; pin the anchor exactly
    u[iref, jref, 0] = p_ref
    return float(deltap)
