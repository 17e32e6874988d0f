"""Ghia et al. (1982) benchmark comparison.

The computed field is interpolated with bicubic splines on nondimensional
coordinates (x/Lx, y/Ly) and velocities (u/U, v/U), then sampled at the
tabulated centerline points.
"""

import logging
from pathlib import Path

import numpy as np
import pandas as pd
from scipy.interpolate import RectBivariateSpline

log = logging.getLogger(__name__)

GHIA_DIR = Path(__file__).resolve().parents[2] / "data" / "validation" / "ghia"


def load_ghia(Re: float, data_dir=None):
    """Load Ghia centerline tables for a Reynolds number.

    Returns
    -------
    tuple[pd.DataFrame, pd.DataFrame]
        u along the vertical centerline (columns y, u) and v along the
        horizontal centerline (columns x, v).
    """
    ghia_dir = Path(data_dir) if data_dir is not None else GHIA_DIR
    u_file = ghia_dir / f"ghia_Re{int(Re)}_u_centerline.csv"
    v_file = ghia_dir / f"ghia_Re{int(Re)}_v_centerline.csv"
    if not (u_file.exists() and v_file.exists()):
        raise FileNotFoundError(f"Ghia data files not found in {ghia_dir} for Re={Re}")
    return pd.read_csv(u_file), pd.read_csv(v_file)


def _interpolators(solver):
    """Bicubic splines of u/U and v/U on the unit square."""
    p = solver.params
    x = solver.x[:, 0] / p.Lx
    y = solver.y[0, :] / p.Ly
    u = solver.arrays.u.data
    u_spline = RectBivariateSpline(x, y, u[:, :, 1] / p.lid_velocity, kx=3, ky=3)
    v_spline = RectBivariateSpline(x, y, u[:, :, 2] / p.lid_velocity, kx=3, ky=3)
    return u_spline, v_spline


def centerline_profiles(solver, ghia_u: pd.DataFrame, ghia_v: pd.DataFrame) -> pd.DataFrame:
    """Computed nondimensional velocities at the Ghia sample points.

    Returns a long-format DataFrame with columns
    ``profile, coordinate, reference, computed, error``.
    """
    u_spline, v_spline = _interpolators(solver)

    u_computed = u_spline.ev(np.full(len(ghia_u), 0.5), ghia_u["y"].to_numpy())
    v_computed = v_spline.ev(ghia_v["x"].to_numpy(), np.full(len(ghia_v), 0.5))

    u_df = pd.DataFrame(
        {
            "profile": "u",
            "coordinate": ghia_u["y"],
            "reference": ghia_u["u"],
            "computed": u_computed,
        }
    )
    v_df = pd.DataFrame(
        {
            "profile": "v",
            "coordinate": ghia_v["x"],
            "reference": ghia_v["v"],
            "computed": v_computed,
        }
    )
    df = pd.concat([u_df, v_df], ignore_index=True)
    df["error"] = df["computed"] - df["reference"]
    return df


def compare_with_ghia(solver, data_dir=None) -> dict:
    """Max and RMS centerline errors against Ghia et al.

    Returns an empty dict when no reference table exists for ``Re``.
    """
    try:
        ghia_u, ghia_v = load_ghia(solver.params.Re, data_dir)
    except FileNotFoundError as e:
        log.warning(f"Skipping Ghia comparison: {e}")
        return {}

    df = centerline_profiles(solver, ghia_u, ghia_v)
    errors = {}
    for name, group in df.groupby("profile"):
        err = group["error"].to_numpy()
        errors[f"ghia_{name}_max_error"] = float(np.max(np.abs(err)))
        errors[f"ghia_{name}_rms_error"] = float(np.sqrt(np.mean(err * err)))

    log.info(
        f"Ghia comparison: u max error={errors['ghia_u_max_error']:.4f}, "
        f"v max error={errors['ghia_v_max_error']:.4f}"
    )
    return errors
