"""
Plots for cavity runs.

Generates residual history, field contours and the Ghia centerline comparison.
"""

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

log = logging.getLogger(__name__)

sns.set_theme(style="darkgrid")

RESIDUAL_LABELS = {
    "continuity": "Continuity",
    "x_momentum": r"$x$-Momentum",
    "y_momentum": r"$y$-Momentum",
}


def plot_convergence(timeseries_df: pd.DataFrame, Re: float, scheme: str, output_dir: Path) -> Path:
    """Plot normalized residuals over iterations."""
    if timeseries_df.empty:
        log.warning("No timeseries data available for convergence plot")
        return None

    fig, ax = plt.subplots()
    for col, label in RESIDUAL_LABELS.items():
        data = timeseries_df[col].replace([np.inf, -np.inf], np.nan).dropna()
        if len(data) > 0:
            ax.semilogy(timeseries_df.loc[data.index, "iteration"], data, label=label)

    ax.set_xlabel("Iteration")
    ax.set_ylabel("Normalized residual")
    ax.set_title(f"Convergence History ({scheme}, Re={Re:.0f})")
    ax.legend(frameon=True)

    output_path = Path(output_dir) / "convergence.pdf"
    fig.savefig(output_path, bbox_inches="tight")
    plt.close(fig)
    return output_path


def plot_fields(fields_df: pd.DataFrame, nx: int, ny: int, output_dir: Path) -> Path:
    """Filled contours of p, u and v side by side."""
    x = fields_df["x"].to_numpy().reshape(nx, ny)
    y = fields_df["y"].to_numpy().reshape(nx, ny)

    fig, axes = plt.subplots(1, 3, figsize=(15, 4.5))
    for ax, (name, cmap) in zip(axes, [("p", "coolwarm"), ("u", "RdBu_r"), ("v", "RdBu_r")]):
        values = fields_df[name].to_numpy().reshape(nx, ny)
        cf = ax.contourf(x, y, values, levels=30, cmap=cmap)
        fig.colorbar(cf, ax=ax)
        ax.set_title(name)
        ax.set_aspect("equal")
        ax.set_xlabel("x (m)")
        ax.set_ylabel("y (m)")

    output_path = Path(output_dir) / "fields.pdf"
    fig.savefig(output_path, bbox_inches="tight")
    plt.close(fig)
    return output_path


def plot_ghia_comparison(profiles_df: pd.DataFrame, Re: float, output_dir: Path) -> Path:
    """Computed centerline velocities against Ghia et al. (1982).

    ``profiles_df`` is the output of :func:`accavity.validation.centerline_profiles`.
    """
    fig, (ax_u, ax_v) = plt.subplots(1, 2, figsize=(11, 4.5))

    u_df = profiles_df[profiles_df["profile"] == "u"].sort_values("coordinate")
    ax_u.plot(u_df["computed"], u_df["coordinate"], "-", label="Computed")
    ax_u.plot(u_df["reference"], u_df["coordinate"], "o", label="Ghia et al. (1982)")
    ax_u.set_xlabel(r"$u/U$")
    ax_u.set_ylabel(r"$y/L$")
    ax_u.legend(frameon=True)

    v_df = profiles_df[profiles_df["profile"] == "v"].sort_values("coordinate")
    ax_v.plot(v_df["coordinate"], v_df["computed"], "-", label="Computed")
    ax_v.plot(v_df["coordinate"], v_df["reference"], "o", label="Ghia et al. (1982)")
    ax_v.set_xlabel(r"$x/L$")
    ax_v.set_ylabel(r"$v/U$")
    ax_v.legend(frameon=True)

    fig.suptitle(f"Ghia Benchmark Comparison (Re = {int(Re)})")
    output_path = Path(output_dir) / "ghia_comparison.pdf"
    fig.savefig(output_path, bbox_inches="tight")
    plt.close(fig)
    return output_path
