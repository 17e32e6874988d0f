"""Pytest configuration and fixtures for the cavity solver tests."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from accavity.datastructures import Parameters, SolverFields  # noqa: E402


@pytest.fixture
def small_grid_params():
    """Parameters for a small 17x17 cavity."""
    return {
        "Re": 100.0,
        "nx": 17,
        "ny": 17,
        "tolerance": 1e-6,
        "max_iterations": 200,
        "residual_interval": 10,
        "output_interval": 100,
    }


@pytest.fixture
def params(small_grid_params):
    return Parameters(**small_grid_params)


@pytest.fixture
def mms_params(small_grid_params):
    return Parameters(**{**small_grid_params, "boundary": "mms"})


@pytest.fixture
def node_grid(params):
    """Node coordinates (x, y), indexing='ij'."""
    x = np.linspace(0.0, params.Lx, params.nx)
    y = np.linspace(0.0, params.Ly, params.ny)
    return np.meshgrid(x, y, indexing="ij")


@pytest.fixture
def quiescent_arrays(params):
    """Work buffers with fluid at rest and uniform reference pressure."""
    arrays = SolverFields.allocate(params.nx, params.ny)
    arrays.u.data[:, :, 0] = params.p_inf
    return arrays


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
