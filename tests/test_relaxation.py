"""Tests for the Jacobi and symmetric Gauss-Seidel relaxation schemes."""

import numpy as np
import pytest

from accavity.boundary import CavityBoundary
from accavity.datastructures import Parameters, SolverFields
from accavity.dissipation import compute_artificial_viscosity
from accavity.kernels import point_jacobi, sgs_forward_sweep
from accavity.relaxation import (
    PointJacobi,
    SymmetricGaussSeidel,
    create_relaxation_scheme,
)
from accavity.timestep import compute_time_step


def _driven_arrays(params):
    """Quiescent cavity with the lid applied and a valid time step."""
    arrays = SolverFields.allocate(params.nx, params.ny)
    arrays.u.data[:, :, 0] = params.p_inf
    CavityBoundary(params).apply(arrays.u)
    compute_time_step(arrays.u.data, arrays.dt.data, params)
    return arrays


def _sweep_args(arrays, params):
    return (
        arrays.u.data, arrays.viscx.data, arrays.viscy.data, arrays.dt.data, arrays.s.data,
        params.dx, params.dy, params.rho, params.mu, params.rkappa, params.vel2ref,
    )


class TestFactory:
    def test_selects_scheme(self, small_grid_params):
        assert isinstance(create_relaxation_scheme(Parameters(**small_grid_params)), PointJacobi)
        sgs = Parameters(**{**small_grid_params, "scheme": "sgs"})
        assert isinstance(create_relaxation_scheme(sgs), SymmetricGaussSeidel)


class TestPointJacobi:
    def test_rest_state_is_fixed_point(self, params, quiescent_arrays):
        a = quiescent_arrays
        compute_time_step(a.u.data, a.dt.data, params)
        before = a.u.data.copy()

        PointJacobi(params).iterate(a, CavityBoundary(params))

        np.testing.assert_array_equal(a.u.data[1:-1, 1:-1], before[1:-1, 1:-1])

    def test_ignores_output_buffer_contents(self, params, rng):
        a = _driven_arrays(params)
        a.uold.copy_from(a.u)
        compute_artificial_viscosity(a.uold.data, a.viscx.data, a.viscy.data, params)

        point_jacobi(a.u.data, a.uold.data, a.viscx.data, a.viscy.data, a.dt.data, a.s.data, params)
        clean = a.u.data[1:-1, 1:-1].copy()

        a.u.data[...] = rng.normal(size=a.u.shape)
        point_jacobi(a.u.data, a.uold.data, a.viscx.data, a.viscy.data, a.dt.data, a.s.data, params)

        np.testing.assert_array_equal(a.u.data[1:-1, 1:-1], clean)

    def test_deterministic(self, params):
        runs = []
        for _ in range(2):
            a = _driven_arrays(params)
            scheme, boundary = PointJacobi(params), CavityBoundary(params)
            for _ in range(5):
                compute_time_step(a.u.data, a.dt.data, params)
                scheme.iterate(a, boundary)
            runs.append(a.u.data.copy())
        np.testing.assert_array_equal(runs[0], runs[1])

    def test_previous_state_kept(self, params):
        a = _driven_arrays(params)
        before = a.u.data.copy()
        PointJacobi(params).iterate(a, CavityBoundary(params))
        np.testing.assert_array_equal(a.uold.data, before)
        assert not np.array_equal(a.u.data, before)


class TestSymmetricGaussSeidel:
    @pytest.fixture
    def sgs_params(self, small_grid_params):
        return Parameters(**{**small_grid_params, "scheme": "sgs"})

    def test_forward_backward_differs_from_two_forward(self, sgs_params):
        boundary = CavityBoundary(sgs_params)
        scheme = SymmetricGaussSeidel(sgs_params)

        symmetric = _driven_arrays(sgs_params)
        scheme.forward_sweep(symmetric, boundary)
        scheme.backward_sweep(symmetric, boundary)

        forward = _driven_arrays(sgs_params)
        scheme.forward_sweep(forward, boundary)
        scheme.forward_sweep(forward, boundary)

        assert not np.allclose(symmetric.u.data, forward.u.data)

    def test_sweep_uses_updated_neighbors(self, sgs_params):
        jacobi = _driven_arrays(sgs_params)
        jacobi.uold.copy_from(jacobi.u)
        point_jacobi(
            jacobi.u.data, jacobi.uold.data, jacobi.viscx.data, jacobi.viscy.data,
            jacobi.dt.data, jacobi.s.data, sgs_params,
        )

        gs = _driven_arrays(sgs_params)
        sgs_forward_sweep(*_sweep_args(gs, sgs_params))

        # Along the row below the lid the west neighbor is already updated
        j = sgs_params.ny - 2
        np.testing.assert_allclose(gs.u.data[1, j], jacobi.u.data[1, j])
        assert not np.allclose(gs.u.data[2:-1, j], jacobi.u.data[2:-1, j])

    def test_iterate_stores_previous_state(self, sgs_params):
        a = _driven_arrays(sgs_params)
        before = a.u.data.copy()
        SymmetricGaussSeidel(sgs_params).iterate(a, CavityBoundary(sgs_params))
        np.testing.assert_array_equal(a.uold.data, before)
        assert np.all(np.isfinite(a.u.data))
        # Boundary conditions hold after the backward sweep
        np.testing.assert_array_equal(a.u.data[:, -1, 1], sgs_params.lid_velocity)
        np.testing.assert_array_equal(a.u.data[0, :-1, 1:], 0.0)
