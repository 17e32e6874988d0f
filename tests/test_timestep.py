"""Tests for local pseudo-time step estimation."""

import numpy as np
import pytest

from accavity.timestep import compute_time_step, preconditioning_beta2, wave_speeds


class TestPreconditioning:
    def test_beta2_floor(self):
        beta2 = preconditioning_beta2(np.array([0.0, 2.0]), np.array([0.0, 0.0]), 0.1, 1.0)
        np.testing.assert_allclose(beta2, [0.1, 4.0])

    def test_wave_speed_at_rest(self):
        lx, ly = wave_speeds(np.zeros(1), np.zeros(1), np.array([0.25]))
        np.testing.assert_allclose(lx, [0.5])
        np.testing.assert_allclose(ly, [0.5])


class TestComputeTimeStep:
    def test_quiescent_value(self, params, quiescent_arrays):
        a = quiescent_arrays
        dtmin = compute_time_step(a.u.data, a.dt.data, params)

        lam = 0.5 * np.sqrt(4.0 * params.rkappa * params.vel2ref)
        dtvisc = params.dx * params.dy / (4.0 * params.nu)
        dtconv = min(params.dx, params.dy) / lam
        assert dtmin == pytest.approx(params.cfl * min(dtvisc, dtconv))
        np.testing.assert_allclose(a.dt.data, dtmin)

    def test_edges_hold_minimum(self, params, quiescent_arrays, rng):
        a = quiescent_arrays
        a.u.data[:, :, 1:] = rng.uniform(-1.0, 1.0, size=a.u.data[:, :, 1:].shape)

        dtmin = compute_time_step(a.u.data, a.dt.data, params)

        dt = a.dt.data
        assert dtmin == np.min(dt[1:-1, 1:-1])
        for edge in (dt[0, :], dt[-1, :], dt[:, 0], dt[:, -1]):
            assert np.all(edge == dtmin)
        assert np.all(dt[1:-1, 1:-1] >= dtmin)

    def test_minimum_not_sticky(self, params, quiescent_arrays):
        a = quiescent_arrays
        a.u.data[5, 5, 1] = 50.0
        small = compute_time_step(a.u.data, a.dt.data, params)
        a.u.data[5, 5, 1] = 0.0
        large = compute_time_step(a.u.data, a.dt.data, params)
        assert large > small

    def test_faster_flow_smaller_step(self, small_grid_params):
        from accavity.datastructures import Parameters, SolverFields

        # Coarse grid and high Re so the convective limit is active
        params = Parameters(**{**small_grid_params, "Re": 1e5})
        arrays = SolverFields.allocate(params.nx, params.ny)
        slow = compute_time_step(arrays.u.data, arrays.dt.data, params)
        arrays.u.data[:, :, 1] = 3.0
        fast = compute_time_step(arrays.u.data, arrays.dt.data, params)
        assert fast < slow
