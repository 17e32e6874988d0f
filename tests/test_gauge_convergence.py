"""Tests for pressure gauge fixing and residual monitoring."""

import numpy as np
import pytest

from accavity.convergence import ConvergenceMonitor
from accavity.gauge import rescale_pressure


class TestRescalePressure:
    def test_anchor_exact(self, rng):
        u = rng.normal(size=(9, 9, 3))
        rescale_pressure(u, 4, 4, 0.801333844662)
        assert u[4, 4, 0] == 0.801333844662

    def test_gradients_preserved(self, rng):
        u = rng.normal(size=(9, 7, 3))
        before = u.copy()

        deltap = rescale_pressure(u, 4, 3, 2.5)

        assert deltap == pytest.approx(before[4, 3, 0] - 2.5)
        np.testing.assert_allclose(np.diff(u[:, :, 0], axis=0), np.diff(before[:, :, 0], axis=0), atol=1e-12)
        np.testing.assert_allclose(np.diff(u[:, :, 0], axis=1), np.diff(before[:, :, 0], axis=1), atol=1e-12)
        np.testing.assert_array_equal(u[:, :, 1:], before[:, :, 1:])

    def test_idempotent(self, rng):
        u = rng.normal(size=(5, 5, 3))
        rescale_pressure(u, 2, 2, 1.0)
        once = u.copy()
        assert rescale_pressure(u, 2, 2, 1.0) == 0.0
        np.testing.assert_array_equal(u, once)


class TestConvergenceMonitor:
    def test_zero_residual_when_unchanged(self, rng):
        u = rng.normal(size=(6, 6, 3))
        dt = np.full((6, 6), 1e-3)
        raw = ConvergenceMonitor.raw_residuals(u, u.copy(), dt)
        np.testing.assert_array_equal(raw, 0.0)

    def test_raw_residual_interior_rms(self):
        u = np.zeros((5, 5, 3))
        uold = np.zeros((5, 5, 3))
        dt = np.full((5, 5), 0.5)
        u[1:-1, 1:-1, 1] = 1.0
        u[0, :, 2] = 100.0  # boundary nodes do not count

        raw = ConvergenceMonitor.raw_residuals(u, uold, dt)

        np.testing.assert_allclose(raw, [0.0, 2.0, 0.0])

    def test_baseline_from_first_change(self):
        monitor = ConvergenceMonitor(tolerance=1e-3)
        u = np.zeros((5, 5, 3))
        dt = np.ones((5, 5))
        u[1:-1, 1:-1, 0] = 2.0
        u[1:-1, 1:-1, 1] = 4.0

        conv = monitor.update(u, np.zeros_like(u), dt)

        # y-momentum did not change yet: baseline still open, residual 0
        np.testing.assert_allclose(monitor.resinit[:2], [2.0, 4.0])
        assert np.isnan(monitor.resinit[2])
        np.testing.assert_allclose(monitor.res, [1.0, 1.0, 0.0])
        assert conv == 1.0
        assert not monitor.converged

        conv = monitor.update(u + 1e-3, u, dt)

        np.testing.assert_allclose(monitor.resinit, [2.0, 4.0, 1e-3])
        np.testing.assert_allclose(monitor.res, [5e-4, 2.5e-4, 1.0])
        assert conv == pytest.approx(1.0)

        conv = monitor.update(u + 1e-7, u, dt)
        assert conv == pytest.approx(1e-4)
        assert monitor.converged

    def test_restored_baseline_may_be_open(self):
        monitor = ConvergenceMonitor(tolerance=1e-6, resinit=[1.0, 1.0, np.nan])
        assert list(monitor.captured) == [True, True, False]

    def test_supplied_baseline(self):
        monitor = ConvergenceMonitor(tolerance=1e-6, resinit=[1.0, 2.0, 4.0])
        u = np.zeros((4, 4, 3))
        u[1:-1, 1:-1, :] = 4.0
        monitor.update(u, np.zeros_like(u), np.ones((4, 4)))
        np.testing.assert_allclose(monitor.res, [4.0, 2.0, 1.0])

    def test_rejects_nonpositive_baseline(self):
        with pytest.raises(ValueError):
            ConvergenceMonitor(tolerance=1e-6, resinit=[1.0, 0.0, 1.0])

    def test_nan_is_diverged(self):
        monitor = ConvergenceMonitor(tolerance=1e-6, resinit=[1.0, 1.0, 1.0])
        u = np.zeros((4, 4, 3))
        u[1, 1, 1] = np.nan
        monitor.update(u, np.zeros_like(u), np.ones((4, 4)))
        assert monitor.diverged
        assert not monitor.converged
