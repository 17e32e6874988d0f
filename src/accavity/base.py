"""Abstract base solver for the lid-driven cavity problem."""

from abc import ABC, abstractmethod
import logging
import time

import numpy as np
import mlflow

from .datastructures import Parameters, Metrics, Fields, TimeSeries, LoopOutcome

log = logging.getLogger(__name__)

RESIDUAL_HEADER = "Iter.  Time (s)      dt (s)        Continuity    x-Momentum    y-Momentum"


class LidDrivenCavitySolver(ABC):
    """Abstract base solver for the lid-driven cavity problem.

    Handles:
    - Parameter management (input configuration)
    - The pseudo-time loop and its terminal outcome
    - Residual history, metrics and live MLflow logging

    Subclasses must:
    - Allocate ``self.arrays`` (SolverFields) and call ``_init_fields(x, y)``
    - Create ``self.monitor`` (ConvergenceMonitor)
    - Set ``self.start_iteration`` and ``self.rtime``
    - Implement ``step()`` - one full iteration, returning the minimum time step
    - Implement ``_emit(n)`` - periodic field/restart output
    """

    Parameters = Parameters

    def __init__(self, params=None, **kwargs):
        """Initialize solver with parameters.

        Parameters
        ----------
        params : Parameters, optional
            Parameters object. If not provided, kwargs are used to create params.
        **kwargs
            Configuration parameters passed to Parameters if params is None.
        """
        if params is None:
            params = self.Parameters(**kwargs)

        self.params = params
        self.metrics = Metrics()
        self.fields = None  # Initialized by subclass via _init_fields()
        self.time_series = TimeSeries()
        self.outcome = None
        self.start_iteration = 1
        self.rtime = 0.0

    def _init_fields(self, x: np.ndarray, y: np.ndarray):
        """Pre-allocate output fields on the flattened node coordinates."""
        n_points = len(x)
        self.fields = Fields(
            p=np.zeros(n_points),
            u=np.zeros(n_points),
            v=np.zeros(n_points),
            x=x.copy(),
            y=y.copy(),
        )

    @abstractmethod
    def step(self) -> float:
        """Perform one pseudo-time iteration.

        Returns
        -------
        float
            Minimum local time step used in this iteration.
        """
        pass

    @abstractmethod
    def _emit(self, n: int):
        """Write field and restart output for iteration ``n``."""
        pass

    def _finalize_fields(self):
        """Copy final solution from internal arrays to output fields."""
        u = self.arrays.u.data
        self.fields.p[:] = u[:, :, 0].ravel()
        self.fields.u[:] = u[:, :, 1].ravel()
        self.fields.v[:] = u[:, :, 2].ravel()

    def _record_residuals(self, n: int, dtmin: float, force: bool = False):
        """Append to the residual history every ``residual_interval`` iterations."""
        interval = self.params.residual_interval
        if not (force or n % interval == 0 or n == self.start_iteration):
            return False

        res = self.monitor.res
        self.time_series.append(n, self.rtime, res)
        if getattr(self, "writer", None) is not None:
            self.writer.write_history(n, self.rtime, res)

        if n % (interval * 20) == 0 or n == self.start_iteration:
            log.info(RESIDUAL_HEADER)
        log.info(f"{n:<6d} {self.rtime:.6e}  {dtmin:.6e}  {res[0]:.6e}  {res[1]:.6e}  {res[2]:.6e}")
        return True

    def solve(self, tolerance: float = None, max_iter: int = None) -> LoopOutcome:
        """Run the pseudo-time loop until convergence, divergence or the iteration limit.

        Stores results in solver attributes:
        - self.fields : Fields dataclass with the final solution
        - self.time_series : TimeSeries dataclass with residual history
        - self.metrics : Metrics dataclass with solver metrics

        Parameters
        ----------
        tolerance : float, optional
            Convergence tolerance. If None, uses params.tolerance.
        max_iter : int, optional
            Last iteration index. If None, uses params.max_iterations.

        Returns
        -------
        LoopOutcome
            CONVERGED, EXHAUSTED or DIVERGED.
        """
        if tolerance is not None:
            self.monitor.tolerance = tolerance
        if max_iter is None:
            max_iter = self.params.max_iterations

        self._emit(self.start_iteration)

        time_start = time.time()
        mlflow_time = 0.0  # Track time spent on MLflow logging
        outcome = LoopOutcome.EXHAUSTED
        n = self.start_iteration
        dtmin = 0.0

        for n in range(self.start_iteration, max_iter + 1):
            dtmin = self.step()
            self.rtime += dtmin

            conv = self.monitor.update(self.arrays.u.data, self.arrays.uold.data, self.arrays.dt.data)
            recorded = self._record_residuals(n, dtmin)

            if self.monitor.diverged:
                outcome = LoopOutcome.DIVERGED
                break
            if self.monitor.converged:
                outcome = LoopOutcome.CONVERGED
                if not recorded:
                    self._record_residuals(n, dtmin, force=True)
                break

            if n % self.params.output_interval == 0:
                self._emit(n)

                # Live MLflow logging at each output interval (timed separately)
                if mlflow.active_run():
                    t_log_start = time.time()
                    live_metrics = {
                        "continuity_residual": float(self.monitor.res[0]),
                        "x_momentum_residual": float(self.monitor.res[1]),
                        "y_momentum_residual": float(self.monitor.res[2]),
                        "conv": conv,
                    }
                    mlflow.log_metrics(live_metrics, step=n)
                    mlflow_time += time.time() - t_log_start

        wall_time = time.time() - time_start - mlflow_time

        if outcome is LoopOutcome.CONVERGED:
            log.info(f"Solver stopped in {n} iterations because the convergence criterion was met.")
        elif outcome is LoopOutcome.DIVERGED:
            log.error(
                f"Solver diverged at iteration {n}: residuals {self.monitor.res} are not finite."
            )
        else:
            log.warning(
                f"Solver stopped in {n} iterations because the maximum number of iterations was reached "
                f"(max residual {self.monitor.conv:.3e} > tolerance {self.monitor.tolerance:.1e})."
            )
        log.info(f"Solver finished in {wall_time:.2f} seconds (excl. {mlflow_time:.2f}s logging).")

        self.outcome = outcome
        self._store_results(n, outcome, wall_time)
        self._emit(n)
        return outcome

    def _store_results(self, final_iter: int, outcome: LoopOutcome, wall_time: float):
        """Store solve results in self.fields and self.metrics."""
        self._finalize_fields()
        res = self.monitor.res
        self.metrics = Metrics(
            iterations=final_iter,
            converged=outcome is LoopOutcome.CONVERGED,
            outcome=outcome.value,
            final_residual=self.monitor.conv,
            wall_time_seconds=wall_time,
            pseudo_time=self.rtime,
            continuity_residual=float(res[0]),
            x_momentum_residual=float(res[1]),
            y_momentum_residual=float(res[2]),
        )
