"""
Cavity Solver - entry point for solving, tracking and plotting.

Usage:
    python main.py
    python main.py solver=sgs N=33 Re=100
    python main.py +experiment=mms N=33
    python main.py -m +experiment=mms N=17,33,65
"""

import logging
import os
import sys
import tempfile
from pathlib import Path

import hydra
import mlflow
from dotenv import load_dotenv
from hydra.core.hydra_config import HydraConfig
from hydra.utils import instantiate
from omegaconf import DictConfig, OmegaConf

load_dotenv()
sys.path.insert(0, str(Path(__file__).parent / "src"))

from accavity.console import fail, ok, print_summary  # noqa: E402
from accavity.exceptions import AccavityError  # noqa: E402
from accavity.plotting import plot_convergence, plot_fields, plot_ghia_comparison  # noqa: E402
from accavity.validation import centerline_profiles, compare_with_ghia, load_ghia  # noqa: E402

log = logging.getLogger(__name__)


def get_experiment_name(cfg: DictConfig) -> str:
    """Build full experiment name with optional prefix."""
    name = cfg.experiment_name
    prefix = cfg.mlflow.get("project_prefix", "")
    if prefix and not name.startswith("/"):
        return f"{prefix}/{name}"
    return name


def setup_mlflow(cfg: DictConfig) -> str:
    """Setup MLflow tracking and return experiment name."""
    tracking_uri = cfg.mlflow.get("tracking_uri", "./mlruns")
    os.environ["MLFLOW_TRACKING_URI"] = str(tracking_uri)
    mlflow.set_tracking_uri(tracking_uri)

    experiment_name = get_experiment_name(cfg)
    mlflow.set_experiment(experiment_name)
    return experiment_name


def build_solver(cfg: DictConfig, output_dir: Path):
    """Instantiate the solver from the Hydra config."""
    return instantiate(
        cfg.solver,
        Re=cfg.Re,
        lid_velocity=cfg.lid_velocity,
        Lx=cfg.Lx,
        Ly=cfg.Ly,
        nx=cfg.N,
        ny=cfg.N,
        max_iterations=cfg.max_iterations,
        tolerance=cfg.tolerance,
        cfl=cfg.cfl,
        boundary=cfg.boundary,
        restart=cfg.restart,
        restart_file=cfg.restart_file,
        output_interval=cfg.output_interval,
        residual_interval=cfg.residual_interval,
        output_dir=str(output_dir),
    )


def log_plots(solver, output_dir: Path):
    """Generate plots and upload them to the active MLflow run."""
    p = solver.params
    paths = [
        plot_convergence(solver.time_series.to_dataframe(), p.Re, solver.scheme.name, output_dir),
        plot_fields(solver.fields.to_dataframe(), p.nx, p.ny, output_dir),
    ]
    if p.boundary == "cavity":
        try:
            ghia_u, ghia_v = load_ghia(p.Re)
        except FileNotFoundError as e:
            log.warning(f"No Ghia plot: {e}")
        else:
            profiles = centerline_profiles(solver, ghia_u, ghia_v)
            paths.append(plot_ghia_comparison(profiles, p.Re, output_dir))

    for path in paths:
        if path is not None:
            mlflow.log_artifact(str(path), artifact_path="plots")


def run_solver(cfg: DictConfig, output_dir: Path) -> str:
    """Run solver and log to MLflow. Returns run_id."""
    solver = build_solver(cfg, output_dir)
    scheme = solver.scheme.name
    run_name = f"{scheme}_{cfg.boundary}_N{cfg.N}"

    # Parent run tagging for sweeps
    parent_run_id = os.environ.get("MLFLOW_PARENT_RUN_ID")
    tags = {"scheme": scheme, "boundary": cfg.boundary}
    if parent_run_id:
        tags.update({"mlflow.parentRunId": parent_run_id, "parent_run_id": parent_run_id, "sweep": "child"})

    with mlflow.start_run(run_name=run_name, tags=tags, nested=bool(parent_run_id)) as run:
        mlflow.log_params(solver.params.to_mlflow())
        mlflow.log_dict(OmegaConf.to_container(cfg), "config.yaml")

        log.info(f"Solving: {scheme} N={cfg.N} Re={cfg.Re} boundary={cfg.boundary}")
        outcome = solver.solve()
        mlflow.set_tag("outcome", outcome.value)

        if cfg.boundary == "cavity":
            validation_errors = compare_with_ghia(solver)
            if validation_errors:
                mlflow.log_metrics(validation_errors)

        mlflow.log_metrics(solver.metrics.to_mlflow())
        if solver.time_series:
            batch = solver.time_series.to_mlflow_batch()
            if batch:
                mlflow.tracking.MlflowClient().log_batch(run.info.run_id, metrics=batch)

        for path in (solver.writer.field_path, solver.writer.history_path, solver.writer.restart_path):
            mlflow.log_artifact(str(path), artifact_path="output")

        if cfg.get("plots", True):
            with tempfile.TemporaryDirectory() as tmpdir:
                log_plots(solver, Path(tmpdir))

        print_summary(solver.metrics, title=run_name)
        if solver.metrics.converged:
            ok(f"Converged in {solver.metrics.iterations} iterations")
        else:
            fail(f"Stopped with outcome '{outcome.value}' after {solver.metrics.iterations} iterations")
        return run.info.run_id


@hydra.main(config_path="conf", config_name="config", version_base=None)
def main(cfg: DictConfig) -> None:
    """Main entry point."""
    log.info(f"Scheme: {cfg.solver.scheme}, N={cfg.N}, Re={cfg.Re}")
    log.info(f"MLflow experiment: {setup_mlflow(cfg)}")

    output_dir = Path(HydraConfig.get().runtime.output_dir)
    try:
        run_solver(cfg, output_dir)
    except AccavityError as e:
        fail(str(e))
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
