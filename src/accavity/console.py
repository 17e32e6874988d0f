"""Rich console output helpers."""

from rich.console import Console
from rich.table import Table

console = Console()

OUTCOME_STYLE = {"converged": "green", "exhausted": "yellow", "diverged": "red"}


def ok(msg: str):
    """Print success message."""
    console.print(f"  [green]✓[/green] {msg}")


def fail(msg: str):
    """Print failure message."""
    console.print(f"  [red]✗[/red] {msg}")


def summary_table(metrics, title: str = "Run summary") -> Table:
    """Table of the final metrics; MMS error norms are included when present."""
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    style = OUTCOME_STYLE.get(metrics.outcome, "white")
    table.add_row("outcome", f"[{style}]{metrics.outcome}[/{style}]")
    table.add_row("iterations", f"{metrics.iterations:d}")
    table.add_row("final residual", f"{metrics.final_residual:.3e}")
    table.add_row("pseudo time (s)", f"{metrics.pseudo_time:.4e}")
    table.add_row("wall time (s)", f"{metrics.wall_time_seconds:.2f}")
    for name in ("de_l2_p", "de_l2_u", "de_l2_v"):
        value = getattr(metrics, name)
        if value is not None:
            table.add_row(name, f"{value:.4e}")
    return table


def print_summary(metrics, title: str = "Run summary"):
    console.print(summary_table(metrics, title))
