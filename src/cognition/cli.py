"""CLI entry point for the Cognition Scheduler."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from cognition import __version__
from cognition.errors import CognitionError

if TYPE_CHECKING:
    from cognition.engine import CognitionScheduler

console = Console()


class _SimulatedClock:
    """Deterministic clock advanced explicitly between simulated cycles."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@click.group()
@click.version_option(version=__version__, prog_name="cogsched")
@click.option("--verbose", "-v", is_flag=True, help="Show scheduler log output")
def main(verbose: bool) -> None:
    """Cognition Scheduler — attention budgets for background work."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@main.command()
def defaults() -> None:
    """Show default priority weights, budget and role affinity."""
    from cognition.engine import ROLE_AFFINITY, Budget, PriorityWeights

    weights = Table(title="Priority Weights")
    weights.add_column("Signal", style="cyan")
    weights.add_column("Weight", justify="right")
    for name, value in PriorityWeights().as_dict().items():
        weights.add_row(name, f"{value:+.2f}")
    console.print(weights)

    budget = Table(title="Budget")
    budget.add_column("Cap", style="cyan")
    budget.add_column("Value", justify="right")
    for name, value in Budget().as_dict().items():
        budget.add_row(name, str(value))
    console.print(budget)

    affinity = Table(title="Role Affinity")
    affinity.add_column("Work Item Type", style="cyan")
    affinity.add_column("Roles", style="green")
    for item_type, roles in ROLE_AFFINITY.items():
        affinity.add_row(item_type.value, ", ".join(roles))
    console.print(affinity)


@main.command()
@click.option("--impact", type=float, default=None)
@click.option("--risk", type=float, default=None)
@click.option("--uncertainty", type=float, default=None)
@click.option("--novelty", type=float, default=None)
@click.option("--contradiction-pressure", type=float, default=None)
@click.option("--governance-pressure", type=float, default=None)
@click.option("--effort", type=float, default=None)
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None)
def score(config_path: Path | None, **signal_values: float | None) -> None:
    """Compute the priority a work item with these signals would get."""
    from cognition.config import load_config
    from cognition.engine import PrioritySignals, compute_priority

    try:
        config = load_config(config_path)
    except CognitionError as exc:
        raise click.ClickException(str(exc)) from exc
    signals = PrioritySignals.from_mapping(signal_values)
    priority = compute_priority(signals, config.weights)

    for name, value in signals.as_dict().items():
        console.print(f"[bold]{name}:[/bold] {value:.2f}")
    console.print(f"\n[bold]Priority:[/bold] {priority:.3f}")


@main.command()
@click.argument("scenario", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None)
@click.option("--cycles", default=1, show_default=True, help="Number of cycles to simulate")
def simulate(scenario: Path, config_path: Path | None, cycles: int) -> None:
    """Run a JSON scenario of workers and work items through the scheduler."""
    from cognition.config import load_config
    from cognition.engine import CognitionScheduler, StopReason
    from cognition.workers import StaticWorkerDirectory, WorkerRef

    try:
        payload: dict[str, Any] = json.loads(scenario.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Invalid scenario file: {exc}") from exc

    clock = _SimulatedClock()
    try:
        config = load_config(config_path)
        directory = StaticWorkerDirectory(
            WorkerRef.from_mapping(w) for w in payload.get("workers", [])
        )
        scheduler = CognitionScheduler.from_config(config, directory, clock=clock)
        for entry in payload.get("items", []):
            scheduler.create_work_item(
                entry.get("type"),
                scope=entry.get("scope", "*"),
                inputs=entry.get("inputs", ()),
                created_by=entry.get("created_by", "system"),
                description=entry.get("description", ""),
                signals=entry.get("signals"),
            )
    except (CognitionError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    turns_per_allocation = int(payload.get("turns_per_allocation", config.budget.max_turns_per_item))
    cycle_seconds = config.budget.cycle_duration_ms / 1000.0

    for cycle in range(1, cycles + 1):
        batch = scheduler.allocate()
        if not batch.ok:
            console.print(f"[yellow]Cycle {cycle}: allocation denied ({batch.error})[/yellow]")
        elif batch.reason:
            console.print(f"[dim]Cycle {cycle}: {batch.reason}[/dim]")

        for allocation in batch.allocations:
            reason = StopReason.CONSENSUS_REACHED
            for _ in range(turns_per_allocation):
                result = scheduler.record_turn(allocation.allocation_id)
                if result.stop.should_stop and result.stop.reason is not None:
                    reason = result.stop.reason
                    break
            scheduler.complete_allocation(allocation.allocation_id, reason)

        clock.advance(cycle_seconds)

    _print_completed(scheduler)
    _print_queue(scheduler)
    _print_metrics(scheduler)


def _print_completed(scheduler: CognitionScheduler) -> None:
    page = scheduler.get_completed_work()
    if not page.completed:
        console.print("[dim]No allocations completed.[/dim]")
        return

    table = Table(title="Completed Work")
    table.add_column("Allocation", style="cyan")
    table.add_column("Type")
    table.add_column("Priority", justify="right")
    table.add_column("Team", style="green")
    table.add_column("Turns", justify="right")
    table.add_column("Stop Reason", style="yellow")

    for record in page.completed:
        table.add_row(
            record.allocation_id,
            record.type.value,
            f"{record.priority:.3f}",
            ", ".join(f"{m.worker_id} ({m.role})" for m in record.team_roles),
            str(record.turns_used),
            record.stop_reason.value,
        )
    console.print(table)


def _print_queue(scheduler: CognitionScheduler) -> None:
    queue = scheduler.get_queue()
    if not queue:
        console.print("[dim]Queue is empty.[/dim]")
        return

    table = Table(title="Work Queue")
    table.add_column("Item", style="cyan")
    table.add_column("Type")
    table.add_column("Priority", justify="right")
    table.add_column("Status", style="yellow")
    table.add_column("Description", max_width=40)

    for item in queue:
        table.add_row(
            item.item_id,
            item.type.value,
            f"{item.priority:.3f}",
            item.status.value,
            item.description[:40],
        )
    console.print(table)


def _print_metrics(scheduler: CognitionScheduler) -> None:
    snapshot = scheduler.get_scheduler_metrics()
    metrics = snapshot["metrics"]
    console.print(
        f"\nQueued: {metrics['total_items_queued']} | "
        f"Completed: {metrics['total_items_completed']} | "
        f"Deferred: {metrics['total_items_deferred']} | "
        f"Avg turns: {metrics['avg_completion_turns']:.2f} | "
        f"Queue depth: {snapshot['queue_depth']}"
    )
