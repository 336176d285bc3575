"""Completion - turn an active allocation into an immutable summary record."""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from typing import Any

from cognition.engine.models import Allocation, CompletedWork, StopReason, WorkSummary


def running_avg(current: float, new_value: float, count: int) -> float:
    """Incremental mean after ``count`` observations."""
    if count <= 1:
        return float(new_value)
    return current + (new_value - current) / count


@dataclass
class SchedulerMetrics:
    """Running totals since the scheduler was created."""

    total_items_queued: int = 0
    total_items_completed: int = 0
    total_items_deferred: int = 0
    total_items_expired: int = 0
    total_turns_used: int = 0
    avg_priority: float = 0.0
    avg_completion_turns: float = 0.0
    budget_exhaustions: int = 0

    def record_queued(self, priority: float) -> None:
        self.total_items_queued += 1
        self.avg_priority = running_avg(self.avg_priority, priority, self.total_items_queued)

    def record_completed(self, turns_used: int) -> None:
        self.total_items_completed += 1
        self.avg_completion_turns = running_avg(
            self.avg_completion_turns, turns_used, self.total_items_completed
        )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_summary(
    allocation: Allocation,
    *,
    unresolved: Iterable[str] = (),
    confidence_labels: Mapping[str, Any] | None = None,
    description: str | None = None,
) -> WorkSummary:
    proposals = tuple(allocation.proposals)
    if proposals:
        what_changed = f"{len(proposals)} proposal(s) emitted"
    else:
        what_changed = "No proposals emitted"
    return WorkSummary(
        what_changed=what_changed,
        proposal_ids=proposals,
        turns_used=allocation.turns_used,
        unresolved=tuple(unresolved),
        confidence_labels=copy.deepcopy(dict(confidence_labels or {})),
        description=description
        or f"Work item {allocation.type.value} completed after {allocation.turns_used} turns",
    )


def finalize(
    allocation: Allocation,
    *,
    stop_reason: StopReason,
    completed_at: str,
    unresolved: Iterable[str] = (),
    confidence_labels: Mapping[str, Any] | None = None,
    description: str | None = None,
) -> CompletedWork:
    """Freeze ``allocation`` into a :class:`CompletedWork` record."""
    summary = build_summary(
        allocation,
        unresolved=unresolved,
        confidence_labels=confidence_labels,
        description=description,
    )
    return CompletedWork.from_allocation(
        allocation, completed_at=completed_at, stop_reason=stop_reason, summary=summary
    )
