"""Result objects returned by scheduler operations.

Denials and unknown ids are expected outcomes, so they come back as results
with ``ok``/``allowed`` set to False rather than as exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cognition.engine.models import Allocation, CompletedWork, StopReason, WorkItem

ALLOCATION_NOT_FOUND = "allocation_not_found"
NOT_FOUND = "not_found"
NOTHING_TO_ALLOCATE = "nothing_to_allocate"
MAX_PARALLEL_SESSIONS = "max_parallel_sessions"
DEEP_SYNTHESIS_LIMIT = "deep_synthesis_limit"


@dataclass(frozen=True)
class BudgetRemaining:
    """Capacity left in the current cycle."""

    items: int
    sessions: int
    proposals: int
    turns: int
    deep_synthesis: int | None = None


@dataclass(frozen=True)
class BudgetCheck:
    """Outcome of a budget check."""

    allowed: bool
    remaining: BudgetRemaining
    reason: str | None = None


@dataclass(frozen=True)
class StopSignal:
    should_stop: bool
    reason: StopReason | None = None


@dataclass(frozen=True)
class TurnResult:
    ok: bool
    turns_used: int = 0
    stop: StopSignal = field(default_factory=lambda: StopSignal(should_stop=False))
    error: str | None = None


@dataclass(frozen=True)
class ProposalResult:
    ok: bool
    proposal_count: int = 0
    error: str | None = None


@dataclass(frozen=True)
class CompletionResult:
    ok: bool
    completed: CompletedWork | None = None
    error: str | None = None


@dataclass(frozen=True)
class DequeueResult:
    ok: bool
    removed: WorkItem | None = None
    error: str | None = None


@dataclass(frozen=True)
class AllocationLookup:
    ok: bool
    allocation: Allocation | CompletedWork | None = None
    source: str | None = None  # "active" or "completed"
    error: str | None = None


@dataclass(frozen=True)
class AllocationBatch:
    """Outcome of one allocator pass."""

    ok: bool
    allocations: tuple[Allocation, ...] = ()
    deferred: tuple[str, ...] = ()
    reason: str | None = None
    error: str | None = None
    remaining: BudgetRemaining | None = None

    @property
    def count(self) -> int:
        return len(self.allocations)


@dataclass(frozen=True)
class CompletedWorkPage:
    """Most recent completed records plus the size of the full history."""

    completed: tuple[CompletedWork, ...]
    total: int

    @property
    def count(self) -> int:
        return len(self.completed)
