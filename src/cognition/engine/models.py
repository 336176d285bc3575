"""Scheduler data model: work items, signals, weights, budget, cycles, allocations."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields
from enum import StrEnum
from typing import Any

from cognition.errors import SchedulerValidationError

MAX_INPUTS = 50
MAX_DESCRIPTION_LENGTH = 500

# camelCase spellings accepted from JSON payloads
_KEY_ALIASES = {
    "contradictionPressure": "contradiction_pressure",
    "governancePressure": "governance_pressure",
    "maxItemsPerCycle": "max_items_per_cycle",
    "maxTurnsPerItem": "max_turns_per_item",
    "maxParallelSessions": "max_parallel_sessions",
    "maxDeepSynthesisPerUser": "max_deep_synthesis_per_user",
    "maxProposalsPerCycle": "max_proposals_per_cycle",
    "cycleDurationMs": "cycle_duration_ms",
}


class WorkItemType(StrEnum):
    """Kinds of background work the scheduler can queue."""

    CONTRADICTION = "contradiction"
    LOW_CONFIDENCE = "low_confidence"
    USER_PROMPT = "user_prompt"
    PROPOSAL_CRITIQUE = "proposal_critique"
    MISSING_EDGES = "missing_edges"
    ARTIFACT_VALIDATION = "artifact_validation"
    HOT_NODE = "hot_node"
    SYNTHESIS_NEEDED = "synthesis_needed"
    PATTERN_REFRESH = "pattern_refresh"
    GOVERNANCE_BACKLOG = "governance_backlog"


ALL_WORK_ITEM_TYPES: tuple[str, ...] = tuple(t.value for t in WorkItemType)


class WorkItemStatus(StrEnum):
    """Work item lifecycle states."""

    QUEUED = "queued"
    ASSIGNED = "assigned"
    DEFERRED = "deferred"
    EXPIRED = "expired"


class AllocationStatus(StrEnum):
    """Allocation lifecycle states."""

    ACTIVE = "active"
    COMPLETED = "completed"


class StopReason(StrEnum):
    """Why an allocation stopped.

    The scheduler computes only BUDGET_EXHAUSTED and MAX_TURNS. The others are
    reported by whoever runs the work and are accepted at completion time.
    """

    BUDGET_EXHAUSTED = "budget_exhausted"
    NOVELTY_PLATEAU = "novelty_plateau"
    CONTRADICTION_STUCK = "contradiction_unresolved"
    FATAL_FLAW = "fatal_flaw_found"
    MAX_TURNS = "max_turns_reached"
    ALL_GATES_BLOCKED = "all_gates_blocked"
    CONSENSUS_REACHED = "consensus_reached"


ALL_STOP_REASONS: tuple[str, ...] = tuple(r.value for r in StopReason)


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


def _canonical_key(key: str) -> str:
    return _KEY_ALIASES.get(key, key)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class PrioritySignals:
    """Seven normalized signals describing a work item. Clamped to [0, 1]."""

    impact: float = 0.5
    risk: float = 0.5
    uncertainty: float = 0.5
    novelty: float = 0.5
    contradiction_pressure: float = 0.0
    governance_pressure: float = 0.0
    effort: float = 0.5

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not _is_number(value) or math.isnan(value):
                raise SchedulerValidationError(
                    f"signal {f.name} must be a number, got {value!r}", provided=value
                )
            object.__setattr__(self, f.name, clamp(float(value)))

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> PrioritySignals:
        """Build signals from a partial mapping. Unknown keys and None are ignored."""
        if not values:
            return cls()
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in values.items():
            name = _canonical_key(key)
            if name in known and value is not None:
                kwargs[name] = value
        return cls(**kwargs)

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass
class PriorityWeights:
    """Per-signal weights. Effort is negative so cheap items get a bonus."""

    impact: float = 0.25
    risk: float = 0.20
    uncertainty: float = 0.15
    novelty: float = 0.15
    contradiction_pressure: float = 0.10
    governance_pressure: float = 0.10
    effort: float = -0.05

    def update(self, overrides: Mapping[str, Any]) -> list[str]:
        """Apply numeric overrides for known weights; return the names changed."""
        known = {f.name for f in fields(self)}
        changed: list[str] = []
        for key, value in overrides.items():
            name = _canonical_key(key)
            if name in known and _is_number(value) and math.isfinite(value):
                setattr(self, name, float(value))
                changed.append(name)
        return changed

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass
class Budget:
    """Hard caps enforced per cycle."""

    max_items_per_cycle: int = 3
    max_turns_per_item: int = 10
    max_parallel_sessions: int = 5
    max_deep_synthesis_per_user: int = 1
    max_proposals_per_cycle: int = 10
    cycle_duration_ms: int = 60_000

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not _is_number(value) or value <= 0:
                raise ValueError(f"{f.name} must be a positive number, got {value!r}")

    @property
    def turn_ceiling(self) -> int:
        """Turns allowed across the whole cycle."""
        return self.max_turns_per_item * self.max_items_per_cycle

    def update(self, overrides: Mapping[str, Any]) -> list[str]:
        """Apply positive numeric overrides for known fields; ignore everything else."""
        known = {f.name for f in fields(self)}
        changed: list[str] = []
        for key, value in overrides.items():
            name = _canonical_key(key)
            if name not in known or not _is_number(value) or not math.isfinite(value):
                continue
            if int(value) <= 0:
                continue
            setattr(self, name, int(value))
            changed.append(name)
        return changed

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass
class Cycle:
    """Consumption counters for the current accounting window."""

    started_at: float  # epoch seconds
    items_started: int = 0
    turns_used: int = 0
    proposals_emitted: int = 0
    sessions_active: int = 0
    deep_synthesis_used: dict[str, int] = field(default_factory=dict)

    def elapsed_ms(self, now: float) -> float:
        return (now - self.started_at) * 1000.0


@dataclass
class WorkItem:
    """A pending unit of potential work."""

    item_id: str
    type: WorkItemType
    scope: str
    inputs: tuple[str, ...]
    created_by: str
    description: str
    signals: PrioritySignals
    priority: float
    created_at: str
    deadline: float | None = None  # epoch seconds
    status: WorkItemStatus = WorkItemStatus.QUEUED
    assigned_at: str | None = None
    completed_at: str | None = None

    def is_past_deadline(self, now: float) -> bool:
        return self.deadline is not None and self.deadline < now


@dataclass(frozen=True)
class TeamMember:
    """Role/name projection of a worker on an allocation team."""

    worker_id: str
    role: str
    name: str = ""


@dataclass(frozen=True)
class WorkSummary:
    """Structured summary attached to a completed allocation."""

    what_changed: str
    proposal_ids: tuple[str, ...]
    turns_used: int
    unresolved: tuple[str, ...]
    confidence_labels: dict[str, Any]
    description: str


@dataclass
class Allocation:
    """An active binding of a work item to a worker team."""

    allocation_id: str
    item_id: str
    type: WorkItemType
    scope: str
    inputs: tuple[str, ...]
    description: str
    priority: float
    team: tuple[str, ...]
    team_roles: tuple[TeamMember, ...]
    max_turns: int
    signals: PrioritySignals
    started_at: str
    turns_used: int = 0
    status: AllocationStatus = AllocationStatus.ACTIVE
    proposals: list[str] = field(default_factory=list)
    completed_at: str | None = None
    stop_reason: StopReason | None = None
    summary: WorkSummary | None = None


@dataclass(frozen=True)
class CompletedWork:
    """Immutable record of a finished allocation."""

    allocation_id: str
    item_id: str
    type: WorkItemType
    scope: str
    inputs: tuple[str, ...]
    description: str
    priority: float
    team: tuple[str, ...]
    team_roles: tuple[TeamMember, ...]
    max_turns: int
    signals: PrioritySignals
    started_at: str
    turns_used: int
    proposals: tuple[str, ...]
    completed_at: str
    stop_reason: StopReason
    summary: WorkSummary
    status: AllocationStatus = AllocationStatus.COMPLETED

    @classmethod
    def from_allocation(
        cls,
        allocation: Allocation,
        *,
        completed_at: str,
        stop_reason: StopReason,
        summary: WorkSummary,
    ) -> CompletedWork:
        return cls(
            allocation_id=allocation.allocation_id,
            item_id=allocation.item_id,
            type=allocation.type,
            scope=allocation.scope,
            inputs=allocation.inputs,
            description=allocation.description,
            priority=allocation.priority,
            team=allocation.team,
            team_roles=allocation.team_roles,
            max_turns=allocation.max_turns,
            signals=allocation.signals,
            started_at=allocation.started_at,
            turns_used=allocation.turns_used,
            proposals=tuple(allocation.proposals),
            completed_at=completed_at,
            stop_reason=stop_reason,
            summary=summary,
        )
