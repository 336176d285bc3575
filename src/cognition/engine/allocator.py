"""Allocator - binds the highest-priority work items to worker teams.

Team formation:
    1. Filter active workers to the roles eligible for the item type.
    2. Rank them by credibility (highest first, registration order on ties).
    3. The top-ranked worker is the primary.
    4. Critique-style items recruit one critic/adversary, synthesis-style items
       one synthesizer, when such a worker is free. Never blocking.

Items with no eligible worker are deferred and go back into the queue. A
deferral uses up one of the pass's pops, same as an allocation.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Sequence

from cognition.engine.models import (
    Allocation,
    TeamMember,
    WorkItem,
    WorkItemStatus,
    WorkItemType,
)
from cognition.engine.queue import WorkQueue
from cognition.workers.directory import (
    DEFAULT_CREDIBILITY,
    ReputationLookup,
    WorkerDirectory,
    WorkerRef,
)

logger = logging.getLogger("cognition.engine.allocator")

ROLE_AFFINITY: dict[WorkItemType, tuple[str, ...]] = {
    WorkItemType.CONTRADICTION: ("critic", "adversary", "synthesizer"),
    WorkItemType.LOW_CONFIDENCE: ("critic", "engineer", "auditor"),
    WorkItemType.USER_PROMPT: ("builder", "synthesizer"),
    WorkItemType.PROPOSAL_CRITIQUE: ("critic", "adversary", "auditor"),
    WorkItemType.MISSING_EDGES: ("synthesizer", "builder", "historian"),
    WorkItemType.ARTIFACT_VALIDATION: ("auditor", "engineer"),
    WorkItemType.HOT_NODE: ("builder", "synthesizer", "historian"),
    WorkItemType.SYNTHESIS_NEEDED: ("synthesizer", "builder"),
    WorkItemType.PATTERN_REFRESH: ("historian", "auditor"),
    WorkItemType.GOVERNANCE_BACKLOG: ("auditor", "ethicist"),
}

DEFAULT_ROLES: tuple[str, ...] = ("builder",)

CRITIC_ROLES = frozenset({"critic", "adversary"})
SYNTHESIZER_ROLES = frozenset({"synthesizer"})

# Item types that pull in a second opinion
CRITIC_RECRUITING_TYPES = frozenset(
    {WorkItemType.CONTRADICTION, WorkItemType.PROPOSAL_CRITIQUE, WorkItemType.LOW_CONFIDENCE}
)
SYNTHESIZER_RECRUITING_TYPES = frozenset(
    {WorkItemType.SYNTHESIS_NEEDED, WorkItemType.MISSING_EDGES}
)


def eligible_roles(item_type: WorkItemType | str) -> tuple[str, ...]:
    """Roles allowed to take the primary slot for an item type."""
    try:
        return ROLE_AFFINITY.get(WorkItemType(item_type), DEFAULT_ROLES)
    except ValueError:
        return DEFAULT_ROLES


def rank_workers(
    workers: Sequence[WorkerRef], reputation: ReputationLookup | None = None
) -> list[WorkerRef]:
    """Sort by descending credibility. Stable, so ties keep directory order."""

    def credibility(worker: WorkerRef) -> float:
        score = reputation(worker.worker_id) if reputation is not None else None
        if score is None:
            score = worker.credibility
        return DEFAULT_CREDIBILITY if score is None else score

    return sorted(workers, key=credibility, reverse=True)


def form_team(
    item_type: WorkItemType,
    workers: Sequence[WorkerRef],
    reputation: ReputationLookup | None = None,
) -> tuple[WorkerRef, ...]:
    """Pick a 1-3 member team for ``item_type``; empty when nobody is eligible."""
    roles = eligible_roles(item_type)
    candidates = [w for w in workers if w.role in roles]
    if not candidates:
        return ()

    ranked = rank_workers(workers, reputation)
    team = [rank_workers(candidates, reputation)[0]]

    def recruit(allowed_roles: frozenset[str]) -> None:
        taken = {member.worker_id for member in team}
        for worker in ranked:
            if worker.role in allowed_roles and worker.worker_id not in taken:
                team.append(worker)
                return

    if item_type in CRITIC_RECRUITING_TYPES:
        recruit(CRITIC_ROLES)
    if item_type in SYNTHESIZER_RECRUITING_TYPES:
        recruit(SYNTHESIZER_ROLES)

    return tuple(team)


def _new_allocation_id() -> str:
    return f"alloc-{uuid.uuid4().hex[:12]}"


class Allocator:
    """Pops work items in priority order and binds them to teams."""

    def __init__(
        self,
        directory: WorkerDirectory,
        reputation: ReputationLookup | None = None,
        id_factory: Callable[[], str] = _new_allocation_id,
    ) -> None:
        self.directory = directory
        self.reputation = reputation
        self._id_factory = id_factory

    def run(
        self,
        queue: WorkQueue,
        limit: int,
        *,
        max_turns: int,
        started_at: str,
    ) -> tuple[list[Allocation], list[WorkItem]]:
        """Pop up to ``limit`` items and bind each one that can be staffed.

        Deferred items count against ``limit``. They are pushed back after the
        pass so no item is popped twice in one pass.

        Returns:
            (allocations, deferred items)
        """
        allocations: list[Allocation] = []
        deferred: list[WorkItem] = []
        workers = self.directory.list_active_workers()

        for _ in range(limit):
            item = queue.pop()
            if item is None:
                break
            item.status = WorkItemStatus.QUEUED

            team = form_team(item.type, workers, self.reputation)
            if not team:
                item.status = WorkItemStatus.DEFERRED
                deferred.append(item)
                logger.info(
                    "Deferred %s (%s): no active worker with roles %s",
                    item.item_id,
                    item.type.value,
                    ", ".join(eligible_roles(item.type)),
                )
                continue

            allocation = self._bind(item, team, max_turns=max_turns, started_at=started_at)
            item.status = WorkItemStatus.ASSIGNED
            item.assigned_at = started_at
            allocations.append(allocation)
            logger.info(
                "Allocated %s (%s, priority=%.3f) to %s as %s",
                item.item_id,
                item.type.value,
                item.priority,
                ", ".join(allocation.team),
                allocation.allocation_id,
            )

        for item in deferred:
            queue.push(item)

        return allocations, deferred

    def _bind(
        self,
        item: WorkItem,
        team: tuple[WorkerRef, ...],
        *,
        max_turns: int,
        started_at: str,
    ) -> Allocation:
        return Allocation(
            allocation_id=self._id_factory(),
            item_id=item.item_id,
            type=item.type,
            scope=item.scope,
            inputs=item.inputs,
            description=item.description,
            priority=item.priority,
            team=tuple(w.worker_id for w in team),
            team_roles=tuple(TeamMember(w.worker_id, w.role, w.name) for w in team),
            max_turns=max_turns,
            signals=item.signals,
            started_at=started_at,
        )
