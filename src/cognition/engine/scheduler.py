"""Cognition Scheduler - decides what gets attention, by whom, for how long.

Pipeline:
    1. Collaborators report signals; work items are created and scored
    2. Items wait in a max-priority queue
    3. The allocator, gated by the cycle budget, binds top items to teams
    4. Turns and proposals are recorded until a stop condition fires
    5. Completion freezes a summary record and updates metrics

All state belongs to one :class:`CognitionScheduler` instance. Every public
method holds the instance lock for its whole body, so callers on different
threads see each operation as atomic and snapshots are never half-updated.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from cognition.engine.allocator import Allocator
from cognition.engine.budget import BudgetTracker
from cognition.engine.completion import SchedulerMetrics, finalize
from cognition.engine.execution import record_proposal, record_turn
from cognition.engine.models import (
    ALL_STOP_REASONS,
    ALL_WORK_ITEM_TYPES,
    MAX_DESCRIPTION_LENGTH,
    MAX_INPUTS,
    Allocation,
    Budget,
    CompletedWork,
    PrioritySignals,
    PriorityWeights,
    StopReason,
    WorkItem,
    WorkItemStatus,
    WorkItemType,
)
from cognition.engine.priority import apply_deadline_boost, compute_priority
from cognition.engine.queue import WorkQueue
from cognition.engine.results import (
    ALLOCATION_NOT_FOUND,
    NOT_FOUND,
    NOTHING_TO_ALLOCATE,
    AllocationBatch,
    AllocationLookup,
    BudgetCheck,
    CompletedWorkPage,
    CompletionResult,
    DequeueResult,
    ProposalResult,
    TurnResult,
)
from cognition.engine.scanner import SignalSources, scan
from cognition.errors import (
    InvalidStopReasonError,
    InvalidWorkItemError,
    SchedulerValidationError,
)
from cognition.workers.directory import ReputationLookup, StaticWorkerDirectory, WorkerDirectory

if TYPE_CHECKING:
    from cognition.config import SchedulerConfig

logger = logging.getLogger("cognition.engine.scheduler")


def _new_item_id() -> str:
    return f"wi-{uuid.uuid4().hex[:12]}"


def _normalize_inputs(inputs: Iterable[str] | str | None) -> tuple[str, ...]:
    """Bounded tuple of input ids. None means no inputs."""
    if inputs is None:
        return ()
    if isinstance(inputs, str):
        return (inputs,)
    try:
        return tuple(str(i) for i in inputs)[:MAX_INPUTS]
    except TypeError:
        raise SchedulerValidationError(
            f"inputs must be a list of ids, got {inputs!r}", provided=inputs
        ) from None


class CognitionScheduler:
    """Attention-budget scheduler for background work items."""

    def __init__(
        self,
        workers: WorkerDirectory | None = None,
        *,
        budget: Budget | None = None,
        weights: PriorityWeights | None = None,
        reputation: ReputationLookup | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.workers = workers if workers is not None else StaticWorkerDirectory()
        self._weights = weights if weights is not None else PriorityWeights()
        self._clock = clock
        self._lock = threading.RLock()
        self._queue = WorkQueue()
        self._budget = BudgetTracker(budget, clock=clock)
        self._allocator = Allocator(self.workers, reputation=reputation)
        self._active: dict[str, Allocation] = {}
        self._completed: list[CompletedWork] = []
        self._metrics = SchedulerMetrics()

    @classmethod
    def from_config(
        cls,
        config: SchedulerConfig,
        workers: WorkerDirectory | None = None,
        *,
        reputation: ReputationLookup | None = None,
        clock: Callable[[], float] = time.time,
    ) -> CognitionScheduler:
        return cls(
            workers,
            budget=replace(config.budget),
            weights=replace(config.weights),
            reputation=reputation,
            clock=clock,
        )

    @property
    def budget(self) -> Budget:
        """Copy of the current budget. Change it through :meth:`update_budget`."""
        with self._lock:
            return replace(self._budget.budget)

    @property
    def weights(self) -> PriorityWeights:
        """Copy of the current weights. Change them through :meth:`update_weights`."""
        with self._lock:
            return replace(self._weights)

    def _now_iso(self) -> str:
        return datetime.fromtimestamp(self._clock(), tz=UTC).isoformat()

    # ── Work items ───────────────────────────────────────────────────────

    def create_work_item(
        self,
        item_type: WorkItemType | str,
        scope: str = "*",
        inputs: Iterable[str] | str | None = (),
        created_by: str = "system",
        description: str = "",
        signals: PrioritySignals | Mapping[str, Any] | None = None,
        deadline: float | None = None,
    ) -> WorkItem:
        """Validate, score and enqueue a work item.

        Raises:
            InvalidWorkItemError: ``item_type`` is not a known work item type.
            SchedulerValidationError: a signal value is not numeric, or
                ``inputs`` is not iterable.
        """
        try:
            kind = WorkItemType(item_type)
        except ValueError:
            raise InvalidWorkItemError(item_type, ALL_WORK_ITEM_TYPES) from None

        if not isinstance(signals, PrioritySignals):
            signals = PrioritySignals.from_mapping(signals)
        input_ids = _normalize_inputs(inputs)

        with self._lock:
            now = self._clock()
            priority = compute_priority(signals, self._weights)
            priority = apply_deadline_boost(priority, deadline, now)

            item = WorkItem(
                item_id=_new_item_id(),
                type=kind,
                scope=scope or "*",
                inputs=input_ids,
                created_by=created_by or "system",
                description=str(description or "")[:MAX_DESCRIPTION_LENGTH],
                signals=signals,
                priority=priority,
                created_at=self._now_iso(),
                deadline=deadline,
            )
            self._queue.push(item)
            self._metrics.record_queued(item.priority)
            logger.debug(
                "Queued %s (%s, priority=%.3f)", item.item_id, kind.value, item.priority
            )
            return copy.deepcopy(item)

    def scan_and_create_work_items(self, sources: SignalSources) -> list[WorkItem]:
        """Create one work item per threshold crossed in ``sources``.

        All drafts are validated before any is queued, so a bad snapshot
        queues nothing.

        Raises:
            SchedulerValidationError: a derived signal is not numeric.
        """
        drafts = [(draft, PrioritySignals.from_mapping(draft.signals)) for draft in scan(sources)]
        created = []
        with self._lock:
            for draft, signals in drafts:
                created.append(
                    self.create_work_item(
                        draft.type,
                        scope=draft.scope,
                        inputs=draft.inputs,
                        created_by=draft.created_by,
                        description=draft.description,
                        signals=signals,
                    )
                )
        if created:
            logger.info("Scan created %d work item(s)", len(created))
        return created

    def dequeue_item(self, item_id: str) -> DequeueResult:
        """Remove a queued item outright (administrative override)."""
        with self._lock:
            removed = self._queue.remove(item_id)
            if removed is None:
                return DequeueResult(ok=False, error=NOT_FOUND)
            logger.info("Dequeued %s", item_id)
            return DequeueResult(ok=True, removed=copy.deepcopy(removed))

    def expire_items(self) -> list[WorkItem]:
        """Drop queued items whose deadline has passed."""
        with self._lock:
            now = self._clock()
            expired = self._queue.remove_where(lambda item: item.is_past_deadline(now))
            for item in expired:
                item.status = WorkItemStatus.EXPIRED
            self._metrics.total_items_expired += len(expired)
            if expired:
                logger.info("Expired %d work item(s)", len(expired))
            return copy.deepcopy(expired)

    def get_queue(self) -> list[WorkItem]:
        """Snapshot of queued items in pop order."""
        with self._lock:
            return copy.deepcopy(self._queue.items())

    # ── Priority ─────────────────────────────────────────────────────────

    def rescore_queue(self) -> int:
        """Re-score every queued item under the current weights.

        Deferred items are put back to queued, so a weight change can rescue them.
        """
        with self._lock:

            def score(item: WorkItem) -> float:
                if item.status is WorkItemStatus.DEFERRED:
                    item.status = WorkItemStatus.QUEUED
                return compute_priority(item.signals, self._weights)

            return self._queue.rescore(score)

    def update_weights(self, overrides: Mapping[str, Any]) -> PriorityWeights:
        """Override known weights and rescore the queue. Unknown keys are ignored."""
        with self._lock:
            changed = self._weights.update(overrides)
            if changed:
                logger.info("Weights updated: %s", ", ".join(sorted(changed)))
            self.rescore_queue()
            return replace(self._weights)

    # ── Budget ───────────────────────────────────────────────────────────

    def check_budget(self, user_id: str | None = None) -> BudgetCheck:
        with self._lock:
            return self._budget.check(user_id)

    def record_deep_synthesis(self, user_id: str) -> BudgetCheck:
        """Consume one of ``user_id``'s deep-synthesis slots for this cycle."""
        with self._lock:
            return self._budget.consume_deep_synthesis(user_id)

    def get_budget_status(self) -> dict[str, Any]:
        with self._lock:
            return self._budget.status()

    def update_budget(self, overrides: Mapping[str, Any]) -> Budget:
        with self._lock:
            return self._budget.update(overrides)

    # ── Allocation ───────────────────────────────────────────────────────

    def allocate(self, k: int | None = None) -> AllocationBatch:
        """Bind up to ``k`` of the highest-priority items to worker teams.

        A budget denial returns ``ok=False`` with the reason and changes nothing.
        """
        with self._lock:
            self._budget.ensure_current_cycle()
            check = self._budget.check()
            if not check.allowed:
                if check.reason == StopReason.BUDGET_EXHAUSTED:
                    self._metrics.budget_exhaustions += 1
                logger.info("Allocation denied: %s", check.reason)
                return AllocationBatch(ok=False, error=check.reason, remaining=check.remaining)

            remaining = check.remaining
            requested = remaining.items if k is None else k
            limit = min(requested, remaining.items, remaining.sessions, len(self._queue))
            if limit <= 0:
                return AllocationBatch(ok=True, reason=NOTHING_TO_ALLOCATE, remaining=remaining)

            allocations, deferred = self._allocator.run(
                self._queue,
                limit,
                max_turns=self._budget.budget.max_turns_per_item,
                started_at=self._now_iso(),
            )
            for allocation in allocations:
                self._active[allocation.allocation_id] = allocation
                self._budget.note_allocation()
            self._metrics.total_items_deferred += len(deferred)

            return AllocationBatch(
                ok=True,
                allocations=copy.deepcopy(tuple(allocations)),
                deferred=tuple(item.item_id for item in deferred),
                remaining=self._budget.remaining(),
            )

    def get_allocation(self, allocation_id: str) -> AllocationLookup:
        with self._lock:
            active = self._active.get(allocation_id)
            if active is not None:
                return AllocationLookup(ok=True, allocation=copy.deepcopy(active), source="active")
            for record in self._completed:
                if record.allocation_id == allocation_id:
                    return AllocationLookup(
                        ok=True, allocation=copy.deepcopy(record), source="completed"
                    )
            return AllocationLookup(ok=False, error=NOT_FOUND)

    def get_active_allocations(self) -> list[Allocation]:
        with self._lock:
            return copy.deepcopy(list(self._active.values()))

    # ── Execution ────────────────────────────────────────────────────────

    def record_turn(self, allocation_id: str) -> TurnResult:
        with self._lock:
            allocation = self._active.get(allocation_id)
            if allocation is None:
                return TurnResult(ok=False, error=ALLOCATION_NOT_FOUND)
            before = allocation.turns_used
            result = record_turn(allocation, self._budget)
            self._metrics.total_turns_used += allocation.turns_used - before
            return result

    def record_proposal(self, allocation_id: str, proposal_id: str) -> ProposalResult:
        with self._lock:
            allocation = self._active.get(allocation_id)
            if allocation is None:
                return ProposalResult(ok=False, error=ALLOCATION_NOT_FOUND)
            return record_proposal(allocation, proposal_id, self._budget)

    # ── Completion ───────────────────────────────────────────────────────

    def complete_allocation(
        self,
        allocation_id: str,
        stop_reason: StopReason | str | None = None,
        *,
        unresolved: Iterable[str] = (),
        confidence_labels: Mapping[str, Any] | None = None,
        description: str | None = None,
    ) -> CompletionResult:
        """Finalize an active allocation into the completed history.

        ``stop_reason`` defaults to max_turns_reached. Completing an id twice
        returns ``allocation_not_found`` the second time.

        Raises:
            InvalidStopReasonError: ``stop_reason`` is not a known stop reason.
        """
        try:
            reason = StopReason.MAX_TURNS if stop_reason is None else StopReason(stop_reason)
        except ValueError:
            raise InvalidStopReasonError(stop_reason, ALL_STOP_REASONS) from None

        with self._lock:
            allocation = self._active.get(allocation_id)
            if allocation is None:
                return CompletionResult(ok=False, error=ALLOCATION_NOT_FOUND)

            record = finalize(
                allocation,
                stop_reason=reason,
                completed_at=self._now_iso(),
                unresolved=unresolved,
                confidence_labels=confidence_labels,
                description=description,
            )
            del self._active[allocation_id]
            self._completed.append(record)
            self._budget.release_session()
            self._metrics.record_completed(record.turns_used)
            logger.info(
                "Completed %s (%s) after %d turns: %s",
                allocation_id,
                record.type.value,
                record.turns_used,
                reason.value,
            )
            return CompletionResult(ok=True, completed=copy.deepcopy(record))

    def get_completed_work(self, limit: int = 50) -> CompletedWorkPage:
        with self._lock:
            recent = self._completed[-limit:] if limit > 0 else []
            return CompletedWorkPage(
                completed=copy.deepcopy(tuple(recent)), total=len(self._completed)
            )

    # ── Metrics ──────────────────────────────────────────────────────────

    def get_scheduler_metrics(self) -> dict[str, Any]:
        with self._lock:
            metrics = self._metrics.as_dict()
            metrics["total_cycles"] = self._budget.total_cycles
            return {
                "queue_depth": len(self._queue),
                "active_allocations": len(self._active),
                "completed_total": len(self._completed),
                "metrics": metrics,
                "budget": self._budget.budget.as_dict(),
                "weights": self._weights.as_dict(),
            }
