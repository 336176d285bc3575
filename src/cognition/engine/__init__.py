"""Attention scheduling engine."""

from cognition.engine.allocator import ROLE_AFFINITY, Allocator, eligible_roles, form_team
from cognition.engine.budget import BudgetTracker
from cognition.engine.completion import SchedulerMetrics, running_avg
from cognition.engine.models import (
    ALL_STOP_REASONS,
    ALL_WORK_ITEM_TYPES,
    Allocation,
    AllocationStatus,
    Budget,
    CompletedWork,
    Cycle,
    PrioritySignals,
    PriorityWeights,
    StopReason,
    TeamMember,
    WorkItem,
    WorkItemStatus,
    WorkItemType,
    WorkSummary,
)
from cognition.engine.priority import compute_priority
from cognition.engine.queue import WorkQueue
from cognition.engine.results import (
    AllocationBatch,
    AllocationLookup,
    BudgetCheck,
    BudgetRemaining,
    CompletedWorkPage,
    CompletionResult,
    DequeueResult,
    ProposalResult,
    StopSignal,
    TurnResult,
)
from cognition.engine.scanner import (
    ActivationEntry,
    DialogueSession,
    KnowledgeRecord,
    SignalSources,
)
from cognition.engine.scheduler import CognitionScheduler

__all__ = [
    "ALL_STOP_REASONS",
    "ALL_WORK_ITEM_TYPES",
    "ROLE_AFFINITY",
    "ActivationEntry",
    "Allocation",
    "AllocationBatch",
    "AllocationLookup",
    "AllocationStatus",
    "Allocator",
    "Budget",
    "BudgetCheck",
    "BudgetRemaining",
    "BudgetTracker",
    "CognitionScheduler",
    "CompletedWork",
    "CompletedWorkPage",
    "CompletionResult",
    "Cycle",
    "DequeueResult",
    "DialogueSession",
    "KnowledgeRecord",
    "PrioritySignals",
    "PriorityWeights",
    "ProposalResult",
    "SchedulerMetrics",
    "SignalSources",
    "StopReason",
    "StopSignal",
    "TeamMember",
    "TurnResult",
    "WorkItem",
    "WorkItemStatus",
    "WorkItemType",
    "WorkQueue",
    "WorkSummary",
    "compute_priority",
    "eligible_roles",
    "form_team",
    "running_avg",
]
