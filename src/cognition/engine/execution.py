"""Turn and proposal tracking with deterministic stop conditions.

Two stop rules are evaluated after each turn, in order:
    1. allocation.turns_used >= allocation.max_turns  -> max_turns_reached
    2. cycle turns >= max_turns_per_item * max_items  -> budget_exhausted
"""

from __future__ import annotations

import logging

from cognition.engine.budget import BudgetTracker
from cognition.engine.models import Allocation, StopReason
from cognition.engine.results import ProposalResult, StopSignal, TurnResult

logger = logging.getLogger("cognition.engine.execution")


def check_stop_conditions(allocation: Allocation, tracker: BudgetTracker) -> StopSignal:
    if allocation.turns_used >= allocation.max_turns:
        return StopSignal(should_stop=True, reason=StopReason.MAX_TURNS)
    if tracker.cycle.turns_used >= tracker.budget.turn_ceiling:
        return StopSignal(should_stop=True, reason=StopReason.BUDGET_EXHAUSTED)
    return StopSignal(should_stop=False)


def record_turn(allocation: Allocation, tracker: BudgetTracker) -> TurnResult:
    """Count one turn against the allocation and the cycle.

    A turn past ``max_turns`` is not counted; the stop signal is repeated.
    """
    tracker.ensure_current_cycle()
    if allocation.turns_used >= allocation.max_turns:
        return TurnResult(
            ok=True,
            turns_used=allocation.turns_used,
            stop=StopSignal(should_stop=True, reason=StopReason.MAX_TURNS),
        )

    allocation.turns_used += 1
    tracker.note_turn()

    stop = check_stop_conditions(allocation, tracker)
    if stop.should_stop:
        logger.info(
            "Allocation %s should stop after %d turns: %s",
            allocation.allocation_id,
            allocation.turns_used,
            stop.reason,
        )
    return TurnResult(ok=True, turns_used=allocation.turns_used, stop=stop)


def record_proposal(
    allocation: Allocation, proposal_id: str, tracker: BudgetTracker
) -> ProposalResult:
    """Attach a proposal id. The per-cycle cap is enforced by callers via check_budget."""
    tracker.ensure_current_cycle()
    allocation.proposals.append(proposal_id)
    tracker.note_proposal()
    logger.debug("Allocation %s emitted proposal %s", allocation.allocation_id, proposal_id)
    return ProposalResult(ok=True, proposal_count=len(allocation.proposals))
