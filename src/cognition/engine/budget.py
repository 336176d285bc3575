"""Cycle-scoped attention budget accounting.

The cycle resets lazily: every budget-affecting call first checks whether
``cycle_duration_ms`` has elapsed and, if so, replaces the cycle wholesale.
There is no background timer.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from cognition.engine.models import Budget, Cycle, StopReason
from cognition.engine.results import (
    DEEP_SYNTHESIS_LIMIT,
    MAX_PARALLEL_SESSIONS,
    BudgetCheck,
    BudgetRemaining,
)

logger = logging.getLogger("cognition.engine.budget")


class BudgetTracker:
    """Tracks consumption in the current cycle against a :class:`Budget`."""

    def __init__(
        self,
        budget: Budget | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.budget = budget if budget is not None else Budget()
        self._clock = clock
        self.cycle = Cycle(started_at=clock())
        self.total_cycles = 0

    def ensure_current_cycle(self) -> bool:
        """Reset the cycle if it has run its full duration. Returns True on reset."""
        now = self._clock()
        if self.cycle.elapsed_ms(now) < self.budget.cycle_duration_ms:
            return False
        previous = self.cycle
        self.cycle = Cycle(started_at=now)
        self.total_cycles += 1
        logger.info(
            "Cycle reset after %.0fms (items=%d, turns=%d, proposals=%d)",
            previous.elapsed_ms(now),
            previous.items_started,
            previous.turns_used,
            previous.proposals_emitted,
        )
        return True

    def remaining(self, user_id: str | None = None) -> BudgetRemaining:
        budget, cycle = self.budget, self.cycle
        deep_synthesis = None
        if user_id:
            used = cycle.deep_synthesis_used.get(user_id, 0)
            deep_synthesis = budget.max_deep_synthesis_per_user - used
        return BudgetRemaining(
            items=budget.max_items_per_cycle - cycle.items_started,
            sessions=budget.max_parallel_sessions - cycle.sessions_active,
            proposals=budget.max_proposals_per_cycle - cycle.proposals_emitted,
            turns=max(0, budget.turn_ceiling - cycle.turns_used),
            deep_synthesis=deep_synthesis,
        )

    def check(self, user_id: str | None = None) -> BudgetCheck:
        """Decide whether a new work item may start. Never raises on denial."""
        self.ensure_current_cycle()
        remaining = self.remaining(user_id)

        if self.cycle.items_started >= self.budget.max_items_per_cycle:
            return BudgetCheck(
                allowed=False, reason=StopReason.BUDGET_EXHAUSTED.value, remaining=remaining
            )
        if self.cycle.sessions_active >= self.budget.max_parallel_sessions:
            return BudgetCheck(allowed=False, reason=MAX_PARALLEL_SESSIONS, remaining=remaining)

        return BudgetCheck(allowed=True, remaining=remaining)

    def consume_deep_synthesis(self, user_id: str) -> BudgetCheck:
        """Take one deep-synthesis slot for ``user_id`` if the user has any left."""
        self.ensure_current_cycle()
        used = self.cycle.deep_synthesis_used.get(user_id, 0)
        if used >= self.budget.max_deep_synthesis_per_user:
            return BudgetCheck(
                allowed=False, reason=DEEP_SYNTHESIS_LIMIT, remaining=self.remaining(user_id)
            )
        self.cycle.deep_synthesis_used[user_id] = used + 1
        return BudgetCheck(allowed=True, remaining=self.remaining(user_id))

    def note_allocation(self) -> None:
        self.cycle.items_started += 1
        self.cycle.sessions_active += 1

    def note_turn(self) -> None:
        self.cycle.turns_used += 1

    def note_proposal(self) -> None:
        self.cycle.proposals_emitted += 1

    def release_session(self) -> None:
        self.cycle.sessions_active = max(0, self.cycle.sessions_active - 1)

    def update(self, overrides: Mapping[str, Any]) -> Budget:
        """Override budget fields; unknown or non-positive values are ignored."""
        changed = self.budget.update(overrides)
        if changed:
            logger.info("Budget updated: %s", ", ".join(sorted(changed)))
        return replace(self.budget)

    def status(self) -> dict[str, Any]:
        """Elapsed/remaining cycle time and utilization. Pure read, no reset."""
        budget, cycle = self.budget, self.cycle
        elapsed = max(0.0, cycle.elapsed_ms(self._clock()))
        return {
            "budget": budget.as_dict(),
            "cycle": {
                "started_at": datetime.fromtimestamp(cycle.started_at, tz=UTC).isoformat(),
                "elapsed_ms": round(elapsed),
                "remaining_ms": round(max(0.0, budget.cycle_duration_ms - elapsed)),
                "items_started": cycle.items_started,
                "turns_used": cycle.turns_used,
                "proposals_emitted": cycle.proposals_emitted,
                "sessions_active": cycle.sessions_active,
                "deep_synthesis_used": dict(cycle.deep_synthesis_used),
            },
            "utilization": {
                "items": cycle.items_started / budget.max_items_per_cycle,
                "turns": cycle.turns_used / budget.turn_ceiling,
                "sessions": cycle.sessions_active / budget.max_parallel_sessions,
                "proposals": cycle.proposals_emitted / budget.max_proposals_per_cycle,
            },
        }
