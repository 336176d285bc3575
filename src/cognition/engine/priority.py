"""Priority scoring from work item signals.

priority = impact*w1 + risk*w2 + uncertainty*w3 + novelty*w4
         + contradiction_pressure*w5 + governance_pressure*w6 + effort*w7

The effort weight is negative, so cheap items float up. Scores are rounded to
three decimals before clamping so equal inputs always compare equal.
"""

from __future__ import annotations

from dataclasses import fields

from cognition.engine.models import PrioritySignals, PriorityWeights, clamp

PRIORITY_PRECISION = 3

# Deadline urgency
URGENCY_WINDOW_SECONDS = 300.0
URGENCY_BOOST = 0.2


def compute_priority(signals: PrioritySignals, weights: PriorityWeights | None = None) -> float:
    """Weighted sum of signals, rounded and clamped to [0, 1]."""
    if weights is None:
        weights = PriorityWeights()
    score = sum(getattr(weights, f.name) * getattr(signals, f.name) for f in fields(signals))
    return clamp(round(score, PRIORITY_PRECISION))


def apply_deadline_boost(priority: float, deadline: float | None, now: float) -> float:
    """One-time urgency boost for items due within the urgency window."""
    if deadline is None:
        return priority
    time_left = deadline - now
    if 0 < time_left < URGENCY_WINDOW_SECONDS:
        return min(1.0, round(priority + URGENCY_BOOST, PRIORITY_PRECISION))
    return priority
