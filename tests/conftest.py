"""Shared fixtures for scheduler tests."""

from __future__ import annotations

import pytest

from cognition.engine import Budget, CognitionScheduler
from cognition.workers import StaticWorkerDirectory, WorkerRef


class FakeClock:
    """Manually advanced epoch-seconds clock."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def directory() -> StaticWorkerDirectory:
    """Builder, critic, synthesizer and engineer; no historian or auditor."""
    return StaticWorkerDirectory(
        [
            WorkerRef("w-builder", "builder", credibility=0.6, name="Builder"),
            WorkerRef("w-critic", "critic", credibility=0.7, name="Critic"),
            WorkerRef("w-synth", "synthesizer", credibility=0.8, name="Synth"),
            WorkerRef("w-engineer", "engineer", credibility=0.5, name="Engineer"),
        ]
    )


@pytest.fixture
def scheduler(directory: StaticWorkerDirectory, clock: FakeClock) -> CognitionScheduler:
    return CognitionScheduler(directory, clock=clock)


@pytest.fixture
def small_budget() -> Budget:
    return Budget(max_items_per_cycle=2, max_turns_per_item=3, cycle_duration_ms=10_000)
