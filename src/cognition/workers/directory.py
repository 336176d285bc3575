"""Worker directory - read-only view of available workers and their credibility.

The scheduler never owns workers. It asks a :class:`WorkerDirectory` for the
active ones and ranks them by credibility, optionally through a separate
reputation lookup.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any, Protocol

DEFAULT_CREDIBILITY = 0.5

ReputationLookup = Callable[[str], float | None]


@dataclass(frozen=True)
class WorkerRef:
    """A worker as reported by the worker/reputation registry."""

    worker_id: str
    role: str
    credibility: float | None = None
    name: str = ""
    active: bool = True

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> WorkerRef:
        worker_id = data.get("worker_id", data.get("id"))
        if not worker_id or not data.get("role"):
            raise ValueError(f"worker needs an id and a role, got {dict(data)!r}")
        credibility = data.get("credibility")
        return cls(
            worker_id=str(worker_id),
            role=str(data["role"]),
            credibility=float(credibility) if credibility is not None else None,
            name=str(data.get("name", "")),
            active=bool(data.get("active", True)),
        )


class WorkerDirectory(Protocol):
    """Source of active workers consulted on every allocation."""

    def list_active_workers(self) -> list[WorkerRef]: ...


class StaticWorkerDirectory:
    """In-memory directory, handy for embedding and tests."""

    def __init__(self, workers: Iterable[WorkerRef] = ()) -> None:
        self._workers: dict[str, WorkerRef] = {}
        for worker in workers:
            self.register(worker)

    def register(self, worker: WorkerRef) -> WorkerRef:
        self._workers[worker.worker_id] = worker
        return worker

    def deactivate(self, worker_id: str) -> bool:
        worker = self._workers.get(worker_id)
        if worker is None:
            return False
        self._workers[worker_id] = replace(worker, active=False)
        return True

    def set_credibility(self, worker_id: str, credibility: float) -> bool:
        worker = self._workers.get(worker_id)
        if worker is None:
            return False
        self._workers[worker_id] = replace(worker, credibility=credibility)
        return True

    def get(self, worker_id: str) -> WorkerRef | None:
        return self._workers.get(worker_id)

    def list_active_workers(self) -> list[WorkerRef]:
        return [w for w in self._workers.values() if w.active]
