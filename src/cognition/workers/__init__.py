"""Worker directory interfaces consumed by the allocator."""

from cognition.workers.directory import (
    DEFAULT_CREDIBILITY,
    ReputationLookup,
    StaticWorkerDirectory,
    WorkerDirectory,
    WorkerRef,
)

__all__ = [
    "DEFAULT_CREDIBILITY",
    "ReputationLookup",
    "StaticWorkerDirectory",
    "WorkerDirectory",
    "WorkerRef",
]
