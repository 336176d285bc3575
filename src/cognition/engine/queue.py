"""Work Queue - max-priority heap of pending work items.

Entries are ``[-priority, sequence, item]``. The sequence number comes from a
monotonic counter, so among equal priorities the earlier insertion pops first.
Removal by id invalidates the entry in place; dead entries are skipped on pop
and compacted once they outnumber live ones.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from collections.abc import Callable, Iterator

from cognition.engine.models import WorkItem

logger = logging.getLogger("cognition.engine.queue")


class WorkQueue:
    """Pending work items ordered by descending priority, FIFO on ties."""

    def __init__(self) -> None:
        self._heap: list[list] = []
        self._entries: dict[str, list] = {}
        self._counter = itertools.count()
        self._dead = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._entries

    def __iter__(self) -> Iterator[WorkItem]:
        return iter(self.items())

    def push(self, item: WorkItem) -> None:
        """Insert an item behind every queued item of equal or higher priority."""
        if item.item_id in self._entries:
            self.remove(item.item_id)
        entry = [-item.priority, next(self._counter), item]
        self._entries[item.item_id] = entry
        heapq.heappush(self._heap, entry)

    def pop(self) -> WorkItem | None:
        """Remove and return the highest-priority item, or None when empty."""
        while self._heap:
            _, _, item = heapq.heappop(self._heap)
            if item is None:
                self._dead -= 1
                continue
            del self._entries[item.item_id]
            return item
        return None

    def peek(self) -> WorkItem | None:
        while self._heap and self._heap[0][2] is None:
            heapq.heappop(self._heap)
            self._dead -= 1
        return self._heap[0][2] if self._heap else None

    def get(self, item_id: str) -> WorkItem | None:
        entry = self._entries.get(item_id)
        return entry[2] if entry else None

    def remove(self, item_id: str) -> WorkItem | None:
        """Remove an item by id. Returns None if it is not queued."""
        entry = self._entries.pop(item_id, None)
        if entry is None:
            return None
        item = entry[2]
        entry[2] = None
        self._dead += 1
        if self._dead > len(self._entries):
            self._compact()
        return item

    def remove_where(self, predicate: Callable[[WorkItem], bool]) -> list[WorkItem]:
        """Remove every item matching ``predicate``, returned in queue order."""
        matched = [item for item in self.items() if predicate(item)]
        for item in matched:
            self.remove(item.item_id)
        return matched

    def rescore(self, score: Callable[[WorkItem], float]) -> int:
        """Recompute every priority and rebuild the heap.

        Original insertion sequence is kept, so ties still resolve FIFO.
        """
        live = [entry for entry in self._heap if entry[2] is not None]
        for entry in live:
            item = entry[2]
            item.priority = score(item)
            entry[0] = -item.priority
        heapq.heapify(live)
        self._heap = live
        self._dead = 0
        logger.debug("Rescored %d queued items", len(live))
        return len(live)

    def items(self) -> list[WorkItem]:
        """Live items in pop order."""
        return [entry[2] for entry in sorted(self._entries.values(), key=lambda e: (e[0], e[1]))]

    def _compact(self) -> None:
        self._heap = [entry for entry in self._heap if entry[2] is not None]
        heapq.heapify(self._heap)
        self._dead = 0
