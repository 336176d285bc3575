"""Tests for the work queue heap."""

from __future__ import annotations

from cognition.engine import PrioritySignals, WorkItem, WorkItemType, WorkQueue


def make_item(item_id: str, priority: float) -> WorkItem:
    return WorkItem(
        item_id=item_id,
        type=WorkItemType.USER_PROMPT,
        scope="*",
        inputs=(),
        created_by="test",
        description="",
        signals=PrioritySignals(),
        priority=priority,
        created_at="2024-01-01T00:00:00+00:00",
    )


class TestWorkQueue:
    """Test ordering and maintenance."""

    def test_pops_highest_first(self) -> None:
        queue = WorkQueue()
        queue.push(make_item("low", 0.2))
        queue.push(make_item("high", 0.9))
        queue.push(make_item("mid", 0.5))

        assert [queue.pop().item_id for _ in range(3)] == ["high", "mid", "low"]
        assert queue.pop() is None

    def test_ties_are_fifo(self) -> None:
        queue = WorkQueue()
        for name in ("a", "b", "c"):
            queue.push(make_item(name, 0.5))

        assert [item.item_id for item in queue.items()] == ["a", "b", "c"]

    def test_len_and_contains(self) -> None:
        queue = WorkQueue()
        queue.push(make_item("a", 0.5))
        assert len(queue) == 1
        assert "a" in queue
        assert "b" not in queue

    def test_peek_does_not_remove(self) -> None:
        queue = WorkQueue()
        queue.push(make_item("a", 0.5))
        assert queue.peek().item_id == "a"
        assert len(queue) == 1

    def test_remove(self) -> None:
        queue = WorkQueue()
        queue.push(make_item("a", 0.9))
        queue.push(make_item("b", 0.5))

        removed = queue.remove("a")
        assert removed.item_id == "a"
        assert queue.remove("a") is None
        assert queue.peek().item_id == "b"
        assert queue.pop().item_id == "b"
        assert queue.pop() is None

    def test_remove_where_in_queue_order(self) -> None:
        queue = WorkQueue()
        queue.push(make_item("a", 0.1))
        queue.push(make_item("b", 0.9))
        queue.push(make_item("c", 0.5))

        removed = queue.remove_where(lambda item: item.priority >= 0.5)
        assert [item.item_id for item in removed] == ["b", "c"]
        assert [item.item_id for item in queue.items()] == ["a"]

    def test_repush_moves_behind_equal_priority(self) -> None:
        queue = WorkQueue()
        first = make_item("a", 0.5)
        queue.push(first)
        queue.push(make_item("b", 0.5))

        queue.pop()
        queue.push(first)

        assert [item.item_id for item in queue.items()] == ["b", "a"]

    def test_push_same_id_replaces(self) -> None:
        queue = WorkQueue()
        queue.push(make_item("a", 0.2))
        queue.push(make_item("a", 0.8))

        assert len(queue) == 1
        assert queue.pop().priority == 0.8
        assert queue.pop() is None

    def test_rescore_keeps_fifo_ties(self) -> None:
        queue = WorkQueue()
        queue.push(make_item("a", 0.1))
        queue.push(make_item("b", 0.9))
        queue.push(make_item("c", 0.4))

        count = queue.rescore(lambda item: 0.5)

        assert count == 3
        assert [item.item_id for item in queue.items()] == ["a", "b", "c"]
        assert all(item.priority == 0.5 for item in queue)

    def test_many_removals_compact(self) -> None:
        queue = WorkQueue()
        for i in range(10):
            queue.push(make_item(f"i{i}", i / 10))
        for i in range(8):
            queue.remove(f"i{i}")

        assert len(queue) == 2
        assert [queue.pop().item_id, queue.pop().item_id] == ["i9", "i8"]
