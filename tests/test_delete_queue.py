from __future__ import annotations

from core.models import Photo
from core.services.delete_queue import DeleteQueue


def test_add_keeps_insertion_order() -> None:
    queue = DeleteQueue()
    for photo_id in ("a", "b", "c"):
        queue.add(Photo(photo_id))

    assert [p.id for p in queue.queue] == ["a", "b", "c"]
    assert queue.count == 3
    assert len(queue) == 3
    assert not queue.is_empty


def test_remove_by_id_leaves_others_in_order() -> None:
    queue = DeleteQueue()
    for photo_id in ("a", "b", "c"):
        queue.add(Photo(photo_id))

    queue.remove("b")

    assert [p.id for p in queue.queue] == ["a", "c"]
    assert not queue.contains("b")


def test_remove_absent_id_is_noop() -> None:
    queue = DeleteQueue()
    queue.add(Photo("a"))

    queue.remove("missing")

    assert [p.id for p in queue.queue] == ["a"]


def test_remove_last_pops_most_recent() -> None:
    queue = DeleteQueue()
    queue.add(Photo("a"))
    queue.add(Photo("b"))

    assert queue.remove_last() == Photo("b")
    assert queue.remove_last() == Photo("a")
    assert queue.remove_last() is None
    assert queue.is_empty


def test_queue_snapshot_is_a_copy() -> None:
    queue = DeleteQueue()
    queue.add(Photo("a"))

    snapshot = queue.queue
    snapshot.clear()

    assert queue.count == 1


def test_clear_empties_queue() -> None:
    queue = DeleteQueue()
    queue.add(Photo("a"))
    queue.add(Photo("b"))

    queue.clear()

    assert queue.is_empty
    assert queue.queue == []
