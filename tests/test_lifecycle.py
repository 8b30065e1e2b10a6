"""Tests for the block event bus: handlers, timeline entries, conflicts."""

from __future__ import annotations

import logging
from datetime import date

import pytest

from scheduleboard.domain.bus import EventBus
from scheduleboard.domain.events import BlockDeleted, BlockSaved, ConflictDetected
from scheduleboard.domain.handlers import HandlerRegistry
from scheduleboard.domain.models import (
    Aide,
    Block,
    ConflictKind,
    Student,
    TimelineEntryType,
)
from scheduleboard.repos.memory import (
    AideRepository,
    BlockRepository,
    StudentRepository,
    TimelineRepository,
)

_DAY = date(2024, 1, 1)


@pytest.fixture()
def env():
    """Fresh bus + repos + registry for each test."""
    bus = EventBus()
    block_repo = BlockRepository()
    student_repo = StudentRepository()
    aide_repo = AideRepository()
    timeline_repo = TimelineRepository()

    registry = HandlerRegistry(
        bus=bus,
        block_repo=block_repo,
        student_repo=student_repo,
        aide_repo=aide_repo,
        timeline_repo=timeline_repo,
    )
    student_repo.add(Student(id="s1", name="Ana"))
    aide_repo.add(Aide(id="a1", name="Cam"))

    class Env:
        pass

    e = Env()
    e.bus = bus
    e.block_repo = block_repo
    e.student_repo = student_repo
    e.aide_repo = aide_repo
    e.timeline_repo = timeline_repo
    e.registry = registry
    return e


def _make_block(**overrides) -> Block:
    defaults = dict(
        date=_DAY,
        start_time="09:00",
        end_time="10:00",
        activity_id="reading",
        student_ids=["s1"],
    )
    defaults.update(overrides)
    return Block(**defaults)


def _types(env, block_id: str) -> list[TimelineEntryType]:
    return [e.type for e in env.timeline_repo.list_for_block(block_id)]


# ---------------------------------------------------------------------------
# Bus
# ---------------------------------------------------------------------------


def test_bus_calls_handlers_in_order():
    bus = EventBus()
    calls: list[str] = []
    bus.subscribe(BlockSaved, lambda e: calls.append("first"))
    bus.subscribe(BlockSaved, lambda e: calls.append("second"))
    bus.subscribe(BlockDeleted, lambda e: calls.append("other"))

    bus.publish(BlockSaved(block_id="x"))

    assert calls == ["first", "second"]


def test_bus_without_subscribers_is_a_no_op():
    EventBus().publish(BlockSaved(block_id="x"))


# ---------------------------------------------------------------------------
# Timeline entries
# ---------------------------------------------------------------------------


def test_block_saved_adds_created_entry(env):
    block = _make_block()
    env.block_repo.add(block)

    env.bus.publish(BlockSaved(block_id=block.id))

    entries = env.timeline_repo.list_for_block(block.id)
    assert [e.type for e in entries] == [TimelineEntryType.CREATED]
    assert entries[0].payload == {
        "date": "2024-01-01",
        "start_time": "09:00",
        "end_time": "10:00",
    }


def test_block_saved_as_update(env):
    block = _make_block()
    env.block_repo.add(block)

    env.bus.publish(BlockSaved(block_id=block.id, created=False))

    assert _types(env, block.id) == [TimelineEntryType.UPDATED]


def test_block_saved_for_missing_block_is_ignored(env):
    env.bus.publish(BlockSaved(block_id="missing"))
    assert env.timeline_repo.list_for_block("missing") == []


def test_block_deleted_adds_entry(env):
    env.bus.publish(BlockDeleted(block_id="gone", date=_DAY))

    entries = env.timeline_repo.list_for_block("gone")
    assert [e.type for e in entries] == [TimelineEntryType.DELETED]
    assert entries[0].payload == {"date": "2024-01-01"}


# ---------------------------------------------------------------------------
# Conflict detection
# ---------------------------------------------------------------------------


def test_no_conflict_no_entry(env):
    first = _make_block()
    second = _make_block(start_time="10:00", end_time="11:00")
    env.block_repo.add(first)
    env.block_repo.add(second)

    env.bus.publish(BlockSaved(block_id=second.id))

    assert TimelineEntryType.CONFLICT_DETECTED not in _types(env, second.id)


def test_overlap_publishes_conflict(env):
    existing = _make_block(aide_ids=["a1"])
    env.block_repo.add(existing)
    new_block = _make_block(start_time="09:30", end_time="10:30", aide_ids=["a1"])
    env.block_repo.add(new_block)

    seen: list[ConflictDetected] = []
    env.bus.subscribe(ConflictDetected, seen.append)

    env.bus.publish(BlockSaved(block_id=new_block.id))

    assert len(seen) == 1
    assert seen[0].conflicting_block_ids == [existing.id]
    assert seen[0].conflicting_person_ids == ["a1", "s1"]
    assert seen[0].kinds == [ConflictKind.AIDE, ConflictKind.STUDENT]

    entries = env.timeline_repo.list_for_block(new_block.id)
    conflict_entries = [
        e for e in entries if e.type == TimelineEntryType.CONFLICT_DETECTED
    ]
    assert len(conflict_entries) == 1
    assert conflict_entries[0].payload["conflicting_block_ids"] == [existing.id]
    assert conflict_entries[0].payload["kinds"] == ["aide", "student"]


def test_conflict_only_checked_on_the_saved_blocks_date(env):
    env.block_repo.add(_make_block(date=date(2024, 1, 2)))
    block = _make_block()
    env.block_repo.add(block)

    env.bus.publish(BlockSaved(block_id=block.id))

    assert TimelineEntryType.CONFLICT_DETECTED not in _types(env, block.id)


def test_conflict_is_logged(env, caplog):
    existing = _make_block()
    new_block = _make_block()
    env.block_repo.add(existing)
    env.block_repo.add(new_block)

    with caplog.at_level(logging.WARNING, logger="scheduleboard.domain.handlers"):
        env.bus.publish(BlockSaved(block_id=new_block.id))

    assert f"Block {new_block.id} conflicts with {existing.id}" in caplog.text
