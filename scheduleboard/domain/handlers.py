"""Domain event handlers, wired up when a ScheduleBoard is built."""

from __future__ import annotations

import logging

from scheduleboard.domain.bus import EventBus
from scheduleboard.domain.events import BlockDeleted, BlockSaved, ConflictDetected
from scheduleboard.domain.models import TimelineEntry, TimelineEntryType
from scheduleboard.repos.memory import (
    AideRepository,
    BlockRepository,
    StudentRepository,
    TimelineRepository,
)
from scheduleboard.services.conflicts import detect_conflicts

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires block-lifecycle handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        block_repo: BlockRepository,
        student_repo: StudentRepository,
        aide_repo: AideRepository,
        timeline_repo: TimelineRepository,
    ) -> None:
        self.bus = bus
        self.block_repo = block_repo
        self.student_repo = student_repo
        self.aide_repo = aide_repo
        self.timeline_repo = timeline_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(BlockSaved, self.on_block_saved)
        self.bus.subscribe(BlockDeleted, self.on_block_deleted)
        self.bus.subscribe(ConflictDetected, self.on_conflict_detected)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_block_saved(self, event: BlockSaved) -> None:
        stored = self.block_repo.get(event.block_id)
        if stored is None:
            return

        # 1. Timeline: created / updated
        entry_type = (
            TimelineEntryType.CREATED if event.created else TimelineEntryType.UPDATED
        )
        self.timeline_repo.add(
            TimelineEntry(
                block_id=stored.id,
                type=entry_type,
                payload={
                    "date": stored.date.isoformat(),
                    "start_time": stored.start_time,
                    "end_time": stored.end_time,
                },
            )
        )

        # 2. Re-check the block's day for conflicts
        conflicts = detect_conflicts(
            self.block_repo.list_for_date(stored.date),
            self.student_repo.list_all(),
            self.aide_repo.list_all(),
        )
        record = conflicts.get(stored.id)
        if record is None:
            return

        self.bus.publish(
            ConflictDetected(
                block_id=stored.id,
                conflicting_block_ids=sorted(record.conflicting_block_ids),
                conflicting_person_ids=sorted(record.conflicting_person_ids),
                kinds=sorted(record.kinds),
            )
        )

    def on_block_deleted(self, event: BlockDeleted) -> None:
        self.timeline_repo.add(
            TimelineEntry(
                block_id=event.block_id,
                type=TimelineEntryType.DELETED,
                payload={"date": event.date.isoformat()},
            )
        )

    def on_conflict_detected(self, event: ConflictDetected) -> None:
        logger.warning(
            "Block %s conflicts with %s (people: %s)",
            event.block_id,
            ", ".join(event.conflicting_block_ids),
            ", ".join(event.conflicting_person_ids),
        )
        self.timeline_repo.add(
            TimelineEntry(
                block_id=event.block_id,
                type=TimelineEntryType.CONFLICT_DETECTED,
                payload={
                    "conflicting_block_ids": event.conflicting_block_ids,
                    "conflicting_person_ids": event.conflicting_person_ids,
                    "kinds": [str(k) for k in event.kinds],
                },
            )
        )
