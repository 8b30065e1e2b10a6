"""Service for detecting scheduling conflicts between blocks.

A conflict is two blocks on the same date that share a person in the same
role (student or aide) and whose times overlap.  Overlap is half-open:
a block ending at 10:00 does NOT conflict with one starting at 10:00.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections import defaultdict
from collections.abc import Callable, Sequence

from scheduleboard.domain.models import (
    Aide,
    Block,
    ConflictKind,
    ConflictRecord,
    Student,
)
from scheduleboard.services.timeutils import intervals_overlap, time_to_minutes

logger = logging.getLogger(__name__)


def detect_conflicts(
    blocks: Sequence[Block],
    students: Sequence[Student],
    aides: Sequence[Aide],
) -> dict[str, ConflictRecord]:
    """Return a map of block id -> ConflictRecord for every conflicted block.

    Blocks are only compared against blocks on the same date.  Students and
    aides are checked independently; a block can collect conflicts from
    several people and from both roles.  Inputs are never mutated.
    """
    conflicts: dict[str, ConflictRecord] = {}

    for day_blocks in _group_by_date(blocks).values():
        _check_role(
            day_blocks, students, ConflictKind.STUDENT, lambda b: b.student_ids, conflicts
        )
        _check_role(
            day_blocks, aides, ConflictKind.AIDE, lambda b: b.aide_ids, conflicts
        )

    if conflicts:
        logger.debug("Detected conflicts on %d block(s)", len(conflicts))
    return conflicts


def blocks_overlap(first: Block, second: Block) -> bool:
    """True if the two blocks' times overlap, ignoring date and people."""
    return intervals_overlap(
        time_to_minutes(first.start_time),
        time_to_minutes(first.end_time),
        time_to_minutes(second.start_time),
        time_to_minutes(second.end_time),
    )


def _group_by_date(blocks: Sequence[Block]) -> dict[dt.date, list[Block]]:
    by_date: dict[dt.date, list[Block]] = defaultdict(list)
    for block in blocks:
        by_date[block.date].append(block)
    return by_date


def _check_role(
    blocks: list[Block],
    people: Sequence[Student] | Sequence[Aide],
    kind: ConflictKind,
    ids_of: Callable[[Block], list[str]],
    conflicts: dict[str, ConflictRecord],
) -> None:
    for person in people:
        person_blocks = [b for b in blocks if person.id in ids_of(b)]

        # Pairs are i < j in input order, so a block is never compared to itself.
        for i, first in enumerate(person_blocks):
            for second in person_blocks[i + 1 :]:
                if not blocks_overlap(first, second):
                    continue
                _record(conflicts, first.id, second.id, person.id, kind)
                _record(conflicts, second.id, first.id, person.id, kind)


def _record(
    conflicts: dict[str, ConflictRecord],
    block_id: str,
    other_block_id: str,
    person_id: str,
    kind: ConflictKind,
) -> None:
    record = conflicts.get(block_id)
    if record is None:
        record = conflicts[block_id] = ConflictRecord(block_id=block_id)
    record.add(kind, other_block_id, person_id)
