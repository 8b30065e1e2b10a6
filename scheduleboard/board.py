"""ScheduleBoard: the in-process entry point that ties the repositories, the
event bus and the conflict / recurrence services together."""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterable

from scheduleboard.config import Settings, settings as default_settings
from scheduleboard.domain.bus import EventBus
from scheduleboard.domain.events import BlockDeleted, BlockSaved
from scheduleboard.domain.handlers import HandlerRegistry
from scheduleboard.domain.models import (
    Aide,
    Block,
    BlockDraft,
    BlockUpdate,
    ConflictRecord,
    RecurrenceRule,
    Student,
    Template,
    TimelineEntry,
)
from scheduleboard.logging_config import setup_logging
from scheduleboard.repos.memory import (
    AideRepository,
    BlockRepository,
    StudentRepository,
    TemplateRepository,
    TimelineRepository,
)
from scheduleboard.services import templates as template_service
from scheduleboard.services.conflicts import detect_conflicts
from scheduleboard.services.recurrence import (
    expand_recurrence,
    parse_recurrence,
    recurrence_display_text,
    recurrence_matches,
    serialize_recurrence,
)

logger = logging.getLogger(__name__)


class BlockNotFoundError(LookupError):
    pass


class TemplateNotFoundError(LookupError):
    pass


class PersonNotFoundError(LookupError):
    pass


class ScheduleBoard:
    """Owns one board's repositories and bus; every call works on explicit data."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or default_settings
        self.bus = EventBus()
        self.block_repo = BlockRepository()
        self.student_repo = StudentRepository()
        self.aide_repo = AideRepository()
        self.template_repo = TemplateRepository()
        self.timeline_repo = TimelineRepository()

        self.handlers = HandlerRegistry(
            bus=self.bus,
            block_repo=self.block_repo,
            student_repo=self.student_repo,
            aide_repo=self.aide_repo,
            timeline_repo=self.timeline_repo,
        )

    # ── People ────────────────────────────────────────────────────────

    def add_student(self, student: Student) -> Student:
        self.student_repo.add(student)
        return student

    def add_aide(self, aide: Aide) -> Aide:
        self.aide_repo.add(aide)
        return aide

    def remove_student(self, student_id: str) -> None:
        """Take a student off the roster; their blocks stay but are no longer checked for them."""
        if self.student_repo.delete(student_id) is None:
            raise PersonNotFoundError(student_id)
        logger.info("Removed student %s from the roster", student_id)

    def remove_aide(self, aide_id: str) -> None:
        if self.aide_repo.delete(aide_id) is None:
            raise PersonNotFoundError(aide_id)
        logger.info("Removed aide %s from the roster", aide_id)

    def students(self) -> list[Student]:
        return self.student_repo.list_all()

    def aides(self) -> list[Aide]:
        return self.aide_repo.list_all()

    # ── Blocks ────────────────────────────────────────────────────────

    def create_blocks(self, draft: BlockDraft) -> list[Block]:
        """Materialise one stored block per date the draft's recurrence yields.

        All blocks share the draft's activity, people, times and notes and
        carry the serialized rule; each gets its own id.
        """
        dates = expand_recurrence(
            draft.date, draft.recurrence, self.settings.MAX_RECURRENCE_DATES
        )
        recurrence_text = serialize_recurrence(draft.recurrence)
        body = draft.model_dump(exclude={"date", "recurrence"})

        blocks = [Block(date=d, recurrence=recurrence_text, **body) for d in dates]
        self._store_new(blocks)
        logger.info(
            "Created %d block(s) from %s (%s)",
            len(blocks),
            draft.date,
            recurrence_display_text(draft.recurrence),
        )
        return blocks

    def update_block(self, block_id: str, update: BlockUpdate) -> Block:
        """Apply *update* to a stored block; the merged block is re-validated."""
        stored = self.get_block(block_id)
        merged = Block.model_validate(
            {**stored.model_dump(), **update.model_dump(exclude_unset=True)}
        )
        self.block_repo.add(merged)
        self.bus.publish(BlockSaved(block_id=merged.id, created=False))
        return merged

    def delete_block(self, block_id: str) -> None:
        removed = self.block_repo.delete(block_id)
        if removed is None:
            raise BlockNotFoundError(block_id)
        self.bus.publish(BlockDeleted(block_id=removed.id, date=removed.date))

    def get_block(self, block_id: str) -> Block:
        block = self.block_repo.get(block_id)
        if block is None:
            raise BlockNotFoundError(block_id)
        return block

    def blocks_for_date(self, date: dt.date) -> list[Block]:
        return sorted(self.block_repo.list_for_date(date), key=lambda b: b.start_time)

    def recurrence_for(self, block_id: str) -> RecurrenceRule:
        return parse_recurrence(self.get_block(block_id).recurrence)

    def recurs_on(self, block_id: str, date: dt.date) -> bool:
        """Would the block's stored rule, expanded from the block's own date, hit *date*?"""
        block = self.get_block(block_id)
        return recurrence_matches(
            date,
            block.date,
            parse_recurrence(block.recurrence),
            self.settings.RECURRENCE_MATCH_HORIZON,
        )

    def timeline(self, block_id: str) -> list[TimelineEntry]:
        return self.timeline_repo.list_for_block(block_id)

    # ── Conflicts ─────────────────────────────────────────────────────

    def conflicts(
        self, dates: Iterable[dt.date] | None = None
    ) -> dict[str, ConflictRecord]:
        """Conflict map for the given dates, or for every stored block."""
        if dates is None:
            blocks = self.block_repo.list_all()
        else:
            wanted = set(dates)
            blocks = [b for b in self.block_repo.list_all() if b.date in wanted]
        return detect_conflicts(blocks, self.students(), self.aides())

    def conflicts_between(
        self, start: dt.date, end: dt.date
    ) -> dict[str, ConflictRecord]:
        """Conflict map for a date range such as a week view, both ends inclusive."""
        return detect_conflicts(
            self.block_repo.list_between(start, end), self.students(), self.aides()
        )

    # ── Templates ─────────────────────────────────────────────────────

    def save_template(self, name: str, date: dt.date) -> Template:
        template = template_service.save_template(name, self.blocks_for_date(date))
        self.template_repo.add(template)
        return template

    def apply_template(self, template_id: str, date: dt.date) -> list[Block]:
        template = self.template_repo.get(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        blocks = template_service.apply_template(template, date)
        self._store_new(blocks)
        return blocks

    def delete_template(self, template_id: str) -> None:
        if self.template_repo.delete(template_id) is None:
            raise TemplateNotFoundError(template_id)

    def templates(self) -> list[Template]:
        return self.template_repo.list_all()

    # ------------------------------------------------------------------

    def _store_new(self, blocks: list[Block]) -> None:
        for block in blocks:
            self.block_repo.add(block)
        for block in blocks:
            self.bus.publish(BlockSaved(block_id=block.id))


def create_board(settings: Settings | None = None) -> ScheduleBoard:
    """Configure logging and return a fresh, empty board."""
    setup_logging(settings)
    return ScheduleBoard(settings)
