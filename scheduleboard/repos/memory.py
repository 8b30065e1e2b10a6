"""In-memory repositories for blocks, people, templates and the block timeline."""

from __future__ import annotations

import datetime as dt

from scheduleboard.domain.models import (
    Aide,
    Block,
    Student,
    Template,
    TimelineEntry,
)


class BlockRepository:
    """Dict-backed store for Block instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Block] = {}

    def add(self, block: Block) -> None:
        self._store[block.id] = block

    def get(self, block_id: str) -> Block | None:
        return self._store.get(block_id)

    def list_all(self) -> list[Block]:
        return list(self._store.values())

    def list_for_date(self, date: dt.date) -> list[Block]:
        return [b for b in self._store.values() if b.date == date]

    def list_between(self, start: dt.date, end: dt.date) -> list[Block]:
        """Blocks dated from *start* to *end*, both inclusive."""
        return [b for b in self._store.values() if start <= b.date <= end]

    def delete(self, block_id: str) -> Block | None:
        return self._store.pop(block_id, None)


class StudentRepository:
    """Dict-backed roster of students."""

    def __init__(self) -> None:
        self._store: dict[str, Student] = {}

    def add(self, student: Student) -> None:
        self._store[student.id] = student

    def delete(self, student_id: str) -> Student | None:
        return self._store.pop(student_id, None)

    def list_all(self) -> list[Student]:
        return list(self._store.values())


class AideRepository:
    """Dict-backed roster of aides."""

    def __init__(self) -> None:
        self._store: dict[str, Aide] = {}

    def add(self, aide: Aide) -> None:
        self._store[aide.id] = aide

    def delete(self, aide_id: str) -> Aide | None:
        return self._store.pop(aide_id, None)

    def list_all(self) -> list[Aide]:
        return list(self._store.values())


class TemplateRepository:
    def __init__(self) -> None:
        self._store: dict[str, Template] = {}

    def add(self, template: Template) -> None:
        self._store[template.id] = template

    def get(self, template_id: str) -> Template | None:
        return self._store.get(template_id)

    def delete(self, template_id: str) -> Template | None:
        return self._store.pop(template_id, None)

    def list_all(self) -> list[Template]:
        return sorted(self._store.values(), key=lambda t: t.name)


class TimelineRepository:
    """List-backed store for TimelineEntry instances."""

    def __init__(self) -> None:
        self._entries: list[TimelineEntry] = []

    def add(self, entry: TimelineEntry) -> None:
        self._entries.append(entry)

    def list_for_block(self, block_id: str) -> list[TimelineEntry]:
        return sorted(
            [e for e in self._entries if e.block_id == block_id],
            key=lambda e: e.timestamp,
        )
