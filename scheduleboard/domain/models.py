"""Domain models for the schedule board."""

from __future__ import annotations

import datetime as dt
import uuid
from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from scheduleboard.services.timeutils import minutes_to_time, time_to_minutes

NO_RECURRENCE_TEXT = '{"type":"none"}'


class ConflictKind(StrEnum):
    STUDENT = "student"
    AIDE = "aide"


class TimelineEntryType(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    CONFLICT_DETECTED = "conflict_detected"


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _dedupe_ids(ids: list[str]) -> list[str]:
    """Collapse duplicate person ids, keeping first-seen order."""
    return list(dict.fromkeys(ids))


# ---------------------------------------------------------------------------
# People
# ---------------------------------------------------------------------------


class _Person(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    color: str = "#9ca3af"
    created_at: dt.datetime = Field(default_factory=_utcnow)


class Student(_Person):
    pass


class Aide(_Person):
    pass


# ---------------------------------------------------------------------------
# Recurrence rules
#
# A tagged union on ``type``.  Aliases are camelCase so the JSON stored on
# each block keeps the ``daysOfWeek`` / ``endDate`` / ``maxOccurrences`` keys.
# ---------------------------------------------------------------------------


class _RecurrenceBase(BaseModel):
    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )


class NoRecurrence(_RecurrenceBase):
    type: Literal["none"] = "none"


class _BoundedRecurrence(_RecurrenceBase):
    end_date: dt.date | None = None
    max_occurrences: int | None = Field(default=None, ge=1)


class DailyRecurrence(_BoundedRecurrence):
    type: Literal["daily"] = "daily"
    interval: int = Field(default=1, ge=1)


class WeeklyRecurrence(_BoundedRecurrence):
    type: Literal["weekly"] = "weekly"
    interval: int = Field(default=1, ge=1)


class CustomRecurrence(_BoundedRecurrence):
    """Repeats on each listed weekday, 0=Sunday .. 6=Saturday."""

    type: Literal["custom"] = "custom"
    days_of_week: list[Annotated[int, Field(ge=0, le=6)]] = Field(default_factory=list)

    @field_validator("days_of_week")
    @classmethod
    def _normalise_days(cls, days: list[int]) -> list[int]:
        return sorted(set(days))


RecurrenceRule = Annotated[
    Union[NoRecurrence, DailyRecurrence, WeeklyRecurrence, CustomRecurrence],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


class _BlockBody(BaseModel):
    """Fields shared by stored blocks, drafts and template entries."""

    start_time: str
    end_time: str
    activity_id: str
    student_ids: list[str] = Field(default_factory=list)
    aide_ids: list[str] = Field(default_factory=list)
    notes: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _canonical_time(cls, value: str) -> str:
        return minutes_to_time(time_to_minutes(value))

    @field_validator("student_ids", "aide_ids")
    @classmethod
    def _unique_ids(cls, ids: list[str]) -> list[str]:
        return _dedupe_ids(ids)

    @model_validator(mode="after")
    def _end_after_start(self) -> _BlockBody:
        if time_to_minutes(self.end_time) <= time_to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class Block(_BlockBody):
    id: str = Field(default_factory=_new_id)
    date: dt.date
    recurrence: str = NO_RECURRENCE_TEXT
    created_at: dt.datetime = Field(default_factory=_utcnow)


class TemplateBlock(_BlockBody):
    recurrence: str = NO_RECURRENCE_TEXT


class Template(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    blocks: list[TemplateBlock] = Field(default_factory=list)
    created_at: dt.datetime = Field(default_factory=_utcnow)


class TimelineEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    block_id: str
    timestamp: dt.datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------


class ConflictFinding(BaseModel):
    """One side of an overlapping pair: the other block and the shared person."""

    model_config = ConfigDict(frozen=True)

    kind: ConflictKind
    other_block_id: str
    person_id: str


class ConflictRecord(BaseModel):
    """Every conflict found for a single block, across both roles."""

    block_id: str
    kinds: set[ConflictKind] = Field(default_factory=set)
    conflicting_block_ids: set[str] = Field(default_factory=set)
    conflicting_person_ids: set[str] = Field(default_factory=set)
    findings: set[ConflictFinding] = Field(default_factory=set)

    @property
    def kind(self) -> ConflictKind:
        """Primary kind for display; student conflicts take precedence."""
        if ConflictKind.STUDENT in self.kinds:
            return ConflictKind.STUDENT
        return ConflictKind.AIDE

    def add(self, kind: ConflictKind, other_block_id: str, person_id: str) -> None:
        self.kinds.add(kind)
        self.conflicting_block_ids.add(other_block_id)
        self.conflicting_person_ids.add(person_id)
        self.findings.add(
            ConflictFinding(kind=kind, other_block_id=other_block_id, person_id=person_id)
        )

    def block_ids_for(self, kind: ConflictKind) -> set[str]:
        return {f.other_block_id for f in self.findings if f.kind == kind}

    def person_ids_for(self, kind: ConflictKind) -> set[str]:
        return {f.person_id for f in self.findings if f.kind == kind}


# ---------------------------------------------------------------------------
# Request DTOs
# ---------------------------------------------------------------------------


class BlockDraft(_BlockBody):
    """A block to be created; ``date`` is the base date of the recurrence."""

    date: dt.date
    recurrence: RecurrenceRule = Field(default_factory=NoRecurrence)


class BlockUpdate(BaseModel):
    date: dt.date | None = None
    start_time: str | None = None
    end_time: str | None = None
    activity_id: str | None = None
    student_ids: list[str] | None = None
    aide_ids: list[str] | None = None
    notes: str | None = None
