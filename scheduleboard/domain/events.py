"""Domain events emitted as blocks are saved and removed."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel

from scheduleboard.domain.models import ConflictKind


class BlockSaved(BaseModel):
    """Fired after a block is stored, either newly created or updated."""

    block_id: str
    created: bool = True


class BlockDeleted(BaseModel):
    """Fired after a block is removed from the store."""

    block_id: str
    date: dt.date


class ConflictDetected(BaseModel):
    """Fired when a saved block overlaps another block through a shared person."""

    block_id: str
    conflicting_block_ids: list[str]
    conflicting_person_ids: list[str]
    kinds: list[ConflictKind]
