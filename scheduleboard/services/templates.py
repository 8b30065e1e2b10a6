"""Service for saving a day's blocks as a reusable template and stamping that
template onto another date."""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence

from scheduleboard.domain.models import Block, Template, TemplateBlock

_TEMPLATE_FIELDS = {
    "start_time",
    "end_time",
    "activity_id",
    "student_ids",
    "aide_ids",
    "notes",
    "recurrence",
}


def save_template(name: str, blocks: Sequence[Block]) -> Template:
    """Build a Template from *blocks*, dropping ids and dates."""
    entries = [
        TemplateBlock.model_validate(block.model_dump(include=_TEMPLATE_FIELDS))
        for block in sorted(blocks, key=lambda b: b.start_time)
    ]
    return Template(name=name, blocks=entries)


def apply_template(template: Template, target_date: dt.date) -> list[Block]:
    """Return fresh Blocks (new ids) for every template entry on *target_date*."""
    return [
        Block(date=target_date, **entry.model_dump())
        for entry in template.blocks
    ]
