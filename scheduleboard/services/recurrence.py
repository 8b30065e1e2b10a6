"""Service for expanding recurrence rules into concrete block dates, and for
reading / writing the JSON form of a rule stored on each block."""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterator
from itertools import islice

from dateutil.rrule import DAILY, WEEKLY, FR, MO, SA, SU, TH, TU, WE, rrule
from pydantic import TypeAdapter, ValidationError

from scheduleboard.domain.models import (
    CustomRecurrence,
    DailyRecurrence,
    NoRecurrence,
    RecurrenceRule,
    WeeklyRecurrence,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DATES = 365  # hard safety cap on a single expansion
MATCH_HORIZON = 1000

# Rules number weekdays 0=Sunday .. 6=Saturday.
_WEEKDAY_MAP = {0: SU, 1: MO, 2: TU, 3: WE, 4: TH, 5: FR, 6: SA}
_DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

_RULE_ADAPTER: TypeAdapter[RecurrenceRule] = TypeAdapter(RecurrenceRule)


def expand_recurrence(
    base_date: dt.date,
    rule: RecurrenceRule,
    max_dates: int = DEFAULT_MAX_DATES,
) -> list[dt.date]:
    """Expand *rule* from *base_date* into an ascending list of dates.

    The base date is always the first occurrence.  Expansion stops at the
    rule's ``end_date`` (inclusive), at ``max_occurrences``, or when the
    list reaches *max_dates*, whichever comes first.
    """
    if max_dates < 1:
        raise ValueError("max_dates must be at least 1")

    if not isinstance(rule, (DailyRecurrence, WeeklyRecurrence, CustomRecurrence)):
        return [base_date]

    capped = rule.max_occurrences is None or rule.max_occurrences > max_dates
    limit = max_dates if capped else rule.max_occurrences

    following = _following_dates(base_date, rule)
    dates = [base_date, *islice(following, limit - 1)]

    if capped and len(dates) == max_dates and next(following, None) is not None:
        logger.info(
            "Recurrence from %s reached the %d-date cap; later dates dropped",
            base_date,
            max_dates,
        )
    return dates


def recurrence_matches(
    date: dt.date,
    base_date: dt.date,
    rule: RecurrenceRule,
    horizon: int = MATCH_HORIZON,
) -> bool:
    """Does expanding *rule* from *base_date* produce *date*?"""
    return date in expand_recurrence(base_date, rule, horizon)


def recurrence_display_text(rule: RecurrenceRule) -> str:
    if isinstance(rule, DailyRecurrence):
        return "Daily" if rule.interval == 1 else f"Every {rule.interval} days"
    if isinstance(rule, WeeklyRecurrence):
        return "Weekly" if rule.interval == 1 else f"Every {rule.interval} weeks"
    if isinstance(rule, CustomRecurrence):
        if not rule.days_of_week:
            return "Custom pattern"
        return "Custom: " + ", ".join(_DAY_NAMES[d] for d in sorted(rule.days_of_week))
    return "No recurrence"


def serialize_recurrence(rule: RecurrenceRule) -> str:
    return rule.model_dump_json(by_alias=True, exclude_none=True)


def parse_recurrence(text: str | None) -> RecurrenceRule:
    """Read a stored rule, falling back to no recurrence instead of raising.

    Covers empty values, legacy plain-text ``"none"``, malformed JSON, a
    missing or unknown ``type`` and out-of-range fields.
    """
    if text is None or text.strip() in ("", "none"):
        logger.debug("Empty or legacy recurrence value %r, using none", text)
        return NoRecurrence()

    try:
        return _RULE_ADAPTER.validate_json(text)
    except ValidationError as exc:
        logger.warning(
            "Unreadable recurrence %r (%d error(s)), treating as non-repeating",
            text,
            exc.error_count(),
        )
        return NoRecurrence()


def _following_dates(
    base_date: dt.date,
    rule: DailyRecurrence | WeeklyRecurrence | CustomRecurrence,
) -> Iterator[dt.date]:
    """Lazily yield the occurrences after *base_date*, honouring ``end_date``."""
    if base_date == dt.date.max:
        return iter(())

    start = dt.datetime.combine(base_date, dt.time.min)
    until = dt.datetime.combine(rule.end_date, dt.time.min) if rule.end_date else None

    if isinstance(rule, CustomRecurrence) and rule.days_of_week:
        # Scan from the day after the base date; the base date itself need
        # not fall on one of the listed weekdays.
        occurrences = rrule(
            WEEKLY,
            byweekday=[_WEEKDAY_MAP[d] for d in rule.days_of_week],
            dtstart=start + dt.timedelta(days=1),
            until=until,
        )
        return (occ.date() for occ in occurrences)

    if isinstance(rule, DailyRecurrence):
        occurrences = rrule(DAILY, interval=rule.interval, dtstart=start, until=until)
    elif isinstance(rule, WeeklyRecurrence):
        occurrences = rrule(WEEKLY, interval=rule.interval, dtstart=start, until=until)
    else:
        # Custom rule with no weekdays selected: plain weekly.
        occurrences = rrule(WEEKLY, interval=1, dtstart=start, until=until)

    # dtstart is always the first rrule occurrence; the caller already has it.
    return (occ.date() for occ in islice(occurrences, 1, None))
