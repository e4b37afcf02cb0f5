"""Parsing helpers shared by the command modules."""

from __future__ import annotations

import re
from datetime import datetime, time

from tasktree.exceptions import ValidationError
from tasktree.models import DeadlineRange

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_datetime_option(value: str | None, option: str, *, end_of_day: bool = False) -> datetime | None:
    """Parse an ISO-8601 date or datetime given on the command line.

    A bare date means midnight, or the last instant of that day when
    ``end_of_day`` is set. Values without an offset are taken as UTC.
    """
    if value is None or not value.strip():
        return None
    value = value.strip()
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(
            f"{option}: '{value}' is not an ISO date (YYYY-MM-DD or YYYY-MM-DDTHH:MM)"
        ) from None
    if end_of_day and _DATE_ONLY.match(value):
        parsed = datetime.combine(parsed.date(), time.max, tzinfo=parsed.tzinfo)
    return parsed


def deadline_range_option(due_after: str | None, due_before: str | None) -> DeadlineRange | None:
    """Build a DeadlineRange from --due-after/--due-before, or None when neither is set."""
    start = parse_datetime_option(due_after, "--due-after")
    end = parse_datetime_option(due_before, "--due-before", end_of_day=True)
    if start is None and end is None:
        return None
    try:
        return DeadlineRange(start=start, end=end)
    except ValueError as e:
        raise ValidationError("--due-after must not be later than --due-before") from e
