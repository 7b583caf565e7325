"""
Store opening hours evaluation.

A store's weekly schedule is stored as plain JSON keyed by weekday name::

    {
        "monday": {"open": "08:00", "close": "20:00", "is_closed": false},
        ...
        "sunday": {"is_closed": true}
    }

Times are 24-hour, zero-padded ``HH:MM`` wall-clock values. A day is open
on the half-open interval ``[open, close)``: a store opening at 08:00 and
closing at 20:00 is open at 08:00 and closed at 20:00. Overnight windows
(``close <= open``) are not supported and are rejected by
``validate_schedule``.

Everything in this module is a pure function of its arguments; the
evaluation instant is always passed in. ``get_store_status`` is the only
entry point that falls back to the current time.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from datetime import time as dt_time
from typing import Dict, Mapping, Optional, Union
from zoneinfo import ZoneInfo

from django.utils import timezone

from .exceptions import InvalidScheduleError


# Index 0 is Sunday, matching the weekday numbering clients use.
WEEKDAYS = (
    'sunday',
    'monday',
    'tuesday',
    'wednesday',
    'thursday',
    'friday',
    'saturday',
)

# Order in which schedule errors are reported.
SCHEDULE_DAYS = (
    'monday',
    'tuesday',
    'wednesday',
    'thursday',
    'friday',
    'saturday',
    'sunday',
)

TIME_PATTERN = re.compile(r'^([01][0-9]|2[0-3]):([0-5][0-9])$')

DAYS_TO_SCAN = 7


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """Wall-clock time of day with minute precision."""

    hour: int
    minute: int

    @classmethod
    def parse(cls, value: str) -> 'TimeOfDay':
        """Parse a zero-padded ``HH:MM`` string, raising ValueError otherwise."""
        match = TIME_PATTERN.match(value) if isinstance(value, str) else None
        if match is None:
            raise ValueError(f"Invalid time of day: {value!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def of(cls, moment: datetime) -> 'TimeOfDay':
        return cls(moment.hour, moment.minute)

    def as_time(self) -> dt_time:
        return dt_time(self.hour, self.minute)

    def __str__(self):
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class DayHours:
    """Opening hours for a single weekday."""

    open: Optional[TimeOfDay]
    close: Optional[TimeOfDay]
    is_closed: bool = False

    @property
    def has_window(self) -> bool:
        """True when the day has a usable same-day opening window."""
        return (
            not self.is_closed
            and self.open is not None
            and self.close is not None
            and self.close > self.open
        )

    def contains(self, moment: TimeOfDay) -> bool:
        return self.has_window and self.open <= moment < self.close


@dataclass(frozen=True)
class OpeningInstant:
    """The next moment a store opens."""

    timestamp: datetime
    weekday: str
    time_of_day: TimeOfDay
    is_today: bool


@dataclass(frozen=True)
class StoreStatus:
    """Open/closed state of a store at a given instant."""

    is_open: bool
    display_text: str
    today_hours_text: Optional[str] = None
    next_opening: Optional[OpeningInstant] = None


@dataclass
class ScheduleValidationResult:
    """Outcome of validating a weekly schedule; ``errors`` is keyed by day."""

    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def error(self) -> Optional[str]:
        """First error message, if any."""
        return next(iter(self.errors.values()), None)


def weekday_name(moment: datetime) -> str:
    """Return the lowercase weekday name of ``moment``."""
    return WEEKDAYS[moment.isoweekday() % 7]


def _is_closed_flag(entry: Mapping) -> bool:
    return bool(entry.get('is_closed', entry.get('isClosed', False)))


def day_hours(schedule: Optional[Mapping], day: str) -> Optional[DayHours]:
    """
    Read one day's hours from a raw schedule.

    Returns None when the day is missing or its times are malformed, so
    callers treat such days as closed.
    """
    if not isinstance(schedule, Mapping):
        return None

    entry = schedule.get(day)
    if not isinstance(entry, Mapping):
        return None

    if _is_closed_flag(entry):
        return DayHours(open=None, close=None, is_closed=True)

    try:
        return DayHours(
            open=TimeOfDay.parse(entry.get('open')),
            close=TimeOfDay.parse(entry.get('close')),
        )
    except ValueError:
        return None


def format_time(value: Union[TimeOfDay, str]) -> str:
    """
    Format a time of day on the 12-hour clock.

    >>> format_time('08:00')
    '8:00 AM'
    >>> format_time('20:30')
    '8:30 PM'
    """
    if isinstance(value, str):
        value = TimeOfDay.parse(value)
    hour = value.hour % 12 or 12
    suffix = 'AM' if value.hour < 12 else 'PM'
    return f"{hour}:{value.minute:02d} {suffix}"


def validate_schedule(schedule) -> ScheduleValidationResult:
    """
    Validate a complete weekly schedule.

    All seven days must be present. A day that is not marked closed needs
    both ``open`` and ``close`` in ``HH:MM`` form with ``close`` strictly
    after ``open``.

    Args:
        schedule: Raw schedule mapping as stored on the store.

    Returns:
        ScheduleValidationResult with one message per invalid day
    """
    result = ScheduleValidationResult()

    if not isinstance(schedule, Mapping):
        result.errors['hours'] = 'Store hours must be provided'
        return result

    for day in SCHEDULE_DAYS:
        entry = schedule.get(day)
        if not isinstance(entry, Mapping):
            result.errors[day] = f'Hours for {day} are required'
            continue

        if _is_closed_flag(entry):
            continue

        open_raw = entry.get('open')
        close_raw = entry.get('close')
        if not open_raw or not close_raw:
            result.errors[day] = f'Both open and close times are required for {day}'
            continue

        try:
            opens = TimeOfDay.parse(open_raw)
            closes = TimeOfDay.parse(close_raw)
        except ValueError:
            result.errors[day] = f'Invalid time format for {day}. Use HH:MM format'
            continue

        if closes <= opens:
            result.errors[day] = f'Closing time must be after opening time for {day}'

    return result


def ensure_valid_schedule(schedule) -> None:
    """Raise InvalidScheduleError if ``schedule`` does not validate."""
    result = validate_schedule(schedule)
    if not result.is_valid:
        raise InvalidScheduleError(result.error, errors=result.errors)


def next_opening_time(schedule, from_: datetime) -> Optional[OpeningInstant]:
    """
    Find the next time the store opens after ``from_``.

    Scans ``from_``'s own day and the six days after it. On the starting
    day an opening only counts if it is strictly later than ``from_``;
    on any later day the first day with hours wins.

    Returns:
        OpeningInstant in ``from_``'s timezone, or None when no day within
        the scanned week has hours
    """
    start = from_.date()

    for offset in range(DAYS_TO_SCAN):
        day = start + timedelta(days=offset)
        name = WEEKDAYS[day.isoweekday() % 7]
        hours = day_hours(schedule, name)
        if hours is None or not hours.has_window:
            continue

        opening = datetime.combine(day, hours.open.as_time(), tzinfo=from_.tzinfo)

        if offset == 0:
            if opening > from_:
                return OpeningInstant(opening, name, hours.open, is_today=True)
            continue

        return OpeningInstant(opening, name, hours.open, is_today=False)

    return None


def evaluate(schedule, at: datetime) -> StoreStatus:
    """
    Determine whether a store is open at ``at``.

    ``at`` is read as wall-clock time in the store's timezone; see
    ``get_store_status`` for converting an arbitrary instant.

    Args:
        schedule: Raw weekly schedule
        at: Evaluation instant

    Returns:
        StoreStatus with the display texts and, when closed, the next opening
    """
    if not isinstance(schedule, Mapping):
        return StoreStatus(is_open=False, display_text='Hours not available')

    hours = day_hours(schedule, weekday_name(at))
    if hours is None or not hours.has_window:
        return StoreStatus(
            is_open=False,
            display_text='Closed today',
            next_opening=next_opening_time(schedule, at),
        )

    is_open = hours.contains(TimeOfDay.of(at))

    return StoreStatus(
        is_open=is_open,
        display_text='Open' if is_open else 'Closed',
        today_hours_text=f"{format_time(hours.open)} - {format_time(hours.close)}",
        next_opening=None if is_open else next_opening_time(schedule, at),
    )


def to_store_time(store, at: datetime) -> datetime:
    """Convert ``at`` to the store's local wall-clock time."""
    tz = ZoneInfo(store.timezone)
    if timezone.is_naive(at):
        return timezone.make_aware(at, tz)
    return at.astimezone(tz)


def get_store_status(store, at: Optional[datetime] = None) -> StoreStatus:
    """Evaluate a store's schedule at ``at`` (default: now) in its own timezone."""
    if at is None:
        at = timezone.now()
    return evaluate(store.hours, to_store_time(store, at))
