"""Recurrence evaluation: is a rule due on a given day, and when does it next occur.

Both functions are pure: same inputs -> same outputs, no hidden state.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Optional, TypeVar, Union

from dateutil.relativedelta import relativedelta

from allfreedo.models.recurrence import WEEKDAY_ORDER, RecurrenceFrequency, RecurrenceRule, Weekday

D = TypeVar("D", date, datetime)


def _as_date(value: Optional[Union[date, datetime]]) -> date:
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value


def _weekday_of(d: Union[date, datetime]) -> Weekday:
    # Python weekday: Monday=0 ... Sunday=6
    return WEEKDAY_ORDER[d.weekday()]


def _in_biweekly_week(d: Union[date, datetime]) -> bool:
    """Coarse "every other week" filter anchored to the calendar month.

    Days 1-6, 14-20 and 28-31 pass; the pattern restarts every month.
    """
    return (d.day // 7) % 2 == 0


def _with_month(value: D, year: int, month: int) -> D:
    last_day = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(value.day, last_day))


def is_due_today(rule: RecurrenceRule, today: Optional[Union[date, datetime]] = None) -> bool:
    """Return True if an occurrence of ``rule`` falls on ``today``.

    - daily: always due (interval is not consulted here)
    - weekly: today's weekday is listed in ``by_day``
    - biweekly: as weekly, and ``floor(day_of_month / 7)`` is even
    - monthly: today's day-of-month is listed in ``by_month_day``
    - yearly: today's month is listed in ``by_month`` (the whole month matches)

    Empty or absent lists and unknown frequencies are never due.
    """
    day = _as_date(today)
    frequency = rule.frequency

    if frequency == RecurrenceFrequency.DAILY:
        return True

    if frequency in (RecurrenceFrequency.WEEKLY, RecurrenceFrequency.BIWEEKLY):
        if not rule.by_day:
            return False
        if frequency == RecurrenceFrequency.BIWEEKLY and not _in_biweekly_week(day):
            return False
        return _weekday_of(day) in rule.weekdays()

    if frequency == RecurrenceFrequency.MONTHLY:
        if not rule.by_month_day:
            return False
        return day.day in rule.by_month_day

    if frequency == RecurrenceFrequency.YEARLY:
        if not rule.by_month:
            return False
        return day.month in rule.by_month

    return False


def next_occurrence(rule: RecurrenceRule, from_date: D) -> Optional[D]:
    """Compute the next occurrence strictly after ``from_date``.

    Accepts a date or a datetime; a datetime keeps its time of day. Month and year
    steps clamp to the last day of the target month. Returns None for unknown
    frequencies.
    """
    frequency = rule.frequency
    interval = rule.interval

    if frequency == RecurrenceFrequency.DAILY:
        return from_date + timedelta(days=interval)

    if frequency == RecurrenceFrequency.WEEKLY:
        days = rule.weekdays()
        if days:
            for offset in range(1, 8):
                candidate = from_date + timedelta(days=offset)
                if _weekday_of(candidate) in days:
                    return candidate
        return from_date + timedelta(days=interval * 7)

    if frequency == RecurrenceFrequency.BIWEEKLY:
        days = rule.weekdays()
        if days:
            # Same filter as is_due_today so the two never disagree.
            for offset in range(1, 15):
                candidate = from_date + timedelta(days=offset)
                if _weekday_of(candidate) in days and _in_biweekly_week(candidate):
                    return candidate
        return from_date + timedelta(days=interval * 14)

    if frequency == RecurrenceFrequency.MONTHLY:
        if rule.by_month_day:
            month_days = sorted(rule.by_month_day)
            last_day = calendar.monthrange(from_date.year, from_date.month)[1]
            for d in month_days:
                if from_date.day < d <= last_day:
                    return from_date.replace(day=d)
            target = from_date.replace(day=1) + relativedelta(months=interval)
            target_last = calendar.monthrange(target.year, target.month)[1]
            return target.replace(day=min(month_days[0], target_last))
        return from_date + relativedelta(months=interval)

    if frequency == RecurrenceFrequency.YEARLY:
        if rule.by_month:
            months = sorted(rule.by_month)
            for m in months:
                if m > from_date.month:
                    return _with_month(from_date, from_date.year, m)
            return _with_month(from_date, from_date.year + interval, months[0])
        return from_date + relativedelta(years=interval)

    return None
