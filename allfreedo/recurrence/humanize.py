"""Human-readable schedule strings for recurrence rules."""

from __future__ import annotations

from typing import Iterable, List

from allfreedo.models.recurrence import WEEKDAY_NAMES, RecurrenceFrequency, RecurrenceRule, weekday_from_token

_MONTH_NAMES: List[str] = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def _format_day(token: str) -> str:
    day = weekday_from_token(token)
    return WEEKDAY_NAMES[day] if day is not None else str(token)


def _format_month(month: int) -> str:
    if 1 <= month <= len(_MONTH_NAMES):
        return _MONTH_NAMES[month - 1]
    return str(month)


def _join(values: Iterable[str]) -> str:
    return ", ".join(values)


def _days_label(count: int) -> str:
    return "days" if count > 1 else "day"


def rule_to_human_string(rule: RecurrenceRule) -> str:
    """Describe a rule, e.g. "Weekly on Monday, Friday" or "Every 3 months on days 1, 15".

    Listed values keep the order they were given in.
    """
    frequency = rule.frequency
    interval = rule.interval

    if frequency == RecurrenceFrequency.DAILY:
        return "Daily" if interval == 1 else f"Every {interval} days"

    if frequency == RecurrenceFrequency.WEEKLY:
        days = rule.by_day or []
        if interval == 1:
            if not days:
                return "Weekly"
            if len(rule.weekdays()) == 7:
                return "Every day"
            return f"Weekly on {_join(_format_day(d) for d in days)}"
        if days:
            return f"Every {interval} weeks on {_join(_format_day(d) for d in days)}"
        return f"Every {interval} weeks"

    if frequency == RecurrenceFrequency.BIWEEKLY:
        days = rule.by_day or []
        if interval == 1:
            if days:
                return f"Biweekly on {_join(_format_day(d) for d in days)}"
            return "Biweekly"
        # Each biweekly period is two weeks.
        if days:
            return f"Every {interval * 2} weeks on {_join(_format_day(d) for d in days)}"
        return f"Every {interval * 2} weeks"

    if frequency == RecurrenceFrequency.MONTHLY:
        month_days = rule.by_month_day or []
        listed = _join(str(d) for d in month_days)
        if interval == 1:
            if month_days:
                return f"Monthly on {_days_label(len(month_days))} {listed}"
            return "Monthly"
        if month_days:
            return f"Every {interval} months on {_days_label(len(month_days))} {listed}"
        return f"Every {interval} months"

    if frequency == RecurrenceFrequency.YEARLY:
        months = rule.by_month or []
        listed = _join(_format_month(m) for m in months)
        if interval == 1:
            return f"Yearly in {listed}" if months else "Yearly"
        if months:
            return f"Every {interval} years in {listed}"
        return f"Every {interval} years"

    return "Custom schedule"
