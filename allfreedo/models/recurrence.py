"""Recurrence rule models for Allfreedo.

A RecurrenceRule is the structured, immutable form of a task template's schedule.
At the persistence boundary it is stored as opaque JSON text (see
``allfreedo.recurrence.serialization``); in memory it is always this model.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from allfreedo.models.constants import DEFAULT_INTERVAL


class RecurrenceFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Weekday(str, Enum):
    MO = "mo"
    TU = "tu"
    WE = "we"
    TH = "th"
    FR = "fr"
    SA = "sa"
    SU = "su"


# Index matches Python's date.weekday(): Monday=0 ... Sunday=6
WEEKDAY_ORDER: List[Weekday] = [
    Weekday.MO,
    Weekday.TU,
    Weekday.WE,
    Weekday.TH,
    Weekday.FR,
    Weekday.SA,
    Weekday.SU,
]

WEEKDAY_NAMES: dict[Weekday, str] = {
    Weekday.MO: "Monday",
    Weekday.TU: "Tuesday",
    Weekday.WE: "Wednesday",
    Weekday.TH: "Thursday",
    Weekday.FR: "Friday",
    Weekday.SA: "Saturday",
    Weekday.SU: "Sunday",
}

_WEEKDAY_LOOKUP: dict[str, Weekday] = {
    **{day.value: day for day in Weekday},
    **{name.lower(): day for day, name in WEEKDAY_NAMES.items()},
}


def weekday_from_token(token: str) -> Optional[Weekday]:
    """Resolve a weekday token to a Weekday.

    Accepts two-letter codes ("MO", "fr") and full English names ("Monday",
    "friday"), case-insensitively. Returns None for anything else.
    """
    if not isinstance(token, str):
        return None
    return _WEEKDAY_LOOKUP.get(token.strip().lower())


def _dedupe(values):
    seen = set()
    out = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


class RecurrenceRule(BaseModel):
    """Structured recurrence rule for a task template.

    Notes:
    - Only the fields relevant to ``frequency`` are consulted; the others are kept
      as provided.
    - ``frequency`` is kept as a lowercase string rather than a RecurrenceFrequency
      so that rules carrying an unsupported frequency can still be loaded and are
      simply never due.
    - List fields keep the caller's order (duplicates dropped).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    frequency: str = Field(..., description="daily | weekly | biweekly | monthly | yearly")
    interval: int = Field(DEFAULT_INTERVAL, ge=1, description="Every N frequency units")
    by_day: Optional[List[str]] = Field(
        None, alias="byDay", description="Weekday tokens (weekly/biweekly)"
    )
    by_month_day: Optional[List[int]] = Field(
        None, alias="byMonthDay", description="Days of month 1-31 (monthly)"
    )
    by_month: Optional[List[int]] = Field(
        None, alias="byMonth", description="Months 1-12 (yearly)"
    )

    @field_validator("frequency", mode="before")
    @classmethod
    def _normalize_frequency(cls, v):
        if isinstance(v, Enum):
            v = v.value
        if not isinstance(v, str):
            raise ValueError("frequency must be a string")
        return v.strip().lower()

    @field_validator("by_day")
    @classmethod
    def _validate_by_day(cls, v):
        if v is None:
            return None
        return _dedupe(v)

    @field_validator("by_month_day")
    @classmethod
    def _validate_by_month_day(cls, v):
        if v is None:
            return None
        for day in v:
            if day < 1 or day > 31:
                raise ValueError("byMonthDay values must be between 1 and 31")
        return _dedupe(v)

    @field_validator("by_month")
    @classmethod
    def _validate_by_month(cls, v):
        if v is None:
            return None
        for month in v:
            if month < 1 or month > 12:
                raise ValueError("byMonth values must be between 1 and 12")
        return _dedupe(v)

    @property
    def is_known_frequency(self) -> bool:
        return self.frequency in {f.value for f in RecurrenceFrequency}

    def weekdays(self) -> List[Weekday]:
        """Recognized weekdays from ``by_day``, in the given order."""
        out: List[Weekday] = []
        for token in self.by_day or []:
            day = weekday_from_token(token)
            if day is not None and day not in out:
                out.append(day)
        return out
