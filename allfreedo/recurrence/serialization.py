"""Persistence boundary for recurrence rules.

Rules are stored on task templates as opaque JSON text (camelCase keys, e.g.
``{"frequency": "weekly", "interval": 1, "byDay": ["monday", "friday"]}``) and are
turned into a RecurrenceRule on the way in. Reading a stored rule never raises:
anything that fails to parse is treated as an inert rule.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from typing import Any, Optional, Union

from pydantic import ValidationError

from allfreedo.models.recurrence import RecurrenceRule
from allfreedo.recurrence.evaluator import is_due_today
from allfreedo.recurrence.humanize import rule_to_human_string

logger = logging.getLogger(__name__)


class RecurrenceParseError(ValueError):
    """Structured rule error that can be surfaced as a 400."""

    def __init__(self, message: str, *, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []


def parse_rule(text: Optional[str]) -> Optional[RecurrenceRule]:
    """Parse a stored rule. Returns None for missing, malformed or invalid text."""
    if not text:
        return None
    try:
        payload = json.loads(text)
    except (TypeError, ValueError, RecursionError) as e:
        logger.warning(f"Unparseable recurrence rule: {type(e).__name__}: {str(e)}")
        return None
    if not isinstance(payload, dict):
        logger.warning("Recurrence rule is not a JSON object")
        return None
    try:
        return RecurrenceRule.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Invalid recurrence rule: {e.error_count()} validation error(s)")
        return None


def serialize_rule(rule: RecurrenceRule) -> str:
    """Serialize a rule to its stored JSON form."""
    return rule.model_dump_json(by_alias=True, exclude_none=True)


def validate_rule(payload: Union[RecurrenceRule, dict, str, Any]) -> RecurrenceRule:
    """Validate an inbound rule for storage.

    Unlike ``parse_rule`` this is strict: unsupported frequencies and malformed
    input raise RecurrenceParseError so the caller can reject the request.
    """
    if isinstance(payload, RecurrenceRule):
        rule = payload
    else:
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except (ValueError, RecursionError) as e:
                raise RecurrenceParseError("Recurrence rule is not valid JSON") from e
        if not isinstance(payload, dict):
            raise RecurrenceParseError("Recurrence rule must be an object")
        try:
            rule = RecurrenceRule.model_validate(payload)
        except ValidationError as e:
            raise RecurrenceParseError("Invalid recurrence rule", errors=e.errors()) from e

    if not rule.is_known_frequency:
        raise RecurrenceParseError(f"Unsupported recurrence frequency: {rule.frequency}")
    return rule


def is_serialized_rule_due_today(text: Optional[str], today: Optional[Union[date, datetime]] = None) -> bool:
    """``is_due_today`` over stored text; unparseable rules are never due."""
    rule = parse_rule(text)
    if rule is None:
        return False
    return is_due_today(rule, today)


def describe_serialized_rule(text: Optional[str]) -> str:
    """Human-readable schedule for stored text; empty string when unparseable."""
    rule = parse_rule(text)
    if rule is None:
        return ""
    return rule_to_human_string(rule)
