"""Tests for the stored-rule boundary: parsing, serialization and validation."""

import json
import logging
import pytest
from datetime import date

from allfreedo.models.constants import DEFAULT_INTERVAL
from allfreedo.models.recurrence import RecurrenceFrequency, RecurrenceRule
from allfreedo.recurrence.serialization import (
    RecurrenceParseError,
    describe_serialized_rule,
    is_serialized_rule_due_today,
    parse_rule,
    serialize_rule,
    validate_rule,
)


class TestParseRule:
    def test_parses_camel_case_json(self):
        rule = parse_rule('{"frequency": "weekly", "interval": 1, "byDay": ["monday", "friday"]}')
        assert rule == RecurrenceRule(frequency="weekly", by_day=["monday", "friday"])

    def test_missing_interval_defaults_to_one(self):
        assert parse_rule('{"frequency": "daily"}').interval == 1
        assert RecurrenceRule(frequency="weekly").interval == DEFAULT_INTERVAL == 1

    @pytest.mark.parametrize("text", [None, "", "not json", "[1, 2]", '"weekly"', '{"interval": 2}', '{"frequency": "weekly", "interval": 0}'])
    def test_invalid_text_is_inert(self, text):
        assert parse_rule(text) is None

    def test_deeply_nested_text_is_inert(self):
        nested = "[" * 100000 + "]" * 100000
        assert parse_rule(nested) is None
        assert parse_rule('{"frequency": "weekly", "byDay": ' + nested + "}") is None

    def test_parse_failures_are_logged_not_raised(self, caplog):
        with caplog.at_level(logging.WARNING, logger="allfreedo.recurrence.serialization"):
            assert parse_rule("{broken") is None
        assert any("recurrence rule" in r.getMessage().lower() for r in caplog.records)


class TestSerializeRule:
    def test_uses_camel_case_and_omits_absent_fields(self):
        text = serialize_rule(RecurrenceRule(frequency="monthly", by_month_day=[1, 15]))
        assert json.loads(text) == {"frequency": "monthly", "interval": 1, "byMonthDay": [1, 15]}

    def test_round_trips(self):
        rule = RecurrenceRule(frequency="yearly", interval=2, by_month=[3, 9])
        assert parse_rule(serialize_rule(rule)) == rule


class TestValidateRule:
    def test_accepts_dict_string_and_model(self):
        payload = {"frequency": "weekly", "byDay": ["mo"]}
        assert validate_rule(payload).by_day == ["mo"]
        assert validate_rule(json.dumps(payload)).frequency == RecurrenceFrequency.WEEKLY
        assert validate_rule(RecurrenceRule(frequency="daily")).frequency == "daily"

    def test_rejects_unknown_frequency(self):
        with pytest.raises(RecurrenceParseError, match="Unsupported recurrence frequency"):
            validate_rule({"frequency": "hourly"})

    def test_rejects_invalid_shapes(self):
        with pytest.raises(RecurrenceParseError):
            validate_rule("{nope")
        with pytest.raises(RecurrenceParseError):
            validate_rule([1, 2])
        with pytest.raises(RecurrenceParseError) as excinfo:
            validate_rule({"frequency": "monthly", "byMonthDay": [40]})
        assert excinfo.value.errors

    def test_deeply_nested_text_is_rejected(self):
        with pytest.raises(RecurrenceParseError):
            validate_rule("[" * 100000 + "]" * 100000)

    def test_parse_error_is_a_value_error(self):
        assert issubclass(RecurrenceParseError, ValueError)


class TestSafeWrappers:
    def test_due_today_over_stored_text(self):
        text = '{"frequency": "weekly", "byDay": ["monday"]}'
        assert is_serialized_rule_due_today(text, date(2025, 3, 3)) is True
        assert is_serialized_rule_due_today(text, date(2025, 3, 4)) is False

    def test_unparseable_text_is_never_due(self):
        assert is_serialized_rule_due_today("garbage", date(2025, 3, 3)) is False
        assert is_serialized_rule_due_today(None, date(2025, 3, 3)) is False

    def test_describe_stored_text(self):
        assert describe_serialized_rule('{"frequency": "monthly", "byMonthDay": [1]}') == "Monthly on day 1"
        assert describe_serialized_rule("garbage") == ""

    def test_deeply_nested_text_never_raises(self):
        nested = "[" * 100000 + "]" * 100000
        assert is_serialized_rule_due_today(nested, date(2025, 3, 3)) is False
        assert describe_serialized_rule(nested) == ""
