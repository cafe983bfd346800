"""Tests for next-occurrence computation."""

import pytest
from datetime import date, datetime, timedelta

from allfreedo.models.recurrence import RecurrenceRule
from allfreedo.recurrence.evaluator import is_due_today, next_occurrence


class TestNextOccurrence:
    def test_daily_adds_interval_days(self):
        rule = RecurrenceRule(frequency="daily", interval=3)
        assert next_occurrence(rule, date(2025, 3, 3)) == date(2025, 3, 6)

    def test_weekly_finds_next_listed_weekday(self, weekly_rule):
        assert next_occurrence(weekly_rule, date(2025, 3, 3)) == date(2025, 3, 7)   # Mon -> Fri
        assert next_occurrence(weekly_rule, date(2025, 3, 7)) == date(2025, 3, 10)  # Fri -> Mon

    def test_weekly_without_days_adds_interval_weeks(self):
        rule = RecurrenceRule(frequency="weekly", interval=2)
        assert next_occurrence(rule, date(2025, 3, 3)) == date(2025, 3, 17)

    def test_weekly_with_only_unknown_tokens_adds_interval_weeks(self):
        rule = RecurrenceRule(frequency="weekly", by_day=["funday"])
        assert next_occurrence(rule, date(2025, 3, 3)) == date(2025, 3, 10)

    def test_biweekly_skips_odd_weeks_of_month(self):
        rule = RecurrenceRule(frequency="biweekly", by_day=["monday"])
        # Mar 10 falls in an odd week-of-month, so the next match is Mar 17.
        assert next_occurrence(rule, date(2025, 3, 3)) == date(2025, 3, 17)

    def test_biweekly_without_days_adds_two_weeks_per_interval(self):
        rule = RecurrenceRule(frequency="biweekly")
        assert next_occurrence(rule, date(2025, 3, 3)) == date(2025, 3, 17)

    def test_monthly_next_listed_day_this_month(self):
        rule = RecurrenceRule(frequency="monthly", by_month_day=[1, 15])
        assert next_occurrence(rule, date(2025, 3, 3)) == date(2025, 3, 15)

    def test_monthly_wraps_to_smallest_day_next_interval(self):
        rule = RecurrenceRule(frequency="monthly", by_month_day=[15, 1])
        assert next_occurrence(rule, date(2025, 3, 15)) == date(2025, 4, 1)
        every_two = RecurrenceRule(frequency="monthly", interval=2, by_month_day=[1, 15])
        assert next_occurrence(every_two, date(2025, 3, 20)) == date(2025, 5, 1)

    def test_monthly_clamps_to_last_day_of_short_month(self):
        rule = RecurrenceRule(frequency="monthly", by_month_day=[31])
        assert next_occurrence(rule, date(2025, 1, 31)) == date(2025, 2, 28)

    def test_monthly_skips_days_missing_from_current_month(self):
        rule = RecurrenceRule(frequency="monthly", by_month_day=[31])
        assert next_occurrence(rule, date(2025, 2, 10)) == date(2025, 3, 31)

    def test_monthly_without_days_adds_months_with_clamping(self):
        rule = RecurrenceRule(frequency="monthly")
        assert next_occurrence(rule, date(2025, 1, 31)) == date(2025, 2, 28)

    def test_yearly_next_listed_month_this_year(self):
        rule = RecurrenceRule(frequency="yearly", by_month=[3, 9])
        assert next_occurrence(rule, date(2025, 3, 10)) == date(2025, 9, 10)

    def test_yearly_wraps_to_first_month_next_interval(self):
        rule = RecurrenceRule(frequency="yearly", by_month=[9, 3])
        assert next_occurrence(rule, date(2025, 9, 10)) == date(2026, 3, 10)
        every_two = RecurrenceRule(frequency="yearly", interval=2, by_month=[3])
        assert next_occurrence(every_two, date(2025, 3, 10)) == date(2027, 3, 10)

    def test_yearly_clamps_leap_day(self):
        assert next_occurrence(RecurrenceRule(frequency="yearly", by_month=[2]), date(2024, 2, 29)) == date(2025, 2, 28)
        assert next_occurrence(RecurrenceRule(frequency="yearly"), date(2024, 2, 29)) == date(2025, 2, 28)

    def test_datetime_keeps_time_of_day(self):
        rule = RecurrenceRule(frequency="daily")
        assert next_occurrence(rule, datetime(2025, 3, 3, 8, 30)) == datetime(2025, 3, 4, 8, 30)

    def test_unknown_frequency_has_no_next_occurrence(self):
        assert next_occurrence(RecurrenceRule(frequency="hourly"), date(2025, 3, 3)) is None


class TestConsistencyWithDueCheck:
    """The next occurrence is the first due day after the start date."""

    @pytest.mark.parametrize(
        "rule",
        [
            RecurrenceRule(frequency="weekly", by_day=["tuesday", "saturday"]),
            RecurrenceRule(frequency="biweekly", by_day=["wednesday"]),
            RecurrenceRule(frequency="biweekly", by_day=["sunday", "thursday"]),
            RecurrenceRule(frequency="monthly", by_month_day=[1, 15, 28]),
        ],
    )
    def test_next_is_due_and_nothing_due_in_between(self, rule):
        start = date(2024, 12, 20)
        for offset in range(120):
            current = start + timedelta(days=offset)
            nxt = next_occurrence(rule, current)
            assert nxt > current
            assert is_due_today(rule, nxt), (current, nxt)
            between = current + timedelta(days=1)
            while between < nxt:
                assert not is_due_today(rule, between), (current, between, nxt)
                between += timedelta(days=1)
