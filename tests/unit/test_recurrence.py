"""Tests for RecurrenceMatcher."""
from datetime import date, datetime, timedelta, timezone

import pytest

from todo_groups.models.entities import (
    DailyRecurrence, OnceRecurrence, TaskTemplate, WeeklyRecurrence, recurrence_from_dict,
)
from todo_groups.services.recurrence_service import RecurrenceMatcher
from todo_groups.utils.dates import local_day_key

JUNE = [date(2024, 6, 1) + timedelta(days=i) for i in range(30)]


def make_template(recurrence, template_id="t1"):
    return TaskTemplate(
        id=template_id,
        title="Standup",
        start_time="09:00",
        end_time="09:30",
        recurrence=recurrence,
        group_id="g1",
    )


class TestDaily:

    @pytest.mark.parametrize("day", JUNE)
    def test_daily_matches_every_day(self, day):
        assert RecurrenceMatcher.matches(make_template(DailyRecurrence()), day)

    def test_daily_matches_datetimes(self):
        instant = datetime(2024, 6, 1, 23, 59, tzinfo=timezone.utc)
        assert RecurrenceMatcher.matches(make_template(DailyRecurrence()), instant)


class TestOnce:

    def test_once_matches_only_its_date(self):
        template = make_template(OnceRecurrence("2024-07-04"))
        assert RecurrenceMatcher.matches(template, date(2024, 7, 4))
        assert not RecurrenceMatcher.matches(template, date(2024, 7, 5))
        assert not RecurrenceMatcher.matches(template, date(2024, 7, 3))

    @pytest.mark.parametrize("day", JUNE)
    def test_once_equals_day_key_comparison(self, day):
        template = make_template(OnceRecurrence("2024-06-15"))
        assert RecurrenceMatcher.matches(template, day) == (local_day_key(day) == "2024-06-15")

    def test_once_matches_at_any_time_of_the_day(self):
        template = make_template(OnceRecurrence("2024-07-04"))
        assert RecurrenceMatcher.matches(template, datetime(2024, 7, 4, 0, 0))
        assert RecurrenceMatcher.matches(template, datetime(2024, 7, 4, 23, 59))

    def test_once_with_malformed_date_never_matches(self):
        template = make_template(OnceRecurrence("07/04/2024"))
        assert not RecurrenceMatcher.matches(template, date(2024, 7, 4))


class TestWeekly:

    def test_mon_wed_fri_does_not_match_sunday(self):
        template = make_template(WeeklyRecurrence(frozenset({1, 3, 5})))
        sunday = date(2024, 6, 2)
        assert not RecurrenceMatcher.matches(template, sunday)

    def test_mon_wed_fri_matches_those_days(self):
        template = make_template(WeeklyRecurrence(frozenset({1, 3, 5})))
        assert RecurrenceMatcher.matches(template, date(2024, 6, 3))   # Monday
        assert RecurrenceMatcher.matches(template, date(2024, 6, 5))   # Wednesday
        assert RecurrenceMatcher.matches(template, date(2024, 6, 7))   # Friday
        assert not RecurrenceMatcher.matches(template, date(2024, 6, 4))

    @pytest.mark.parametrize("day", JUNE)
    def test_weekly_equals_weekday_membership(self, day):
        days = frozenset({0, 6})
        template = make_template(WeeklyRecurrence(days))
        assert RecurrenceMatcher.matches(template, day) == ((day.isoweekday() % 7) in days)

    @pytest.mark.parametrize("day", JUNE[:7])
    def test_empty_days_never_match(self, day):
        assert not RecurrenceMatcher.matches(make_template(WeeklyRecurrence(frozenset())), day)


class TestDefensiveDefaults:

    def test_missing_recurrence_is_no_match(self):
        assert not RecurrenceMatcher.matches(make_template(None), date(2024, 6, 1))

    def test_unknown_recurrence_object_is_no_match(self):
        assert not RecurrenceMatcher.matches(make_template("monthly"), date(2024, 6, 1))

    def test_object_without_recurrence_is_no_match(self):
        assert not RecurrenceMatcher.matches(object(), date(2024, 6, 1))

    @pytest.mark.parametrize("raw", [
        None,
        "daily",
        {},
        {"type": "monthly"},
        {"type": "once"},
        {"type": "once", "start_date": 20240704},
    ])
    def test_unrecognised_documents_parse_to_none(self, raw):
        assert recurrence_from_dict(raw) is None

    def test_weekly_document_without_days_parses_to_empty(self):
        recurrence = recurrence_from_dict({"type": "weekly"})
        assert recurrence == WeeklyRecurrence(frozenset())
        assert not RecurrenceMatcher.matches(make_template(recurrence), date(2024, 6, 3))

    def test_matching_filters_templates(self):
        templates = [
            make_template(DailyRecurrence(), "daily"),
            make_template(WeeklyRecurrence(frozenset({1})), "mondays"),
            make_template(OnceRecurrence("2024-06-02"), "once"),
        ]
        sunday = date(2024, 6, 2)
        assert [t.id for t in RecurrenceMatcher.matching(templates, sunday)] == ["daily", "once"]

    def test_stored_booleans_are_not_weekdays(self):
        recurrence = recurrence_from_dict({"type": "weekly", "days_of_week": [True, 3]})
        assert recurrence == WeeklyRecurrence(frozenset({3}))
        assert not RecurrenceMatcher.matches(make_template(recurrence), date(2024, 6, 3))   # Monday
