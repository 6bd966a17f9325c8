from datetime import date, timedelta
from types import SimpleNamespace

import pytest

from app.core.exceptions import InvalidRangeError
from app.services.occurrence import (
    MISSING_START_DATE,
    RECURRING_WITHOUT_END_DATE,
    START_DATE_WEEKDAY_MISMATCH,
    count_occurrences,
    first_matching_date,
    is_occurrence_active,
    occurrence_dates,
    occurrence_issue,
    occurs_on,
    weekday_index,
)


def make_template(**overrides):
    values = dict(
        id=1,
        day_of_week=1,
        start_date=date(2025, 6, 2),
        recurrence_end_date=date(2025, 6, 16),
        is_recurring=True,
        is_active=True,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def days_around(center: date, radius: int = 60):
    return [center + timedelta(days=offset) for offset in range(-radius, radius + 1)]


class TestWeekdayIndex:
    """0 = domingo ... 6 = sábado"""

    def test_monday_is_one(self):
        assert weekday_index(date(2025, 6, 2)) == 1

    def test_sunday_is_zero(self):
        assert weekday_index(date(2025, 6, 1)) == 0

    def test_saturday_is_six(self):
        assert weekday_index(date(2025, 6, 7)) == 6

    def test_first_matching_date(self):
        # Desde el domingo 1 de junio, el siguiente miércoles es el 4
        assert first_matching_date(3, date(2025, 6, 1)) == date(2025, 6, 4)
        assert first_matching_date(0, date(2025, 6, 1)) == date(2025, 6, 1)


class TestIsOccurrenceActive:
    """Ventana de recurrencia, sin comprobar el día de la semana"""

    @pytest.mark.parametrize("is_recurring", [True, False])
    @pytest.mark.parametrize("end_date", [None, date(2025, 12, 31)])
    def test_missing_start_date_is_never_active(self, is_recurring, end_date):
        template = make_template(start_date=None, recurrence_end_date=end_date, is_recurring=is_recurring)
        assert not any(is_occurrence_active(template, d) for d in days_around(date(2025, 6, 15), 200))

    def test_one_time_class_is_active_exactly_on_start_date(self):
        template = make_template(recurrence_end_date=None, is_recurring=False)
        active = [d for d in days_around(date(2025, 6, 2)) if is_occurrence_active(template, d)]
        assert active == [date(2025, 6, 2)]

    def test_recurring_without_end_date_is_incomplete(self):
        template = make_template(recurrence_end_date=None, is_recurring=True)
        assert not any(is_occurrence_active(template, d) for d in days_around(date(2025, 6, 2)))

    @pytest.mark.parametrize("is_recurring", [True, False])
    def test_with_end_date_active_iff_inside_window(self, is_recurring):
        template = make_template(is_recurring=is_recurring)
        for d in days_around(date(2025, 6, 9)):
            expected = date(2025, 6, 2) <= d <= date(2025, 6, 16)
            assert is_occurrence_active(template, d) is expected, d

    def test_does_not_check_weekday(self):
        template = make_template()
        # Martes dentro de la ventana: el filtro por día es responsabilidad de quien llama
        assert is_occurrence_active(template, date(2025, 6, 3))

    def test_ignores_is_active_flag(self):
        template = make_template(is_active=False)
        assert is_occurrence_active(template, date(2025, 6, 9))


class TestOccursOn:
    def test_scenario_monday_series(self):
        template = make_template()
        assert occurs_on(template, date(2025, 6, 2))
        assert occurs_on(template, date(2025, 6, 9))
        assert occurs_on(template, date(2025, 6, 16))
        assert not occurs_on(template, date(2025, 6, 23))
        assert not occurs_on(template, date(2025, 6, 1))

    def test_wrong_weekday_is_filtered(self):
        template = make_template()
        assert not occurs_on(template, date(2025, 6, 3))

    def test_soft_deleted_template_has_no_occurrences(self):
        template = make_template(is_active=False)
        assert not any(occurs_on(template, d) for d in days_around(date(2025, 6, 9)))

    def test_one_time_class_on_mismatched_weekday_never_shows(self):
        # start_date cae en lunes pero la plantilla dice martes
        template = make_template(day_of_week=2, recurrence_end_date=None, is_recurring=False)
        assert not any(occurs_on(template, d) for d in days_around(date(2025, 6, 2)))


class TestOccurrenceDates:
    def test_lists_dates_in_window(self):
        template = make_template()
        dates = occurrence_dates(template, date(2025, 5, 1), date(2025, 7, 31))
        assert dates == [date(2025, 6, 2), date(2025, 6, 9), date(2025, 6, 16)]

    def test_clips_to_requested_range(self):
        template = make_template()
        assert occurrence_dates(template, date(2025, 6, 3), date(2025, 6, 10)) == [date(2025, 6, 9)]

    def test_window_ending_at_max_date(self):
        template = make_template(
            day_of_week=weekday_index(date(9999, 12, 27)),
            start_date=date(9999, 12, 1),
            recurrence_end_date=date.max,
        )
        dates = occurrence_dates(template, date(9999, 12, 21), date.max)
        assert dates == [date(9999, 12, 27)]

    def test_matches_brute_force(self):
        template = make_template(day_of_week=1, recurrence_end_date=date(2025, 9, 1))
        start, end = date(2025, 5, 20), date(2025, 8, 10)
        expected = []
        current = start
        while current <= end:
            if occurs_on(template, current):
                expected.append(current)
            current += timedelta(days=1)
        assert occurrence_dates(template, start, end) == expected

    def test_inverted_range_raises(self):
        with pytest.raises(InvalidRangeError):
            occurrence_dates(make_template(), date(2025, 6, 10), date(2025, 6, 1))

    def test_missing_start_date_yields_nothing(self):
        assert occurrence_dates(make_template(start_date=None), date(2025, 1, 1), date(2025, 12, 31)) == []


class TestCountOccurrences:
    def test_weekly_series(self):
        assert count_occurrences(make_template()) == 3

    def test_one_time_class(self):
        assert count_occurrences(make_template(recurrence_end_date=None, is_recurring=False)) == 1

    def test_incomplete_series_counts_zero(self):
        assert count_occurrences(make_template(recurrence_end_date=None, is_recurring=True)) == 0
        assert count_occurrences(make_template(start_date=None)) == 0

    def test_inactive_counts_zero(self):
        assert count_occurrences(make_template(is_active=False)) == 0


class TestOccurrenceIssue:
    def test_well_formed(self):
        assert occurrence_issue(make_template()) is None

    def test_missing_start_date(self):
        assert occurrence_issue(make_template(start_date=None)) == MISSING_START_DATE

    def test_recurring_without_end(self):
        assert occurrence_issue(make_template(recurrence_end_date=None)) == RECURRING_WITHOUT_END_DATE

    def test_weekday_mismatch_one_time(self):
        template = make_template(day_of_week=4, is_recurring=False, recurrence_end_date=None)
        assert occurrence_issue(template) == START_DATE_WEEKDAY_MISMATCH

    def test_weekday_mismatch_recurring_is_not_an_issue(self):
        template = make_template(day_of_week=3)
        assert occurrence_issue(template) is None
        assert count_occurrences(template) == 2
