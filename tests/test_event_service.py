"""Tests for recurring event resolution."""

from datetime import date

import numpy as np
import pytest

from tests.helpers import make_event


def test_monthly_expense_over_three_months(event_service, now):
    events = [make_event(-500, "2025-01-01", "monthly")]

    series = event_service.impact_series(events, 3, now)

    assert len(series) == 4
    assert series[1:].sum() == -1500


def test_one_time_event_hits_only_its_month(event_service, now):
    events = [make_event(2000, "2025-03-10")]

    series = event_service.impact_series(events, 6, now)

    assert series.tolist() == [0, 0, 2000, 0, 0, 0, 0]


def test_past_one_time_event_never_resolves(event_service, now):
    assert not event_service.impact_series([make_event(100, "2024-11-01")], 12, now).any()


def test_past_monthly_event_still_recurs(event_service, now):
    series = event_service.impact_series([make_event(50, "2024-06-01", "monthly")], 3, now)

    assert series.tolist() == [50, 50, 50, 50]


def test_yearly_event(event_service, now):
    series = event_service.impact_series([make_event(-1200, "2025-02-01", "yearly")], 26, now)

    assert np.nonzero(series)[0].tolist() == [1, 13, 25]


def test_custom_interval(event_service, now):
    series = event_service.impact_series([make_event(300, "2025-01-20", "custom", interval=3)], 9, now)

    assert np.nonzero(series)[0].tolist() == [0, 3, 6, 9]


def test_custom_interval_below_one_is_clamped(event_service, now):
    series = event_service.impact_series([make_event(10, "2025-01-20", "custom", interval=0)], 2, now)

    assert series.tolist() == [10, 10, 10]


def test_end_date_bounds_recurrence(event_service, now):
    events = [make_event(-80, "2025-01-15", "monthly", end_date="2025-03-15")]

    series = event_service.impact_series(events, 5, now)

    assert series.tolist() == [-80, -80, -80, 0, 0, 0]


def test_end_date_compares_occurrence_dates(event_service, now):
    # The March occurrence falls on the 20th, after the end date
    events = [make_event(-80, "2025-01-20", "monthly", end_date="2025-03-15")]

    assert event_service.impact_series(events, 3, now).tolist() == [-80, -80, 0, 0]


def test_weekly_event_counts_occurrences_per_month(event_service, now):
    events = [make_event(25, date(2025, 1, 6), "weekly")]

    series = event_service.impact_series(events, 2, now)

    # Mondays: 4 in January, 4 in February, 5 in March 2025
    assert series.tolist() == [100, 100, 125]


def test_weekly_event_respects_end_date(event_service, now):
    events = [make_event(25, date(2025, 1, 6), "weekly", end_date=date(2025, 1, 20))]

    assert event_service.impact_series(events, 1, now).tolist() == [75, 0]


def test_impacts_are_summed_and_signed(event_service, now):
    events = [
        make_event(-500, "2025-01-01", "monthly", name="rent"),
        make_event(1200, "2025-02-01", name="bonus"),
    ]

    assert event_service.monthly_impact(events, 1, now) == 700
    assert event_service.monthly_impact(events, 2, now) == -500


def test_events_with_invalid_dates_are_ignored(event_service, now):
    events = [make_event(100, "not a date", "monthly"), make_event(100, None, "monthly")]

    assert event_service.resolve(events, now) == []
    assert event_service.monthly_impact(events, 0, now) == 0


def test_malformed_amount_counts_as_zero(event_service, now):
    assert event_service.monthly_impact([make_event("n/a", "2025-01-01", "monthly")], 0, now) == 0


@pytest.mark.parametrize("month_index", [0, 4, 11])
def test_resolution_is_pure(event_service, now, month_index):
    events = [make_event(-40, "2025-01-05", "monthly"), make_event(90, "2025-05-05", "yearly")]

    first = event_service.monthly_impact(events, month_index, now)
    second = event_service.monthly_impact(events, month_index, now)

    assert first == second
