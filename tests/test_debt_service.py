"""Tests for debt amortization math."""

from datetime import date

import pytest

from tests.helpers import make_debt


def test_remaining_months_counts_calendar_months(debt_service, now):
    assert debt_service.remaining_months("2025-11-15", now) == 10
    assert debt_service.remaining_months(date(2026, 1, 1), now) == 12
    assert debt_service.remaining_months("2025-01-31", now) == 0


def test_remaining_months_floors_past_and_invalid_dates(debt_service, now):
    assert debt_service.remaining_months("2020-06-01", now) == 0
    assert debt_service.remaining_months(None, now) == 0
    assert debt_service.remaining_months("", now) == 0
    assert debt_service.remaining_months("not a date", now) == 0


def test_principal_zero_rate_is_straight_line(debt_service, now):
    """1000/month at 0% ending 10 months out is exactly 10000 owed."""
    months = debt_service.remaining_months("2025-11-15", now)
    assert debt_service.principal(1000, 0, months) == 10000


def test_principal_without_remaining_term_is_zero(debt_service):
    assert debt_service.principal(1000, 5, 0) == 0
    assert debt_service.principal(1000, 5, -3) == 0


def test_principal_matches_annuity_formula(debt_service):
    r = 4.0 / 100 / 12
    expected = 500 * (1 - (1 + r) ** -120) / r
    assert debt_service.principal(500, 4.0, 120) == pytest.approx(expected, rel=1e-12)


def test_principal_treats_malformed_numbers_as_zero(debt_service):
    assert debt_service.principal("abc", 5, 12) == 0
    assert debt_service.principal(100, None, 12) == 1200


def test_zero_rate_schedule_ends_at_zero(debt_service):
    rows = debt_service.schedule(10000, 0, 10, 1000)

    assert len(rows) == 10
    assert [row.month for row in rows] == list(range(1, 11))
    assert all(row.interest == 0 for row in rows)
    assert rows[-1].balance == 0


def test_schedule_converges_with_exact_payment(debt_service):
    principal, rate, months = 25000.0, 5.0, 48
    r = rate / 100 / 12
    payment = principal * r / (1 - (1 + r) ** -months)

    rows = debt_service.schedule(principal, rate, months, payment)

    assert len(rows) == months
    assert rows[0].interest == pytest.approx(principal * r)
    assert rows[-1].balance == pytest.approx(0.0, abs=1e-6)


def test_schedule_clamps_overpayment(debt_service):
    rows = debt_service.schedule(1000, 0, 5, 400)

    assert [row.balance for row in rows] == [600, 200, 0, 0, 0]
    assert all(row.balance >= 0 for row in rows)


def test_schedule_frame(debt_service):
    frame = debt_service.schedule_frame(debt_service.schedule(1200, 0, 3, 400))

    assert list(frame.columns) == ["payment", "interest", "principal", "balance"]
    assert frame.loc[3, "balance"] == 0


def test_summarize_debt(debt_service, now):
    debt = make_debt("2027-01-15", monthly_payment=300, rate=6.0, insurance=20)

    summary = debt_service.summarize(debt, now)

    assert summary.remaining_months == 24
    assert summary.monthly_cost == 320
    assert summary.total_cost == 320 * 24
    assert summary.principal == pytest.approx(debt_service.principal(300, 6.0, 24))
    assert summary.total_interest == pytest.approx(300 * 24 - summary.principal)
    assert summary.total_interest > 0
    assert summary.has_valid_end_date
    assert len(summary.schedule) == 24
    assert summary.schedule[-1].balance == pytest.approx(0.0, abs=1e-6)


def test_summarize_debt_with_invalid_end_date(debt_service, now):
    summary = debt_service.summarize(make_debt("someday", monthly_payment=300), now)

    assert summary.remaining_months == 0
    assert summary.principal == 0
    assert not summary.has_valid_end_date
    assert summary.schedule == []
