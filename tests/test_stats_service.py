"""
Tests for the aggregation engine.

Everything here runs on transient Transaction objects; no store is needed.
"""

import random
from datetime import datetime, timedelta, timezone

import pytest

from tracker.models import BudgetPeriod
from tracker.services.stats_service import (
    Statistics,
    category_breakdown,
    compute_stats,
    month_window,
    period_window,
    to_local,
)

from conftest import NOW, make_tx

THIS_MONTH = datetime(2026, 10, 5, 9, 30)
LAST_MONTH = datetime(2026, 9, 20, 18, 0)


class TestScenarios:
    """Worked examples."""

    def test_income_and_expense_this_month(self):
        stats = compute_stats(
            [
                make_tx("expense", 100, "Food", THIS_MONTH),
                make_tx("income", 1000, "Salary", THIS_MONTH),
            ],
            NOW,
        )
        assert stats.balance == 900
        assert stats.monthly_income == 1000
        assert stats.monthly_expenses == 100
        assert stats.savings_rate == 90.0
        assert stats.category_breakdown == {"Food": 100}

    def test_empty_input(self):
        stats = compute_stats([], NOW)
        assert stats.balance == 0
        assert stats.monthly_income == 0
        assert stats.monthly_expenses == 0
        assert stats.expense_change == 0
        assert stats.savings_rate == 0
        assert stats.category_breakdown == {}
        assert len(stats.monthly_trends) == 6
        assert all(t.income == 0 and t.expenses == 0 for t in stats.monthly_trends)

    def test_amount_zero_is_valid(self):
        stats = compute_stats([make_tx("expense", 0, "Food", THIS_MONTH)], NOW)
        assert stats.balance == 0
        assert stats.monthly_expenses == 0
        assert stats.category_breakdown == {}


class TestBalance:

    def test_balance_spans_all_time(self):
        transactions = [
            make_tx("income", 500, "Salary", datetime(2019, 1, 1)),
            make_tx("expense", 75, "Travel", datetime(2031, 6, 1)),
            make_tx("expense", 25, "Food", THIS_MONTH),
        ]
        stats = compute_stats(transactions, NOW)
        assert stats.balance == 400
        # Far past and future transactions stay out of the monthly windows
        assert stats.monthly_income == 0
        assert stats.monthly_expenses == 25

    def test_balance_is_permutation_invariant(self):
        rng = random.Random(7)
        transactions = [
            make_tx(
                rng.choice(["income", "expense"]),
                round(rng.uniform(0, 500), 2) + 0.1,
                rng.choice(["Food", "Travel", "Salary"]),
                NOW - timedelta(days=rng.randint(0, 400)),
            )
            for _ in range(200)
        ]
        expected = compute_stats(transactions, NOW)
        for _ in range(5):
            shuffled = transactions[:]
            rng.shuffle(shuffled)
            assert compute_stats(shuffled, NOW) == expected

    def test_computing_twice_is_identical(self):
        transactions = [
            make_tx("income", 0.1, "Salary", THIS_MONTH),
            make_tx("expense", 0.2, "Food", THIS_MONTH),
            make_tx("expense", 0.3, "Food", LAST_MONTH),
        ]
        assert compute_stats(transactions, NOW) == compute_stats(transactions, NOW)


class TestMonthlyFigures:

    def test_month_window_is_half_open(self):
        start, end = month_window(NOW)
        assert start == datetime(2026, 10, 1)
        assert end == datetime(2026, 11, 1)

        transactions = [
            make_tx("expense", 10, "Food", datetime(2026, 10, 1, 0, 0)),
            make_tx("expense", 20, "Food", datetime(2026, 11, 1, 0, 0)),
            make_tx("expense", 40, "Food", datetime(2026, 9, 30, 23, 59, 59)),
        ]
        stats = compute_stats(transactions, NOW)
        assert stats.monthly_expenses == 10

    def test_previous_month_window_crosses_year(self):
        start, end = month_window(datetime(2026, 1, 15), -1)
        assert start == datetime(2025, 12, 1)
        assert end == datetime(2026, 1, 1)

    def test_expense_change(self):
        transactions = [
            make_tx("expense", 200, "Food", LAST_MONTH),
            make_tx("expense", 300, "Food", THIS_MONTH),
        ]
        assert compute_stats(transactions, NOW).expense_change == 50.0

    def test_expense_change_without_previous_spending(self):
        stats = compute_stats([make_tx("expense", 300, "Food", THIS_MONTH)], NOW)
        assert stats.expense_change == 0

    def test_savings_rate_can_be_negative(self):
        transactions = [
            make_tx("income", 100, "Salary", THIS_MONTH),
            make_tx("expense", 150, "Food", THIS_MONTH),
        ]
        assert compute_stats(transactions, NOW).savings_rate == -50.0

    def test_savings_rate_zero_without_income(self):
        stats = compute_stats([make_tx("expense", 150, "Food", THIS_MONTH)], NOW)
        assert stats.savings_rate == 0

    @pytest.mark.parametrize("income,expense,positive", [
        (100, 50, True),
        (100, 100, False),
        (100, 120, False),
    ])
    def test_savings_rate_positive_iff_expenses_below_income(self, income, expense, positive):
        transactions = [
            make_tx("income", income, "Salary", THIS_MONTH),
            make_tx("expense", expense, "Food", THIS_MONTH),
        ]
        assert (compute_stats(transactions, NOW).savings_rate > 0) is positive

    def test_aware_dates_use_local_calendar(self):
        aware = datetime(2026, 10, 10, 12, 0, tzinfo=timezone.utc)
        assert to_local(aware).tzinfo is None
        stats = compute_stats([make_tx("income", 10, "Salary", aware)], NOW)
        assert stats.monthly_income == 10


class TestCategoryBreakdown:

    def test_only_current_month_expenses(self):
        transactions = [
            make_tx("expense", 20, "Food", THIS_MONTH),
            make_tx("expense", 30.5, "Food", THIS_MONTH),
            make_tx("expense", 12, "Travel", LAST_MONTH),
            make_tx("income", 99, "Salary", THIS_MONTH),
        ]
        assert compute_stats(transactions, NOW).category_breakdown == {"Food": 50.5}

    def test_never_contains_zero(self):
        transactions = [
            make_tx("expense", 0, "Gifts", THIS_MONTH),
            make_tx("expense", 5, "Food", THIS_MONTH),
        ]
        breakdown = compute_stats(transactions, NOW).category_breakdown
        assert breakdown == {"Food": 5}
        assert 0 not in breakdown.values()

    def test_explicit_window(self):
        transactions = [
            make_tx("expense", 5, "Food", datetime(2026, 3, 3)),
            make_tx("expense", 7, "Food", datetime(2026, 8, 3)),
        ]
        start, end = period_window(NOW, BudgetPeriod.YEARLY)
        assert category_breakdown(transactions, start, end) == {"Food": 12}


class TestMonthlyTrends:

    def test_six_consecutive_months_oldest_first(self):
        trends = compute_stats([], NOW).monthly_trends
        assert [(t.year, t.month) for t in trends] == [
            (2026, 5), (2026, 6), (2026, 7), (2026, 8), (2026, 9), (2026, 10),
        ]
        assert [t.label for t in trends] == ["May", "Jun", "Jul", "Aug", "Sep", "Oct"]

    def test_window_across_year_boundary(self):
        trends = compute_stats([], datetime(2026, 2, 10)).monthly_trends
        assert [(t.year, t.month) for t in trends] == [
            (2025, 9), (2025, 10), (2025, 11), (2025, 12), (2026, 1), (2026, 2),
        ]
        assert len({t.label for t in trends}) == 6

    def test_sparse_months_are_zero_filled(self):
        transactions = [
            make_tx("income", 1000, "Salary", datetime(2026, 6, 1)),
            make_tx("expense", 40, "Food", THIS_MONTH),
            make_tx("expense", 999, "Food", datetime(2025, 1, 1)),
        ]
        trends = compute_stats(transactions, NOW).monthly_trends
        assert len(trends) == 6
        by_month = {t.month: (t.income, t.expenses) for t in trends}
        assert by_month[6] == (1000, 0)
        assert by_month[10] == (0, 40)
        assert by_month[7] == (0, 0)

    def test_configurable_length(self):
        trends = compute_stats([], NOW, trend_months=12).monthly_trends
        assert len(trends) == 12
        assert (trends[0].year, trends[0].month) == (2025, 11)


class TestPeriodWindow:

    def test_weekly_starts_on_monday(self):
        start, end = period_window(NOW, "weekly")
        assert start == datetime(2026, 10, 12)
        assert end == datetime(2026, 10, 19)

    def test_monthly_matches_month_window(self):
        assert period_window(NOW, BudgetPeriod.MONTHLY) == month_window(NOW)

    def test_yearly(self):
        assert period_window(NOW, "yearly") == (datetime(2026, 1, 1), datetime(2027, 1, 1))


def test_statistics_defaults_are_zero():
    stats = Statistics()
    assert stats.balance == 0
    assert stats.category_breakdown == {}
    assert stats.monthly_trends == ()
