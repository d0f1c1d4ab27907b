"""
Tests for transaction history views.

Covers:
- Balance summary (earned / paid / balance / recent entries)
- Date-range and staff filtering
- Sunday-start weekly grouping and labels
- Running balances
"""

from datetime import date, datetime
from decimal import Decimal

from payroll_engines.history import (
    filter_transactions,
    group_by_week,
    newest_first,
    running_balances,
    summarize_balance,
    week_start,
)
from payroll_kernel.domain.models import TransactionType
from tests.factories import make_txn


class TestSummarizeBalance:
    """Tests for the self-service balance summary."""

    def test_totals(self):
        txns = [
            make_txn("1000", date(2024, 5, 1)),
            make_txn("200", date(2024, 5, 15), txn_type=TransactionType.BONUS),
            make_txn("-150", date(2024, 5, 20), txn_type=TransactionType.FINE),
            make_txn("-50", date(2024, 5, 21), txn_type=TransactionType.REPAYMENT),
        ]

        balance = summarize_balance(txns, staff_id="staff-1")

        assert balance.total_earned == Decimal("1200")
        assert balance.total_paid == Decimal("200")
        assert balance.current_balance == Decimal("1000")
        assert balance.staff_id == "staff-1"

    def test_recent_transactions_newest_first_and_limited(self):
        txns = [make_txn(str(i), date(2024, 1, i), transaction_id=f"t{i}") for i in range(1, 9)]

        balance = summarize_balance(txns, recent_limit=3)

        assert [t.transaction_id for t in balance.recent_transactions] == ["t8", "t7", "t6"]

    def test_unreadable_entries_skipped(self):
        txns = [make_txn("10", "garbage"), make_txn("5", date(2024, 1, 1))]

        balance = summarize_balance(txns)

        assert balance.current_balance == Decimal("5")
        assert len(balance.recent_transactions) == 1

    def test_empty_ledger(self):
        balance = summarize_balance([])

        assert balance.current_balance == Decimal("0")
        assert balance.recent_transactions == ()


class TestFilterTransactions:
    """Tests for the history date-range filter."""

    def test_inclusive_whole_days(self):
        txns = [
            make_txn("1", date(2024, 5, 31), transaction_id="before"),
            make_txn("2", datetime(2024, 6, 1, 0, 0), transaction_id="start"),
            make_txn("3", datetime(2024, 6, 10, 23, 59), transaction_id="end"),
            make_txn("4", date(2024, 6, 11), transaction_id="after"),
        ]

        selected = filter_transactions(txns, date(2024, 6, 1), date(2024, 6, 10))

        assert [t.transaction_id for t in selected] == ["end", "start"]

    def test_staff_filter(self):
        txns = [
            make_txn("1", date(2024, 6, 2), staff_id="a"),
            make_txn("2", date(2024, 6, 3), staff_id="b"),
        ]

        selected = filter_transactions(txns, date(2024, 6, 1), date(2024, 6, 30), staff_id="b")

        assert [t.staff_id for t in selected] == ["b"]

    def test_mixed_date_and_datetime_sort(self):
        txns = [
            make_txn("1", datetime(2024, 6, 2, 9, 0), transaction_id="dt"),
            make_txn("2", date(2024, 6, 3), transaction_id="d"),
        ]

        assert [t.transaction_id for t in newest_first(txns)] == ["d", "dt"]


class TestGroupByWeek:
    """Tests for Sunday-start weekly grouping."""

    def test_week_start_is_sunday(self):
        # 2024-06-14 is a Friday; 2024-06-09 a Sunday
        assert week_start(date(2024, 6, 14)) == date(2024, 6, 9)
        assert week_start(date(2024, 6, 9)) == date(2024, 6, 9)
        assert week_start(date(2024, 6, 8)) == date(2024, 6, 2)

    def test_groups_newest_first(self):
        txns = [
            make_txn("10", date(2024, 6, 3), transaction_id="w1a"),
            make_txn("20", date(2024, 6, 10), transaction_id="w2a"),
            make_txn("30", date(2024, 6, 15), transaction_id="w2b"),
            make_txn("40", date(2024, 6, 8), transaction_id="w1b"),
        ]

        weeks = group_by_week(txns)

        assert [w.week_start for w in weeks] == [date(2024, 6, 9), date(2024, 6, 2)]
        assert [t.transaction_id for t in weeks[0].transactions] == ["w2b", "w2a"]
        assert [t.transaction_id for t in weeks[1].transactions] == ["w1b", "w1a"]
        assert weeks[0].total == Decimal("50")

    def test_label(self):
        weeks = group_by_week([make_txn("1", date(2024, 6, 12))])

        assert weeks[0].week_end == date(2024, 6, 15)
        assert weeks[0].label == "Week of 09/06/2024 - 15/06/2024"


class TestRunningBalances:
    """Tests for running balances over a newest-first list."""

    def test_accumulates_from_oldest(self):
        ordered = [
            make_txn("-100", date(2024, 6, 3)),
            make_txn("300", date(2024, 6, 2)),
            make_txn("500", date(2024, 6, 1)),
        ]

        assert running_balances(ordered) == (Decimal("700"), Decimal("800"), Decimal("500"))

    def test_empty(self):
        assert running_balances([]) == ()
