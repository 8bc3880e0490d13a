"""Unit tests for balance aggregation"""

from dataclasses import replace
from datetime import date, datetime, timezone
from gold_ledger.domain.balances import (
    book_summary,
    customer_totals,
    has_overdue,
    is_overdue,
    overdue_installments,
    paid,
    percent_complete,
    remaining,
)
from gold_ledger.domain.payments import apply_payment
from gold_ledger.domain.models import Customer


def _customer(cid, debts, archived=False, name="Customer"):
    return Customer(
        id=cid,
        name=name,
        phone="01000000000",
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        debts=tuple(debts),
        is_archived=archived,
    )


def test_remaining_and_paid(cash_debt):
    debt = apply_payment(cash_debt, 150.0)

    assert paid(debt) == 150.0
    assert remaining(debt) == 150.0


def test_percent_complete(cash_debt):
    assert percent_complete(cash_debt) == 0
    assert percent_complete(apply_payment(cash_debt, 150.0)) == 50
    assert percent_complete(apply_payment(cash_debt, 300.0)) == 100


def test_percent_complete_rounds_half_up(debt_factory):
    debt = apply_payment(debt_factory([8.0]), 1.0)  # 12.5%
    assert percent_complete(debt) == 13


def test_percent_complete_all_zero_debt(debt_factory):
    """Zero denominator falls back to 1 and reports 0%"""
    assert percent_complete(debt_factory([0.0, 0.0])) == 0


def test_aggregation_is_pure(cash_debt):
    debt = apply_payment(cash_debt, 120.0)

    assert remaining(debt) == remaining(debt)
    assert paid(debt) == paid(debt)
    assert percent_complete(debt) == percent_complete(debt)


def test_overdue_detection(cash_debt):
    now = datetime(2026, 3, 15, 8, 0, tzinfo=timezone.utc)
    first, second, third = cash_debt.installments

    assert is_overdue(first, now)  # due 2026-02-15
    assert not is_overdue(second, now)  # due today
    assert not is_overdue(third, now)
    assert not is_overdue(replace(first, paid=True, paid_amount=100.0), now)
    assert overdue_installments(cash_debt, date(2026, 3, 16)) == [first, second]


def test_customer_totals_use_daily_rate(cash_debt, gold_debt):
    customer = _customer("c1", [cash_debt, replace(gold_debt, id="d2")])
    totals = customer_totals(customer, daily_gold_price=5000.0)

    assert totals.cash_remaining == 300.0
    assert totals.gold_grams_remaining == 3.0
    assert totals.total_value == 300.0 + 3.0 * 5000.0


def test_book_summary_values_gold_at_daily_rate(cash_debt, gold_debt):
    """Registration rate is 4000; the dashboard uses today's 5000"""
    active = _customer("c1", [cash_debt, replace(gold_debt, id="d2")])
    archived = _customer("c2", [cash_debt], archived=True)

    summary, _ = book_summary([active, archived], daily_gold_price=5000.0, now=date(2026, 1, 20))

    assert summary.cash_remaining == 300.0
    assert summary.gold_grams_remaining == 3.0
    assert summary.daily_gold_price == 5000.0
    assert summary.total_value == 15300.0
    assert summary.active_customers == 1
    assert summary.archived_customers == 1
    assert summary.overdue_count == 0


def test_book_summary_overdue_alerts_sorted(debt_factory):
    late = debt_factory([50.0, 50.0], start=date(2025, 11, 5))
    later = replace(debt_factory([70.0], start=date(2025, 12, 20)), id="d9")
    customers = [
        _customer("c1", [later], name="Mona"),
        _customer("c2", [late], name="Hassan"),
        _customer("c3", [late], archived=True),
    ]

    summary, alerts = book_summary(customers, daily_gold_price=5000.0, now=date(2026, 2, 1))

    assert summary.overdue_count == 3
    assert [a.installment.due_date for a in alerts] == [
        date(2025, 12, 5),
        date(2026, 1, 5),
        date(2026, 1, 20),
    ]
    assert alerts[0].customer_name == "Hassan"
    assert alerts[2].debt_id == "d9"
    assert all(a.customer_id != "c3" for a in alerts)


def test_has_overdue(cash_debt):
    customer = _customer("c1", [cash_debt])

    assert has_overdue(customer, date(2026, 2, 16))
    assert not has_overdue(customer, date(2026, 2, 15))


def test_empty_book():
    summary, alerts = book_summary([], daily_gold_price=5000.0, now=date(2026, 1, 1))

    assert summary.total_value == 0
    assert alerts == []
    assert summary.gold_grams_remaining == 0
    assert summary.active_customers == 0
