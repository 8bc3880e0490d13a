"""Unit tests for customer list filtering and sorting"""

import pytest
from dataclasses import replace
from datetime import date, datetime, timezone
from gold_ledger.domain.filters import SortOption, StatusFilter, UnitFilter, filter_customers
from gold_ledger.domain.payments import apply_payment
from gold_ledger.domain.models import Customer

NOW = date(2026, 2, 20)
DAILY_PRICE = 5000.0


@pytest.fixture
def book(cash_debt, gold_debt):
    overdue_cash = cash_debt  # first installment due 2026-02-15
    settled_cash = apply_payment(cash_debt, 300.0)
    gold = replace(apply_payment(gold_debt, 4000.0), id="d2")  # 2 g left, nothing overdue

    def customer(cid, name, phone, day, debts, archived=False):
        return Customer(
            id=cid,
            name=name,
            phone=phone,
            created_at=datetime(2026, 1, day, tzinfo=timezone.utc),
            debts=tuple(debts),
            is_archived=archived,
        )

    return [
        customer("c1", "Ahmed Samir", "01011111111", 1, [overdue_cash]),
        customer("c2", "mona adel", "01022222222", 2, [settled_cash]),
        customer("c3", "Karim Fathy", "01033333333", 3, [gold]),
        customer("c4", "Ahmed Old", "01044444444", 4, [overdue_cash], archived=True),
    ]


def _ids(customers):
    return [c.id for c in customers]


def test_default_lists_active_newest_first(book):
    assert _ids(filter_customers(book, NOW, DAILY_PRICE)) == ["c3", "c2", "c1"]


def test_archived_tab(book):
    assert _ids(filter_customers(book, NOW, DAILY_PRICE, archived=True)) == ["c4"]


def test_search_by_name_is_case_insensitive(book):
    assert _ids(filter_customers(book, NOW, DAILY_PRICE, search="MONA")) == ["c2"]
    assert _ids(filter_customers(book, NOW, DAILY_PRICE, search="ahmed")) == ["c1"]


def test_search_by_phone(book):
    assert _ids(filter_customers(book, NOW, DAILY_PRICE, search="0103")) == ["c3"]


def test_status_filters(book):
    assert _ids(filter_customers(book, NOW, DAILY_PRICE, status=StatusFilter.OVERDUE)) == ["c1"]
    assert _ids(filter_customers(book, NOW, DAILY_PRICE, status=StatusFilter.HAS_BALANCE)) == ["c3", "c1"]
    assert _ids(filter_customers(book, NOW, DAILY_PRICE, status=StatusFilter.FULLY_PAID)) == ["c2"]


def test_unit_filters(book):
    assert _ids(filter_customers(book, NOW, DAILY_PRICE, unit=UnitFilter.GOLD)) == ["c3"]
    assert _ids(filter_customers(book, NOW, DAILY_PRICE, unit=UnitFilter.CASH)) == ["c2", "c1"]


def test_sort_options(book):
    assert _ids(filter_customers(book, NOW, DAILY_PRICE, sort=SortOption.OLDEST)) == ["c1", "c2", "c3"]
    assert _ids(filter_customers(book, NOW, DAILY_PRICE, sort=SortOption.NAME)) == ["c1", "c3", "c2"]


def test_sort_by_debt_values_gold_at_daily_rate(book):
    """2 g at 5000 outranks 300 EGP cash"""
    result = filter_customers(book, NOW, DAILY_PRICE, sort=SortOption.DEBT_DESC)
    assert _ids(result) == ["c3", "c1", "c2"]
