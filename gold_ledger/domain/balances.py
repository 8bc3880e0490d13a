"""Balance aggregation - derived figures for debts, customers and the whole book"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Tuple

from gold_ledger.domain.models import Customer, Debt, Installment, Unit
from gold_ledger.domain.units import grams_to_cash


@dataclass(frozen=True)
class CustomerTotals:
    cash_remaining: float
    gold_grams_remaining: float
    total_value: float  # cash + grams valued at the daily rate


@dataclass(frozen=True)
class OverdueItem:
    customer_id: str
    customer_name: str
    debt_id: str
    debt_label: str
    unit: Unit
    installment: Installment


@dataclass(frozen=True)
class BookSummary:
    """Shop-wide figures over non-archived customers"""

    cash_remaining: float
    gold_grams_remaining: float
    daily_gold_price: float
    total_value: float
    active_customers: int
    archived_customers: int
    overdue_count: int


def remaining(debt: Debt) -> float:
    """Outstanding amount in the debt's unit"""
    return sum(inst.amount - inst.paid_amount for inst in debt.installments)


def paid(debt: Debt) -> float:
    """Amount applied so far in the debt's unit"""
    return sum(inst.paid_amount for inst in debt.installments)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percent_complete(debt: Debt) -> int:
    """
    Share of the debt paid, 0-100.

    A debt whose installments sum to exactly zero divides by 1 instead of
    zero and therefore reports 0%.
    """
    paid_value = paid(debt)
    denominator = (paid_value + remaining(debt)) or 1
    return _round_half_up(paid_value / denominator * 100)


def _as_date(now: date | datetime) -> date:
    return now.date() if isinstance(now, datetime) else now


def is_overdue(installment: Installment, now: date | datetime) -> bool:
    return not installment.paid and installment.due_date < _as_date(now)


def overdue_installments(debt: Debt, now: date | datetime) -> List[Installment]:
    return [inst for inst in debt.installments if is_overdue(inst, now)]


def has_overdue(customer: Customer, now: date | datetime) -> bool:
    return any(overdue_installments(debt, now) for debt in customer.debts)


def customer_totals(customer: Customer, daily_gold_price: float) -> CustomerTotals:
    cash = sum(remaining(d) for d in customer.debts if d.unit == Unit.CASH)
    gold = sum(remaining(d) for d in customer.debts if d.unit == Unit.GOLD)
    return CustomerTotals(
        cash_remaining=cash,
        gold_grams_remaining=gold,
        total_value=cash + grams_to_cash(gold, daily_gold_price),
    )


def overdue_items(customers: Iterable[Customer], now: date | datetime) -> List[OverdueItem]:
    """Overdue installments of active customers, oldest due date first"""
    items = [
        OverdueItem(
            customer_id=customer.id,
            customer_name=customer.name,
            debt_id=debt.id,
            debt_label=debt.label,
            unit=debt.unit,
            installment=inst,
        )
        for customer in customers
        if not customer.is_archived
        for debt in customer.debts
        for inst in overdue_installments(debt, now)
    ]
    return sorted(items, key=lambda item: item.installment.due_date)


def book_summary(
    customers: Iterable[Customer],
    daily_gold_price: float,
    now: date | datetime,
) -> Tuple[BookSummary, List[OverdueItem]]:
    """
    Value the whole book.

    Gold is valued at the current daily rate supplied by the caller, not at
    any debt's registration rate.
    """
    customers = list(customers)
    active = [c for c in customers if not c.is_archived]

    cash = 0.0
    gold = 0.0
    for customer in active:
        totals = customer_totals(customer, daily_gold_price)
        cash += totals.cash_remaining
        gold += totals.gold_grams_remaining

    alerts = overdue_items(active, now)
    summary = BookSummary(
        cash_remaining=cash,
        gold_grams_remaining=gold,
        daily_gold_price=daily_gold_price,
        total_value=cash + grams_to_cash(gold, daily_gold_price),
        active_customers=len(active),
        archived_customers=len(customers) - len(active),
        overdue_count=len(alerts),
    )
    return summary, alerts
