"""Customer list search, filtering and sorting"""

from datetime import date, datetime
from enum import Enum
from typing import Iterable, List

from gold_ledger.domain.models import Customer, Unit
from gold_ledger.domain.balances import customer_totals, has_overdue


class StatusFilter(str, Enum):
    ALL = "all"
    OVERDUE = "overdue"
    HAS_BALANCE = "has_balance"
    FULLY_PAID = "fully_paid"


class UnitFilter(str, Enum):
    ALL = "all"
    CASH = "cash"
    GOLD = "gold"


class SortOption(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    NAME = "name"
    DEBT_DESC = "debt_desc"


def matches_search(customer: Customer, term: str) -> bool:
    term = term.strip()
    if not term:
        return True
    return term.lower() in customer.name.lower() or term in customer.phone


def _matches_status(customer: Customer, status: StatusFilter, daily_gold_price: float, now: date | datetime) -> bool:
    if status == StatusFilter.OVERDUE:
        return has_overdue(customer, now)
    if status in (StatusFilter.HAS_BALANCE, StatusFilter.FULLY_PAID):
        totals = customer_totals(customer, daily_gold_price)
        has_balance = totals.cash_remaining > 0 or totals.gold_grams_remaining > 0
        return has_balance if status == StatusFilter.HAS_BALANCE else not has_balance
    return True


def _matches_unit(customer: Customer, unit: UnitFilter) -> bool:
    if unit == UnitFilter.CASH:
        return any(d.unit == Unit.CASH for d in customer.debts)
    if unit == UnitFilter.GOLD:
        return any(d.unit == Unit.GOLD for d in customer.debts)
    return True


def filter_customers(
    customers: Iterable[Customer],
    now: date | datetime,
    daily_gold_price: float,
    search: str = "",
    archived: bool = False,
    status: StatusFilter = StatusFilter.ALL,
    unit: UnitFilter = UnitFilter.ALL,
    sort: SortOption = SortOption.NEWEST,
) -> List[Customer]:
    """
    Select and order customers for the list screen.

    `archived` picks the archived or the active tab. DEBT_DESC orders by
    total value with gold priced at the supplied daily rate.
    """
    selected = [
        c
        for c in customers
        if matches_search(c, search)
        and c.is_archived == archived
        and _matches_status(c, status, daily_gold_price, now)
        and _matches_unit(c, unit)
    ]

    if sort == SortOption.OLDEST:
        return sorted(selected, key=lambda c: c.created_at)
    if sort == SortOption.NAME:
        return sorted(selected, key=lambda c: c.name.casefold())
    if sort == SortOption.DEBT_DESC:
        return sorted(selected, key=lambda c: customer_totals(c, daily_gold_price).total_value, reverse=True)
    return sorted(selected, key=lambda c: c.created_at, reverse=True)
